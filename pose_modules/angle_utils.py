"""
관절 각도/거리 계산 유틸리티

각도는 서 있는 위치나 카메라 거리와 무관하므로 픽셀 좌표와 정규화 좌표에서
같은 AngleSet 이 나온다.
"""
from typing import Dict

import numpy as np
from numpy import arctan2, degrees
from numpy.linalg import norm

from pose_modules.config import VISIBILITY_FLOOR
from pose_modules.keypoints import JOINT_ANGLE_DEFINITIONS
from pose_modules.types import Frame


def cal_angle(A, B, C):
    """두 반직선 방향각의 차이로 ∠ABC를 도(°) 단위 [0, 180]으로 반환한다."""
    A, B, C = map(np.array, (A, B, C))
    radians = arctan2(C[1] - B[1], C[0] - B[0]) - arctan2(A[1] - B[1], A[0] - B[0])
    angle = abs(float(degrees(radians)))
    if angle > 180.0:
        angle = 360.0 - angle
    return angle


def cal_distance(A, B):
    """두 점 사이의 유클리드 거리."""
    A, B = map(np.array, (A, B))
    return float(norm(A - B))


def extract_angles(frame: Frame, visibility: float = VISIBILITY_FLOOR) -> Dict[str, float]:
    """
    프레임의 AngleSet 계산.

    세 랜드마크 중 하나라도 없거나 visibility 이하이면 그 관절은 0이 아니라
    아예 빠진다.

    Args:
        frame: 검출/레퍼런스 프레임 (원본 또는 정규화)
        visibility: 랜드마크 confidence 하한

    Returns:
        {"left_elbow": 172.4, "right_knee": 91.0, ...}
    """
    angles = {}
    for joint, (a_idx, v_idx, c_idx) in JOINT_ANGLE_DEFINITIONS.items():
        if not all(frame.is_visible(i, visibility) for i in (a_idx, v_idx, c_idx)):
            continue
        a, v, c = frame[a_idx], frame[v_idx], frame[c_idx]
        angles[joint] = cal_angle((a.x, a.y), (v.x, v.y), (c.x, c.y))
    return angles
