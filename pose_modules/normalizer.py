"""
몸통 기준 키포인트 정규화

몸통 중심을 (0.5, 0.5)로 옮기고 몸통 길이로 나눠서 촬영 거리/구도가 달라도
프레임이 겹치게 한다. 몸통을 쓸 수 없으면 보이는 랜드마크 기준 min-max 로
늘린다 (항상 쓸 수 있는 프레임이 나온다).
"""
import logging
from typing import Optional

import numpy as np

from pose_modules.angle_utils import cal_distance
from pose_modules.config import EngineConfig
from pose_modules.keypoints import LEFT_HIP, LEFT_SHOULDER, RIGHT_HIP, RIGHT_SHOULDER, TORSO_LANDMARKS
from pose_modules.types import Frame, Keypoint

logger = logging.getLogger(__name__)


def _mid(p1, p2):
    return [(p1[0] + p2[0]) / 2, (p1[1] + p2[1]) / 2]


def _rebuild(frame: Frame, xs: np.ndarray, ys: np.ndarray) -> Frame:
    keypoints = []
    for idx, kp in enumerate(frame):
        if kp is None:
            keypoints.append(None)
        else:
            keypoints.append(Keypoint(float(xs[idx]), float(ys[idx]), kp.confidence, kp.name))
    return Frame(tuple(keypoints))


def torso_scale(frame: Frame, scale_factor: float) -> float:
    """max(어깨 너비, 골반 너비, 몸통 높이) * scale_factor."""
    ls, rs = frame[LEFT_SHOULDER], frame[RIGHT_SHOULDER]
    lh, rh = frame[LEFT_HIP], frame[RIGHT_HIP]
    shoulder_width = cal_distance((ls.x, ls.y), (rs.x, rs.y))
    hip_width = cal_distance((lh.x, lh.y), (rh.x, rh.y))
    torso_height = cal_distance(_mid((ls.x, ls.y), (rs.x, rs.y)), _mid((lh.x, lh.y), (rh.x, rh.y)))
    return max(shoulder_width, hip_width, torso_height) * scale_factor


def _min_max_normalize(frame: Frame, visibility: float) -> Frame:
    arr = frame.to_array()
    xs, ys, conf = arr[:, 0], arr[:, 1], arr[:, 2]
    visible = ~np.isnan(conf) & (conf > visibility)
    if not visible.any():
        logger.debug("보이는 랜드마크 없음: 정규화하지 않고 반환")
        return Frame(frame.keypoints)

    out = []
    for axis in (xs, ys):
        lo = axis[visible].min()
        span = axis[visible].max() - lo
        if span > 0:
            out.append((axis - lo) / span)
        else:
            # 이 축 폭이 0: 0으로 나누지 않고 가운데(0.5)에 둔다
            out.append(axis - lo + 0.5)
    return _rebuild(frame, out[0], out[1])


def normalize_frame(frame: Frame, config: Optional[EngineConfig] = None) -> Frame:
    """
    프레임을 몸통 기준, 스케일 불변 좌표계로 변환한다.

    새 Frame 을 반환한다. confidence 와 누락 랜드마크는 그대로 두고 입력은
    수정하지 않는다.
    """
    config = config or EngineConfig()
    visibility = config.visibility_floor

    if all(frame.is_visible(i, visibility) for i in TORSO_LANDMARKS):
        scale = torso_scale(frame, config.normalization_scale_factor)
        if scale > 0:
            torso = [frame[i] for i in TORSO_LANDMARKS]
            center_x = sum(kp.x for kp in torso) / 4
            center_y = sum(kp.y for kp in torso) / 4
            arr = frame.to_array()
            xs = (arr[:, 0] - center_x) / scale + 0.5
            ys = (arr[:, 1] - center_y) / scale + 0.5
            return _rebuild(frame, xs, ys)
        logger.debug("몸통 스케일 퇴화: min-max 정규화로 대체")

    return _min_max_normalize(frame, visibility)
