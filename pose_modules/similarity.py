"""
프레임 vs exemplar 유사도 점수

두 신호를 [0, 1] 점수 하나로 합친다:
- position: 정규화된 core 랜드마크의 confidence 가중 거리
- angle:    양쪽에 다 있는 관절의 평균 각도 차이

각도 가중치가 더 크다 (정규화 후 남은 스케일/오프셋 오차의 영향이 없음).
위치는 관절 각도가 같은 자세 (좌우 반전, 회전)를 구분한다.
"""
import logging
from typing import Dict, Optional, Sequence

from pose_modules.angle_utils import cal_distance, extract_angles
from pose_modules.config import EngineConfig, MIN_POSITION_LANDMARKS, VISIBILITY_FLOOR
from pose_modules.keypoints import CORE_LANDMARKS
from pose_modules.types import Frame

logger = logging.getLogger(__name__)


def position_similarity(observed: Frame, reference: Frame,
                        visibility: float = VISIBILITY_FLOOR,
                        landmarks: Sequence[int] = CORE_LANDMARKS,
                        min_landmarks: int = MIN_POSITION_LANDMARKS) -> float:
    """
    1 - core 랜드마크의 confidence 가중 평균 거리.

    두 프레임 모두 정규화된 상태여야 한다. 쓸 수 있는 랜드마크가 너무 적으면
    근거가 없는 것으로 보고 0.
    """
    total_distance = 0.0
    total_weight = 0.0
    used = 0
    for idx in landmarks:
        obs = observed[idx]
        ref = reference[idx]
        if obs is None or ref is None or obs.confidence < visibility:
            continue
        weight = obs.confidence
        total_distance += cal_distance((obs.x, obs.y), (ref.x, ref.y)) * weight
        total_weight += weight
        used += 1

    if used < min(min_landmarks, len(landmarks) / 2) or total_weight <= 0:
        return 0.0
    return max(0.0, 1.0 - total_distance / total_weight)


def angle_similarity(observed_angles: Dict[str, float], reference_angles: Dict[str, float]) -> float:
    """양쪽 AngleSet 에 다 있는 관절에 대해 1 - 평균 |Δangle|/180 (없으면 0)."""
    diffs = [
        abs(observed_angles[joint] - ref_angle) / 180.0
        for joint, ref_angle in reference_angles.items()
        if joint in observed_angles
    ]
    if not diffs:
        return 0.0
    return max(0.0, 1.0 - sum(diffs) / len(diffs))


def pose_similarity(observed: Frame, reference: Frame,
                    config: Optional[EngineConfig] = None,
                    observed_angles: Optional[Dict[str, float]] = None,
                    reference_angles: Optional[Dict[str, float]] = None) -> float:
    """
    위치/각도 유사도의 가중 합.

    Args:
        observed, reference: 정규화된 프레임
        config: 가중치, visibility 하한 (None 이면 기본값)
        observed_angles, reference_angles: 호출 측이 이미 계산한 AngleSet

    Returns:
        [0, 1] float. 최악의 경우 0, 예외는 내지 않는다
    """
    config = config or EngineConfig()
    if observed_angles is None:
        observed_angles = extract_angles(observed, config.visibility_floor)
    if reference_angles is None:
        reference_angles = extract_angles(reference, config.visibility_floor)

    pos = position_similarity(observed, reference, config.visibility_floor,
                              min_landmarks=config.min_position_landmarks)
    ang = angle_similarity(observed_angles, reference_angles)
    score = config.position_weight * pos + config.angle_weight * ang
    logger.debug(f"similarity pos={pos:.4f}, angle={ang:.4f}, combined={score:.4f}")
    return score
