"""
카탈로그 매처

관측 프레임 하나를 모든 레퍼런스 exemplar 와 비교하고 수용 임계값을 적용한다.
"""
import logging
from typing import Dict, List, Optional, Sequence, Tuple

from pose_modules.angle_utils import extract_angles
from pose_modules.config import EngineConfig
from pose_modules.normalizer import normalize_frame
from pose_modules.similarity import pose_similarity
from pose_modules.types import UNKNOWN, UNKNOWN_LABEL, ClassificationResult, Frame, ReferencePose

logger = logging.getLogger(__name__)


def rescale_confidence(score: float, threshold: float) -> float:
    """
    수용된 점수를 [0, 1] 위쪽으로 늘린다.

    임계값에 딱 걸친 매칭은 임계값 그대로, 강한 매칭은 1.0 에서 포화.
    표시용이며 보정된 확률이 아니다.
    """
    return min(1.0, (score - threshold) * 2 + threshold)


def accept_score(label: str, score: float, threshold: float) -> ClassificationResult:
    """최고 매칭 점수에 수용 임계값 적용."""
    if score < threshold:
        return ClassificationResult(UNKNOWN_LABEL, score)
    return ClassificationResult(label, rescale_confidence(score, threshold))


class PoseMatcher:
    """
    프레임 하나 vs 카탈로그 전체.

    exemplar 는 바뀌지 않으므로 정규화와 AngleSet 계산은 여기서 한 번만 한다.
    """

    def __init__(self, catalog: Sequence[ReferencePose], config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()
        self.catalog = tuple(catalog)
        self._entries: List[Tuple[str, Frame, Dict[str, float]]] = []
        for pose in self.catalog:
            normalized = normalize_frame(pose.exemplar, self.config)
            angles = extract_angles(normalized, self.config.visibility_floor)
            self._entries.append((pose.name, normalized, angles))
        logger.info(f"PoseMatcher 초기화 (catalog={len(self._entries)}, "
                    f"threshold={self.config.acceptance_threshold})")

    @property
    def labels(self) -> List[str]:
        return [name for name, _, _ in self._entries]

    def score_all(self, frame: Frame) -> List[Tuple[str, float]]:
        """카탈로그 순서대로 (name, raw similarity)."""
        observed = normalize_frame(frame, self.config)
        observed_angles = extract_angles(observed, self.config.visibility_floor)
        return [
            (name, pose_similarity(observed, reference, self.config,
                                   observed_angles=observed_angles,
                                   reference_angles=ref_angles))
            for name, reference, ref_angles in self._entries
        ]

    def match(self, frame: Frame) -> ClassificationResult:
        if not self._entries:
            return UNKNOWN

        best_label = None
        best_score = -1.0
        # 엄격한 > : 동점이면 먼저 나온 항목 유지
        for name, score in self.score_all(frame):
            if score > best_score:
                best_label, best_score = name, score

        result = accept_score(best_label, best_score, self.config.acceptance_threshold)
        logger.debug(f"최고 매칭 {best_label} score={best_score:.4f} -> {result.label}")
        return result
