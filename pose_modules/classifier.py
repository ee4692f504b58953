"""
스트림별 자세 분류 파이프라인

frame → 핵심 랜드마크 게이트 → PoseMatcher (→ heuristic fallback) → raw 결과
→ PoseSmoother → 안정화된 결과.

PoseClassifier 하나가 smoother 하나를 가지므로 인스턴스 하나 = 카메라 스트림 하나.
카탈로그는 읽기 전용으로 공유한다.
"""
import logging
from typing import Callable, Optional, Sequence

from pose_modules.catalog import validate_catalog
from pose_modules.config import ConfigurationError, EngineConfig
from pose_modules.heuristics import HeuristicClassifier
from pose_modules.keypoints import CRITICAL_LANDMARKS
from pose_modules.pose_matcher import PoseMatcher
from pose_modules.pose_smoother import PoseSmoother
from pose_modules.types import UNKNOWN, ClassificationResult, Frame, ReferencePose

logger = logging.getLogger(__name__)


class PoseClassifier:
    def __init__(self, catalog: Sequence[ReferencePose], config: Optional[EngineConfig] = None,
                 clock: Optional[Callable[[], float]] = None, target: Optional[str] = None):
        self.config = config or EngineConfig()
        self.catalog = tuple(catalog)
        validate_catalog(self.catalog, self.config)

        self.matcher = PoseMatcher(self.catalog, self.config)
        self.smoother = PoseSmoother(self.config, clock=clock)
        self.fallback = None
        if self.config.use_heuristic_fallback:
            self.fallback = HeuristicClassifier(exclude=self.matcher.labels, config=self.config)

        self.last_raw = UNKNOWN
        self._target = None
        self.set_target(target)

    @property
    def target(self) -> Optional[str]:
        return self._target

    def set_target(self, name: Optional[str]):
        """사용자가 목표로 하는 자세 선택. 바뀌면 히스토리는 무효."""
        if name is not None and name not in self.matcher.labels:
            raise ConfigurationError(f"target pose {name!r} is not in the catalog")
        if name != self._target:
            self._target = name
            self.reset()

    def reset(self):
        self.smoother.reset()
        self.last_raw = UNKNOWN

    def validate_frame_scheme(self, frame: Frame):
        """검출기 출력 길이를 카탈로그 스킴과 대조 (시작 시 점검용)."""
        if len(frame) != self.config.expected_landmarks:
            raise ConfigurationError(
                f"detector frame has {len(frame)} landmarks, catalog expects {self.config.expected_landmarks}"
            )

    def has_critical_landmarks(self, frame: Frame) -> bool:
        """매칭 전에 어깨/골반이 충분한 confidence 로 보여야 한다."""
        floor = self.config.critical_confidence
        scores = [frame.confidence(i) for i in CRITICAL_LANDMARKS]
        visible = sum(1 for s in scores if s > floor)
        avg = sum(scores) / len(scores)
        return visible >= self.config.min_critical_visible and avg >= floor

    def classify_frame(self, frame: Frame) -> ClassificationResult:
        """단일 프레임 분류 (스무딩 전)."""
        if not self.has_critical_landmarks(frame):
            logger.debug("핵심 랜드마크 미검출: 프레임 스킵")
            return UNKNOWN

        result = self.matcher.match(frame)
        if result.is_unknown and self.fallback is not None:
            fallback = self.fallback.classify(frame)
            if not fallback.is_unknown:
                return fallback
        return result

    def classify(self, frame: Frame, timestamp_ms: Optional[float] = None) -> ClassificationResult:
        """프레임 하나를 분류하고 스무딩된 결과를 반환."""
        self.last_raw = self.classify_frame(frame)
        self.smoother.add(self.last_raw, timestamp_ms)
        return self.smoother.get_smoothed_pose(timestamp_ms)

    def is_target(self, result: ClassificationResult) -> bool:
        return self._target is not None and result.label == self._target
