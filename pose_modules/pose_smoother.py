"""
라벨 단위 시간 스무더

프레임별 매칭 결과를 짧게 기록해 두고, 최근 윈도우를 장악한 라벨만 보고한다.
히스토리는 개수와 나이 양쪽으로 제한된다.
"""
import logging
import time
from collections import deque
from typing import Callable, Optional

from pose_modules.config import EngineConfig
from pose_modules.types import UNKNOWN, UNKNOWN_LABEL, ClassificationResult, Detection

logger = logging.getLogger(__name__)


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class PoseSmoother:
    """개수/나이 제한 윈도우에서 다수결 + confidence 투표."""

    def __init__(self, config: Optional[EngineConfig] = None,
                 clock: Optional[Callable[[], float]] = None):
        self.config = config or EngineConfig()
        self.clock = clock or _monotonic_ms
        self.history = deque(maxlen=self.config.smoother_window)
        self._last_label = UNKNOWN_LABEL

    def __len__(self) -> int:
        return len(self.history)

    def reset(self):
        """히스토리 전체 삭제. 목표 자세 변경, 카메라 재시작, 검출기 재초기화 시 호출."""
        self.history.clear()
        self._last_label = UNKNOWN_LABEL

    def _expire(self, now_ms: float):
        max_age = self.config.smoother_max_age_ms
        while self.history and now_ms - self.history[0].timestamp_ms > max_age:
            self.history.popleft()

    def add(self, detection: ClassificationResult, timestamp_ms: Optional[float] = None):
        now = self.clock() if timestamp_ms is None else timestamp_ms
        # deque(maxlen) 이 넘치면 가장 오래된 항목부터 버린다
        self.history.append(Detection(detection.label, detection.confidence, now))
        self._expire(now)

    def get_smoothed_pose(self, now_ms: Optional[float] = None) -> ClassificationResult:
        """
        현재 윈도우의 스무딩 결과.

        - 항목이 min_samples 미만 -> Unknown/0
        - 윈도우 비율이 consistency 임계값 미만인 라벨은 무시, 나머지는
          consistency_weight * 비율 + confidence_weight * 평균 confidence
        - 최고 점수 라벨 (동점이면 먼저 나온 것), 점수가 곧 confidence
        """
        cfg = self.config
        self._expire(self.clock() if now_ms is None else now_ms)

        total = len(self.history)
        if total < cfg.smoother_min_samples:
            return UNKNOWN

        counts = {}
        conf_sums = {}
        for entry in self.history:
            counts[entry.label] = counts.get(entry.label, 0) + 1
            conf_sums[entry.label] = conf_sums.get(entry.label, 0.0) + entry.confidence

        best_label = None
        best_score = -1.0
        for label, count in counts.items():
            consistency = count / total
            if consistency < cfg.consistency_threshold:
                continue
            avg_conf = conf_sums[label] / count
            score = cfg.consistency_weight * consistency + cfg.confidence_weight * avg_conf
            if score > best_score:
                best_label, best_score = label, score

        if best_label is None or best_label == UNKNOWN_LABEL:
            result = UNKNOWN
        else:
            result = ClassificationResult(best_label, best_score)

        if result.label != self._last_label:
            logger.debug(f"스무딩 결과 변경: {self._last_label} → {result.label} "
                         f"(conf={result.confidence:.3f}, window={total})")
            self._last_label = result.label
        return result
