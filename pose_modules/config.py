from __future__ import annotations

from dataclasses import dataclass, replace

from pose_modules.keypoints import NUM_LANDMARKS

# ===== 가시성 =====
VISIBILITY_FLOOR = 0.3          # 각도/위치/몸통 계산에 쓸 수 있는 최소 confidence

# ===== 핵심 랜드마크 게이트 (어깨, 골반) =====
CRITICAL_CONFIDENCE = 0.5
MIN_CRITICAL_VISIBLE = 3
STRICT_CRITICAL_CONFIDENCE = 0.6
STRICT_MIN_CRITICAL_VISIBLE = 4

# ===== 정규화 =====
NORMALIZATION_SCALE_FACTOR = 2.5  # 몸통 길이 * k -> 좌표가 [0, 1] 근처로 모임

# ===== 매처 =====
ACCEPTANCE_THRESHOLD = 0.55
POSITION_WEIGHT = 0.4
ANGLE_WEIGHT = 0.6
MIN_POSITION_LANDMARKS = 8

# ===== 스무더 =====
SMOOTHER_WINDOW = 10
SMOOTHER_MAX_AGE_MS = 2000.0
SMOOTHER_MIN_SAMPLES = 3
CONSISTENCY_THRESHOLD = 0.4
CONSISTENCY_WEIGHT = 0.7
CONFIDENCE_WEIGHT = 0.3

# ===== 규칙 기반 fallback =====
HEURISTIC_MIN_CONFIDENCE = 0.6

STRICTNESS_TIERS = {
    "standard": (CRITICAL_CONFIDENCE, MIN_CRITICAL_VISIBLE),
    "strict": (STRICT_CRITICAL_CONFIDENCE, STRICT_MIN_CRITICAL_VISIBLE),
}


class ConfigurationError(ValueError):
    """카탈로그/설정/프레임 스킴 불일치 (셋업 시점에만 발생)."""


@dataclass(frozen=True)
class EngineConfig:
    visibility_floor: float = VISIBILITY_FLOOR
    critical_confidence: float = CRITICAL_CONFIDENCE
    min_critical_visible: int = MIN_CRITICAL_VISIBLE
    normalization_scale_factor: float = NORMALIZATION_SCALE_FACTOR
    acceptance_threshold: float = ACCEPTANCE_THRESHOLD
    position_weight: float = POSITION_WEIGHT
    angle_weight: float = ANGLE_WEIGHT
    min_position_landmarks: int = MIN_POSITION_LANDMARKS
    smoother_window: int = SMOOTHER_WINDOW
    smoother_max_age_ms: float = SMOOTHER_MAX_AGE_MS
    smoother_min_samples: int = SMOOTHER_MIN_SAMPLES
    consistency_threshold: float = CONSISTENCY_THRESHOLD
    consistency_weight: float = CONSISTENCY_WEIGHT
    confidence_weight: float = CONFIDENCE_WEIGHT
    expected_landmarks: int = NUM_LANDMARKS
    use_heuristic_fallback: bool = False
    heuristic_min_confidence: float = HEURISTIC_MIN_CONFIDENCE

    def __post_init__(self):
        for name in ("visibility_floor", "critical_confidence", "acceptance_threshold",
                     "position_weight", "angle_weight", "consistency_threshold",
                     "consistency_weight", "confidence_weight", "heuristic_min_confidence"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ConfigurationError(f"{name} must be within [0, 1], got {value}")
        if self.normalization_scale_factor <= 0:
            raise ConfigurationError("normalization_scale_factor must be positive")
        if self.smoother_window < 1:
            raise ConfigurationError("smoother_window must be at least 1")
        if self.smoother_max_age_ms <= 0:
            raise ConfigurationError("smoother_max_age_ms must be positive")
        if not 1 <= self.min_critical_visible <= 4:
            raise ConfigurationError("min_critical_visible must be between 1 and 4")
        if self.expected_landmarks < 1:
            raise ConfigurationError("expected_landmarks must be positive")

    @classmethod
    def for_tier(cls, tier: str, **overrides) -> "EngineConfig":
        """핵심 랜드마크 엄격도 티어 ("standard" / "strict") 프리셋."""
        try:
            confidence, visible = STRICTNESS_TIERS[tier]
        except KeyError:
            raise ConfigurationError(
                f"unknown strictness tier: {tier!r} (expected one of {sorted(STRICTNESS_TIERS)})"
            ) from None
        return replace(cls(critical_confidence=confidence, min_critical_visible=visible), **overrides)
