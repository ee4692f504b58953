"""
규칙 기반 자세 fallback

자주 쓰는 몇 가지 자세를 손으로 쓴 기하 조건으로 판정한다. 카탈로그에 깨끗한
exemplar 가 없는 자세에만 쓰고, 1차 분류기는 여전히 카탈로그 매처다.

입력 좌표는 normalize_frame 결과 (y 아래로 증가). 몸통 높이가 약 0.4 이므로
0.1 ≈ 몸통의 1/4.
"""
import logging
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from pose_modules.angle_utils import cal_angle, extract_angles
from pose_modules.config import EngineConfig
from pose_modules.keypoints import (
    CRITICAL_LANDMARKS, LEFT_ANKLE, LEFT_ELBOW, LEFT_HIP, LEFT_KNEE, LEFT_SHOULDER, LEFT_WRIST,
    LIMB_LANDMARKS, RIGHT_ANKLE, RIGHT_ELBOW, RIGHT_HIP, RIGHT_KNEE, RIGHT_SHOULDER, RIGHT_WRIST,
)
from pose_modules.normalizer import normalize_frame
from pose_modules.types import UNKNOWN, ClassificationResult, Frame

logger = logging.getLogger(__name__)

STRAIGHT = 150   # 이보다 큰 관절 각도 = 펴진 팔다리
ARM_LEVEL = 0.12  # 손목이 어깨 높이에서 이 안이면 수평 팔


class _Body:
    """정규화 프레임 + AngleSet 을 이름으로 접근하는 뷰."""

    def __init__(self, frame: Frame, angles: Dict[str, float]):
        self.frame = frame
        self.angles = angles

    def y(self, idx):
        return self.frame[idx].y

    def x(self, idx):
        return self.frame[idx].x

    def angle(self, joint):
        return self.angles.get(joint)

    @property
    def shoulder_center(self):
        return ((self.x(LEFT_SHOULDER) + self.x(RIGHT_SHOULDER)) / 2,
                (self.y(LEFT_SHOULDER) + self.y(RIGHT_SHOULDER)) / 2)

    @property
    def hip_center(self):
        return ((self.x(LEFT_HIP) + self.x(RIGHT_HIP)) / 2,
                (self.y(LEFT_HIP) + self.y(RIGHT_HIP)) / 2)


def _legs_straight(b: _Body) -> bool:
    lk, rk = b.angle("left_knee"), b.angle("right_knee")
    return lk is not None and rk is not None and lk > STRAIGHT and rk > STRAIGHT


def _torso_tilt(b: _Body) -> float:
    """어깨→골반 선과 수평선 사이 각도 [0, 90]."""
    sx, sy = b.shoulder_center
    hx, hy = b.hip_center
    tilt = cal_angle((sx + 1.0, sy), (sx, sy), (hx, hy))
    return min(tilt, 180.0 - tilt)


def is_downward_dog(b: _Body) -> bool:
    _, shoulder_y = b.shoulder_center
    _, hip_y = b.hip_center
    lh, rh = b.angle("left_hip"), b.angle("right_hip")
    return (hip_y < shoulder_y - 0.1
            and b.y(LEFT_ELBOW) > b.y(LEFT_SHOULDER)
            and b.y(RIGHT_ELBOW) > b.y(RIGHT_SHOULDER)
            and lh is not None and rh is not None and lh < 140 and rh < 140)


def is_plank(b: _Body) -> bool:
    le, re = b.angle("left_elbow"), b.angle("right_elbow")
    return (_torso_tilt(b) < 30
            and le is not None and re is not None and le > STRAIGHT and re > STRAIGHT
            and _legs_straight(b))


def is_tree(b: _Body) -> bool:
    lk, rk = b.angle("left_knee"), b.angle("right_knee")
    if lk is None or rk is None:
        return False
    left_standing = lk > STRAIGHT and rk < 100 and b.y(RIGHT_ANKLE) < b.y(LEFT_KNEE) + 0.05
    right_standing = rk > STRAIGHT and lk < 100 and b.y(LEFT_ANKLE) < b.y(RIGHT_KNEE) + 0.05
    return left_standing or right_standing


def is_warrior_two(b: _Body) -> bool:
    lk, rk = b.angle("left_knee"), b.angle("right_knee")
    if lk is None or rk is None:
        return False
    lunge = (lk < 130 and rk > STRAIGHT) or (rk < 130 and lk > STRAIGHT)
    arms_level = (abs(b.y(LEFT_WRIST) - b.y(LEFT_SHOULDER)) < ARM_LEVEL
                  and abs(b.y(RIGHT_WRIST) - b.y(RIGHT_SHOULDER)) < ARM_LEVEL)
    return lunge and arms_level and abs(b.x(LEFT_WRIST) - b.x(RIGHT_WRIST)) > 0.4


def is_chair(b: _Body) -> bool:
    lk, rk = b.angle("left_knee"), b.angle("right_knee")
    if lk is None or rk is None:
        return False
    _, shoulder_y = b.shoulder_center
    wrist_y = (b.y(LEFT_WRIST) + b.y(RIGHT_WRIST)) / 2
    return 60 < lk < 120 and 60 < rk < 120 and wrist_y < shoulder_y - 0.1


def is_mountain(b: _Body) -> bool:
    _, shoulder_y = b.shoulder_center
    _, hip_y = b.hip_center
    return (_legs_straight(b)
            and shoulder_y < hip_y - 0.1
            and abs(b.x(LEFT_ANKLE) - b.x(RIGHT_ANKLE)) < 0.2)


# 순서대로 검사, 처음 참이 되는 조건이 자세 이름을 정한다
DEFAULT_RULES: List[Tuple[str, Callable[[_Body], bool]]] = [
    ("Downward Dog", is_downward_dog),
    ("Plank Pose", is_plank),
    ("Tree Pose", is_tree),
    ("Warrior II", is_warrior_two),
    ("Chair Pose", is_chair),
    ("Mountain Pose", is_mountain),
]

_REQUIRED = CRITICAL_LANDMARKS + LIMB_LANDMARKS


class HeuristicClassifier:
    """
    기하 규칙 기반 fallback 분류기.

    Args:
        exclude: 카탈로그가 이미 다루는 라벨 (해당 규칙은 건너뜀)
        config: visibility 하한, 보고 가능한 최소 confidence
        rules: 순서 있는 (label, predicate) 목록, None 이면 DEFAULT_RULES
    """

    def __init__(self, exclude: Iterable[str] = (), config: Optional[EngineConfig] = None,
                 rules: Optional[List[Tuple[str, Callable[[_Body], bool]]]] = None):
        self.config = config or EngineConfig()
        excluded = set(exclude)
        self.rules = [(label, rule) for label, rule in (rules or DEFAULT_RULES) if label not in excluded]

    def average_confidence(self, frame: Frame) -> float:
        scores = [frame.confidence(i) for i in _REQUIRED if frame.confidence(i) > self.config.visibility_floor]
        return sum(scores) / len(scores) if scores else 0.0

    def classify(self, frame: Frame) -> ClassificationResult:
        if not self.rules:
            return UNKNOWN
        if not all(frame.is_visible(i, self.config.visibility_floor) for i in _REQUIRED):
            return UNKNOWN

        confidence = self.average_confidence(frame)
        if confidence < self.config.heuristic_min_confidence:
            return UNKNOWN

        normalized = normalize_frame(frame, self.config)
        body = _Body(normalized, extract_angles(normalized, self.config.visibility_floor))
        for label, rule in self.rules:
            if rule(body):
                logger.debug(f"규칙 기반 fallback 매칭: {label} (conf={confidence:.3f})")
                return ClassificationResult(label, confidence)
        return UNKNOWN
