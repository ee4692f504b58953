from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Mapping, Optional, Tuple

import numpy as np

from pose_modules.keypoints import POSE_INDEX_TO_NAME, POSE_LANDMARK_MAP


UNKNOWN_LABEL = "Unknown"


@dataclass(frozen=True)
class Keypoint:
    """2D 랜드마크 하나. 좌표는 픽셀 또는 이미지 정규화 좌표."""

    x: float
    y: float
    confidence: float
    name: Optional[str] = None


@dataclass(frozen=True)
class Frame:
    """
    검출기 1회 호출 결과. 인덱스가 고정된 랜드마크 목록.

    - 누락 랜드마크는 (0, 0, 0) 같은 가짜 값이 아니라 None.
    - 범위 밖 인덱스도 None 이라 짧은 프레임은 IndexError 대신 누락으로 처리된다.
    """

    keypoints: Tuple[Optional[Keypoint], ...] = ()

    def __len__(self) -> int:
        return len(self.keypoints)

    def __iter__(self) -> Iterator[Optional[Keypoint]]:
        return iter(self.keypoints)

    def __getitem__(self, index: int) -> Optional[Keypoint]:
        if 0 <= index < len(self.keypoints):
            return self.keypoints[index]
        return None

    def get(self, name: str) -> Optional[Keypoint]:
        index = POSE_LANDMARK_MAP.get(name)
        if index is None:
            return None
        return self[index]

    def confidence(self, index: int) -> float:
        kp = self[index]
        return kp.confidence if kp is not None else 0.0

    def is_visible(self, index: int, threshold: float) -> bool:
        kp = self[index]
        return kp is not None and kp.confidence > threshold

    @classmethod
    def from_dicts(cls, points: Iterable[Optional[Mapping]]) -> "Frame":
        """
        검출기 형식 dict 목록으로 프레임 생성.

        {"x", "y"} + "confidence" / "score" / "visibility" 중 하나를 받는다.
        None 항목, 좌표나 confidence 가 빠진 항목은 누락 랜드마크가 된다.
        """
        keypoints = []
        for idx, pt in enumerate(points):
            if pt is None:
                keypoints.append(None)
                continue
            conf = pt.get("confidence", pt.get("score", pt.get("visibility")))
            if conf is None or pt.get("x") is None or pt.get("y") is None:
                keypoints.append(None)
                continue
            keypoints.append(Keypoint(
                x=float(pt["x"]),
                y=float(pt["y"]),
                confidence=float(conf),
                name=pt.get("name") or POSE_INDEX_TO_NAME.get(idx),
            ))
        return cls(tuple(keypoints))

    @classmethod
    def from_array(cls, arr) -> "Frame":
        """(N, 3) x, y, confidence 배열. NaN 이 있는 행은 누락."""
        arr = np.asarray(arr, dtype=np.float64)
        keypoints = []
        for idx, (x, y, conf) in enumerate(arr):
            if np.isnan(x) or np.isnan(y) or np.isnan(conf):
                keypoints.append(None)
            else:
                keypoints.append(Keypoint(float(x), float(y), float(conf),
                                          POSE_INDEX_TO_NAME.get(idx)))
        return cls(tuple(keypoints))

    def to_array(self) -> np.ndarray:
        """(N, 3) float 배열. 누락 랜드마크는 NaN 행."""
        arr = np.full((len(self.keypoints), 3), np.nan, dtype=np.float64)
        for idx, kp in enumerate(self.keypoints):
            if kp is not None:
                arr[idx] = (kp.x, kp.y, kp.confidence)
        return arr


@dataclass(frozen=True)
class ClassificationResult:
    label: str
    confidence: float

    @property
    def is_unknown(self) -> bool:
        return self.label == UNKNOWN_LABEL


UNKNOWN = ClassificationResult(UNKNOWN_LABEL, 0.0)


@dataclass(frozen=True)
class Detection:
    """스무더 히스토리 항목."""

    label: str
    confidence: float
    timestamp_ms: float


@dataclass(frozen=True)
class ReferencePose:
    name: str
    exemplar: Frame
    description: str = ""
    image: str = ""
