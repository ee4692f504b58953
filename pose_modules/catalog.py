"""
레퍼런스 카탈로그 생성 및 시작 시 검증

이미 디코딩된 카탈로그 레코드 ({"name", "description", "image", "keypoints"})를
불변 ReferencePose 튜플로 만든다. 파일/네트워크에서 읽는 건 호출 측 몫.
"""
import logging
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from pydantic import AliasChoices, BaseModel, Field, ValidationError

from pose_modules.config import ConfigurationError, EngineConfig
from pose_modules.keypoints import CORE_LANDMARKS, POSE_INDEX_TO_NAME, TORSO_LANDMARKS
from pose_modules.types import Frame, ReferencePose

logger = logging.getLogger(__name__)

UNKNOWN_MARKER = "unknown"


class KeypointRecord(BaseModel):
    x: float
    y: float
    confidence: float = Field(
        ge=0.0, le=1.0,
        validation_alias=AliasChoices("confidence", "score", "visibility"),
    )
    name: Optional[str] = None


class ReferencePoseRecord(BaseModel):
    name: str = Field(min_length=1)
    description: str = ""
    image: str = ""
    keypoints: List[Optional[KeypointRecord]]


def keypoints_to_frame(keypoints: Sequence[Optional[KeypointRecord]]) -> Frame:
    return Frame.from_dicts(None if kp is None else kp.model_dump() for kp in keypoints)


def is_placeholder(name: str) -> bool:
    """합성 "unknown" 항목은 매칭 카탈로그에 들어가면 안 된다."""
    return UNKNOWN_MARKER in name.lower()


def validate_exemplar(pose: ReferencePose, config: EngineConfig):
    """의미 있는 점수를 낼 수 없는 exemplar 면 ConfigurationError."""
    if len(pose.exemplar) != config.expected_landmarks:
        raise ConfigurationError(
            f"{pose.name}: exemplar has {len(pose.exemplar)} landmarks, "
            f"expected {config.expected_landmarks}"
        )
    required = sorted(set(TORSO_LANDMARKS) | set(CORE_LANDMARKS))
    missing = [POSE_INDEX_TO_NAME.get(i, str(i)) for i in required
               if not pose.exemplar.is_visible(i, config.visibility_floor)]
    if missing:
        raise ConfigurationError(
            f"{pose.name}: exemplar lacks confident landmarks: {', '.join(missing)}"
        )


def validate_catalog(catalog: Sequence[ReferencePose], config: Optional[EngineConfig] = None):
    """모든 exemplar 를 엔진의 랜드마크 스킴과 대조 (시작 시 1회)."""
    config = config or EngineConfig()
    seen = set()
    for pose in catalog:
        if is_placeholder(pose.name):
            raise ConfigurationError(f"placeholder entry {pose.name!r} must be filtered out of the catalog")
        validate_exemplar(pose, config)
        if pose.name in seen:
            logger.warning(f"카탈로그 이름 중복: {pose.name!r} (동점이면 앞 항목 우선)")
        seen.add(pose.name)


def build_catalog(records: Iterable[Union[Mapping, ReferencePoseRecord]],
                  config: Optional[EngineConfig] = None) -> Tuple[ReferencePose, ...]:
    """
    디코딩된 레코드 검증 후 카탈로그 생성.

    이름에 "unknown" 이 들어간 항목은 제외한다. 형식이 잘못된 레코드나
    쓸 수 없는 exemplar 는 ConfigurationError.
    """
    config = config or EngineConfig()
    catalog = []
    for i, raw in enumerate(records):
        try:
            record = raw if isinstance(raw, ReferencePoseRecord) else ReferencePoseRecord.model_validate(raw)
        except ValidationError as e:
            raise ConfigurationError(f"catalog record #{i} is invalid: {e}") from e

        if is_placeholder(record.name):
            logger.debug(f"placeholder 항목 스킵: {record.name!r}")
            continue

        catalog.append(ReferencePose(
            name=record.name,
            exemplar=keypoints_to_frame(record.keypoints),
            description=record.description,
            image=record.image,
        ))

    validate_catalog(catalog, config)
    logger.info(f"카탈로그 생성 완료: {len(catalog)}개 자세")
    return tuple(catalog)
