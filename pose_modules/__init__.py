"""
포즈 매칭 모듈 패키지 - 카탈로그 기반 요가 자세 분류

keypoints:      BlazePose 33 랜드마크 맵, 부분 집합
types:          Keypoint / Frame / ClassificationResult / ReferencePose
config:         임계값, EngineConfig
normalizer:     몸통 기준 스케일 불변 정규화
angle_utils:    관절 각도 계산
similarity:     프레임 vs 레퍼런스 유사도 (위치 + 각도)
pose_matcher:   카탈로그 최고 매칭 + 수용 임계값
pose_smoother:  라벨 단위 시간 스무딩
catalog:        카탈로그 레코드 검증
heuristics:     레퍼런스 없는 자세용 규칙 기반 fallback
classifier:     스트림별 분류 파이프라인
"""
from pose_modules.angle_utils import cal_angle, cal_distance, extract_angles
from pose_modules.catalog import ReferencePoseRecord, build_catalog, validate_catalog
from pose_modules.classifier import PoseClassifier
from pose_modules.config import ConfigurationError, EngineConfig
from pose_modules.heuristics import HeuristicClassifier
from pose_modules.normalizer import normalize_frame
from pose_modules.pose_matcher import PoseMatcher
from pose_modules.pose_smoother import PoseSmoother
from pose_modules.similarity import angle_similarity, pose_similarity, position_similarity
from pose_modules.types import (
    UNKNOWN,
    UNKNOWN_LABEL,
    ClassificationResult,
    Detection,
    Frame,
    Keypoint,
    ReferencePose,
)

__all__ = [
    'cal_angle',
    'cal_distance',
    'extract_angles',
    'normalize_frame',
    'angle_similarity',
    'position_similarity',
    'pose_similarity',
    'PoseMatcher',
    'PoseSmoother',
    'PoseClassifier',
    'HeuristicClassifier',
    'ReferencePoseRecord',
    'build_catalog',
    'validate_catalog',
    'ConfigurationError',
    'EngineConfig',
    'UNKNOWN',
    'UNKNOWN_LABEL',
    'ClassificationResult',
    'Detection',
    'Frame',
    'Keypoint',
    'ReferencePose',
]
