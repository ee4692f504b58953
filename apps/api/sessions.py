from __future__ import annotations

import logging
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, Optional, Tuple

from pose_modules import (
    ClassificationResult,
    ConfigurationError,
    EngineConfig,
    Frame,
    PoseClassifier,
    ReferencePose,
    build_catalog,
)

logger = logging.getLogger(__name__)

SESSION_IDLE_TIMEOUT_S = 600.0
MAX_SESSIONS = 256


class SessionNotFoundError(LookupError):
    pass


class SessionLimitError(RuntimeError):
    pass


@dataclass
class Session:
    """
    한 카메라 스트림의 분류 상태.

    lock 을 잡은 상태에서만 classifier 를 사용한다 (한 스트림은 동시에 분류되지 않음).
    stamped 는 첫 프레임에서 정해진다: 클라이언트 timestamp_ms 또는 서버 시계.
    """
    classifier: PoseClassifier
    last_used: float
    lock: threading.Lock = field(default_factory=threading.Lock)
    stamped: Optional[bool] = None

    def classify(self, frame: Frame, timestamp_ms: Optional[float] = None) -> ClassificationResult:
        stamped = timestamp_ms is not None
        if self.stamped is None:
            self.stamped = stamped
        elif stamped != self.stamped:
            raise ConfigurationError(
                "session mixes client timestamp_ms with server-clock frames; reset the session to switch"
            )
        return self.classifier.classify(frame, timestamp_ms)

    def reset(self):
        self.classifier.reset()
        self.stamped = None

    def set_target(self, name: Optional[str]):
        previous = self.classifier.target
        self.classifier.set_target(name)
        if name != previous:
            self.stamped = None


class SessionRegistry:
    """
    분류 스트림(세션)마다 PoseClassifier 하나 (즉 smoother 하나).

    카탈로그는 모든 세션이 공유한다. 카탈로그를 바꾸면 세션을 다시 만들고,
    새 카탈로그에 남아 있는 목표 자세는 유지한다.
    idle_timeout_s 이상 쓰이지 않은 세션은 정리하고, 동시에 max_sessions 개까지만 둔다.
    """

    def __init__(self, config: Optional[EngineConfig] = None,
                 catalog: Iterable[ReferencePose] = (),
                 idle_timeout_s: float = SESSION_IDLE_TIMEOUT_S,
                 max_sessions: int = MAX_SESSIONS,
                 clock: Optional[Callable[[], float]] = None):
        self.config = config or EngineConfig()
        self.catalog: Tuple[ReferencePose, ...] = tuple(catalog)
        self.idle_timeout_s = idle_timeout_s
        self.max_sessions = max_sessions
        self.clock = clock or time.monotonic
        self._sessions: Dict[str, Session] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._sessions)

    def _expire_idle(self, now: float):
        # 호출 측이 self._lock 을 잡고 있어야 함
        stale = [sid for sid, s in self._sessions.items() if now - s.last_used > self.idle_timeout_s]
        for sid in stale:
            del self._sessions[sid]
            logger.info(f"세션 만료 ({self.idle_timeout_s:.0f}s 미사용): {sid}")

    def load_catalog(self, records) -> Tuple[ReferencePose, ...]:
        catalog = build_catalog(records, self.config)
        names = {pose.name for pose in catalog}
        with self._lock:
            self.catalog = catalog
            sessions = list(self._sessions.values())
        for session in sessions:
            # 처리 중인 프레임이 끝날 때까지 대기
            with session.lock:
                old = session.classifier
                target = old.target if old.target in names else None
                session.classifier = PoseClassifier(catalog, self.config, target=target)
                session.stamped = None
        logger.info(f"카탈로그 교체 ({len(catalog)}개 자세, 세션 {len(sessions)}개 재생성)")
        return catalog

    def create(self, target: Optional[str] = None) -> str:
        with self._lock:
            now = self.clock()
            self._expire_idle(now)
            if len(self._sessions) >= self.max_sessions:
                raise SessionLimitError(f"session limit reached ({self.max_sessions})")
            classifier = PoseClassifier(self.catalog, self.config, target=target)
            session_id = uuid.uuid4().hex
            self._sessions[session_id] = Session(classifier, last_used=now)
        logger.info(f"세션 생성: {session_id} (target={target})")
        return session_id

    def get(self, session_id: str) -> Session:
        with self._lock:
            now = self.clock()
            self._expire_idle(now)
            try:
                session = self._sessions[session_id]
            except KeyError:
                raise SessionNotFoundError(session_id) from None
            session.last_used = now
            return session

    def close(self, session_id: str):
        with self._lock:
            if self._sessions.pop(session_id, None) is None:
                raise SessionNotFoundError(session_id)
        logger.info(f"세션 종료: {session_id}")
