from __future__ import annotations

from typing import List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from apps.api.sessions import Session, SessionLimitError, SessionNotFoundError, SessionRegistry
from pose_modules import ConfigurationError, EngineConfig, ReferencePoseRecord
from pose_modules.catalog import KeypointRecord, keypoints_to_frame


class SessionRequest(BaseModel):
    target: Optional[str] = None


class TargetRequest(BaseModel):
    target: Optional[str] = None


class FrameRequest(BaseModel):
    keypoints: List[Optional[KeypointRecord]]
    timestamp_ms: Optional[float] = Field(default=None, ge=0.0)


class ClassificationResponse(BaseModel):
    label: str
    confidence: float
    raw_label: str
    raw_confidence: float
    target_matched: bool


def create_app(registry: Optional[SessionRegistry] = None) -> FastAPI:
    registry = registry or SessionRegistry(EngineConfig())

    app = FastAPI(
        title="Pose Match API",
        version="0.1.0",
        description="레퍼런스 카탈로그 기반 스트림별 요가 자세 분류 API",
    )
    app.state.registry = registry

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def _session(session_id: str) -> Session:
        try:
            return registry.get(session_id)
        except SessionNotFoundError:
            raise HTTPException(status_code=404, detail=f"세션을 찾을 수 없습니다: {session_id}") from None

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok", "catalog_size": len(registry.catalog), "sessions": len(registry)}

    @app.get("/catalog")
    def get_catalog() -> dict:
        return {
            "poses": [
                {"name": p.name, "description": p.description, "image": p.image}
                for p in registry.catalog
            ]
        }

    @app.put("/catalog")
    def put_catalog(records: List[ReferencePoseRecord]) -> dict:
        try:
            catalog = registry.load_catalog(records)
        except ConfigurationError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        return {"count": len(catalog)}

    @app.post("/sessions")
    def create_session(payload: Optional[SessionRequest] = None) -> dict:
        target = payload.target if payload else None
        try:
            session_id = registry.create(target)
        except ConfigurationError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        except SessionLimitError as e:
            raise HTTPException(status_code=429, detail=str(e)) from e
        return {"session_id": session_id, "target": target}

    @app.post("/sessions/{session_id}/classify", response_model=ClassificationResponse)
    def classify(session_id: str, payload: FrameRequest) -> ClassificationResponse:
        session = _session(session_id)
        frame = keypoints_to_frame(payload.keypoints)
        # 같은 세션의 요청은 threadpool 에서도 직렬로 처리
        with session.lock:
            classifier = session.classifier
            try:
                classifier.validate_frame_scheme(frame)
                result = session.classify(frame, payload.timestamp_ms)
            except ConfigurationError as e:
                raise HTTPException(status_code=400, detail=str(e)) from e

            return ClassificationResponse(
                label=result.label,
                confidence=result.confidence,
                raw_label=classifier.last_raw.label,
                raw_confidence=classifier.last_raw.confidence,
                target_matched=classifier.is_target(result),
            )

    @app.post("/sessions/{session_id}/reset")
    def reset_session(session_id: str) -> dict:
        session = _session(session_id)
        with session.lock:
            session.reset()
        return {"success": True}

    @app.put("/sessions/{session_id}/target")
    def set_target(session_id: str, payload: TargetRequest) -> dict:
        session = _session(session_id)
        with session.lock:
            try:
                session.set_target(payload.target)
            except ConfigurationError as e:
                raise HTTPException(status_code=400, detail=str(e)) from e
            return {"success": True, "target": session.classifier.target}

    @app.delete("/sessions/{session_id}")
    def close_session(session_id: str) -> dict:
        try:
            registry.close(session_id)
        except SessionNotFoundError:
            raise HTTPException(status_code=404, detail=f"세션을 찾을 수 없습니다: {session_id}") from None
        return {"success": True}

    return app


app = create_app()
