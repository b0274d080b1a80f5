"""FastAPI application entrypoint for the stroke risk assessment form."""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import Body, Depends, FastAPI, HTTPException, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from stroke_risk.config import settings
from stroke_risk.controller import (
    FAILURE_MESSAGE,
    FormSession,
    Predictor,
    SessionRegistry,
    SubmissionInProgressError,
)
from stroke_risk.gemini_prediction import predict_stroke_risk
from stroke_risk.schemas import (
    Gender,
    PatientUpdate,
    ResidenceType,
    RiskLevel,
    SmokingStatus,
    WorkType,
)
from stroke_risk.validation import SUMMARY_MESSAGE, field_ranges, validate_form
from stroke_risk.view import render_result, render_session

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title="Stroke Prediction System", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

sessions = SessionRegistry()


def get_predictor() -> Predictor:
    return predict_stroke_risk


def get_sessions() -> SessionRegistry:
    return sessions


def _get_session(registry: SessionRegistry, session_id: str) -> FormSession:
    try:
        return registry.get(session_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Session not found") from exc


def _conflict(exc: SubmissionInProgressError) -> None:
    raise HTTPException(status_code=409, detail=str(exc)) from exc


def _unprocessable(exc: ValidationError) -> None:
    raise HTTPException(
        status_code=422,
        detail=exc.errors(include_url=False, include_context=False),
    ) from exc


@app.get("/")
def root():
    return {"message": "Stroke Prediction System v1.0", "model": settings.GEMINI_MODEL}


@app.get("/health")
def health():
    return {
        "status": "healthy",
        "gemini_configured": bool(settings.GEMINI_API_KEY),
        "model": settings.GEMINI_MODEL,
    }


@app.get("/options")
def options():
    return {
        "gender": Gender.options(),
        "workType": WorkType.options(),
        "residenceType": ResidenceType.options(),
        "smokingStatus": SmokingStatus.options(),
        "riskLevel": RiskLevel.options(),
        "ranges": field_ranges(),
    }


@app.post("/predict")
async def predict(
    payload: Dict[str, Any] = Body(...),
    predictor: Predictor = Depends(get_predictor),
):
    try:
        patient, errors = validate_form(payload)
    except ValidationError as exc:
        _unprocessable(exc)

    if not errors.is_valid:
        return JSONResponse(
            status_code=422,
            content={"message": SUMMARY_MESSAGE, "errors": errors.as_dict()},
        )

    try:
        result = await predictor(patient)
    except Exception as exc:  # noqa: BLE001
        raise HTTPException(status_code=502, detail=FAILURE_MESSAGE) from exc

    return {"result": result.to_wire(), "view": render_result(result)}


@app.post("/sessions", status_code=201)
def create_session(registry: SessionRegistry = Depends(get_sessions)):
    session = registry.create()
    logger.info("Created form session %s", session.session_id)
    return render_session(session)


@app.get("/sessions/{session_id}")
def get_session(session_id: str, registry: SessionRegistry = Depends(get_sessions)):
    return render_session(_get_session(registry, session_id))


@app.patch("/sessions/{session_id}/form")
def update_form(
    session_id: str,
    update: PatientUpdate,
    registry: SessionRegistry = Depends(get_sessions),
):
    session = _get_session(registry, session_id)
    try:
        session.update_fields(update.changes())
    except SubmissionInProgressError as exc:
        _conflict(exc)
    except ValidationError as exc:
        _unprocessable(exc)
    return render_session(session)


@app.post("/sessions/{session_id}/submit")
async def submit_form(session_id: str, registry: SessionRegistry = Depends(get_sessions)):
    session = _get_session(registry, session_id)
    try:
        await session.submit()
    except SubmissionInProgressError as exc:
        _conflict(exc)
    return render_session(session)


@app.post("/sessions/{session_id}/reset")
def reset_form(session_id: str, registry: SessionRegistry = Depends(get_sessions)):
    session = _get_session(registry, session_id)
    try:
        session.reset()
    except SubmissionInProgressError as exc:
        _conflict(exc)
    return render_session(session)


@app.delete("/sessions/{session_id}", status_code=204)
def delete_session(session_id: str, registry: SessionRegistry = Depends(get_sessions)):
    _get_session(registry, session_id)
    registry.delete(session_id)
    return Response(status_code=204)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("stroke_risk.main:app", host="0.0.0.0", port=8000)
