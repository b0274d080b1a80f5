"""Presentational view model for the result panel of the form."""

from __future__ import annotations

from typing import Any, Dict, Optional

from stroke_risk.config import settings
from stroke_risk.controller import FormSession, Settled, Submitting
from stroke_risk.schemas import PredictionResult, RiskLevel

DISCLAIMER = (
    "This system is for educational purposes only and does not replace professional "
    "medical diagnosis. Please consult a qualified healthcare provider for medical advice."
)

RISK_TONES = {
    RiskLevel.HIGH: "red",
    RiskLevel.MODERATE: "yellow",
    RiskLevel.LOW: "green",
}


def _format_percent(value: float) -> str:
    return f"{value:g}%"


def probability_tone(probability: float) -> str:
    if probability > settings.BAR_DANGER_ABOVE:
        return "red"
    if probability > settings.BAR_WARNING_ABOVE:
        return "yellow"
    return "green"


def render_result(result: PredictionResult) -> Dict[str, Any]:
    width = max(0.0, min(100.0, result.probability))
    return {
        "headline": "Stroke: YES" if result.stroke_prediction else "Stroke: NO",
        "headline_tone": "red" if result.stroke_prediction else "green",
        "probability": {
            "label": _format_percent(result.probability),
            "bar_width": width,
            "bar_tone": probability_tone(result.probability),
        },
        "risk_badge": {
            "label": result.risk_level.value,
            "tone": RISK_TONES[result.risk_level],
        },
        "disclaimer": DISCLAIMER,
    }


def render_panel(session: FormSession) -> Dict[str, Any]:
    state = session.state
    if isinstance(state, Submitting):
        return {"kind": "loading", "message": "Processing..."}
    if isinstance(state, Settled) and state.succeeded:
        return {"kind": "result", **render_result(state.result)}
    return {
        "kind": "placeholder",
        "title": "No Prediction Yet",
        "message": "Enter patient details and run the model to see the risk assessment.",
    }


def render_session(session: FormSession) -> Dict[str, Any]:
    result: Optional[PredictionResult] = session.result
    return {
        "id": session.session_id,
        "state": session.state.name,
        "form": session.patient.to_wire(),
        "field_errors": session.field_errors.as_dict(),
        "error": session.error,
        "result": result.to_wire() if result else None,
        "submit_enabled": not session.is_submitting,
        "panel": render_panel(session),
    }
