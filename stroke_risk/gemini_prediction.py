# stroke_risk/gemini_prediction.py

import json
import logging
from typing import Any, Optional

import google.generativeai as genai
from pydantic import ValidationError

from stroke_risk.config import settings
from stroke_risk.schemas import PatientInput, PredictionResult, RiskLevel

logger = logging.getLogger(__name__)

if settings.GEMINI_API_KEY:
    genai.configure(api_key=settings.GEMINI_API_KEY)
else:
    logger.warning("GEMINI_API_KEY is not configured.")


class PredictionError(RuntimeError):
    """Base class for failures of the remote stroke-risk prediction."""


class GatewayNotConfiguredError(PredictionError):
    pass


class EmptyResponseError(PredictionError):
    pass


class MalformedResponseError(PredictionError):
    pass


RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "strokePrediction": {"type": "BOOLEAN"},
        "probability": {"type": "NUMBER"},
        "riskLevel": {
            "type": "STRING",
            "format": "enum",
            "enum": [level.value for level in RiskLevel],
        },
    },
    "required": ["strokePrediction", "probability", "riskLevel"],
}


def build_prompt(patient: PatientInput) -> str:
    return f"""
Analyze the following patient data for stroke risk assessment.
Based on general medical knowledge and patterns similar to the stroke prediction dataset, predict the likelihood of a stroke.

Patient Data:
{json.dumps(patient.to_wire())}

Provide the output strictly in JSON format matching the schema.
- strokePrediction: true if high risk/likely stroke, false otherwise.
- probability: A number between 0 and 100 representing the percentage chance.
- riskLevel: One of "Low Risk", "Moderate Risk", "High Risk".
"""


def build_generation_config() -> dict:
    return {
        "response_mime_type": "application/json",
        "response_schema": RESPONSE_SCHEMA,
    }


def get_model() -> Any:
    if not settings.GEMINI_API_KEY:
        raise GatewayNotConfiguredError("Gemini API key is not configured")
    return genai.GenerativeModel(settings.GEMINI_MODEL)


def _response_text(response: Any) -> Optional[str]:
    # The SDK's .text accessor raises ValueError when no candidate has parts
    try:
        return getattr(response, "text", None)
    except ValueError:
        return None


def parse_prediction(text: Optional[str]) -> PredictionResult:
    """Turn the model's JSON reply into a PredictionResult, taken at face value."""

    if not text or not text.strip():
        raise EmptyResponseError("No response from AI model")

    try:
        json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedResponseError("AI model response is not valid JSON") from exc

    # Strict JSON mode: no "yes" for booleans, no "72" for numbers
    try:
        result = PredictionResult.model_validate_json(text, strict=True)
    except ValidationError as exc:
        raise MalformedResponseError("AI model response does not match the schema") from exc

    _warn_on_suspicious(result)
    return result


def _warn_on_suspicious(result: PredictionResult) -> None:
    if not 0 <= result.probability <= 100:
        logger.warning("Model returned probability outside 0-100: %s", result.probability)

    contradicts = (
        (result.stroke_prediction and result.risk_level is RiskLevel.LOW)
        or (not result.stroke_prediction and result.risk_level is RiskLevel.HIGH)
    )
    if contradicts:
        logger.warning(
            "Model returned inconsistent output: strokePrediction=%s riskLevel=%s",
            result.stroke_prediction,
            result.risk_level.value,
        )


async def predict_stroke_risk(patient: PatientInput, model: Any = None) -> PredictionResult:
    """Ask Gemini for a stroke-risk estimate for an already validated patient."""

    try:
        if model is None:
            model = get_model()

        response = await model.generate_content_async(
            build_prompt(patient),
            generation_config=build_generation_config(),
        )
        return parse_prediction(_response_text(response))

    except Exception as exc:
        logger.exception("Prediction error: %s", exc)
        raise
