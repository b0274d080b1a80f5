import json
from types import SimpleNamespace

import pytest

from stroke_risk.schemas import PatientInput, PredictionResult


class FakeGeminiModel:
    """Stands in for genai.GenerativeModel and records every call."""

    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.calls = []

    async def generate_content_async(self, prompt, generation_config=None):
        self.calls.append({"prompt": prompt, "generation_config": generation_config})
        if self.error is not None:
            raise self.error
        return SimpleNamespace(text=self.text)


@pytest.fixture
def valid_patient():
    return PatientInput(age=45, avg_glucose_level=105.5, bmi=28.4)


@pytest.fixture
def high_risk_reply():
    return json.dumps({"strokePrediction": True, "probability": 72, "riskLevel": "High Risk"})


@pytest.fixture
def high_risk_result():
    return PredictionResult(stroke_prediction=True, probability=72, risk_level="High Risk")
