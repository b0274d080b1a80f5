"""Form sessions: mutable patient input plus the Idle/Submitting/Settled state machine."""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from stroke_risk.config import settings
from stroke_risk.gemini_prediction import predict_stroke_risk
from stroke_risk.schemas import PatientInput, PredictionResult
from stroke_risk.validation import SUMMARY_MESSAGE, ValidationErrors, validate_patient

logger = logging.getLogger(__name__)

FAILURE_MESSAGE = "Failed to generate prediction. Please try again."

Predictor = Callable[[PatientInput], Awaitable[PredictionResult]]


class SubmissionInProgressError(RuntimeError):
    pass


@dataclass(frozen=True)
class Idle:
    error: Optional[str] = None

    name = "idle"


@dataclass(frozen=True)
class Submitting:
    name = "submitting"


@dataclass(frozen=True)
class Settled:
    result: Optional[PredictionResult] = None
    error: Optional[str] = None

    name = "settled"

    @classmethod
    def success(cls, result: PredictionResult) -> "Settled":
        return cls(result=result)

    @classmethod
    def failure(cls, message: str = FAILURE_MESSAGE) -> "Settled":
        return cls(error=message)

    @property
    def succeeded(self) -> bool:
        return self.result is not None


FormState = Union[Idle, Submitting, Settled]


class FormSession:
    """Owns one patient form and gates it to a single in-flight prediction."""

    def __init__(self, predictor: Optional[Predictor] = None, session_id: Optional[str] = None):
        self.session_id = session_id or uuid.uuid4().hex
        self.patient = PatientInput()
        self.field_errors = ValidationErrors()
        self.state: FormState = Idle()
        self._predictor = predictor or predict_stroke_risk

    @property
    def is_submitting(self) -> bool:
        return isinstance(self.state, Submitting)

    @property
    def result(self) -> Optional[PredictionResult]:
        return self.state.result if isinstance(self.state, Settled) else None

    @property
    def error(self) -> Optional[str]:
        return getattr(self.state, "error", None)

    def _ensure_not_submitting(self) -> None:
        if self.is_submitting:
            raise SubmissionInProgressError("A prediction is already in progress")

    def update_fields(self, changes: Dict[str, Any]) -> None:
        """Apply field edits, clearing the validation message of each edited field."""
        self._ensure_not_submitting()
        self.patient = PatientInput.model_validate({**self.patient.model_dump(), **changes})
        for field in changes:
            self.field_errors = self.field_errors.without(field)

    def reset(self) -> None:
        self._ensure_not_submitting()
        self.patient = PatientInput()
        self.field_errors = ValidationErrors()
        self.state = Idle()

    async def submit(self) -> FormState:
        # Check-and-set happens before the first await, so it cannot interleave
        self._ensure_not_submitting()
        self.state = Idle()

        self.field_errors = validate_patient(self.patient)
        if not self.field_errors.is_valid:
            self.state = Idle(error=SUMMARY_MESSAGE)
            logger.info(
                "Session %s rejected: invalid fields %s",
                self.session_id,
                sorted(self.field_errors.as_dict()),
            )
            return self.state

        self.state = Submitting()
        snapshot = self.patient.model_copy()
        try:
            prediction = await self._predictor(snapshot)
        except asyncio.CancelledError:
            # Leave Submitting so the form is usable once the caller goes away
            self.state = Settled.failure()
            logger.info("Session %s cancelled while submitting", self.session_id)
            raise
        except Exception:  # noqa: BLE001
            # Gateway already logged the cause; the user only sees the generic message
            self.state = Settled.failure()
            logger.info("Session %s settled with failure", self.session_id)
        else:
            self.state = Settled.success(prediction)
            logger.info("Session %s settled: %s", self.session_id, prediction.risk_level.value)
        return self.state


class SessionRegistry:
    """In-memory form sessions keyed by id; nothing survives a restart.

    Sessions idle for longer than ``ttl_seconds`` expire, and once
    ``max_sessions`` is reached the least recently used idle session is
    dropped. A session with a prediction in flight is never evicted.
    """

    def __init__(
        self,
        predictor: Optional[Predictor] = None,
        ttl_seconds: Optional[float] = None,
        max_sessions: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._sessions: "OrderedDict[str, FormSession]" = OrderedDict()
        self._last_seen: Dict[str, float] = {}
        self.predictor = predictor
        self.ttl_seconds = settings.SESSION_TTL_SECONDS if ttl_seconds is None else ttl_seconds
        self.max_sessions = settings.MAX_SESSIONS if max_sessions is None else max_sessions
        self._clock = clock

    def _touch(self, session_id: str) -> None:
        self._sessions.move_to_end(session_id)
        self._last_seen[session_id] = self._clock()

    def _drop(self, session_id: str) -> None:
        del self._sessions[session_id]
        del self._last_seen[session_id]

    def purge_expired(self) -> int:
        now = self._clock()
        expired = [
            session_id
            for session_id, session in self._sessions.items()
            if now - self._last_seen[session_id] > self.ttl_seconds and not session.is_submitting
        ]
        for session_id in expired:
            self._drop(session_id)
        if expired:
            logger.info("Expired %d idle form sessions", len(expired))
        return len(expired)

    def _evict_for_capacity(self) -> None:
        while len(self._sessions) >= self.max_sessions:
            victim = next(
                (sid for sid, session in self._sessions.items() if not session.is_submitting),
                None,
            )
            if victim is None:
                break
            self._drop(victim)
            logger.info("Evicted form session %s to stay under %d", victim, self.max_sessions)

    def create(self) -> FormSession:
        self.purge_expired()
        self._evict_for_capacity()
        session = FormSession(predictor=self.predictor)
        self._sessions[session.session_id] = session
        self._touch(session.session_id)
        return session

    def get(self, session_id: str) -> FormSession:
        session = self._sessions[session_id]
        if self._clock() - self._last_seen[session_id] > self.ttl_seconds and not session.is_submitting:
            self._drop(session_id)
            raise KeyError(session_id)
        self._touch(session_id)
        return session

    def delete(self, session_id: str) -> None:
        self._drop(session_id)

    def __len__(self) -> int:
        return len(self._sessions)
