"""
Per-form UI session state

Each browser form instance owns one FormSession. A monotonically increasing
generation id guards against stale results: only the result for the latest
outstanding request is applied, so a reply that lands after a reset or a
newer submission is dropped.
"""

import logging
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Optional, Tuple

from qa_toolkit.models.forms import GenerationResult, GenerationStatus
from qa_toolkit.services.result_renderer import RenderedArtifact

FormKind = Literal["test_cases", "api_tests"]

logger = logging.getLogger(__name__)


class GenerationInProgressError(RuntimeError):
    """A second submission arrived while the form is still generating."""


@dataclass
class FormSession:
    form: Any = None
    current_request: Any = None
    validation_errors: Dict[str, str] = field(default_factory=dict)
    status: GenerationStatus = GenerationStatus.IDLE
    last_result: Optional[GenerationResult] = None
    artifact: Optional[RenderedArtifact] = None
    generation_id: int = 0

    @property
    def is_busy(self) -> bool:
        return self.status == GenerationStatus.GENERATING

    def reject(self, form: Any, errors: Dict[str, str]) -> None:
        """Record validation errors; nothing is dispatched."""
        if self.is_busy:
            raise GenerationInProgressError("A generation is already running for this form")
        self.form = form
        self.validation_errors = dict(errors)
        self.status = GenerationStatus.IDLE

    def begin(self, form: Any, request: Any) -> int:
        if self.is_busy:
            raise GenerationInProgressError("A generation is already running for this form")
        self.generation_id += 1
        self.form = form
        self.current_request = request
        self.validation_errors = {}
        self.status = GenerationStatus.GENERATING
        self.last_result = None
        self.artifact = None
        return self.generation_id

    def complete(
        self,
        generation_id: int,
        result: GenerationResult,
        artifact: Optional[RenderedArtifact] = None,
    ) -> bool:
        if generation_id != self.generation_id or not self.is_busy:
            logger.warning(
                "Discarding stale generation result: id=%s latest=%s status=%s",
                generation_id,
                self.generation_id,
                self.status.value,
            )
            return False
        self.last_result = result
        self.artifact = artifact if result.succeeded else None
        self.status = GenerationStatus.SUCCEEDED if result.succeeded else GenerationStatus.FAILED
        return True

    def reset(self) -> None:
        """Clear displayed state; an in-flight result is invalidated, not cancelled."""
        self.generation_id += 1
        self.form = None
        self.current_request = None
        self.validation_errors = {}
        self.status = GenerationStatus.IDLE
        self.last_result = None
        self.artifact = None


class FormSessionStore:
    """In-memory sessions keyed by browser session id and form kind."""

    def __init__(self, max_sessions: int = 1000):
        self._max_sessions = max(1, max_sessions)
        self._sessions: "OrderedDict[Tuple[str, str], FormSession]" = OrderedDict()

    @staticmethod
    def new_session_id() -> str:
        return uuid.uuid4().hex

    def get(self, session_id: str, kind: FormKind) -> FormSession:
        key = (session_id, kind)
        session = self._sessions.get(key)
        if session is None:
            session = FormSession()
            self._sessions[key] = session
            while len(self._sessions) > self._max_sessions:
                evicted_key, _ = self._sessions.popitem(last=False)
                logger.debug("Evicted form session %s", evicted_key)
        else:
            self._sessions.move_to_end(key)
        return session

    def __len__(self) -> int:
        return len(self._sessions)


_form_session_store: Optional[FormSessionStore] = None


def get_form_session_store() -> FormSessionStore:
    global _form_session_store
    if _form_session_store is None:
        _form_session_store = FormSessionStore()
    return _form_session_store
