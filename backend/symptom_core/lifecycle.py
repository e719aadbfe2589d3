from __future__ import annotations

import logging

from .models import PIPELINE_STATES, TERMINAL_STATES

logger = logging.getLogger(__name__)


class LifecycleError(Exception):
    pass


class PipelineLifecycle:
    """Tracks the states visited by one analysis request.

    Instances are per request; nothing here is shared between concurrent
    invocations.
    """

    _TRANSITIONS = {
        "received": {"validated", "rejected"},
        "validated": {"transcribing", "interpreting"},
        "transcribing": {"interpreting", "failed"},
        "interpreting": {"completed", "failed"},
        "completed": set(),
        "failed": set(),
        "rejected": set(),
    }

    def __init__(self, kind: str, request_id: str) -> None:
        self.kind = kind
        self.request_id = request_id
        self.history: list[str] = ["received"]

    @property
    def state(self) -> str:
        return self.history[-1]

    @property
    def finished(self) -> bool:
        return self.state in TERMINAL_STATES

    def transition(self, next_state: str) -> list[str]:
        if next_state not in PIPELINE_STATES:
            raise LifecycleError(f"Unknown pipeline state: {next_state}")
        allowed = self._TRANSITIONS.get(self.state, set())
        if next_state not in allowed:
            raise LifecycleError(f"Invalid transition {self.state} -> {next_state}")
        self.history.append(next_state)
        logger.debug("analysis %s (%s): %s", self.request_id, self.kind, " -> ".join(self.history))
        return list(self.history)
