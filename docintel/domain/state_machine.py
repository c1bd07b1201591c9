from __future__ import annotations

from docintel.domain.states import ALLOWED_TRANSITIONS, ProcessingStatus


class InvalidTransitionError(ValueError):
    pass


class StateMachine:
    def transition(self, current: ProcessingStatus, target: ProcessingStatus) -> ProcessingStatus:
        allowed = ALLOWED_TRANSITIONS.get(current, set())
        if target not in allowed:
            raise InvalidTransitionError(f"Invalid transition {current.value} -> {target.value}")
        return target

    def can_transition(self, current: ProcessingStatus, target: ProcessingStatus) -> bool:
        return target in ALLOWED_TRANSITIONS.get(current, set())
