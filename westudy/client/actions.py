"""Idle/Pending/Succeeded/Failed state machine shared by the client flows."""

import enum
import logging
from typing import Any, Awaitable, Callable, Dict, FrozenSet, Optional

from westudy.core.errors import IllegalTransitionError

logger = logging.getLogger(__name__)


class ActionState(str, enum.Enum):
    idle = "idle"
    pending = "pending"
    succeeded = "succeeded"
    failed = "failed"


TRANSITIONS: Dict[ActionState, FrozenSet[ActionState]] = {
    ActionState.idle: frozenset({ActionState.pending}),
    ActionState.pending: frozenset({ActionState.succeeded, ActionState.failed}),
    ActionState.succeeded: frozenset({ActionState.idle}),
    ActionState.failed: frozenset({ActionState.pending, ActionState.idle}),
}


class AsyncAction:
    """
    One user-triggered operation (login, booking, door unlock) and its state.

    `run()` drives idle/failed -> pending -> succeeded|failed. Starting a
    run from `pending` raises IllegalTransitionError, so a second click
    on a busy button cannot fire a second request. A finished action is
    re-armed with `reset()`, or implicitly by the next `run()`.
    """

    def __init__(self, name: str):
        self.name = name
        self.state = ActionState.idle
        self.result: Any = None
        self.error: Optional[BaseException] = None

    def __repr__(self):
        return f"<AsyncAction {self.name} {self.state.value}>"

    @property
    def is_pending(self) -> bool:
        return self.state is ActionState.pending

    def can_transition(self, target: ActionState) -> bool:
        return target in TRANSITIONS[self.state]

    def transition(self, target: ActionState) -> None:
        if not self.can_transition(target):
            raise IllegalTransitionError(
                f"{self.name}: cannot go from {self.state.value} to {target.value}"
            )
        logger.debug("%s: %s -> %s", self.name, self.state.value, target.value)
        self.state = target

    def reset(self) -> None:
        if self.state is not ActionState.idle:
            self.transition(ActionState.idle)
        self.result = None
        self.error = None

    async def run(self, operation: Callable[[], Awaitable[Any]]) -> Any:
        """Await `operation` inside a pending state; its exception is re-raised after `failed`."""
        if self.state is ActionState.succeeded:
            self.reset()
        self.transition(ActionState.pending)
        self.result = None
        self.error = None
        try:
            result = await operation()
        except BaseException as exc:
            # includes CancelledError
            self.error = exc
            self.transition(ActionState.failed)
            raise
        self.result = result
        self.transition(ActionState.succeeded)
        return result
