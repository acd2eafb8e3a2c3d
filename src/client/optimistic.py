"""Optimistic toggle state for likes, bookmarks and ratings on the client side.

A toggle shows its predicted value as soon as the user acts and reconciles
with the server when the request finishes. Each request carries the sequence
number returned by ``begin``. Only the newest request decides what is shown;
an older success that arrives late is kept as the value to fall back to, so a
rollback always lands on the last state the server confirmed.
"""

import logging
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settled:
    """Value confirmed by the server."""

    value: Any


@dataclass(frozen=True)
class Pending:
    """Value shown while request ``seq`` is in flight."""

    predicted: Any
    seq: int


@dataclass(frozen=True)
class RolledBack:
    """The newest request failed; the pre-optimistic value is shown again."""

    original: Any


class OptimisticToggle:
    """Per-control optimistic state machine.

    Settled -> Pending -> Settled | RolledBack. ``count`` is an optional
    counter shown next to the control (likes count) that moves with the value.
    """

    def __init__(self, value: Any, count: int | None = None):
        self.state: Settled | Pending | RolledBack = Settled(value)
        self.count = count
        self._seq = 0
        # Newest request whose server value is shown or held in _base
        self._confirmed_seq = 0
        # Value and count to restore if the newest request fails
        self._base: tuple[Any, int | None] | None = None

    @property
    def value(self) -> Any:
        if isinstance(self.state, Settled):
            return self.state.value
        if isinstance(self.state, Pending):
            return self.state.predicted
        return self.state.original

    @property
    def is_pending(self) -> bool:
        return isinstance(self.state, Pending)

    def begin(self, predicted: Any, count_delta: int = 0) -> int:
        """Show ``predicted`` immediately and return the request's sequence number."""
        if not self.is_pending:
            self._base = (self.value, self.count)
        self._seq += 1
        if self.count is not None:
            self.count = max(0, self.count + count_delta)
        self.state = Pending(predicted, self._seq)
        return self._seq

    def flip(self) -> int:
        """Begin a boolean toggle, moving the counter by one in the same direction."""
        predicted = not self.value
        return self.begin(predicted, 1 if predicted else -1)

    def resolve(self, seq: int, server_value: Any, server_count: int | None = None) -> bool:
        """Apply the server's answer for request ``seq``.

        Returns False when a newer request superseded ``seq``. A superseded
        success still becomes the rollback target (or, if the newer request
        already failed, the shown value) unless an even newer answer arrived.
        """
        if seq <= self._confirmed_seq:
            logger.debug(f"Discarding out-of-date response {seq}")
            return False
        self._confirmed_seq = seq

        if seq != self._seq:
            logger.debug(f"Response {seq} superseded by {self._seq}")
            if self.is_pending:
                base_count = self._base[1] if self._base else self.count
                self._base = (server_value, base_count if server_count is None else server_count)
            else:
                self.state = Settled(server_value)
                if server_count is not None:
                    self.count = server_count
            return False

        self.state = Settled(server_value)
        if server_count is not None:
            self.count = server_count
        self._base = None
        return True

    def fail(self, seq: int) -> bool:
        """Roll back after request ``seq`` failed. Returns False if it was stale."""
        if seq != self._seq or self._base is None:
            return False
        original, count = self._base
        self.state = RolledBack(original)
        self.count = count
        self._base = None
        return True
