"""Bit-history state machines used to map a context's history to a probability."""

from __future__ import annotations


def _check(state: int, bit: int | None = None) -> None:
    if not 0 <= state < 256:
        raise ValueError(f"state must be in range 0..255, got {state}")
    if bit is not None and bit not in (0, 1):
        raise ValueError(f"bit must be 0 or 1, got {bit}")


class State:
    """A trivial state machine: every state predicts 0.5 and leads to state 0."""

    def init_probability(self, state: int) -> float:
        """Return the initial probability of a 1 bit in ``state``."""
        return 0.5

    def next(self, state: int, bit: int) -> int:
        """Return the state that follows ``state`` after seeing ``bit``."""
        return 0


class RunMap(State):
    """Tracks the length of the current run of equal bits.

    States 0..127 count a run of zeros, states 128..255 a run of ones.
    """

    def __init__(self) -> None:
        self._table = tuple(
            self._transition(index // 2, index % 2) for index in range(512)
        )

    @staticmethod
    def _transition(state: int, bit: int) -> int:
        if bit == 0:
            if state < 127:
                return state + 1
            if state >= 128:
                return 0
            return state
        if state < 128:
            return 128
        if state < 255:
            return state + 1
        return state

    def init_probability(self, state: int) -> float:
        _check(state)
        if state < 128:
            return (128.0 - state) / 256
        return state / 256.0

    def next(self, state: int, bit: int) -> int:
        _check(state, bit)
        return self._table[state * 2 + bit]