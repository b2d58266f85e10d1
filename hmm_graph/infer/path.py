"""
State paths and their joint probability.

A ``StatePath`` is an ordered sequence of state handles from START to END
inclusive, paired with the joint probability of that path emitting one
observed symbol sequence. ``PathScorer`` computes that probability in log
space.
"""

import math
from typing import Iterable, Sequence, Tuple

from ..exceptions import UnsupportedSymbolError
from ..graph import StateGraph


class PathScorer:
    """Joint probability of a concrete state path and observation string."""

    def __init__(self, graph: StateGraph):
        self.graph = graph

    def log_score(self, states: Sequence[int], observed: str) -> float:
        """
        Compute ``log P(path, observed)``.

        The emission term sums ``log e(s_i, o_i)`` for ``i = 1..n`` and the
        transition term sums ``log t(s_i -> s_{i+1})`` for ``i = 0..n``.
        A missing edge or a symbol the state does not emit contributes
        ``-inf``.

        Args:
            states: Handles ``START, s_1, ..., s_n, END``
            observed: Observed symbols ``o_1..o_n``

        Returns:
            Log joint probability, ``-inf`` for an impossible path

        Raises:
            ValueError: If the path shape does not match ``observed``
            UnsupportedSymbolError: If a symbol is outside the graph alphabet
        """
        graph = self.graph
        if len(states) != len(observed) + 2:
            raise ValueError(
                f"Path of {len(states)} states cannot explain {len(observed)} symbols"
            )
        if states[0] != graph.start or states[-1] != graph.end:
            raise ValueError("State paths must begin at START and end at END")

        alphabet = graph.alphabet()
        log_probability = 0.0

        for position, symbol in enumerate(observed):
            if symbol not in alphabet:
                raise UnsupportedSymbolError(
                    f"Symbol {symbol!r} at position {position} is not emitted by any state",
                    symbol=symbol, position=position
                )
            log_probability += _safe_log(graph.emission_probability(states[position + 1], symbol))

        for source, target in zip(states, states[1:]):
            log_probability += _safe_log(graph.transition_probability(source, target))

        return log_probability

    def score(self, states: Sequence[int], observed: str) -> float:
        """Joint probability of ``states`` producing ``observed``."""
        return math.exp(self.log_score(states, observed))


def _safe_log(probability: float) -> float:
    return math.log(probability) if probability > 0.0 else -math.inf


class StatePath:
    """
    Immutable START..END state path with its joint probability.

    Paths order by probability ascending; sort with ``reverse=True`` for a
    most-probable-first ranking.
    """

    __slots__ = ('_states', '_state_ids', '_log_probability')

    def __init__(self, states: Iterable[int], log_probability: float,
                 state_ids: Iterable[int] = None):
        self._states = tuple(states)
        self._log_probability = float(log_probability)
        self._state_ids = tuple(state_ids) if state_ids is not None else self._states

    @classmethod
    def from_states(cls, graph: StateGraph, states: Sequence[int], observed: str) -> 'StatePath':
        """Score ``states`` against ``observed`` and wrap the result."""
        log_probability = PathScorer(graph).log_score(states, observed)
        return cls(states, log_probability, [graph.state_id(s) for s in states])

    @property
    def states(self) -> Tuple[int, ...]:
        return self._states

    @property
    def state_ids(self) -> Tuple[int, ...]:
        return self._state_ids

    @property
    def log_probability(self) -> float:
        return self._log_probability

    @property
    def probability(self) -> float:
        return math.exp(self._log_probability)

    def __len__(self) -> int:
        return len(self._states)

    def __getitem__(self, index):
        return self._states[index]

    def __iter__(self):
        return iter(self._states)

    def __eq__(self, other) -> bool:
        if not isinstance(other, StatePath):
            return NotImplemented
        return (self._states == other._states
                and self._log_probability == other._log_probability)

    def __lt__(self, other) -> bool:
        if not isinstance(other, StatePath):
            return NotImplemented
        return self._log_probability < other._log_probability

    def __le__(self, other) -> bool:
        if not isinstance(other, StatePath):
            return NotImplemented
        return self._log_probability <= other._log_probability

    def __gt__(self, other) -> bool:
        if not isinstance(other, StatePath):
            return NotImplemented
        return self._log_probability > other._log_probability

    def __ge__(self, other) -> bool:
        if not isinstance(other, StatePath):
            return NotImplemented
        return self._log_probability >= other._log_probability

    def __hash__(self) -> int:
        return hash((self._states, self._log_probability))

    def __str__(self) -> str:
        ids = ", ".join(str(state_id) for state_id in self._state_ids)
        return f"[{ids}| p = {self.probability}]"

    def __repr__(self) -> str:
        return f"StatePath(states={list(self._state_ids)}, probability={self.probability})"


def sum_path_probabilities(paths: Iterable[StatePath]) -> float:
    """Total probability of a collection of paths."""
    return math.fsum(path.probability for path in paths)
