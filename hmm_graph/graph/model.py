"""
Probabilistic state graph for a discrete Hidden Markov Model.

States are stored in an arena: every state is addressed by a dense integer
handle assigned in insertion order, and transitions, emissions and
back-references are handle-keyed adjacency tables. Normalization also
builds cumulative distribution arrays used for weighted sampling, ordered
by target handle (transitions) and by symbol (emissions).
"""

import math
from collections import deque
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterator, List, Mapping, Optional, Set, Tuple

import numpy as np

from ..config import get_config
from ..exceptions import (
    DegenerateDistributionError,
    DuplicateStateError,
    ErrorKind,
    GraphNotNormalizedError,
    InvalidProbabilityError,
    InvalidTopologyError,
    SamplingExhaustedError,
    UnknownStateError,
)
from ..logger import get_graph_logger
from .state import StateType, StateView

logger = get_graph_logger()


@dataclass(frozen=True)
class ValidationIssue:
    """One problem found by ``StateGraph.validate``."""

    kind: ErrorKind
    message: str
    state: Optional[int] = None


class StateGraph:
    """
    Arena of HMM states with their transition and emission tables.

    Exactly one START and one END state may be added. Transition and
    emission weights are raw until ``normalize``/``normalize_all`` is
    called; after that the graph is expected to stay read-only.
    """

    def __init__(self):
        self._ids: List[int] = []
        self._types: List[StateType] = []
        self._transitions: List[Dict[int, float]] = []
        self._emissions: List[Dict[str, float]] = []
        self._incoming: List[Set[int]] = []
        self._transition_tables: List[Optional[Tuple[np.ndarray, np.ndarray]]] = []
        self._emission_tables: List[Optional[Tuple[Tuple[str, ...], np.ndarray]]] = []
        self._handle_by_id: Dict[int, int] = {}
        self._start: Optional[int] = None
        self._end: Optional[int] = None

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def add_state(self, state_id: int, state_type: StateType) -> int:
        """
        Add a state and return its arena handle.

        Args:
            state_id: Unique integer identity of the state
            state_type: Role of the state

        Returns:
            Dense integer handle used by every other graph operation

        Raises:
            DuplicateStateError: If ``state_id`` is already in use
            InvalidTopologyError: On a second START or END state
        """
        if isinstance(state_id, bool) or not isinstance(state_id, (int, np.integer)):
            raise InvalidTopologyError(f"State id must be an integer, got {state_id!r}")
        state_id = int(state_id)
        if not isinstance(state_type, StateType):
            raise InvalidTopologyError(f"Unknown state type: {state_type!r}")
        if state_id in self._handle_by_id:
            raise DuplicateStateError(f"State id {state_id} is already in use")
        if state_type is StateType.START and self._start is not None:
            raise InvalidTopologyError("The model already has a START state")
        if state_type is StateType.END and self._end is not None:
            raise InvalidTopologyError("The model already has an END state")

        handle = len(self._ids)
        self._ids.append(state_id)
        self._types.append(state_type)
        self._transitions.append({})
        self._emissions.append({})
        self._incoming.append(set())
        self._transition_tables.append(None)
        self._emission_tables.append(None)
        self._handle_by_id[state_id] = handle

        if state_type is StateType.START:
            self._start = handle
        elif state_type is StateType.END:
            self._end = handle

        logger.debug(f"Added state id={state_id} type={state_type.name} handle={handle}")
        return handle

    def add_start_state(self, state_id: int) -> int:
        return self.add_state(state_id, StateType.START)

    def add_hidden_state(self, state_id: int) -> int:
        return self.add_state(state_id, StateType.HIDDEN)

    def add_end_state(self, state_id: int) -> int:
        return self.add_state(state_id, StateType.END)

    def add_transition(self, source: int, target: int, probability: float) -> None:
        """
        Register (or overwrite) the raw weight of the edge ``source -> target``.

        Edges into START are refused as well as edges out of END: START is
        only ever the origin of a path, and a back-edge into it would carry
        probability mass that no inference routine can use.

        Raises:
            InvalidTopologyError: If ``source`` is END or ``target`` is START
            InvalidProbabilityError: If the weight is negative or not finite
            UnknownStateError: If either handle is not in the graph
        """
        self._check_handle(source)
        self._check_handle(target)
        if self._types[source] is StateType.END:
            raise InvalidTopologyError(
                "End HMM states may not have outgoing state transitions."
            )
        if self._types[target] is StateType.START:
            raise InvalidTopologyError(
                "Start HMM states may not have incoming state transitions."
            )
        weight = self._check_weight(probability)

        self._transitions[source][target] = weight
        self._incoming[target].add(source)
        self._transition_tables[source] = None

    def add_emission(self, state: int, symbol: str, probability: float) -> None:
        """
        Register (or overwrite) the raw weight of ``state`` emitting ``symbol``.

        Raises:
            InvalidTopologyError: If ``state`` is START or END
            InvalidProbabilityError: If the weight is invalid or ``symbol``
                is not a single character
        """
        self._check_handle(state)
        if self._types[state] is not StateType.HIDDEN:
            raise InvalidTopologyError(
                "Start and end HMM states may not have emissions."
            )
        if not isinstance(symbol, str) or len(symbol) != 1:
            raise InvalidProbabilityError(
                f"Emission symbols must be single characters, got {symbol!r}"
            )
        weight = self._check_weight(probability)

        self._emissions[state][symbol] = weight
        self._emission_tables[state] = None

    # ------------------------------------------------------------------
    # Normalization
    # ------------------------------------------------------------------

    def normalize(self, state: int) -> None:
        """
        Rescale the transition and emission tables of ``state`` to sum to 1.

        Empty tables are skipped. Both tables are checked before either is
        modified, so a failed call leaves the state untouched.

        Raises:
            DegenerateDistributionError: If a non-empty table sums to zero
        """
        self._check_handle(state)
        transitions = self._transitions[state]
        emissions = self._emissions[state]

        transition_sum = math.fsum(transitions.values())
        emission_sum = math.fsum(emissions.values())

        if transitions and transition_sum == 0.0:
            raise DegenerateDistributionError(
                f"Transition weights of state {self._ids[state]} sum to zero"
            )
        if emissions and emission_sum == 0.0:
            raise DegenerateDistributionError(
                f"Emission weights of state {self._ids[state]} sum to zero"
            )

        for target in transitions:
            transitions[target] /= transition_sum
        for symbol in emissions:
            emissions[symbol] /= emission_sum

        self._build_sampling_tables(state)

    def normalize_all(self) -> None:
        """Normalize every state in the arena."""
        for handle in range(len(self._ids)):
            self.normalize(handle)
        logger.debug(f"Normalized {len(self._ids)} states")

    def _build_sampling_tables(self, state: int) -> None:
        transitions = self._transitions[state]
        targets = np.array(sorted(transitions), dtype=np.int64)
        transition_cdf = np.cumsum([transitions[t] for t in targets], dtype=np.float64)
        self._transition_tables[state] = (targets, transition_cdf)

        emissions = self._emissions[state]
        symbols = tuple(sorted(emissions))
        emission_cdf = np.cumsum([emissions[s] for s in symbols], dtype=np.float64)
        self._emission_tables[state] = (symbols, emission_cdf)

    def is_normalized(self, tolerance: Optional[float] = None) -> bool:
        """Check that every non-empty table sums to 1 within ``tolerance``."""
        if tolerance is None:
            tolerance = get_config('model', 'tolerance')
        for handle in range(len(self._ids)):
            for table in (self._transitions[handle], self._emissions[handle]):
                if table and abs(math.fsum(table.values()) - 1.0) > tolerance:
                    return False
        return True

    # ------------------------------------------------------------------
    # Sampling
    # ------------------------------------------------------------------

    def sample_transition(self, state: int, draw: float) -> int:
        """Select the successor of ``state`` for a uniform draw in [0, 1)."""
        self._check_handle(state)
        table = self._transition_tables[state]
        if table is None:
            raise GraphNotNormalizedError(
                f"Transitions of state {self._ids[state]} are not normalized"
            )
        targets, cdf = table
        return int(targets[self._select(cdf, draw, state, "transition")])

    def sample_emission(self, state: int, draw: float) -> str:
        """Select the symbol emitted by ``state`` for a uniform draw in [0, 1)."""
        self._check_handle(state)
        table = self._emission_tables[state]
        if table is None:
            raise GraphNotNormalizedError(
                f"Emissions of state {self._ids[state]} are not normalized"
            )
        symbols, cdf = table
        return symbols[self._select(cdf, draw, state, "emission")]

    def _select(self, cdf: np.ndarray, draw: float, state: int, table_name: str) -> int:
        # First entry whose cumulative weight exceeds the draw
        index = int(np.searchsorted(cdf, draw, side='right'))
        if index >= len(cdf):
            raise SamplingExhaustedError(
                f"Draw {draw!r} selected no {table_name} of state {self._ids[state]}"
            )
        return index

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def start(self) -> Optional[int]:
        return self._start

    @property
    def end(self) -> Optional[int]:
        return self._end

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, state) -> bool:
        if isinstance(state, bool) or not isinstance(state, (int, np.integer)):
            return False
        return 0 <= state < len(self._ids)

    def states(self) -> Iterator[int]:
        """Iterate over all handles in arena order."""
        return iter(range(len(self._ids)))

    def index_of(self, state_id: int) -> int:
        """Return the handle of the state with identity ``state_id``."""
        try:
            return self._handle_by_id[state_id]
        except KeyError:
            raise UnknownStateError(f"No state with id {state_id}")

    def state_id(self, state: int) -> int:
        self._check_handle(state)
        return self._ids[state]

    def state_type(self, state: int) -> StateType:
        self._check_handle(state)
        return self._types[state]

    def transitions(self, state: int) -> Mapping[int, float]:
        """Read-only view of the outgoing transitions of ``state``."""
        self._check_handle(state)
        return MappingProxyType(self._transitions[state])

    def emissions(self, state: int) -> Mapping[str, float]:
        """Read-only view of the emission table of ``state``."""
        self._check_handle(state)
        return MappingProxyType(self._emissions[state])

    def incoming(self, state: int) -> FrozenSet[int]:
        """States holding a transition into ``state``."""
        self._check_handle(state)
        return frozenset(self._incoming[state])

    def transition_probability(self, source: int, target: int) -> float:
        """Probability of ``source -> target``; 0.0 when there is no edge."""
        return self._transitions[source].get(target, 0.0)

    def emission_probability(self, state: int, symbol: str) -> float:
        """Probability of ``state`` emitting ``symbol``; 0.0 when absent."""
        return self._emissions[state].get(symbol, 0.0)

    def view(self, state: int) -> StateView:
        self._check_handle(state)
        return StateView(
            handle=state,
            state_id=self._ids[state],
            state_type=self._types[state],
            transitions=MappingProxyType(dict(self._transitions[state])),
            emissions=MappingProxyType(dict(self._emissions[state])),
            incoming=frozenset(self._incoming[state]),
        )

    def alphabet(self, states=None) -> FrozenSet[str]:
        """Union of the emission alphabets of ``states`` (default: all)."""
        if states is None:
            states = self.states()
        symbols = set()
        for handle in states:
            symbols.update(self._emissions[handle])
        return frozenset(symbols)

    def reachable_from(self, source: int) -> FrozenSet[int]:
        """Breadth-first set of states reachable from ``source`` (inclusive)."""
        self._check_handle(source)
        queue = deque([source])
        visited = {source}

        while queue:
            current = queue.popleft()
            for follower in self._transitions[current]:
                if follower not in visited:
                    visited.add(follower)
                    queue.append(follower)

        return frozenset(visited)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self, tolerance: Optional[float] = None) -> List[ValidationIssue]:
        """
        Report structural problems without raising.

        Returns:
            List of issues; empty when the graph is ready for inference
        """
        if tolerance is None:
            tolerance = get_config('model', 'tolerance')
        issues = []

        if self._start is None:
            issues.append(ValidationIssue(ErrorKind.INVALID_TOPOLOGY, "Missing START state"))
        if self._end is None:
            issues.append(ValidationIssue(ErrorKind.INVALID_TOPOLOGY, "Missing END state"))
        if self._start is not None and self._end is not None:
            if self._end not in self.reachable_from(self._start):
                issues.append(ValidationIssue(
                    ErrorKind.UNREACHABLE_END_STATE, "End state is unreachable.", self._end
                ))

        for handle in self.states():
            state_id = self._ids[handle]
            if self._types[handle] is StateType.HIDDEN:
                if not self._emissions[handle]:
                    issues.append(ValidationIssue(
                        ErrorKind.DEGENERATE_DISTRIBUTION,
                        f"Hidden state {state_id} has no emissions", handle
                    ))
                if not self._transitions[handle]:
                    issues.append(ValidationIssue(
                        ErrorKind.INVALID_TOPOLOGY,
                        f"Hidden state {state_id} has no outgoing transitions", handle
                    ))

            for name, table in (("transition", self._transitions[handle]),
                                ("emission", self._emissions[handle])):
                if not table:
                    continue
                total = math.fsum(table.values())
                if total == 0.0:
                    issues.append(ValidationIssue(
                        ErrorKind.DEGENERATE_DISTRIBUTION,
                        f"{name.capitalize()} weights of state {state_id} sum to zero", handle
                    ))
                elif abs(total - 1.0) > tolerance:
                    issues.append(ValidationIssue(
                        ErrorKind.NOT_NORMALIZED,
                        f"{name.capitalize()} weights of state {state_id} sum to {total}", handle
                    ))

        return issues

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _check_handle(self, state) -> None:
        if state not in self:
            raise UnknownStateError(f"Unknown state handle: {state!r}")

    @staticmethod
    def _check_weight(probability) -> float:
        try:
            weight = float(probability)
        except (TypeError, ValueError):
            raise InvalidProbabilityError(f"Probability must be a number, got {probability!r}")
        if not math.isfinite(weight) or weight < 0.0:
            raise InvalidProbabilityError(f"Probability must be finite and non-negative, got {weight}")
        return weight

    def __repr__(self) -> str:
        return f"StateGraph(n_states={len(self._ids)}, start={self._start}, end={self._end})"
