"""
Exact inference and stochastic generation over a ``StateGraph``.

The engine assigns every state reachable from START a column index
(0 = START, k-1 = END, hidden states in between in ascending handle order)
and fills ``(n + 1) x k`` dynamic-programming matrices bottom-up, row by
row. Row ``i`` holds the probabilities after consuming the first ``i``
observed symbols.
"""

import math
from typing import FrozenSet, List, Optional, Sequence, Tuple, Union

import numpy as np

from ..config import get_config
from ..exceptions import (
    CompositionLimitError,
    InfeasiblePathError,
    InvalidProbabilityError,
    InvalidTopologyError,
    UnreachableEndStateError,
    UnsupportedSymbolError,
)
from ..graph import StateGraph
from ..logger import get_inference_logger, get_sampling_logger
from .path import StatePath

logger = get_inference_logger()
sampling_logger = get_sampling_logger()

# Marks matrix cells that have not been computed yet
UNSET_PROBABILITY = -1.0

RandomState = Union[None, int, np.random.Generator]

# (parent column, transition probability parent -> state) for every column
ParentTable = List[List[Tuple[int, float]]]


class InferenceEngine:
    """
    Viterbi, forward, brute-force enumeration and sampling over one graph.

    The graph must be fully built and normalized before any call; the
    engine never mutates it. The random source is only consumed by
    ``compose`` and is not safe for concurrent use.
    """

    def __init__(self, graph: StateGraph, random_state: RandomState = None):
        """
        Args:
            graph: Normalized state graph
            random_state: Seed, ``numpy.random.Generator`` or any object with
                a ``random()`` method returning uniform draws in [0, 1),
                used by ``compose``; defaults to ``sampling.random_seed``
                from config
        """
        self.graph = graph
        if random_state is None:
            random_state = get_config('sampling', 'random_seed')
        if hasattr(random_state, 'random'):
            self._random = random_state
        else:
            self._random = np.random.default_rng(random_state)

    # ------------------------------------------------------------------
    # Reachability and indexing
    # ------------------------------------------------------------------

    def reachable_states(self) -> FrozenSet[int]:
        """All states reachable from START by following transitions."""
        if self.graph.start is None:
            raise InvalidTopologyError("The model has no START state")
        return self.graph.reachable_from(self.graph.start)

    def index_map(self) -> List[int]:
        """
        Column index to state handle for one algorithm run.

        Raises:
            UnreachableEndStateError: If END cannot be reached from START
        """
        graph = self.graph
        reachable = self.reachable_states()
        if graph.end is None or graph.end not in reachable:
            raise UnreachableEndStateError("End state is unreachable.")

        hidden = sorted(h for h in reachable if h != graph.start and h != graph.end)
        return [graph.start] + hidden + [graph.end]

    def _prepare(self, observed: str) -> List[int]:
        if not isinstance(observed, str):
            raise TypeError(f"Observed sequence must be a string, got {type(observed).__name__}")

        columns = self.index_map()
        alphabet = self.graph.alphabet(columns[1:-1])

        for position, symbol in enumerate(observed):
            if symbol not in alphabet:
                raise UnsupportedSymbolError(
                    f"Symbol {symbol!r} at position {position} is not emitted by any reachable state",
                    symbol=symbol, position=position
                )
        return columns

    def _parent_table(self, columns: Sequence[int]) -> ParentTable:
        graph = self.graph
        column_of = {handle: column for column, handle in enumerate(columns)}
        parents = []

        for handle in columns:
            entries = []
            for parent in sorted(graph.incoming(handle)):
                # Unreachable parents never carry probability mass
                if parent in column_of:
                    entries.append((column_of[parent], graph.transition_probability(parent, handle)))
            parents.append(entries)

        return parents

    # ------------------------------------------------------------------
    # Dynamic programming
    # ------------------------------------------------------------------

    def _fill_matrix(self, observed: str, columns: Sequence[int], parents: ParentTable,
                     maximize: bool) -> Tuple[np.ndarray, np.ndarray]:
        """
        Fill the Viterbi (``maximize``) or forward matrix bottom-up.

        Returns:
            Tuple of:
            - matrix: Probabilities [n + 1, k]
            - feasible: Whether any walk of ``i`` hidden steps from START
              ends in the cell's state [n + 1, k]
        """
        n = len(observed)
        k = len(columns)

        matrix = np.full((n + 1, k), UNSET_PROBABILITY)
        feasible = np.zeros((n + 1, k), dtype=bool)

        # Base case: START with no symbols consumed
        matrix[0, :] = 0.0
        matrix[0, 0] = 1.0
        feasible[0, 0] = True

        # START and END never hold mass once symbols are consumed
        matrix[1:, 0] = 0.0
        matrix[1:, k - 1] = 0.0

        for i in range(1, n + 1):
            symbol = observed[i - 1]
            for h in range(1, k - 1):
                contributions = [
                    matrix[i - 1, column] * transition
                    for column, transition in parents[h]
                    if feasible[i - 1, column]
                ]
                if not contributions:
                    matrix[i, h] = 0.0
                    continue

                feasible[i, h] = True
                best = max(contributions) if maximize else math.fsum(contributions)
                matrix[i, h] = self.graph.emission_probability(columns[h], symbol) * best

        self._check_matrix(matrix)
        return matrix, feasible

    def _check_matrix(self, matrix: np.ndarray) -> None:
        tolerance = get_config('model', 'tolerance')
        if np.any(matrix == UNSET_PROBABILITY):
            raise InvalidProbabilityError("Dynamic-programming matrix has unset cells")
        if np.any(matrix < 0.0) or np.any(matrix > 1.0 + tolerance):
            raise InvalidProbabilityError(
                "Dynamic-programming matrix left the [0, 1] range; normalize the graph first"
            )

    def viterbi_matrix(self, observed: str) -> np.ndarray:
        """Full Viterbi matrix [len(observed) + 1, k] for ``observed``."""
        columns = self._prepare(observed)
        matrix, _ = self._fill_matrix(observed, columns, self._parent_table(columns), maximize=True)
        return matrix

    def forward_matrix(self, observed: str) -> np.ndarray:
        """Full forward matrix [len(observed) + 1, k] for ``observed``."""
        columns = self._prepare(observed)
        matrix, _ = self._fill_matrix(observed, columns, self._parent_table(columns), maximize=False)
        return matrix

    # ------------------------------------------------------------------
    # Viterbi
    # ------------------------------------------------------------------

    def run_viterbi(self, observed: str) -> StatePath:
        """
        Most probable state path for ``observed``.

        The final hidden state is the one with the highest Viterbi value in
        the last row; the cost of the final transition into END is not part
        of that choice. A zero-probability result is still returned as long
        as some walk of the right length exists.

        Args:
            observed: Observed symbol sequence

        Returns:
            StatePath from START to END inclusive

        Raises:
            UnreachableEndStateError: If END cannot be reached from START
            UnsupportedSymbolError: If a symbol is emitted by no reachable state
            InfeasiblePathError: If no walk of ``len(observed)`` hidden steps exists
        """
        graph = self.graph
        columns = self._prepare(observed)
        n = len(observed)

        if n == 0:
            return StatePath.from_states(graph, [graph.start, graph.end], observed)

        parents = self._parent_table(columns)
        matrix, feasible = self._fill_matrix(observed, columns, parents, maximize=True)

        best_column = None
        for h in range(1, len(columns) - 1):
            if not feasible[n, h]:
                continue
            if best_column is None or matrix[n, h] > matrix[n, best_column]:
                best_column = h

        if best_column is None:
            raise InfeasiblePathError(
                f"No walk of {n} hidden steps starts at the START state"
            )

        # Traceback: row 0 only admits START, so the walk ends there
        reversed_path = [columns[best_column]]
        current = best_column
        for i in range(n, 0, -1):
            current = self._best_parent(matrix, feasible, parents[current], i - 1)
            reversed_path.append(columns[current])

        states = reversed_path[::-1] + [graph.end]
        path = StatePath.from_states(graph, states, observed)

        logger.debug(f"Viterbi path for {n} symbols: {path}")
        return path

    @staticmethod
    def _best_parent(matrix: np.ndarray, feasible: np.ndarray,
                     parents: List[Tuple[int, float]], row: int) -> int:
        best_column = None
        best_probability = -math.inf

        for column, transition in parents:
            if not feasible[row, column]:
                continue
            probability = matrix[row, column] * transition
            if best_probability < probability:
                best_probability = probability
                best_column = column

        return best_column

    # ------------------------------------------------------------------
    # Forward
    # ------------------------------------------------------------------

    def run_forward(self, observed: str) -> float:
        """
        Total probability of ``observed`` over all state paths.

        The direct START -> END edge is excluded from the final sum, so an
        empty observation yields 0.0 rather than the weight of that edge.

        Raises:
            UnreachableEndStateError: If END cannot be reached from START
            UnsupportedSymbolError: If a symbol is emitted by no reachable state
        """
        graph = self.graph
        columns = self._prepare(observed)
        matrix, _ = self._fill_matrix(observed, columns, self._parent_table(columns), maximize=False)

        column_of = {handle: column for column, handle in enumerate(columns)}
        last_row = len(observed)

        probability = math.fsum(
            matrix[last_row, column_of[parent]] * graph.transition_probability(parent, graph.end)
            for parent in graph.incoming(graph.end)
            if parent != graph.start and parent in column_of
        )

        logger.debug(f"Forward probability for {last_row} symbols: {probability}")
        return probability

    # ------------------------------------------------------------------
    # Brute force
    # ------------------------------------------------------------------

    def enumerate_all_paths(self, observed: str) -> List[StatePath]:
        """
        Every START..END walk with ``len(observed)`` hidden steps, scored.

        Exponential in sequence length and branching factor; intended for
        validating the dynamic-programming results on small inputs.

        Returns:
            Paths sorted from most to least probable
        """
        graph = self.graph
        self._prepare(observed)

        warning_length = get_config('inference', 'enumeration_warning_length')
        if warning_length is not None and len(observed) > warning_length:
            logger.warning(
                f"Enumerating all paths for a sequence of length {len(observed)}; "
                f"runtime grows exponentially"
            )

        walks = []
        self._depth_first_search(walks, [graph.start], len(observed) + 2)

        paths = [StatePath.from_states(graph, walk, observed) for walk in walks]
        paths.sort(reverse=True)

        logger.debug(f"Enumerated {len(paths)} paths for {len(observed)} symbols")
        return paths

    def _depth_first_search(self, walks: List[Tuple[int, ...]], current_path: List[int],
                            expected_size: int) -> None:
        current_state = current_path[-1]

        if len(current_path) == expected_size:
            if current_state == self.graph.end:
                walks.append(tuple(current_path))
            return

        for follower in self.graph.transitions(current_state):
            current_path.append(follower)
            self._depth_first_search(walks, current_path, expected_size)
            current_path.pop()

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def compose(self, max_steps: Optional[int] = None) -> str:
        """
        Generate a random observation sequence by walking from START to END.

        Args:
            max_steps: Maximum number of transitions before giving up;
                defaults to ``sampling.max_steps`` from config

        Raises:
            UnreachableEndStateError: If END cannot be reached from START
            GraphNotNormalizedError: If a visited state was never normalized
            SamplingExhaustedError: If a draw selects no entry
            CompositionLimitError: If END is not reached within ``max_steps``
        """
        graph = self.graph
        self.index_map()

        if max_steps is None:
            max_steps = get_config('sampling', 'max_steps')

        symbols = []
        current_state = graph.start
        steps = 0

        while True:
            if max_steps is not None and steps >= max_steps:
                raise CompositionLimitError(
                    f"END state not reached within {max_steps} transitions"
                )

            current_state = graph.sample_transition(current_state, self._random.random())
            steps += 1

            if current_state == graph.end:
                sequence = "".join(symbols)
                sampling_logger.debug(f"Composed sequence of length {len(sequence)} in {steps} transitions")
                return sequence

            symbols.append(graph.sample_emission(current_state, self._random.random()))


def reachable_states(graph: StateGraph) -> FrozenSet[int]:
    """States reachable from the START state of ``graph``."""
    return InferenceEngine(graph).reachable_states()


def run_viterbi(graph: StateGraph, observed: str) -> StatePath:
    """Most probable state path of ``graph`` for ``observed``."""
    return InferenceEngine(graph).run_viterbi(observed)


def run_forward(graph: StateGraph, observed: str) -> float:
    """Total probability of ``observed`` under ``graph``."""
    return InferenceEngine(graph).run_forward(observed)


def enumerate_all_paths(graph: StateGraph, observed: str) -> List[StatePath]:
    """All scored paths of ``graph`` for ``observed``, most probable first."""
    return InferenceEngine(graph).enumerate_all_paths(observed)


def compose(graph: StateGraph, random_state: RandomState = None,
            max_steps: Optional[int] = None) -> str:
    """Random observation sequence generated by ``graph``."""
    return InferenceEngine(graph, random_state).compose(max_steps)
