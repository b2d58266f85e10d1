"""
Exception hierarchy for the hmm_graph engine.

Every exception carries an ``ErrorKind`` so callers that build models
programmatically can branch on the kind of failure, and so that
``StateGraph.validate()`` can report the same kinds without raising.
"""

from enum import Enum


class ErrorKind(Enum):
    """Kinds of failure reported by the engine."""

    INVALID_TOPOLOGY = "invalid_topology"
    DUPLICATE_STATE = "duplicate_state"
    UNKNOWN_STATE = "unknown_state"
    INVALID_PROBABILITY = "invalid_probability"
    DEGENERATE_DISTRIBUTION = "degenerate_distribution"
    NOT_NORMALIZED = "not_normalized"
    UNREACHABLE_END_STATE = "unreachable_end_state"
    UNSUPPORTED_SYMBOL = "unsupported_symbol"
    INFEASIBLE_PATH = "infeasible_path"
    SAMPLING_EXHAUSTED = "sampling_exhausted"
    COMPOSITION_LIMIT = "composition_limit"


class HMMGraphError(Exception):
    """Base exception for the hmm_graph engine."""

    kind = None

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidTopologyError(HMMGraphError):
    """Edge or emission not allowed for the state's role."""
    kind = ErrorKind.INVALID_TOPOLOGY


class DuplicateStateError(InvalidTopologyError):
    """State id already present in the graph."""
    kind = ErrorKind.DUPLICATE_STATE


class UnknownStateError(HMMGraphError):
    """Handle does not refer to a state of the graph."""
    kind = ErrorKind.UNKNOWN_STATE


class InvalidProbabilityError(HMMGraphError):
    """Negative or non-finite weight, or a malformed symbol."""
    kind = ErrorKind.INVALID_PROBABILITY


class DegenerateDistributionError(HMMGraphError):
    """Probability table whose weights sum to zero."""
    kind = ErrorKind.DEGENERATE_DISTRIBUTION


class GraphNotNormalizedError(HMMGraphError):
    """Sampling requested from a table that was never normalized."""
    kind = ErrorKind.NOT_NORMALIZED


class UnreachableEndStateError(HMMGraphError):
    """END state cannot be reached from START."""
    kind = ErrorKind.UNREACHABLE_END_STATE


class UnsupportedSymbolError(HMMGraphError):
    """Observed symbol that no reachable hidden state emits."""
    kind = ErrorKind.UNSUPPORTED_SYMBOL

    def __init__(self, message: str, symbol: str = None, position: int = None):
        self.symbol = symbol
        self.position = position
        super().__init__(message)


class InfeasiblePathError(HMMGraphError):
    """No walk of the required length exists in the graph."""
    kind = ErrorKind.INFEASIBLE_PATH


class SamplingExhaustedError(HMMGraphError):
    """Weighted draw did not select any entry."""
    kind = ErrorKind.SAMPLING_EXHAUSTED


class CompositionLimitError(HMMGraphError):
    """Random walk did not reach END within the step limit."""
    kind = ErrorKind.COMPOSITION_LIMIT
