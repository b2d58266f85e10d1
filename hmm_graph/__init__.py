"""
hmm_graph: discrete Hidden Markov Models as explicit state graphs

A Python library for exact inference (Viterbi, forward, brute-force path
enumeration) and stochastic sequence generation over HMMs built state by
state.
"""

__version__ = "0.1.0"
__author__ = "hmm_graph Development Team"

from .config import get_config, set_config
from .logger import get_logger
from .exceptions import ErrorKind, HMMGraphError
from .graph import StateGraph, StateType, ValidationIssue
from .infer import (
    InferenceEngine,
    PathScorer,
    StatePath,
    compose,
    enumerate_all_paths,
    reachable_states,
    run_forward,
    run_viterbi,
    sum_path_probabilities,
)

__all__ = [
    "get_config",
    "set_config",
    "get_logger",
    "ErrorKind",
    "HMMGraphError",
    "StateGraph",
    "StateType",
    "ValidationIssue",
    "InferenceEngine",
    "PathScorer",
    "StatePath",
    "compose",
    "enumerate_all_paths",
    "reachable_states",
    "run_forward",
    "run_viterbi",
    "sum_path_probabilities",
    "__version__"
]
