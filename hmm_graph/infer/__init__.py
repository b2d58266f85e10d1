"""
Inference module for state graphs.

Exact Viterbi and forward inference, brute-force path enumeration with
joint-probability scoring, and random sequence generation.
"""

from .engine import (
    InferenceEngine,
    compose,
    enumerate_all_paths,
    reachable_states,
    run_forward,
    run_viterbi,
)
from .path import PathScorer, StatePath, sum_path_probabilities

__all__ = [
    'InferenceEngine',
    'PathScorer',
    'StatePath',
    'compose',
    'enumerate_all_paths',
    'reachable_states',
    'run_forward',
    'run_viterbi',
    'sum_path_probabilities'
]
