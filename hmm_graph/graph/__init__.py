"""
State graph module.

Arena-backed storage of HMM states, transitions and emissions.
"""

from .model import StateGraph, ValidationIssue
from .state import StateType, StateView

__all__ = [
    "StateGraph",
    "StateType",
    "StateView",
    "ValidationIssue"
]
