"""
Test configuration and fixtures for hmm_graph.

Shared models and pytest configuration.
"""

import tempfile
from pathlib import Path

import pytest

from hmm_graph.config import reset_config
from hmm_graph.graph import StateGraph
from hmm_graph.models import build_gene_model


@pytest.fixture(autouse=True)
def restore_config():
    """Undo configuration changes made by a test."""
    yield
    reset_config()


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def gene_model():
    """Normalized CODING/NONCODING model."""
    return build_gene_model()


@pytest.fixture
def chain_model():
    """START -> H -> END with no self loop; H emits A or G."""
    graph = StateGraph()
    start = graph.add_start_state(10)
    hidden = graph.add_hidden_state(20)
    end = graph.add_end_state(30)

    graph.add_transition(start, hidden, 1.0)
    graph.add_transition(hidden, end, 1.0)
    graph.add_emission(hidden, 'A', 3.0)
    graph.add_emission(hidden, 'G', 1.0)
    graph.normalize_all()
    return graph


@pytest.fixture
def uniform_exit_model():
    """Three hidden states that all leave to END with probability 0.2."""
    graph = StateGraph()
    start = graph.add_start_state(0)
    first = graph.add_hidden_state(1)
    second = graph.add_hidden_state(2)
    third = graph.add_hidden_state(3)
    end = graph.add_end_state(4)

    graph.add_transition(start, first, 0.5)
    graph.add_transition(start, second, 0.3)
    graph.add_transition(start, third, 0.2)

    graph.add_transition(first, first, 0.5)
    graph.add_transition(first, second, 0.3)
    graph.add_transition(first, end, 0.2)

    graph.add_transition(second, third, 0.6)
    graph.add_transition(second, first, 0.2)
    graph.add_transition(second, end, 0.2)

    graph.add_transition(third, third, 0.1)
    graph.add_transition(third, first, 0.7)
    graph.add_transition(third, end, 0.2)

    graph.add_emission(first, 'x', 0.7)
    graph.add_emission(first, 'y', 0.3)
    graph.add_emission(second, 'x', 0.1)
    graph.add_emission(second, 'y', 0.4)
    graph.add_emission(second, 'z', 0.5)
    graph.add_emission(third, 'y', 0.5)
    graph.add_emission(third, 'z', 0.5)

    graph.normalize_all()
    return graph


class ScriptedDraws:
    """Random source replaying a fixed list of uniform draws."""

    def __init__(self, draws):
        self._draws = iter(draws)

    def random(self):
        return next(self._draws)


@pytest.fixture
def scripted_draws():
    """Factory for deterministic random sources."""
    return ScriptedDraws


def pytest_configure(config):
    """Configure pytest."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
