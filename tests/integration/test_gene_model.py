"""
Integration tests for the CODING/NONCODING gene model.

Cross-checks the dynamic-programming results against brute-force path
enumeration.
"""

import pytest

from hmm_graph import (
    InferenceEngine,
    compose,
    enumerate_all_paths,
    run_forward,
    run_viterbi,
    sum_path_probabilities,
)
from hmm_graph.models import CODING_ID, END_ID, NONCODING_ID, START_ID

pytestmark = pytest.mark.integration

# Forward probability of "AGCG", computed by hand from the model tables
AGCG_TOTAL_PROBABILITY = 5.045774977e-4


class TestAGCGScenario:
    """The reference scenario on the observed sequence AGCG."""

    def test_enumerates_every_walk(self, gene_model):
        paths = enumerate_all_paths(gene_model, "AGCG")

        assert len(paths) == 16
        assert len({path.states for path in paths}) == 16
        for path in paths:
            assert path.state_ids[0] == START_ID
            assert path.state_ids[-1] == END_ID
            assert set(path.state_ids[1:-1]) <= {CODING_ID, NONCODING_ID}

    def test_paths_sorted_descending(self, gene_model):
        paths = enumerate_all_paths(gene_model, "AGCG")

        for better, worse in zip(paths, paths[1:]):
            assert better.probability >= worse.probability

    def test_forward_total(self, gene_model):
        paths = enumerate_all_paths(gene_model, "AGCG")

        assert run_forward(gene_model, "AGCG") == pytest.approx(AGCG_TOTAL_PROBABILITY, rel=1e-6)
        assert run_forward(gene_model, "AGCG") == pytest.approx(
            sum_path_probabilities(paths), abs=1e-6
        )

    def test_viterbi_path(self, gene_model):
        path = run_viterbi(gene_model, "AGCG")
        best = enumerate_all_paths(gene_model, "AGCG")[0]

        assert path.state_ids == (START_ID, NONCODING_ID, CODING_ID, CODING_ID, CODING_ID, END_ID)
        assert path.probability == pytest.approx(6.7436544e-05, rel=1e-9)
        assert path.states == best.states
        assert path.probability == best.probability


@pytest.mark.parametrize("sequence", ["A", "GC", "TTT", "CGTA", "GATTAC"])
def test_forward_matches_enumeration(gene_model, sequence):
    engine = InferenceEngine(gene_model)
    total = sum_path_probabilities(engine.enumerate_all_paths(sequence))

    assert engine.run_forward(sequence) == pytest.approx(total, abs=1e-6, rel=1e-9)


@pytest.mark.parametrize("sequence", ["x", "yz", "xyz", "zzyx", "yxzxy"])
def test_viterbi_matches_enumeration_maximum(uniform_exit_model, sequence):
    engine = InferenceEngine(uniform_exit_model)
    paths = engine.enumerate_all_paths(sequence)

    assert engine.run_viterbi(sequence).probability == pytest.approx(paths[0].probability, rel=1e-9)
    assert engine.run_forward(sequence) == pytest.approx(
        sum_path_probabilities(paths), abs=1e-6, rel=1e-9
    )


def test_composed_sequences_are_scorable(gene_model):
    sequences = [compose(gene_model, random_state=seed) for seed in range(20)]

    for sequence in sequences:
        assert set(sequence) <= {'A', 'C', 'G', 'T'}
        if sequence:
            assert run_forward(gene_model, sequence) > 0.0


def test_compose_reproducible(gene_model):
    assert compose(gene_model, random_state=13) == compose(gene_model, random_state=13)


def test_compose_pinned_draws(gene_model, scripted_draws):
    # CODING emits C for 0.2 while NONCODING would emit A
    assert compose(gene_model, random_state=scripted_draws([0.1, 0.2, 0.95])) == "C"
    assert compose(gene_model, random_state=scripted_draws([0.7, 0.8, 0.8])) == "T"
