"""
Built-in example models.

The gene-finding toy model distinguishes CODING from NONCODING DNA: coding
regions favour C and G, noncoding regions emit all four bases uniformly.
"""

from .graph import StateGraph

START_ID = 0
CODING_ID = 1
NONCODING_ID = 2
END_ID = 3

GENE_TRANSITIONS = {
    START_ID: [(NONCODING_ID, 0.49), (CODING_ID, 0.49), (END_ID, 0.02)],
    CODING_ID: [(CODING_ID, 0.4), (END_ID, 0.3), (NONCODING_ID, 0.3)],
    NONCODING_ID: [(NONCODING_ID, 0.3), (CODING_ID, 0.35), (END_ID, 0.35)],
}

GENE_EMISSIONS = {
    CODING_ID: {'A': 0.18, 'C': 0.32, 'G': 0.32, 'T': 0.18},
    NONCODING_ID: {'A': 0.25, 'C': 0.25, 'G': 0.25, 'T': 0.25},
}

STATE_NAMES = {
    START_ID: 'START',
    CODING_ID: 'CODING',
    NONCODING_ID: 'NONCODING',
    END_ID: 'END',
}


def build_gene_model() -> StateGraph:
    """Build and normalize the CODING/NONCODING model."""
    graph = StateGraph()
    graph.add_start_state(START_ID)
    graph.add_hidden_state(CODING_ID)
    graph.add_hidden_state(NONCODING_ID)
    graph.add_end_state(END_ID)

    for source_id, edges in GENE_TRANSITIONS.items():
        source = graph.index_of(source_id)
        for target_id, weight in edges:
            graph.add_transition(source, graph.index_of(target_id), weight)

    for state_id, table in GENE_EMISSIONS.items():
        state = graph.index_of(state_id)
        for symbol, weight in table.items():
            graph.add_emission(state, symbol, weight)

    graph.normalize_all()
    return graph
