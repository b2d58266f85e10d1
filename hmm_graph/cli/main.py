"""
Main CLI application for hmm_graph.

Runs the inference and generation operations against the built-in
CODING/NONCODING gene model.
"""

import sys
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..infer import InferenceEngine, StatePath, sum_path_probabilities
from ..logger import set_log_level
from ..models import STATE_NAMES, build_gene_model
from .errors import EXIT_CODES, handle_cli_error, validate_sequence

console = Console()

DEFAULT_SEED = 13
DEFAULT_SEQUENCE = "AGCG"

app = typer.Typer(
    name="hmm-graph",
    help="Exact inference and sampling over Hidden Markov Model state graphs",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True
)


def describe_path(path: StatePath) -> str:
    """Readable state names joined by arrows."""
    return " -> ".join(STATE_NAMES.get(state_id, str(state_id)) for state_id in path.state_ids)


def _print_compositions(engine: InferenceEngine, count: int) -> None:
    table = Table(title="Composed sequences")
    table.add_column("#", justify="right")
    table.add_column("Sequence")

    for line_number in range(1, count + 1):
        table.add_row(str(line_number), engine.compose() or "[dim](empty)[/dim]")

    console.print(table)


def _print_paths(engine: InferenceEngine, sequence: str, top: Optional[int]) -> None:
    paths = engine.enumerate_all_paths(sequence)
    total = sum_path_probabilities(paths)

    console.print(
        f"Brute-force path inference for sequence \"{sequence}\", "
        f"total probability = {total:.6f}."
    )

    table = Table(title=f"State paths ({len(paths)} total)")
    table.add_column("#", justify="right")
    table.add_column("Path")
    table.add_column("Probability", justify="right")

    shown = paths if top is None else paths[:top]
    for line_number, path in enumerate(shown, start=1):
        table.add_row(str(line_number), describe_path(path), f"{path.probability:.6e}")

    console.print(table)


@app.command("compose")
def compose_command(
    count: int = typer.Option(10, "--count", "-n", min=1, help="Number of sequences to generate"),
    seed: int = typer.Option(DEFAULT_SEED, "--seed", "-s", help="Random seed")
):
    """Generate random observation sequences from the gene model."""
    try:
        engine = InferenceEngine(build_gene_model(), random_state=seed)
        _print_compositions(engine, count)
    except typer.Exit:
        raise
    except Exception as e:
        handle_cli_error(e, "compose")


@app.command("paths")
def paths_command(
    sequence: str = typer.Argument(DEFAULT_SEQUENCE, help="Observed symbol sequence"),
    top: Optional[int] = typer.Option(None, "--top", "-t", min=1, help="Only show the N most probable paths")
):
    """Enumerate every state path for SEQUENCE, most probable first."""
    try:
        sequence = validate_sequence(sequence)
        _print_paths(InferenceEngine(build_gene_model()), sequence, top)
    except typer.Exit:
        raise
    except Exception as e:
        handle_cli_error(e, "paths")


@app.command("viterbi")
def viterbi_command(
    sequence: str = typer.Argument(DEFAULT_SEQUENCE, help="Observed symbol sequence")
):
    """Most probable state path for SEQUENCE."""
    try:
        sequence = validate_sequence(sequence)
        path = InferenceEngine(build_gene_model()).run_viterbi(sequence)
        console.print(f"Viterbi path: {describe_path(path)}")
        console.print(f"Probability: {path.probability:.6e}")
    except typer.Exit:
        raise
    except Exception as e:
        handle_cli_error(e, "viterbi")


@app.command("forward")
def forward_command(
    sequence: str = typer.Argument(DEFAULT_SEQUENCE, help="Observed symbol sequence")
):
    """Total probability of SEQUENCE over all state paths."""
    try:
        sequence = validate_sequence(sequence)
        probability = InferenceEngine(build_gene_model()).run_forward(sequence)
        console.print(f"HMM total probability: {probability:.6f}.")
    except typer.Exit:
        raise
    except Exception as e:
        handle_cli_error(e, "forward")


@app.command("demo")
def demo_command(
    sequence: str = typer.Argument(DEFAULT_SEQUENCE, help="Observed symbol sequence"),
    seed: int = typer.Option(DEFAULT_SEED, "--seed", "-s", help="Random seed")
):
    """Compose ten sequences, then compare brute force, forward and Viterbi."""
    try:
        sequence = validate_sequence(sequence)
        engine = InferenceEngine(build_gene_model(), random_state=seed)

        console.print("--- Composing random walks ---")
        _print_compositions(engine, 10)

        _print_paths(engine, sequence, None)
        console.print(f"HMM total probability: {engine.run_forward(sequence):.6f}.")

        path = engine.run_viterbi(sequence)
        console.print(f"Viterbi path: {describe_path(path)} (p = {path.probability:.6e})")
    except typer.Exit:
        raise
    except Exception as e:
        handle_cli_error(e, "demo")


@app.command("version")
def show_version():
    """Show hmm_graph version information."""
    from .. import __version__

    console.print(Panel.fit(
        f"[bold]hmm_graph Version {__version__}[/bold]\n"
        f"Hidden Markov Model state-graph inference\n"
        f"Python {sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
        border_style="blue"
    ))


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging"
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress all log output except errors"
    )
):
    """
    hmm_graph: exact inference and sampling over HMM state graphs

    \b
    Quick Start:
    1. Sample sequences:   hmm-graph compose -n 5
    2. Rank all paths:     hmm-graph paths AGCG
    3. Best path:          hmm-graph viterbi AGCG
    4. Total probability:  hmm-graph forward AGCG
    """
    if quiet:
        set_log_level('ERROR')
    elif verbose:
        set_log_level('DEBUG')
    else:
        set_log_level('INFO')


def cli_main():
    """Main entry point for CLI with error handling."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(EXIT_CODES["general_error"])


if __name__ == "__main__":
    cli_main()
