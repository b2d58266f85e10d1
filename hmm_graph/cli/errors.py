"""
Error handling for CLI commands.

Turns engine and CLI errors into formatted messages with suggestions and
a non-zero exit code.
"""

import traceback
from typing import List, Optional
import logging

import typer
from rich.console import Console

from ..exceptions import ErrorKind, HMMGraphError

console = Console()
logger = logging.getLogger(__name__)


EXIT_CODES = {
    "success": 0,
    "general_error": 1,
    "invalid_usage": 2,
    "model_error": 11,
    "input_error": 12,
    "config_error": 13
}

# Exit code per engine error kind; anything else is a general error
KIND_EXIT_CODES = {
    ErrorKind.INVALID_TOPOLOGY: EXIT_CODES["model_error"],
    ErrorKind.DUPLICATE_STATE: EXIT_CODES["model_error"],
    ErrorKind.UNKNOWN_STATE: EXIT_CODES["model_error"],
    ErrorKind.INVALID_PROBABILITY: EXIT_CODES["model_error"],
    ErrorKind.DEGENERATE_DISTRIBUTION: EXIT_CODES["model_error"],
    ErrorKind.NOT_NORMALIZED: EXIT_CODES["model_error"],
    ErrorKind.UNREACHABLE_END_STATE: EXIT_CODES["model_error"],
    ErrorKind.UNSUPPORTED_SYMBOL: EXIT_CODES["input_error"],
    ErrorKind.INFEASIBLE_PATH: EXIT_CODES["input_error"],
}


class HMMGraphCLIError(Exception):
    """Base exception for CLI-specific errors."""

    def __init__(self, message: str, exit_code: int = 1, suggestions: Optional[list] = None):
        self.message = message
        self.exit_code = exit_code
        self.suggestions = suggestions or []
        super().__init__(message)


class InputError(HMMGraphCLIError):
    """Invalid command-line input."""

    def __init__(self, message: str, suggestions: Optional[list] = None):
        super().__init__(message, EXIT_CODES["input_error"], suggestions)


def suggestions_for(error: Exception) -> List[str]:
    """Suggestions attached to ``error`` or derived from its kind."""
    if getattr(error, 'suggestions', None):
        return list(error.suggestions)

    kind = getattr(error, 'kind', None)
    if kind is ErrorKind.UNSUPPORTED_SYMBOL:
        return ["Use only symbols the model emits (A, C, G, T for the gene model)"]
    if kind is ErrorKind.INFEASIBLE_PATH:
        return ["Try a shorter sequence"]
    if kind is ErrorKind.COMPOSITION_LIMIT:
        return ["Raise sampling.max_steps or check that END is reachable from every state"]
    return []


def format_error_message(error: Exception, operation: str, debug: bool = False) -> str:
    """Format error message with context and suggestions."""
    error_type = type(error).__name__

    message_parts = [
        f"[red]Error during {operation}:[/red]",
        f"[red]{error_type}: {error}[/red]"
    ]

    suggestions = suggestions_for(error)
    if suggestions:
        message_parts.append("")
        message_parts.append("[yellow]Suggestions:[/yellow]")
        for suggestion in suggestions:
            message_parts.append(f"  • {suggestion}")

    if debug:
        message_parts.append("")
        message_parts.append("[dim]Debug information:[/dim]")
        message_parts.append(f"[dim]{traceback.format_exc()}[/dim]")

    return "\n".join(message_parts)


def exit_code_for(error: Exception) -> int:
    if isinstance(error, HMMGraphCLIError):
        return error.exit_code
    if isinstance(error, HMMGraphError):
        return KIND_EXIT_CODES.get(error.kind, EXIT_CODES["general_error"])
    return EXIT_CODES["general_error"]


def handle_cli_error(error: Exception, operation: str, debug: bool = False) -> None:
    """Print ``error`` and exit with the matching code."""
    console.print(format_error_message(error, operation, debug))
    console.print(f"\n[dim]For more help, run: hmm-graph {operation.split()[0]} --help[/dim]")

    logger.error(f"CLI error in {operation}: {error}", exc_info=debug)

    raise typer.Exit(exit_code_for(error))


def validate_sequence(sequence: str) -> str:
    """Reject empty or whitespace-containing observation sequences."""
    if not sequence:
        raise InputError(
            "Observed sequence is empty",
            suggestions=["Pass at least one symbol, e.g. AGCG"]
        )
    if any(symbol.isspace() for symbol in sequence):
        raise InputError(
            f"Observed sequence contains whitespace: {sequence!r}",
            suggestions=["Remove spaces between symbols, e.g. AGCG"]
        )
    return sequence
