"""
Tests for the hmm-graph command-line interface.
"""

import pytest
from typer.testing import CliRunner

from hmm_graph.cli.errors import (
    EXIT_CODES,
    HMMGraphCLIError,
    InputError,
    exit_code_for,
    format_error_message,
    validate_sequence,
)
from hmm_graph.cli.main import app
from hmm_graph.exceptions import DegenerateDistributionError, UnsupportedSymbolError


@pytest.fixture
def cli_runner():
    """Create CLI runner for testing."""
    return CliRunner()


class TestCommands:
    """Test each command against the built-in gene model."""

    def test_help(self, cli_runner):
        result = cli_runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "viterbi" in result.output
        assert "compose" in result.output

    def test_viterbi(self, cli_runner):
        result = cli_runner.invoke(app, ["viterbi", "AGCG"])

        assert result.exit_code == 0
        assert "START -> NONCODING -> CODING -> CODING -> CODING -> END" in result.output

    def test_forward(self, cli_runner):
        result = cli_runner.invoke(app, ["forward", "AGCG"])

        assert result.exit_code == 0
        assert "HMM total probability: 0.000505." in result.output

    def test_paths(self, cli_runner):
        result = cli_runner.invoke(app, ["paths", "AGCG", "--top", "3"])

        assert result.exit_code == 0
        assert "total probability = 0.000505" in result.output
        assert "16 total" in result.output

    def test_compose_is_reproducible(self, cli_runner):
        first = cli_runner.invoke(app, ["compose", "-n", "5", "--seed", "13"])
        second = cli_runner.invoke(app, ["compose", "-n", "5", "--seed", "13"])

        assert first.exit_code == 0
        assert first.output == second.output

    def test_demo(self, cli_runner):
        result = cli_runner.invoke(app, ["demo"])

        assert result.exit_code == 0
        assert "Composing random walks" in result.output
        assert "Viterbi path" in result.output

    def test_version(self, cli_runner):
        result = cli_runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert "0.1.0" in result.output


class TestErrorHandling:
    """Test error reporting and exit codes."""

    def test_unsupported_symbol_exit_code(self, cli_runner):
        result = cli_runner.invoke(app, ["viterbi", "AXG"])

        assert result.exit_code == EXIT_CODES["input_error"]
        assert "UnsupportedSymbolError" in result.output

    def test_empty_sequence_rejected(self, cli_runner):
        result = cli_runner.invoke(app, ["forward", ""])

        assert result.exit_code == EXIT_CODES["input_error"]
        assert "empty" in result.output

    def test_validate_sequence(self):
        assert validate_sequence("ACGT") == "ACGT"

        with pytest.raises(InputError) as exc_info:
            validate_sequence("AC GT")
        assert len(exc_info.value.suggestions) > 0

    def test_exit_codes_by_kind(self):
        assert exit_code_for(UnsupportedSymbolError("bad")) == EXIT_CODES["input_error"]
        assert exit_code_for(DegenerateDistributionError("zero")) == EXIT_CODES["model_error"]
        assert exit_code_for(HMMGraphCLIError("custom", exit_code=7)) == 7
        assert exit_code_for(RuntimeError("boom")) == EXIT_CODES["general_error"]

    def test_format_error_message_includes_suggestions(self):
        message = format_error_message(UnsupportedSymbolError("bad symbol"), "viterbi")

        assert "Error during viterbi" in message
        assert "Suggestions" in message
