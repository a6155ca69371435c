"""Tests for the rich verdict table."""

from __future__ import annotations

import io

from db2_health.domain.catalog import REGISTRY, TABLES
from db2_health.domain.enums import DriftVerdict
from db2_health.domain.values import DomainOutcome, RunResult
from db2_health.presentation.console import VerdictTable


def _result() -> RunResult:
    return RunResult(
        outcomes=(
            DomainOutcome(
                domain=REGISTRY,
                verdict=DriftVerdict.CHANGED,
                diff=("--- registry@1", "+++ registry@current", "-[i] A=1", "+[i] A=2"),
            ),
            DomainOutcome(
                domain=TABLES,
                verdict=DriftVerdict.RETRIEVAL_FAILED,
                notes=("Could not retrieve Tables.",),
            ),
        ),
        elapsed_seconds=0.5,
    )


def test_print_run_lists_domains_and_verdicts() -> None:
    buffer = io.StringIO()
    VerdictTable(file=buffer, width=200).print_run(_result())
    output = buffer.getvalue()
    assert "Registry variables" in output
    assert "changed" in output
    assert "retrieval-failed" in output
    assert "+1/-1" in output
    assert "elapsed" in output


def test_print_diff_shows_changed_lines_only() -> None:
    buffer = io.StringIO()
    VerdictTable(file=buffer, width=200).print_diff(_result())
    output = buffer.getvalue()
    assert "+[i] A=2" in output
    assert "-[i] A=1" in output
    assert "Could not retrieve" not in output
