"""Rich-based diagnostic echo for verbose runs.

The plugin line owns stdout, so everything here is written to stderr.
:class:`VerdictTable` shows one row per configuration domain with its
verdict, notes and diff size.
"""

from __future__ import annotations

import sys
from typing import Any

from rich.console import Console
from rich.table import Table

from db2_health.domain.enums import DriftVerdict
from db2_health.domain.values import RunResult

_VERDICT_STYLE = {
    DriftVerdict.UNCHANGED: "green",
    DriftVerdict.CHANGED: "yellow",
    DriftVerdict.RETRIEVAL_FAILED: "red",
}


class VerdictTable:
    """Console presentation of a drift run.

    Parameters
    ----------
    file:
        Output stream.  Defaults to ``sys.stderr``.
    width:
        Fixed console width; detected from the terminal when omitted.
    """

    def __init__(self, file: Any = None, width: int | None = None) -> None:
        self._console = Console(file=file or sys.stderr, width=width)

    def print_run(self, result: RunResult, title: str = "Configuration domains") -> None:
        table = Table(title=title, show_header=True, header_style="bold cyan")
        table.add_column("Domain", style="bold")
        table.add_column("Verdict", justify="center")
        table.add_column("+/-", justify="right")
        table.add_column("Notes")

        for outcome in result.outcomes:
            colour = _VERDICT_STYLE[outcome.verdict]
            delta = (
                f"+{outcome.added_lines}/-{outcome.removed_lines}"
                if outcome.changed else ""
            )
            table.add_row(
                outcome.domain.label,
                f"[{colour}]{outcome.verdict.value}[/{colour}]",
                delta,
                " ".join(outcome.notes),
            )

        self._console.print(table)
        if result.first_execution:
            self._console.print("  [dim]first execution: baseline taken[/dim]")
        if result.fatal:
            self._console.print(f"  [red]aborted:[/red] {result.fatal}")
        self._console.print(f"  [dim]elapsed:[/dim] {result.elapsed_seconds:.2f}s")

    def print_diff(self, result: RunResult) -> None:
        """Print the unified diff of every changed domain."""
        for outcome in result.outcomes:
            if not outcome.changed:
                continue
            self._console.rule(outcome.domain.label)
            for line in outcome.diff:
                if line.startswith("+") and not line.startswith("+++"):
                    self._console.print(line, style="green", markup=False, highlight=False)
                elif line.startswith("-") and not line.startswith("---"):
                    self._console.print(line, style="red", markup=False, highlight=False)
                else:
                    self._console.print(line, markup=False, highlight=False)
