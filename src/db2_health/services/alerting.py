"""Alert aggregator: from a drift run to a single plugin status.

Severity rules:

* first execution -> ok, counter :data:`BASELINE_COUNTER`
* every domain unchanged -> ok, counter :data:`NO_DRIFT_COUNTER`
* any domain changed -> warning, counter ``1 + changed``
* connectivity or store-write failure -> unknown, no counter

Retrieval failures never change the severity; their notes are appended to
the summary.
"""

from __future__ import annotations

from db2_health.domain.enums import Severity
from db2_health.domain.values import AlertResult, RunResult

BASELINE_COUNTER = 0
NO_DRIFT_COUNTER = 1

FIRST_EXECUTION_SUMMARY = "First execution, configuration snapshot taken."
UNCHANGED_SUMMARY = "Configuration has not changed."
CHANGED_PREFIX = "Configuration has changed:"


class AlertAggregator:
    """Reduces a :class:`RunResult` into an :class:`AlertResult`."""

    def aggregate(self, result: RunResult) -> AlertResult:
        notes = result.notes

        if result.fatal is not None:
            return AlertResult(
                severity=Severity.UNKNOWN,
                summary=_join(result.fatal, notes),
            )

        if result.first_execution:
            return AlertResult(
                severity=Severity.OK,
                summary=_join(FIRST_EXECUTION_SUMMARY, notes),
                performance=BASELINE_COUNTER,
            )

        changed = [o for o in result.outcomes if o.changed]
        if not changed:
            return AlertResult(
                severity=Severity.OK,
                summary=_join(UNCHANGED_SUMMARY, notes),
                performance=NO_DRIFT_COUNTER,
            )

        names = ", ".join(o.domain.label for o in changed)
        long_text = tuple(
            f"{o.domain.label}: +{o.added_lines} -{o.removed_lines} lines"
            for o in changed
        )
        return AlertResult(
            severity=Severity.WARNING,
            summary=_join(f"{CHANGED_PREFIX} {names}.", notes),
            performance=NO_DRIFT_COUNTER + len(changed),
            long_text=long_text,
        )


def _join(headline: str, notes: tuple[str, ...]) -> str:
    return " ".join((headline,) + notes)
