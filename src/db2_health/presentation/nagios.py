"""Plugin output formats.

Standard Nagios format::

    <summary>|<performance>
    <long text line>...

check_mk local-check format (``--mk``), always a single line::

    <code> <check-name>-<instance>-<database> <performance|-> <summary>
"""

from __future__ import annotations

from db2_health.domain.values import AlertResult, Target


def service_name(check_name: str, target: Target) -> str:
    parts = [check_name, target.instance_name]
    if target.database:
        parts.append(target.database)
    return "-".join(parts)


def render_nagios(result: AlertResult) -> str:
    """Status line plus optional long-text lines."""
    first_line = result.summary
    if result.perfdata:
        first_line += f"|{result.perfdata}"
    return "\n".join([first_line, *result.long_text])


def render_mk(result: AlertResult, check_name: str, target: Target) -> str:
    """Single check_mk local-check line."""
    perf = result.perfdata or "-"
    summary = result.summary
    if result.long_text:
        summary += " " + " ".join(result.long_text)
    return f"{result.exit_code} {service_name(check_name, target)} {perf} {summary}"


def render(result: AlertResult, check_name: str, target: Target, mk: bool = False) -> str:
    if mk:
        return render_mk(result, check_name, target)
    return render_nagios(result)
