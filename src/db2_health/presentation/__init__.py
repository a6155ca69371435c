"""Presentation layer: plugin output formats and verbose console echo."""

from db2_health.presentation.console import VerdictTable
from db2_health.presentation.nagios import render, render_mk, render_nagios, service_name

__all__ = [
    "VerdictTable",
    "render",
    "render_mk",
    "render_nagios",
    "service_name",
]
