"""Command-line interface for the DB2 health checks.

Every plugin shares the same option set and output protocol; only the
check class differs.  Exit codes follow the Nagios convention (0 ok,
1 warning, 2 critical, 3 unknown); usage errors exit 3 as well.

Entry points
------------
Registered as console scripts in ``pyproject.toml``::

    [project.scripts]
    check-db2-configuration = "db2_health.cli:main_configuration"
    check-db2-instance-up = "db2_health.cli:main_instance_up"
    check-db2-diag-log = "db2_health.cli:main_diag_log"

Usage examples::

    check-db2-configuration -i /home/db2inst1 -d SAMPLE
    check-db2-configuration -i /home/db2inst1 -d SAMPLE -K -vv
    check-db2-instance-up -i /home/db2inst1
    check-db2-diag-log -i /home/db2inst1 -W 20 -C 80
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Any, NoReturn

import yaml

from db2_health import __version__
from db2_health.domain.enums import Severity
from db2_health.domain.exceptions import UsageError
from db2_health.domain.values import AlertResult
from db2_health.infrastructure.config import CheckConfig, DiagLogConfig, load_config_file
from db2_health.infrastructure.logging_setup import setup_logging
from db2_health.presentation.console import VerdictTable
from db2_health.presentation.nagios import render
from db2_health.services.checks import (
    BaseCheck,
    ConfigurationCheck,
    DiagLogCheck,
    InstanceUpCheck,
)

logger = logging.getLogger(__name__)


class PluginArgumentParser(argparse.ArgumentParser):
    """``ArgumentParser`` that exits with the Nagios unknown code on errors."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(int(Severity.UNKNOWN), f"{self.prog}: error: {message}\n")


def _build_parser(prog: str, description: str, diag_thresholds: bool = False) -> PluginArgumentParser:
    """Build the option parser shared by the checks."""
    parser = PluginArgumentParser(prog=prog, description=description)
    parser.add_argument(
        "-V", "--version",
        action="version",
        version=f"{prog} {__version__}",
    )
    parser.add_argument(
        "-i", "--instance",
        type=str,
        default=None,
        help="Instance home directory, the one holding sqllib/db2profile. (required)",
    )
    parser.add_argument(
        "-d", "--database",
        type=str,
        default=None,
        help="Database name.",
    )
    parser.add_argument(
        "-D", "--directory",
        type=str,
        default=None,
        help="Root directory of the configuration snapshots.",
    )
    parser.add_argument(
        "-K", "--mk",
        action="store_true",
        default=None,
        help="Emit the check_mk local-check format.",
    )
    parser.add_argument(
        "-T", "--trace",
        action="store_true",
        default=None,
        help="Append a full trace of the run to the trace file.",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=None,
        help="Increase diagnostic output on stderr (repeatable).",
    )
    parser.add_argument(
        "-c", "--config",
        type=str,
        default=None,
        help="YAML file with default values for any option.",
    )
    if diag_thresholds:
        parser.add_argument(
            "-W", "--warning",
            dest="warning_mb",
            type=float,
            default=None,
            help="Warning threshold for the diagnostic log size, in MB. (default: 50)",
        )
        parser.add_argument(
            "-C", "--critical",
            dest="critical_mb",
            type=float,
            default=None,
            help="Critical threshold for the diagnostic log size, in MB. (default: 100)",
        )
    return parser


def _merge_config(
    args: argparse.Namespace,
    config_cls: type[CheckConfig],
    require_database: bool,
) -> CheckConfig:
    """Merge the YAML file (if any) with the command line and validate.

    Raises
    ------
    UsageError
        The config file is unreadable or the merged values are invalid.
    """
    values: dict[str, Any] = {}
    if args.config:
        try:
            values.update(load_config_file(args.config))
        except (OSError, ValueError, yaml.YAMLError) as exc:
            raise UsageError(f"cannot read config file {args.config}: {exc}") from exc

    for key, value in vars(args).items():
        if key != "config" and value is not None:
            values[key] = value

    try:
        config = config_cls.from_dict(values)
        config.validate(require_database=require_database)
    except (TypeError, ValueError) as exc:
        raise UsageError(str(exc)) from exc
    return config


def _load_config(
    parser: PluginArgumentParser,
    args: argparse.Namespace,
    config_cls: type[CheckConfig],
    require_database: bool,
) -> CheckConfig:
    try:
        return _merge_config(args, config_cls, require_database)
    except UsageError as exc:
        parser.error(exc.message)


def _run(
    check_cls: type[BaseCheck],
    config_cls: type[CheckConfig],
    description: str,
    argv: list[str] | None,
    require_database: bool = False,
) -> int:
    parser = _build_parser(
        check_cls.name,
        description,
        diag_thresholds=config_cls is DiagLogConfig,
    )
    args = parser.parse_args(argv)
    config = _load_config(parser, args, config_cls, require_database)

    check = check_cls(config)
    trace_file = config.resolved_trace_file(check_cls.name) if config.trace else None
    try:
        setup_logging(config.verbose, trace_file)
    except OSError as exc:
        setup_logging(config.verbose)
        logger.error("Cannot open trace file %s: %s", trace_file, exc)
        result = AlertResult.unknown(f"Cannot open trace file {trace_file}: {exc.strerror}.")
    else:
        logger.debug("Configuration: %s", config.to_dict())
        try:
            result = check.run()
        except Exception as exc:
            logger.exception("Unexpected error in %s", check_cls.name)
            result = AlertResult.unknown(f"Unexpected error: {exc}")

    if isinstance(check, ConfigurationCheck) and check.last_run is not None:
        if config.verbose >= 2:
            VerdictTable().print_run(check.last_run)
        if config.verbose >= 3:
            VerdictTable().print_diff(check.last_run)

    print(render(result, check_cls.name, check.target, mk=config.mk))
    logger.debug("Exit code %d", result.exit_code)
    return result.exit_code


# =========================================================================
# Entry points
# =========================================================================

def run_configuration(argv: list[str] | None = None) -> int:
    return _run(
        ConfigurationCheck,
        CheckConfig,
        "Detect configuration drift of a DB2 instance and database.",
        argv,
        require_database=True,
    )


def run_instance_up(argv: list[str] | None = None) -> int:
    return _run(
        InstanceUpCheck,
        CheckConfig,
        "Check that every partition of a DB2 instance is available.",
        argv,
    )


def run_diag_log(argv: list[str] | None = None) -> int:
    return _run(
        DiagLogCheck,
        DiagLogConfig,
        "Check the size of the DB2 diagnostic log.",
        argv,
    )


def main_configuration(argv: list[str] | None = None) -> None:
    """``check-db2-configuration`` entry point."""
    sys.exit(run_configuration(argv))


def main_instance_up(argv: list[str] | None = None) -> None:
    """``check-db2-instance-up`` entry point."""
    sys.exit(run_instance_up(argv))


def main_diag_log(argv: list[str] | None = None) -> None:
    """``check-db2-diag-log`` entry point."""
    sys.exit(run_diag_log(argv))
