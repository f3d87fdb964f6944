"""
Command-line entry point.

Runs a script (`neuroshell script.neuro args...`), a list of `-c` commands,
or an interactive line loop when neither is given.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Callable

from neuroshell.core.app.application_builder import build_engine
from neuroshell.core.common.exceptions import ConfigurationError, NeuroShellError
from neuroshell.core.common.logging_utils import (
    configure_logging_with_environment_tagging,
    install_api_key_redaction_filter,
)
from neuroshell.core.config.app_config import AppConfig, LogLevel, load_config
from neuroshell.core.execution.state_machine import ExecutionEngine
from neuroshell.core.services.script_loader import script_command_line

logger = logging.getLogger(__name__)

PROMPT = "neuro> "
EXIT_COMMANDS = frozenset({"\\exit", "\\quit"})


def build_cli_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="neuroshell",
        description="Interactive shell for scripted LLM conversations",
    )
    parser.add_argument(
        "script",
        nargs="?",
        help="Script file to run (e.g. setup.neuro)",
    )
    parser.add_argument(
        "args",
        nargs=argparse.REMAINDER,
        help="Arguments passed to the script as _1, _2, ...",
    )
    parser.add_argument(
        "-c",
        "--command",
        dest="commands",
        action="append",
        default=[],
        metavar="LINE",
        help="Run a command line; can be given multiple times",
    )
    parser.add_argument("--config", dest="config_file", metavar="PATH")
    parser.add_argument(
        "--log-level",
        dest="log_level",
        choices=[level.value for level in LogLevel],
        type=str.upper,
        help="Set the logging level",
    )
    parser.add_argument("--log-file", dest="log_file", metavar="PATH")
    parser.add_argument(
        "--no-interactive",
        dest="no_interactive",
        action="store_true",
        help="Never start the interactive prompt",
    )
    return parser


def parse_cli_args(argv: list[str] | None = None) -> argparse.Namespace:
    return build_cli_parser().parse_args(argv)


def apply_cli_args(args: argparse.Namespace) -> AppConfig:
    """Load configuration and apply command-line overrides on top of it."""
    cfg = load_config(args.config_file)
    if args.log_level is not None:
        cfg.logging.level = LogLevel(args.log_level)
    if args.log_file is not None:
        cfg.logging.log_file = args.log_file
    return cfg


def _configure_logging(cfg: AppConfig) -> None:
    configure_logging_with_environment_tagging(
        level=getattr(logging, cfg.logging.level.value),
        log_format=cfg.logging.log_format,
        log_file=cfg.logging.log_file,
    )
    secrets = [cfg.llm.api_key] if cfg.llm.api_key else []
    install_api_key_redaction_filter(secrets)


def batch_lines(args: argparse.Namespace) -> list[str]:
    """Input lines for a non-interactive run, script first.

    Raises:
        ScriptLoadError: If the script path cannot be expressed as a command
    """
    lines: list[str] = []
    if args.script:
        lines.append(script_command_line(args.script, " ".join(args.args)))
    lines.extend(args.commands)
    return lines


async def run_batch(engine: ExecutionEngine, lines: list[str]) -> int:
    """Run lines in order, stopping at the first error. Returns an exit code."""
    for line in lines:
        try:
            await engine.execute(line)
        except NeuroShellError as exc:
            sys.stderr.write(f"Error: {exc.message}\n")
            return 1
    return 0


async def run_interactive(
    engine: ExecutionEngine, read_line: Callable[[str], str] = input
) -> int:
    """Read and execute lines until EOF or an exit command."""
    while True:
        try:
            line = read_line(PROMPT)
        except EOFError:
            return 0
        except KeyboardInterrupt:
            sys.stderr.write("\n")
            continue

        if line.strip() in EXIT_COMMANDS:
            return 0
        if not line.strip():
            continue
        try:
            await engine.execute(line)
        except NeuroShellError as exc:
            sys.stderr.write(f"Error: {exc.message}\n")


async def run(args: argparse.Namespace, engine: ExecutionEngine) -> int:
    try:
        lines = batch_lines(args)
    except NeuroShellError as exc:
        sys.stderr.write(f"Error: {exc.message}\n")
        return 1
    if lines:
        return await run_batch(engine, lines)
    if args.no_interactive:
        return 0
    return await run_interactive(engine)


def main(argv: list[str] | None = None) -> int:
    args = parse_cli_args(argv)
    try:
        cfg = apply_cli_args(args)
    except ConfigurationError as exc:
        sys.stderr.write(f"Error: {exc.message}\n")
        return 1

    _configure_logging(cfg)
    logger.debug("Starting with configuration %s", cfg.model_dump(exclude={"llm"}))

    engine = build_engine(cfg)
    return asyncio.run(run(args, engine))


if __name__ == "__main__":
    sys.exit(main())
