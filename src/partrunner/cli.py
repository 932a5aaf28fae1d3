from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .app_logging import log_with_fields, setup_logger
from .config import RunnerConfig, SelectConfig, load_config
from .errors import ChannelClosedError, RunnerError
from .events import LoggingObserver
from .executor import Executor
from .models import NOT_REGISTERED, WAITING, Answer, JobFailure, PartId, Status
from .registry import Registry, load_builtin_solutions
from .utils import available_parallelism


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="partrunner", description="Run puzzle solutions on a worker pool")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run selected parts and report their answers")
    run_parser.add_argument("--config", help="Path to partrunner YAML config")
    run_parser.add_argument("-i", "--input", type=Path, help="Root directory of the inputs (<root>/<year>/<day>)")
    run_parser.add_argument(
        "-y",
        "--year",
        dest="years",
        type=int,
        action="append",
        help="Year to run; repeatable. Without any selection every registered part runs",
    )
    run_parser.add_argument(
        "-d",
        "--day",
        dest="days",
        type=int,
        action="append",
        help="Day to run; repeatable. Without a year the latest registered year is assumed",
    )
    run_parser.add_argument("-p", "--part", dest="parts", type=int, action="append", help="Part to run; repeatable")
    run_parser.add_argument("-j", "--jobs", type=int, help="Number of worker threads (default: available parallelism)")
    run_parser.add_argument("-l", "--log", type=Path, help="File in which to write JSON logs")
    run_parser.add_argument("--fail-fast", action="store_true", help="Stop a worker on its first failing part")
    run_parser.add_argument("-v", "--verbose", action="store_true", help="Echo debug logs to stderr")

    subparsers.add_parser("list", help="List registered parts")
    return parser


def resolve_config(args: argparse.Namespace) -> RunnerConfig:
    if args.config:
        config = load_config(args.config)
    elif args.input is not None:
        config = RunnerConfig(input=args.input, jobs=available_parallelism())
    else:
        raise ValueError("either --input or --config is required")

    if args.input is not None:
        config.input = args.input
    if args.jobs is not None:
        if args.jobs < 1:
            raise ValueError("--jobs must be >= 1")
        config.jobs = args.jobs
    if args.log is not None:
        config.log = args.log
    if args.fail_fast:
        config.fail_fast = True
    config.select = SelectConfig(
        years=args.years or config.select.years,
        days=args.days or config.select.days,
        parts=args.parts or config.select.parts,
    )
    return config


def _print_line(part_id: PartId, text: object) -> None:
    print(f"{part_id}: {text}", flush=True)


def cmd_run(config: RunnerConfig, registry: Registry, *, verbose: bool = False) -> int:
    logger = setup_logger(config.log, verbose=verbose)
    selection = registry.select(config.select.years, config.select.days, config.select.parts)

    board: dict[PartId, Status] = {part_id: NOT_REGISTERED for part_id in selection.missing}
    for part_id in selection.missing:
        _print_line(part_id, NOT_REGISTERED)
    if not selection.runnable:
        print("nothing to run", file=sys.stderr)
        return 0 if not selection.missing else 1

    log_with_fields(
        logger,
        logging.INFO,
        "run_started",
        parts=[str(part.id) for part in selection.runnable],
        jobs=config.jobs,
        input=str(config.input),
        fail_fast=config.fail_fast,
    )
    executor = Executor(
        config.jobs,
        config.input,
        observer=LoggingObserver(logger),
        fail_fast=config.fail_fast,
    )
    for part in selection.runnable:
        board[part.id] = WAITING
    rejected = executor.submit_all(selection.runnable)
    executor.close()

    failed = 0
    for outcome in executor.drain():
        if isinstance(outcome, JobFailure):
            failed += 1
        elif isinstance(outcome, Answer):
            board[outcome.id] = outcome.status
        _print_line(outcome.id, outcome)

    try:
        executor.join()
        if rejected:
            raise ChannelClosedError(f"{len(rejected)} parts not accepted: no worker left")
    except RunnerError as exc:
        log_with_fields(logger, logging.ERROR, "run_failed", error=str(exc))
        print(f"error: {exc}", file=sys.stderr)
        return 1
    finally:
        completed = sum(1 for status in board.values() if status.is_terminal)
        unfinished = len(selection.runnable) - completed - failed
        print(f"{completed} completed, {failed} failed, {unfinished} unfinished, {len(selection.missing)} not registered")

    return 0 if not selection.missing else 1


def cmd_list(registry: Registry) -> int:
    ids = registry.ids()
    if not ids:
        print("(no registered parts)")
    for part_id in ids:
        print(part_id)
    return 0


def main(argv: list[str] | None = None, registry: Registry | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if registry is None:
        registry = load_builtin_solutions()

    if args.command == "list":
        return cmd_list(registry)
    if args.command == "run":
        try:
            config = resolve_config(args)
        except ValueError as exc:
            parser.error(str(exc))
        return cmd_run(config, registry, verbose=bool(args.verbose))
    parser.error(f"Unknown command: {args.command}")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
