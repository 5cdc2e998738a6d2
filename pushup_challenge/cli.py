"""
Command line host for the challenge engine.

One-shot commands load the persisted state, apply a command and exit.
``run`` keeps the process alive and drives ticks and the resume wake
from a blocking loop in the main thread.
"""

import argparse
import sys
from pathlib import Path
from typing import Any, Optional, TextIO

import structlog

from .config.defaults import ChallengeConfig
from .config.loader import ConfigLoader
from .config.validation import ConfigValidator
from .engine import ChallengeEngine
from .logging.config import configure_logging
from .notifications.base import BaseNotificationSink
from .notifications.console import AutoConfirmNotificationSink, ConsoleNotificationSink
from .persistence.settings_store import SQLiteSettingsStore
from .state.models import UIMode
from .timer.scheduler import LoopScheduler

logger = structlog.get_logger(__name__)

MODE_HINTS = {
    UIMode.WELCOME: "Run `start` to begin the 14-day challenge.",
    UIMode.AWAITING_MAX_TEST: "Do as many pushups as you can, then run `max-test N`.",
    UIMode.DONE_FOR_TODAY: "Done for today. Reminders resume at {resume_hour:02d}:00 {timezone}.",
    UIMode.AWAITING_NEXT_DAY: "A new day is ready. Run `start` to begin training.",
    UIMode.COMPLETED: "Challenge completed! Run `reset --yes` to start again.",
    UIMode.ACTIVE_SESSION: "Session active.",
    UIMode.CONFIRMING_STOP: "Waiting for stop confirmation.",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pushup-challenge",
        description="14-day pushup challenge reminders",
    )
    parser.add_argument("--config-dir", type=Path, default=None,
                        help="Directory containing challenge.yaml")
    parser.add_argument("--db-path", default=None, help="Settings database path")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ...")
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON log lines")

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("status", help="Show the current state")
    commands.add_parser("start", help="Start the challenge or today's session")
    max_test = commands.add_parser("max-test", help="Record your max pushups")
    max_test.add_argument("reps", type=int)
    commands.add_parser("pause", help="Pause the reminder countdown")
    commands.add_parser("resume", help="Resume the reminder countdown")
    commands.add_parser("done", help="Stop reminders until tomorrow")
    commands.add_parser("history", help="Show daily totals")
    reset = commands.add_parser("reset", help="Stop and erase all progress")
    reset.add_argument("--yes", action="store_true", help="Confirm the reset")
    commands.add_parser("run", help="Run reminders in the foreground")
    return parser


def load_config(args: argparse.Namespace) -> ChallengeConfig:
    overrides: dict[str, Any] = {}
    if args.db_path:
        overrides["storage"] = {"db_path": args.db_path}
    logging_overrides: dict[str, Any] = {}
    if args.log_level:
        logging_overrides["level"] = args.log_level
    if args.json_logs:
        logging_overrides["format_json"] = True
    if logging_overrides:
        overrides["logging"] = logging_overrides

    loader = ConfigLoader.create(args.config_dir)
    merged = loader.merge_config(overrides)
    errors = ConfigValidator.validate_config(merged)
    if errors:
        details = "; ".join(f"{err.field}: {err.message} (got: {err.value})" for err in errors)
        raise SystemExit(f"Invalid configuration: {details}")
    return ConfigLoader.from_dict(merged)


def build_notifier(config: ChallengeConfig) -> BaseNotificationSink:
    if config.notification.sink == "auto_confirm":
        return AutoConfirmNotificationSink()
    return ConsoleNotificationSink()


def build_engine(config: ChallengeConfig, scheduler: Optional[LoopScheduler] = None) -> ChallengeEngine:
    return ChallengeEngine(
        store=SQLiteSettingsStore(config.storage.db_path),
        notifier=build_notifier(config),
        scheduler=scheduler or LoopScheduler(),
        config=config,
    )


def print_status(engine: ChallengeEngine, out: TextIO) -> None:
    status = engine.status()
    mode = engine.ui_mode
    print(f"Mode: {status['ui_mode']}", file=out)
    if engine.baseline > 0:
        print(f"Week {status['week']} - Day {status['day']}", file=out)
        print(f"Next set: {status['target_reps']} pushups every {status['interval_minutes']} minutes", file=out)
        print(f"Next alert in: {status['time_remaining']} ({status['timer']})", file=out)
        print(f"Today: {status['today_total']} pushups", file=out)
    print(MODE_HINTS[mode].format(
        resume_hour=engine.time_params.restricted_end_hour,
        timezone=engine.time_params.timezone,
    ), file=out)


def print_history(engine: ChallengeEngine, out: TextIO) -> None:
    history = engine.get_progress_history()
    if not history:
        print("No pushups logged yet.", file=out)
        return
    for day, total in history:
        print(f"{day.strftime('%b %d, %Y')}: {total} pushups", file=out)


def run_forever(engine: ChallengeEngine, scheduler: LoopScheduler, out: TextIO) -> int:
    if engine.ui_mode in (UIMode.AWAITING_NEXT_DAY, UIMode.ACTIVE_SESSION) and not engine.is_active:
        engine.setup_daily_challenge()

    print_status(engine, out)
    if scheduler.empty():
        print("Nothing scheduled; exiting.", file=out)
        return 0

    try:
        scheduler.run()
    except KeyboardInterrupt:
        print("\nStopping reminders.", file=out)
    finally:
        engine.shutdown()
    return 0


def main(argv: Optional[list[str]] = None, out: TextIO = sys.stdout) -> int:
    args = build_parser().parse_args(argv)
    config = load_config(args)
    configure_logging(level=config.logging.level, format_json=config.logging.format_json)

    scheduler = LoopScheduler()
    engine = build_engine(config, scheduler)

    if args.command == "run":
        return run_forever(engine, scheduler, out)

    exit_code = 0
    if args.command == "start":
        engine.start_challenge()
    elif args.command == "max-test":
        if not engine.submit_max_test(args.reps):
            print("Max test must be a positive number.", file=out)
            exit_code = 2
    elif args.command == "pause":
        if not engine.pause_timer():
            print("No running session to pause.", file=out)
    elif args.command == "resume":
        if not engine.resume_timer():
            print("No paused session to resume.", file=out)
    elif args.command == "done":
        engine.mark_done_for_today()
    elif args.command == "history":
        print_history(engine, out)
        engine.shutdown()
        return 0
    elif args.command == "reset":
        if not args.yes:
            print("This will reset all your progress. Re-run with --yes to confirm.", file=out)
            engine.shutdown()
            return 1
        engine.stop_and_reset()
        print("Progress erased.", file=out)
        engine.shutdown()
        return 0

    print_status(engine, out)
    engine.shutdown()
    return exit_code
