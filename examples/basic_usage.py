#!/usr/bin/env python3
"""
Basic Usage Example - Pushup Challenge Engine

This script runs a simulated first day of the challenge in virtual time.
It shows how to wire the engine to a store, a notifier and a scheduler,
then follows the session through a reminder, the overnight quiet hours
and the 09:00 resume wake.

Run: python examples/basic_usage.py
"""

from datetime import datetime
from zoneinfo import ZoneInfo

from pushup_challenge.engine import ChallengeEngine
from pushup_challenge.logging import configure_logging
from pushup_challenge.notifications import CallbackNotificationSink
from pushup_challenge.persistence.settings_store import InMemorySettingsStore
from pushup_challenge.timer.scheduler import ManualScheduler
from pushup_challenge.utils.time import ManualClock

CET = ZoneInfo("CET")


def answer_reminder(title: str, body: str) -> bool:
    """Stand-in for a dialog: every reminder is answered with Done."""
    print(f"   🔔 {title} {body} -> Done")
    return True


def print_status(label: str, engine: ChallengeEngine) -> None:
    status = engine.status()
    print(f"📊 {label} [{engine.clock.now():%a %H:%M}]")
    print(f"  Mode: {status['ui_mode']}")
    print(f"  Week {status['week']} - Day {status['day']}")
    print(f"  Target: {status['target_reps']} pushups every {status['interval_minutes']} minutes")
    print(f"  Next alert in: {status['time_remaining']} ({status['timer']})")
    print(f"  Resume wake armed: {status['resume_wake_pending']}")
    print()


def main():
    """Main demonstration function."""
    configure_logging(level="WARNING")

    print("🚀 Pushup Challenge Engine - Basic Usage Demo")
    print("=" * 60)

    clock = ManualClock(datetime(2024, 3, 4, 22, 30, tzinfo=CET), zone=CET)
    scheduler = ManualScheduler(clock)
    engine = ChallengeEngine(
        store=InMemorySettingsStore(),
        notifier=CallbackNotificationSink(answer_reminder),
        scheduler=scheduler,
        clock=clock,
    )
    print_status("1. Fresh install", engine)

    engine.start_challenge()
    print_status("2. Challenge started", engine)

    engine.submit_max_test(40)
    print_status("3. Max test of 40 submitted", engine)

    print("4. One hour later...")
    scheduler.advance(3600)
    print()
    print_status("   After the first reminder", engine)

    scheduler.advance(1800)
    print_status("5. Midnight: quiet hours", engine)

    scheduler.advance(9 * 3600)
    print_status("6. 09:00: resume wake fired", engine)

    print("7. Progress history:")
    for day, total in engine.get_progress_history():
        print(f"   {day:%b %d, %Y}: {total} pushups")
    print()

    engine.shutdown()
    print("✅ Demo completed successfully!")


if __name__ == "__main__":
    main()
