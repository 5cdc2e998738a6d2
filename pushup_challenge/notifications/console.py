"""Terminal reminder sinks."""

import sys
from datetime import datetime, timezone
from typing import Callable, Optional, TextIO

from ..errors import NotificationError
from .base import BaseNotificationSink

DONE_ANSWERS = ("", "d", "done", "y", "yes")


class ConsoleNotificationSink(BaseNotificationSink):
    """Prints the reminder with a bell and reads Done/Skip from stdin."""

    def __init__(self, name: str = "console", output: Optional[TextIO] = None,
                 read_line: Callable[[str], str] = input, bell: bool = True):
        super().__init__(name)
        self.output = output if output is not None else sys.stdout
        self.read_line = read_line
        self.bell = bell

    def confirm(self, title: str, body: str) -> bool:
        stamp = datetime.now(timezone.utc).astimezone().strftime("%H:%M")
        prefix = "\a" if self.bell else ""
        print(f"{prefix}[{stamp}] {title}\n{body}", file=self.output, flush=True)

        try:
            answer = self.read_line("[D]one / [s]kip: ")
        except EOFError as e:
            raise NotificationError("No terminal input available", sink_name=self.name) from e

        confirmed = answer.strip().lower() in DONE_ANSWERS
        self.logger.info("reminder_answered", sink=self.name, confirmed=confirmed)
        return confirmed


class AutoConfirmNotificationSink(BaseNotificationSink):
    """Prints the reminder and counts it as done. For unattended runs."""

    def __init__(self, name: str = "auto_confirm", output: Optional[TextIO] = None):
        super().__init__(name)
        self.output = output if output is not None else sys.stdout

    def confirm(self, title: str, body: str) -> bool:
        print(f"{title} {body}", file=self.output, flush=True)
        return True
