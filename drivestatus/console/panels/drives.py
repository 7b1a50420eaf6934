"""Drives panel - one row per drive: motor, LED, head position, mode, steps."""

import time

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from drivestatus.constants import MAX_HALF_TRACK
from drivestatus.status import RwMode, StatusRecord, track_from_half_track

FILL = "\u2588"  # █
EMPTY = "\u2591"  # ░
LED = "\u25cf"  # ●

MAX_TRACK = track_from_half_track(MAX_HALF_TRACK)
STEP_FLASH_SECONDS = 0.3

MODE_LABELS = {
    RwMode.IDLE: "[dim]idle[/]",
    RwMode.MODE_A: "[cyan]mode 1[/]",
    RwMode.MODE_B: "[magenta]mode 2[/]",
}


def _head_bar(track: int, width: int = 20) -> Text:
    """Head position as a marker along the track range."""
    if track <= 0:
        return Text.from_markup(f"[dim]{EMPTY * width}[/]")
    pos = min(width - 1, (track - 1) * width // MAX_TRACK)
    return Text.from_markup(
        f"[dim]{EMPTY * pos}[/][yellow]{FILL}[/][dim]{EMPTY * (width - pos - 1)}[/]"
    )


class DrivePanel:

    def __init__(self, clock=time.monotonic):
        self._clock = clock
        self.records: dict[int, StatusRecord] = {}
        self.steps: dict[int, int] = {}
        self._last_step: dict[int, float] = {}
        self.invalid = False

    def apply(self, record: StatusRecord):
        self.invalid = False
        self.records[record.drive_num] = record
        if record.step_event:
            self.steps[record.drive_num] = self.steps.get(record.drive_num, 0) + 1
            self._last_step[record.drive_num] = self._clock()

    def mark_invalid(self):
        """Server reported a drive gone; the stream resends what is still active."""
        self.invalid = True

    def clear(self):
        self.records.clear()
        self.steps.clear()
        self._last_step.clear()
        self.invalid = False

    def render(self) -> Panel:
        if not self.records:
            msg = "[red]No active drives[/]" if self.invalid else "[dim]Waiting for drive status...[/]"
            return Panel(Text.from_markup(msg), title="[bold]DRIVES[/]", border_style="cyan")

        now = self._clock()
        t = Table(expand=True, box=None, padding=(0, 1))
        t.add_column("Drive", width=6)
        t.add_column("Motor", width=6)
        t.add_column("LED", width=4)
        t.add_column("Track", width=6, justify="right")
        t.add_column("Head", ratio=1)
        t.add_column("Mode", width=8)
        t.add_column("Steps", width=7, justify="right")

        for num in sorted(self.records):
            r = self.records[num]
            motor = "[green]on[/]" if r.motor_on else "[dim]off[/]"
            led = f"[red]{LED}[/]" if r.led_on else f"[dim]{LED}[/]"
            flashing = now - self._last_step.get(num, float("-inf")) < STEP_FLASH_SECONDS
            steps = str(self.steps.get(num, 0))
            if flashing:
                steps = f"[bold yellow]{steps}[/]"
            t.add_row(
                f"[bold]#{num}[/]",
                Text.from_markup(motor),
                Text.from_markup(led),
                str(r.track),
                _head_bar(r.track),
                Text.from_markup(MODE_LABELS.get(r.rw_mode, str(int(r.rw_mode)))),
                Text.from_markup(steps),
            )

        return Panel(t, title="[bold]DRIVES[/]", border_style="cyan")
