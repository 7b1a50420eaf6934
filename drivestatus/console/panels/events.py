"""Events panel - connection changes and drive activity log."""

import time
from collections import deque

from rich.panel import Panel
from rich.text import Text


EVENT_ICONS = {
    "info": "[blue][*][/]",
    "success": "[green][+][/]",
    "warning": "[yellow][!][/]",
    "error": "[red][-][/]",
    "debug": "[dim][~][/]",
}


class EventPanel:

    def __init__(self, maxlen: int = 200):
        self.entries: deque[tuple[str, str, str]] = deque(maxlen=maxlen)  # (time, level, msg)

    def add(self, level: str, message: str, timestamp: str = ""):
        ts = timestamp or time.strftime("%H:%M:%S")
        self.entries.append((ts, level, message))

    def clear(self):
        self.entries.clear()

    def render(self, limit: int = 30) -> Panel:
        lines = Text()
        visible = list(self.entries)[-limit:]
        for ts, level, msg in visible:
            icon = EVENT_ICONS.get(level, "[dim][ ][/]")
            lines.append_text(Text.from_markup(f"[dim]{ts}[/] {icon} {msg}\n"))

        if not visible:
            lines = Text.from_markup("[dim]No events yet...[/]")

        return Panel(lines, title="[bold]EVENTS[/]", border_style="blue")
