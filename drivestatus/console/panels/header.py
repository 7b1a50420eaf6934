"""Header panel - title bar, connection status, clock."""

import time

from rich.text import Text
from rich.table import Table


class HeaderPanel:

    def __init__(self):
        self.server_connected = False
        self.address = ""
        self.lines = 0

    def update(self, **kw):
        for k, v in kw.items():
            if hasattr(self, k):
                setattr(self, k, v)

    def render(self) -> Table:
        t = Table.grid(expand=True)
        t.add_column(ratio=1)
        t.add_column(justify="right")

        conn = "[green]CONNECTED[/]" if self.server_connected else "[red]DISCONNECTED[/]"
        left = Text.from_markup(
            f"[bold cyan]DRIVE STATUS[/]    Server: {conn} [dim]{self.address}[/]"
        )

        clock = time.strftime("%H:%M:%S")
        right = Text.from_markup(f"{self.lines} lines | [dim]{clock}[/]")

        t.add_row(left, right)
        return t
