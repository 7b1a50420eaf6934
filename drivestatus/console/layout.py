"""Layout manager - builds and updates the rich.Layout tree."""

from rich.layout import Layout
from rich.panel import Panel
from rich.text import Text

from .panels import DrivePanel, EventPanel, HeaderPanel


class LayoutManager:
    """Manages the full-screen rich.Layout tree."""

    def __init__(self):
        self.header = HeaderPanel()
        self.drives = DrivePanel()
        self.events = EventPanel()
        self.layout = self._build()

    def _build(self) -> Layout:
        root = Layout()

        root.split_column(
            Layout(name="header", size=3),
            Layout(name="drives", size=9),
            Layout(name="events", ratio=1),
            Layout(name="footer", size=3),
        )

        return root

    def refresh_all(self, input_hints: str = ""):
        """Re-render all panels into the layout."""
        self.layout["header"].update(self.header.render())
        self.layout["drives"].update(self.drives.render())
        self.layout["events"].update(self.events.render())

        footer = Text.from_markup(f" [dim]{input_hints}[/]")
        self.layout["footer"].update(
            Panel(footer, border_style="bright_black", padding=(0, 0))
        )
