"""Rich-rendered status line and hourly outlook for the widget pane."""

from __future__ import annotations

from datetime import UTC, datetime

from rich.console import Console, Group
from rich.table import Table
from rich.text import Text

from ..advisory import Advisory, get_advisory, upcoming_hours
from ..fetch.models import WidgetState, ensure_utc
from ..weather.codes import UmbrellaAdvisory

_UMBRELLA_GLYPHS: dict[UmbrellaAdvisory, str] = {"sure": "☂", "maybe": "☂?", "no": ""}
_UMBRELLA_STYLES: dict[UmbrellaAdvisory, str] = {"sure": "bold blue", "maybe": "yellow", "no": ""}
_UMBRELLA_HINTS: dict[UmbrellaAdvisory, str] = {
    "sure": "take an umbrella",
    "maybe": "umbrella maybe",
    "no": "",
}


def format_age(last_updated: datetime | None, now: datetime) -> str:
    """Describe how old the cached forecast is, e.g. ``updated 3h ago``."""
    if last_updated is None:
        return "never updated"
    seconds = int((ensure_utc(now) - ensure_utc(last_updated)).total_seconds())
    if seconds < 60:
        return "updated just now"
    if seconds < 3600:
        return f"updated {seconds // 60}m ago"
    return f"updated {seconds // 3600}h ago"


class WidgetView:
    """Render cached forecast data; never touches the fetch stage."""

    def __init__(
        self,
        *,
        console: Console,
        state: WidgetState,
        unit_label: str = "°C",
        hours: int = 6,
    ) -> None:
        self.console = console
        self.state = state
        self.unit_label = unit_label
        self.hours = hours

    def status_line(self, now: datetime | None = None) -> Text:
        now = ensure_utc(now or datetime.now(UTC))
        advisory = get_advisory(self.state, now)
        if advisory is None:
            return Text("Weather: no data yet", style="dim")
        return self._advisory_text(advisory, now)

    def hourly_table(self, now: datetime | None = None) -> Table | None:
        rows = upcoming_hours(self.state, now, limit=self.hours)
        if not rows:
            return None
        table = Table(box=None, show_edge=False, pad_edge=False)
        table.add_column("Time")
        table.add_column("Conditions", overflow="fold")
        table.add_column("Temp", justify="right")
        table.add_column("Feels", justify="right")
        table.add_column("Wind", justify="right")
        for row in rows:
            table.add_row(
                row.timestamp.strftime("%H:%M"),
                Text(
                    f"{row.condition.label} {_UMBRELLA_GLYPHS[row.umbrella]}".rstrip(),
                    style=_UMBRELLA_STYLES[row.umbrella],
                ),
                f"{row.temperature:.1f}{self.unit_label}",
                f"{row.apparent_temperature:.1f}{self.unit_label}",
                f"{row.wind_speed:.0f} km/h",
            )
        return table

    def render(self, now: datetime | None = None) -> None:
        """Print the widget and record the render time on the shared state."""
        now = ensure_utc(now or datetime.now(UTC))
        parts: list[Text | Table] = [self.status_line(now)]
        table = self.hourly_table(now)
        if table is not None:
            parts.append(table)
        self.console.print(Group(*parts))
        self.state.last_rendered = now

    def _advisory_text(self, advisory: Advisory, now: datetime) -> Text:
        low, high = advisory.temp_range
        text = Text()
        text.append(advisory.condition_summary, style="bold")
        text.append(f"  {low:.0f}–{high:.0f}{self.unit_label}")
        if advisory.umbrella != "no":
            glyph = _UMBRELLA_GLYPHS[advisory.umbrella]
            hint = _UMBRELLA_HINTS[advisory.umbrella]
            text.append(f"  {glyph} {hint}", style=_UMBRELLA_STYLES[advisory.umbrella])
        text.append(f"  ({format_age(advisory.last_updated, now)})", style="dim")
        return text
