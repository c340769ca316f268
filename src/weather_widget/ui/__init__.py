"""Terminal rendering for the widget pane."""

from .widget_view import WidgetView, format_age

__all__ = ["WidgetView", "format_age"]
