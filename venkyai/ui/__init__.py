"""Terminal presentation for VenkyAI."""

from .console_view import ConsoleView, status_line

__all__ = [
    "ConsoleView",
    "status_line",
]
