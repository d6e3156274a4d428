"""Console messaging for power-schedule.

User-facing output is built as structured ``TextMessage`` objects and
rendered with Rich. Messages carry plain text only; the renderer decides
styling. Errors and warnings go to stderr, everything else to stdout.

Example:
    >>> from power_schedule.messaging import emit_info, emit_error
    >>> emit_info("Updating configuration artifact")
    >>> emit_error("Something went wrong")
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, Field
from rich.console import Console
from rich.markup import escape as escape_rich_markup


class MessageLevel(str, Enum):
    """Severity level for text messages."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"


class TextMessage(BaseModel):
    """Simple text message with a severity level. Text must be plain, no markup!"""

    level: MessageLevel = Field(description="Severity level of this message")
    text: str = Field(description="Plain text content - NO Rich markup allowed")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When this message was created (UTC)",
    )

    model_config = {"frozen": True, "extra": "forbid"}


DEFAULT_STYLES: Dict[MessageLevel, str] = {
    MessageLevel.ERROR: "bold red",
    MessageLevel.WARNING: "yellow",
    MessageLevel.SUCCESS: "green",
    MessageLevel.INFO: "white",
    MessageLevel.DEBUG: "dim",
}

_PREFIXES: Dict[MessageLevel, str] = {
    MessageLevel.ERROR: "ERROR: ",
    MessageLevel.WARNING: "WARNING: ",
}


class ConsoleRenderer:
    """Renders TextMessages to a pair of Rich consoles."""

    def __init__(
        self,
        console: Optional[Console] = None,
        error_console: Optional[Console] = None,
        styles: Optional[Dict[MessageLevel, str]] = None,
    ):
        self.console = console or Console(highlight=False)
        self.error_console = error_console or Console(stderr=True, highlight=False)
        self.styles = styles or DEFAULT_STYLES

    def render(self, message: TextMessage) -> None:
        target = (
            self.error_console
            if message.level in (MessageLevel.ERROR, MessageLevel.WARNING)
            else self.console
        )
        text = _PREFIXES.get(message.level, "") + message.text
        style = self.styles.get(message.level, "")
        target.print(escape_rich_markup(text), style=style)


_renderer: Optional[ConsoleRenderer] = None


def get_renderer() -> ConsoleRenderer:
    global _renderer
    if _renderer is None:
        _renderer = ConsoleRenderer()
    return _renderer


def set_renderer(renderer: Optional[ConsoleRenderer]) -> None:
    """Replace the process-wide renderer (None restores the default)."""
    global _renderer
    _renderer = renderer


def emit(level: MessageLevel, text: str) -> TextMessage:
    message = TextMessage(level=level, text=str(text))
    get_renderer().render(message)
    return message


def emit_info(text: str) -> TextMessage:
    return emit(MessageLevel.INFO, text)


def emit_success(text: str) -> TextMessage:
    return emit(MessageLevel.SUCCESS, text)


def emit_warning(text: str) -> TextMessage:
    return emit(MessageLevel.WARNING, text)


def emit_error(text: str) -> TextMessage:
    return emit(MessageLevel.ERROR, text)
