"""Audit output: action-tagged lines on stdout, warnings/errors on stderr."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from rich.console import Console
from rich.text import Text

__all__ = ["ACTION_STYLE", "Reporter"]

logger = logging.getLogger(__name__)

ACTION_STYLE = {
    "+": "green",
    "-": "red",
    "*": "bright_black",
    "CREATE": "cyan",
    "UPDATE": "cyan",
    "SETUP": "magenta",
    "REMOVE": "yellow",
}


class Reporter:
    """Prints every decision with its action tag and mirrors it to the log."""

    def __init__(
        self, out: Optional[Console] = None, err: Optional[Console] = None
    ) -> None:
        self.out = out or Console(highlight=False, soft_wrap=True)
        self.err = err or Console(stderr=True, highlight=False, soft_wrap=True)

    def action(self, tag: str, subject: str) -> None:
        """Report a link decision, e.g. ``+ /usr/local/bin/foo``."""
        logger.info("%s %s", tag, subject, extra={"action": tag, "subject": subject})
        text = Text(tag, style=ACTION_STYLE.get(tag, "white"))
        text.append(f" {subject}")
        self.out.print(text, soft_wrap=True)

    def repo(self, action: str, repo: str, message: str = "") -> None:
        """Report a repository step, e.g. ``UPDATE [tools]``."""
        logger.info(
            "%s [%s] %s",
            action,
            repo,
            message,
            extra={"action": action, "repository": repo},
        )
        text = Text(action, style=ACTION_STYLE.get(action, "white"))
        text.append(f" [{repo}]")
        if message:
            text.append(f" {message}")
        self.out.print(text, soft_wrap=True)

    def warning(self, message: str, details: Iterable[str] = ()) -> None:
        lines = list(details)
        logger.warning("%s %s", message, "; ".join(lines))
        self.err.print(Text(f"WARNING: {message}", style="yellow"), soft_wrap=True)
        for line in lines:
            self.err.print(f"    {line}", markup=False, soft_wrap=True)

    def error(self, message: str) -> None:
        logger.error(message)
        self.err.print(Text(message, style="red"), soft_wrap=True)
