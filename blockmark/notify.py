"""Console notifications."""

from __future__ import annotations

import logging

import click

from .capabilities import NotificationLevel

logger = logging.getLogger(__name__)

_COLORS = {
    NotificationLevel.SUCCESS: "green",
    NotificationLevel.ERROR: "red",
    NotificationLevel.WARNING: "yellow",
    NotificationLevel.INFO: None,
}


class ClickNotifier:
    """Echo notifications to the terminal; problems go to stderr."""

    def notify(self, message: str, level: NotificationLevel) -> None:
        level = NotificationLevel(level)
        logger.debug("notify[%s] %s", level.value, message)
        err = level in (NotificationLevel.ERROR, NotificationLevel.WARNING)
        click.secho(message, fg=_COLORS[level], err=err)


__all__ = ["ClickNotifier"]
