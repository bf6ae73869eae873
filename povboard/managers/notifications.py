"""
User-facing notifications for failed board operations.
"""
from typing import List

import click

from povboard.managers.events import BoardEvent, Event, EventListener, EventType


class NotificationListener(EventListener):
    """
    Shows a short error notice when a move fails or the board cannot be reloaded.

    Messages are written to stderr and kept in ``notifications`` in the order
    they were shown.
    """

    def __init__(self, echo: bool = True) -> None:
        self.echo = echo
        self.notifications: List[str] = []

    @property
    def subscribed_events(self) -> List[EventType]:
        """Return list of events this listener handles."""
        return [EventType.MOVE_FAILED, EventType.REFRESH_FAILED]

    def handle(self, event: Event) -> None:
        if not isinstance(event, BoardEvent):
            return

        text = f"Error: {event.message}" if event.message else "Error"
        self.notifications.append(text)
        if self.echo:
            click.echo(text, err=True)
