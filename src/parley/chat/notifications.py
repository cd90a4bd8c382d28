from dataclasses import dataclass

from ..events.models import Notification


@dataclass
class ActiveNotification:
    notification: Notification
    remaining: int


class NotificationCenter:
    """Notifications currently on screen.

    Each one stays for ``ttl`` ticks and is dropped on the tick that brings
    its remaining time to zero.
    """

    def __init__(self) -> None:
        self._items: list[ActiveNotification] = []
        self._pushed = 0

    def push(self, notification: Notification) -> None:
        if notification.ttl <= 0:
            return
        self._items.append(ActiveNotification(notification, notification.ttl))
        self._pushed += 1

    @property
    def pushed(self) -> int:
        """Number of notifications accepted so far, expired or cleared ones included."""
        return self._pushed

    def tick(self) -> list[Notification]:
        """Age every notification by one tick. Returns the expired ones."""
        expired = []
        for item in self._items:
            item.remaining -= 1
            if item.remaining <= 0:
                expired.append(item.notification)
        self._items = [item for item in self._items if item.remaining > 0]
        return expired

    @property
    def active(self) -> list[Notification]:
        return [item.notification for item in self._items]

    def clear(self) -> None:
        self._items = []

    def __len__(self) -> int:
        return len(self._items)
