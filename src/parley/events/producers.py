"""Background producers that feed the event bus."""

import asyncio

from .bus import EventBus
from .models import Tick

DEFAULT_TICK_RATE_MS = 250


async def tick_forever(bus: EventBus, interval: float = DEFAULT_TICK_RATE_MS / 1000) -> None:
    """Send a Tick every ``interval`` seconds until the bus is closed."""
    while not bus.closed:
        await asyncio.sleep(interval)
        bus.send(Tick())
