"""
Sleeping between the attempts, interruptable by an event.
"""
import asyncio
from typing import Optional


async def sleep(
        delay: float,
        wakeup: Optional[asyncio.Event] = None,
) -> Optional[float]:
    """
    Sleep for the delay, or until the wakeup event is set, whatever comes first.

    Returns the number of seconds left to sleep if woken up by the event,
    or ``None`` if the full delay was slept. The result can be ``0``
    if the event is set when the delay is already over.

    Zero and negative delays do not sleep, but still give control to the loop
    once: so that the tight retry cycles do not starve other tasks.
    """
    if delay <= 0:
        await asyncio.sleep(0)
        return 0.0 if wakeup is not None and wakeup.is_set() else None

    loop = asyncio.get_running_loop()
    start_time = loop.time()
    try:
        if wakeup is None:
            await asyncio.sleep(delay)
        else:
            await asyncio.wait_for(wakeup.wait(), timeout=delay)
    except asyncio.TimeoutError:
        return None
    else:
        if wakeup is None:
            return None
        return max(0.0, delay - (loop.time() - start_time))
