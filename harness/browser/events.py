#!/usr/bin/env python3
"""
Event subscription helpers.

Waiting for something a click causes (a new tab, a popup, a download) only
works if the listener is attached before the click happens. The helpers in
this module attach the listener first and hand back a future for the first
matching event.
"""

import asyncio


class EventSubscription:
    """
    A listener attached to a Playwright event emitter.

    The subscription resolves with the payload of the first event accepted by
    the predicate and detaches itself afterwards.
    """

    def __init__(self, emitter, event, predicate=None):
        """
        Attach the listener.

        Args:
            emitter: Object with on() and remove_listener() (Page, BrowserContext)
            event: Event name, e.g. "page" or "popup"
            predicate: Optional callable filtering event payloads
        """
        self.emitter = emitter
        self.event = event
        self.predicate = predicate
        self.future = asyncio.get_running_loop().create_future()
        self._attached = True
        emitter.on(event, self._handle)

    def _handle(self, payload):
        if self.future.done():
            return
        if self.predicate is not None:
            try:
                accepted = self.predicate(payload)
            except Exception as e:
                self.future.set_exception(e)
                self._detach()
                return
            if not accepted:
                return
        self.future.set_result(payload)
        self._detach()

    def _detach(self):
        if self._attached:
            self._attached = False
            self.emitter.remove_listener(self.event, self._handle)

    async def wait(self, timeout=None):
        """
        Wait for the first matching event.

        Args:
            timeout: Seconds to wait, None to wait indefinitely

        Returns:
            The event payload

        Raises:
            asyncio.TimeoutError: If no matching event arrived in time
        """
        try:
            return await asyncio.wait_for(asyncio.shield(self.future), timeout)
        finally:
            if not self.future.done():
                self.cancel()

    def cancel(self):
        """Detach the listener and cancel the pending future."""
        self._detach()
        if not self.future.done():
            self.future.cancel()

    @property
    def attached(self):
        return self._attached


def subscribe(emitter, event, predicate=None):
    """Attach a listener for event on emitter and return the subscription."""
    return EventSubscription(emitter, event, predicate)


async def wait_for_event_after(emitter, event, action, timeout=30.0, predicate=None):
    """
    Run an action and wait for the event it triggers.

    The subscription is established before the action runs, so an event
    emitted while the action is still in progress is not missed.

    Args:
        emitter: Object emitting the event
        event: Event name
        action: Async callable that triggers the event
        timeout: Seconds to wait for the event once the action completed
        predicate: Optional filter for event payloads

    Returns:
        The payload of the first matching event
    """
    subscription = subscribe(emitter, event, predicate)
    try:
        await action()
    except BaseException:
        subscription.cancel()
        raise
    return await subscription.wait(timeout)
