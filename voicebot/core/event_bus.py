"""
Event Bus - Central event system for session communication.
Carries sampling ticks, recognition results and committed commands
from the robot session to whoever is watching it (UI, logs, tests).
"""

import logging
import asyncio
from typing import Dict, List, Callable
from collections import defaultdict

logger = logging.getLogger(__name__)

# Event names published by RobotSession
LISTENING_STARTED = "listening_started"
LISTENING_STOPPED = "listening_stopped"
EMOTION_SAMPLED = "emotion_sampled"
SPEECH_RECOGNIZED = "speech_recognized"
RECOGNITION_ERROR = "recognition_error"
CAPTURE_ERROR = "capture_error"
COMMAND_COMMITTED = "command_committed"


class EventBus:
    """Async event bus; one event is dispatched at a time on the loop thread."""

    def __init__(self):
        self.listeners: Dict[str, List[Callable]] = defaultdict(list)
        self.running = False

    async def initialize(self):
        """Start accepting events."""
        self.running = True
        logger.info("Event bus initialized")

    def subscribe(self, event_name: str, callback: Callable):
        """Register a sync or async callback for an event."""
        self.listeners[event_name].append(callback)
        logger.debug(f"Subscribed to event: {event_name}")

    def unsubscribe(self, event_name: str, callback: Callable):
        if callback in self.listeners.get(event_name, []):
            self.listeners[event_name].remove(callback)
            logger.debug(f"Unsubscribed from event: {event_name}")

    def listener_count(self, event_name: str) -> int:
        return len(self.listeners.get(event_name, []))

    async def emit(self, event_name: str, *args, **kwargs) -> int:
        """
        Deliver an event to every listener in subscription order.

        A failing listener is logged and skipped so the others still run.

        Returns:
            Number of listeners that completed without raising
        """
        if not self.running:
            return 0

        # Copy so listeners may unsubscribe themselves while being called
        listeners = list(self.listeners.get(event_name, []))
        if not listeners:
            return 0

        logger.debug(f"Emitting event: {event_name} to {len(listeners)} listeners")
        delivered = 0
        for callback in listeners:
            try:
                result = callback(*args, **kwargs)
                if asyncio.iscoroutine(result):
                    await result
                delivered += 1
            except Exception as e:
                logger.error(f"Error in event listener for {event_name}: {e}", exc_info=True)
        return delivered

    async def shutdown(self):
        """Stop dispatching and drop all listeners."""
        self.running = False
        self.listeners.clear()
        logger.info("Event bus shutdown")
