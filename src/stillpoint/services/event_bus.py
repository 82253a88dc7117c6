"""
Event Bus - Central event routing system

Implements pub-sub pattern:
- Publishers: publish(event)
- Subscribers: subscribe(event_type, handler, priority, filter_fn) -> unsubscribe
- Middleware: add_middleware(middleware_fn)

publish() is synchronous: it returns once every subscriber has run.
Handlers that need asynchronous work return an awaitable, which the bus
schedules as a tracked task instead of awaiting it.
"""

import inspect
from typing import Callable, List, Dict, Optional
from dataclasses import dataclass
from stillpoint.models.events import Event, EventType, TOPIC_PAYLOADS
from stillpoint.models.enums import LogCategory
from stillpoint.lifecycle.task_registry import create_tracked_task, TaskCategory
from stillpoint.utils.logger import get_logger

log = get_logger().for_category(LogCategory.EVENT)


@dataclass
class EventHandler:
    """Event handler registration"""
    handler: Callable[[Event], object]
    priority: int
    filter_fn: Optional[Callable[[Event], bool]]


class EventBus:
    """
    Central event bus for typed pub-sub event handling

    Features:
    - Subscription-order dispatch (priority can move a handler ahead, default 0)
    - Per-handler filtering
    - Middleware pipeline (logging, blocking)
    - Async handlers detected and scheduled as tracked tasks
    - Fault tolerance (one handler crash doesn't stop others)
    - Topic/payload check (each EventType has one payload class)

    Example:
        bus = EventBus()

        unsubscribe = bus.subscribe(EventType.TIMER_TICK, on_tick)
        bus.publish(TimerTickEvent(remaining_ms=900, elapsed_ms=100, progress=0.1))
        unsubscribe()
    """

    def __init__(self, history_limit: int = 100):
        self._handlers: Dict[EventType, List[EventHandler]] = {}
        self._middleware: List[Callable[[Event], Optional[Event]]] = []

        # Event history (bounded, for debugging)
        self._event_history: List[Event] = []
        self._history_limit = history_limit

    def subscribe(
        self,
        event_type: EventType,
        handler: Callable[[Event], object],
        priority: int = 0,
        filter_fn: Optional[Callable[[Event], bool]] = None
    ) -> Callable[[], None]:
        """
        Subscribe to an event type

        Args:
            event_type: Which topic to listen for
            handler: Function to call (sync, or returning an awaitable)
            priority: Higher runs earlier; equal priorities keep subscription order
            filter_fn: Optional filter (return True = handle, False = skip)

        Returns:
            Unsubscribe handle; calling it more than once is a no-op
        """
        handlers = self._handlers.setdefault(event_type, [])
        handler_entry = EventHandler(handler, priority, filter_fn)
        handlers.append(handler_entry)

        # Stable sort keeps subscription order among equal priorities
        handlers.sort(key=lambda h: h.priority, reverse=True)

        log.debug(
            "Event handler subscribed",
            topic=event_type.value,
            handler=getattr(handler, "__name__", repr(handler)),
            priority=priority
        )

        def unsubscribe() -> None:
            entries = self._handlers.get(event_type, [])
            if handler_entry in entries:
                entries.remove(handler_entry)

        return unsubscribe

    def add_middleware(self, middleware: Callable[[Event], Optional[Event]]) -> None:
        """
        Add middleware to the event processing pipeline

        Middleware can modify events (return a new event), block them
        (return None) or just observe them. Runs in registration order.
        """
        self._middleware.append(middleware)
        log.debug("Middleware registered", middleware=middleware.__name__)

    def publish(self, event: Event) -> None:
        """
        Publish event to all subscribers

        Flow:
        1. Check the payload class matches the topic
        2. Apply middleware (can modify or block event)
        3. Save to event history
        4. Run handlers in order, applying per-handler filters
        5. Schedule awaitables returned by handlers as tracked tasks
        6. Log handler exceptions and continue

        Raises:
            TypeError: event class does not carry the payload of its topic
        """
        expected = TOPIC_PAYLOADS.get(event.type)
        if expected is not None and not isinstance(event, expected):
            raise TypeError(
                f"Topic {event.type.value} expects {expected.__name__}, "
                f"got {type(event).__name__}"
            )

        for middleware in self._middleware:
            processed_event = middleware(event)
            if processed_event is None:
                return
            event = processed_event

        self._event_history.append(event)
        if len(self._event_history) > self._history_limit:
            self._event_history.pop(0)

        # Copy: handlers may unsubscribe while we iterate
        handlers = list(self._handlers.get(event.type, []))
        if not handlers:
            return

        for handler_entry in handlers:
            if handler_entry.filter_fn and not handler_entry.filter_fn(event):
                continue

            name = getattr(handler_entry.handler, "__name__", repr(handler_entry.handler))
            try:
                result = handler_entry.handler(event)
            except Exception as e:
                log.error(
                    f"Event handler failed: {name} for {event.type.value}",
                    error=str(e),
                    error_type=type(e).__name__
                )
                continue

            if inspect.isawaitable(result):
                create_tracked_task(
                    self._run_async_handler(result, name, event),
                    category=TaskCategory.EVENTBUS,
                    description=f"{name} <- {event.type.value}"
                )

    async def _run_async_handler(self, awaitable, name: str, event: Event) -> None:
        try:
            await awaitable
        except Exception as e:
            log.error(
                f"Async event handler failed: {name} for {event.type.value}",
                error=str(e),
                error_type=type(e).__name__
            )

    def subscriber_count(self, event_type: EventType) -> int:
        return len(self._handlers.get(event_type, []))

    def get_event_history(self, limit: int = 10) -> List[Event]:
        """Recent events, newest last"""
        return self._event_history[-limit:]

    def clear_history(self) -> None:
        self._event_history.clear()
