"""
Decorator Utilities.

Marks methods as event listeners so a system (or any object handed to
``EventRegistry.bind``) can be wired up in one call.
"""
import inspect
from typing import Any, Callable, Iterator, List, Tuple


def subscribe_event(*event_types: str, once: bool = False):
    """
    Decorator to mark a method as an event listener.

    Args:
        *event_types: Event names to listen on
        once: Register as a once-listener

    Usage:
        class Audit(BaseSystem):
            @subscribe_event("user.created", "user.deleted")
            async def on_user_event(self, data):
                ...
    """
    if not event_types:
        raise ValueError("subscribe_event() needs at least one event name")

    def decorator(func):
        func._subscribed_events = list(event_types)
        func._subscribe_once = once
        return func
    return decorator


def iter_subscriptions(obj: Any) -> Iterator[Tuple[Callable[..., Any], List[str], bool]]:
    """Yield ``(bound_method, events, once)`` for every decorated method of ``obj``."""
    for _, method in inspect.getmembers(obj, predicate=inspect.ismethod):
        events = getattr(method, "_subscribed_events", None)
        if events:
            yield method, events, getattr(method, "_subscribe_once", False)
