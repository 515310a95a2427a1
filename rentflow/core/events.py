"""
In-process post-commit events.

Listeners run after the primary write has been committed. They are best
effort: a failing listener is rolled back and logged, and its message is
returned to the caller as a warning instead of being raised.
"""
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, FrozenSet, List

from sqlalchemy.orm import Session

from rentflow.core.rollover import sync_future_rent_entries

logger = logging.getLogger(__name__)

Listener = Callable[[Session, Any], Any]


@dataclass(frozen=True)
class TenantUpdated:
    tenant_id: str
    changed_fields: FrozenSet[str] = field(default_factory=frozenset)


class EventBus:
    def __init__(self):
        self._listeners: Dict[type, List[Listener]] = defaultdict(list)

    def subscribe(self, event_type: type, listener: Listener) -> None:
        self._listeners[event_type].append(listener)

    def publish(self, db: Session, event) -> List[str]:
        """Run every listener for ``event``; return warnings for the ones that failed."""
        warnings: List[str] = []
        for listener in self._listeners.get(type(event), []):
            try:
                listener(db, event)
            except Exception as e:
                db.rollback()
                logger.exception("Listener %s failed for %r", getattr(listener, "__name__", listener), event)
                warnings.append(f"Saved, but follow-up update failed: {e}")
        return warnings


def build_event_bus() -> EventBus:
    bus = EventBus()
    bus.subscribe(TenantUpdated, sync_future_rent_entries)
    return bus
