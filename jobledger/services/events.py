"""
Post-commit domain events and the bus that delivers them.

Job and expense services publish an event only after their own write has
succeeded. Subscribers (the derived-transaction synchronizer) run in
subscription order, one at a time, and a failing subscriber is logged and
never propagates back into the publishing service: the primary mutation has
already been committed and must not be reported as failed.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import datetime
from typing import Any, Awaitable, Callable, DefaultDict, Dict, List, Optional, Type
from uuid import uuid4

from pydantic import BaseModel, Field

from jobledger.utils.result import Err

logger = logging.getLogger(__name__)


class DomainEvent(BaseModel):
    """Base event. Records are the row dicts as returned by the store."""

    event_id: str = Field(default_factory=lambda: str(uuid4()))
    event_type: str
    occurred_at: datetime = Field(default_factory=datetime.now)
    user_id: str


class JobCreated(DomainEvent):
    event_type: str = Field(default="JobCreated", frozen=True)
    job: Dict[str, Any]


class JobUpdated(DomainEvent):
    """Emitted for every job update; ``previous`` is the row before the write."""

    event_type: str = Field(default="JobUpdated", frozen=True)
    previous: Dict[str, Any]
    job: Dict[str, Any]


class ExpenseCreated(DomainEvent):
    event_type: str = Field(default="ExpenseCreated", frozen=True)
    expense: Dict[str, Any]


class ExpenseUpdated(DomainEvent):
    event_type: str = Field(default="ExpenseUpdated", frozen=True)
    expense: Dict[str, Any]


class ExpenseDeleted(DomainEvent):
    event_type: str = Field(default="ExpenseDeleted", frozen=True)
    expense: Dict[str, Any]


Handler = Callable[[Any], Awaitable[Any]]


class SyncEventBus:
    """In-process publish/subscribe, scoped to one request."""

    def __init__(self) -> None:
        self._handlers: DefaultDict[Type[DomainEvent], List[Handler]] = defaultdict(list)

    def subscribe(self, event_type: Type[DomainEvent], handler: Handler) -> None:
        self._handlers[event_type].append(handler)

    async def publish(self, event: DomainEvent) -> List[Any]:
        """
        Deliver ``event`` to its subscribers sequentially.

        Returns:
            One entry per handler: its return value, or the exception it raised.
        """
        outcomes: List[Any] = []
        for handler in self._handlers.get(type(event), []):
            try:
                outcome = await handler(event)
            except Exception as e:
                logger.error(
                    f"Handler {getattr(handler, '__qualname__', handler)} failed for "
                    f"{event.event_type} (event_id={event.event_id}): {e}",
                    exc_info=True,
                )
                outcomes.append(e)
                continue

            if isinstance(outcome, Err):
                logger.warning(
                    f"{event.event_type} (event_id={event.event_id}) not fully "
                    f"propagated: {outcome.error.message}"
                )
            outcomes.append(outcome)

        return outcomes


async def publish_event(bus: Optional[SyncEventBus], event: DomainEvent) -> None:
    """Publish when a bus is wired in; services may run without one."""
    if bus is None:
        logger.debug(f"No event bus configured, dropping {event.event_type}")
        return
    await bus.publish(event)
