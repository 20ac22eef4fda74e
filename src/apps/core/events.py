# src/apps/core/events.py
"""
PIREP Service Events

Event definitions for PIREP and pilot domain events.
These events are published to the message broker for other services
(notifications, cache invalidation, achievements) to consume.
"""

import uuid
import json
import logging
from datetime import datetime
from typing import Dict, Any, List, Optional
from dataclasses import dataclass, field, asdict
from enum import Enum

import redis
from django.conf import settings
from django.db import transaction

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    """PIREP service event types."""

    # PIREP lifecycle
    PIREP_FILED = 'pirep.filed'
    PIREP_ACCEPTED = 'pirep.accepted'
    PIREP_REJECTED = 'pirep.rejected'

    # Pilot
    PILOT_STATS_CHANGED = 'pilot.stats_changed'


@dataclass
class BaseEvent:
    """Base class for all events."""

    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    event_type: str = ''
    event_version: str = '1.0'
    timestamp: str = field(default_factory=lambda: datetime.utcnow().isoformat())
    source: str = 'pirep-service'
    correlation_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary."""
        return asdict(self)

    def to_json(self) -> str:
        """Convert event to JSON string."""
        return json.dumps(self.to_dict(), default=str)


@dataclass
class PirepEvent(BaseEvent):
    """Common payload for PIREP lifecycle events."""

    pirep_id: str = ''
    pilot_id: str = ''
    state: str = ''
    source_type: str = ''
    departure_airport: str = ''
    arrival_airport: str = ''
    flight_time: float = 0.0

    @classmethod
    def from_pirep(cls, pirep, **kwargs) -> 'PirepEvent':
        """Snapshot a PIREP into an event payload."""
        return cls(
            pirep_id=str(pirep.id),
            pilot_id=str(pirep.pilot_id),
            state=pirep.state,
            source_type=pirep.source,
            departure_airport=pirep.departure_airport_id,
            arrival_airport=pirep.arrival_airport_id,
            flight_time=float(pirep.flight_time or 0),
            **kwargs
        )


@dataclass
class PirepFiledEvent(PirepEvent):
    """Event published when a PIREP is filed."""

    event_type: str = EventType.PIREP_FILED.value


@dataclass
class PirepAcceptedEvent(PirepEvent):
    """Event published when a PIREP is accepted."""

    event_type: str = EventType.PIREP_ACCEPTED.value


@dataclass
class PirepRejectedEvent(PirepEvent):
    """Event published when a PIREP is rejected."""

    event_type: str = EventType.PIREP_REJECTED.value


@dataclass
class PilotStatsChangedEvent(BaseEvent):
    """Event published when a pilot's derived state changes."""

    event_type: str = EventType.PILOT_STATS_CHANGED.value

    pilot_id: str = ''
    stat_field: str = ''  # 'airport', 'rank'
    previous_value: Optional[str] = None
    new_value: Optional[str] = None


# =============================================================================
# Event Publisher
# =============================================================================

class EventPublisher:
    """
    Event publisher for the PIREP service.

    Backends:
    - redis: Redis Pub/Sub, one channel per event type
    - memory: in-process list (for testing)
    """

    def __init__(self, backend: str = None):
        self.backend = backend or getattr(settings, 'EVENT_BACKEND', 'redis')
        self._client = None
        self._initialize_client()

    def _initialize_client(self):
        """Initialize the message broker client."""
        if self.backend == 'redis':
            self._init_redis()
        elif self.backend == 'memory':
            self._init_memory()
        else:
            logger.warning(f"Unknown event backend: {self.backend}, using memory")
            self._init_memory()

    def _init_redis(self):
        """Initialize Redis client."""
        redis_url = getattr(settings, 'REDIS_URL', 'redis://localhost:6379/0')
        self._client = redis.from_url(redis_url)
        logger.info("Redis event publisher initialized")

    def _init_memory(self):
        """Initialize in-memory event store (for testing)."""
        self._client = []
        self.backend = 'memory'
        logger.info("In-memory event publisher initialized")

    def publish(self, event: BaseEvent) -> bool:
        """
        Publish an event.

        Broker failures are logged and reported through the return value;
        they never propagate to the caller.

        Args:
            event: Event to publish

        Returns:
            True if the event was published successfully
        """
        try:
            logger.info(
                f"Publishing event: {event.event_type}",
                extra={
                    'event_id': event.event_id,
                    'event_type': event.event_type,
                }
            )
            if self.backend == 'redis':
                return self._publish_redis(event)
            return self._publish_memory(event)

        except Exception as e:
            logger.error(
                f"Failed to publish event: {event.event_type}",
                exc_info=True,
                extra={
                    'event_id': event.event_id,
                    'error': str(e),
                }
            )
            return False

    def _publish_redis(self, event: BaseEvent) -> bool:
        """Publish to Redis Pub/Sub."""
        channel = f"pirep:{event.event_type}"
        self._client.publish(channel, event.to_json())
        logger.debug(f"Published event to Redis channel {channel}")
        return True

    def _publish_memory(self, event: BaseEvent) -> bool:
        """Store event in memory (for testing)."""
        self._client.append(event.to_dict())
        logger.debug(f"Stored event in memory: {event.event_type}")
        return True

    def get_memory_events(self) -> List[Dict[str, Any]]:
        """Get all events stored in memory (for testing)."""
        if self.backend == 'memory':
            return self._client
        return []

    def clear_memory_events(self):
        """Clear memory events (for testing)."""
        if self.backend == 'memory':
            self._client.clear()

    def publish_on_commit(self, event: BaseEvent) -> None:
        """
        Publish an event once the current transaction commits.

        The payload is built by the caller, so it reflects the state at
        the time of the change. Nothing is published on rollback.
        """
        transaction.on_commit(lambda: self.publish(event))

    def publish_pilot_stats_changed(
        self,
        pilot,
        stat_field: str,
        previous_value: Any = None,
        new_value: Any = None,
    ) -> None:
        """Queue a pilot stats changed event for commit."""
        event = PilotStatsChangedEvent(
            pilot_id=str(pilot.id),
            stat_field=stat_field,
            previous_value=str(previous_value) if previous_value is not None else None,
            new_value=str(new_value) if new_value is not None else None,
        )
        self.publish_on_commit(event)


# Global publisher instance
_publisher: Optional[EventPublisher] = None


def get_publisher() -> EventPublisher:
    """Get the global event publisher instance."""
    global _publisher
    if _publisher is None:
        _publisher = EventPublisher()
    return _publisher
