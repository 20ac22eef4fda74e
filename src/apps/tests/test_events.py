# src/apps/tests/test_events.py
"""
Event Tests

Tests for event payloads and the event publisher backends.
"""

import json
from unittest.mock import patch

import pytest


class TestEvents:
    """Tests for event dataclasses."""

    def test_stats_event_defaults(self):
        from apps.core.events import EventType, PilotStatsChangedEvent

        event = PilotStatsChangedEvent(pilot_id='1', stat_field='rank', new_value='2')

        assert event.event_type == EventType.PILOT_STATS_CHANGED.value
        assert event.source == 'pirep-service'
        assert event.event_id

    def test_to_json(self):
        from apps.core.events import PilotStatsChangedEvent

        event = PilotStatsChangedEvent(pilot_id='1', stat_field='airport', new_value='KORD')

        payload = json.loads(event.to_json())
        assert payload['event_type'] == 'pilot.stats_changed'
        assert payload['new_value'] == 'KORD'
        assert payload['previous_value'] is None

    @pytest.mark.django_db
    def test_pirep_snapshot(self, pending_pirep):
        from apps.core.events import PirepAcceptedEvent

        event = PirepAcceptedEvent.from_pirep(pending_pirep, correlation_id='abc')

        assert event.event_type == 'pirep.accepted'
        assert event.pirep_id == str(pending_pirep.id)
        assert event.pilot_id == str(pending_pirep.pilot_id)
        assert event.arrival_airport == 'KORD'
        assert event.flight_time == 4.0
        assert event.correlation_id == 'abc'


class TestEventPublisher:
    """Tests for EventPublisher."""

    def test_memory_backend(self):
        from apps.core.events import EventPublisher, PilotStatsChangedEvent

        publisher = EventPublisher(backend='memory')

        assert publisher.publish(PilotStatsChangedEvent(pilot_id='1')) is True
        assert len(publisher.get_memory_events()) == 1

        publisher.clear_memory_events()
        assert publisher.get_memory_events() == []

    def test_unknown_backend_falls_back_to_memory(self):
        from apps.core.events import EventPublisher

        publisher = EventPublisher(backend='kafka')

        assert publisher.backend == 'memory'

    def test_redis_backend(self, settings):
        from apps.core.events import EventPublisher, PilotStatsChangedEvent

        settings.REDIS_URL = 'redis://redis:6379/1'
        with patch('apps.core.events.redis.from_url') as from_url:
            publisher = EventPublisher(backend='redis')
            event = PilotStatsChangedEvent(pilot_id='7')

            assert publisher.publish(event) is True

        from_url.assert_called_once_with('redis://redis:6379/1')
        client = from_url.return_value
        client.publish.assert_called_once_with('pirep:pilot.stats_changed', event.to_json())
        assert publisher.get_memory_events() == []

    def test_publish_failure_is_reported(self):
        from apps.core.events import EventPublisher, PilotStatsChangedEvent

        with patch('apps.core.events.redis.from_url') as from_url:
            from_url.return_value.publish.side_effect = ConnectionError('broker down')
            publisher = EventPublisher(backend='redis')

            assert publisher.publish(PilotStatsChangedEvent(pilot_id='7')) is False

    @pytest.mark.django_db
    def test_publish_on_commit(self, django_capture_on_commit_callbacks):
        from apps.core.events import EventPublisher, PilotStatsChangedEvent

        publisher = EventPublisher(backend='memory')

        with django_capture_on_commit_callbacks(execute=False) as callbacks:
            publisher.publish_on_commit(PilotStatsChangedEvent(pilot_id='1'))

        assert publisher.get_memory_events() == []
        assert len(callbacks) == 1

        callbacks[0]()
        assert len(publisher.get_memory_events()) == 1

    @pytest.mark.django_db
    def test_publish_pilot_stats_changed(self, pilot, django_capture_on_commit_callbacks):
        from apps.core.events import EventPublisher

        publisher = EventPublisher(backend='memory')

        with django_capture_on_commit_callbacks(execute=True):
            publisher.publish_pilot_stats_changed(pilot, 'rank', previous_value=1, new_value=2)

        event = publisher.get_memory_events()[0]
        assert event['pilot_id'] == str(pilot.id)
        assert event['stat_field'] == 'rank'
        assert (event['previous_value'], event['new_value']) == ('1', '2')

    def test_global_publisher_uses_settings(self):
        from apps.core.events import get_publisher

        assert get_publisher() is get_publisher()
        assert get_publisher().backend == 'memory'
