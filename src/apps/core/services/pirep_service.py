# src/apps/core/services/pirep_service.py
"""
PIREP Service

Filing of flight reports and their review state machine.
"""

import uuid
import logging
from decimal import Decimal, InvalidOperation
from typing import List, Dict, Any, Optional

from django.conf import settings
from django.db import transaction

from ..events import (
    get_publisher,
    PirepAcceptedEvent,
    PirepFiledEvent,
    PirepRejectedEvent,
)
from ..models import Acars, Pilot, Pirep, PirepFieldValue
from .exceptions import PirepNotFoundError, PirepValidationError
from .geo_service import GeoService
from .pilot_service import PilotService

logger = logging.getLogger(__name__)


class PirepService:
    """
    Service class for PIREP operations.

    State changes:
        PENDING  -> ACCEPTED | REJECTED
        ACCEPTED <-> REJECTED

    Every transition runs in one transaction that also applies the
    pilot aggregate deltas. The PIREP row is locked before the pilot row.
    """

    @classmethod
    def get_pirep(cls, pirep_id: uuid.UUID) -> Pirep:
        """
        Get a PIREP by ID.

        Raises:
            PirepNotFoundError: If the PIREP does not exist
        """
        try:
            return Pirep.objects.select_related(
                'pilot', 'pilot__rank', 'departure_airport', 'arrival_airport'
            ).get(id=pirep_id)
        except Pirep.DoesNotExist:
            raise PirepNotFoundError(pirep_id=str(pirep_id))

    # ==========================================================================
    # Route
    # ==========================================================================

    @classmethod
    @transaction.atomic
    def save_route(cls, pirep: Pirep) -> Pirep:
        """
        Rebuild the PIREP's ROUTE rows from its route text.

        Existing route rows are always deleted first; an empty route
        leaves none.
        """
        Acars.objects.filter(pirep=pirep, type=Acars.Type.ROUTE).delete()

        if not pirep.route:
            return pirep

        route = GeoService.route_to_nav_points(
            pirep.route,
            pirep.departure_airport,
            pirep.arrival_airport
        )

        Acars.objects.bulk_create([
            Acars(
                pirep=pirep,
                type=Acars.Type.ROUTE,
                order=order,
                name=point.ident,
                nav_type=point.type,
                latitude=point.latitude,
                longitude=point.longitude,
            )
            for order, point in enumerate(route)
        ])

        logger.debug(f"Saved {len(route)} route points for PIREP {pirep.id}")
        return pirep

    @classmethod
    @transaction.atomic
    def update_route(cls, pirep: Pirep, route: str) -> Pirep:
        """Change the route text and rebuild the stored route."""
        pirep.route = route or ''
        pirep.save(update_fields=['route', 'updated_at'])
        return cls.save_route(pirep)

    # ==========================================================================
    # Filing
    # ==========================================================================

    @classmethod
    @transaction.atomic
    def create(
        cls,
        pirep: Pirep,
        field_values: Optional[List[Dict[str, Any]]] = None
    ) -> Pirep:
        """
        File a new PIREP.

        The route is resolved and stored, the custom field values are
        saved and the filed event is queued. When the pilot's rank
        auto-approves the PIREP's source it is accepted right away.

        Args:
            pirep: Unsaved PIREP
            field_values: Optional list of {'name', 'value', 'source'}

        Returns:
            The saved PIREP

        Raises:
            PirepValidationError: If the PIREP or a field value is invalid
        """
        field_values = field_values or []
        cls._validate_pirep(pirep)
        cls._validate_field_values(field_values)

        default_state = cls._default_state(pirep)

        pirep.state = Pirep.State.PENDING
        pirep.save()
        cls.save_route(pirep)

        for fv in field_values:
            PirepFieldValue.objects.create(
                pirep=pirep,
                name=fv['name'],
                value='' if fv.get('value') is None else str(fv['value']),
                source=fv.get('source') or pirep.source,
            )

        logger.info(f"New PIREP filed: {pirep.id} by pilot {pirep.pilot_id}")
        get_publisher().publish_on_commit(PirepFiledEvent.from_pirep(pirep))

        if default_state == Pirep.State.ACCEPTED:
            pirep = cls.accept(pirep)

        return pirep

    @classmethod
    def _default_state(cls, pirep: Pirep) -> str:
        """Initial review state from the pilot's rank policy."""
        rank = pirep.pilot.rank
        if rank is None:
            return Pirep.State.PENDING

        if pirep.source == Pirep.Source.ACARS:
            auto_approve = rank.auto_approve_acars
        else:
            auto_approve = rank.auto_approve_manual

        return Pirep.State.ACCEPTED if auto_approve else Pirep.State.PENDING

    # ==========================================================================
    # State Transitions
    # ==========================================================================

    @classmethod
    def change_state(cls, pirep: Pirep, new_state: str) -> Pirep:
        """
        Move a PIREP to a new state.

        Requests that are not a valid transition leave the PIREP
        unchanged. With PIREP_STATE_TOGGLE_ANY_TARGET enabled, any
        request on an accepted or rejected PIREP flips it to the other
        state.

        Raises:
            PirepValidationError: If new_state is not a PIREP state
        """
        try:
            new_state = Pirep.State(new_state)
        except ValueError:
            raise PirepValidationError(
                message=f"Unknown PIREP state: {new_state}",
                field="state"
            )

        logger.info(f"PIREP {pirep.id} state change from {pirep.state} to {new_state}")

        if pirep.state == new_state:
            return pirep

        toggle_any = getattr(settings, 'PIREP_STATE_TOGGLE_ANY_TARGET', False)

        if pirep.state == Pirep.State.PENDING:
            if new_state == Pirep.State.ACCEPTED:
                return cls.accept(pirep)
            if new_state == Pirep.State.REJECTED:
                return cls.reject(pirep)

        elif pirep.state == Pirep.State.ACCEPTED:
            if toggle_any or new_state == Pirep.State.REJECTED:
                return cls.reject(pirep)

        elif pirep.state == Pirep.State.REJECTED:
            if toggle_any or new_state == Pirep.State.ACCEPTED:
                return cls.accept(pirep)

        logger.info(f"PIREP {pirep.id} left in {pirep.state}, no transition to {new_state}")
        return pirep

    @classmethod
    @transaction.atomic
    def accept(cls, pirep: Pirep) -> Pirep:
        """
        Accept a PIREP and credit the pilot.

        Adds the flight time and one flight to the pilot, recalculates
        the rank and moves the pilot to the arrival airport. Accepting
        an accepted PIREP does nothing.
        """
        if cls._lock_state(pirep) == Pirep.State.ACCEPTED:
            return pirep

        pilot = PilotService.get_pilot_for_update(pirep.pilot_id)
        cls._apply_flight(pilot, pirep.flight_time, +1)

        pirep.state = Pirep.State.ACCEPTED
        pirep.save(update_fields=['state', 'updated_at'])
        pirep.pilot = pilot

        cls.set_pilot_location(pilot, pirep)

        logger.info(f"PIREP {pirep.id} state change to ACCEPTED")
        get_publisher().publish_on_commit(PirepAcceptedEvent.from_pirep(pirep))

        return pirep

    @classmethod
    @transaction.atomic
    def reject(cls, pirep: Pirep) -> Pirep:
        """
        Reject a PIREP.

        A previously accepted PIREP has its flight time and flight
        removed from the pilot again. Rejecting a rejected PIREP does
        nothing.
        """
        previous_state = cls._lock_state(pirep)
        if previous_state == Pirep.State.REJECTED:
            return pirep

        if previous_state == Pirep.State.ACCEPTED:
            pilot = PilotService.get_pilot_for_update(pirep.pilot_id)
            cls._apply_flight(pilot, -pirep.flight_time, -1)
            pirep.pilot = pilot

        pirep.state = Pirep.State.REJECTED
        pirep.save(update_fields=['state', 'updated_at'])

        logger.info(f"PIREP {pirep.id} state change to REJECTED")
        get_publisher().publish_on_commit(PirepRejectedEvent.from_pirep(pirep))

        return pirep

    @classmethod
    @transaction.atomic
    def set_pilot_location(cls, pilot: Pilot, pirep: Pirep) -> Pilot:
        """
        Put the pilot at the PIREP's arrival airport.

        Also records the PIREP as the pilot's last one and queues a
        stats event carrying the previous airport.
        """
        # The caller may hold a stale instance, read the stored airport under lock
        previous_airport = PilotService.get_pilot_for_update(pilot.id).current_airport_id

        pilot.current_airport_id = pirep.arrival_airport_id
        pilot.last_pirep = pirep
        pilot.save(update_fields=['current_airport', 'last_pirep', 'updated_at'])

        get_publisher().publish_pilot_stats_changed(
            pilot,
            'airport',
            previous_value=previous_airport,
            new_value=pilot.current_airport_id
        )
        return pilot

    # ==========================================================================
    # Private Helper Methods
    # ==========================================================================

    @classmethod
    def _lock_state(cls, pirep: Pirep) -> str:
        """Lock the PIREP row and reload its stored state."""
        pirep.state = (
            Pirep.objects.select_for_update()
            .values_list('state', flat=True)
            .get(id=pirep.id)
        )
        return pirep.state

    @classmethod
    def _apply_flight(cls, pilot: Pilot, flight_time: Decimal, count: int) -> None:
        PilotService.adjust_flight_time(pilot, flight_time)
        PilotService.adjust_flight_count(pilot, count)
        PilotService.calculate_pilot_rank(pilot)

    @classmethod
    def _validate_pirep(cls, pirep: Pirep) -> None:
        missing = [
            f for f in ('pilot_id', 'departure_airport_id', 'arrival_airport_id')
            if getattr(pirep, f) is None
        ]
        if missing:
            raise PirepValidationError(
                message=f"Missing required fields: {', '.join(missing)}",
                details={"missing_fields": missing}
            )

        try:
            flight_time = Decimal(str(pirep.flight_time))
        except (InvalidOperation, TypeError, ValueError):
            flight_time = None

        if flight_time is None or not flight_time.is_finite():
            raise PirepValidationError(
                message=f"Flight time is not a number: {pirep.flight_time!r}",
                field="flight_time"
            )

        if flight_time < 0:
            raise PirepValidationError(
                message="Flight time cannot be negative",
                field="flight_time"
            )

    @classmethod
    def _validate_field_values(cls, field_values: List[Dict[str, Any]]) -> None:
        sources = set(Pirep.Source.values)
        for i, fv in enumerate(field_values):
            if not fv.get('name'):
                raise PirepValidationError(
                    message=f"Field value {i} has no name",
                    field="name"
                )
            if fv.get('source') and fv['source'] not in sources:
                raise PirepValidationError(
                    message=f"Field value {fv['name']} has unknown source {fv['source']}",
                    field="source"
                )
