# src/apps/tests/test_api.py
"""
API Tests

Tests for the service health endpoints and the admin change form.
"""

from decimal import Decimal

import pytest
from django.urls import reverse


class TestHealthAPI:
    """Tests for health and readiness endpoints."""

    def test_health_check(self, client):
        response = client.get(reverse('health_check'))

        assert response.status_code == 200
        assert response.json()['status'] == 'healthy'
        assert response.json()['service'] == 'pirep-service'

    @pytest.mark.django_db
    def test_readiness_check(self, client):
        response = client.get(reverse('readiness_check'))

        assert response.status_code == 200
        assert response.json()['checks']['database'] == 'connected'

    def test_health_reports_configured_service(self, client, settings):
        settings.SERVICE_VERSION = '2.1.0'

        response = client.get(reverse('health_check'))

        assert response.json()['version'] == '2.1.0'


# =============================================================================
# Admin Tests
# =============================================================================

@pytest.mark.django_db
class TestPirepAdmin:
    """Tests for the PIREP admin change form."""

    @pytest.fixture
    def admin_request(self, rf, admin_user):
        request = rf.get('/admin/core/pirep/')
        request.user = admin_user
        return request

    def _model_admin(self):
        from django.contrib import admin
        from apps.core.models import Pirep
        return admin.site._registry[Pirep]

    def test_pending_pirep_is_editable(self, admin_request, pending_pirep):
        model_admin = self._model_admin()

        readonly = model_admin.get_readonly_fields(admin_request, pending_pirep)

        assert 'flight_time' not in readonly
        assert 'state' in readonly

    @pytest.mark.parametrize('transition', ['accept', 'reject'])
    def test_reviewed_pirep_locks_credited_fields(
        self, admin_request, pirep_service, pending_pirep, transition
    ):
        getattr(pirep_service, transition)(pending_pirep)
        model_admin = self._model_admin()

        readonly = model_admin.get_readonly_fields(admin_request, pending_pirep)
        form_class = model_admin.get_form(admin_request, pending_pirep)

        for field in ('pilot', 'flight_time', 'arrival_airport'):
            assert field in readonly
            assert field not in form_class.base_fields

    def test_add_form_keeps_fields(self, admin_request):
        readonly = self._model_admin().get_readonly_fields(admin_request, None)

        assert readonly == ['state']

    def test_reject_after_admin_edit_restores_pilot(
        self, admin_request, pirep_service, pending_pirep, pilot
    ):
        pirep_service.accept(pending_pirep)
        form_class = self._model_admin().get_form(admin_request, pending_pirep)

        form = form_class(
            instance=pending_pirep,
            data={
                'airline_code': 'VMS',
                'flight_number': '100',
                'departure_airport': 'KJFK',
                'route': '',
                'source': 'manual',
                'notes': 'edited',
                'flight_time': '6.00',
                'arrival_airport': 'KORD',
                'pilot': pilot.id,
            },
        )
        assert form.is_valid(), form.errors
        form.save()
        pirep_service.reject(pending_pirep)

        pilot.refresh_from_db()
        assert pilot.flight_time == Decimal('0.00')
        assert pilot.flights == 0
