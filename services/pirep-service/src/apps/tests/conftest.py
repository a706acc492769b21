# services/pirep-service/src/apps/tests/conftest.py
"""
Pytest Configuration and Fixtures

Shared fixtures for PIREP service tests.
"""

import uuid
from datetime import timedelta
from unittest.mock import MagicMock, patch

import pytest
from django.utils import timezone


# =============================================================================
# UUID Fixtures
# =============================================================================

@pytest.fixture
def pilot_id():
    """Generate pilot ID."""
    return uuid.uuid4()


@pytest.fixture
def other_pilot_id():
    """Generate a second pilot ID."""
    return uuid.uuid4()


@pytest.fixture
def staff_id():
    """Generate staff member ID."""
    return uuid.uuid4()


# =============================================================================
# Role Fixtures
# =============================================================================

@pytest.fixture
def staff_roles():
    """Roles of a PIREP reviewer."""
    from apps.core.services.roles import Role
    return frozenset({Role.PIREPS})


@pytest.fixture
def pilot_roles():
    """A plain pilot holds no staff roles."""
    return frozenset()


# =============================================================================
# Reference Data Fixtures
# =============================================================================

@pytest.fixture
def aircraft(db):
    """Create a fleet aircraft."""
    from apps.core.models import Aircraft
    return Aircraft.objects.create(name='A320', livery='House')


@pytest.fixture
def other_aircraft(db):
    """Create a second fleet aircraft."""
    from apps.core.models import Aircraft
    return Aircraft.objects.create(name='B777', livery='Retro')


@pytest.fixture
def multiplier(db):
    """Create a 2x multiplier."""
    from apps.core.models import Multiplier
    return Multiplier.objects.create(name='Double', value=2.0)


@pytest.fixture
def other_multiplier(db):
    """Create a 1.5x multiplier."""
    from apps.core.models import Multiplier
    return Multiplier.objects.create(name='Event', value=1.5)


@pytest.fixture
def ranks(db, aircraft, other_aircraft):
    """
    Create a three tier ladder.

    Cadet (0h, capped at 10h per report) flies the A320, First Officer
    (10h, no cap) adds the B777, Captain (100h) flies everything.
    """
    from apps.core.models import Rank, RankAircraft

    cadet = Rank.objects.create(name='Cadet', minimum_flight_time=0, maximum_flight_time=10)
    first_officer = Rank.objects.create(name='First Officer', minimum_flight_time=10)
    captain = Rank.objects.create(
        name='Captain', minimum_flight_time=100, allow_all_aircraft=True
    )
    RankAircraft.objects.create(rank=cadet, aircraft=aircraft)
    RankAircraft.objects.create(rank=first_officer, aircraft=other_aircraft)

    return {'cadet': cadet, 'first_officer': first_officer, 'captain': captain}


# =============================================================================
# PIREP Fixtures
# =============================================================================

@pytest.fixture
def pirep_data(aircraft):
    """Generate a valid PIREP submission (raw flight time in minutes)."""
    return {
        'flight_number': 'VA100',
        'date': timezone.now() - timedelta(days=1),
        'departure_icao': 'KJFK',
        'arrival_icao': 'EGLL',
        'flight_time': 510,
        'cargo': 1200,
        'fuel_burned': 42000,
        'aircraft_id': aircraft.id,
        'multiplier_id': None,
        'comments': None,
    }


@pytest.fixture
def make_pirep(db, aircraft, pilot_id):
    """Factory fixture for PIREP rows written directly."""
    from apps.core.models import Pirep

    def _make_pirep(**overrides):
        data = {
            'pilot_id': pilot_id,
            'flight_number': 'VA100',
            'date': timezone.now() - timedelta(days=1),
            'departure_icao': 'KJFK',
            'arrival_icao': 'EGLL',
            'flight_time': 510,
            'cargo': 1200,
            'fuel_burned': 42000,
            'aircraft': aircraft,
            'status': Pirep.Status.PENDING,
            **overrides,
        }
        return Pirep.objects.create(**data)

    return _make_pirep


@pytest.fixture
def pending_pirep(make_pirep):
    """Create a pending PIREP."""
    return make_pirep()


@pytest.fixture
def approved_pirep(make_pirep):
    """Create an approved PIREP."""
    from apps.core.models import Pirep
    return make_pirep(status=Pirep.Status.APPROVED)


# =============================================================================
# Collaborator Fixtures
# =============================================================================

@pytest.fixture
def mock_notifier():
    """PIREP notifier that records calls instead of posting."""
    from apps.core.services.notification_service import PirepNotifier
    notifier = MagicMock(spec=PirepNotifier)
    notifier.notify_pirep_created.return_value = True
    return notifier


@pytest.fixture
def mock_schedule():
    """Patch rank-up scheduling and expose the mock."""
    from apps.core.services.rankup_service import RankupService
    with patch.object(RankupService, 'schedule_rank_evaluation', return_value=True) as mocked:
        yield mocked


@pytest.fixture
def webhook_settings(settings):
    """Configure both webhook URLs."""
    settings.PIREP_SETTINGS = {
        **settings.PIREP_SETTINGS,
        'PIREPS_WEBHOOK_URL': 'https://hooks.example.com/pireps',
        'RANKUP_WEBHOOK_URL': 'https://hooks.example.com/rankup',
        'AIRLINE_NAME': 'Example Virtual',
        'AIRLINE_CALLSIGN': 'VA',
    }
    return settings


# =============================================================================
# API Client Fixtures
# =============================================================================

@pytest.fixture
def api_client():
    """Get Django REST framework API client."""
    from rest_framework.test import APIClient
    return APIClient()


@pytest.fixture
def pilot_client(api_client, pilot_id):
    """API client acting as a plain pilot."""
    api_client.credentials(
        HTTP_X_USER_ID=str(pilot_id),
        HTTP_X_USER_NAME='Jane Pilot',
        HTTP_X_USER_CALLSIGN='123',
    )
    return api_client


@pytest.fixture
def staff_client(staff_id):
    """API client acting as a PIREP reviewer."""
    from rest_framework.test import APIClient
    client = APIClient()
    client.credentials(
        HTTP_X_USER_ID=str(staff_id),
        HTTP_X_USER_ROLES='[pireps]',
        HTTP_X_USER_NAME='Ops Desk',
    )
    return client
