# services/pirep-service/src/apps/tests/test_services.py
"""
Service Tests

Tests for PIREP submission, editing, deletion and flight time transfers.
"""

import uuid

import pytest
from django.db import DatabaseError
from unittest.mock import patch

from apps.core.models import Pirep, PirepEvent
from apps.core.services import PirepService
from apps.core.services.exceptions import (
    AircraftNotAllowed,
    NotificationError,
    PirepNotFound,
    PirepPermissionError,
    PirepPersistenceError,
    PirepValidationError,
    RankLimitExceeded,
)


# =============================================================================
# Create
# =============================================================================

@pytest.mark.django_db
class TestCreatePirep:
    """Tests for PirepService.create_pirep."""

    def test_create_pirep(self, pirep_data, pilot_id, mock_notifier):
        result = PirepService.create_pirep(pirep_data, pilot_id, notifier=mock_notifier)

        pirep = result.pirep
        assert pirep.status == Pirep.Status.PENDING
        assert pirep.flight_time == 510
        assert result.adjusted_flight_time == 510
        assert pirep.pilot_id == pilot_id
        assert pirep.denied_reason == ''

    def test_transatlantic_submission(self, pirep_data, pilot_id, mock_notifier):
        pirep_data.update({'cargo': 1000, 'fuel_burned': 5000})

        result = PirepService.create_pirep(pirep_data, pilot_id, notifier=mock_notifier)

        assert result.adjusted_flight_time == 510
        assert result.pirep.status == Pirep.Status.PENDING
        assert result.pirep.cargo == 1000
        assert PirepEvent.objects.filter(
            pirep=result.pirep, action=PirepEvent.Action.CREATED
        ).count() == 1

    def test_create_writes_created_event(self, pirep_data, pilot_id, mock_notifier):
        result = PirepService.create_pirep(pirep_data, pilot_id, notifier=mock_notifier)

        events = list(PirepEvent.objects.filter(pirep=result.pirep))
        assert len(events) == 1
        assert events[0].action == PirepEvent.Action.CREATED
        assert events[0].performed_by == pilot_id
        assert events[0].previous_values is None
        assert events[0].new_values is None

    def test_multiplier_applied_to_stored_time(
        self, pirep_data, pilot_id, multiplier, mock_notifier
    ):
        pirep_data['multiplier_id'] = multiplier.id

        result = PirepService.create_pirep(pirep_data, pilot_id, notifier=mock_notifier)

        assert result.adjusted_flight_time == 1020
        assert result.pirep.flight_time == 1020
        assert result.pirep.multiplier_id == multiplier.id

    def test_notification_payload(self, pirep_data, pilot_id, aircraft, mock_notifier):
        PirepService.create_pirep(
            pirep_data, pilot_id,
            pilot_name='Jane Pilot', pilot_callsign='123',
            notifier=mock_notifier,
        )

        mock_notifier.notify_pirep_created.assert_called_once()
        payload = mock_notifier.notify_pirep_created.call_args[0][0]
        assert payload.pilot_name == 'Jane Pilot'
        assert payload.pilot_callsign == '123'
        assert payload.flight_time == 510
        assert payload.aircraft == aircraft.label
        assert payload.departure_icao == 'KJFK'

    def test_pilot_identity_stored(self, pirep_data, pilot_id, mock_notifier):
        result = PirepService.create_pirep(
            pirep_data, pilot_id,
            pilot_name='Jane Pilot', pilot_callsign=123,
            notifier=mock_notifier,
        )

        result.pirep.refresh_from_db()
        assert result.pirep.pilot_name == 'Jane Pilot'
        assert result.pirep.pilot_callsign == '123'

    def test_invalid_icao_writes_nothing(self, pirep_data, pilot_id, mock_notifier):
        pirep_data['arrival_icao'] = 'egll'

        with pytest.raises(PirepValidationError):
            PirepService.create_pirep(pirep_data, pilot_id, notifier=mock_notifier)

        assert Pirep.objects.count() == 0
        assert PirepEvent.objects.count() == 0
        mock_notifier.notify_pirep_created.assert_not_called()

    def test_rank_cap_writes_nothing(self, ranks, pirep_data, pilot_id, mock_notifier):
        pirep_data['flight_time'] = 601

        with pytest.raises(RankLimitExceeded):
            PirepService.create_pirep(pirep_data, pilot_id, notifier=mock_notifier)

        assert Pirep.objects.count() == 0

    def test_rank_cap_uses_raw_time(
        self, ranks, pirep_data, pilot_id, multiplier, mock_notifier
    ):
        # 500 raw minutes is under the 10h cap even though 1000 are credited
        pirep_data['flight_time'] = 500
        pirep_data['multiplier_id'] = multiplier.id

        result = PirepService.create_pirep(pirep_data, pilot_id, notifier=mock_notifier)

        assert result.adjusted_flight_time == 1000

    def test_aircraft_not_allowed(
        self, ranks, pirep_data, pilot_id, other_aircraft, mock_notifier
    ):
        pirep_data['aircraft_id'] = other_aircraft.id

        with pytest.raises(AircraftNotAllowed):
            PirepService.create_pirep(pirep_data, pilot_id, notifier=mock_notifier)

        assert Pirep.objects.count() == 0

    def test_unknown_aircraft(self, pirep_data, pilot_id, mock_notifier):
        pirep_data['aircraft_id'] = uuid.uuid4()

        with pytest.raises(PirepValidationError) as exc_info:
            PirepService.create_pirep(pirep_data, pilot_id, notifier=mock_notifier)

        assert exc_info.value.message == "Aircraft not found"

    def test_unknown_multiplier(self, pirep_data, pilot_id, mock_notifier):
        pirep_data['multiplier_id'] = uuid.uuid4()

        with pytest.raises(PirepValidationError) as exc_info:
            PirepService.create_pirep(pirep_data, pilot_id, notifier=mock_notifier)

        assert exc_info.value.message == "Multiplier not found"

    def test_notifier_failure_keeps_pirep(self, pirep_data, pilot_id, mock_notifier):
        mock_notifier.notify_pirep_created.side_effect = NotificationError(
            message="Failed to send PIREP webhook for x: boom"
        )

        with pytest.raises(NotificationError):
            PirepService.create_pirep(pirep_data, pilot_id, notifier=mock_notifier)

        assert Pirep.objects.count() == 1
        assert PirepEvent.objects.count() == 1

    def test_database_failure_is_normalised(self, pirep_data, pilot_id, mock_notifier):
        with patch.object(
            Pirep.objects, 'create', side_effect=DatabaseError('NOT NULL constraint failed')
        ):
            with pytest.raises(PirepPersistenceError):
                PirepService.create_pirep(pirep_data, pilot_id, notifier=mock_notifier)

        mock_notifier.notify_pirep_created.assert_not_called()

    def test_no_webhook_configured(self, pirep_data, pilot_id):
        result = PirepService.create_pirep(pirep_data, pilot_id)

        assert result.pirep.id is not None


# =============================================================================
# Read
# =============================================================================

@pytest.mark.django_db
class TestReadPireps:
    """Tests for PIREP lookups."""

    def test_get_pirep(self, pending_pirep):
        assert PirepService.get_pirep(pending_pirep.id) == pending_pirep

    def test_get_pirep_not_found(self):
        with pytest.raises(PirepNotFound):
            PirepService.get_pirep(uuid.uuid4())

    def test_list_filters_by_pilot_and_status(self, make_pirep, pilot_id, other_pilot_id):
        make_pirep()
        make_pirep(status=Pirep.Status.APPROVED)
        make_pirep(pilot_id=other_pilot_id)

        assert PirepService.list_pireps(pilot_id=pilot_id).count() == 2
        assert PirepService.list_pireps(
            pilot_id=pilot_id, status=Pirep.Status.APPROVED
        ).count() == 1
        assert PirepService.list_pireps().count() == 3


# =============================================================================
# Edit
# =============================================================================

@pytest.mark.django_db
class TestEditPirep:
    """Tests for PirepService.edit_pirep."""

    def test_owner_edits_pending(self, pending_pirep, pilot_id, pilot_roles, mock_schedule):
        pirep = PirepService.edit_pirep(
            pending_pirep.id, {'comments': 'Smooth ride'}, pilot_id, pilot_roles
        )

        assert pirep.comments == 'Smooth ride'
        assert pirep.flight_time == 510
        mock_schedule.assert_not_called()
        event = PirepEvent.objects.get(pirep=pirep, action=PirepEvent.Action.EDITED)
        assert event.details == 'Comments to "Smooth ride"'
        assert event.previous_values == {'v': 1, 'fields': {'comments': None}}
        assert event.new_values == {'v': 1, 'fields': {'comments': 'Smooth ride'}}

    def test_diff_only_contains_changed_fields(self, pending_pirep, pilot_id, pilot_roles):
        PirepService.edit_pirep(
            pending_pirep.id,
            {'flight_number': 'VA100', 'arrival_icao': 'LFPG', 'cargo': 1200},
            pilot_id, pilot_roles,
        )

        event = PirepEvent.objects.get(pirep=pending_pirep, action=PirepEvent.Action.EDITED)
        assert list(event.new_values['fields']) == ['arrival_icao']
        assert event.details == 'Arrival to LFPG'

    def test_no_op_edit_records_empty_maps(self, pending_pirep, pilot_id, pilot_roles):
        PirepService.edit_pirep(
            pending_pirep.id, {'flight_number': 'VA100'}, pilot_id, pilot_roles
        )

        event = PirepEvent.objects.get(pirep=pending_pirep, action=PirepEvent.Action.EDITED)
        assert event.previous_values == {'v': 1, 'fields': {}}
        assert event.new_values == {'v': 1, 'fields': {}}
        assert event.details is None

    def test_multiplier_swap_recomputes_time(
        self, make_pirep, multiplier, other_multiplier, pilot_id, pilot_roles
    ):
        pirep = make_pirep(flight_time=960, multiplier=multiplier)

        updated = PirepService.edit_pirep(
            pirep.id, {'multiplier_id': other_multiplier.id}, pilot_id, pilot_roles
        )

        assert updated.flight_time == 720
        assert updated.multiplier_id == other_multiplier.id
        event = PirepEvent.objects.get(pirep=pirep, action=PirepEvent.Action.EDITED)
        assert event.new_values['fields'] == {
            'flight_time': 720,
            'multiplier_id': str(other_multiplier.id),
        }
        assert event.details == 'Flight time to 12h, Multiplier updated'

    def test_multiplier_removed(self, make_pirep, multiplier, pilot_id, pilot_roles):
        pirep = make_pirep(flight_time=960, multiplier=multiplier)

        updated = PirepService.edit_pirep(
            pirep.id, {'multiplier_id': None}, pilot_id, pilot_roles
        )

        assert updated.flight_time == 480
        assert updated.multiplier_id is None

    def test_raw_time_entry_uses_multiplier(
        self, make_pirep, multiplier, pilot_id, pilot_roles
    ):
        pirep = make_pirep(flight_time=960, multiplier=multiplier)

        updated = PirepService.edit_pirep(
            pirep.id, {'hours': 2, 'minutes': 30}, pilot_id, pilot_roles
        )

        assert updated.flight_time == 300

    def test_direct_flight_time_is_credited_value(
        self, make_pirep, multiplier, pilot_id, pilot_roles
    ):
        pirep = make_pirep(flight_time=960, multiplier=multiplier)

        updated = PirepService.edit_pirep(
            pirep.id, {'flight_time': 1000}, pilot_id, pilot_roles
        )

        assert updated.flight_time == 1000

    def test_raw_time_wins_over_flight_time(
        self, make_pirep, multiplier, pilot_id, pilot_roles
    ):
        pirep = make_pirep(flight_time=300, multiplier=multiplier)

        updated = PirepService.edit_pirep(
            pirep.id, {'hours': 2, 'minutes': 30, 'flight_time': 999}, pilot_id, pilot_roles
        )

        assert updated.flight_time == 300
        pirep.refresh_from_db()
        assert pirep.flight_time == 300

    def test_flight_time_without_whole_base_rejected(
        self, make_pirep, multiplier, pilot_id, pilot_roles
    ):
        pirep = make_pirep(flight_time=960, multiplier=multiplier)

        with pytest.raises(PirepValidationError) as exc_info:
            PirepService.edit_pirep(pirep.id, {'flight_time': 1001}, pilot_id, pilot_roles)

        assert exc_info.value.field == 'flight_time'
        pirep.refresh_from_db()
        assert pirep.flight_time == 960
        assert PirepEvent.objects.filter(pirep=pirep).count() == 0

    def test_flight_time_checked_against_new_multiplier(
        self, make_pirep, multiplier, other_multiplier, pilot_id, pilot_roles
    ):
        pirep = make_pirep(flight_time=960, multiplier=multiplier)

        with pytest.raises(PirepValidationError):
            PirepService.edit_pirep(
                pirep.id,
                {'multiplier_id': other_multiplier.id, 'flight_time': 10},
                pilot_id, pilot_roles,
            )

        updated = PirepService.edit_pirep(
            pirep.id,
            {'multiplier_id': other_multiplier.id, 'flight_time': 9},
            pilot_id, pilot_roles,
        )
        assert updated.flight_time == 9
        assert updated.multiplier_id == other_multiplier.id

    def test_denied_reason_cannot_be_cleared_while_denied(
        self, make_pirep, staff_id, staff_roles
    ):
        pirep = make_pirep(status=Pirep.Status.DENIED, denied_reason='Bad route')

        for reason in ('', '   ', None):
            with pytest.raises(PirepValidationError) as exc_info:
                PirepService.edit_pirep(
                    pirep.id, {'denied_reason': reason}, staff_id, staff_roles
                )
            assert exc_info.value.field == 'denied_reason'

        pirep.refresh_from_db()
        assert pirep.status == Pirep.Status.DENIED
        assert pirep.denied_reason == 'Bad route'

    def test_denied_reason_can_be_reworded(self, make_pirep, staff_id, staff_roles):
        pirep = make_pirep(status=Pirep.Status.DENIED, denied_reason='Bad route')

        updated = PirepService.edit_pirep(
            pirep.id, {'denied_reason': 'Wrong aircraft'}, staff_id, staff_roles
        )

        assert updated.denied_reason == 'Wrong aircraft'

    def test_zero_flight_time_rejected(self, pending_pirep, pilot_id, pilot_roles):
        with pytest.raises(PirepValidationError):
            PirepService.edit_pirep(
                pending_pirep.id, {'flight_time': 0}, pilot_id, pilot_roles
            )

    def test_invalid_icao_rejected(self, pending_pirep, pilot_id, pilot_roles):
        with pytest.raises(PirepValidationError):
            PirepService.edit_pirep(
                pending_pirep.id, {'departure_icao': 'JFK'}, pilot_id, pilot_roles
            )
        assert PirepEvent.objects.filter(pirep=pending_pirep).count() == 0

    def test_unknown_fields_ignored(self, pending_pirep, pilot_id, pilot_roles):
        pirep = PirepService.edit_pirep(
            pending_pirep.id, {'status': 'approved', 'pilot_id': uuid.uuid4()},
            pilot_id, pilot_roles,
        )

        assert pirep.status == Pirep.Status.PENDING
        assert pirep.pilot_id == pilot_id

    def test_owner_cannot_edit_approved(self, approved_pirep, pilot_id, pilot_roles):
        with pytest.raises(PirepPermissionError):
            PirepService.edit_pirep(
                approved_pirep.id, {'comments': 'x'}, pilot_id, pilot_roles
            )

    def test_other_pilot_cannot_edit(self, pending_pirep, other_pilot_id, pilot_roles):
        with pytest.raises(PirepPermissionError):
            PirepService.edit_pirep(
                pending_pirep.id, {'comments': 'x'}, other_pilot_id, pilot_roles
            )

    def test_staff_edits_approved(self, approved_pirep, staff_id, staff_roles, mock_schedule):
        pirep = PirepService.edit_pirep(
            approved_pirep.id, {'flight_time': 600}, staff_id, staff_roles
        )

        assert pirep.flight_time == 600
        event = PirepEvent.objects.get(pirep=pirep, action=PirepEvent.Action.EDITED)
        assert event.performed_by == staff_id

    def test_approved_time_change_schedules_rank_check(
        self, approved_pirep, pilot_id, staff_id, staff_roles, mock_schedule
    ):
        PirepService.edit_pirep(
            approved_pirep.id, {'flight_time': 600}, staff_id, staff_roles
        )

        mock_schedule.assert_called_once_with(pilot_id, 510, 600)

    def test_pending_time_change_leaves_ledger(
        self, pending_pirep, pilot_id, pilot_roles, mock_schedule
    ):
        PirepService.edit_pirep(
            pending_pirep.id, {'flight_time': 600}, pilot_id, pilot_roles
        )

        mock_schedule.assert_called_once_with(pilot_id, 0, 0)

    def test_clearing_comments(self, make_pirep, pilot_id, pilot_roles):
        pirep = make_pirep(comments='Old note')

        updated = PirepService.edit_pirep(pirep.id, {'comments': ''}, pilot_id, pilot_roles)

        assert updated.comments is None
        event = PirepEvent.objects.get(pirep=pirep, action=PirepEvent.Action.EDITED)
        assert event.details == 'Comments cleared'

    def test_edit_not_found(self, pilot_id, pilot_roles):
        with pytest.raises(PirepNotFound):
            PirepService.edit_pirep(uuid.uuid4(), {'comments': 'x'}, pilot_id, pilot_roles)


# =============================================================================
# Delete
# =============================================================================

@pytest.mark.django_db
class TestDeletePirep:
    """Tests for PirepService.delete_pirep."""

    def test_owner_deletes_pending(self, pending_pirep, pilot_id, pilot_roles):
        from apps.core.services import AuditService
        AuditService.record_created(pending_pirep, pilot_id)

        assert PirepService.delete_pirep(pending_pirep.id, pilot_id, pilot_roles) is True

        assert not Pirep.objects.filter(id=pending_pirep.id).exists()
        assert PirepEvent.objects.count() == 0

    def test_owner_cannot_delete_approved(self, approved_pirep, pilot_id, pilot_roles):
        with pytest.raises(PirepPermissionError):
            PirepService.delete_pirep(approved_pirep.id, pilot_id, pilot_roles)

        assert Pirep.objects.filter(id=approved_pirep.id).exists()

    def test_staff_deletes_approved(self, approved_pirep, staff_id, staff_roles):
        PirepService.delete_pirep(approved_pirep.id, staff_id, staff_roles)

        assert Pirep.objects.count() == 0

    def test_delete_not_found(self, pilot_id, pilot_roles):
        with pytest.raises(PirepNotFound):
            PirepService.delete_pirep(uuid.uuid4(), pilot_id, pilot_roles)


# =============================================================================
# Flight Time Transfer
# =============================================================================

@pytest.mark.django_db
class TestTransferFlightTime:
    """Tests for PirepService.transfer_flight_time."""

    def test_transfer_creates_approved_pirep(
        self, pilot_id, staff_id, staff_roles, mock_schedule
    ):
        result = PirepService.transfer_flight_time(
            pilot_id, 8, 30, staff_id, staff_roles, performer_name='Ops Desk'
        )

        pirep = result.pirep
        assert pirep.status == Pirep.Status.APPROVED
        assert pirep.flight_time == 510
        assert pirep.flight_number == 'TRANSFER'
        assert pirep.departure_icao == 'N/A'
        assert pirep.arrival_icao == 'N/A'
        assert pirep.cargo == 0
        assert pirep.fuel_burned == 0
        assert pirep.comments == 'Transfer done by Ops Desk'
        assert pirep.aircraft_id is None

    def test_transfer_event(self, pilot_id, staff_id, staff_roles, mock_schedule):
        result = PirepService.transfer_flight_time(pilot_id, 8, 30, staff_id, staff_roles)

        event = PirepEvent.objects.get(pirep=result.pirep)
        assert event.action == PirepEvent.Action.CREATED
        assert event.performed_by == staff_id
        assert event.details == 'Flight time transfer of 8hrs 30m'

    def test_transfer_counts_toward_ledger(
        self, pilot_id, staff_id, staff_roles, mock_schedule
    ):
        from apps.core.services import LedgerService
        PirepService.transfer_flight_time(pilot_id, 8, 30, staff_id, staff_roles)

        assert LedgerService.ledger_total(pilot_id) == 510
        mock_schedule.assert_called_once_with(pilot_id, 0, 510)

    def test_transfer_requires_staff(self, pilot_id, pilot_roles):
        with pytest.raises(PirepPermissionError):
            PirepService.transfer_flight_time(pilot_id, 8, 30, pilot_id, pilot_roles)

        assert Pirep.objects.count() == 0

    @pytest.mark.parametrize('hours,minutes', [(0, 0), (0, 60), (10001, 0), (-1, 0)])
    def test_transfer_rejects_bad_time(self, pilot_id, staff_id, staff_roles, hours, minutes):
        with pytest.raises(PirepValidationError):
            PirepService.transfer_flight_time(pilot_id, hours, minutes, staff_id, staff_roles)

        assert Pirep.objects.count() == 0
