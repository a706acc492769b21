# services/pirep-service/src/apps/api/serializers/pirep_serializers.py
"""
PIREP Serializers

REST API serializers for PIREP operations. Field shape and types are checked
here; domain rules (route codes, limits, rank checks) live in the service
layer.
"""

from rest_framework import serializers

from apps.core.models import Pirep, Rank


class PirepSerializer(serializers.ModelSerializer):
    """Serializer for PIREP list and detail views."""

    aircraft_id = serializers.UUIDField(read_only=True, allow_null=True)
    multiplier_id = serializers.UUIDField(read_only=True, allow_null=True)
    aircraft_label = serializers.SerializerMethodField()
    multiplier_value = serializers.FloatField(read_only=True, allow_null=True)
    display_route = serializers.CharField(read_only=True)
    status_display = serializers.CharField(
        source='get_status_display', read_only=True
    )

    class Meta:
        model = Pirep
        fields = [
            'id',
            'pilot_id',
            'pilot_name',
            'pilot_callsign',
            'flight_number',
            'date',
            'departure_icao',
            'arrival_icao',
            'display_route',
            'flight_time',
            'cargo',
            'fuel_burned',
            'aircraft_id',
            'aircraft_label',
            'multiplier_id',
            'multiplier_value',
            'comments',
            'status',
            'status_display',
            'denied_reason',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_aircraft_label(self, obj):
        return obj.aircraft.label if obj.aircraft_id and obj.aircraft else None


class PirepCreateSerializer(serializers.Serializer):
    """Serializer for submitting a PIREP. flight_time is raw minutes."""

    flight_number = serializers.CharField(max_length=20)
    date = serializers.DateTimeField()
    departure_icao = serializers.CharField(max_length=4)
    arrival_icao = serializers.CharField(max_length=4)
    flight_time = serializers.IntegerField()
    cargo = serializers.IntegerField()
    fuel_burned = serializers.IntegerField()
    aircraft_id = serializers.UUIDField()
    multiplier_id = serializers.UUIDField(required=False, allow_null=True)
    comments = serializers.CharField(
        required=False, allow_blank=True, allow_null=True
    )


class PirepUpdateSerializer(serializers.Serializer):
    """
    Serializer for partial PIREP edits.

    hours/minutes re-enter the raw time; flight_time sets the credited
    minutes directly.
    """

    flight_number = serializers.CharField(required=False)
    departure_icao = serializers.CharField(required=False)
    arrival_icao = serializers.CharField(required=False)
    flight_time = serializers.IntegerField(required=False)
    hours = serializers.IntegerField(required=False, min_value=0)
    minutes = serializers.IntegerField(required=False, min_value=0, max_value=59)
    cargo = serializers.IntegerField(required=False)
    fuel_burned = serializers.IntegerField(required=False)
    multiplier_id = serializers.UUIDField(required=False, allow_null=True)
    aircraft_id = serializers.UUIDField(required=False, allow_null=True)
    comments = serializers.CharField(
        required=False, allow_blank=True, allow_null=True
    )
    denied_reason = serializers.CharField(
        required=False, allow_blank=True, allow_null=True
    )


class PirepDenySerializer(serializers.Serializer):
    """Serializer for denying a PIREP."""

    reason = serializers.CharField(allow_blank=True, trim_whitespace=False)


class PirepBulkApproveSerializer(serializers.Serializer):
    """Serializer for approving several PIREPs."""

    pirep_ids = serializers.ListField(
        child=serializers.UUIDField(),
        allow_empty=True
    )


class FlightTimeTransferSerializer(serializers.Serializer):
    """Serializer for crediting external flight time to a pilot."""

    target_pilot_id = serializers.UUIDField()
    hours = serializers.IntegerField()
    minutes = serializers.IntegerField()
    performer_name = serializers.CharField(required=False, allow_blank=True)


class PirepEventSerializer(serializers.Serializer):
    """Serializer for audit trail entries."""

    id = serializers.UUIDField()
    action = serializers.CharField()
    performed_by = serializers.UUIDField()
    details = serializers.CharField(allow_null=True)
    previous_values = serializers.DictField(allow_null=True)
    new_values = serializers.DictField(allow_null=True)
    timestamp = serializers.DateTimeField()


class RankSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Rank
        fields = [
            'id',
            'name',
            'minimum_flight_time',
            'maximum_flight_time',
            'allow_all_aircraft',
        ]
        read_only_fields = fields


class LedgerSummarySerializer(serializers.Serializer):
    """Serializer for a pilot's ledger total and rank standing."""

    pilot_id = serializers.UUIDField()
    total_minutes = serializers.IntegerField()
    total_formatted = serializers.CharField()
    current_rank = RankSummarySerializer(allow_null=True)
    next_rank = RankSummarySerializer(allow_null=True)
    hours_to_next_rank = serializers.FloatField(allow_null=True)
