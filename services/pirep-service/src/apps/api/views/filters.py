# services/pirep-service/src/apps/api/views/filters.py
"""
API Filters

Django Filter classes for the PIREP API.
"""

import django_filters

from apps.core.models import Pirep


class PirepFilter(django_filters.FilterSet):
    """Filter for PIREP list queries."""

    status = django_filters.ChoiceFilter(
        choices=Pirep.Status.choices
    )
    status_in = django_filters.BaseInFilter(
        field_name='status'
    )
    pilot_id = django_filters.UUIDFilter()
    aircraft_id = django_filters.UUIDFilter()
    multiplier_id = django_filters.UUIDFilter()

    # Date range
    date_from = django_filters.DateFilter(
        field_name='date',
        lookup_expr='date__gte'
    )
    date_to = django_filters.DateFilter(
        field_name='date',
        lookup_expr='date__lte'
    )

    # Route
    departure_icao = django_filters.CharFilter(lookup_expr='iexact')
    arrival_icao = django_filters.CharFilter(lookup_expr='iexact')
    flight_number = django_filters.CharFilter(lookup_expr='icontains')

    class Meta:
        model = Pirep
        fields = [
            'status',
            'pilot_id',
            'aircraft_id',
            'multiplier_id',
            'departure_icao',
            'arrival_icao',
            'flight_number',
        ]
