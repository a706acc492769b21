# services/pirep-service/src/apps/api/views/pirep_views.py
"""
PIREP Views

REST API views for PIREP lifecycle operations and pilot ledgers.
"""

import logging

from django.core.paginator import Paginator
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.core.services import LedgerService, PirepService, StatusService
from apps.core.services.exceptions import PirepValidationError
from apps.api.serializers import (
    PirepSerializer,
    PirepCreateSerializer,
    PirepUpdateSerializer,
    PirepDenySerializer,
    PirepBulkApproveSerializer,
    FlightTimeTransferSerializer,
    PirepEventSerializer,
    LedgerSummarySerializer,
)
from .base import BasePirepViewSet, PaginationMixin, parse_uuid
from .filters import PirepFilter

logger = logging.getLogger(__name__)


class PirepViewSet(BasePirepViewSet, PaginationMixin):
    """
    ViewSet for PIREP operations.

    Provides CRUD operations, status transitions, audit trail and transfers.
    """

    # ==========================================================================
    # List and Retrieve
    # ==========================================================================

    def list(self, request):
        """
        List PIREPs with filtering and pagination.

        GET /api/v1/pireps/
        """
        page, page_size = self.get_pagination_params()

        filterset = PirepFilter(request.query_params, queryset=PirepService.list_pireps())
        if not filterset.is_valid():
            raise PirepValidationError(
                message="Invalid filter parameters",
                details={'errors': filterset.errors}
            )

        paginator = Paginator(filterset.qs, page_size)
        page_obj = paginator.get_page(page)

        serializer = PirepSerializer(page_obj.object_list, many=True)
        return Response({
            'results': serializer.data,
            'total': paginator.count,
            'page': page_obj.number,
            'page_size': page_size,
            'total_pages': paginator.num_pages,
            'has_next': page_obj.has_next(),
            'has_previous': page_obj.has_previous(),
        })

    def retrieve(self, request, pk=None):
        """
        Retrieve a single PIREP.

        GET /api/v1/pireps/{id}/
        """
        pirep = PirepService.get_pirep(parse_uuid(pk))
        return Response(PirepSerializer(pirep).data)

    # ==========================================================================
    # Create, Edit, Delete
    # ==========================================================================

    def create(self, request):
        """
        Submit a new PIREP for the calling pilot.

        POST /api/v1/pireps/
        """
        user_id = self.get_user_id()

        serializer = PirepCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = PirepService.create_pirep(
            data=serializer.validated_data,
            pilot_id=user_id,
            pilot_name=self.get_user_name(),
            pilot_callsign=self.get_user_callsign(),
        )

        response = PirepSerializer(result.pirep).data
        response['adjusted_flight_time'] = result.adjusted_flight_time
        return Response(response, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        """
        Partially update a PIREP.

        PATCH /api/v1/pireps/{id}/
        """
        user_id = self.get_user_id()

        serializer = PirepUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        pirep = PirepService.edit_pirep(
            pirep_id=parse_uuid(pk),
            updates=dict(serializer.validated_data),
            actor_id=user_id,
            actor_roles=self.get_user_roles(),
        )

        return Response(PirepSerializer(pirep).data)

    def destroy(self, request, pk=None):
        """
        Delete a PIREP.

        DELETE /api/v1/pireps/{id}/
        """
        PirepService.delete_pirep(
            pirep_id=parse_uuid(pk),
            actor_id=self.get_user_id(),
            actor_roles=self.get_user_roles(),
        )
        return Response(status=status.HTTP_204_NO_CONTENT)

    # ==========================================================================
    # Status Transitions
    # ==========================================================================

    @action(detail=True, methods=['post'])
    def approve(self, request, pk=None):
        """
        Approve a PIREP.

        POST /api/v1/pireps/{id}/approve/
        """
        pirep = StatusService.approve(
            pirep_id=parse_uuid(pk),
            actor_id=self.get_user_id(),
            actor_roles=self.get_user_roles(),
        )
        return Response(PirepSerializer(pirep).data)

    @action(detail=True, methods=['post'])
    def deny(self, request, pk=None):
        """
        Deny a PIREP with a reason.

        POST /api/v1/pireps/{id}/deny/
        """
        serializer = PirepDenySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        pirep = StatusService.deny(
            pirep_id=parse_uuid(pk),
            actor_id=self.get_user_id(),
            reason=serializer.validated_data['reason'],
            actor_roles=self.get_user_roles(),
        )
        return Response(PirepSerializer(pirep).data)

    @action(detail=False, methods=['post'])
    def bulk_approve(self, request):
        """
        Approve several PIREPs.

        POST /api/v1/pireps/bulk_approve/
        """
        serializer = PirepBulkApproveSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        pireps = StatusService.bulk_approve(
            pirep_ids=serializer.validated_data['pirep_ids'],
            actor_id=self.get_user_id(),
            actor_roles=self.get_user_roles(),
        )
        return Response({
            'approved': len(pireps),
            'results': PirepSerializer(pireps, many=True).data,
        })

    # ==========================================================================
    # Audit Trail and Transfers
    # ==========================================================================

    @action(detail=True, methods=['get'])
    def events(self, request, pk=None):
        """
        Audit trail of a PIREP, newest first.

        GET /api/v1/pireps/{id}/events/
        """
        events = PirepService.get_pirep_events(parse_uuid(pk))
        return Response(PirepEventSerializer(events, many=True).data)

    @action(detail=False, methods=['post'])
    def transfer_flight_time(self, request):
        """
        Credit external flight time to a pilot.

        POST /api/v1/pireps/transfer_flight_time/
        """
        serializer = FlightTimeTransferSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = PirepService.transfer_flight_time(
            target_pilot_id=data['target_pilot_id'],
            hours=data['hours'],
            minutes=data['minutes'],
            performed_by=self.get_user_id(),
            actor_roles=self.get_user_roles(),
            performer_name=data.get('performer_name') or self.get_user_name(),
        )

        return Response(PirepSerializer(result.pirep).data, status=status.HTTP_201_CREATED)


class LedgerViewSet(BasePirepViewSet):
    """ViewSet for pilot flight-time ledgers."""

    def retrieve(self, request, pk=None):
        """
        Approved flight time and rank standing of a pilot.

        GET /api/v1/ledger/{pilot_id}/
        """
        summary = LedgerService.get_ledger_summary(parse_uuid(pk, 'pilot_id'))
        return Response(LedgerSummarySerializer(summary).data)
