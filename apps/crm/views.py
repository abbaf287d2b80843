"""
CRM Views
"""

import logging

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.decorators import action

from apps.core.exceptions import ValidationException
from apps.core.permissions import MANAGER_ROLES
from apps.core.response import success_response
from apps.core.viewsets import TenantScopedModelViewSet

from .filters import ClientFilter, ContractFilter, LeadFilter, ProposalFilter, QuotationFilter
from .models import Client, Contract, Lead, Proposal, Quotation
from .serializers import (
    ClientSerializer,
    ContractSerializer,
    ExpiringContractSerializer,
    LeadSerializer,
    ProposalSerializer,
    QuotationSerializer,
    RejectSerializer,
)
from .services import (
    DOCUMENT_PREFIXES,
    ContractService,
    LeadService,
    QuotationService,
    SalesDocumentService,
    create_numbered,
)

logger = logging.getLogger(__name__)

WRITE_ROLES = {
    'create': MANAGER_ROLES,
    'update': MANAGER_ROLES,
    'partial_update': MANAGER_ROLES,
    'destroy': MANAGER_ROLES,
}


class NumberedDocumentMixin:
    """Documents whose number is allocated on create when not supplied."""

    def _document_data(self, serializer):
        data = dict(serializer.validated_data)
        _, field = DOCUMENT_PREFIXES[serializer.Meta.model]
        if not data.get(field):
            data.pop(field, None)
        return data

    def perform_create(self, serializer):
        serializer.instance = create_numbered(
            serializer.Meta.model,
            self._resolve_organization(),
            self._document_data(serializer),
            created_by=self.request.user,
        )

    def perform_update(self, serializer):
        _, field = DOCUMENT_PREFIXES[serializer.Meta.model]
        if field in serializer.validated_data and not serializer.validated_data[field]:
            # Blank keeps the allocated number
            serializer.validated_data.pop(field)
        serializer.save(updated_by=self.request.user)


class SalesDocumentActionsMixin:
    def _transition(self, action_name, reason=''):
        document = SalesDocumentService.transition(self.get_object(), action_name, reason)
        return success_response(
            self.get_serializer(document).data,
            message=f"{type(document).__name__} {document.status}",
        )

    @action(detail=True, methods=['post'])
    def send(self, request, pk=None):
        return self._transition('send')

    @action(detail=True, methods=['post'])
    def accept(self, request, pk=None):
        return self._transition('accept')

    @extend_schema(request=RejectSerializer)
    @action(detail=True, methods=['post'])
    def reject(self, request, pk=None):
        serializer = RejectSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return self._transition('reject', serializer.validated_data.get('reason', ''))


class LeadViewSet(TenantScopedModelViewSet):
    """Sales pipeline. ``convert`` turns a won lead into a client."""

    queryset = Lead.objects.select_related('assigned_to')
    serializer_class = LeadSerializer
    filterset_class = LeadFilter
    search_fields = ['name', 'email', 'phone', 'source']
    ordering_fields = ['created_at', 'value', 'next_follow_up', 'stage']
    export_filename = 'leads'
    role_map = {**WRITE_ROLES, 'convert': MANAGER_ROLES}

    @action(detail=True, methods=['post'])
    def convert(self, request, pk=None):
        client = LeadService.convert(self.get_object(), user=request.user)
        return success_response(
            ClientSerializer(client, context=self.get_serializer_context()).data,
            message='Lead converted to client',
            http_status=status.HTTP_201_CREATED,
        )

    @action(detail=False, methods=['get'])
    def overdue(self, request):
        queryset = LeadService.overdue_follow_ups(self._resolve_organization())
        return success_response(self.get_serializer(queryset, many=True).data)


class ClientViewSet(TenantScopedModelViewSet):
    queryset = Client.objects.select_related('account_manager', 'lead')
    serializer_class = ClientSerializer
    filterset_class = ClientFilter
    search_fields = ['name', 'email', 'industry']
    ordering_fields = ['name', 'created_at', 'annual_revenue']
    ordering = ['name']
    export_filename = 'clients'
    role_map = WRITE_ROLES


class ContractViewSet(NumberedDocumentMixin, TenantScopedModelViewSet):
    queryset = Contract.objects.select_related('client')
    serializer_class = ContractSerializer
    filterset_class = ContractFilter
    search_fields = ['contract_number', 'title', 'client__name']
    ordering_fields = ['start_date', 'end_date', 'value']
    ordering = ['-start_date']
    export_filename = 'contracts'
    role_map = WRITE_ROLES

    @extend_schema(
        parameters=[OpenApiParameter('days', int, description='Look-ahead window, default 30')],
        responses=ExpiringContractSerializer(many=True),
    )
    @action(detail=False, methods=['get'])
    def expiring(self, request):
        raw_days = request.query_params.get('days', '30')
        try:
            days = int(raw_days)
        except (TypeError, ValueError):
            days = -1
        if days < 0:
            raise ValidationException('days must be a non-negative integer', code='INVALID_DAYS', field='days')

        queryset = ContractService.expiring(self._resolve_organization(), days)
        return success_response(
            ExpiringContractSerializer(queryset, many=True, context=self.get_serializer_context()).data
        )


class ProposalViewSet(NumberedDocumentMixin, SalesDocumentActionsMixin, TenantScopedModelViewSet):
    queryset = Proposal.objects.select_related('client', 'lead')
    serializer_class = ProposalSerializer
    filterset_class = ProposalFilter
    search_fields = ['proposal_number', 'title']
    ordering_fields = ['created_at', 'pricing', 'status']
    export_filename = 'proposals'
    role_map = {**WRITE_ROLES, 'send': MANAGER_ROLES, 'accept': MANAGER_ROLES, 'reject': MANAGER_ROLES}


class QuotationViewSet(NumberedDocumentMixin, SalesDocumentActionsMixin, TenantScopedModelViewSet):
    queryset = Quotation.objects.select_related('client', 'lead').prefetch_related('items')
    serializer_class = QuotationSerializer
    filterset_class = QuotationFilter
    search_fields = ['quotation_number', 'title']
    ordering_fields = ['created_at', 'total_amount', 'valid_until', 'status']
    export_filename = 'quotations'
    role_map = {**WRITE_ROLES, 'send': MANAGER_ROLES, 'accept': MANAGER_ROLES, 'reject': MANAGER_ROLES}

    def perform_create(self, serializer):
        data = self._document_data(serializer)
        items = data.pop('items', [])
        serializer.instance = QuotationService.create(
            self._resolve_organization(), data, items, created_by=self.request.user
        )

    def perform_update(self, serializer):
        data = self._document_data(serializer)
        items = data.pop('items', None)
        serializer.instance = QuotationService.update(
            serializer.instance, data, items, updated_by=self.request.user
        )
