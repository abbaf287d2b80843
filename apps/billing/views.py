"""Billing views - invoices and payments"""
import logging

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.decorators import action

from apps.core.permissions import MANAGER_ROLES
from apps.core.response import success_response
from apps.core.utils import local_today
from apps.core.viewsets import TenantScopedModelViewSet

from .filters import InvoiceFilter
from .models import Invoice
from .serializers import (
    InvoiceListSerializer,
    InvoiceSerializer,
    OverdueInvoiceSerializer,
    PaymentSerializer,
)
from .services import InvoiceService

logger = logging.getLogger(__name__)


class InvoiceViewSet(TenantScopedModelViewSet):
    """
    Invoices with line items.

    - GET/POST {id}/payments/
    - GET overdue/
    """

    queryset = Invoice.objects.select_related('client').prefetch_related('items')
    serializer_class = InvoiceSerializer
    list_serializer_class = InvoiceListSerializer
    filterset_class = InvoiceFilter
    search_fields = ['invoice_number', 'client_name', 'client_email']
    ordering_fields = ['issue_date', 'due_date', 'total_amount', 'status']
    ordering = ['-issue_date', '-created_at']
    export_filename = 'invoices'
    required_roles = MANAGER_ROLES

    def perform_create(self, serializer):
        data = dict(serializer.validated_data)
        items = data.pop('items', [])
        serializer.instance = InvoiceService.create_invoice(
            self._resolve_organization(), data, items, created_by=self.request.user
        )

    def perform_update(self, serializer):
        data = dict(serializer.validated_data)
        items = data.pop('items', None)
        serializer.instance = InvoiceService.update_invoice(
            serializer.instance, data, items, updated_by=self.request.user
        )

    @extend_schema(request=PaymentSerializer, responses=PaymentSerializer(many=True))
    @action(detail=True, methods=['get', 'post'])
    def payments(self, request, pk=None):
        invoice = self.get_object()
        if request.method == 'GET':
            payments = invoice.payments.all()
            return success_response(
                PaymentSerializer(payments, many=True).data,
                total_paid=str(InvoiceService.amount_paid(invoice)),
            )

        serializer = PaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        data.setdefault('payment_date', local_today(invoice.organization))
        payment, invoice = InvoiceService.record_payment(invoice, data, created_by=request.user)
        return success_response(
            PaymentSerializer(payment).data,
            message='Payment recorded successfully',
            http_status=status.HTTP_201_CREATED,
            invoice_status=invoice.status,
        )

    @extend_schema(responses=OverdueInvoiceSerializer(many=True))
    @action(detail=False, methods=['get'])
    def overdue(self, request):
        queryset = InvoiceService.overdue(self._resolve_organization())
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(OverdueInvoiceSerializer(page, many=True).data)
        return success_response(OverdueInvoiceSerializer(queryset, many=True).data)
