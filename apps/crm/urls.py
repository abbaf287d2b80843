"""
CRM URLs
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import ClientViewSet, ContractViewSet, LeadViewSet, ProposalViewSet, QuotationViewSet

router = DefaultRouter()
router.register(r'leads', LeadViewSet, basename='lead')
router.register(r'clients', ClientViewSet, basename='client')
router.register(r'contracts', ContractViewSet, basename='contract')
router.register(r'proposals', ProposalViewSet, basename='proposal')
router.register(r'quotations', QuotationViewSet, basename='quotation')

urlpatterns = [
    path('', include(router.urls)),
]
