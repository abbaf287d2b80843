"""
Payroll URLs
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import PayrollRecordViewSet, SalaryComponentViewSet

router = DefaultRouter()
router.register(r'records', PayrollRecordViewSet, basename='payroll-record')
router.register(r'salary-components', SalaryComponentViewSet, basename='salary-component')

urlpatterns = [
    path('', include(router.urls)),
]
