"""
Attendance URLs
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from apps.core.throttling import AttendancePunchThrottle

from .views import AttendanceViewSet, NFCTagViewSet, ReaderDeviceViewSet

router = DefaultRouter()
router.register(r'records', AttendanceViewSet, basename='attendance')
router.register(r'tags', NFCTagViewSet, basename='nfc-tag')
router.register(r'readers', ReaderDeviceViewSet, basename='reader')

urlpatterns = [
    path(
        'toggle/',
        AttendanceViewSet.as_view({'post': 'toggle'}, throttle_classes=[AttendancePunchThrottle]),
        name='attendance-toggle',
    ),
    path('', include(router.urls)),
]
