"""
NFC tap toggle and the explicit check-in / check-out endpoints.
"""

import datetime
from unittest import mock

from django.test import SimpleTestCase
from rest_framework import status

from apps.attendance.models import AttendanceRecord, NFCTag
from apps.attendance.services import (
    ACTION_CHECKIN,
    ACTION_CHECKOUT,
    ACTION_NOOP,
    compute_duration_minutes,
    resolve_toggle_action,
)

from .base import TenantAPITestCase
from .factories import EmployeeFactory, NFCTagFactory, OrganizationFactory

TOGGLE_URL = '/api/v1/attendance/toggle/'
CHECKIN_URL = '/api/v1/attendance/records/checkin/'
CHECKOUT_URL = '/api/v1/attendance/records/checkout/'

# 09:00 in Asia/Kolkata
MORNING = datetime.datetime(2024, 5, 6, 3, 30, tzinfo=datetime.timezone.utc)


def at(moment):
    return mock.patch('django.utils.timezone.now', return_value=moment)


class ToggleActionTests(SimpleTestCase):

    def test_no_record_checks_in(self):
        self.assertEqual(resolve_toggle_action(None), ACTION_CHECKIN)

    def test_open_record_checks_out(self):
        record = AttendanceRecord(time_in=MORNING, time_out=None)
        self.assertEqual(resolve_toggle_action(record), ACTION_CHECKOUT)

    def test_completed_record_is_noop(self):
        record = AttendanceRecord(time_in=MORNING, time_out=MORNING + datetime.timedelta(hours=8))
        self.assertEqual(resolve_toggle_action(record), ACTION_NOOP)

    def test_duration_is_whole_minutes(self):
        later = MORNING + datetime.timedelta(minutes=125, seconds=59)
        self.assertEqual(compute_duration_minutes(MORNING, later), 125)

    def test_duration_never_negative(self):
        earlier = MORNING - datetime.timedelta(minutes=10)
        self.assertEqual(compute_duration_minutes(MORNING, earlier), 0)

    def test_duration_without_checkout_is_zero(self):
        self.assertEqual(compute_duration_minutes(MORNING, None), 0)


class AttendanceToggleTests(TenantAPITestCase):

    def setUp(self):
        super().setUp()
        self.employee = EmployeeFactory(organization=self.org)
        self.tag = NFCTagFactory(employee=self.employee, organization=self.org, tag_uid='04AABBCCDD')
        self.login_as(self.member)

    def tap(self, moment, **payload):
        payload.setdefault('tag_uid', self.tag.tag_uid)
        with at(moment):
            return self.client.post(TOGGLE_URL, payload, format='json')

    def test_two_taps_check_in_then_out(self):
        first = self.tap(MORNING, reader_id='READER-001')
        self.assertEqual(first.status_code, status.HTTP_201_CREATED, first.content)
        body = first.json()
        self.assertTrue(body['success'])
        self.assertEqual(body['data']['action'], 'checkin')
        self.assertIsNone(body['data']['attendance']['time_out'])
        self.assertEqual(body['data']['attendance']['check_in_method'], 'nfc')
        self.assertEqual(body['data']['employee']['id'], str(self.employee.id))

        second = self.tap(MORNING + datetime.timedelta(minutes=95, seconds=30))
        self.assertEqual(second.status_code, status.HTTP_200_OK)
        data = second.json()['data']
        self.assertEqual(data['action'], 'checkout')
        self.assertIsNotNone(data['attendance']['time_out'])
        self.assertEqual(data['attendance']['duration'], 95)

        record = AttendanceRecord.objects.get(employee=self.employee)
        self.assertEqual(record.date, datetime.date(2024, 5, 6))
        self.assertEqual(record.duration, 95)

    def test_third_tap_changes_nothing(self):
        self.tap(MORNING)
        self.tap(MORNING + datetime.timedelta(hours=8))
        before = AttendanceRecord.objects.get(employee=self.employee)

        third = self.tap(MORNING + datetime.timedelta(hours=9))
        self.assertEqual(third.status_code, status.HTTP_200_OK)
        self.assertEqual(third.json()['data']['action'], 'noop')
        self.assertEqual(third.json()['message'], 'Attendance already completed for today')

        after = AttendanceRecord.objects.get(employee=self.employee)
        self.assertEqual(after.time_out, before.time_out)
        self.assertEqual(after.duration, 480)
        self.assertEqual(AttendanceRecord.objects.count(), 1)

    def test_tap_updates_tag_usage(self):
        self.tap(MORNING, reader_id='READER-007')
        self.tag.refresh_from_db()
        self.assertEqual(self.tag.last_used_at, MORNING)
        self.assertEqual(self.tag.reader_id, 'READER-007')

    def test_employee_id_tap_is_manual(self):
        response = self.tap(MORNING, tag_uid='', employee_id=str(self.employee.id))
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.json()['data']['attendance']['check_in_method'], 'manual')

    def test_next_day_starts_a_new_record(self):
        self.tap(MORNING)
        self.tap(MORNING + datetime.timedelta(hours=8))
        response = self.tap(MORNING + datetime.timedelta(days=1))
        self.assertEqual(response.json()['data']['action'], 'checkin')
        self.assertEqual(AttendanceRecord.objects.filter(employee=self.employee).count(), 2)

    def test_idempotency_key_replays_stored_checkin(self):
        self.tap(MORNING, idempotency_key='tap-123')
        replay = self.tap(MORNING + datetime.timedelta(days=1), idempotency_key='tap-123')

        self.assertEqual(replay.status_code, status.HTTP_200_OK)
        self.assertEqual(replay.json()['message'], 'Check-in already processed (idempotency)')
        self.assertEqual(replay.json()['data']['attendance']['date'], '2024-05-06')
        self.assertEqual(AttendanceRecord.objects.count(), 1)

    def test_retried_checkin_does_not_check_out(self):
        self.tap(MORNING, idempotency_key='k1')
        retry = self.tap(MORNING + datetime.timedelta(seconds=5), idempotency_key='k1')

        self.assertEqual(retry.json()['data']['action'], 'checkin')
        record = AttendanceRecord.objects.get()
        self.assertIsNone(record.time_out)
        self.assertIsNone(record.duration)

    def test_missing_identifier(self):
        response = self.tap(MORNING, tag_uid='')
        self.assertError(response, 400, 'MISSING_IDENTIFIER')

    def test_unknown_tag(self):
        response = self.tap(MORNING, tag_uid='DEADBEEF')
        self.assertError(response, 400, 'TAG_NOT_FOUND')

    def test_inactive_tag(self):
        self.tag.status = NFCTag.STATUS_LOST
        self.tag.save()
        response = self.tap(MORNING)
        self.assertError(response, 400, 'TAG_INACTIVE')
        self.assertFalse(AttendanceRecord.objects.exists())

    def test_unassigned_tag(self):
        NFCTagFactory(employee=None, organization=self.org, tag_uid='SPARE-01')
        response = self.tap(MORNING, tag_uid='SPARE-01')
        self.assertError(response, 400, 'TAG_NOT_ASSIGNED')

    def test_unknown_employee(self):
        response = self.tap(MORNING, tag_uid='', employee_id='not-a-uuid')
        self.assertError(response, 400, 'EMPLOYEE_NOT_FOUND')

    def test_tag_from_another_organization_is_unknown(self):
        other = NFCTagFactory(employee=EmployeeFactory(organization=OrganizationFactory()))
        response = self.tap(MORNING, tag_uid=other.tag_uid)
        self.assertError(response, 400, 'TAG_NOT_FOUND')

    def test_router_path_toggles_too(self):
        with at(MORNING):
            response = self.client.post(
                '/api/v1/attendance/records/toggle/', {'tag_uid': self.tag.tag_uid}, format='json'
            )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_unauthenticated_tap_rejected(self):
        self.client.force_authenticate(None)
        response = self.tap(MORNING)
        self.assertError(response, 401, 'UNAUTHORIZED')


class CheckInCheckOutTests(TenantAPITestCase):

    def setUp(self):
        super().setUp()
        self.employee = EmployeeFactory(organization=self.org)
        self.payload = {'employee_id': str(self.employee.id)}

    def post(self, url, moment):
        with at(moment):
            return self.client.post(url, self.payload, format='json')

    def test_checkin_then_checkout(self):
        response = self.post(CHECKIN_URL, MORNING)
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.json()['message'], 'Check-in successful')

        response = self.post(CHECKOUT_URL, MORNING + datetime.timedelta(minutes=61))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()['data']['attendance']['duration'], 61)

    def test_second_checkin_is_informational(self):
        self.post(CHECKIN_URL, MORNING)
        response = self.post(CHECKIN_URL, MORNING + datetime.timedelta(minutes=5))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()['message'], 'Already checked in today')
        self.assertEqual(AttendanceRecord.objects.count(), 1)

    def test_checkin_after_checkout_conflicts(self):
        self.post(CHECKIN_URL, MORNING)
        self.post(CHECKOUT_URL, MORNING + datetime.timedelta(hours=1))
        response = self.post(CHECKIN_URL, MORNING + datetime.timedelta(hours=2))
        self.assertError(response, 409, 'ALREADY_CHECKED_OUT')

    def test_checkout_without_checkin(self):
        response = self.post(CHECKOUT_URL, MORNING)
        self.assertError(response, 404, 'NO_ACTIVE_CHECKIN')
