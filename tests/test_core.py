"""
Cross-cutting behaviour: error envelope, health checks, request ids, pagination, soft delete.
"""

import importlib
import os
import sys
from unittest import mock

from django.db import IntegrityError
from django.test import SimpleTestCase, TestCase
from rest_framework import status
from rest_framework.exceptions import Throttled

from apps.core.exceptions import ConflictException, ResourceNotFoundException, custom_exception_handler
from apps.core.utils import next_sequence_number
from apps.employees.models import Employee

from .base import TenantAPITestCase
from .factories import EmployeeFactory, OrganizationFactory


class ExceptionHandlerTests(SimpleTestCase):

    def handle(self, exc):
        return custom_exception_handler(exc, {})

    def test_domain_exception_keeps_code(self):
        response = self.handle(ConflictException('Taken', code='DUPLICATE_EMAIL'))
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data['error'], {
            'code': 'DUPLICATE_EMAIL', 'status': 409, 'message': 'Taken', 'details': {},
        })

    def test_not_found_exception(self):
        response = self.handle(ResourceNotFoundException('Employee', 'abc', code='EMPLOYEE_NOT_FOUND'))
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data['error']['code'], 'EMPLOYEE_NOT_FOUND')

    def test_integrity_error_is_conflict(self):
        response = self.handle(IntegrityError('duplicate key'))
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data['error']['code'], 'CONFLICT')

    def test_unexpected_error_is_internal(self):
        with self.assertLogs('apps.core.exceptions', level='ERROR'):
            response = self.handle(RuntimeError('boom'))
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.data['error']['code'], 'INTERNAL_ERROR')
        self.assertFalse(response.data['success'])

    def test_throttled(self):
        response = self.handle(Throttled(wait=3))
        self.assertEqual(response.status_code, 429)
        self.assertEqual(response.data['error']['code'], 'THROTTLED')


class HealthCheckTests(TestCase):

    def test_health(self):
        response = self.client.get('/api/v1/health/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {'status': 'ok'})

    def test_readiness(self):
        response = self.client.get('/api/v1/readiness/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {'status': 'ready', 'db': 'ok', 'cache': 'ok'})

    def test_schema_is_served(self):
        response = self.client.get('/api/schema/')
        self.assertEqual(response.status_code, 200)


class RequestIdTests(TestCase):

    def test_incoming_id_is_echoed(self):
        response = self.client.get('/api/v1/health/', HTTP_X_REQUEST_ID='req-42')
        self.assertEqual(response['X-Request-ID'], 'req-42')

    def test_id_is_generated(self):
        response = self.client.get('/api/v1/health/')
        self.assertEqual(len(response['X-Request-ID']), 32)


class EnvelopeTests(TenantAPITestCase):

    def test_pagination_envelope(self):
        EmployeeFactory.create_batch(3, organization=self.org)
        body = self.client.get('/api/v1/employees/', {'page_size': 2}).json()
        self.assertTrue(body['success'])
        self.assertEqual(len(body['data']), 2)
        self.assertEqual(body['pagination']['count'], 3)
        self.assertEqual(body['pagination']['total_pages'], 2)
        self.assertEqual(body['pagination']['current_page'], 1)
        self.assertIsNotNone(body['pagination']['next'])
        self.assertIsNone(body['pagination']['previous'])

    def test_retrieve_is_wrapped(self):
        employee = EmployeeFactory(organization=self.org)
        body = self.client.get(f'/api/v1/employees/{employee.id}/').json()
        self.assertTrue(body['success'])
        self.assertEqual(body['data']['id'], str(employee.id))

    def test_unauthenticated_envelope(self):
        self.client.force_authenticate(None)
        self.assertError(self.client.get('/api/v1/employees/'), 401, 'UNAUTHORIZED')

    def test_method_not_allowed(self):
        response = self.client.put('/api/v1/attendance/toggle/', {}, format='json')
        self.assertError(response, 405, 'METHOD_NOT_ALLOWED')


class SoftDeleteTests(TestCase):

    def test_default_manager_hides_deleted_rows(self):
        org = OrganizationFactory()
        kept = EmployeeFactory(organization=org)
        gone = EmployeeFactory(organization=org)
        gone.delete()

        self.assertEqual(list(Employee.objects.filter(organization=org)), [kept])
        self.assertEqual(Employee.all_objects.filter(organization=org).count(), 2)
        gone.refresh_from_db()
        self.assertIsNotNone(gone.deleted_at)


class SequenceNumberTests(TestCase):

    def test_highest_suffix_wins(self):
        org = OrganizationFactory()
        EmployeeFactory(organization=org, nfc_card_id='CARD-0007')
        EmployeeFactory(organization=org, nfc_card_id='CARD-0002')
        EmployeeFactory(organization=org, nfc_card_id='CARD-XYZ')
        queryset = Employee.objects.filter(organization=org)
        self.assertEqual(next_sequence_number(queryset, 'nfc_card_id', 'CARD-'), 'CARD-0008')


class ProductionSettingsTests(SimpleTestCase):

    ENV = {
        'DEBUG': 'False',
        'SECRET_KEY': 'production-secret-key-for-settings-import',
        'ALLOWED_HOSTS': 'api.example.com',
        'DATABASE_URL': 'postgres://db/attendance',
        'POSTGRES_PASSWORD': 'secret',
    }

    def load_production(self, **env):
        for name in ('config.settings.production', 'config.settings.base'):
            self.addCleanup(sys.modules.pop, name, None)
            sys.modules.pop(name, None)
        with mock.patch.dict(os.environ, {**self.ENV, **env}), mock.patch('sentry_sdk.init') as init:
            importlib.import_module('config.settings.production')
        return init

    def test_sentry_enabled_by_dsn(self):
        init = self.load_production(SENTRY_DSN='https://key@sentry.example.com/1', ENVIRONMENT='production')
        init.assert_called_once()
        kwargs = init.call_args.kwargs
        self.assertEqual(kwargs['dsn'], 'https://key@sentry.example.com/1')
        self.assertEqual(kwargs['environment'], 'production')
        self.assertFalse(kwargs['send_default_pii'])

    def test_sentry_off_without_dsn(self):
        init = self.load_production(SENTRY_DSN='')
        init.assert_not_called()
