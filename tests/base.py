from rest_framework.test import APITestCase

from .factories import OrganizationFactory, UserFactory


class TenantAPITestCase(APITestCase):
    """An organization with an admin, an HR user and a plain employee user."""

    def setUp(self):
        self.org = OrganizationFactory()
        self.admin = UserFactory(organization=self.org, role='admin')
        self.hr = UserFactory(organization=self.org, role='hr')
        self.member = UserFactory(organization=self.org, role='employee')
        self.client.force_authenticate(self.admin)

    def login_as(self, user):
        self.client.force_authenticate(user)

    def assertError(self, response, status_code, code):
        self.assertEqual(response.status_code, status_code, response.content)
        body = response.json()
        self.assertFalse(body['success'])
        self.assertEqual(body['error']['code'], code)
        self.assertEqual(body['error']['status'], status_code)
