from rest_framework import status
from rest_framework_simplejwt.tokens import AccessToken

from .base import TenantAPITestCase
from .factories import OrganizationFactory, UserFactory

LOGIN_URL = '/api/v1/auth/login/'
REFRESH_URL = '/api/v1/auth/refresh/'
ME_URL = '/api/v1/auth/me/'


class LoginTests(TenantAPITestCase):

    def setUp(self):
        super().setUp()
        self.client.force_authenticate(None)

    def login(self, email, password='testpass123'):
        return self.client.post(LOGIN_URL, {'email': email, 'password': password}, format='json')

    def test_login_returns_tenant_bound_tokens(self):
        response = self.login(self.hr.email.upper())
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.content)
        data = response.json()['data']
        self.assertEqual(data['user']['email'], self.hr.email)

        access = AccessToken(data['access'])
        self.assertEqual(access['organization_id'], str(self.org.id))
        self.assertEqual(access['role'], 'hr')

    def test_bad_password(self):
        self.assertError(self.login(self.hr.email, 'wrong'), 401, 'UNAUTHORIZED')

    def test_missing_password(self):
        response = self.client.post(LOGIN_URL, {'email': self.hr.email}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_inactive_organization(self):
        self.org.is_active = False
        self.org.save()
        self.assertError(self.login(self.hr.email), 401, 'UNAUTHORIZED')

    def test_bearer_token_reaches_profile(self):
        access = self.login(self.member.email).json()['data']['access']
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {access}')
        response = self.client.get(ME_URL)
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.content)
        body = response.json()
        self.assertTrue(body['success'])
        self.assertEqual(body['data']['email'], self.member.email)
        self.assertFalse(body['data']['is_manager'])
        self.assertEqual(body['data']['organization']['id'], str(self.org.id))

    def test_refresh(self):
        refresh = self.login(self.member.email).json()['data']['refresh']
        response = self.client.post(REFRESH_URL, {'refresh': refresh}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.content)
        self.assertIn('access', response.json()['data'])


class TenantBindingTests(TenantAPITestCase):

    def setUp(self):
        super().setUp()
        self.client.force_authenticate(None)

    def use_token(self, token):
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
        return self.client.get('/api/v1/employees/')

    def test_token_for_another_organization_rejected(self):
        token = AccessToken.for_user(self.admin)
        token['organization_id'] = str(OrganizationFactory().id)
        self.assertError(self.use_token(token), 401, 'UNAUTHORIZED')

    def test_token_without_organization_rejected(self):
        token = AccessToken.for_user(self.admin)
        self.assertError(self.use_token(token), 401, 'UNAUTHORIZED')

    def test_bound_token_is_scoped_to_its_organization(self):
        token = AccessToken.for_user(self.admin)
        token['organization_id'] = str(self.org.id)
        response = self.use_token(token)
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_superuser_without_organization(self):
        root = UserFactory(organization=None, role='admin', is_superuser=True, is_staff=True)
        token = AccessToken.for_user(root)
        response = self.use_token(token)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()['data'], [])
