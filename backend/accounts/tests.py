from datetime import timedelta

from django.contrib import admin
from django.test import RequestFactory, SimpleTestCase, TestCase
from rest_framework.test import APIClient
from rest_framework_simplejwt.settings import api_settings

from common.exceptions import AuthError, ConflictError, ValidationError
from .models import User
from .services import login_user, register_user
from .stores import InMemoryUserStore
from .tokens import RideAccessToken, issue_token, verify_token


class AuthServiceTests(SimpleTestCase):
    def setUp(self):
        self.store = InMemoryUserStore()

    def test_register_hashes_password(self):
        user = register_user('rider', 'secret123', User.PASSENGER, store=self.store)

        self.assertEqual(user.username, 'rider')
        self.assertEqual(user.role, User.PASSENGER)
        self.assertNotEqual(user.password, 'secret123')
        self.assertTrue(user.check_password('secret123'))

    def test_register_rejects_duplicate_username(self):
        register_user('rider', 'secret123', User.PASSENGER, store=self.store)

        with self.assertRaises(ConflictError):
            register_user('rider', 'other-pass', User.DRIVER, store=self.store)

    def test_register_rejects_missing_fields(self):
        for username, password, role in [
            ('', 'secret123', User.PASSENGER),
            ('rider', '', User.PASSENGER),
            ('rider', 'secret123', ''),
            ('   ', 'secret123', User.DRIVER),
        ]:
            with self.subTest(username=username, password=password, role=role):
                with self.assertRaises(ValidationError):
                    register_user(username, password, role, store=self.store)

    def test_register_rejects_unknown_role(self):
        with self.assertRaises(ValidationError) as ctx:
            register_user('rider', 'secret123', 'ROLE_ADMIN', store=self.store)
        self.assertIn('role', ctx.exception.message)

    def test_login_returns_token_with_username_and_role(self):
        register_user('driver', 'secret123', User.DRIVER, store=self.store)

        token = login_user('driver', 'secret123', store=self.store)
        claims = verify_token(token)

        self.assertEqual(claims.username, 'driver')
        self.assertEqual(claims.role, User.DRIVER)

    def test_login_failures_are_indistinguishable(self):
        register_user('driver', 'secret123', User.DRIVER, store=self.store)

        with self.assertRaises(AuthError) as wrong_password:
            login_user('driver', 'nope', store=self.store)
        with self.assertRaises(AuthError) as unknown_user:
            login_user('ghost', 'secret123', store=self.store)

        self.assertEqual(wrong_password.exception.message, unknown_user.exception.message)


class TokenServiceTests(SimpleTestCase):
    def test_round_trip(self):
        claims = verify_token(issue_token('rider', User.PASSENGER))
        self.assertEqual(claims.username, 'rider')
        self.assertEqual(claims.role, User.PASSENGER)

    def test_token_expires_after_configured_lifetime(self):
        token = RideAccessToken(issue_token('rider', User.PASSENGER))
        lifetime = token['exp'] - token['iat']
        self.assertEqual(lifetime, int(api_settings.ACCESS_TOKEN_LIFETIME.total_seconds()))

    def test_expired_token_is_rejected(self):
        token = RideAccessToken()
        token[api_settings.USER_ID_CLAIM] = 'rider'
        token['role'] = User.PASSENGER
        token.set_exp(lifetime=-timedelta(seconds=1))

        with self.assertRaises(AuthError):
            verify_token(str(token))

    def test_tampered_token_is_rejected(self):
        token = issue_token('rider', User.PASSENGER)
        header, payload, signature = token.split('.')
        tampered = '.'.join([header, payload, signature[::-1]])

        with self.assertRaises(AuthError):
            verify_token(tampered)

    def test_malformed_and_empty_tokens_are_rejected(self):
        for raw in ['', 'not-a-token', 'a.b.c']:
            with self.subTest(raw=raw):
                with self.assertRaises(AuthError):
                    verify_token(raw)

    def test_token_without_role_is_rejected(self):
        token = RideAccessToken()
        token[api_settings.USER_ID_CLAIM] = 'rider'

        with self.assertRaises(AuthError):
            verify_token(str(token))


class AuthEndpointTests(TestCase):
    def setUp(self):
        self.client = APIClient()

    def register(self, username='passenger_p', password='password123', role='ROLE_USER'):
        return self.client.post(
            '/api/auth/register',
            {'username': username, 'password': password, 'role': role},
            format='json',
        )

    def test_register_returns_user_without_password(self):
        response = self.register()

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['username'], 'passenger_p')
        self.assertEqual(response.data['role'], 'ROLE_USER')
        self.assertIn('id', response.data)
        self.assertNotIn('password', response.data)
        self.assertTrue(User.objects.get(username='passenger_p').check_password('password123'))

    def test_duplicate_registration_conflicts(self):
        self.register()
        response = self.register(role='ROLE_DRIVER')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['error'], 'CONFLICT')
        self.assertEqual(User.objects.filter(username='passenger_p').count(), 1)

    def test_register_validation_error_body(self):
        response = self.client.post('/api/auth/register', {'username': 'x'}, format='json')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['error'], 'VALIDATION_ERROR')
        self.assertEqual(response.data['status'], 400)
        self.assertIn('password', response.data['message'])
        self.assertIn('role', response.data['message'])
        self.assertIn('timestamp', response.data)

    def test_register_rejects_unknown_role(self):
        response = self.register(role='ROLE_ADMIN')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['error'], 'VALIDATION_ERROR')

    def test_login_returns_token(self):
        self.register()
        response = self.client.post(
            '/api/auth/login',
            {'username': 'passenger_p', 'password': 'password123'},
            format='json',
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(verify_token(response.data['token']).username, 'passenger_p')

    def test_login_with_bad_credentials(self):
        self.register()
        response = self.client.post(
            '/api/auth/login',
            {'username': 'passenger_p', 'password': 'wrong'},
            format='json',
        )

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.data['error'], 'UNAUTHORIZED')
        self.assertEqual(response.data['message'], 'Invalid username or password')

    def test_login_with_missing_fields_is_unauthorized(self):
        self.register()
        for body in ({'username': 'passenger_p'}, {'password': 'password123'}, {}):
            with self.subTest(body=body):
                response = self.client.post('/api/auth/login', body, format='json')

                self.assertEqual(response.status_code, 401)
                self.assertEqual(response.data['error'], 'UNAUTHORIZED')
                self.assertEqual(response.data['message'], 'Invalid username or password')

    def test_protected_route_rejects_garbage_token(self):
        self.client.credentials(HTTP_AUTHORIZATION='Bearer garbage')
        response = self.client.get('/api/v1/user/rides')

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.data['error'], 'UNAUTHORIZED')

    def test_token_for_deleted_user_is_rejected(self):
        token = issue_token('ghost', User.PASSENGER)
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
        response = self.client.get('/api/v1/user/rides')

        self.assertEqual(response.status_code, 401)


class UserAdminTests(TestCase):
    def setUp(self):
        self.admin_user = User.objects.create_superuser(
            username='admin', email='admin@example.com', password='admin1234', role=User.PASSENGER,
        )
        self.rider = User.objects.create_user(username='rider', password='pass1234', role=User.PASSENGER)
        self.client.force_login(self.admin_user)

    def test_username_and_role_are_read_only_on_existing_users(self):
        request = RequestFactory().get('/admin/accounts/user/')
        request.user = self.admin_user
        model_admin = admin.site._registry[User]

        readonly = model_admin.get_readonly_fields(request, self.rider)

        self.assertIn('username', readonly)
        self.assertIn('role', readonly)
        self.assertNotIn('role', model_admin.get_readonly_fields(request))

    def test_change_form_does_not_rename_or_switch_role(self):
        self.client.post(f'/admin/accounts/user/{self.rider.pk}/change/', {
            'username': 'renamed',
            'role': User.DRIVER,
            'is_active': 'on',
            'date_joined_0': '2024-01-01',
            'date_joined_1': '00:00:00',
        })

        self.rider.refresh_from_db()
        self.assertEqual(self.rider.username, 'rider')
        self.assertEqual(self.rider.role, User.PASSENGER)
