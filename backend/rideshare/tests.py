from unittest.mock import patch

from django.test import TestCase
from rest_framework.test import APIClient

from accounts.models import User


class RideFlowTests(TestCase):
    """Full passenger/driver flow over HTTP, the way a client app drives it."""

    def setUp(self):
        self.client = APIClient()

    def register(self, username, role):
        response = self.client.post(
            '/api/auth/register',
            {'username': username, 'password': 'password123', 'role': role},
            format='json',
        )
        self.assertEqual(response.status_code, 200)
        self.assertNotIn('password', response.data)
        return response.data

    def login(self, username):
        response = self.client.post(
            '/api/auth/login',
            {'username': username, 'password': 'password123'},
            format='json',
        )
        self.assertEqual(response.status_code, 200)
        return response.data['token']

    def use_token(self, token):
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')

    def test_request_accept_complete(self):
        self.register('passenger_p', 'ROLE_USER')
        driver = self.register('driver_d', 'ROLE_DRIVER')
        user_token = self.login('passenger_p')
        driver_token = self.login('driver_d')

        # Passenger requests a ride
        self.use_token(user_token)
        response = self.client.post(
            '/api/v1/rides',
            {'pickupLocation': 'Koramangala', 'dropLocation': 'Indiranagar'},
            format='json',
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['status'], 'REQUESTED')
        ride_id = response.data['id']

        # Driver sees it among pending requests
        self.use_token(driver_token)
        response = self.client.get('/api/v1/driver/rides/requests')
        self.assertEqual(response.status_code, 200)
        pending = {r['id']: r['status'] for r in response.data}
        self.assertEqual(pending.get(ride_id), 'REQUESTED')

        # Driver accepts
        response = self.client.post(f'/api/v1/driver/rides/{ride_id}/accept')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['status'], 'ACCEPTED')
        self.assertEqual(response.data['driverId'], driver['id'])

        # Accepted ride is no longer pending
        response = self.client.get('/api/v1/driver/rides/requests')
        self.assertNotIn(ride_id, [r['id'] for r in response.data])

        # Passenger completes
        self.use_token(user_token)
        response = self.client.post(f'/api/v1/rides/{ride_id}/complete')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['status'], 'COMPLETED')

        # Ride history shows it completed
        response = self.client.get('/api/v1/user/rides')
        self.assertEqual(response.status_code, 200)
        mine = {r['id']: r['status'] for r in response.data}
        self.assertEqual(mine.get(ride_id), 'COMPLETED')

    def test_driver_cannot_view_passenger_rides(self):
        self.register('driver_d', 'ROLE_DRIVER')
        self.use_token(self.login('driver_d'))

        response = self.client.get('/api/v1/user/rides')

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.data['error'], 'FORBIDDEN')
        self.assertEqual(response.data['status'], 403)
        self.assertIn('timestamp', response.data)


class PlatformEndpointTests(TestCase):
    def test_health_check(self):
        response = self.client.get('/health')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['services']['database'], 'healthy')

    def test_unknown_route_returns_json_404(self):
        response = self.client.get('/api/v1/nowhere')

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['error'], 'NOT_FOUND')

    def test_unexpected_error_uses_uniform_body(self):
        user = User.objects.create_user(username='driver', password='pass1234', role=User.DRIVER)
        client = APIClient()
        client.force_authenticate(user=user)

        with patch('services.ride_management.list_pending_rides', side_effect=RuntimeError('boom')):
            response = client.get('/api/v1/driver/rides/requests')

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.data['error'], 'INTERNAL_SERVER_ERROR')
        self.assertIn('boom', response.data['message'])
