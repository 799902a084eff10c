import threading
from unittest.mock import patch

from django.test import SimpleTestCase, TestCase, override_settings
from rest_framework.test import APIClient, APIRequestFactory, force_authenticate

from accounts.models import User
from accounts.tokens import issue_token
from common.exceptions import ValidationError
from services import ride_management
from services.ride_management import RideNotFoundError, RideStateError
from drivers.views import AcceptRideView
from .models import Ride
from .stores import DjangoRideStore, InMemoryRideStore, _load_store


PASSENGER_ID = 1
OTHER_PASSENGER_ID = 2
DRIVER_ID = 10


class RideLifecycleTests(SimpleTestCase):
	def setUp(self):
		self.store = InMemoryRideStore()

	def create(self, requester_id=PASSENGER_ID, pickup='Koramangala', drop='Indiranagar'):
		return ride_management.create_ride(pickup, drop, requester_id, store=self.store)

	def test_create_ride_starts_requested_without_driver(self):
		ride = self.create()

		self.assertIsNotNone(ride.id)
		self.assertEqual(ride.status, Ride.REQUESTED)
		self.assertEqual(ride.passenger_id, PASSENGER_ID)
		self.assertIsNone(ride.driver_id)
		self.assertIsNotNone(ride.created_at)
		self.assertEqual(ride.pickup_location, 'Koramangala')
		self.assertEqual(ride.drop_location, 'Indiranagar')

	def test_create_ride_requires_locations(self):
		for pickup, drop in [('', 'Indiranagar'), ('Koramangala', ''), ('  ', None)]:
			with self.subTest(pickup=pickup, drop=drop):
				with self.assertRaises(ValidationError):
					self.create(pickup=pickup, drop=drop)
		self.assertEqual(ride_management.list_pending_rides(store=self.store), [])

	def test_accept_sets_driver_and_status(self):
		ride = self.create()

		accepted = ride_management.accept_ride(ride.id, DRIVER_ID, store=self.store)

		self.assertEqual(accepted.status, Ride.ACCEPTED)
		self.assertEqual(accepted.driver_id, DRIVER_ID)
		self.assertEqual(accepted.passenger_id, PASSENGER_ID)
		self.assertIsNotNone(accepted.accepted_at)

	def test_accept_twice_reports_current_status(self):
		ride = self.create()
		ride_management.accept_ride(ride.id, DRIVER_ID, store=self.store)

		with self.assertRaises(RideStateError) as ctx:
			ride_management.accept_ride(ride.id, DRIVER_ID + 1, store=self.store)

		self.assertIn('ACCEPTED', str(ctx.exception))
		self.assertEqual(ctx.exception.current_status, Ride.ACCEPTED)
		self.assertEqual(self.store.get(ride.id).driver_id, DRIVER_ID)

	def test_accept_completed_ride_fails(self):
		ride = self.create()
		ride_management.accept_ride(ride.id, DRIVER_ID, store=self.store)
		ride_management.complete_ride(ride.id, store=self.store)

		with self.assertRaises(RideStateError) as ctx:
			ride_management.accept_ride(ride.id, DRIVER_ID, store=self.store)
		self.assertIn('COMPLETED', str(ctx.exception))

	def test_accept_missing_ride(self):
		with self.assertRaises(RideNotFoundError) as ctx:
			ride_management.accept_ride(999, DRIVER_ID, store=self.store)
		self.assertIn('999', str(ctx.exception))

	def test_complete_requires_accepted(self):
		ride = self.create()

		with self.assertRaises(RideStateError) as ctx:
			ride_management.complete_ride(ride.id, store=self.store)
		self.assertIn('REQUESTED', str(ctx.exception))

		ride_management.accept_ride(ride.id, DRIVER_ID, store=self.store)
		completed = ride_management.complete_ride(ride.id, store=self.store)

		self.assertEqual(completed.status, Ride.COMPLETED)
		self.assertEqual(completed.driver_id, DRIVER_ID)
		self.assertIsNotNone(completed.completed_at)

		with self.assertRaises(RideStateError) as ctx:
			ride_management.complete_ride(ride.id, store=self.store)
		self.assertIn('COMPLETED', str(ctx.exception))

	def test_complete_missing_ride(self):
		with self.assertRaises(RideNotFoundError):
			ride_management.complete_ride(42, store=self.store)

	def test_pending_list_only_contains_requested_rides(self):
		waiting = self.create()
		accepted = self.create()
		completed = self.create(requester_id=OTHER_PASSENGER_ID)
		ride_management.accept_ride(accepted.id, DRIVER_ID, store=self.store)
		ride_management.accept_ride(completed.id, DRIVER_ID, store=self.store)
		ride_management.complete_ride(completed.id, store=self.store)

		pending = ride_management.list_pending_rides(store=self.store)

		self.assertEqual([r.id for r in pending], [waiting.id])
		self.assertTrue(all(r.status == Ride.REQUESTED for r in pending))

	def test_requester_list_is_exact_and_ignores_status(self):
		first = self.create()
		second = self.create()
		self.create(requester_id=OTHER_PASSENGER_ID)
		ride_management.accept_ride(second.id, DRIVER_ID, store=self.store)

		mine = ride_management.list_rides_for_requester(PASSENGER_ID, store=self.store)

		self.assertEqual([r.id for r in mine], [first.id, second.id])
		self.assertEqual({r.status for r in mine}, {Ride.REQUESTED, Ride.ACCEPTED})

	def test_driver_is_set_only_once_accepted(self):
		ride = self.create()
		self.assertIsNone(self.store.get(ride.id).driver_id)

		ride_management.accept_ride(ride.id, DRIVER_ID, store=self.store)
		self.assertIsNotNone(self.store.get(ride.id).driver_id)

		ride_management.complete_ride(ride.id, store=self.store)
		self.assertIsNotNone(self.store.get(ride.id).driver_id)

	def test_store_hands_out_copies(self):
		ride = self.create()
		fetched = self.store.get(ride.id)
		fetched.status = Ride.COMPLETED

		self.assertEqual(self.store.get(ride.id).status, Ride.REQUESTED)

	def test_concurrent_accepts_have_one_winner(self):
		ride = self.create()
		barrier = threading.Barrier(8)
		winners = []
		losers = []

		def attempt(driver_id):
			barrier.wait()
			try:
				ride_management.accept_ride(ride.id, driver_id, store=self.store)
				winners.append(driver_id)
			except RideStateError:
				losers.append(driver_id)

		threads = [threading.Thread(target=attempt, args=(DRIVER_ID + i,)) for i in range(8)]
		for thread in threads:
			thread.start()
		for thread in threads:
			thread.join()

		self.assertEqual(len(winners), 1)
		self.assertEqual(len(losers), 7)
		self.assertEqual(self.store.get(ride.id).driver_id, winners[0])


class DjangoRideStoreTests(TestCase):
	def setUp(self):
		self.store = DjangoRideStore()
		self.passenger = User.objects.create_user(username='passenger', password='pass1234', role=User.PASSENGER)
		self.driver = User.objects.create_user(username='driver', password='driver1234', role=User.DRIVER)
		self.ride = ride_management.create_ride('Connaught Place', 'India Gate', self.passenger.id, store=self.store)

	def test_ride_is_persisted(self):
		ride = Ride.objects.get(pk=self.ride.id)

		self.assertEqual(ride.passenger, self.passenger)
		self.assertEqual(ride.status, Ride.REQUESTED)

	def test_conditional_update_only_matches_expected_status(self):
		self.assertIsNone(self.store.transition(self.ride.id, Ride.ACCEPTED, status=Ride.COMPLETED))

		updated = self.store.transition(self.ride.id, Ride.REQUESTED, status=Ride.ACCEPTED, driver_id=self.driver.id)

		self.assertEqual(updated.status, Ride.ACCEPTED)
		self.assertEqual(updated.driver, self.driver)

	def test_lost_race_reports_winner_status(self):
		stale = self.store.get(self.ride.id)
		ride_management.accept_ride(self.ride.id, self.driver.id, store=self.store)
		real_get = self.store.get

		# First read sees the pre-accept snapshot, as a concurrent request would
		with patch.object(self.store, 'get', side_effect=[stale, real_get(self.ride.id)]):
			with self.assertRaises(RideStateError) as ctx:
				ride_management.accept_ride(self.ride.id, self.driver.id, store=self.store)

		self.assertEqual(ctx.exception.current_status, Ride.ACCEPTED)

	def test_get_missing_ride(self):
		self.assertIsNone(self.store.get(12345))


class RideEndpointTests(TestCase):
	def setUp(self):
		self.client = APIClient()
		self.passenger = User.objects.create_user(username='passenger', password='pass1234', role=User.PASSENGER)
		self.other_passenger = User.objects.create_user(username='other', password='pass1234', role=User.PASSENGER)
		self.driver = User.objects.create_user(username='driver', password='driver1234', role=User.DRIVER)

	def as_user(self, user):
		self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {issue_token(user.username, user.role)}')

	def create_ride(self, user=None):
		self.as_user(user or self.passenger)
		return self.client.post(
			'/api/v1/rides',
			{'pickupLocation': 'Koramangala', 'dropLocation': 'Indiranagar'},
			format='json',
		)

	def test_passenger_creates_ride(self):
		response = self.create_ride()

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['status'], 'REQUESTED')
		self.assertEqual(response.data['userId'], self.passenger.id)
		self.assertIsNone(response.data['driverId'])
		self.assertEqual(response.data['pickupLocation'], 'Koramangala')
		self.assertEqual(response.data['dropLocation'], 'Indiranagar')

	def test_create_ride_validation(self):
		self.as_user(self.passenger)
		response = self.client.post('/api/v1/rides', {'pickupLocation': 'Koramangala'}, format='json')

		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.data['error'], 'VALIDATION_ERROR')
		self.assertIn('dropLocation', response.data['message'])

	def test_driver_cannot_create_ride(self):
		response = self.create_ride(user=self.driver)

		self.assertEqual(response.status_code, 403)
		self.assertEqual(response.data['error'], 'FORBIDDEN')
		self.assertEqual(response.data['message'], 'Access denied: Passenger role required')

	def test_unauthenticated_request_is_rejected(self):
		response = self.client.get('/api/v1/driver/rides/requests')

		self.assertEqual(response.status_code, 401)
		self.assertEqual(response.data['error'], 'UNAUTHORIZED')

	def test_passenger_cannot_list_or_accept(self):
		ride_id = self.create_ride().data['id']

		self.as_user(self.passenger)
		self.assertEqual(self.client.get('/api/v1/driver/rides/requests').status_code, 403)
		self.assertEqual(self.client.post(f'/api/v1/driver/rides/{ride_id}/accept').status_code, 403)

	def test_double_accept(self):
		ride_id = self.create_ride().data['id']
		self.as_user(self.driver)

		first = self.client.post(f'/api/v1/driver/rides/{ride_id}/accept')
		second = self.client.post(f'/api/v1/driver/rides/{ride_id}/accept')

		self.assertEqual(first.status_code, 200)
		self.assertEqual(first.data['status'], 'ACCEPTED')
		self.assertEqual(first.data['driverId'], self.driver.id)
		self.assertEqual(second.status_code, 400)
		self.assertEqual(second.data['error'], 'BAD_REQUEST')
		self.assertIn('ACCEPTED', second.data['message'])

	def test_accept_unknown_ride(self):
		self.as_user(self.driver)
		response = self.client.post('/api/v1/driver/rides/9999/accept')

		self.assertEqual(response.status_code, 404)
		self.assertEqual(response.data['error'], 'NOT_FOUND')
		self.assertEqual(response.data['message'], 'Ride not found with id: 9999')

	def test_complete_before_accept_fails(self):
		ride_id = self.create_ride().data['id']
		response = self.client.post(f'/api/v1/rides/{ride_id}/complete')

		self.assertEqual(response.status_code, 400)
		self.assertIn('REQUESTED', response.data['message'])

	def test_any_authenticated_user_can_complete_by_default(self):
		ride_id = self.create_ride().data['id']
		self.as_user(self.driver)
		self.client.post(f'/api/v1/driver/rides/{ride_id}/accept')

		self.as_user(self.other_passenger)
		response = self.client.post(f'/api/v1/rides/{ride_id}/complete')

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['status'], 'COMPLETED')

	def test_restricted_completion_rejects_outsiders(self):
		ride_id = self.create_ride().data['id']
		self.as_user(self.driver)
		self.client.post(f'/api/v1/driver/rides/{ride_id}/accept')

		with self.settings(RIDESHARE={
			'RIDE_STORE': 'rides.stores.DjangoRideStore',
			'USER_STORE': 'accounts.stores.DjangoUserStore',
			'RESTRICT_COMPLETE_TO_PARTICIPANTS': True,
		}):
			self.as_user(self.other_passenger)
			outsider = self.client.post(f'/api/v1/rides/{ride_id}/complete')

			self.as_user(self.passenger)
			requester = self.client.post(f'/api/v1/rides/{ride_id}/complete')

		self.assertEqual(outsider.status_code, 403)
		self.assertEqual(outsider.data['error'], 'FORBIDDEN')
		self.assertTrue(outsider.data['message'].startswith("Access denied: Only the ride's passenger"))
		self.assertEqual(requester.status_code, 200)
		self.assertEqual(requester.data['status'], 'COMPLETED')

	def test_my_rides_only_lists_own_rides(self):
		mine = self.create_ride().data['id']
		self.create_ride(user=self.other_passenger)

		self.as_user(self.passenger)
		response = self.client.get('/api/v1/user/rides')

		self.assertEqual(response.status_code, 200)
		self.assertEqual([r['id'] for r in response.data], [mine])

	def test_pending_list_hides_accepted_rides(self):
		accepted = self.create_ride().data['id']
		waiting = self.create_ride().data['id']
		self.as_user(self.driver)
		self.client.post(f'/api/v1/driver/rides/{accepted}/accept')

		response = self.client.get('/api/v1/driver/rides/requests')

		self.assertEqual(response.status_code, 200)
		self.assertEqual([r['id'] for r in response.data], [waiting])

	def test_accept_view_with_forced_authentication(self):
		ride = ride_management.create_ride('Connaught Place', 'India Gate', self.passenger.id)
		factory = APIRequestFactory()

		request = factory.post(f'/api/v1/driver/rides/{ride.id}/accept')
		force_authenticate(request, user=self.driver)
		response = AcceptRideView.as_view()(request, ride_id=ride.id)

		self.assertEqual(response.status_code, 200)
		ride.refresh_from_db()
		self.assertEqual(ride.status, Ride.ACCEPTED)
		self.assertEqual(ride.driver, self.driver)


@override_settings(RIDESHARE={
	'RIDE_STORE': 'rides.stores.InMemoryRideStore',
	'USER_STORE': 'accounts.stores.DjangoUserStore',
	'RESTRICT_COMPLETE_TO_PARTICIPANTS': False,
})
class InMemoryBackendEndpointTests(TestCase):
	def setUp(self):
		# Store instances are cached per dotted path; start each test with a fresh one
		_load_store.cache_clear()
		self.addCleanup(_load_store.cache_clear)
		self.client = APIClient()
		self.passenger = User.objects.create_user(username='passenger', password='pass1234', role=User.PASSENGER)

	def test_rides_are_served_from_configured_store(self):
		self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {issue_token("passenger", User.PASSENGER)}')
		response = self.client.post(
			'/api/v1/rides',
			{'pickupLocation': 'Koramangala', 'dropLocation': 'Indiranagar'},
			format='json',
		)

		self.assertEqual(response.status_code, 200)
		self.assertFalse(Ride.objects.exists())
		mine = self.client.get('/api/v1/user/rides').data
		self.assertEqual([r['id'] for r in mine], [response.data['id']])


class RideAdminTests(TestCase):
	def setUp(self):
		self.admin_user = User.objects.create_superuser(
			username='admin', email='admin@example.com', password='admin1234', role=User.PASSENGER,
		)
		self.passenger = User.objects.create_user(username='passenger', password='pass1234', role=User.PASSENGER)
		self.driver = User.objects.create_user(username='driver', password='driver1234', role=User.DRIVER)
		self.client.force_login(self.admin_user)

	def test_change_form_cannot_rewind_completed_ride(self):
		ride = ride_management.create_ride('Koramangala', 'Indiranagar', self.passenger.id)
		ride_management.accept_ride(ride.id, self.driver.id)
		ride_management.complete_ride(ride.id)

		self.client.post(f'/admin/rides/ride/{ride.id}/change/', {
			'passenger': self.driver.id,
			'driver': '',
			'pickup_location': 'Elsewhere',
			'drop_location': 'Elsewhere',
			'status': Ride.REQUESTED,
		})

		ride.refresh_from_db()
		self.assertEqual(ride.status, Ride.COMPLETED)
		self.assertEqual(ride.driver, self.driver)
		self.assertEqual(ride.passenger, self.passenger)
		self.assertEqual(ride.pickup_location, 'Koramangala')
		self.assertIsNotNone(ride.completed_at)

	def test_rides_cannot_be_added_or_deleted_from_admin(self):
		ride = ride_management.create_ride('Koramangala', 'Indiranagar', self.passenger.id)

		self.assertEqual(self.client.get('/admin/rides/ride/add/').status_code, 403)
		self.assertEqual(self.client.post(f'/admin/rides/ride/{ride.id}/delete/', {'post': 'yes'}).status_code, 403)
		self.assertTrue(Ride.objects.filter(pk=ride.id).exists())
