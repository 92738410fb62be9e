from decimal import Decimal

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.registrations.models import PaymentStatus, Registration
from apps.users.models import User


FORM = {
	"fullName": "Peter Okello",
	"phoneNumber": "256772123456",
	"gender": "Male",
	"clubName": "Rotaract Kampala",
	"country": "Uganda",
	"district": "Kampala",
	"designation": "Member",
	"delegateType": "Rotaractor",
	"shirtSize": "L",
	"dietaryRestrictions": "Vegetarian",
	"accommodation": "Hotel",
	"nextOfKin": "Mary Okello",
	"nextOfKinContact": "+256700000000",
	"specialMedicalConditions": "",
}


class MemberRegistrationAPITestCase(APITestCase):
	def setUp(self):
		self.user = User.objects.create_user(email="peter@example.com")
		self.client.force_authenticate(user=self.user)
		self.url = reverse("member-registration")

	def test_register_saves_profile_and_opens_balance(self):
		response = self.client.post(self.url, FORM, format="json")
		self.assertEqual(response.status_code, status.HTTP_201_CREATED)
		self.assertTrue(response.data["success"])

		self.user.refresh_from_db()
		self.assertEqual(self.user.full_name, "Peter Okello")
		self.assertEqual(self.user.phone_number, "+256772123456")
		self.assertEqual(self.user.t_shirt_size, "L")
		self.assertEqual(self.user.dietary_needs, "Vegetarian")

		registration = Registration.objects.get(user=self.user)
		self.assertEqual(registration.amount_paid, Decimal("0"))
		self.assertEqual(registration.balance, Decimal("180000"))
		self.assertEqual(registration.payment_status, PaymentStatus.PENDING)

	def test_second_registration_conflicts(self):
		self.client.post(self.url, FORM, format="json")
		response = self.client.post(self.url, FORM, format="json")
		self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
		self.assertEqual(Registration.objects.filter(user=self.user).count(), 1)

	def test_invalid_phone_rejected(self):
		response = self.client.post(self.url, {**FORM, "phoneNumber": "12345"}, format="json")
		self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
		self.assertIn("phoneNumber", response.data)
		self.assertFalse(Registration.objects.exists())

	def test_requires_authentication(self):
		self.client.force_authenticate(user=None)
		response = self.client.post(self.url, FORM, format="json")
		self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class CheckRegistrationAPITestCase(APITestCase):
	def setUp(self):
		self.user = User.objects.create_user(email="peter@example.com")
		self.client.force_authenticate(user=self.user)

	def test_not_registered(self):
		response = self.client.get(reverse("check-registration"))
		self.assertEqual(response.status_code, status.HTTP_200_OK)
		self.assertFalse(response.data["isRegistered"])
		self.assertIsNone(response.data["registration"])

	def test_registered(self):
		registration = Registration.objects.create(user=self.user)
		response = self.client.get(reverse("check-registration"))
		self.assertTrue(response.data["isRegistered"])
		self.assertEqual(response.data["registration"]["id"], registration.pk)
		self.assertEqual(response.data["user"]["email"], self.user.email)


class MemberDetailsAPITestCase(APITestCase):
	def setUp(self):
		self.member = User.objects.create_user(
			email="member@example.com",
			first_name="Ann",
			last_name="Member",
			club_name="Rotary Entebbe",
		)
		self.other = User.objects.create_user(email="other@example.com")
		self.staff = User.objects.create_user(email="admin@example.com", is_staff=True)
		Registration.objects.create(user=self.member)
		self.url = reverse("member-details")

	def test_own_details(self):
		self.client.force_authenticate(user=self.member)
		response = self.client.get(self.url)
		self.assertEqual(response.status_code, status.HTTP_200_OK)
		self.assertEqual(response.data["user"]["fullName"], "Ann Member")
		self.assertEqual(response.data["user"]["club_name"], "Rotary Entebbe")
		self.assertEqual(Decimal(response.data["registration"]["balance"]), Decimal("180000"))

	def test_other_member_forbidden_for_non_staff(self):
		self.client.force_authenticate(user=self.other)
		response = self.client.get(self.url, {"email": self.member.email})
		self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

	def test_staff_can_look_up_member(self):
		self.client.force_authenticate(user=self.staff)
		response = self.client.get(self.url, {"email": self.member.email})
		self.assertEqual(response.status_code, status.HTTP_200_OK)
		self.assertEqual(response.data["user"]["fullName"], "Ann Member")

	def test_unknown_email(self):
		self.client.force_authenticate(user=self.staff)
		response = self.client.get(self.url, {"email": "ghost@example.com"})
		self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class RegistrationLedgerTestCase(APITestCase):
	def setUp(self):
		self.registration = Registration.objects.create(
			user=User.objects.create_user(email="ledger@example.com")
		)

	def test_partial_then_full_payment(self):
		self.registration.apply_payment(Decimal("80000"))
		self.assertEqual(self.registration.payment_status, PaymentStatus.PARTIALLY_PAID)
		self.assertEqual(self.registration.balance, Decimal("100000"))
		self.assertEqual(self.registration.total_amount, Decimal("180000"))

		self.registration.apply_payment(Decimal("100000"))
		self.assertEqual(self.registration.payment_status, PaymentStatus.FULLY_PAID)
		self.assertEqual(self.registration.balance, Decimal("0"))

	def test_balance_can_go_negative(self):
		self.registration.apply_payment(Decimal("200000"))
		self.assertEqual(self.registration.balance, Decimal("-20000"))
		self.assertEqual(self.registration.payment_status, PaymentStatus.FULLY_PAID)

	def test_new_registration_is_pending(self):
		self.assertEqual(self.registration.compute_payment_status(), PaymentStatus.PENDING)

	def test_zero_fee_registration_counts_as_paid(self):
		registration = Registration.objects.create(
			user=User.objects.create_user(email="guest@example.com"),
			balance=Decimal("0"),
		)
		self.assertEqual(registration.compute_payment_status(), PaymentStatus.FULLY_PAID)
