from datetime import timedelta

from django.core import mail
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.users.models import AdminRole, User
from apps.users.utils import is_mobile_money_number, normalize_phone, to_msisdn


class RegisterAPITestCase(APITestCase):
	def setUp(self):
		self.url = reverse("auth-register")

	def test_register_creates_user_and_sends_otp(self):
		response = self.client.post(
			self.url,
			{"email": "Jane@Example.com", "fullName": "Jane Doe"},
			format="json",
		)
		self.assertEqual(response.status_code, status.HTTP_201_CREATED)
		self.assertEqual(response.data, {"status": True, "message": "User registered, OTP sent"})

		user = User.objects.get(email="jane@example.com")
		self.assertEqual(user.first_name, "Jane")
		self.assertEqual(user.last_name, "Doe")
		self.assertEqual(len(user.otp_code), 6)
		self.assertFalse(user.has_usable_password())

		self.assertEqual(len(mail.outbox), 1)
		self.assertEqual(mail.outbox[0].subject, "REI 25th Login One Time Pin")
		self.assertIn(user.otp_code, mail.outbox[0].body)

	def test_duplicate_email_conflict(self):
		User.objects.create_user(email="jane@example.com")
		response = self.client.post(
			self.url,
			{"email": "jane@example.com", "fullName": "Jane Doe"},
			format="json",
		)
		self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
		self.assertFalse(response.data["status"])


class LoginFlowAPITestCase(APITestCase):
	def setUp(self):
		self.user = User.objects.create_user(email="member@example.com", first_name="Ann", last_name="Member")

	def test_check_email_unknown(self):
		response = self.client.post(reverse("auth-check-email"), {"email": "nobody@example.com"}, format="json")
		self.assertEqual(response.status_code, status.HTTP_200_OK)
		self.assertEqual(response.data, {"status": True, "exists": False, "message": "Email not found"})
		self.assertEqual(len(mail.outbox), 0)

	def test_check_email_invalid_format(self):
		response = self.client.post(reverse("auth-check-email"), {"email": "not-an-email"}, format="json")
		self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
		self.assertEqual(response.data["error"], "Invalid email format")

	def test_check_email_sends_otp(self):
		response = self.client.post(reverse("auth-check-email"), {"email": "MEMBER@example.com"}, format="json")
		self.assertEqual(response.status_code, status.HTTP_200_OK)
		self.assertTrue(response.data["exists"])
		self.user.refresh_from_db()
		self.assertIsNotNone(self.user.otp_code)
		self.assertEqual(len(mail.outbox), 1)

	def test_resend_otp_unknown_email(self):
		response = self.client.post(reverse("auth-resend-otp"), {"email": "nobody@example.com"}, format="json")
		self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

	def test_resend_otp_replaces_code(self):
		self.user.issue_otp("111111")
		response = self.client.post(reverse("auth-resend-otp"), {"email": self.user.email}, format="json")
		self.assertEqual(response.status_code, status.HTTP_200_OK)
		self.assertEqual(response.data["message"], "New OTP sent to your email")
		self.user.refresh_from_db()
		self.assertIn(self.user.otp_code, mail.outbox[-1].body)

	def test_verify_otp_returns_tokens_and_clears_code(self):
		self.user.issue_otp("123456")
		response = self.client.post(
			reverse("auth-verify-otp"),
			{"email": self.user.email, "pinCode": "123456"},
			format="json",
		)
		self.assertEqual(response.status_code, status.HTTP_200_OK)
		self.assertIn("access", response.data)
		self.assertIn("refresh", response.data)
		self.assertEqual(response.data["user"]["email"], self.user.email)

		self.user.refresh_from_db()
		self.assertIsNone(self.user.otp_code)

		self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['access']}")
		me = self.client.get(reverse("me"))
		self.assertEqual(me.status_code, status.HTTP_200_OK)
		self.assertEqual(me.data["full_name"], "Ann Member")

	def test_verify_otp_wrong_pin(self):
		self.user.issue_otp("123456")
		response = self.client.post(
			reverse("auth-verify-otp"),
			{"email": self.user.email, "pinCode": "654321"},
			format="json",
		)
		self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
		self.assertEqual(response.data["error"], "Invalid or expired PIN")

	def test_verify_otp_expired_pin(self):
		self.user.issue_otp("123456")
		User.objects.filter(pk=self.user.pk).update(otp_expires_at=timezone.now() - timedelta(seconds=1))
		response = self.client.post(
			reverse("auth-verify-otp"),
			{"email": self.user.email, "pinCode": "123456"},
			format="json",
		)
		self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

	def test_verify_otp_without_issued_pin(self):
		response = self.client.post(
			reverse("auth-verify-otp"),
			{"email": self.user.email, "pinCode": "123456"},
			format="json",
		)
		self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
		self.assertEqual(response.data["error"], "No PIN generated")

	def test_verify_otp_unknown_user(self):
		response = self.client.post(
			reverse("auth-verify-otp"),
			{"email": "nobody@example.com", "pinCode": "123456"},
			format="json",
		)
		self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

	def test_me_requires_token(self):
		response = self.client.get(reverse("me"))
		self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class UserModelTestCase(APITestCase):
	def test_full_name_split(self):
		user = User.objects.create_user(email="a@example.com")
		user.set_full_name("  Mary Jane   Watson ")
		self.assertEqual(user.first_name, "Mary")
		self.assertEqual(user.last_name, "Jane Watson")
		self.assertEqual(user.full_name, "Mary Jane Watson")

	def test_admin_roles(self):
		approver = User.objects.create_user(email="b@example.com", admin_role=AdminRole.APPROVER)
		self.assertTrue(approver.is_approver)
		self.assertFalse(approver.is_requester)


class PhoneUtilsTestCase(APITestCase):
	def test_normalize_phone(self):
		self.assertEqual(normalize_phone("+256 (772) 123-456"), "+256772123456")
		self.assertEqual(normalize_phone(""), "")
		self.assertEqual(to_msisdn("+256772123456"), "256772123456")

	def test_mobile_money_prefixes(self):
		self.assertTrue(is_mobile_money_number("256772123456"))
		self.assertTrue(is_mobile_money_number("+256701234567"))
		self.assertFalse(is_mobile_money_number("256412123456"))
		self.assertFalse(is_mobile_money_number("0772123456"))
