from datetime import timedelta
from decimal import Decimal
from unittest import mock

from django.core import mail
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.registrations.models import PaymentStatus, Registration
from apps.reports.models import ReminderLog
from apps.reports.services import build_report_rows, export_csv, summarize
from apps.users.models import User


def make_member(email, first_name, paid):
	user = User.objects.create_user(
		email=email,
		first_name=first_name,
		last_name="Member",
		club_name="Rotary Gulu",
		district="Gulu",
		t_shirt_size="M",
	)
	registration = Registration.objects.create(user=user)
	if paid:
		registration.apply_payment(Decimal(paid))
		registration.save()
	return user, registration


class ReportDataTestCase(APITestCase):
	def setUp(self):
		self.full, _ = make_member("full@example.com", "Alice", "180000")
		self.partial, _ = make_member("partial@example.com", "Bob", "50000")
		self.unpaid, _ = make_member("unpaid@example.com", "Carol", None)

	def test_rows_and_summary(self):
		rows = build_report_rows()
		self.assertEqual([r["email"] for r in rows], ["full@example.com", "partial@example.com", "unpaid@example.com"])
		self.assertEqual(rows[1]["payment_status"], PaymentStatus.PARTIALLY_PAID)

		summary = summarize(rows)
		self.assertEqual(summary["total"], 3)
		self.assertEqual(summary["fully_paid"], 1)
		self.assertEqual(summary["partially_paid"], 1)
		self.assertEqual(summary["unpaid"], 1)
		self.assertEqual(summary["total_paid"], Decimal("230000"))

	def test_status_filters(self):
		self.assertEqual([r["email"] for r in build_report_rows("fully")], ["full@example.com"])
		self.assertEqual([r["email"] for r in build_report_rows("partial")], ["partial@example.com"])
		self.assertEqual([r["email"] for r in build_report_rows("unpaid")], ["unpaid@example.com"])

	def test_amount_filter(self):
		rows = build_report_rows(amount="50000")
		self.assertEqual([r["email"] for r in rows], ["partial@example.com"])

	def test_csv(self):
		lines = export_csv(build_report_rows()).splitlines()
		self.assertEqual(lines[0], "Name,Email,Club,Amount Paid,Balance,Status")
		self.assertEqual(lines[1], "Alice Member,full@example.com,Rotary Gulu,180000,0,Fully Paid")
		self.assertEqual(lines[2], "Bob Member,partial@example.com,Rotary Gulu,50000,130000,Partially Paid")
		self.assertEqual(lines[3], "Carol Member,unpaid@example.com,Rotary Gulu,0,180000,Unpaid")


class ReportAPITestCase(APITestCase):
	def setUp(self):
		make_member("full@example.com", "Alice", "180000")
		make_member("unpaid@example.com", "Carol", None)
		self.admin = User.objects.create_user(email="admin@example.com", is_staff=True)
		self.client.force_authenticate(user=self.admin)

	def test_report(self):
		response = self.client.get(reverse("payment-report"), {"status": "unpaid"})
		self.assertEqual(response.status_code, status.HTTP_200_OK)
		self.assertEqual(response.data["filter"], "Unpaid Members")
		self.assertEqual(len(response.data["results"]), 1)
		self.assertEqual(response.data["results"][0]["fullName"], "Carol Member")

	def test_unknown_status_filter(self):
		response = self.client.get(reverse("payment-report"), {"status": "maybe"})
		self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

	def test_invalid_amount_filter(self):
		for url_name in ("payment-report", "export-csv", "export-pdf"):
			for amount in ("abc", "nan", "Infinity", "-inf", "1e999"):
				with self.subTest(url=url_name, amount=amount):
					response = self.client.get(reverse(url_name), {"amount": amount})
					self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

	def test_non_staff_forbidden(self):
		self.client.force_authenticate(user=User.objects.create_user(email="member@example.com"))
		response = self.client.get(reverse("payment-report"))
		self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

	def test_csv_export(self):
		response = self.client.get(reverse("export-csv"))
		self.assertEqual(response.status_code, status.HTTP_200_OK)
		self.assertEqual(response["Content-Type"], "text/csv")
		self.assertIn('filename="rei-payments-report.csv"', response["Content-Disposition"])
		self.assertIn(b"Alice Member", response.content)

	def test_pdf_export(self):
		response = self.client.get(reverse("export-pdf"), {"status": "fully"})
		self.assertEqual(response.status_code, status.HTTP_200_OK)
		self.assertEqual(response["Content-Type"], "application/pdf")
		self.assertTrue(response.content.startswith(b"%PDF"))


class ReminderAPITestCase(APITestCase):
	def setUp(self):
		self.member, self.registration = make_member("member@example.com", "Dan", "30000")
		self.admin = User.objects.create_user(email="admin@example.com", is_staff=True)
		self.client.force_authenticate(user=self.admin)
		self.url = reverse("send-reminder")

	def test_sends_reminder_and_logs_it(self):
		response = self.client.post(self.url, {"userId": self.member.pk}, format="json")
		self.assertEqual(response.status_code, status.HTTP_200_OK)
		self.assertIn("nextReminderAvailable", response.data)

		self.assertEqual(len(mail.outbox), 1)
		self.assertEqual(mail.outbox[0].subject, "Reminder: Complete Your REI Conference Payment")
		self.assertIn("UGX 150,000", mail.outbox[0].body)
		self.assertTrue(ReminderLog.objects.filter(user=self.member).exists())

	def test_second_reminder_within_cooldown(self):
		self.client.post(self.url, {"userId": self.member.pk}, format="json")
		response = self.client.post(self.url, {"userId": self.member.pk}, format="json")
		self.assertEqual(response.status_code, status.HTTP_429_TOO_MANY_REQUESTS)
		self.assertIn("nextAvailable", response.data)
		self.assertIn("lastSent", response.data)
		self.assertEqual(len(mail.outbox), 1)

	def test_reminder_allowed_after_cooldown(self):
		ReminderLog.objects.create(user=self.member, last_sent=timezone.now() - timedelta(days=8))
		response = self.client.post(self.url, {"userId": self.member.pk}, format="json")
		self.assertEqual(response.status_code, status.HTTP_200_OK)
		self.assertEqual(ReminderLog.objects.filter(user=self.member).count(), 1)

	def test_missing_user_id(self):
		response = self.client.post(self.url, {}, format="json")
		self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
		self.assertEqual(response.data["error"], "User ID is required")

	def test_malformed_user_id(self):
		for user_id in ("abc", "1.5", -3, 10**30):
			with self.subTest(user_id=user_id):
				response = self.client.post(self.url, {"userId": user_id}, format="json")
				self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
				self.assertEqual(response.data["error"], "User ID must be a positive integer")
		self.assertEqual(len(mail.outbox), 0)

	def test_unknown_user(self):
		response = self.client.post(self.url, {"userId": 999999}, format="json")
		self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

	def test_user_without_registration(self):
		user = User.objects.create_user(email="noreg@example.com")
		response = self.client.post(self.url, {"userId": user.pk}, format="json")
		self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

	def test_fully_paid_user(self):
		self.registration.apply_payment(self.registration.balance)
		self.registration.save()
		response = self.client.post(self.url, {"userId": self.member.pk}, format="json")
		self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
		self.assertEqual(response.data["error"], "User has already completed payment")

	@mock.patch("apps.reports.views.send_payment_reminder_email", side_effect=OSError("smtp down"))
	def test_failed_send_is_not_logged(self, _send):
		response = self.client.post(self.url, {"userId": self.member.pk}, format="json")
		self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
		self.assertFalse(ReminderLog.objects.exists())

	def test_reminder_status(self):
		ReminderLog.objects.create(user=self.member, last_sent=timezone.now() - timedelta(days=2))
		response = self.client.get(reverse("reminder-status"))
		self.assertEqual(response.status_code, status.HTTP_200_OK)
		self.assertEqual(len(response.data), 1)
		entry = response.data[0]
		self.assertEqual(entry["userId"], self.member.pk)
		self.assertFalse(entry["canSend"])
		self.assertEqual(entry["daysUntilNext"], 5)
