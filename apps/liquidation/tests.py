from datetime import timedelta
from decimal import Decimal

from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.liquidation.models import LiquidationRequest, LiquidationStatus
from apps.users.models import AdminRole, User


def future_date(days=7):
	return (timezone.localdate() + timedelta(days=days)).isoformat()


BANK_REQUEST = {
	"amount": "500000",
	"paymentMethod": "bank",
	"accountName": "REI Organizing Committee",
	"bankName": "Stanbic Bank",
	"accountNumber": "9030012345678",
	"reason": "Venue deposit for the main conference hall",
}


class CreateLiquidationAPITestCase(APITestCase):
	def setUp(self):
		self.requester = User.objects.create_user(
			email="treasurer@example.com",
			first_name="Tina",
			last_name="Treasurer",
			admin_role=AdminRole.REQUESTER,
			is_staff=True,
		)
		self.client.force_authenticate(user=self.requester)
		self.url = reverse("liquidation-request")

	def test_create_bank_request(self):
		response = self.client.post(self.url, {**BANK_REQUEST, "disbursementDate": future_date()}, format="json")
		self.assertEqual(response.status_code, status.HTTP_201_CREATED)
		self.assertEqual(response.data["request"]["status"], LiquidationStatus.PENDING)
		self.assertEqual(response.data["request"]["requesterName"], "Tina Treasurer")

		liquidation = LiquidationRequest.objects.get()
		self.assertEqual(liquidation.requester, self.requester)
		self.assertEqual(liquidation.amount, Decimal("500000"))

	def test_create_mobile_money_request(self):
		payload = {
			"amount": "150000",
			"paymentMethod": "mobile_money",
			"accountName": "Tina Treasurer",
			"mobileNumber": "0772123456",
			"network": "MTN",
			"reason": "Transport refund for the logistics team",
			"disbursementDate": future_date(),
		}
		response = self.client.post(self.url, payload, format="json")
		self.assertEqual(response.status_code, status.HTTP_201_CREATED)

	def test_validation_rules(self):
		cases = [
			({"amount": "0"}, "amount"),
			({"reason": "Too short"}, "reason"),
			({"disbursementDate": timezone.localdate().isoformat()}, "disbursementDate"),
			({"accountNumber": "12345"}, "accountNumber"),
			({"bankName": ""}, "bankName"),
			({"paymentMethod": "cash"}, "paymentMethod"),
		]
		for override, field in cases:
			with self.subTest(field=field):
				payload = {**BANK_REQUEST, "disbursementDate": future_date(), **override}
				response = self.client.post(self.url, payload, format="json")
				self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
				self.assertIn(field, response.data)
		self.assertFalse(LiquidationRequest.objects.exists())

	def test_mobile_money_requires_valid_number_and_network(self):
		payload = {
			"amount": "150000",
			"paymentMethod": "mobile_money",
			"accountName": "Tina Treasurer",
			"mobileNumber": "256772123456",
			"reason": "Transport refund for the logistics team",
			"disbursementDate": future_date(),
		}
		response = self.client.post(self.url, payload, format="json")
		self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
		self.assertIn("mobileNumber", response.data)
		self.assertIn("network", response.data)

	def test_member_without_role_forbidden(self):
		self.client.force_authenticate(user=User.objects.create_user(email="member@example.com"))
		response = self.client.post(self.url, {**BANK_REQUEST, "disbursementDate": future_date()}, format="json")
		self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class LiquidationReviewAPITestCase(APITestCase):
	def setUp(self):
		self.requester = User.objects.create_user(email="treasurer@example.com", admin_role=AdminRole.REQUESTER)
		self.approver = User.objects.create_user(
			email="chair@example.com",
			first_name="Carl",
			last_name="Chair",
			admin_role=AdminRole.APPROVER,
		)
		self.liquidation = LiquidationRequest.objects.create(
			amount=Decimal("500000"),
			payment_method="bank",
			account_name="REI Organizing Committee",
			bank_name="Stanbic Bank",
			account_number="9030012345678",
			reason="Venue deposit for the main conference hall",
			disbursement_date=timezone.localdate() + timedelta(days=7),
			requester=self.requester,
			requester_name="Tina Treasurer",
		)
		self.url = reverse("liquidation-request-status", args=[self.liquidation.pk])

	def test_list_newest_first(self):
		newer = LiquidationRequest.objects.create(
			amount=Decimal("1000"),
			payment_method="mobile_money",
			account_name="Tina",
			mobile_number="0772123456",
			network="MTN",
			reason="Printing of delegate badges and banners",
			disbursement_date=timezone.localdate() + timedelta(days=3),
			requester=self.requester,
		)
		LiquidationRequest.objects.filter(pk=newer.pk).update(created_at=timezone.now() + timedelta(minutes=1))
		self.client.force_authenticate(user=self.requester)
		response = self.client.get(reverse("liquidation-requests"))
		self.assertEqual(response.status_code, status.HTTP_200_OK)
		self.assertEqual(response.data[0]["id"], str(newer.pk))
		self.assertEqual(len(response.data), 2)

	def test_approve_then_process(self):
		self.client.force_authenticate(user=self.approver)

		response = self.client.patch(self.url, {"status": "approved"}, format="json")
		self.assertEqual(response.status_code, status.HTTP_200_OK)
		self.assertEqual(response.data["request"]["reviewedBy"], "Carl Chair")

		response = self.client.patch(self.url, {"status": "processed"}, format="json")
		self.assertEqual(response.status_code, status.HTTP_200_OK)

		self.liquidation.refresh_from_db()
		self.assertEqual(self.liquidation.status, LiquidationStatus.PROCESSED)
		self.assertEqual(self.liquidation.reviewed_by, self.approver)
		self.assertIsNotNone(self.liquidation.reviewed_at)

	def test_illegal_transitions(self):
		self.client.force_authenticate(user=self.approver)

		response = self.client.patch(self.url, {"status": "processed"}, format="json")
		self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

		self.client.patch(self.url, {"status": "rejected"}, format="json")
		response = self.client.patch(self.url, {"status": "approved"}, format="json")
		self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

		self.liquidation.refresh_from_db()
		self.assertEqual(self.liquidation.status, LiquidationStatus.REJECTED)

	def test_same_status_is_a_conflict(self):
		self.client.force_authenticate(user=self.approver)
		response = self.client.patch(self.url, {"status": "pending"}, format="json")
		self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
		self.liquidation.refresh_from_db()
		self.assertIsNone(self.liquidation.reviewed_by)

	def test_unknown_status(self):
		self.client.force_authenticate(user=self.approver)
		response = self.client.patch(self.url, {"status": "paid"}, format="json")
		self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

	def test_unknown_request(self):
		self.client.force_authenticate(user=self.approver)
		url = reverse("liquidation-request-status", args=["00000000-0000-0000-0000-000000000000"])
		response = self.client.patch(url, {"status": "approved"}, format="json")
		self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

	def test_requester_cannot_review(self):
		self.client.force_authenticate(user=self.requester)
		response = self.client.patch(self.url, {"status": "approved"}, format="json")
		self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
		self.liquidation.refresh_from_db()
		self.assertEqual(self.liquidation.status, LiquidationStatus.PENDING)
