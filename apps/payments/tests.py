from decimal import Decimal
from io import StringIO
from unittest import mock

import requests
from django.core import mail
from django.core.management import call_command
from django.core.management.base import CommandError
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.payments.exceptions import GatewayError, PaymentErrorCode
from apps.payments.gateway import GATEWAY_ACCEPT, MobileMoneyGateway
from apps.payments.models import Payment
from apps.payments.poller import PaymentStatusPoller
from apps.payments.services import generate_reference_number, settle_payment
from apps.registrations.models import PaymentStatus, Registration
from apps.users.models import User


def gateway_response(payload, ok=True, status_code=200):
	response = mock.Mock(ok=ok, status_code=status_code)
	response.json.return_value = payload
	return response


class FakeGateway:
	"""Отдаёт статусы по очереди; GatewayError в очереди бросается."""

	def __init__(self, statuses):
		self.statuses = list(statuses)
		self.calls = 0

	def check_request_status(self, internal_reference):
		self.calls += 1
		item = self.statuses.pop(0)
		if isinstance(item, Exception):
			raise item
		return {
			"request_status": item,
			"message": f"Request {item}",
			"internal_reference": internal_reference,
			"amount": 180000,
			"provider": "MTN_UGANDA",
		}


class MobileMoneyGatewayTestCase(APITestCase):
	def setUp(self):
		self.session = mock.Mock()
		self.session.headers = {}
		self.gateway = MobileMoneyGateway(
			base_url="https://gateway.test/api/mobile-money/",
			api_key="secret-key",
			account_no="REL123",
			currency="UGX",
			timeout=10,
			session=self.session,
		)

	def test_headers(self):
		self.assertEqual(self.session.headers["Accept"], GATEWAY_ACCEPT)
		self.assertEqual(self.session.headers["Authorization"], "Bearer secret-key")

	def test_validate_msisdn(self):
		self.session.request.return_value = gateway_response({"valid": True, "network": "MTN"})
		result = self.gateway.validate_msisdn("256772123456")
		self.assertTrue(result["valid"])
		self.session.request.assert_called_once_with(
			"POST",
			"https://gateway.test/api/mobile-money/validate",
			timeout=10,
			json={"msisdn": "+256772123456"},
		)

	def test_request_payment_payload(self):
		self.session.request.return_value = gateway_response({"internal_reference": "int-1"})
		self.gateway.request_payment("256772123456", Decimal("180000.00"), "Conference fee", "ref-1")
		_, kwargs = self.session.request.call_args
		self.assertEqual(
			kwargs["json"],
			{
				"account_no": "REL123",
				"msisdn": "+256772123456",
				"amount": 180000,
				"currency": "UGX",
				"description": "Conference fee",
				"reference": "ref-1",
			},
		)

	def test_check_request_status_params(self):
		self.session.request.return_value = gateway_response({"request_status": "PENDING"})
		self.gateway.check_request_status("int-1")
		self.session.request.assert_called_once_with(
			"GET",
			"https://gateway.test/api/mobile-money/check-request-status",
			timeout=10,
			params={"internal_reference": "int-1", "account_no": "REL123"},
		)

	def test_gateway_error_code_passed_through(self):
		self.session.request.return_value = gateway_response(
			{"error_code": "INSUFFICIENT_BALANCE", "message": "Not enough funds"},
			ok=False,
			status_code=400,
		)
		with self.assertRaises(GatewayError) as ctx:
			self.gateway.request_payment("256772123456", 1000, "fee", "ref-1")
		self.assertEqual(ctx.exception.code, "INSUFFICIENT_BALANCE")
		self.assertEqual(ctx.exception.message, "Not enough funds")

	def test_failure_without_body_uses_default_code(self):
		response = gateway_response(None, ok=False, status_code=502)
		response.json.side_effect = ValueError("no json")
		self.session.request.return_value = response
		with self.assertRaises(GatewayError) as ctx:
			self.gateway.check_request_status("int-1")
		self.assertEqual(ctx.exception.code, PaymentErrorCode.STATUS_CHECK_FAILED)

	def test_network_error_is_server_error(self):
		self.session.request.side_effect = requests.ConnectionError("down")
		with self.assertRaises(GatewayError) as ctx:
			self.gateway.validate_msisdn("256772123456")
		self.assertEqual(ctx.exception.code, PaymentErrorCode.SERVER_ERROR)
		self.assertEqual(ctx.exception.http_status, status.HTTP_500_INTERNAL_SERVER_ERROR)


class ReferenceNumberTestCase(APITestCase):
	def test_daily_counter(self):
		today = timezone.localdate().strftime("%Y%m%d")
		first = generate_reference_number()
		second = generate_reference_number()
		self.assertEqual(first, f"61801{today}000000001")
		self.assertEqual(second, f"61801{today}000000002")


@mock.patch("apps.payments.services.get_gateway")
class ProcessPaymentAPITestCase(APITestCase):
	def setUp(self):
		self.user = User.objects.create_user(email="payer@example.com")
		self.client.force_authenticate(user=self.user)
		self.url = reverse("process-payment")

	def test_initiates_payment(self, get_gateway):
		gateway = get_gateway.return_value
		gateway.validate_msisdn.return_value = {"valid": True, "network": "MTN"}
		gateway.request_payment.return_value = {
			"internal_reference": "int-1",
			"customer_reference": "cust-1",
			"provider": "MTN_UGANDA",
			"amount": 180000,
		}

		response = self.client.post(self.url, {"amount": 180000, "phoneNumber": "+256772123456"}, format="json")

		self.assertEqual(response.status_code, status.HTTP_200_OK)
		self.assertTrue(response.data["success"])
		self.assertEqual(response.data["status"], "PENDING")
		self.assertEqual(response.data["internalReference"], "int-1")
		self.assertEqual(response.data["customerReference"], "cust-1")
		self.assertEqual(len(response.data["reference"]), 22)
		gateway.validate_msisdn.assert_called_once_with("256772123456")
		self.assertEqual(gateway.request_payment.call_args.kwargs["msisdn"], "256772123456")
		self.assertEqual(gateway.request_payment.call_args.kwargs["amount"], Decimal("180000"))

	def test_missing_fields(self, get_gateway):
		response = self.client.post(self.url, {}, format="json")
		self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
		self.assertEqual(response.data["error"], PaymentErrorCode.VALIDATION_ERROR)
		self.assertEqual(response.data["message"], "Amount and phone number are required")
		get_gateway.assert_not_called()

	def test_non_mobile_money_number(self, get_gateway):
		response = self.client.post(self.url, {"amount": 1000, "phoneNumber": "0772123456"}, format="json")
		self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
		self.assertEqual(response.data["error"], PaymentErrorCode.INVALID_NUMBER)
		get_gateway.assert_not_called()

	def test_gateway_rejects_number(self, get_gateway):
		get_gateway.return_value.validate_msisdn.return_value = {"valid": False, "message": "Unregistered"}
		response = self.client.post(self.url, {"amount": 1000, "phoneNumber": "256772123456"}, format="json")
		self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
		self.assertEqual(response.data["error"], PaymentErrorCode.INVALID_NUMBER)
		self.assertEqual(response.data["message"], "Invalid mobile number: Unregistered")
		get_gateway.return_value.request_payment.assert_not_called()

	def test_payment_request_failure(self, get_gateway):
		gateway = get_gateway.return_value
		gateway.validate_msisdn.return_value = {"valid": True}
		gateway.request_payment.side_effect = GatewayError(PaymentErrorCode.PAYMENT_FAILED, "Payment request failed")
		response = self.client.post(self.url, {"amount": 1000, "phoneNumber": "256772123456"}, format="json")
		self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
		self.assertEqual(response.data["error"], PaymentErrorCode.PAYMENT_FAILED)

	def test_unexpected_error(self, get_gateway):
		gateway = get_gateway.return_value
		gateway.validate_msisdn.return_value = {"valid": True}
		gateway.request_payment.side_effect = RuntimeError("boom")
		response = self.client.post(self.url, {"amount": 1000, "phoneNumber": "256772123456"}, format="json")
		self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
		self.assertEqual(response.data["error"], PaymentErrorCode.SERVER_ERROR)

	def test_missing_token_is_unauthorized(self, get_gateway):
		self.client.force_authenticate(user=None)
		response = self.client.post(self.url, {"amount": 1000, "phoneNumber": "256772123456"}, format="json")
		self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
		self.assertEqual(response.data["error"], PaymentErrorCode.UNAUTHORIZED)
		self.assertFalse(response.data["success"])
		get_gateway.assert_not_called()


@mock.patch("apps.payments.services.get_gateway")
class CheckPaymentStatusAPITestCase(APITestCase):
	def setUp(self):
		self.user = User.objects.create_user(email="payer@example.com")
		self.client.force_authenticate(user=self.user)
		self.url = reverse("check-payment-status")

	def test_status_is_lowercased(self, get_gateway):
		get_gateway.return_value.check_request_status.return_value = {
			"request_status": "SUCCESS",
			"message": "Completed",
			"internal_reference": "int-1",
			"amount": 180000,
			"provider": "MTN_UGANDA",
		}
		response = self.client.get(self.url, {"internal_reference": "int-1"})
		self.assertEqual(response.status_code, status.HTTP_200_OK)
		self.assertEqual(response.data["status"], "success")
		self.assertEqual(response.data["data"]["internalReference"], "int-1")
		get_gateway.return_value.check_request_status.assert_called_once_with("int-1")

	def test_missing_reference(self, get_gateway):
		response = self.client.get(self.url)
		self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
		self.assertEqual(response.data["error"], PaymentErrorCode.MISSING_REFERENCE)

	def test_status_check_failure(self, get_gateway):
		get_gateway.return_value.check_request_status.side_effect = GatewayError(
			PaymentErrorCode.STATUS_CHECK_FAILED, "Failed to check payment status"
		)
		response = self.client.get(self.url, {"internal_reference": "int-1"})
		self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
		self.assertEqual(response.data["error"], PaymentErrorCode.STATUS_CHECK_FAILED)

	def test_missing_token_is_unauthorized(self, get_gateway):
		self.client.force_authenticate(user=None)
		response = self.client.get(self.url, {"internal_reference": "int-1"})
		self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
		self.assertEqual(response.data["error"], PaymentErrorCode.UNAUTHORIZED)


class SettlementTestCase(APITestCase):
	def setUp(self):
		self.user = User.objects.create_user(email="payer@example.com", first_name="Paul", last_name="Payer")
		self.registration = Registration.objects.create(user=self.user)

	def test_settlement_moves_amount_and_sends_email(self):
		with self.captureOnCommitCallbacks(execute=True):
			payment, registration = settle_payment(
				registration_id=self.registration.pk,
				amount=Decimal("80000"),
				transaction_id="int-1",
				provider="MTN_UGANDA",
			)

		self.assertEqual(registration.amount_paid, Decimal("80000"))
		self.assertEqual(registration.balance, Decimal("100000"))
		self.assertEqual(registration.payment_status, PaymentStatus.PARTIALLY_PAID)
		self.assertEqual(payment.user, self.user)

		self.registration.refresh_from_db()
		self.assertEqual(self.registration.amount_paid + self.registration.balance, Decimal("180000"))

		self.assertEqual(len(mail.outbox), 1)
		self.assertEqual(mail.outbox[0].subject, "REI Conference Payment Confirmation")
		self.assertEqual(mail.outbox[0].to, ["payer@example.com"])
		self.assertIn("int-1", mail.outbox[0].body)

	def test_full_payment_marks_registration_paid(self):
		_, registration = settle_payment(
			registration_id=self.registration.pk,
			amount=Decimal("180000"),
			transaction_id="int-2",
		)
		self.assertEqual(registration.balance, Decimal("0"))
		self.assertEqual(registration.payment_status, PaymentStatus.FULLY_PAID)

	def test_duplicate_transaction_is_recorded_twice(self):
		settle_payment(registration_id=self.registration.pk, amount=Decimal("100000"), transaction_id="dup-1")

		with self.assertLogs("apps.payments.services", level="WARNING") as logs:
			_, registration = settle_payment(
				registration_id=self.registration.pk,
				amount=Decimal("100000"),
				transaction_id="dup-1",
			)

		self.assertTrue(any("dup-1" in line for line in logs.output))
		self.assertEqual(Payment.objects.filter(transaction_id="dup-1").count(), 2)
		self.assertEqual(registration.amount_paid, Decimal("200000"))
		self.assertEqual(registration.balance, Decimal("-20000"))

	def test_email_failure_does_not_undo_settlement(self):
		with mock.patch(
			"apps.payments.services.send_payment_confirmation_email",
			side_effect=OSError("smtp down"),
		):
			with self.captureOnCommitCallbacks(execute=True):
				payment, _ = settle_payment(
					registration_id=self.registration.pk,
					amount=Decimal("1000"),
					transaction_id="int-3",
				)
		self.assertTrue(Payment.objects.filter(pk=payment.pk).exists())


class SavePaymentAPITestCase(APITestCase):
	def setUp(self):
		self.owner = User.objects.create_user(email="owner@example.com")
		self.other = User.objects.create_user(email="other@example.com")
		self.staff = User.objects.create_user(email="staff@example.com", is_staff=True)
		self.registration = Registration.objects.create(user=self.owner)
		self.url = reverse("save-payment")
		self.payload = {
			"registrationId": self.registration.pk,
			"amount": "50000",
			"transactionId": "int-9",
			"paymentMethod": "mobile_money",
			"provider": "AIRTEL_UGANDA",
		}

	def test_owner_records_payment(self):
		self.client.force_authenticate(user=self.owner)
		response = self.client.post(self.url, self.payload, format="json")
		self.assertEqual(response.status_code, status.HTTP_200_OK)
		self.assertTrue(response.data["success"])
		self.assertEqual(Decimal(response.data["registration"]["amount_paid"]), Decimal("50000"))
		self.assertEqual(Decimal(response.data["registration"]["balance"]), Decimal("130000"))
		self.assertEqual(response.data["payment"]["transaction_id"], "int-9")

	def test_staff_records_payment(self):
		self.client.force_authenticate(user=self.staff)
		response = self.client.post(self.url, self.payload, format="json")
		self.assertEqual(response.status_code, status.HTTP_200_OK)
		self.assertEqual(Payment.objects.get().user, self.owner)

	def test_explicit_payer(self):
		self.client.force_authenticate(user=self.staff)
		response = self.client.post(self.url, {**self.payload, "userId": self.staff.pk}, format="json")
		self.assertEqual(response.status_code, status.HTTP_200_OK)
		self.assertEqual(response.data["payment"]["user"], self.staff.pk)

	def test_unknown_payer(self):
		self.client.force_authenticate(user=self.owner)
		response = self.client.post(self.url, {**self.payload, "userId": 999999}, format="json")
		self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
		self.assertFalse(Payment.objects.exists())

	def test_other_user_forbidden(self):
		self.client.force_authenticate(user=self.other)
		response = self.client.post(self.url, self.payload, format="json")
		self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
		self.assertEqual(response.data["error"], PaymentErrorCode.FORBIDDEN)
		self.assertFalse(Payment.objects.exists())

	def test_unknown_registration(self):
		self.client.force_authenticate(user=self.owner)
		response = self.client.post(self.url, {**self.payload, "registrationId": 999999}, format="json")
		self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
		self.assertEqual(response.data["error"], PaymentErrorCode.NOT_FOUND)

	def test_invalid_payload(self):
		self.client.force_authenticate(user=self.owner)
		response = self.client.post(self.url, {"registrationId": self.registration.pk}, format="json")
		self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
		self.assertEqual(response.data["error"], PaymentErrorCode.VALIDATION_ERROR)


class SendPaymentEmailAPITestCase(APITestCase):
	def setUp(self):
		self.client.force_authenticate(user=User.objects.create_user(email="payer@example.com"))
		self.url = reverse("send-payment-email")
		self.payload = {
			"email": "payer@example.com",
			"fullName": "Paul Payer",
			"transactionId": "int-1",
			"amountPaid": "180000",
			"balance": "0",
			"totalAmount": "180000",
			"paymentMethod": "Mobile Money",
		}

	def test_sends_email(self):
		response = self.client.post(self.url, self.payload, format="json")
		self.assertEqual(response.status_code, status.HTTP_200_OK)
		self.assertEqual(len(mail.outbox), 1)
		self.assertIn("UGX 180,000", mail.outbox[0].body)
		self.assertIn("fully paid", mail.outbox[0].body)

	def test_missing_fields(self):
		response = self.client.post(self.url, {"email": "payer@example.com"}, format="json")
		self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
		self.assertEqual(response.data["message"], "Missing required fields")

	@mock.patch("apps.payments.views.send_payment_confirmation_email", side_effect=OSError("smtp down"))
	def test_send_failure(self, _send):
		response = self.client.post(self.url, self.payload, format="json")
		self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
		self.assertEqual(response.data["message"], "Failed to send payment confirmation")


class PaymentStatusPollerTestCase(APITestCase):
	def test_stops_on_success(self):
		gateway = FakeGateway(["PENDING", "PENDING", "SUCCESS", "PENDING"])
		result = PaymentStatusPoller(gateway=gateway, interval=0).poll("int-1")
		self.assertEqual(result.status, "success")
		self.assertEqual(result.attempts, 3)
		self.assertEqual(gateway.calls, 3)
		self.assertTrue(result.is_terminal)
		self.assertEqual(result.data["amount"], 180000)

	def test_stops_on_failure(self):
		gateway = FakeGateway(["PENDING", "FAILED"])
		result = PaymentStatusPoller(gateway=gateway, interval=0).poll("int-1")
		self.assertEqual(result.status, "failed")
		self.assertEqual(gateway.calls, 2)

	def test_gateway_errors_do_not_stop_polling(self):
		gateway = FakeGateway(
			[GatewayError(PaymentErrorCode.STATUS_CHECK_FAILED, "timeout"), "SUCCESS"]
		)
		result = PaymentStatusPoller(gateway=gateway, interval=0).poll("int-1")
		self.assertEqual(result.status, "success")
		self.assertEqual(result.attempts, 2)

	def test_max_attempts(self):
		gateway = FakeGateway(["PENDING"] * 5)
		result = PaymentStatusPoller(gateway=gateway, interval=0, max_attempts=2).poll("int-1")
		self.assertEqual(result.status, "pending")
		self.assertEqual(result.attempts, 2)
		self.assertFalse(result.is_terminal)

	def test_stop_from_tick(self):
		gateway = FakeGateway(["PENDING"] * 5)
		poller = PaymentStatusPoller(gateway=gateway, interval=60)
		poller.on_tick = lambda attempt, result: poller.stop()
		result = poller.poll("int-1")
		self.assertTrue(poller.stopped)
		self.assertEqual(result.attempts, 1)
		self.assertEqual(result.status, "pending")

	def test_stopped_poller_makes_no_calls(self):
		gateway = FakeGateway([])
		poller = PaymentStatusPoller(gateway=gateway, interval=0)
		poller.stop()
		result = poller.poll("int-1")
		self.assertEqual(result.attempts, 0)
		self.assertEqual(gateway.calls, 0)


class PollPaymentCommandTestCase(APITestCase):
	def setUp(self):
		self.registration = Registration.objects.create(
			user=User.objects.create_user(email="payer@example.com")
		)

	@mock.patch("apps.payments.poller.get_gateway")
	def test_settles_on_success(self, get_gateway):
		get_gateway.return_value = FakeGateway(["PENDING", "SUCCESS"])
		out = StringIO()
		call_command("poll_payment", "int-1", registration=self.registration.pk, interval=0, stdout=out)

		self.registration.refresh_from_db()
		self.assertEqual(self.registration.amount_paid, Decimal("180000"))
		self.assertEqual(self.registration.payment_status, PaymentStatus.FULLY_PAID)
		self.assertEqual(Payment.objects.get().transaction_id, "int-1")
		self.assertIn("Recorded payment", out.getvalue())

	@mock.patch("apps.payments.poller.get_gateway")
	def test_failed_payment_is_not_settled(self, get_gateway):
		get_gateway.return_value = FakeGateway(["FAILED"])
		with self.assertRaises(CommandError):
			call_command("poll_payment", "int-1", registration=self.registration.pk, interval=0, stdout=StringIO())
		self.assertFalse(Payment.objects.exists())

	@mock.patch("apps.payments.poller.get_gateway")
	def test_unknown_registration_fails_before_polling(self, get_gateway):
		gateway = FakeGateway(["SUCCESS"])
		get_gateway.return_value = gateway
		with self.assertRaises(CommandError):
			call_command("poll_payment", "int-1", registration=999999, interval=0, stdout=StringIO())
		self.assertEqual(gateway.calls, 0)
		self.assertFalse(Payment.objects.exists())

	@mock.patch("apps.payments.poller.get_gateway")
	def test_registration_removed_while_polling(self, get_gateway):
		registration = self.registration

		class RemovingGateway(FakeGateway):
			def check_request_status(self, internal_reference):
				Registration.objects.filter(pk=registration.pk).delete()
				return super().check_request_status(internal_reference)

		get_gateway.return_value = RemovingGateway(["SUCCESS"])
		with self.assertRaises(CommandError):
			call_command("poll_payment", "int-1", registration=registration.pk, interval=0, stdout=StringIO())
		self.assertFalse(Payment.objects.exists())
