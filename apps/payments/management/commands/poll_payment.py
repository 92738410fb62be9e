from decimal import Decimal, InvalidOperation

from django.core.management.base import BaseCommand, CommandError

from apps.payments.gateway import STATUS_SUCCESS
from apps.payments.poller import PaymentStatusPoller
from apps.payments.services import settle_payment
from apps.registrations.models import Registration


class Command(BaseCommand):
    help = (
        "Poll the mobile-money gateway for a payment until it succeeds or fails; "
        "on success record it against the registration."
    )

    def add_arguments(self, parser):
        parser.add_argument("internal_reference")
        parser.add_argument("--registration", type=int, required=True, help="Registration id to settle against.")
        parser.add_argument("--amount", help="Amount to settle; defaults to the amount reported by the gateway.")
        parser.add_argument("--interval", type=float, default=None, help="Seconds between status checks.")
        parser.add_argument("--max-attempts", type=int, default=None, help="Stop after this many checks.")

    def handle(self, *args, **options):
        reference = options["internal_reference"]
        registration_id = options["registration"]
        if not Registration.objects.filter(pk=registration_id).exists():
            raise CommandError(f"Registration {registration_id} does not exist")

        poller = PaymentStatusPoller(
            interval=options["interval"],
            max_attempts=options["max_attempts"],
            on_tick=lambda attempt, result: self.stdout.write(
                f"[{attempt}] {result['status'] if result else 'error'}"
            ),
        )

        try:
            result = poller.poll(reference)
        except KeyboardInterrupt:
            poller.stop()
            raise CommandError(f"Polling for {reference} interrupted")

        if result.status != STATUS_SUCCESS:
            raise CommandError(f"Payment {reference} ended as '{result.status}': {result.message or ''}")

        raw_amount = options["amount"] or result.data.get("amount")
        try:
            amount = Decimal(str(raw_amount))
        except (InvalidOperation, TypeError):
            raise CommandError(f"Cannot determine payment amount for {reference}")

        transaction_id = result.data.get("internalReference") or reference
        try:
            payment, registration = settle_payment(
                registration_id=registration_id,
                amount=amount,
                transaction_id=transaction_id,
                provider=result.data.get("provider") or "",
            )
        except Registration.DoesNotExist:
            raise CommandError(
                f"Payment {transaction_id} succeeded but registration {registration_id} no longer exists; "
                "record it manually"
            )
        self.stdout.write(
            self.style.SUCCESS(
                f"Recorded payment {payment.pk}: paid={registration.amount_paid} "
                f"balance={registration.balance} status={registration.payment_status}"
            )
        )
