"""
Hosted checkout for chat bookings.

Turns the ``TRIGGER_PAYMENT`` payload produced by the booking flow into a
pending booking plus a Stripe Checkout session, and settles the booking
once the processor reports the session as paid. Processor wording never
reaches the visitor: every failure is re-raised as a ``PaymentError``
carrying one of two fixed messages.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional, Protocol

import stripe

from src.config import settings
from src.schemas.museum_schema import MuseumBooking, PaymentStatus
from src.tools.booking import BookingStore
from src.tools.catalog import MuseumCatalog
from src.tools.identifiers import generate_booking_id, generate_unique_id
from src.tools.notifications import Notifier

logger = logging.getLogger(__name__)

AMOUNT_TOO_LOW_MESSAGE = (
    "Unable to process payment for this amount. "
    "Please try booking more tickets or contact support."
)
GENERIC_PAYMENT_MESSAGE = "Error creating payment session. Please try again."
MISSING_DETAILS_MESSAGE = "Missing required booking information."

MINOR_UNITS_PER_MAJOR = 100


class PaymentError(Exception):
    """Checkout failure with a message that is safe to show the visitor."""

    def __init__(self, user_message: str) -> None:
        super().__init__(user_message)
        self.user_message = user_message


class MuseumNotFoundError(LookupError):
    """The payload references a museum that is not in the catalog."""


@dataclass(frozen=True)
class GatewaySession:
    id: str
    url: str
    payment_status: str = "unpaid"
    metadata: Optional[dict[str, str]] = None


@dataclass(frozen=True)
class CheckoutResult:
    checkout_url: str
    session_id: str
    booking_id: str


class PaymentGateway(Protocol):
    def create_session(
        self,
        *,
        amount_minor: int,
        currency: str,
        product_name: str,
        description: str,
        success_url: str,
        cancel_url: str,
        client_reference_id: str,
        metadata: dict[str, str],
    ) -> GatewaySession: ...

    def retrieve_session(self, session_id: str) -> GatewaySession: ...


class StripeGateway:
    """Stripe Checkout sessions, one line item per booking."""

    def __init__(self, api_key: Optional[str] = None) -> None:
        self._api_key = api_key if api_key is not None else settings.payment.stripe_secret_key

    def create_session(
        self,
        *,
        amount_minor: int,
        currency: str,
        product_name: str,
        description: str,
        success_url: str,
        cancel_url: str,
        client_reference_id: str,
        metadata: dict[str, str],
    ) -> GatewaySession:
        if not self._api_key:
            raise PaymentError(GENERIC_PAYMENT_MESSAGE)
        session = stripe.checkout.Session.create(
            api_key=self._api_key,
            payment_method_types=["card"],
            line_items=[
                {
                    "price_data": {
                        "currency": currency,
                        "product_data": {"name": product_name, "description": description},
                        "unit_amount": amount_minor,
                    },
                    "quantity": 1,
                }
            ],
            mode="payment",
            success_url=success_url,
            cancel_url=cancel_url,
            client_reference_id=client_reference_id,
            metadata=metadata,
        )
        return GatewaySession(id=session.id, url=session.url)

    def retrieve_session(self, session_id: str) -> GatewaySession:
        if not self._api_key:
            raise PaymentError(GENERIC_PAYMENT_MESSAGE)
        session = stripe.checkout.Session.retrieve(session_id, api_key=self._api_key)
        return GatewaySession(
            id=session.id,
            url=session.url or "",
            payment_status=session.payment_status,
            metadata=dict(session.metadata or {}),
        )


def _is_minimum_amount_error(error: stripe.StripeError) -> bool:
    return isinstance(error, stripe.InvalidRequestError) and "at least" in str(error).lower()


class CheckoutService:
    """Creates pending bookings and their checkout sessions."""

    def __init__(
        self,
        catalog: MuseumCatalog,
        bookings: BookingStore,
        gateway: PaymentGateway,
        notifier: Notifier,
    ) -> None:
        self._catalog = catalog
        self._bookings = bookings
        self._gateway = gateway
        self._notifier = notifier

    def start_checkout(self, user_id: str, payload: dict[str, Any]) -> CheckoutResult:
        """
        Start payment for a confirmed chat booking.

        Args:
            user_id: The authenticated visitor paying for the tickets.
            payload: ``{museumId, date, ticketCount, amount}`` from the
                ``TRIGGER_PAYMENT`` reply.

        Raises:
            PaymentError: missing details, amount below the processor
                minimum, or any processor failure.
            MuseumNotFoundError: the museum id is unknown.
        """
        museum_id = payload.get("museumId")
        raw_date = payload.get("date")
        ticket_count = payload.get("ticketCount")
        if not user_id or not museum_id or not raw_date or not ticket_count:
            raise PaymentError(MISSING_DETAILS_MESSAGE)

        museum = self._catalog.get(museum_id)
        if museum is None:
            raise MuseumNotFoundError(f"Museum {museum_id} not found")

        try:
            visit_date = raw_date if isinstance(raw_date, date) else date.fromisoformat(str(raw_date)[:10])
        except ValueError:
            raise PaymentError(MISSING_DETAILS_MESSAGE) from None
        amount = ticket_count * museum.price
        if payload.get("amount") is not None and payload["amount"] != amount:
            logger.warning(
                "Payload amount %s differs from catalog total %s for %s",
                payload["amount"], amount, museum.name,
            )

        if amount < settings.payment.minimum_amount:
            logger.info("Checkout refused: amount %s below minimum", amount)
            raise PaymentError(AMOUNT_TOO_LOW_MESSAGE)

        booking_id = generate_unique_id(generate_booking_id, self._bookings.exists_booking_id)
        booking = self._bookings.create(MuseumBooking(
            booking_id=booking_id,
            user_id=user_id,
            museum_id=museum.id,
            museum_name=museum.name,
            visit_date=visit_date,
            ticket_count=ticket_count,
            amount=amount,
        ))

        client_url = settings.payment.client_url.rstrip("/")
        try:
            session = self._gateway.create_session(
                amount_minor=round(amount * MINOR_UNITS_PER_MAJOR),
                currency=settings.payment.currency.lower(),
                product_name=f"{museum.name} - Museum Tickets",
                description=f"{ticket_count} ticket(s) for {visit_date.strftime('%d/%m/%Y')}",
                success_url=(
                    f"{client_url}/booking-success"
                    f"?session_id={{CHECKOUT_SESSION_ID}}&booking_id={booking_id}"
                ),
                cancel_url=f"{client_url}/booking-cancelled",
                client_reference_id=booking_id,
                metadata={"bookingId": booking_id, "userId": user_id, "museumId": museum.id},
            )
        except stripe.StripeError as e:
            self._mark_failed(booking)
            logger.error("Stripe error creating checkout for %s: %s", booking_id, e)
            if _is_minimum_amount_error(e):
                raise PaymentError(AMOUNT_TOO_LOW_MESSAGE) from e
            raise PaymentError(GENERIC_PAYMENT_MESSAGE) from e
        except PaymentError:
            self._mark_failed(booking)
            logger.error("Payment processor not configured; checkout for %s aborted", booking_id)
            raise
        except Exception as e:
            self._mark_failed(booking)
            logger.exception("Gateway failure creating checkout for %s", booking_id)
            raise PaymentError(GENERIC_PAYMENT_MESSAGE) from e

        booking.checkout_session_id = session.id
        self._bookings.save(booking)
        logger.info("Checkout session %s created for booking %s", session.id, booking_id)
        return CheckoutResult(checkout_url=session.url, session_id=session.id, booking_id=booking_id)

    def verify_payment(self, session_id: str, email: Optional[str] = None) -> MuseumBooking:
        """
        Settle a booking once its checkout session is paid.

        Idempotent: a booking already marked paid is returned unchanged and
        no second confirmation is sent.

        Raises:
            PaymentError: processor failure or session not paid.
            LookupError: no booking matches the session.
        """
        try:
            session = self._gateway.retrieve_session(session_id)
        except stripe.StripeError as e:
            logger.error("Stripe error retrieving session %s: %s", session_id, e)
            raise PaymentError(GENERIC_PAYMENT_MESSAGE) from e

        if session.payment_status != "paid":
            raise PaymentError("Payment not completed.")

        booking_id = (session.metadata or {}).get("bookingId")
        booking = (
            self._bookings.get_by_booking_id(booking_id) if booking_id
            else self._bookings.get_by_checkout_session(session_id)
        )
        if booking is None:
            raise LookupError(f"No booking for checkout session {session_id}")

        if booking.payment_status == PaymentStatus.PAID:
            return booking

        booking.payment_status = PaymentStatus.PAID
        booking.checkout_session_id = session_id
        booking.pdf_url = f"/api/tickets/{booking.booking_id}"
        saved = self._bookings.save(booking)
        logger.info("Booking %s marked paid", booking.booking_id)

        if email:
            self._notifier.send_booking_confirmation(email, saved)
        return saved

    def _mark_failed(self, booking: MuseumBooking) -> None:
        booking.payment_status = PaymentStatus.FAILED
        self._bookings.save(booking)
