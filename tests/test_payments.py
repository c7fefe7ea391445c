"""Tests for checkout creation and payment verification."""

import pytest
import stripe

from src.schemas.museum_schema import PaymentStatus
from src.tools.payments import (
    AMOUNT_TOO_LOW_MESSAGE,
    GENERIC_PAYMENT_MESSAGE,
    MISSING_DETAILS_MESSAGE,
    CheckoutService,
    MuseumNotFoundError,
    PaymentError,
    StripeGateway,
)
from tests.conftest import StubGateway

PAYLOAD = {"museumId": "m-kempegowda", "date": "2099-01-01", "ticketCount": 2, "amount": 150}


@pytest.fixture
def gateway():
    return StubGateway()


@pytest.fixture
def checkout(catalog, bookings, gateway, notifier):
    return CheckoutService(catalog, bookings, gateway, notifier)


class TestStartCheckout:
    def test_creates_pending_booking_and_session(self, checkout, bookings, gateway):
        result = checkout.start_checkout("user-1", PAYLOAD)

        assert result.checkout_url == "https://checkout.example/cs_test_1"
        assert result.booking_id.startswith("BK-")
        booking = bookings.get_by_booking_id(result.booking_id)
        assert booking.payment_status == PaymentStatus.PENDING
        assert booking.checkout_session_id == result.session_id
        assert booking.amount == 150
        assert booking.museum_name == "Kempegowda Museum"

        [call] = gateway.created
        assert call["amount_minor"] == 15000
        assert call["currency"] == "inr"
        assert call["client_reference_id"] == result.booking_id
        assert call["metadata"]["userId"] == "user-1"
        assert "booking_id=" + result.booking_id in call["success_url"]
        assert call["cancel_url"].endswith("/booking-cancelled")

    def test_amount_recomputed_from_catalog(self, checkout, bookings):
        result = checkout.start_checkout("user-1", dict(PAYLOAD, amount=1))
        assert bookings.get_by_booking_id(result.booking_id).amount == 150

    @pytest.mark.parametrize("missing", ["museumId", "date", "ticketCount"])
    def test_missing_details(self, checkout, missing):
        payload = {k: v for k, v in PAYLOAD.items() if k != missing}
        with pytest.raises(PaymentError) as exc:
            checkout.start_checkout("user-1", payload)
        assert exc.value.user_message == MISSING_DETAILS_MESSAGE

    def test_requires_user(self, checkout):
        with pytest.raises(PaymentError):
            checkout.start_checkout("", PAYLOAD)

    def test_malformed_date(self, checkout):
        with pytest.raises(PaymentError) as exc:
            checkout.start_checkout("user-1", dict(PAYLOAD, date="next week"))
        assert exc.value.user_message == MISSING_DETAILS_MESSAGE

    def test_unknown_museum(self, checkout):
        with pytest.raises(MuseumNotFoundError):
            checkout.start_checkout("user-1", dict(PAYLOAD, museumId="m-nowhere"))

    def test_below_minimum_amount(self, checkout, gateway):
        with pytest.raises(PaymentError) as exc:
            checkout.start_checkout("user-1", dict(PAYLOAD, museumId="m-government", ticketCount=1))
        assert exc.value.user_message == AMOUNT_TOO_LOW_MESSAGE
        assert gateway.created == []


class TestProcessorErrors:
    def test_minimum_amount_error_is_masked(self, catalog, bookings, notifier):
        error = stripe.InvalidRequestError(
            "Amount must convert to at least 50 cents.", param="amount"
        )
        checkout = CheckoutService(catalog, bookings, StubGateway(error=error), notifier)
        with pytest.raises(PaymentError) as exc:
            checkout.start_checkout("user-1", PAYLOAD)
        assert exc.value.user_message == AMOUNT_TOO_LOW_MESSAGE
        assert "cents" not in exc.value.user_message

    def test_other_processor_error_is_generic(self, catalog, bookings, notifier):
        error = stripe.APIConnectionError("Network unreachable")
        checkout = CheckoutService(catalog, bookings, StubGateway(error=error), notifier)
        with pytest.raises(PaymentError) as exc:
            checkout.start_checkout("user-1", PAYLOAD)
        assert exc.value.user_message == GENERIC_PAYMENT_MESSAGE

    def test_failed_checkout_marks_booking_failed(self, catalog, bookings, notifier):
        error = stripe.APIConnectionError("Network unreachable")
        checkout = CheckoutService(catalog, bookings, StubGateway(error=error), notifier)
        with pytest.raises(PaymentError):
            checkout.start_checkout("user-1", PAYLOAD)
        [booking] = bookings.list_for_user("user-1")
        assert booking.payment_status == PaymentStatus.FAILED

    def test_unexpected_gateway_error_marks_booking_failed(self, catalog, bookings, notifier):
        checkout = CheckoutService(
            catalog, bookings, StubGateway(error=ConnectionResetError("socket closed")), notifier
        )
        with pytest.raises(PaymentError) as exc:
            checkout.start_checkout("user-1", PAYLOAD)
        assert exc.value.user_message == GENERIC_PAYMENT_MESSAGE
        [booking] = bookings.list_for_user("user-1")
        assert booking.payment_status == PaymentStatus.FAILED

    def test_stripe_gateway_without_key(self, catalog, bookings, notifier):
        checkout = CheckoutService(catalog, bookings, StripeGateway(api_key=""), notifier)
        with pytest.raises(PaymentError) as exc:
            checkout.start_checkout("user-1", PAYLOAD)
        assert exc.value.user_message == GENERIC_PAYMENT_MESSAGE


class TestVerifyPayment:
    def test_marks_paid_and_notifies(self, checkout, notifier):
        result = checkout.start_checkout("user-1", PAYLOAD)
        booking = checkout.verify_payment(result.session_id, email="visitor@example.com")

        assert booking.payment_status == PaymentStatus.PAID
        assert booking.pdf_url == f"/api/tickets/{result.booking_id}"
        [sent] = notifier.sent
        assert sent.kind == "booking"
        assert sent.recipient == "visitor@example.com"

    def test_idempotent(self, checkout, notifier):
        result = checkout.start_checkout("user-1", PAYLOAD)
        checkout.verify_payment(result.session_id, email="visitor@example.com")
        again = checkout.verify_payment(result.session_id, email="visitor@example.com")
        assert again.payment_status == PaymentStatus.PAID
        assert len(notifier.sent) == 1

    def test_unpaid_session(self, catalog, bookings, notifier):
        checkout = CheckoutService(catalog, bookings, StubGateway(payment_status="unpaid"), notifier)
        result = checkout.start_checkout("user-1", PAYLOAD)
        with pytest.raises(PaymentError, match="Payment not completed"):
            checkout.verify_payment(result.session_id)
        assert bookings.get_by_booking_id(result.booking_id).payment_status == PaymentStatus.PENDING

    def test_paid_booking_is_downloadable(self, checkout, bookings):
        result = checkout.start_checkout("user-1", PAYLOAD)
        checkout.verify_payment(result.session_id)
        assert bookings.latest_downloadable("user-1").booking_id == result.booking_id
