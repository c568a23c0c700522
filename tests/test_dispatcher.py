"""
Invoice payment dialog: state machine, amount validation and the three
checkout kinds (redirect, form post, SDK hand-off) against a fake billing API.
"""
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
import requests

from workdesk.payments.client import GatewayClient
from workdesk.payments.dispatcher import (
    CLOSED, GATEWAY_MODAL_OPEN, METHOD_SELECTION, PaymentDispatcher, parse_amount,
)
from workdesk.payments.errors import AmountValidationError, InvalidTransitionError, SdkLoadError
from workdesk.payments.gateways import GATEWAYS
from workdesk.payments.sdk_loader import SdkHandle, SdkLoader

ENABLED = ["bank", "mercadopago", "mollie", "skrill", "paystack", "razorpay", "authorizenet"]


def _response(status=200, body=None, json_error=False):
    response = MagicMock()
    response.status_code = status
    response.ok = status < 400
    if json_error:
        response.json.side_effect = ValueError("Expecting value")
    else:
        response.json.return_value = body
    return response


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def sdk_loader():
    loader = MagicMock(spec=SdkLoader)
    loader.wait.side_effect = lambda gateway_id, script_url, timeout=None: SdkHandle(gateway_id, script_url)
    return loader


@pytest.fixture
def dispatcher(session, sdk_loader):
    client = GatewayClient(base_url="https://billing.example.com", token="t", timeout=5, session=session)
    return PaymentDispatcher(
        invoice_token="tok123",
        remaining_amount=Decimal("100.00"),
        enabled_gateways=ENABLED,
        client=client,
        sdk_loader=sdk_loader,
        credentials={"paystack_public_key": "pk_test_1", "razorpay_key": "rzp_test_1"},
        currency="USD",
    )


def _posted_url(session):
    return session.post.call_args[0][0]


def _posted_json(session):
    return session.post.call_args[1]["json"]


# ═══════════════════════════════════════════════════════════════
# 1. AMOUNT VALIDATION
# ═══════════════════════════════════════════════════════════════
class TestParseAmount:

    @pytest.mark.parametrize("value", ["0", 0, "-5", "-0.01", "abc", None, "NaN"])
    def test_rejects_non_positive_or_garbage(self, value):
        with pytest.raises(AmountValidationError):
            parse_amount(value, Decimal("100.00"))

    def test_rejects_above_remaining(self):
        with pytest.raises(AmountValidationError):
            parse_amount("100.01", Decimal("100.00"))

    @pytest.mark.parametrize("value,expected", [("100", "100.00"), ("0.01", "0.01"), (49.5, "49.50")])
    def test_accepts_range(self, value, expected):
        assert parse_amount(value, Decimal("100.00")) == Decimal(expected)


# ═══════════════════════════════════════════════════════════════
# 2. STATE MACHINE
# ═══════════════════════════════════════════════════════════════
class TestStateMachine:

    def test_starts_closed_with_every_modal_hidden(self, dispatcher):
        assert dispatcher.state == CLOSED
        assert set(dispatcher.visibility) == {g.id for g in GATEWAYS}
        assert dispatcher.open_modals == []

    def test_open_prefills_remaining_amount(self, dispatcher):
        dispatcher.open()
        assert dispatcher.state == METHOD_SELECTION
        assert dispatcher.amount == Decimal("100.00")

    def test_open_twice_is_rejected(self, dispatcher):
        dispatcher.open()
        with pytest.raises(InvalidTransitionError):
            dispatcher.open()

    def test_select_requires_open_dialog(self, dispatcher):
        with pytest.raises(InvalidTransitionError):
            dispatcher.select_gateway("mollie")

    def test_selecting_second_gateway_closes_first(self, dispatcher):
        dispatcher.open()
        assert dispatcher.select_gateway("mollie", "20")
        assert dispatcher.open_modals == ["mollie"]

        assert dispatcher.select_gateway("skrill", "30")
        assert dispatcher.open_modals == ["skrill"]
        assert dispatcher.visibility["mollie"] is False
        assert dispatcher.state == GATEWAY_MODAL_OPEN
        assert dispatcher.active_gateway == "skrill"

    def test_at_most_one_modal_across_many_selections(self, dispatcher):
        dispatcher.open()
        for gateway_id in ENABLED * 2:
            dispatcher.select_gateway(gateway_id, "10")
            assert len(dispatcher.open_modals) <= 1

    def test_back_returns_to_method_selection(self, dispatcher):
        dispatcher.open().select_gateway("mollie")
        dispatcher.back()
        assert dispatcher.state == METHOD_SELECTION
        assert dispatcher.open_modals == []

    def test_back_from_method_selection_is_rejected(self, dispatcher):
        dispatcher.open()
        with pytest.raises(InvalidTransitionError):
            dispatcher.back()

    @pytest.mark.parametrize("action", ["close", "cancel"])
    def test_close_and_cancel_end_in_closed(self, dispatcher, action):
        dispatcher.open().select_gateway("mollie")
        getattr(dispatcher, action)()
        assert dispatcher.state == CLOSED
        assert dispatcher.open_modals == []
        dispatcher.open()
        assert dispatcher.state == METHOD_SELECTION

    def test_unknown_gateway_opens_nothing(self, dispatcher, session):
        dispatcher.open()
        assert dispatcher.select_gateway("bitpay") is False
        assert dispatcher.state == METHOD_SELECTION
        assert dispatcher.open_modals == []
        assert dispatcher.toasts.to_list()[-1]["type"] == "error"
        session.post.assert_not_called()

    def test_disabled_gateway_opens_nothing(self, dispatcher):
        dispatcher.open()
        assert dispatcher.select_gateway("paypal") is False
        assert dispatcher.open_modals == []

    def test_pay_without_open_modal_is_rejected(self, dispatcher):
        dispatcher.open()
        with pytest.raises(InvalidTransitionError):
            dispatcher.pay()


# ═══════════════════════════════════════════════════════════════
# 3. VALIDATION BLOCKS THE NETWORK
# ═══════════════════════════════════════════════════════════════
class TestValidationBlocksNetwork:

    @pytest.mark.parametrize("amount", ["0", "-10", "150", "100.01"])
    def test_bad_amount_never_calls_billing_api(self, dispatcher, session, amount):
        dispatcher.open()
        assert dispatcher.select_gateway("mercadopago", amount) is False
        assert dispatcher.open_modals == []
        with pytest.raises(InvalidTransitionError):
            dispatcher.pay()
        session.post.assert_not_called()
        assert dispatcher.actions.location is None

    def test_amount_above_remaining_toasts(self, dispatcher, session):
        dispatcher.open()
        dispatcher.select_gateway("mercadopago", "150")
        toasts = dispatcher.toasts.to_list()
        assert toasts == [{"type": "error", "message": "Amount cannot exceed the remaining balance of 100.00."}]
        session.post.assert_not_called()

    def test_missing_gateway_fields_block_submit(self, dispatcher, session):
        dispatcher.open().select_gateway("authorizenet", "50")
        assert dispatcher.pay(card_number="4111111111111111", expiry_month="12") is False
        session.post.assert_not_called()
        assert "expiry_year" in dispatcher.toasts.to_list()[-1]["message"]
        assert "cvv" in dispatcher.toasts.to_list()[-1]["message"]

    def test_double_submit_is_ignored(self, dispatcher, session):
        dispatcher.open().select_gateway("mercadopago", "50")
        dispatcher.loading = True
        assert dispatcher.pay() is False
        session.post.assert_not_called()


# ═══════════════════════════════════════════════════════════════
# 4. REDIRECT GATEWAYS
# ═══════════════════════════════════════════════════════════════
class TestRedirect:

    def test_success_sets_location_exactly_once(self, dispatcher, session):
        session.post.return_value = _response(200, {"success": True, "redirect_url": "https://pay.example/x"})
        dispatcher.open().select_gateway("mercadopago", "50")

        assert dispatcher.pay() is True

        assert session.post.call_count == 1
        assert _posted_url(session) == "https://billing.example.com/mercadopago/invoice-payment/tok123"
        assert _posted_json(session) == {"amount": 50.0, "invoice_token": "tok123"}
        navigations = [a for a in dispatcher.actions.to_list() if a["type"] == "navigate"]
        assert navigations == [{"type": "navigate", "url": "https://pay.example/x"}]
        assert dispatcher.actions.location == "https://pay.example/x"
        assert dispatcher.state == CLOSED

    def test_url_field_precedence(self, dispatcher, session):
        session.post.return_value = _response(200, {
            "success": True, "redirect_url": "https://r.example", "payment_url": "https://p.example",
        })
        dispatcher.open().select_gateway("mollie", "50")
        dispatcher.pay()
        assert dispatcher.actions.location == "https://p.example"

    def test_business_failure_toasts_server_error_and_stays(self, dispatcher, session):
        session.post.return_value = _response(200, {"success": False, "error": "Card declined by issuer"})
        dispatcher.open().select_gateway("mercadopago", "50")

        assert dispatcher.pay() is False

        assert dispatcher.toasts.to_list()[-1] == {"type": "error", "message": "Card declined by issuer"}
        assert dispatcher.actions.location is None
        assert dispatcher.actions.to_list() == []
        assert dispatcher.state == GATEWAY_MODAL_OPEN
        assert dispatcher.loading is False

    def test_business_failure_message_field(self, dispatcher, session):
        session.post.return_value = _response(422, {"message": "Invoice already settled"})
        dispatcher.open().select_gateway("mercadopago", "50")
        dispatcher.pay()
        assert dispatcher.toasts.to_list()[-1]["message"] == "Invoice already settled"
        assert dispatcher.actions.location is None

    def test_transport_failure(self, dispatcher, session):
        session.post.side_effect = requests.ConnectionError("connection refused")
        dispatcher.open().select_gateway("mercadopago", "50")
        assert dispatcher.pay() is False
        assert dispatcher.toasts.to_list()[-1]["message"] == "Payment service is unreachable. Please try again."
        assert dispatcher.actions.location is None

    def test_html_error_page(self, dispatcher, session):
        session.post.return_value = _response(500, json_error=True)
        dispatcher.open().select_gateway("mercadopago", "50")
        assert dispatcher.pay() is False
        assert dispatcher.toasts.to_list()[-1]["message"] == "Payment service error (500)."

    def test_non_json_success_is_malformed(self, dispatcher, session):
        session.post.return_value = _response(200, json_error=True)
        dispatcher.open().select_gateway("mercadopago", "50")
        assert dispatcher.pay() is False
        assert dispatcher.toasts.to_list()[-1]["message"] == "Unexpected response from payment service."

    def test_missing_url_is_malformed(self, dispatcher, session):
        session.post.return_value = _response(200, {"success": True})
        dispatcher.open().select_gateway("mercadopago", "50")
        assert dispatcher.pay() is False
        assert dispatcher.actions.location is None

    def test_bank_transfer_reloads_without_url(self, dispatcher, session):
        session.post.return_value = _response(200, {"success": True, "message": "Receipt uploaded"})
        dispatcher.open().select_gateway("bank", "25")

        assert dispatcher.pay(payment_receipt="receipt.pdf") is True

        assert dispatcher.actions.to_list() == [{"type": "reload"}]
        assert dispatcher.toasts.to_list()[-1] == {"type": "success", "message": "Receipt uploaded"}
        assert dispatcher.succeeded is True
        assert _posted_json(session)["payment_receipt"] == "receipt.pdf"


# ═══════════════════════════════════════════════════════════════
# 5. FORM POST GATEWAYS
# ═══════════════════════════════════════════════════════════════
class TestFormPost:

    def test_builds_hidden_form(self, dispatcher, session):
        session.post.return_value = _response(200, {
            "success": True,
            "payment_url": "https://pay.skrill.com",
            "payment_data": {"pay_to_email": "merchant@example.com", "amount": "40.00"},
        })
        dispatcher.open().select_gateway("skrill", "40")

        assert dispatcher.pay() is True

        assert dispatcher.actions.to_list() == [{
            "type": "submit_form",
            "action": "https://pay.skrill.com",
            "method": "POST",
            "fields": {"pay_to_email": "merchant@example.com", "amount": "40.00"},
        }]
        assert dispatcher.actions.location is None

    def test_missing_form_data_is_malformed(self, dispatcher, session):
        session.post.return_value = _response(200, {"success": True, "payment_data": {"a": "b"}})
        dispatcher.open().select_gateway("skrill", "40")
        assert dispatcher.pay() is False
        assert dispatcher.toasts.to_list()[-1]["message"] == "Payment service did not return checkout form data."


# ═══════════════════════════════════════════════════════════════
# 6. SDK GATEWAYS
# ═══════════════════════════════════════════════════════════════
class TestSdk:

    def test_selecting_sdk_gateway_starts_script_load(self, dispatcher, sdk_loader):
        dispatcher.open().select_gateway("paystack", "60")
        sdk_loader.load.assert_called_once_with("paystack", "https://js.paystack.co/v1/inline.js")

    def test_handoff_without_create_endpoint(self, dispatcher, session):
        dispatcher.open().select_gateway("paystack", "60")

        assert dispatcher.pay() is True

        session.post.assert_not_called()
        assert dispatcher.actions.to_list() == [{
            "type": "sdk_handoff",
            "gateway": "paystack",
            "script": "https://js.paystack.co/v1/inline.js",
            "options": {"amount": 60.0, "currency": "USD", "invoice_token": "tok123", "key": "pk_test_1"},
        }]
        assert dispatcher.state == GATEWAY_MODAL_OPEN

    def test_handoff_carries_created_order(self, dispatcher, session):
        session.post.return_value = _response(200, {"success": True, "order_id": "order_9"})
        dispatcher.open().select_gateway("razorpay", "60")

        assert dispatcher.pay() is True

        assert _posted_url(session) == "https://billing.example.com/razorpay/create-invoice-order"
        handoff = dispatcher.actions.to_list()[-1]
        assert handoff["options"]["order_id"] == "order_9"
        assert handoff["options"]["key"] == "rzp_test_1"

    def test_script_failure_toasts(self, dispatcher, sdk_loader):
        sdk_loader.wait.side_effect = SdkLoadError("Could not load the paystack checkout.")
        dispatcher.open().select_gateway("paystack", "60")

        assert dispatcher.pay() is False

        assert dispatcher.toasts.to_list()[-1] == {"type": "error", "message": "Could not load the paystack checkout."}
        assert dispatcher.actions.to_list() == []

    def test_confirm_reports_charge(self, dispatcher, session):
        session.post.return_value = _response(200, {"success": True, "message": "Payment successful"})
        dispatcher.open().select_gateway("paystack", "60")
        dispatcher.pay()

        assert dispatcher.confirm("ref_123") is True

        assert _posted_url(session) == "https://billing.example.com/paystack/invoice-payment/tok123"
        assert _posted_json(session) == {
            "amount": 60.0, "invoice_token": "tok123", "payment_method": "paystack", "payment_id": "ref_123",
        }
        assert dispatcher.toasts.to_list()[-1] == {"type": "success", "message": "Payment successful"}
        assert dispatcher.succeeded is True
        assert dispatcher.state == CLOSED

    def test_confirm_failure_keeps_modal(self, dispatcher, session):
        session.post.return_value = _response(200, {"success": False, "message": "Verification failed"})
        dispatcher.open().select_gateway("paystack", "60")
        assert dispatcher.confirm("ref_123") is False
        assert dispatcher.state == GATEWAY_MODAL_OPEN
        assert dispatcher.toasts.to_list()[-1]["message"] == "Verification failed"

    def test_confirm_needs_reference(self, dispatcher, session):
        dispatcher.open().select_gateway("paystack", "60")
        assert dispatcher.confirm("") is False
        session.post.assert_not_called()

    def test_confirm_only_for_sdk_gateways(self, dispatcher):
        dispatcher.open().select_gateway("mollie", "60")
        with pytest.raises(InvalidTransitionError):
            dispatcher.confirm("ref_123")


class TestSnapshot:

    def test_to_dict(self, dispatcher):
        dispatcher.open().select_gateway("mollie", "12.5")
        assert dispatcher.to_dict() == {
            "state": GATEWAY_MODAL_OPEN,
            "gateway": "mollie",
            "amount": 12.5,
            "remaining_amount": 100.0,
            "open_modals": ["mollie"],
            "succeeded": False,
            "toasts": [],
            "actions": [],
        }
