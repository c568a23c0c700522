"""
Public invoice payment endpoints and the signed gateway webhook.
"""
import hashlib
import hmac
import json
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest
import requests

from workdesk.database.models.invoice import Invoice
from workdesk.services.payment_service import PaymentService

PAYMENT_SETTINGS = {
    "is_mollie_enabled": "1",
    "is_paystack_enabled": "1",
    "mollie_api_key": "live_secret",
    "paystack_public_key": "pk_live_1",
    "paystack_secret_key": "sk_live_1",
    "currency": "EUR",
}


def _invoice(**overrides):
    data = dict(id="inv-1", invoice_number="INV-0001", total_amount="100.00", paid_amount="0.00",
                status="sent", payment_token="tok123", created_by="company-1", client_id="client-1")
    data.update(overrides)
    return Invoice(**data)


def _response(status=200, body=None):
    response = MagicMock()
    response.status_code = status
    response.ok = status < 400
    response.json.return_value = body
    return response


def _sign(body: bytes, secret="test-webhook-secret"):
    return hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


@pytest.fixture
def billing_session(app):
    session = MagicMock(spec=requests.Session)
    app.extensions["gateway_client"].session = session
    return session


@pytest.fixture
def payment_settings():
    with patch("workdesk.services.payment_service.PaymentSetting.get_all", return_value=dict(PAYMENT_SETTINGS)):
        yield


# ═══════════════════════════════════════════════════════════════
# 1. PAYMENT PAGE
# ═══════════════════════════════════════════════════════════════
class TestPaymentPage:

    def test_exposes_only_public_credentials(self, client, payment_settings):
        with patch("workdesk.routes.invoice_payments.Invoice.find_by_token", return_value=_invoice()), \
                patch("workdesk.routes.invoice_payments.User.find_by_id", return_value=None), \
                patch("workdesk.routes.invoice_payments.Setting.get_all", return_value={"company_name": "Acme"}):
            response = client.get("/api/pay/tok123")

        assert response.status_code == 200
        results = response.get_json()["data"]["results"]
        assert [g["id"] for g in results["enabledGateways"]] == ["paystack", "mollie"]
        assert results["credentials"] == {"paystack_public_key": "pk_live_1", "currency": "EUR"}
        assert results["remainingAmount"] == 100.0
        assert results["company"]["name"] == "Acme"

    def test_unknown_token(self, client):
        with patch("workdesk.routes.invoice_payments.Invoice.find_by_token", return_value=None):
            response = client.get("/api/pay/nope")
        assert response.status_code == 404

    def test_draft_invoice_is_not_payable(self, client):
        with patch("workdesk.routes.invoice_payments.Invoice.find_by_token", return_value=_invoice(status="draft")):
            response = client.get("/api/pay/tok123")
        assert response.status_code == 404


# ═══════════════════════════════════════════════════════════════
# 2. CHECKOUT
# ═══════════════════════════════════════════════════════════════
class TestCheckout:

    def _post(self, client, body, invoice=None):
        with patch("workdesk.routes.invoice_payments.Invoice.find_by_token", return_value=invoice or _invoice()):
            return client.post("/api/pay/tok123/checkout", json=body)

    def test_redirect_checkout(self, client, billing_session, payment_settings):
        billing_session.post.return_value = _response(200, {"success": True, "payment_url": "https://mollie.example/p/1"})

        response = self._post(client, {"gateway": "mollie", "amount": "50.00"})

        assert response.status_code == 200
        results = response.get_json()["data"]["results"]
        assert results["actions"] == [{"type": "navigate", "url": "https://mollie.example/p/1"}]
        assert results["state"] == "closed"
        assert billing_session.post.call_count == 1
        assert billing_session.post.call_args[1]["json"] == {"amount": 50.0, "invoice_token": "tok123"}

    def test_amount_over_balance_sends_nothing(self, client, billing_session, payment_settings):
        response = self._post(client, {"gateway": "mollie", "amount": "150"})

        assert response.status_code == 422
        body = response.get_json()
        assert body["error"]["code"] == "payment_failed"
        assert body["error"]["message"] == "Amount cannot exceed the remaining balance of 100.00."
        assert body["error"]["details"]["actions"] == []
        billing_session.post.assert_not_called()

    def test_business_failure_is_toasted(self, client, billing_session, payment_settings):
        billing_session.post.return_value = _response(200, {"success": False, "error": "Mollie is down"})

        response = self._post(client, {"gateway": "mollie", "amount": "10"})

        assert response.status_code == 422
        body = response.get_json()
        assert body["error"]["message"] == "Mollie is down"
        assert body["error"]["details"]["toasts"] == [{"type": "error", "message": "Mollie is down"}]
        assert body["error"]["details"]["actions"] == []

    def test_disabled_gateway(self, client, billing_session, payment_settings):
        response = self._post(client, {"gateway": "stripe"})
        assert response.status_code == 422
        assert response.get_json()["error"]["message"] == "Selected payment method is not available."

    def test_default_amount_is_remaining_balance(self, client, billing_session, payment_settings):
        billing_session.post.return_value = _response(200, {"success": True, "payment_url": "https://m.example"})
        self._post(client, {"gateway": "mollie"}, invoice=_invoice(paid_amount="60.00"))
        assert billing_session.post.call_args[1]["json"]["amount"] == 40.0

    def test_sdk_checkout_hands_off(self, client, app, payment_settings):
        loader = MagicMock()
        loader.wait.return_value = MagicMock(script_url="https://js.paystack.co/v1/inline.js")
        app.extensions["sdk_loader"] = loader

        response = self._post(client, {"gateway": "paystack", "amount": "20"})

        assert response.status_code == 200
        handoff = response.get_json()["data"]["results"]["actions"][0]
        assert handoff["type"] == "sdk_handoff"
        assert handoff["options"]["key"] == "pk_live_1"
        assert "sk_live_1" not in json.dumps(response.get_json())

    def test_paid_invoice_conflict(self, client, billing_session, payment_settings):
        response = self._post(client, {"gateway": "mollie"}, invoice=_invoice(paid_amount="100.00", status="paid"))
        assert response.status_code == 409

    def test_missing_gateway_is_400(self, client):
        response = client.post("/api/pay/tok123/checkout", json={"amount": "10"})
        assert response.status_code == 400
        assert "gateway" in response.get_json()["error"]["details"]


# ═══════════════════════════════════════════════════════════════
# 3. WEBHOOK
# ═══════════════════════════════════════════════════════════════
class TestWebhook:

    BODY = {"invoice_token": "tok123", "transaction_id": "tr_1", "amount": 40.0, "status": "success"}

    def _post(self, client, body, gateway="mollie", signature=None):
        raw = json.dumps(body).encode()
        headers = {"Content-Type": "application/json"}
        if signature is not False:
            headers["X-Signature"] = signature or _sign(raw)
        return client.post(f"/api/webhooks/payments/{gateway}", data=raw, headers=headers)

    def test_missing_signature(self, client):
        response = self._post(client, self.BODY, signature=False)
        assert response.status_code == 401

    def test_bad_signature(self, client):
        response = self._post(client, self.BODY, signature=_sign(b"other body"))
        assert response.status_code == 401
        assert response.get_json()["error"]["code"] == "unauthorized"

    def test_unknown_gateway(self, client):
        assert self._post(client, self.BODY, gateway="bitpay").status_code == 404

    def test_invalid_payload(self, client):
        response = self._post(client, {"invoice_token": "tok123", "amount": 0, "status": "success"})
        assert response.status_code == 400
        details = response.get_json()["error"]["details"]
        assert "transaction_id" in details
        assert "amount" in details

    def test_records_payment(self, client):
        payment = MagicMock(id="pay-1", amount=Decimal("40.00"))
        with patch("workdesk.routes.webhooks.Invoice.find_by_token", return_value=_invoice()), \
                patch.object(PaymentService, "record_gateway_payment", return_value=(payment, True)) as record:
            response = self._post(client, self.BODY)

        assert response.status_code == 201
        assert response.get_json()["data"]["results"]["recorded"] is True
        invoice, gateway, transaction_id, amount = record.call_args[0]
        assert (gateway, transaction_id, amount) == ("mollie", "tr_1", Decimal("40.00"))

    def test_duplicate_is_ignored(self, client):
        payment = MagicMock(id="pay-1", amount=Decimal("40.00"))
        with patch("workdesk.routes.webhooks.Invoice.find_by_token", return_value=_invoice()), \
                patch.object(PaymentService, "record_gateway_payment", return_value=(payment, False)):
            response = self._post(client, self.BODY)

        assert response.status_code == 200
        assert response.get_json()["message"] == "Duplicate webhook ignored"

    def test_failed_charge_is_acknowledged_only(self, client):
        with patch("workdesk.routes.webhooks.Invoice.find_by_token", return_value=_invoice()), \
                patch.object(PaymentService, "record_gateway_payment") as record:
            response = self._post(client, dict(self.BODY, status="failed"))

        assert response.status_code == 200
        assert response.get_json()["data"]["results"] == {"status": "failed", "recorded": False}
        record.assert_not_called()


# ═══════════════════════════════════════════════════════════════
# 4. PAYMENT SERVICE
# ═══════════════════════════════════════════════════════════════
class TestPaymentService:

    def test_signature_check(self, app):
        with app.app_context():
            assert PaymentService.verify_webhook_signature(b"{}", _sign(b"{}")) is True
            assert PaymentService.verify_webhook_signature(b"{}", "0" * 64) is False
            assert PaymentService.verify_webhook_signature(b"{}", "") is False
            app.config["PAYMENT_WEBHOOK_SECRET"] = None
            assert PaymentService.verify_webhook_signature(b"{}", _sign(b"{}")) is False

    def test_duplicate_transaction_changes_nothing(self, app):
        existing = MagicMock(id="pay-1")
        with app.app_context(), \
                patch("workdesk.services.payment_service.Payment") as Payment, \
                patch("workdesk.services.payment_service.Invoice") as InvoiceModel:
            Payment.find_by_transaction_id.return_value = existing
            payment, created = PaymentService.record_gateway_payment(_invoice(), "mollie", "tr_1", Decimal("40"))

        assert (payment, created) == (existing, False)
        Payment.record_payment.assert_not_called()
        InvoiceModel.apply_payment_totals.assert_not_called()

    def test_new_transaction_updates_invoice_and_notifies(self, app):
        stored = MagicMock(id="pay-1")
        with app.app_context(), \
                patch("workdesk.services.payment_service.Payment") as Payment, \
                patch("workdesk.services.payment_service.Invoice") as InvoiceModel, \
                patch("workdesk.services.payment_service.ActivityLog") as ActivityLog, \
                patch("workdesk.services.payment_service.User") as UserModel, \
                patch("workdesk.services.email_service.EmailService.send_payment_received_email") as send_email:
            Payment.find_by_transaction_id.side_effect = [None, stored]
            Payment.record_payment.return_value = "pay-1"
            Payment.get_total_paid.return_value = Decimal("40.00")
            InvoiceModel.apply_payment_totals.return_value = "partial_paid"
            InvoiceModel.find_by_id.return_value = None

            payment, created = PaymentService.record_gateway_payment(_invoice(), "mollie", "tr_1", Decimal("40"))

        assert (payment, created) == (stored, True)
        recorded = Payment.record_payment.call_args[0][0]
        assert recorded["amount"] == Decimal("40.00")
        assert recorded["payment_method"] == "mollie"
        assert recorded["transaction_id"] == "tr_1"
        InvoiceModel.apply_payment_totals.assert_called_once_with("inv-1", Decimal("40.00"))
        log_kwargs = ActivityLog.create_log.call_args[1]
        assert log_kwargs["action"] == "payment_received"
        assert log_kwargs["details"]["new_status"] == "partial_paid"
        assert send_email.call_args[0][3] == "Mollie"

    def test_email_failure_does_not_undo_payment(self, app):
        with app.app_context(), \
                patch("workdesk.services.payment_service.Payment") as Payment, \
                patch("workdesk.services.payment_service.Invoice"), \
                patch("workdesk.services.payment_service.ActivityLog"), \
                patch("workdesk.services.payment_service.User"), \
                patch("workdesk.services.email_service.EmailService.send_payment_received_email",
                      side_effect=RuntimeError("smtp down")):
            Payment.find_by_transaction_id.side_effect = [None, MagicMock(id="pay-1")]
            payment, created = PaymentService.record_gateway_payment(_invoice(), "mollie", "tr_2", Decimal("5"))
        assert created is True
