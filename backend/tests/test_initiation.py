import re
import uuid

import pytest

from mamata.config import EsewaConfig
from mamata.exceptions import ClientInputError, ConfigurationError
from mamata.main import app
from mamata.services.initiation_service import (
    PaymentInitiationService, get_initiation_service, parse_payment_request,
)
from mamata.utils.hashing import sign_message

INITIATE = "/api/initiate-payment"
TEST_SECRET = "8gBm/:&EnhH.1/q"


def _signed_message(form_data):
    return (
        f"total_amount={form_data['total_amount']},"
        f"transaction_uuid={form_data['transaction_uuid']},"
        f"product_code={form_data['product_code']}"
    )


class TestInitiateEndpoint:
    def test_esewa_request_returns_signed_form(self, client, order_body):
        resp = client.post(INITIATE, json=order_body)
        assert resp.status_code == 200
        data = resp.json()
        assert data["success"] is True
        assert data["paymentUrl"] == "https://rc-epay.esewa.com.np/api/epay/main/v2/form"

        form = data["formData"]
        assert form["total_amount"] == "100.00"
        assert form["amount"] == "100.00"
        assert form["product_code"] == "EPAYTEST"
        assert re.match(r"^\d{13}-abc123$", form["transaction_uuid"])
        assert form["signed_field_names"] == "total_amount,transaction_uuid,product_code"
        assert form["signature"] == sign_message(TEST_SECRET, _signed_message(form))

    def test_form_data_keys(self, client, order_body):
        form = client.post(INITIATE, json=order_body).json()["formData"]
        assert set(form) == {
            "amount", "tax_amount", "total_amount", "transaction_uuid", "product_code",
            "product_service_charge", "product_delivery_charge", "success_url", "failure_url",
            "signed_field_names", "signature",
        }
        assert form["tax_amount"] == form["product_service_charge"] == form["product_delivery_charge"] == "0"

    def test_netlify_function_path_has_same_contract(self, client, order_body):
        resp = client.post("/.netlify/functions/initiate-payment", json=order_body)
        assert resp.status_code == 200
        assert resp.json()["formData"]["product_code"] == "EPAYTEST"

    def test_unsupported_method(self, client, order_body):
        resp = client.post(INITIATE, json=dict(order_body, method="card"))
        assert resp.status_code == 400
        assert resp.json() == {"error": "Unsupported payment method"}

    def test_empty_body_object(self, client):
        resp = client.post(INITIATE, json={})
        assert resp.status_code == 400
        assert resp.json() == {"error": "Missing required fields"}

    @pytest.mark.parametrize("field", ["amount", "productName", "transactionId", "method"])
    def test_each_missing_field(self, client, order_body, field):
        body = {k: v for k, v in order_body.items() if k != field}
        resp = client.post(INITIATE, json=body)
        assert resp.status_code == 400
        assert resp.json() == {"error": "Missing required fields"}

    @pytest.mark.parametrize("field", ["amount", "productName", "transactionId", "method"])
    def test_empty_string_counts_as_missing(self, client, order_body, field):
        resp = client.post(INITIATE, json=dict(order_body, **{field: ""}))
        assert resp.status_code == 400
        assert resp.json() == {"error": "Missing required fields"}

    @pytest.mark.parametrize("verb", ["get", "put", "patch", "delete"])
    def test_non_post_verbs(self, client, verb):
        resp = client.request(verb.upper(), INITIATE)
        assert resp.status_code == 405
        assert resp.json() == {"error": "Method not allowed"}

    def test_invalid_json(self, client):
        resp = client.post(INITIATE, content="{not json", headers={"Content-Type": "application/json"})
        assert resp.status_code == 400
        assert resp.json() == {"error": "Invalid JSON body"}

    @pytest.mark.parametrize("amount", ["abc", "-5", "0", "1e3", "10,00", "\u0661\u0660\u0660", "\uff11\uff10\uff10"])
    def test_invalid_amount(self, client, order_body, amount):
        resp = client.post(INITIATE, json=dict(order_body, amount=amount))
        assert resp.status_code == 400
        assert resp.json() == {"error": "Invalid amount"}

    @pytest.mark.parametrize("transaction_id", ["abc 123", "abc123\n", "abc_123", "\u0661\u0662\u0663"])
    def test_invalid_transaction_id(self, client, order_body, transaction_id):
        resp = client.post(INITIATE, json=dict(order_body, transactionId=transaction_id))
        assert resp.status_code == 400
        assert resp.json() == {"error": "Invalid transactionId"}

    def test_missing_config_is_generic_500(self, client, order_body):
        def no_config():
            raise ConfigurationError("ESEWA_SECRET_KEY is not configured")

        app.dependency_overrides[get_initiation_service] = lambda: PaymentInitiationService(no_config)
        resp = client.post(INITIATE, json=order_body)
        assert resp.status_code == 500
        assert resp.json() == {"error": "Internal server error"}

    def test_empty_secret_never_signs(self, client, order_body):
        config = EsewaConfig(
            merchant_code="EPAYTEST", secret_key="", payment_url="https://pay.example", site_origin="https://a.example",
        )
        app.dependency_overrides[get_initiation_service] = lambda: PaymentInitiationService(lambda: config)
        resp = client.post(INITIATE, json=order_body)
        assert resp.status_code == 500
        assert "signature" not in resp.text

    def test_unexpected_error_detail_not_leaked(self, client, order_body):
        def boom():
            raise RuntimeError(f"secret={TEST_SECRET}")

        app.dependency_overrides[get_initiation_service] = lambda: PaymentInitiationService(boom)
        resp = client.post(INITIATE, json=order_body)
        assert resp.status_code == 500
        assert TEST_SECRET not in resp.text


class TestIdempotency:
    def test_repeat_key_replays_response(self, client, order_body):
        headers = {"Idempotency-Key": f"order-{uuid.uuid4().hex}"}
        first = client.post(INITIATE, json=order_body, headers=headers)
        second = client.post(INITIATE, json=order_body, headers=headers)
        assert first.status_code == second.status_code == 200
        assert first.json() == second.json()

    def test_without_key_each_attempt_is_new(self, order_body, esewa_config):
        ticks = iter([1700000000.0, 1700000001.0])
        service = PaymentInitiationService(lambda: esewa_config, clock=lambda: next(ticks))
        first = service.handle("POST", order_body)
        second = service.handle("POST", order_body)
        assert first.body["formData"]["transaction_uuid"] != second.body["formData"]["transaction_uuid"]

    def test_same_key_different_request_conflicts(self, client, order_body):
        headers = {"Idempotency-Key": f"order-{uuid.uuid4().hex}"}
        assert client.post(INITIATE, json=order_body, headers=headers).status_code == 200
        resp = client.post(INITIATE, json=dict(order_body, amount="200.00"), headers=headers)
        assert resp.status_code == 409
        assert resp.json() == {"error": "Idempotency key reused with a different request"}

    def test_invalid_key(self, client, order_body):
        resp = client.post(INITIATE, json=order_body, headers={"Idempotency-Key": "bad key!"})
        assert resp.status_code == 400
        assert resp.json() == {"error": "Invalid Idempotency-Key"}


class TestParsePaymentRequest:
    def test_numeric_amount_is_used_as_text(self):
        payment = parse_payment_request(
            {"amount": 100, "productName": "MAMATA", "transactionId": "t-1", "method": "esewa"}
        )
        assert payment.amount == "100"
        assert payment.transaction_id == "t-1"
        assert payment.product_name == "MAMATA"

    def test_bytes_body(self):
        payment = parse_payment_request(
            b'{"amount": "55.50", "productName": "MAMATA", "transactionId": "t-2", "method": "esewa"}'
        )
        assert payment.amount == "55.50"

    @pytest.mark.parametrize("body", [b"[]", "42", '"text"'])
    def test_non_object_json(self, body):
        with pytest.raises(ClientInputError, match="Invalid JSON body"):
            parse_payment_request(body)

    def test_none_body_is_missing_fields(self):
        with pytest.raises(ClientInputError, match="Missing required fields"):
            parse_payment_request(None)

    def test_non_string_product_name(self):
        with pytest.raises(ClientInputError, match="Invalid request fields"):
            parse_payment_request({"amount": "1", "productName": 7, "transactionId": "t", "method": "esewa"})

    def test_boolean_amount(self):
        with pytest.raises(ClientInputError, match="Invalid request fields"):
            parse_payment_request({"amount": True, "productName": "M", "transactionId": "t", "method": "esewa"})
