import base64
import json
import os
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="mamata-tests-")

# Must be set before any mamata module reads settings
os.environ.update({
    "ESEWA_MERCHANT_CODE": "EPAYTEST",
    "ESEWA_SECRET_KEY": "8gBm/:&EnhH.1/q",
    "ESEWA_PAYMENT_URL": "https://rc-epay.esewa.com.np/api/epay/main/v2/form",
    "ESEWA_VERIFY_STATUS": "false",
    "PUBLIC_SITE_URL": "https://api.mamata.example",
    "FRONTEND_URL": "https://mamata.example",
    "PAYMENT_MOCK_MODE": "false",
    "IDEMPOTENCY_WINDOW_SECONDS": "120",
    "DATABASE_URL": f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}",
    "LOG_DIR": os.path.join(_TMP_DIR, "logs"),
})

import pytest
from fastapi.testclient import TestClient

from mamata.config import EsewaConfig
from mamata.main import app
from mamata.utils.hashing import build_signature_message, sign_message

TEST_SECRET = "8gBm/:&EnhH.1/q"
TEST_MERCHANT = "EPAYTEST"
FIXED_NOW = 1700000000.0


@pytest.fixture
def client():
    app.dependency_overrides.clear()
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def esewa_config():
    return EsewaConfig(
        merchant_code=TEST_MERCHANT,
        secret_key=TEST_SECRET,
        payment_url="https://rc-epay.esewa.com.np/api/epay/main/v2/form",
        site_origin="https://api.mamata.example",
    )


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture
def order_body():
    return {
        "amount": "100.00",
        "productName": "MAMATA",
        "transactionId": "abc123",
        "method": "esewa",
    }


def make_callback_data(fields, secret=TEST_SECRET, numeric=("total_amount",), signature=None):
    """Encode a gateway-style success callback.

    ``fields`` values are the exact text the gateway signs; keys listed in
    ``numeric`` are written as bare JSON numbers, as eSewa does.
    """
    names = list(fields) + ["signed_field_names"]
    values = dict(fields, signed_field_names=",".join(names))
    if signature is None:
        signature = sign_message(secret, build_signature_message(names, values))
    values["signature"] = signature

    parts = [
        f'"{key}":{value}' if key in numeric else f'"{key}":{json.dumps(value)}'
        for key, value in values.items()
    ]
    raw = "{" + ",".join(parts) + "}"
    return base64.b64encode(raw.encode("utf-8")).decode("ascii")


@pytest.fixture
def complete_callback_fields():
    return {
        "transaction_code": "000AWEO",
        "status": "COMPLETE",
        "total_amount": "100.0",
        "transaction_uuid": "1700000000000-abc123",
        "product_code": TEST_MERCHANT,
    }


@pytest.fixture
def callback_data():
    return make_callback_data
