import hashlib
import hmac

import pytest
from fastapi.testclient import TestClient

from app.api.payments import _rupees
from app.main import app
from app.services.razorpay_service import payment_status, razorpay_service
from conftest import insert_user

client = TestClient(app)

COURSE_ID = "65f1c0a2b3c4d5e6f7a8b9c0"


@pytest.fixture
def razorpay_keys(monkeypatch):
    monkeypatch.setattr(razorpay_service, "key_id", "rzp_test_key")
    monkeypatch.setattr(razorpay_service, "key_secret", "test_secret")


def sign(order_id, payment_id, secret="test_secret"):
    return hmac.new(secret.encode(), f"{order_id}|{payment_id}".encode(), hashlib.sha256).hexdigest()


@pytest.mark.parametrize("paise, expected", [(49900, "499"), (49950, "499.5"), (0, "0"), (None, "0")])
def test_rupees(paise, expected):
    assert _rupees(paise) == expected


def test_payment_status_mapping():
    assert payment_status("captured") == "success"
    assert payment_status("failed") == "failed"
    assert payment_status("authorized") == "pending"


def test_signature_check(razorpay_keys):
    assert razorpay_service.verify_signature("order_1", "pay_1", sign("order_1", "pay_1"))
    assert not razorpay_service.verify_signature("order_1", "pay_1", sign("order_1", "pay_2"))
    assert not razorpay_service.verify_signature("order_1", "pay_1", None)


def test_verify_rejects_bad_signature(razorpay_keys):
    response = client.post(
        "/api/razorpay/verify",
        json={
            "order_id": "order_1",
            "payment_id": "pay_1",
            "signature": "forged",
            "course_id": COURSE_ID,
            "user_id": "65f1c0a2b3c4d5e6f7a8b9c1",
        },
    )
    assert response.status_code == 400
    assert response.json()["status"] == "INVALID_SIGNATURE"


def test_verify_records_payment_and_lists_it(razorpay_keys, monkeypatch, mock_db):
    buyer = insert_user(mock_db)

    async def fetch_payment(payment_id):
        return {"id": payment_id, "status": "captured", "amount": 49900, "currency": "INR"}

    monkeypatch.setattr(razorpay_service, "fetch_payment", fetch_payment)
    response = client.post(
        "/api/razorpay/verify",
        json={
            "order_id": "order_1",
            "payment_id": "pay_1",
            "signature": sign("order_1", "pay_1"),
            "course_id": COURSE_ID,
            "user_id": str(buyer["_id"]),
        },
    )

    assert response.status_code == 200
    payment = response.json()["data"]["payment"]
    assert payment["status"] == "success"
    assert payment["amount"] == "499"
    assert payment["transaction_id"] == "pay_1"

    listed = client.get("/api/razorpay/payments", params={"user_id": str(buyer["_id"])})
    rows = listed.json()["data"]
    assert len(rows) == 1
    assert rows[0]["user_id"]["email"] == "asha@example.com"
    # Missing course stays as its id
    assert rows[0]["course_id"] == COURSE_ID


def test_create_order_needs_positive_amount():
    response = client.post("/api/razorpay/orders", json={"amount": 0})
    assert response.status_code == 422


def test_create_order_without_keys_is_502(monkeypatch):
    monkeypatch.setattr(razorpay_service, "key_id", None)
    monkeypatch.setattr(razorpay_service, "key_secret", None)

    response = client.post("/api/razorpay/orders", json={"amount": 499})
    assert response.status_code == 502
    assert response.json()["status"] == "EXTERNAL_SERVICE_ERROR"
