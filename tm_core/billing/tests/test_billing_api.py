# tm_core/billing/tests/test_billing_api.py

import pytest

from tm_core.billing.models import Payment, PaymentStatus

pytestmark = pytest.mark.django_db

BASE = "/api/v1/billing"


def test_plans_are_listed_for_any_signed_in_profile(doctor_client, plan):
    r = doctor_client.get(f"{BASE}/plans/")

    assert r.status_code == 200, r.content
    assert [p["id"] for p in r.json()] == [str(plan.id)]


def test_single_order_then_verify_then_can_book(patient_client, fake_gateway, sign):
    r = patient_client.post(f"{BASE}/payments/orders/single/", {"amount": 500}, format="json")
    assert r.status_code == 201, r.content
    order = r.json()
    assert order["amount"] == 50000
    assert order["key_id"] == "rzp_test_key"

    r = patient_client.get(f"{BASE}/payments/can-book/")
    assert r.json()["can_book"] is False
    assert r.json()["requires_payment"] is True

    r = patient_client.post(
        f"{BASE}/payments/verify/",
        {
            "payment_id": order["payment_id"],
            "gateway_order_id": order["gateway_order_id"],
            "gateway_payment_id": "pay_api_1",
            "gateway_signature": sign(order["gateway_order_id"], "pay_api_1"),
        },
        format="json",
    )
    assert r.status_code == 200, r.content
    assert r.json()["payment_type"] == "single"
    assert r.json()["remaining_appointments"] == 1

    r = patient_client.get(f"{BASE}/payments/can-book/")
    body = r.json()
    assert body["can_book"] is True
    assert body["payment_type"] == "single"
    assert body["remaining_appointments"] == 1


def test_tampered_verify_renders_error_envelope(patient_client, fake_gateway):
    r = patient_client.post(f"{BASE}/payments/orders/single/", {"amount": 500}, format="json")
    order = r.json()

    r = patient_client.post(
        f"{BASE}/payments/verify/",
        {
            "payment_id": order["payment_id"],
            "gateway_order_id": order["gateway_order_id"],
            "gateway_payment_id": "pay_api_1",
            "gateway_signature": "deadbeef",
        },
        format="json",
    )

    assert r.status_code == 400
    err = r.json()["error"]
    assert err["code"] == "invalid_signature"
    assert err["request_id"]
    assert Payment.objects.get(id=order["payment_id"]).status == PaymentStatus.PENDING


def test_subscription_status_reports_unlimited(patient, patient_client, make_subscription):
    sub = make_subscription(patient)

    r = patient_client.get(f"{BASE}/payments/status/")
    body = r.json()
    assert body["has_active_payment"] is True
    assert body["payment_type"] == "subscription"
    assert body["remaining_appointments"] is None
    assert body["subscription"]["id"] == str(sub.id)

    r = patient_client.get(f"{BASE}/subscriptions/current/")
    assert r.json()["plan"]["name"] == "Monthly"


def test_cancel_subscription_endpoint(patient, patient_client, make_subscription):
    sub = make_subscription(patient)

    r = patient_client.post(f"{BASE}/subscriptions/{sub.id}/cancel/", {"reason": "too pricey"}, format="json")

    assert r.status_code == 200, r.content
    assert r.json()["status"] == "canceled"


def test_payment_retrieve_is_owner_scoped(patient, other_patient, client_for, make_single_payment):
    payment = make_single_payment(other_patient)

    r = client_for(patient).get(f"{BASE}/payments/{payment.id}/")

    assert r.status_code == 404
    assert r.json()["error"]["code"] == "payment_not_found"


def test_doctors_cannot_buy_appointments(doctor_client, fake_gateway):
    r = doctor_client.post(f"{BASE}/payments/orders/single/", {"amount": 500}, format="json")

    assert r.status_code == 403
    assert r.json()["error"]["code"] == "permission_denied"
