# tm_core/conftest.py
import itertools
from datetime import timedelta

import pytest
from django.conf import settings
from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework.test import APIClient

from tm_core.billing import gateway
from tm_core.billing.gateway import GatewayOrder
from tm_core.billing.models import (
    Payment,
    PaymentStatus,
    PaymentType,
    Subscription,
    SubscriptionPlan,
    SubscriptionStatus,
)
from tm_core.doctors.models import Specialization
from tm_core.iam.models import UserProfile

_seq = itertools.count(1)


@pytest.fixture
def make_profile(db):
    """
    Profile factory. Mirrors what the identity webhook creates:
      auth_user(username=external_id) -> UserProfile(external_id)
    """

    def _make(role=UserProfile.Role.PATIENT, **fields):
        n = next(_seq)
        external_id = fields.pop("external_id", f"user_test_{n}")
        user = get_user_model().objects.create_user(username=external_id, is_active=True)
        return UserProfile.objects.create(
            user=user,
            external_id=external_id,
            role=role,
            email=fields.pop("email", f"{external_id}@example.test"),
            first_name=fields.pop("first_name", "Test"),
            last_name=fields.pop("last_name", f"User{n}"),
            **fields,
        )

    return _make


@pytest.fixture
def specialization(db):
    return Specialization.objects.create(name="Cardiology", description="Heart")


@pytest.fixture
def patient(make_profile):
    return make_profile(UserProfile.Role.PATIENT, first_name="Asha", last_name="Rao")


@pytest.fixture
def other_patient(make_profile):
    return make_profile(UserProfile.Role.PATIENT, first_name="Ravi", last_name="Kumar")


@pytest.fixture
def doctor(make_profile, specialization):
    return make_profile(UserProfile.Role.DOCTOR, first_name="Meera", last_name="Iyer", specialization=specialization)


@pytest.fixture
def admin_profile(make_profile):
    return make_profile(UserProfile.Role.ADMIN, first_name="Ops", last_name="Admin")


@pytest.fixture
def client_for():
    def _client(profile):
        c = APIClient()
        c.force_authenticate(user=profile.user)
        return c

    return _client


@pytest.fixture
def patient_client(client_for, patient):
    return client_for(patient)


@pytest.fixture
def doctor_client(client_for, doctor):
    return client_for(doctor)


@pytest.fixture
def plan(db):
    return SubscriptionPlan.objects.create(
        name="Monthly",
        description="Unlimited consultations for 30 days",
        duration_days=30,
        price=49900,
        features=["Unlimited bookings", "Priority chat"],
    )


@pytest.fixture
def make_single_payment(db):
    """
    Completed single payment carrying `remaining` credits.
    """

    def _make(patient, *, remaining=1, status=PaymentStatus.COMPLETED, **fields):
        n = next(_seq)
        return Payment.objects.create(
            patient=patient,
            amount=fields.pop("amount", 50000),
            payment_type=PaymentType.SINGLE,
            status=status,
            gateway_order_id=fields.pop("gateway_order_id", f"order_test_{n}"),
            remaining_appointments=remaining,
            completed_at=timezone.now() if status == PaymentStatus.COMPLETED else None,
            **fields,
        )

    return _make


@pytest.fixture
def make_subscription(db, plan):
    def _make(patient, *, status=SubscriptionStatus.ACTIVE, end_date=None, **fields):
        now = timezone.now()
        return Subscription.objects.create(
            patient=patient,
            plan=fields.pop("plan", plan),
            status=status,
            start_date=fields.pop("start_date", now - timedelta(days=1)),
            end_date=end_date or now + timedelta(days=29),
            **fields,
        )

    return _make


def sign_confirmation(order_id: str, payment_id: str) -> str:
    return gateway.compute_signature(
        secret=settings.PAYMENT_GATEWAY["KEY_SECRET"],
        order_id=order_id,
        payment_id=payment_id,
    )


@pytest.fixture
def sign():
    return sign_confirmation


class FakeGatewayClient:
    def __init__(self, *, fail_with=None):
        self.fail_with = fail_with
        self.orders = []

    def create_order(self, *, amount, currency, receipt, notes=None):
        if self.fail_with is not None:
            raise self.fail_with
        order = GatewayOrder(order_id=f"order_fake_{len(self.orders) + 1}", amount=amount, currency=currency, receipt=receipt)
        self.orders.append({"order": order, "notes": notes or {}})
        return order


@pytest.fixture
def fake_gateway(monkeypatch):
    client = FakeGatewayClient()
    monkeypatch.setattr(gateway, "get_gateway_client", lambda: client)
    return client
