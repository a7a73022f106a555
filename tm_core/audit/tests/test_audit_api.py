# tm_core/audit/tests/test_audit_api.py
import uuid

import pytest

from tm_core.audit.services import AuditService

pytestmark = pytest.mark.django_db


def test_audit_log_is_admin_only(patient_client, admin_profile, client_for):
    entity_id = uuid.uuid4()
    AuditService.log(
        event_code="appointment.booked",
        entity_type="Appointment",
        entity_id=entity_id,
        actor_profile_id=None,
        metadata={"k": "v"},
    )
    AuditService.log(
        event_code="payment.verified",
        entity_type="Payment",
        entity_id=uuid.uuid4(),
        actor_profile_id=None,
    )

    assert patient_client.get("/api/v1/audit/events/").status_code == 403

    admin = client_for(admin_profile)
    all_events = admin.get("/api/v1/audit/events/").json()
    booked = admin.get("/api/v1/audit/events/", {"entity_id": str(entity_id)}).json()

    assert len(all_events) == 2
    assert [e["event_code"] for e in booked] == ["appointment.booked"]
    assert booked[0]["metadata"] == {"k": "v"}


def test_bad_uuid_filter_is_validation_error(admin_profile, client_for):
    r = client_for(admin_profile).get("/api/v1/audit/events/", {"entity_id": "xyz"})

    assert r.status_code == 400
    assert r.json()["error"]["code"] == "validation_error"
