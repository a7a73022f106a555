# tm_core/audit/models.py
from django.db import models

from tm_core.common.models import UUIDModel


class AuditEvent(UUIDModel):
    """
    Immutable audit record.
    Every state change on bookings, payments and subscriptions lands here.
    """
    event_code = models.CharField(max_length=128, db_index=True)  # e.g. "appointment.booked"
    entity_type = models.CharField(max_length=128, db_index=True)  # e.g. "Appointment"
    entity_id = models.UUIDField(db_index=True)

    # Plain id (not a FK): audit rows outlive the profile they mention.
    actor_profile_id = models.UUIDField(null=True, blank=True, db_index=True)

    occurred_at = models.DateTimeField(auto_now_add=True, db_index=True)
    metadata = models.JSONField(default=dict)

    class Meta:
        db_table = "audit_audit_event"
        indexes = [
            models.Index(fields=["entity_type", "entity_id"], name="audit_entity_idx"),
            models.Index(fields=["event_code", "occurred_at"], name="audit_event_code_time_idx"),
        ]
