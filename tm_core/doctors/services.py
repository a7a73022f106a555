# tm_core/doctors/services.py
from __future__ import annotations

import logging
from uuid import UUID

from django.db import IntegrityError, transaction

from tm_core.audit.services import AuditService
from tm_core.common.api.exceptions import ConflictError
from tm_core.doctors.models import Specialization

logger = logging.getLogger(__name__)


class SpecializationService:
    @staticmethod
    def create(*, name: str, description: str = "", actor_profile_id: UUID | None = None) -> Specialization:
        name = (name or "").strip()

        try:
            with transaction.atomic():
                specialization = Specialization.objects.create(name=name, description=description or "")
                AuditService.log(
                    event_code="specialization.created",
                    entity_type="Specialization",
                    entity_id=specialization.id,
                    actor_profile_id=actor_profile_id,
                    metadata={"name": specialization.name},
                )
        except IntegrityError:
            raise ConflictError("Specialization with this name already exists.")

        logger.info("Specialization created id=%s name=%s", specialization.id, specialization.name)
        return specialization
