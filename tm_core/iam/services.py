# tm_core/iam/services.py
from __future__ import annotations

import logging
from datetime import date
from uuid import UUID

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from rest_framework.exceptions import ValidationError

from tm_core.audit.services import AuditService
from tm_core.common.api.exceptions import ConflictError, NotFoundError
from tm_core.doctors.models import Specialization
from tm_core.iam.models import UserProfile

logger = logging.getLogger(__name__)

# Roles a user may pick for themselves while onboarding. Admin is granted out of band.
SELF_ASSIGNABLE_ROLES = frozenset({UserProfile.Role.PATIENT, UserProfile.Role.DOCTOR})

_EDITABLE_FIELDS = {
    "first_name",
    "last_name",
    "phone",
    "dob",
    "gender",
    "blood_type",
    "insurance_info",
    "notes",
}


class ProfileService:
    @staticmethod
    @transaction.atomic
    def sync_from_identity(
        *,
        external_id: str,
        email: str,
        first_name: str = "",
        last_name: str = "",
        image_url: str = "",
        phone: str = "",
    ) -> UserProfile:
        """
        Create or refresh the local user + profile for an identity provider subject.
        Role is never touched here; new profiles start as "unlisted".
        """
        if not external_id:
            raise ValidationError({"external_id": "This field is required."})
        if not email:
            raise ValidationError({"email": "This field is required."})

        User = get_user_model()
        user, _ = User.objects.get_or_create(username=external_id, defaults={"email": email})
        user.email = email
        user.first_name = (first_name or "")[:150]
        user.last_name = (last_name or "")[:150]
        if not user.has_usable_password():
            user.set_unusable_password()
        user.save()

        try:
            profile, created = UserProfile.objects.update_or_create(
                external_id=external_id,
                defaults={
                    "user": user,
                    "email": email,
                    "first_name": first_name or "",
                    "last_name": last_name or "",
                    "image_url": image_url or "",
                    "phone": phone or "",
                },
            )
        except IntegrityError:
            raise ConflictError("Email is already linked to another account.")

        AuditService.log(
            event_code="profile.created" if created else "profile.synced",
            entity_type="UserProfile",
            entity_id=profile.id,
            actor_profile_id=None,
            metadata={"external_id": external_id},
        )
        logger.info("Profile %s external_id=%s profile_id=%s", "created" if created else "synced", external_id, profile.id)
        return profile

    @staticmethod
    @transaction.atomic
    def remove_identity(*, external_id: str) -> bool:
        """
        Deleting the Django user cascades to the profile and everything the patient owns.
        Returns False when the subject was never synced.
        """
        profile = UserProfile.objects.select_related("user").filter(external_id=external_id).first()
        if profile is None:
            return False

        profile_id = profile.id
        profile.user.delete()

        AuditService.log(
            event_code="profile.deleted",
            entity_type="UserProfile",
            entity_id=profile_id,
            actor_profile_id=None,
            metadata={"external_id": external_id},
        )
        logger.info("Profile deleted external_id=%s profile_id=%s", external_id, profile_id)
        return True

    @staticmethod
    @transaction.atomic
    def update_profile(
        *,
        profile_id: UUID,
        role: str | None = None,
        specialization_id: UUID | None = None,
        dob: date | None = None,
        data: dict | None = None,
    ) -> UserProfile:
        profile = UserProfile.objects.select_for_update().filter(id=profile_id).first()
        if profile is None:
            raise NotFoundError("Profile not found.")

        updates = {k: v for k, v in (data or {}).items() if k in _EDITABLE_FIELDS}
        if dob is not None:
            updates["dob"] = dob

        if role is not None and role != profile.role:
            if role not in SELF_ASSIGNABLE_ROLES:
                raise ValidationError({"role": f"Role '{role}' cannot be self-assigned."})
            if profile.role != UserProfile.Role.UNLISTED:
                raise ConflictError("Role is already set for this profile.")
            updates["role"] = role

        if specialization_id is not None:
            if (updates.get("role") or profile.role) != UserProfile.Role.DOCTOR:
                raise ValidationError({"specialization_id": "Only doctors have a specialization."})
            if not Specialization.objects.filter(id=specialization_id).exists():
                raise ValidationError({"specialization_id": "Unknown specialization."})
            updates["specialization_id"] = specialization_id

        for k, v in updates.items():
            setattr(profile, k, v)
        profile.save()

        AuditService.log(
            event_code="profile.updated",
            entity_type="UserProfile",
            entity_id=profile.id,
            actor_profile_id=profile.id,
            metadata={"updated_fields": sorted(updates.keys())},
        )
        return profile
