# tm_core/iam/models.py
from django.conf import settings
from django.db import models

from tm_core.common.models import UUIDModel


class UserProfile(UUIDModel):
    """
    Internal identity anchored to Django's AUTH_USER_MODEL.

    `external_id` is the identity provider's subject ("sub"). It is translated to
    this row once per request; every foreign key in the system holds `id`.
    """

    class Role(models.TextChoices):
        ADMIN = "admin", "Admin"
        PATIENT = "patient", "Patient"
        DOCTOR = "doctor", "Doctor"
        UNLISTED = "unlisted", "Unlisted"

    class Gender(models.TextChoices):
        MALE = "male", "Male"
        FEMALE = "female", "Female"
        OTHER = "other", "Other"

    class BloodType(models.TextChoices):
        A_POS = "A+", "A+"
        A_NEG = "A-", "A-"
        B_POS = "B+", "B+"
        B_NEG = "B-", "B-"
        AB_POS = "AB+", "AB+"
        AB_NEG = "AB-", "AB-"
        O_POS = "O+", "O+"
        O_NEG = "O-", "O-"

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="profile")
    external_id = models.CharField(max_length=255, unique=True)

    role = models.CharField(max_length=16, choices=Role.choices, default=Role.UNLISTED, db_index=True)

    first_name = models.CharField(max_length=255, blank=True, default="")
    last_name = models.CharField(max_length=255, blank=True, default="")
    email = models.EmailField(max_length=255, unique=True)
    phone = models.CharField(max_length=32, blank=True, default="")
    image_url = models.URLField(max_length=1024, blank=True, default="")

    dob = models.DateField(null=True, blank=True)
    gender = models.CharField(max_length=8, choices=Gender.choices, blank=True, default="")

    specialization = models.ForeignKey(
        "doctors.Specialization",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="doctors",
    )

    blood_type = models.CharField(max_length=3, choices=BloodType.choices, blank=True, default="")
    insurance_info = models.TextField(blank=True, default="")
    notes = models.TextField(blank=True, default="")

    class Meta:
        db_table = "iam_user_profile"
        indexes = [
            models.Index(fields=["role", "specialization"], name="iam_profile_role_spec_idx"),
        ]

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __str__(self) -> str:
        return f"{self.full_name or self.email} ({self.role})"
