# tm_core/doctors/models.py
from django.db import models

from tm_core.common.models import UUIDModel


class Specialization(UUIDModel):
    """
    Catalog of doctor specialties (e.g. "Cardiology").
    """
    name = models.CharField(max_length=255, unique=True)
    description = models.TextField(blank=True, default="")

    class Meta:
        db_table = "doctors_specialization"
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name
