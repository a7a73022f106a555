import uuid

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("iam", "0001_initial"),
        ("appointments", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="MedicalRecord",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("diagnosis", models.TextField()),
                ("treatment", models.TextField()),
                ("notes", models.TextField(blank=True, default="")),
                ("record_date", models.DateTimeField()),
                (
                    "appointment",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="medical_records",
                        to="appointments.appointment",
                    ),
                ),
                (
                    "doctor",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="authored_medical_records",
                        to="iam.userprofile",
                    ),
                ),
                (
                    "patient",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="medical_records",
                        to="iam.userprofile",
                    ),
                ),
            ],
            options={
                "db_table": "clinical_medical_record",
                "indexes": [
                    models.Index(fields=["patient", "record_date"], name="clin_record_patient_date_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Prescription",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("medication", models.CharField(max_length=255)),
                ("dosage", models.CharField(max_length=255)),
                ("instructions", models.TextField(blank=True, default="")),
                ("start_date", models.DateTimeField()),
                ("end_date", models.DateTimeField()),
                (
                    "medical_record",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="prescriptions",
                        to="clinical.medicalrecord",
                    ),
                ),
            ],
            options={
                "db_table": "clinical_prescription",
                "indexes": [
                    models.Index(fields=["medical_record", "start_date"], name="clin_rx_record_start_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="AiAnalysis",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("symptoms", models.TextField()),
                (
                    "severity_score",
                    models.PositiveSmallIntegerField(
                        validators=[
                            django.core.validators.MinValueValidator(0),
                            django.core.validators.MaxValueValidator(10),
                        ]
                    ),
                ),
                ("disease_summary", models.TextField()),
                ("suggested_medications", models.TextField()),
                ("additional_notes", models.TextField(blank=True, default="")),
                (
                    "patient",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="ai_analyses",
                        to="iam.userprofile",
                    ),
                ),
            ],
            options={
                "db_table": "clinical_ai_analysis",
                "verbose_name_plural": "AI analyses",
                "indexes": [
                    models.Index(fields=["patient", "created_at"], name="clin_ai_patient_time_idx"),
                ],
            },
        ),
    ]
