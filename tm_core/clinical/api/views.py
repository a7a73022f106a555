# tm_core/clinical/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.response import Response

from tm_core.clinical.api.serializers import MedicalRecordSerializer, PrescriptionSerializer
from tm_core.clinical.models import MedicalRecord, Prescription
from tm_core.clinical.selectors import list_patient_prescriptions, list_patient_records
from tm_core.common.api.pagination import limit_from_query
from tm_core.common.permissions import IsPatient
from tm_core.iam.auth import request_profile

_LIMIT_PARAMETER = OpenApiParameter(
    name="limit",
    type=OpenApiTypes.INT,
    location=OpenApiParameter.QUERY,
    required=False,
    description="Max records to return (default 10, max 100).",
)


class MedicalRecordViewSet(viewsets.GenericViewSet):
    """
    Caller's own medical records, latest first.
    """
    permission_classes = [IsPatient]
    serializer_class = MedicalRecordSerializer
    queryset = MedicalRecord.objects.none()

    @extend_schema(tags=["Clinical"], responses={200: MedicalRecordSerializer(many=True)}, parameters=[_LIMIT_PARAMETER])
    def list(self, request):
        profile = request_profile(request)
        limit_n = limit_from_query(request, default=10)
        qs = list_patient_records(patient_id=profile.id)[:limit_n]
        return Response(MedicalRecordSerializer(qs, many=True).data, status=status.HTTP_200_OK)


class PrescriptionViewSet(viewsets.GenericViewSet):
    permission_classes = [IsPatient]
    serializer_class = PrescriptionSerializer
    queryset = Prescription.objects.none()

    @extend_schema(tags=["Clinical"], responses={200: PrescriptionSerializer(many=True)}, parameters=[_LIMIT_PARAMETER])
    def list(self, request):
        profile = request_profile(request)
        limit_n = limit_from_query(request, default=10)
        qs = list_patient_prescriptions(patient_id=profile.id)[:limit_n]
        return Response(PrescriptionSerializer(qs, many=True).data, status=status.HTTP_200_OK)
