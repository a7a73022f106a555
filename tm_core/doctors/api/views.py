# tm_core/doctors/api/views.py
from __future__ import annotations

from uuid import UUID

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from tm_core.clinical.api.serializers import AiAnalysisSummarySerializer
from tm_core.clinical.selectors import list_patient_summaries_for_doctor
from tm_core.common.api.lookups import UUID_LOOKUP_REGEX
from tm_core.common.api.pagination import limit_from_query
from tm_core.common.permissions import IsAdminRole, IsDoctor
from tm_core.doctors.api.serializers import (
    DoctorAppointmentSerializer,
    DoctorSerializer,
    SpecializationCreateSerializer,
    SpecializationSerializer,
)
from tm_core.doctors.models import Specialization
from tm_core.doctors.selectors import list_directory, list_specializations, upcoming_for_doctor
from tm_core.doctors.services import SpecializationService
from tm_core.iam.auth import request_profile
from tm_core.iam.models import UserProfile
from tm_core.iam.selectors import get_doctor


def _limit_parameter(default: int) -> OpenApiParameter:
    return OpenApiParameter(
        name="limit",
        type=OpenApiTypes.INT,
        location=OpenApiParameter.QUERY,
        required=False,
        description=f"Max records to return (default {default}, max 100).",
    )


class SpecializationViewSet(viewsets.GenericViewSet):
    """
    Specialty catalog. Anyone signed in can read it; only admins add to it.
    """
    serializer_class = SpecializationSerializer
    queryset = Specialization.objects.none()
    pagination_class = None

    def get_permissions(self):
        if self.action == "create":
            return [IsAdminRole()]
        return [IsAuthenticated()]

    @extend_schema(tags=["Doctors"], responses={200: SpecializationSerializer(many=True)})
    def list(self, request):
        return Response(SpecializationSerializer(list_specializations(), many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Doctors"], request=SpecializationCreateSerializer, responses={201: SpecializationSerializer})
    def create(self, request):
        ser = SpecializationCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        profile = getattr(request.user, "profile", None)
        specialization = SpecializationService.create(
            name=ser.validated_data["name"],
            description=ser.validated_data.get("description", ""),
            actor_profile_id=getattr(profile, "id", None),
        )
        return Response(SpecializationSerializer(specialization).data, status=status.HTTP_201_CREATED)


class DoctorViewSet(viewsets.GenericViewSet):
    """
    Doctor directory plus the signed-in doctor's dashboard widgets.
    """
    permission_classes = [IsAuthenticated]
    serializer_class = DoctorSerializer
    queryset = UserProfile.objects.none()
    lookup_value_regex = UUID_LOOKUP_REGEX

    @extend_schema(
        tags=["Doctors"],
        responses={200: DoctorSerializer(many=True)},
        parameters=[
            OpenApiParameter(
                name="specialization",
                type=OpenApiTypes.UUID,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Only doctors with this specialization.",
            ),
        ],
    )
    def list(self, request):
        raw = request.query_params.get("specialization") or None
        try:
            specialization_id = UUID(raw) if raw else None
        except ValueError:
            raise ValidationError({"specialization": "Invalid UUID"})

        qs = list_directory(specialization_id=specialization_id)
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(DoctorSerializer(page, many=True).data)
        return Response(DoctorSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Doctors"], responses={200: DoctorSerializer})
    def retrieve(self, request, pk=None):
        return Response(DoctorSerializer(get_doctor(doctor_id=UUID(str(pk)))).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["Doctors"],
        responses={200: DoctorAppointmentSerializer(many=True)},
        parameters=[_limit_parameter(10)],
    )
    @action(detail=False, methods=["get"], url_path="me/upcoming", permission_classes=[IsDoctor])
    def upcoming(self, request):
        profile = request_profile(request)
        limit_n = limit_from_query(request, default=10)
        qs = upcoming_for_doctor(doctor_id=profile.id, limit=limit_n)
        return Response(DoctorAppointmentSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["Doctors"],
        responses={200: AiAnalysisSummarySerializer(many=True)},
        parameters=[_limit_parameter(5)],
    )
    @action(detail=False, methods=["get"], url_path="me/patient-summaries", permission_classes=[IsDoctor])
    def patient_summaries(self, request):
        profile = request_profile(request)
        limit_n = limit_from_query(request, default=5)
        qs = list_patient_summaries_for_doctor(doctor_id=profile.id)[:limit_n]
        return Response(AiAnalysisSummarySerializer(qs, many=True).data, status=status.HTTP_200_OK)
