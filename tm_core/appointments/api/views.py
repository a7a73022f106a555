# tm_core/appointments/api/views.py
from __future__ import annotations

from uuid import UUID

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from tm_core.appointments.api.serializers import (
    AppointmentCreateSerializer,
    AppointmentSerializer,
    AppointmentUpdateSerializer,
)
from tm_core.appointments.filters import AppointmentFilter
from tm_core.appointments.models import Appointment
from tm_core.appointments.selectors import get_patient_appointment, list_patient_appointments
from tm_core.appointments.services import AppointmentService, BookingService
from tm_core.common.api.lookups import UUID_LOOKUP_REGEX
from tm_core.common.api.pagination import limit_from_query, paginate
from tm_core.common.permissions import IsPatient
from tm_core.iam.auth import request_profile

_FILTER_PARAMETERS = [
    OpenApiParameter(name="status", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False, many=True),
    OpenApiParameter(name="severity", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
    OpenApiParameter(name="doctor", type=OpenApiTypes.UUID, location=OpenApiParameter.QUERY, required=False),
    OpenApiParameter(name="date_from", type=OpenApiTypes.DATETIME, location=OpenApiParameter.QUERY, required=False),
    OpenApiParameter(name="date_to", type=OpenApiTypes.DATETIME, location=OpenApiParameter.QUERY, required=False),
]

_LIMIT_PARAMETER = OpenApiParameter(
    name="limit",
    type=OpenApiTypes.INT,
    location=OpenApiParameter.QUERY,
    required=False,
    description="Max records to return (default 10, max 100).",
)


class AppointmentViewSet(viewsets.GenericViewSet):
    """
    Patient appointments:
    - list (paginated, filterable), upcoming, past
    - create (booking: spends entitlement, opens chat room)
    - partial_update (reschedule / notes / status)
    - destroy
    """
    permission_classes = [IsPatient]
    serializer_class = AppointmentSerializer
    queryset = Appointment.objects.none()
    lookup_value_regex = UUID_LOOKUP_REGEX

    def _filtered(self, request, qs):
        return AppointmentFilter(request.query_params, queryset=qs, request=request).qs

    @extend_schema(tags=["Appointments"], responses={200: AppointmentSerializer(many=True)}, parameters=_FILTER_PARAMETERS)
    def list(self, request):
        profile = request_profile(request)
        qs = self._filtered(request, list_patient_appointments(patient_id=profile.id))
        return paginate(request, qs, AppointmentSerializer)

    @extend_schema(
        tags=["Appointments"],
        responses={200: AppointmentSerializer(many=True)},
        parameters=[_LIMIT_PARAMETER, *_FILTER_PARAMETERS],
    )
    @action(detail=False, methods=["get"], url_path="upcoming")
    def upcoming(self, request):
        profile = request_profile(request)
        qs = self._filtered(request, list_patient_appointments(patient_id=profile.id, upcoming=True))
        limit_n = limit_from_query(request, default=10)
        return Response(AppointmentSerializer(qs[:limit_n], many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["Appointments"],
        responses={200: AppointmentSerializer(many=True)},
        parameters=[_LIMIT_PARAMETER, *_FILTER_PARAMETERS],
    )
    @action(detail=False, methods=["get"], url_path="past")
    def past(self, request):
        profile = request_profile(request)
        qs = self._filtered(request, list_patient_appointments(patient_id=profile.id, upcoming=False))
        limit_n = limit_from_query(request, default=10)
        return Response(AppointmentSerializer(qs[:limit_n], many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Appointments"], responses={200: AppointmentSerializer})
    def retrieve(self, request, pk=None):
        profile = request_profile(request)
        appt = get_patient_appointment(patient_id=profile.id, appointment_id=UUID(str(pk)))
        return Response(AppointmentSerializer(appt).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Appointments"], request=AppointmentCreateSerializer, responses={201: AppointmentSerializer})
    def create(self, request):
        profile = request_profile(request)

        ser = AppointmentCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        v = ser.validated_data

        appt = BookingService.book_appointment(
            patient_id=profile.id,
            doctor_id=v["doctor_id"],
            date=v["date"],
            notes=v.get("notes"),
            severity=v.get("severity"),
            funding_payment_id=v.get("payment_id"),
            title=v.get("title") or None,
        )
        appt = get_patient_appointment(patient_id=profile.id, appointment_id=appt.id)
        return Response(AppointmentSerializer(appt).data, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Appointments"], request=AppointmentUpdateSerializer, responses={200: AppointmentSerializer})
    def partial_update(self, request, pk=None):
        profile = request_profile(request)

        ser = AppointmentUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        v = ser.validated_data

        AppointmentService.update(
            appointment_id=UUID(str(pk)),
            patient_id=profile.id,
            date=v.get("date"),
            notes=v.get("notes"),
            status=v.get("status"),
        )
        appt = get_patient_appointment(patient_id=profile.id, appointment_id=UUID(str(pk)))
        return Response(AppointmentSerializer(appt).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Appointments"], responses={204: None})
    def destroy(self, request, pk=None):
        profile = request_profile(request)
        AppointmentService.delete(appointment_id=UUID(str(pk)), patient_id=profile.id)
        return Response(status=status.HTTP_204_NO_CONTENT)
