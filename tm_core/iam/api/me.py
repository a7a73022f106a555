# tm_core/iam/api/me.py

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from tm_core.iam.api.serializers import ProfileSerializer, ProfileUpdateSerializer
from tm_core.iam.auth import request_profile
from tm_core.iam.services import ProfileService


class MeView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["IAM"], responses={200: ProfileSerializer})
    def get(self, request):
        return Response(ProfileSerializer(request_profile(request)).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["IAM"], request=ProfileUpdateSerializer, responses={200: ProfileSerializer})
    def patch(self, request):
        """
        Onboarding / profile edit.
        `role` can be chosen once (patient or doctor) while the profile is still unlisted.
        """
        profile = request_profile(request)

        ser = ProfileUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = dict(ser.validated_data)

        updated = ProfileService.update_profile(
            profile_id=profile.id,
            role=data.pop("role", None),
            specialization_id=data.pop("specialization_id", None),
            dob=data.pop("dob", None),
            data=data,
        )
        return Response(ProfileSerializer(updated).data, status=status.HTTP_200_OK)
