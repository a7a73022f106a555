# tm_core/api/urls.py
from __future__ import annotations

from django.urls import path
from rest_framework.routers import DefaultRouter

from tm_core.appointments.api.views import AppointmentViewSet
from tm_core.audit.api.views import AuditEventViewSet
from tm_core.billing.api.views import PaymentViewSet, SubscriptionPlanViewSet, SubscriptionViewSet
from tm_core.chat.api.views import ChatRoomViewSet, PresenceView, UploadView, VideoRoomView, VideoTokenView
from tm_core.clinical.api.views import MedicalRecordViewSet, PrescriptionViewSet
from tm_core.doctors.api.views import DoctorViewSet, SpecializationViewSet
from tm_core.iam.api.me import MeView
from tm_core.iam.api.webhooks import IdentityWebhookView

router = DefaultRouter()

router.register(r"appointments", AppointmentViewSet, basename="appointments")
router.register(r"billing/plans", SubscriptionPlanViewSet, basename="billing-plans")
router.register(r"billing/subscriptions", SubscriptionViewSet, basename="billing-subscriptions")
router.register(r"billing/payments", PaymentViewSet, basename="billing-payments")
router.register(r"doctors", DoctorViewSet, basename="doctors")
router.register(r"specializations", SpecializationViewSet, basename="specializations")
router.register(r"clinical/records", MedicalRecordViewSet, basename="clinical-records")
router.register(r"clinical/prescriptions", PrescriptionViewSet, basename="clinical-prescriptions")
router.register(r"chat/rooms", ChatRoomViewSet, basename="chat-rooms")
router.register(r"audit/events", AuditEventViewSet, basename="audit-events")

urlpatterns = [
    path("me/", MeView.as_view(), name="me"),
    path("webhooks/identity/", IdentityWebhookView.as_view(), name="identity-webhook"),

    # Non-ViewSet realtime / media endpoints
    path("chat/presence/", PresenceView.as_view(), name="chat-presence"),
    path("chat/upload/", UploadView.as_view(), name="chat-upload"),
    path("video/rooms/", VideoRoomView.as_view(), name="video-rooms"),
    path("video/tokens/", VideoTokenView.as_view(), name="video-tokens"),

    # Router URLs last (so explicit paths win if ever overlapping)
    *router.urls,
]
