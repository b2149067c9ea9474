"""Production URL configuration."""

from __future__ import annotations

from rest_framework.routers import DefaultRouter

from modules.production.views import AppointmentViewSet, DashboardViewSet

router = DefaultRouter(trailing_slash=True)
router.register("appointments", AppointmentViewSet, basename="appointment")
router.register("dashboard", DashboardViewSet, basename="dashboard")

urlpatterns = router.urls
