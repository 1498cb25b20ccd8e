from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .api_views import (
    AuthVerifyView,
    FounderOnboardingView,
    HealthView,
    MentorAvailabilitySlotsView,
    MentorDirectoryView,
    MentorEarningsView,
    MentorMenteeViewSet,
    MentorOnboardingStatusView,
    MentorOnboardingView,
    MentorPendingRequestsView,
    MentorSessionViewSet,
    MentorStatsView,
    StudentMentorsView,
    StudentOnboardingStatusView,
    StudentOnboardingView,
    StudentProfileView,
    StudentSessionViewSet,
)

router = DefaultRouter()
router.register(r"mentor-sessions", MentorSessionViewSet, basename="mentor-session")
router.register(r"mentor-mentees", MentorMenteeViewSet, basename="mentor-mentee")
router.register(r"student-sessions", StudentSessionViewSet, basename="student-session")


urlpatterns = [
    path("health/", HealthView.as_view(), name="health"),
    path("auth/verify/", AuthVerifyView.as_view(), name="auth-verify"),
    path("mentors/", MentorDirectoryView.as_view(), name="mentor-directory"),
    path("mentor/stats/", MentorStatsView.as_view(), name="mentor-stats"),
    path("mentor/pending-requests/", MentorPendingRequestsView.as_view(), name="mentor-pending-requests"),
    path("mentor/earnings/", MentorEarningsView.as_view(), name="mentor-earnings"),
    path("mentor-availability/slots/", MentorAvailabilitySlotsView.as_view(), name="mentor-availability-slots"),
    path("student/my-mentors/", StudentMentorsView.as_view(), name="student-my-mentors"),
    path("student/profile/", StudentProfileView.as_view(), name="student-profile"),
    path("role-onboarding/mentor/", MentorOnboardingView.as_view(), name="onboarding-mentor"),
    path("role-onboarding/mentor/status/", MentorOnboardingStatusView.as_view(), name="onboarding-mentor-status"),
    path("role-onboarding/student/", StudentOnboardingView.as_view(), name="onboarding-student"),
    path("role-onboarding/student/status/", StudentOnboardingStatusView.as_view(), name="onboarding-student-status"),
    path("role-onboarding/founder/", FounderOnboardingView.as_view(), name="onboarding-founder"),
    path("", include(router.urls)),
]
