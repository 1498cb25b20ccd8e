from django.conf import settings
from django.db import models


class Mentor(models.Model):
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="mentor_profile"
    )
    name = models.CharField(max_length=255)
    current_role = models.CharField(max_length=255, blank=True)
    company = models.CharField(max_length=255, blank=True)
    linkedin_url = models.URLField(max_length=500, blank=True)
    resume_url = models.URLField(max_length=500, blank=True)
    total_experience_years = models.PositiveSmallIntegerField(null=True, blank=True)
    education_degree = models.CharField(max_length=255, blank=True)
    education_college = models.CharField(max_length=255, blank=True)
    specialization_tags = models.JSONField(default=list, blank=True)
    expected_hourly_rate = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    expected_half_hour_rate = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    currency = models.CharField(max_length=8, default="INR")
    timezone = models.CharField(max_length=64, default="Asia/Kolkata")
    # [{"id", "day", "startTime", "endTime", "isActive"}]
    weekly_availability = models.JSONField(default=list, blank=True)
    # [{"id", "date", "startTime", "endTime", "isBlocked"}]
    override_availability = models.JSONField(default=list, blank=True)
    is_onboarded = models.BooleanField(default=False, db_index=True)
    onboarded_at = models.DateTimeField(null=True, blank=True)
    bio = models.TextField(blank=True)
    location = models.CharField(max_length=255, blank=True)
    mentoring_focus = models.TextField(blank=True)
    ideal_mentee = models.TextField(blank=True)
    languages = models.CharField(max_length=255, blank=True)
    min_notice_hours = models.PositiveIntegerField(null=True, blank=True)
    max_sessions_per_week = models.PositiveIntegerField(null=True, blank=True)
    pre_session_notes_required = models.BooleanField(default=False)
    allow_recording = models.BooleanField(default=False)
    is_verified = models.BooleanField(default=False)
    is_online = models.BooleanField(default=True)
    avatar_url = models.URLField(max_length=500, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True, null=True, blank=True)

    def __str__(self) -> str:
        return self.name

    @property
    def external_id(self):
        profile = getattr(self.user, "userprofile", None)
        return profile.external_id if profile else None
