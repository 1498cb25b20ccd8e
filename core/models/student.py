from django.conf import settings
from django.db import models


class Student(models.Model):
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="student_profile"
    )
    full_name = models.CharField(max_length=255, blank=True)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=32, blank=True)
    linkedin_url = models.URLField(max_length=500, blank=True)
    resume_file = models.CharField(max_length=500, blank=True)
    educations = models.JSONField(default=list, blank=True)
    experiences = models.JSONField(default=list, blank=True)
    projects = models.JSONField(default=list, blank=True)
    awards = models.TextField(blank=True)
    # {"portfolio", "github", "leetcode", "codechef", "other"}
    links = models.JSONField(default=dict, blank=True)
    skills = models.JSONField(default=list, blank=True)
    location = models.JSONField(default=dict, blank=True)
    availability = models.JSONField(default=dict, blank=True)
    preferences = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True, null=True, blank=True)

    def __str__(self) -> str:
        return self.full_name or self.email or f"Student {self.pk}"
