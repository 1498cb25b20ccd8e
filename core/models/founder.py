from django.conf import settings
from django.db import models


class Founder(models.Model):
    STAGE_CHOICES = [
        ('idea', 'Idea'),
        ('mvp', 'MVP'),
        ('traction', 'Traction'),
        ('scaling', 'Scaling'),
    ]

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="founder_profile"
    )
    name = models.CharField(max_length=255, blank=True)
    email = models.EmailField(blank=True)
    linkedin_url = models.URLField(max_length=500, blank=True)
    company_name = models.CharField(max_length=255, blank=True)
    headline = models.CharField(max_length=255, blank=True)
    idea_description = models.TextField(blank=True)
    stage = models.CharField(max_length=20, choices=STAGE_CHOICES, blank=True)
    needs = models.JSONField(default=list, blank=True)
    website = models.URLField(max_length=500, blank=True)
    location = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True, null=True, blank=True)

    def __str__(self) -> str:
        return self.company_name or self.name or f"Founder {self.pk}"
