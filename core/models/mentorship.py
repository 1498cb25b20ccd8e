from django.db import models

from ..exceptions import MissingFields


class Mentorship(models.Model):
    STATUS_CHOICES = [
        ("invited", "Invited"),
        ("active", "Active"),
        ("paused", "Paused"),
        ("ended", "Ended"),
    ]

    mentor_id = models.CharField(max_length=191, db_index=True)
    mentee_external_id = models.CharField(max_length=191, null=True, blank=True, db_index=True)
    mentee_email = models.EmailField(null=True, blank=True)
    mentee_name = models.CharField(max_length=255, default="Mentee")
    goal = models.TextField(default="Career development")
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="active")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True, null=True, blank=True)

    class Meta:
        ordering = ["-updated_at", "-id"]
        constraints = [
            models.UniqueConstraint(
                fields=["mentor_id", "mentee_email"],
                name="unique_mentorship_per_mentee_email",
            ),
        ]
        indexes = [
            models.Index(fields=["mentor_id", "mentee_external_id"], name="mentorship_mentor_ext_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.mentee_name} with mentor {self.mentor_id} ({self.status})"

    def save(self, *args, **kwargs):
        self.mentee_email = (self.mentee_email or "").strip().lower() or None
        self.mentee_external_id = (self.mentee_external_id or "").strip() or None
        if not self.mentee_email and not self.mentee_external_id:
            raise MissingFields(["menteeClerkId", "menteeEmail"])
        super().save(*args, **kwargs)
