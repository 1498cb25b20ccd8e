from django.db import models

from ..exceptions import InvalidTimeRange


class Session(models.Model):
    STATUS_CHOICES = [
        ("scheduled", "Scheduled"),
        ("ongoing", "Ongoing"),
        ("completed", "Completed"),
        ("cancelled", "Cancelled"),
        ("draft", "Draft"),
    ]
    PAYMENT_STATUS_CHOICES = [
        ("pending", "Pending"),
        ("paid", "Paid"),
        ("failed", "Failed"),
        ("refunded", "Refunded"),
    ]
    BOOKING_TYPE_CHOICES = [
        ("manual", "Manual"),
        ("paid", "Paid"),
    ]
    LIFECYCLE_STATUSES = ("scheduled", "ongoing", "completed", "cancelled")
    JOINABLE_STATUSES = ("scheduled", "ongoing")

    mentor_id = models.CharField(max_length=191, db_index=True)
    student_id = models.CharField(max_length=191, blank=True, db_index=True)
    student_email = models.EmailField(blank=True)
    student_name = models.CharField(max_length=255)
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    start_time = models.DateTimeField(db_index=True)
    end_time = models.DateTimeField()
    duration_minutes = models.PositiveIntegerField(default=0)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="scheduled")
    payment_status = models.CharField(max_length=20, choices=PAYMENT_STATUS_CHOICES, default="pending")
    booking_type = models.CharField(max_length=20, choices=BOOKING_TYPE_CHOICES, default="manual")
    amount = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    currency = models.CharField(max_length=8, default="INR")
    meeting_link = models.URLField(max_length=500, blank=True)
    channel_name = models.CharField(max_length=191, blank=True)
    order_id = models.CharField(max_length=191, blank=True)
    payment_id = models.CharField(max_length=191, blank=True)
    payment_signature = models.CharField(max_length=255, blank=True)
    notes = models.TextField(blank=True)
    recording_url = models.URLField(max_length=500, blank=True)
    started_at = models.DateTimeField(null=True, blank=True)
    ended_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True, null=True, blank=True)

    class Meta:
        ordering = ["start_time", "id"]

    def __str__(self) -> str:
        return f"{self.title} ({self.start_time:%Y-%m-%d %H:%M}, mentor {self.mentor_id})"

    def save(self, *args, **kwargs):
        if self.start_time and self.end_time:
            if self.end_time <= self.start_time:
                raise InvalidTimeRange()
            self.duration_minutes = round((self.end_time - self.start_time).total_seconds() / 60)
        if self.student_email:
            self.student_email = self.student_email.strip().lower()
        super().save(*args, **kwargs)

    @property
    def finished_at(self):
        return self.ended_at or self.end_time or self.start_time
