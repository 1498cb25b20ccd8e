from dataclasses import dataclass
from typing import Union

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from ..exceptions import MissingLinkage
from .mentorship import Mentorship
from .session import Session


@dataclass(frozen=True)
class MentorshipLink:
    mentorship_id: int


@dataclass(frozen=True)
class LegacySessionLink:
    session_id: int


Link = Union[MentorshipLink, LegacySessionLink]


class LinkedRecord(models.Model):
    """Rows owned by a mentorship, or by a single session for rows written before mentorships existed."""

    class Meta:
        abstract = True

    @classmethod
    def link_kwargs(cls, link: Link) -> dict:
        if isinstance(link, MentorshipLink):
            return {"mentorship_id": link.mentorship_id}
        if isinstance(link, LegacySessionLink):
            return {"session_id": link.session_id}
        raise MissingLinkage()

    @classmethod
    def for_link(cls, link: Link, **fields):
        return cls(**cls.link_kwargs(link), **fields)

    @property
    def link(self):
        if self.mentorship_id:
            return MentorshipLink(self.mentorship_id)
        if self.session_id:
            return LegacySessionLink(self.session_id)
        return None

    def save(self, *args, **kwargs):
        if self.link is None:
            raise MissingLinkage()
        super().save(*args, **kwargs)


class MenteePlan(LinkedRecord):
    mentor_id = models.CharField(max_length=191, db_index=True)
    mentorship = models.OneToOneField(
        Mentorship, on_delete=models.CASCADE, null=True, blank=True, related_name="plan"
    )
    session = models.OneToOneField(
        Session, on_delete=models.SET_NULL, null=True, blank=True, related_name="legacy_plan"
    )
    progress = models.PositiveSmallIntegerField(
        default=0, validators=[MinValueValidator(0), MaxValueValidator(100)]
    )
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True, null=True, blank=True)

    def __str__(self) -> str:
        return f"Plan for {self.link} ({self.progress}%)"


class Milestone(models.Model):
    plan = models.ForeignKey(MenteePlan, on_delete=models.CASCADE, related_name="milestones")
    title = models.CharField(max_length=255)
    description = models.TextField()
    completed = models.BooleanField(default=False)
    due_date = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True, null=True, blank=True)

    class Meta:
        ordering = ["created_at", "id"]

    def __str__(self) -> str:
        return self.title


class MenteeMessage(LinkedRecord):
    SENDER_CHOICES = [
        ("mentor", "Mentor"),
        ("mentee", "Mentee"),
        ("system", "System"),
    ]

    mentor_id = models.CharField(max_length=191, db_index=True)
    mentorship = models.ForeignKey(
        Mentorship, on_delete=models.CASCADE, null=True, blank=True, related_name="messages"
    )
    session = models.ForeignKey(
        Session, on_delete=models.SET_NULL, null=True, blank=True, related_name="legacy_messages"
    )
    sender = models.CharField(max_length=10, choices=SENDER_CHOICES, default="mentor")
    message = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]

    def __str__(self) -> str:
        return f"{self.sender} message for {self.link}"
