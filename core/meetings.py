import math
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from django.conf import settings
from django.utils import timezone

from .models import Session


JOIN_WINDOW = timedelta(minutes=15)


@dataclass(frozen=True)
class JoinDecision:
    allowed: bool
    reason: str = ""
    minutes_until_join: Optional[int] = None


def build_meeting_link(stamp):
    return f"{settings.MEETING_BASE_URL}/{settings.MEETING_ROOM_PREFIX}-{stamp}"


def build_channel_name(stamp, mentor_id):
    return f"session-{stamp}-{str(mentor_id)[-8:]}"


def session_channel_name(session):
    return f"session-{session.pk}"


def evaluate_join(session, now) -> JoinDecision:
    if session.payment_status != "paid":
        return JoinDecision(False, "Payment not confirmed. Cannot join session until payment is confirmed.")
    if session.status not in Session.JOINABLE_STATUSES:
        return JoinDecision(False, f"Session is {session.status}. Cannot join.")
    if now > session.end_time:
        return JoinDecision(False, "Session has ended.")
    opens_at = session.start_time - JOIN_WINDOW
    if now < opens_at:
        minutes = math.ceil((opens_at - now).total_seconds() / 60)
        return JoinDecision(
            False,
            "Session hasn't started yet. You can join 15 minutes before the scheduled time.",
            minutes_until_join=minutes,
        )
    return JoinDecision(True)


def open_session_for_join(session, now=None):
    """Move a scheduled session to ongoing and make sure it has a channel."""
    now = now or timezone.now()
    update_fields = []
    if session.status == "scheduled":
        session.status = "ongoing"
        session.started_at = session.started_at or now
        update_fields.extend(["status", "started_at"])
    if not session.channel_name:
        session.channel_name = session_channel_name(session)
        update_fields.append("channel_name")
    if update_fields:
        update_fields.append("updated_at")
        session.save(update_fields=update_fields)
    return session
