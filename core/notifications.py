import logging

from django.conf import settings
from django.core.mail import send_mail
from django.utils import timezone
from django.utils.html import escape

from .models import UserProfile


logger = logging.getLogger(__name__)


def _when(session):
    start = timezone.localtime(session.start_time)
    end = timezone.localtime(session.end_time)
    return f"{start:%A, %d %B %Y} {start:%I:%M %p} - {end:%I:%M %p} ({start.tzname()})"


def session_confirmation_email(recipient_name, session, counterpart_name, for_mentor):
    role_line = (
        f"A mentee, {counterpart_name}, has booked a session with you."
        if for_mentor
        else f"Your session with {counterpart_name} is confirmed."
    )
    subject = f"Session confirmed: {session.title}"
    text = (
        f"Hi {recipient_name},\n\n"
        f"{role_line}\n\n"
        f"Session: {session.title}\n"
        f"When: {_when(session)}\n"
        f"Join: {session.meeting_link}\n"
    )
    html = (
        f"<p>Hi {escape(recipient_name)},</p>"
        f"<p>{escape(role_line)}</p>"
        f"<p><strong>Session:</strong> {escape(session.title)}<br>"
        f"<strong>When:</strong> {escape(_when(session))}<br>"
        f"<strong>Join:</strong> <a href=\"{escape(session.meeting_link)}\">{escape(session.meeting_link)}</a></p>"
    )
    return subject, text, html


def _deliver(to, subject, text, html):
    try:
        send_mail(
            subject,
            text,
            settings.DEFAULT_FROM_EMAIL,
            [to],
            html_message=html,
            fail_silently=False,
        )
    except Exception:
        logger.exception("Failed to send %r to %s", subject, to)
        return False
    return True


def mentor_contact(mentor_id):
    """Return `(email, name)` for a mentor external id from the local user records."""
    profile = (
        UserProfile.objects.select_related("user", "user__mentor_profile")
        .filter(external_id=mentor_id)
        .first()
    )
    if profile is None:
        return "", ""
    mentor = getattr(profile.user, "mentor_profile", None)
    name = (mentor.name if mentor else "") or profile.display_name
    return profile.user.email, name


def send_booking_emails(session):
    """Notify both sides of a paid booking; each send fails independently."""
    if not getattr(settings, "NOTIFICATIONS_ENABLED", True):
        return 0
    mentor_email, mentor_name = mentor_contact(session.mentor_id)
    sent = 0
    if session.student_email:
        subject, text, html = session_confirmation_email(
            session.student_name, session, mentor_name or "Your Mentor", for_mentor=False
        )
        sent += _deliver(session.student_email, subject, text, html)
    if mentor_email:
        subject, text, html = session_confirmation_email(
            mentor_name or "Mentor", session, session.student_name, for_mentor=True
        )
        sent += _deliver(mentor_email, subject, text, html)
    else:
        logger.warning("No email on file for mentor %s, skipping mentor notification", session.mentor_id)
    return sent
