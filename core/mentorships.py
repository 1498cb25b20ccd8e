import logging

from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import Q

from .models import MenteePlan, Mentorship, MentorshipLink, Session


logger = logging.getLogger(__name__)

DEFAULT_MENTEE_NAME = "Mentee"
DEFAULT_GOAL = "Career development"

ROSTER_STATUS_MAP = {
    "active": "active",
    "paused": "paused",
}


def _clean(value):
    return str(value or "").strip()


def mentee_identity(session):
    """(external id, lowercased email) for the session's mentee; either may be None."""
    external_id = _clean(session.student_id) or None
    email = _clean(session.student_email).lower() or None
    return external_id, email


def find_mentorship(mentor_id, external_id=None, email=None):
    queryset = Mentorship.objects.filter(mentor_id=mentor_id)
    if external_id:
        found = queryset.filter(mentee_external_id=external_id).first()
        if found:
            return found
    if email:
        return queryset.filter(mentee_email=email).first()
    return None


def _refresh(mentorship, external_id, name, goal, status):
    changed = []
    if external_id and not mentorship.mentee_external_id:
        mentorship.mentee_external_id = external_id
        changed.append("mentee_external_id")
    if name and mentorship.mentee_name != name:
        mentorship.mentee_name = name
        changed.append("mentee_name")
    if goal and mentorship.goal != goal:
        mentorship.goal = goal
        changed.append("goal")
    if status and mentorship.status != status:
        mentorship.status = status
        changed.append("status")
    if changed:
        changed.append("updated_at")
        mentorship.save(update_fields=changed)
    return mentorship


def reconcile_mentorship(mentor_id, external_id=None, email=None, name="", goal="", status=None,
                         insert_status="active"):
    """
    Find the mentorship for (mentor, mentee) by external id, then email, and
    create it when neither matches. Non-empty name/goal overwrite the stored
    values; `status` is applied on both paths, `insert_status` only on insert.
    """
    name = _clean(name)
    goal = _clean(goal)
    email = _clean(email).lower() or None
    external_id = _clean(external_id) or None

    mentorship = find_mentorship(mentor_id, external_id, email)
    if mentorship is not None:
        return _refresh(mentorship, external_id, name, goal, status), False

    try:
        with transaction.atomic():
            mentorship = Mentorship.objects.create(
                mentor_id=mentor_id,
                mentee_external_id=external_id,
                mentee_email=email,
                mentee_name=name or DEFAULT_MENTEE_NAME,
                goal=goal or DEFAULT_GOAL,
                status=status or insert_status,
            )
        return mentorship, True
    except IntegrityError:
        mentorship = find_mentorship(mentor_id, external_id, email)
        if mentorship is None:
            raise
        return _refresh(mentorship, external_id, name, goal, status), False


def link_legacy_plan(mentorship, session):
    if MenteePlan.objects.filter(mentorship=mentorship).exists():
        return False
    try:
        with transaction.atomic():
            linked = MenteePlan.objects.filter(session=session, mentorship__isnull=True).update(
                mentorship=mentorship
            )
    except DatabaseError:
        logger.exception("Linking legacy plan for session %s failed", session.pk)
        return False
    return bool(linked)


def ensure_mentorships_from_sessions(mentor_id):
    """
    Backfill mentorships for every mentee that appears in the mentor's sessions.

    Sessions are scanned oldest first so the latest session's name and goal win.
    Safe to run on every read.
    """
    resolved = {}
    sessions = Session.objects.filter(mentor_id=mentor_id).order_by("start_time", "id")
    for session in sessions:
        external_id, email = mentee_identity(session)
        if not external_id and not email:
            continue
        mentorship, _ = reconcile_mentorship(
            mentor_id,
            external_id=external_id,
            email=email,
            name=session.student_name,
            goal=session.title,
        )
        link_legacy_plan(mentorship, session)
        resolved[mentorship.pk] = mentorship
    return list(resolved.values())


def upsert_mentorship_from_session(session):
    external_id, email = mentee_identity(session)
    if not external_id and not email:
        return None
    mentorship, _ = reconcile_mentorship(
        session.mentor_id,
        external_id=external_id,
        email=email,
        name=session.student_name,
        goal=session.title,
        status="active",
    )
    return mentorship


def add_mentee(mentor_id, name, email, goal, status=None):
    requested = ROSTER_STATUS_MAP.get(_clean(status).lower())
    mentorship, _ = reconcile_mentorship(
        mentor_id,
        email=email,
        name=name,
        goal=goal,
        status=requested,
        insert_status="invited",
    )
    return mentorship


def get_or_create_plan(mentorship):
    plan, _ = MenteePlan.objects.get_or_create(
        mentorship=mentorship,
        defaults={"mentor_id": mentorship.mentor_id, "progress": 0, "notes": ""},
    )
    return plan


def link_for(mentorship):
    return MentorshipLink(mentorship.pk)


def mentorship_sessions(mentorship):
    match = Q()
    if mentorship.mentee_external_id:
        match |= Q(student_id=mentorship.mentee_external_id)
    if mentorship.mentee_email:
        match |= Q(student_email__iexact=mentorship.mentee_email)
    return Session.objects.filter(mentor_id=mentorship.mentor_id).filter(match)
