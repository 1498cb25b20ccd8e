"""
Request-scoped projections for the mentor dashboard.

Every function takes `now` explicitly and returns plain dicts ready for a
Response; nothing here is cached between requests.
"""
import logging
import urllib.parse
from datetime import datetime, time, timedelta
from datetime import timezone as dt_timezone
from decimal import ROUND_HALF_UP, Decimal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from django.db.models import Q
from django.utils import timezone

from .mentorships import DEFAULT_GOAL, ensure_mentorships_from_sessions, get_or_create_plan, mentorship_sessions
from .models import MenteePlan, Mentorship, Session


logger = logging.getLogger(__name__)

MONTH_ABBR = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
DAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

PAID_BOOKING_WINDOW = timedelta(hours=2)
FEEDBACK_AFTER = timedelta(hours=24)
NEW_REQUEST_WINDOW = timedelta(days=7)
DEFAULT_SLOT_WINDOW = timedelta(days=7)
DEFAULT_SESSION_MINUTES = 60
MAX_PENDING_ITEMS = 10
MAX_PENDING_PER_KIND = 5
DETAIL_SESSION_LIMIT = 10


def round_half_up(value) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def as_number(value):
    value = Decimal(value or 0)
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def _group_indian(digits):
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def format_inr(amount) -> str:
    value = Decimal(amount or 0).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    whole, fraction = f"{abs(value):.2f}".split(".")
    fraction = fraction.rstrip("0")
    suffix = f".{fraction}" if fraction else ""
    return f"₹{sign}{_group_indian(whole)}{suffix}"


def iso_utc(moment):
    value = moment.astimezone(dt_timezone.utc).isoformat()
    if value.endswith("+00:00"):
        value = value[:-6] + "Z"
    return value


def humanize_time_ago(moment, now) -> str:
    minutes = int((now - moment).total_seconds() // 60)
    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes} min ago"
    if minutes < 1440:
        return f"{minutes // 60} hours ago"
    return "Today"


def _clock(local):
    hour = local.hour % 12 or 12
    meridiem = "PM" if local.hour >= 12 else "AM"
    return f"{hour}:{local.minute:02d} {meridiem}"


def format_day(moment) -> str:
    local = timezone.localtime(moment)
    return f"{local.day} {MONTH_ABBR[local.month - 1]} {local.year}"


def format_day_time(moment) -> str:
    local = timezone.localtime(moment)
    return f"{local.day} {MONTH_ABBR[local.month - 1]}, {_clock(local)}"


def format_day_year_time(moment) -> str:
    local = timezone.localtime(moment)
    return f"{local.day} {MONTH_ABBR[local.month - 1]} {local.year}, {_clock(local)}"


def month_start(moment, offset=0):
    local = timezone.localtime(moment)
    index = local.year * 12 + (local.month - 1) + offset
    year, month_index = divmod(index, 12)
    return local.replace(
        year=year, month=month_index + 1, day=1, hour=0, minute=0, second=0, microsecond=0
    )


def avatar_url(name):
    seed = urllib.parse.quote(name or "Mentee", safe="")
    return f"https://api.dicebear.com/7.x/avataaars/svg?seed={seed}"


def _total(sessions):
    return sum((session.amount or Decimal(0) for session in sessions), Decimal(0))


def _earned(sessions):
    return [s for s in sessions if s.status == "completed" and s.payment_status == "paid"]


def mentee_status(sessions, now):
    """Active with a future session, Paused with only completed ones, otherwise New."""
    if any(s.start_time > now and s.status != "draft" for s in sessions):
        return "Active"
    if any(s.status == "completed" for s in sessions):
        return "Paused"
    return "New"


def mentor_stats(mentor_id, now):
    sessions = list(Session.objects.filter(mentor_id=mentor_id).exclude(status="draft"))
    earned = _earned(sessions)
    total = _total(earned)

    this_month = month_start(now)
    last_month = month_start(now, -1)
    current = _total(s for s in earned if s.finished_at >= this_month)
    previous = _total(s for s in earned if last_month <= s.finished_at < this_month)
    change = round_half_up((current - previous) / previous * 100) if previous > 0 else 0

    by_mentee = {}
    for session in sessions:
        by_mentee.setdefault(session.student_id or session.student_name, []).append(session)
    statuses = [mentee_status(group, now) for group in by_mentee.values()]

    new_requests = sum(
        1
        for s in sessions
        if s.status == "scheduled"
        and s.start_time > now
        and (s.created_at or s.start_time) >= now - NEW_REQUEST_WINDOW
    )

    return {
        "earnings": {
            "total": as_number(total),
            "currency": "INR",
            "formatted": format_inr(total),
            "change": change,
            "changeType": "increase" if change >= 0 else "decrease",
        },
        "mentees": {
            "active": statuses.count("Active"),
            "total": len(statuses),
            "newRequests": new_requests,
        },
    }


def pending_requests(mentor_id, now):
    recent = now - PAID_BOOKING_WINDOW
    paid = (
        Session.objects.filter(mentor_id=mentor_id, status="scheduled", payment_status="paid")
        .filter(Q(created_at__gte=recent) | Q(start_time__gte=recent))
        .order_by("-created_at", "-start_time")[:MAX_PENDING_PER_KIND]
    )
    owed = (
        Session.objects.filter(
            mentor_id=mentor_id,
            status="completed",
            notes="",
            end_time__lt=now - FEEDBACK_AFTER,
        )
        .order_by("-end_time")[:MAX_PENDING_PER_KIND]
    )

    requests = []
    for session in paid:
        requests.append(
            {
                "id": f"paid-{session.pk}",
                "type": "paid_booking",
                "sessionId": session.pk,
                "name": session.student_name,
                "summary": "booked a paid session.",
                "createdAt": humanize_time_ago(session.created_at or session.start_time, now),
                "autoConfirmed": True,
                "action": "view_session",
            }
        )
    for session in owed:
        requests.append(
            {
                "id": f"feedback-{session.pk}",
                "type": "feedback_pending",
                "sessionId": session.pk,
                "name": session.student_name,
                "summary": f"Complete feedback for {session.student_name}'s {session.title or 'session'}.",
                "createdAt": "Today",
                "action": "write_feedback",
            }
        )
    return {"requests": requests[:MAX_PENDING_ITEMS]}


def related_sessions(mentorship, sessions):
    email = (mentorship.mentee_email or "").lower()
    matched = []
    for session in sessions:
        if mentorship.mentee_external_id and session.student_id == mentorship.mentee_external_id:
            matched.append(session)
        elif email and (session.student_email or "").lower() == email:
            matched.append(session)
    return matched


def mentee_summary(mentorship, sessions, plan, now):
    past = [s for s in sessions if s.status == "completed" or s.end_time < now]
    last = max(past, key=lambda s: s.finished_at, default=None)
    upcoming = [s for s in sessions if s.start_time > now and s.status != "draft"]
    upcoming_next = min(upcoming, key=lambda s: s.start_time, default=None)

    completed = sum(1 for s in sessions if s.status == "completed")
    counted = sum(1 for s in sessions if s.status != "draft")
    computed = round_half_up(completed / counted * 100) if counted else 0

    return {
        "id": mentorship.pk,
        "name": mentorship.mentee_name,
        "email": mentorship.mentee_email,
        "avatarUrl": avatar_url(mentorship.mentee_name),
        "goal": mentorship.goal or DEFAULT_GOAL,
        "progress": plan.progress if plan is not None else computed,
        "lastSession": format_day(last.finished_at) if last else "Never",
        "nextSession": format_day_time(upcoming_next.start_time) if upcoming_next else None,
        "status": mentee_status(sessions, now),
        "studentId": mentorship.mentee_external_id,
    }


def mentee_roster(mentor_id, now):
    ensure_mentorships_from_sessions(mentor_id)
    mentorships = list(Mentorship.objects.filter(mentor_id=mentor_id).order_by("-updated_at", "-id"))
    sessions = list(Session.objects.filter(mentor_id=mentor_id).order_by("-start_time"))
    plans = {
        plan.mentorship_id: plan
        for plan in MenteePlan.objects.filter(mentorship__in=mentorships)
    }
    mentees = [
        mentee_summary(mentorship, related_sessions(mentorship, sessions), plans.get(mentorship.pk), now)
        for mentorship in mentorships
    ]
    return {"mentees": mentees, "total": len(mentees)}


def milestone_payload(milestone):
    return {
        "id": milestone.pk,
        "title": milestone.title,
        "description": milestone.description,
        "completed": bool(milestone.completed),
        "dueDate": iso_utc(milestone.due_date) if milestone.due_date else None,
    }


def _detail_session_status(session, now):
    if session.status == "completed":
        return "completed"
    if session.start_time > now:
        return "upcoming"
    return "cancelled"


def mentee_detail(mentorship, now):
    plan = get_or_create_plan(mentorship)
    sessions = list(mentorship_sessions(mentorship).order_by("-start_time"))
    detail = mentee_summary(mentorship, sessions, plan, now)

    last_completed = max(
        (s for s in sessions if s.status == "completed"), key=lambda s: s.start_time, default=None
    )
    detail["lastSession"] = format_day(last_completed.start_time) if last_completed else "Never"
    detail["milestones"] = [milestone_payload(item) for item in plan.milestones.all()]
    detail["sessions"] = [
        {
            "id": session.pk,
            "date": (
                format_day_year_time(session.start_time)
                if session.start_time > now
                else format_day(session.start_time)
            ),
            "title": session.title,
            "status": _detail_session_status(session, now),
        }
        for session in sessions[:DETAIL_SESSION_LIMIT]
    ]
    detail["notes"] = plan.notes or None
    return detail


def earnings_summary(mentor_id, now, period="all"):
    sessions = list(Session.objects.filter(mentor_id=mentor_id).order_by("-start_time"))
    earned = _earned(sessions)

    months = [month_start(now, offset) for offset in range(-5, 1)]
    buckets = {(item.year, item.month): Decimal(0) for item in months}
    for session in earned:
        if session.finished_at < months[0]:
            continue
        local = timezone.localtime(session.finished_at)
        key = (local.year, local.month)
        if key in buckets:
            buckets[key] += session.amount or Decimal(0)

    current = buckets[(months[-1].year, months[-1].month)]
    previous = buckets[(months[-2].year, months[-2].month)]
    growth = round_half_up((current - previous) / previous * 100) if previous > 0 else 0

    total_paid = _total(earned)
    total_hours = sum(
        (Decimal(s.duration_minutes or DEFAULT_SESSION_MINUTES) / 60 for s in earned), Decimal(0)
    )
    avg_hourly = round_half_up(total_paid / total_hours) if total_hours > 0 else 0

    pending = _total(
        s for s in sessions
        if s.status == "scheduled" and s.payment_status == "paid" and s.start_time > now
    )

    history_sessions = earned
    if period == "this_month":
        history_sessions = [s for s in earned if s.finished_at >= months[-1]]
    elif period == "last_90_days":
        history_sessions = [s for s in earned if s.finished_at >= now - timedelta(days=90)]
    history_sessions = sorted(history_sessions, key=lambda s: s.finished_at, reverse=True)

    payment_history = [
        {
            "id": f"TXN-{str(s.pk).zfill(4)[-4:]}",
            "date": format_day(s.finished_at),
            "student": s.student_name,
            "service": s.title or f"{s.duration_minutes or DEFAULT_SESSION_MINUTES} min session",
            "amount": format_inr(s.amount),
            "status": "Paid",
            "sessionId": s.pk,
        }
        for s in history_sessions
    ]

    return {
        "earningsChart": [
            {"month": MONTH_ABBR[item.month - 1], "amount": as_number(buckets[(item.year, item.month)])}
            for item in months
        ],
        "growth": growth,
        "pendingPayout": as_number(pending),
        "totalPaidOut": as_number(total_paid),
        "totalSessions": len(earned),
        "avgHourlyRate": avg_hourly,
        "paymentHistory": payment_history,
    }


def mentor_timezone(mentor):
    try:
        return ZoneInfo(mentor.timezone or "Asia/Kolkata")
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r for mentor %s, using default", mentor.timezone, mentor.pk)
        return timezone.get_default_timezone()


def _parse_clock(value):
    hours, minutes = str(value).split(":")[:2]
    return time(int(hours), int(minutes))


def availability_slots(mentor, mentor_id, start=None, end=None, now=None):
    now = now or timezone.now()
    start = start or now
    end = end or start + DEFAULT_SLOT_WINDOW
    tz = mentor_timezone(mentor)

    weekly = {}
    for slot in mentor.weekly_availability or []:
        if slot.get("isActive", True) and slot.get("day") not in weekly:
            weekly[slot.get("day")] = slot
    blocked = {
        str(item.get("date", ""))[:10]
        for item in mentor.override_availability or []
        if item.get("isBlocked")
    }

    slots = []
    day = start.astimezone(tz).date()
    last_day = end.astimezone(tz).date()
    while day <= last_day:
        weekly_slot = weekly.get(DAY_NAMES[day.weekday()])
        if weekly_slot and day.isoformat() not in blocked:
            try:
                opens = _parse_clock(weekly_slot["startTime"])
                closes = _parse_clock(weekly_slot["endTime"])
            except (KeyError, ValueError):
                logger.warning("Skipping malformed weekly slot %r for mentor %s", weekly_slot, mentor.pk)
                day += timedelta(days=1)
                continue
            slot_start = datetime.combine(day, opens, tzinfo=tz)
            slot_end = datetime.combine(day, closes, tzinfo=tz)
            booked = Session.objects.filter(
                mentor_id=mentor_id,
                start_time__lt=slot_end,
                end_time__gt=slot_start,
                status__in=Session.JOINABLE_STATUSES,
            ).exists()
            slots.append(
                {
                    "id": f"slot-{int(slot_start.timestamp() * 1000)}-{opens.hour}",
                    "startTime": iso_utc(slot_start),
                    "endTime": iso_utc(slot_end),
                    "isAvailable": True,
                    "isBooked": booked,
                }
            )
        day += timedelta(days=1)
    return {"slots": slots}
