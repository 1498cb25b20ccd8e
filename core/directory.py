"""Student-facing mentor listings: the public directory and a student's own mentors."""
import math
from datetime import timedelta
from decimal import Decimal

from django.utils import timezone

from .dashboard import DAY_NAMES, MONTH_ABBR, as_number, round_half_up
from .models import Mentor, Mentorship, Session, UserProfile


DEFAULT_PRICE = 2500
DEFAULT_EXPERIENCE_YEARS = 6
ACTIVE_SESSION_WINDOW = timedelta(days=7)
FALLBACK_EXPERTISE = ["Mentorship"]

DOMAIN_KEYWORDS = [
    ("Design", ("design", "figma", "ux", "ui")),
    ("Data Science", ("data", "scientist", "ml", "ai", "python")),
    ("Product", ("product", "pm", "saas")),
    ("Marketing", ("marketing", "growth", "brand")),
]


def infer_domain(title, skills):
    haystack = [str(title or "").lower()] + [str(skill).lower() for skill in skills or []]
    for domain, keywords in DOMAIN_KEYWORDS:
        if any(keyword in text for keyword in keywords for text in haystack):
            return domain
    return "Software"


def availability_text(next_start, now):
    if next_start is None:
        return "Available Now"
    days = math.ceil((next_start - now).total_seconds() / 86400)
    if days <= 0:
        return "Available Now"
    if days == 1:
        return "Tomorrow"
    local = timezone.localtime(next_start)
    return f"{DAY_NAMES[local.weekday()][:3]} {local.day} {MONTH_ABBR[local.month - 1]}"


def initials(name):
    return "".join(part[0] for part in str(name or "").split() if part).upper()[:2]


def linkedin_fallback(name):
    slug = "-".join(str(name or "").lower().split())
    return f"https://www.linkedin.com/in/{slug}"


def _expertise(tags):
    return list(tags or [])[:3] or list(FALLBACK_EXPERTISE)


def _price(mentor, sessions):
    priced = [s.amount for s in sessions if s.amount and s.amount > 0]
    if priced:
        return round_half_up(sum(priced, Decimal(0)) / len(priced))
    if mentor.expected_hourly_rate:
        return as_number(mentor.expected_hourly_rate)
    return DEFAULT_PRICE


def mentor_card(mentor, external_id, sessions, now):
    name = mentor.name or "Mentor"
    upcoming = sorted(
        (s for s in sessions if s.status == "scheduled" and s.start_time > now),
        key=lambda s: s.start_time,
    )
    return {
        "id": external_id,
        "name": name,
        "role": "Mentor",
        "title": mentor.current_role or "Professional",
        "company": mentor.company or "Company",
        "avatarInitial": initials(name),
        "reviews": sum(1 for s in sessions if s.status == "completed"),
        "expertise": _expertise(mentor.specialization_tags),
        "price": _price(mentor, sessions),
        "availability": availability_text(upcoming[0].start_time if upcoming else None, now),
        "domain": infer_domain(mentor.current_role, mentor.specialization_tags),
        "experience": f"{mentor.total_experience_years or DEFAULT_EXPERIENCE_YEARS} Yrs",
        "verified": bool(mentor.is_verified),
        "linkedinUrl": mentor.linkedin_url or linkedin_fallback(name),
    }


def mentor_directory(now):
    mentors = list(Mentor.objects.select_related("user__userprofile").order_by("name", "id"))
    external_ids = {mentor.pk: mentor.external_id for mentor in mentors}
    sessions_by_mentor = {}
    for session in Session.objects.filter(mentor_id__in=[ext for ext in external_ids.values() if ext]):
        sessions_by_mentor.setdefault(session.mentor_id, []).append(session)

    cards = [
        mentor_card(mentor, external_ids[mentor.pk], sessions_by_mentor.get(external_ids[mentor.pk], []), now)
        for mentor in mentors
    ]
    avg_rate = round_half_up(Decimal(sum(card["price"] for card in cards)) / len(cards)) if cards else 0
    active_sessions = sum(
        1
        for group in sessions_by_mentor.values()
        for s in group
        if s.status == "scheduled" and now <= s.start_time <= now + ACTIVE_SESSION_WINDOW
    )
    return {
        "mentors": cards,
        "stats": {
            "totalMentors": len(cards),
            "avgHourlyRate": avg_rate,
            "activeSessions": active_sessions,
        },
    }


def student_mentors(student_external_id):
    mentor_ids = []
    mentorships = Mentorship.objects.filter(mentee_external_id=student_external_id).exclude(status="ended")
    for mentorship in mentorships.order_by("-updated_at", "-id"):
        if mentorship.mentor_id not in mentor_ids:
            mentor_ids.append(mentorship.mentor_id)
    if not mentor_ids:
        return {"mentors": [], "total": 0}

    profiles = {
        profile.external_id: profile
        for profile in UserProfile.objects.select_related("user").filter(external_id__in=mentor_ids)
    }
    mentors_by_user = {
        mentor.user_id: mentor
        for mentor in Mentor.objects.filter(user__in=[p.user for p in profiles.values()])
    }

    results = []
    for mentor_id in mentor_ids:
        profile = profiles.get(mentor_id)
        mentor = mentors_by_user.get(profile.user_id) if profile else None
        name = (mentor.name if mentor else "") or (profile.display_name if profile else "") or "Mentor"
        results.append(
            {
                "id": mentor_id,
                "name": name,
                "role": (mentor.current_role if mentor else "") or "Professional",
                "company": (mentor.company if mentor else "") or "Company",
                "expertise": _expertise(mentor.specialization_tags if mentor else None),
                "verified": bool(mentor and mentor.is_verified),
                "linkedinUrl": (mentor.linkedin_url if mentor else "") or linkedin_fallback(name),
            }
        )
    return {"mentors": results, "total": len(results)}
