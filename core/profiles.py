"""Student profile projection: personal info plus one timeline built from work, education and projects."""
from .models import UserProfile


TIMELINE_WORK = "work"
TIMELINE_EDUCATION = "education"
TIMELINE_PROJECT = "project"
TIMELINE_TYPES = (TIMELINE_WORK, TIMELINE_EDUCATION, TIMELINE_PROJECT)
PROJECT_SUBTITLE = "Personal Project"


def _text(value):
    return str(value).strip() if value not in (None, "") else ""


def _date(value):
    text = _text(value)
    return text or None


def location_text(location):
    if isinstance(location, str):
        return location.strip()
    location = location or {}
    return ", ".join(_text(location.get(key)) for key in ("city", "state", "country") if _text(location.get(key)))


def _work_item(index, entry):
    end = _date(entry.get("endDate"))
    return {
        "id": f"work-{index}",
        "type": TIMELINE_WORK,
        "title": _text(entry.get("role")),
        "subtitle": _text(entry.get("company")),
        "description": _text(entry.get("description")),
        "startDate": _date(entry.get("startDate")),
        "endDate": end,
        "isCurrent": end is None,
    }


def _education_item(index, entry):
    end = _date(entry.get("endYear"))
    return {
        "id": f"edu-{index}",
        "type": TIMELINE_EDUCATION,
        "title": _text(entry.get("degree")),
        "subtitle": _text(entry.get("school")),
        "description": _text(entry.get("major")),
        "startDate": _date(entry.get("startYear")),
        "endDate": end,
        "isCurrent": end is None,
    }


def _project_item(index, entry):
    return {
        "id": f"project-{index}",
        "type": TIMELINE_PROJECT,
        "title": _text(entry.get("name")),
        "subtitle": PROJECT_SUBTITLE,
        "description": _text(entry.get("description")),
        "startDate": _date(entry.get("startYear")),
        "endDate": _date(entry.get("endYear")),
        "isCurrent": False,
    }


def _recency(item):
    # Current entries first, then the latest end (or start) date; undated items sink.
    return (item["isCurrent"], item["endDate"] or item["startDate"] or "")


def student_timeline(student):
    items = []
    items.extend(_work_item(i, entry) for i, entry in enumerate(student.experiences or []) if isinstance(entry, dict))
    items.extend(_education_item(i, entry) for i, entry in enumerate(student.educations or []) if isinstance(entry, dict))
    items.extend(_project_item(i, entry) for i, entry in enumerate(student.projects or []) if isinstance(entry, dict))
    return sorted(items, key=_recency, reverse=True)


def _career_snapshot(timeline):
    current = next((item for item in timeline if item["type"] == TIMELINE_WORK and item["isCurrent"]), None)
    return {
        "currentRole": current["title"] if current else "",
        "currentCompany": current["subtitle"] if current else "",
    }


def student_profile_payload(student):
    user = student.user
    profile = UserProfile.objects.filter(user=user).first()
    timeline = student_timeline(student)
    return {
        "personalInfo": {
            "name": student.full_name or (profile.display_name if profile else "") or user.get_full_name(),
            "email": student.email or user.email,
            "phone": student.phone,
            "location": location_text(student.location),
            "linkedin": student.linkedin_url,
        },
        "careerSnapshot": _career_snapshot(timeline),
        "timelineItems": timeline,
        "skills": list(student.skills or []),
        "links": dict(student.links or {}),
        "awards": student.awards,
        "resumeFile": student.resume_file,
    }


def timeline_to_profile(items):
    """Split validated timeline items back into the stored experience, education and project lists."""
    experiences, educations, projects = [], [], []
    for item in items:
        kind = item["type"]
        end = None if item.get("isCurrent") else item.get("endDate")
        if kind == TIMELINE_WORK:
            experiences.append(
                {
                    "role": item["title"],
                    "company": item.get("subtitle", ""),
                    "description": item.get("description", ""),
                    "startDate": item.get("startDate"),
                    "endDate": end,
                }
            )
        elif kind == TIMELINE_EDUCATION:
            educations.append(
                {
                    "degree": item["title"],
                    "school": item.get("subtitle", ""),
                    "major": item.get("description", ""),
                    "startYear": item.get("startDate"),
                    "endYear": end,
                }
            )
        else:
            projects.append(
                {
                    "name": item["title"],
                    "description": item.get("description", ""),
                    "startYear": item.get("startDate"),
                    "endYear": item.get("endDate"),
                }
            )
    return {"experiences": experiences, "educations": educations, "projects": projects}
