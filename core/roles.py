import logging
from dataclasses import dataclass
from typing import Optional

from django.db import DatabaseError

from .models import Founder, Mentor, Student


logger = logging.getLogger(__name__)

ROLE_MENTOR = "mentor"
ROLE_STUDENT = "student"
ROLE_FOUNDER = "founder"
ROLE_PRIORITY = (ROLE_MENTOR, ROLE_STUDENT, ROLE_FOUNDER)

_CONTEXT_ATTR = "_role_context"


@dataclass
class RoleContext:
    user: object = None
    mentor: Optional[Mentor] = None
    student: Optional[Student] = None
    founder: Optional[Founder] = None

    @property
    def role(self):
        for name in ROLE_PRIORITY:
            if getattr(self, name) is not None:
                return name
        return None

    def has(self, role):
        return getattr(self, role, None) is not None


def optional_lookup(model, user):
    """A profile lookup whose failure yields None instead of failing the request."""
    try:
        return model.objects.filter(user=user).first()
    except DatabaseError:
        logger.exception("%s lookup failed for user %s", model.__name__, getattr(user, "pk", None))
        return None


def resolve_roles(user) -> RoleContext:
    if not user or not user.is_authenticated:
        return RoleContext()
    return RoleContext(
        user=user,
        mentor=optional_lookup(Mentor, user),
        student=optional_lookup(Student, user),
        founder=optional_lookup(Founder, user),
    )


def get_role_context(request) -> RoleContext:
    cached = getattr(request, _CONTEXT_ATTR, None)
    if cached is not None:
        return cached
    try:
        context = resolve_roles(request.user)
    except Exception:
        logger.exception("Role resolution failed, continuing without role context")
        context = RoleContext(user=request.user)
    setattr(request, _CONTEXT_ATTR, context)
    return context


def reset_role_context(request):
    if hasattr(request, _CONTEXT_ATTR):
        delattr(request, _CONTEXT_ATTR)
