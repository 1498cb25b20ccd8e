from rest_framework.permissions import BasePermission

from .auth import external_id_for
from .exceptions import ActiveRoleMismatch, MissingFields, OwnershipMismatch, RoleNotProvisioned
from .roles import ROLE_MENTOR, ROLE_STUDENT, get_role_context


ACTIVE_ROLE_HEADER = "HTTP_X_ACTIVE_ROLE"


def active_role(request):
    return request.META.get(ACTIVE_ROLE_HEADER, "").strip().lower() or None


def check_role(request, role):
    context = get_role_context(request)
    if not context.has(role):
        raise RoleNotProvisioned(role)
    selected = active_role(request)
    if selected and selected != role:
        raise ActiveRoleMismatch(role, selected)
    return context


def requires_role(role):
    class RolePermission(BasePermission):
        required_role = role

        def has_permission(self, request, view):
            if not request.user or not request.user.is_authenticated:
                return False
            check_role(request, self.required_role)
            return True

    RolePermission.__name__ = f"Is{role.capitalize()}"
    return RolePermission


IsMentor = requires_role(ROLE_MENTOR)
IsStudent = requires_role(ROLE_STUDENT)


def require_query_param(request, name):
    value = str(request.query_params.get(name, "") or "").strip()
    if not value:
        raise MissingFields([name], detail=f"{name} is required")
    return value


def ensure_owner(request, claimed_external_id):
    if str(claimed_external_id) != str(external_id_for(request.user)):
        raise OwnershipMismatch()
    return claimed_external_id
