import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass
from typing import Optional

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.utils import timezone

from .models import Mentorship, UserProfile


logger = logging.getLogger(__name__)
User = get_user_model()


class IdentityProviderError(Exception):
    pass


@dataclass(frozen=True)
class ProviderUser:
    external_id: str
    email: str = ""
    name: str = ""


def _primary_email(payload):
    addresses = payload.get("email_addresses") or []
    primary_id = payload.get("primary_email_address_id")
    for item in addresses:
        if item.get("id") == primary_id and item.get("email_address"):
            return item["email_address"]
    for item in addresses:
        if item.get("email_address"):
            return item["email_address"]
    return ""


def _display_name(payload, email):
    full_name = " ".join(
        part for part in (payload.get("first_name"), payload.get("last_name")) if part
    ).strip()
    return full_name or payload.get("username") or email or "User"


def _request_provider_user(external_id):
    secret = settings.CLERK_SECRET_KEY
    if not secret:
        raise IdentityProviderError("Identity provider secret key is not configured.")
    url = f"{settings.CLERK_API_URL}/users/{urllib.parse.quote(external_id, safe='')}"
    request = urllib.request.Request(url, method="GET")
    request.add_header("Authorization", f"Bearer {secret}")
    request.add_header("Accept", "application/json")
    try:
        with urllib.request.urlopen(request, timeout=10) as response:
            return json.loads(response.read().decode("utf-8"))
    except urllib.error.HTTPError as exc:
        raise IdentityProviderError(f"Identity provider returned {exc.code}.") from exc
    except (urllib.error.URLError, TimeoutError, ValueError) as exc:
        raise IdentityProviderError(str(exc)) from exc


def fetch_provider_user(external_id) -> ProviderUser:
    """Look the user up at the identity provider, falling back to id-only data."""
    try:
        payload = _request_provider_user(external_id)
    except IdentityProviderError as exc:
        logger.warning("Identity provider lookup failed for %s: %s", external_id, exc)
        return ProviderUser(external_id=external_id)
    email = _primary_email(payload).strip().lower()
    return ProviderUser(
        external_id=external_id,
        email=email,
        name=_display_name(payload, email),
    )


def _apply_provider_fields(user, profile, provider_user):
    user_fields = []
    if provider_user.email and user.email != provider_user.email:
        user.email = provider_user.email
        user_fields.append("email")
    if user_fields:
        user.save(update_fields=user_fields)

    profile_fields = []
    display_name = provider_user.name or profile.display_name or user.username or user.email or "User"
    if profile.display_name != display_name:
        profile.display_name = display_name
        profile_fields.append("display_name")
    if profile_fields:
        profile_fields.append("updated_at")
        profile.save(update_fields=profile_fields)


def _find_by_external_id(external_id):
    profile = UserProfile.objects.select_related("user").filter(external_id=external_id).first()
    if profile:
        return profile.user, profile
    return None, None


def _adopt_legacy_user(provider_user):
    """Attach the external id to a local user with the same email that has no profile yet."""
    if not provider_user.email:
        return None, None
    user = (
        User.objects.filter(email__iexact=provider_user.email, userprofile__isnull=True)
        .order_by("id")
        .first()
    )
    if user is None:
        return None, None
    with transaction.atomic():
        profile = UserProfile.objects.create(
            user=user,
            external_id=provider_user.external_id,
            display_name=provider_user.name or user.username or provider_user.email,
        )
    return user, profile


def _find_existing(provider_user):
    user, profile = _find_by_external_id(provider_user.external_id)
    if user is None:
        user, profile = _adopt_legacy_user(provider_user)
    return user, profile


def _create(provider_user):
    with transaction.atomic():
        user = User.objects.create(
            username=provider_user.external_id[:150],
            email=provider_user.email,
        )
        user.set_unusable_password()
        user.save(update_fields=["password"])
        profile = UserProfile.objects.create(
            user=user,
            external_id=provider_user.external_id,
            display_name=provider_user.name or provider_user.email or "User",
        )
    return user, profile


def sync_user(provider_user: ProviderUser):
    """Find or create the local user for an identity-provider account."""
    try:
        user, profile = _find_existing(provider_user)
        if user is None:
            user, profile = _create(provider_user)
    except IntegrityError:
        logger.info("Concurrent sign-in for %s, re-reading user", provider_user.external_id)
        user, profile = _find_by_external_id(provider_user.external_id)
        if user is None:
            raise
    _apply_provider_fields(user, profile, provider_user)
    return user


def claim_invited_mentorships(external_id: str, email: Optional[str]) -> int:
    email = (email or "").strip().lower()
    if not external_id or not email:
        return 0
    claimed = (
        Mentorship.objects.filter(mentee_email=email)
        .filter(mentee_external_id__isnull=True)
        .update(mentee_external_id=external_id, status="active", updated_at=timezone.now())
    )
    if claimed:
        logger.info("Claimed %s invited mentorship(s) for %s", claimed, external_id)
    return claimed
