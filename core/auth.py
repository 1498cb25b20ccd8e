from django.conf import settings
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import UntypedToken

from .exceptions import AuthenticationUnavailable
from .identity import fetch_provider_user, sync_user


DEV_USER_HEADER = "HTTP_X_DEV_USER_ID"


def external_id_for(user):
    if not user or not user.is_authenticated:
        return None
    try:
        return user.userprofile.external_id
    except AttributeError:
        return None


class IdentityProviderAuthentication(JWTAuthentication):
    """
    Verifies identity-provider session tokens against the provider's JWKS and
    maps the `sub` claim onto a local user.
    """

    def authenticate(self, request):
        if not settings.CLERK_JWKS_URL:
            return self._authenticate_without_provider(request)
        return super().authenticate(request)

    def _authenticate_without_provider(self, request):
        if not settings.DEBUG:
            raise AuthenticationUnavailable()
        external_id = request.META.get(DEV_USER_HEADER, "").strip()
        if not external_id:
            return None
        return self.sync_external_id(external_id), None

    def get_validated_token(self, raw_token):
        try:
            return UntypedToken(raw_token)
        except TokenError as exc:
            raise InvalidToken(
                {
                    "detail": "Given token not valid for any token type",
                    "messages": [{"message": exc.args[0] if exc.args else str(exc)}],
                }
            ) from exc

    def get_user(self, validated_token):
        try:
            external_id = validated_token[api_settings.USER_ID_CLAIM]
        except KeyError as exc:
            raise InvalidToken("Token contained no recognizable user identification") from exc
        return self.sync_external_id(str(external_id))

    def sync_external_id(self, external_id):
        return sync_user(fetch_provider_user(external_id))
