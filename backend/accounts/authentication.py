from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.authentication import JWTAuthentication

from common.exceptions import AuthError
from .stores import get_user_store
from .tokens import verify_token


class RoleTokenAuthentication(JWTAuthentication):
    """
    Resolve the caller from `Authorization: Bearer <token>`.

    On success `request.user` is the User looked up by the username claim and
    `request.auth` is the verified TokenClaims (username + role).
    """

    def authenticate(self, request):
        header = self.get_header(request)
        if header is None:
            return None

        raw_token = self.get_raw_token(header)
        if raw_token is None:
            return None

        try:
            claims = verify_token(raw_token)
        except AuthError as exc:
            raise AuthenticationFailed(exc.message, code="token_not_valid")

        user = get_user_store().get_by_username(claims.username)
        if user is None or not user.is_active:
            raise AuthenticationFailed(f"User not found: {claims.username}", code="user_not_found")

        return user, claims
