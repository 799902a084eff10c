"""
Token service: issues and verifies signed, time-limited access tokens.

Tokens are simplejwt access tokens signed with SIMPLE_JWT["SIGNING_KEY"].
The subject claim carries the username and a `role` claim carries the role.
Lifetime comes from SIMPLE_JWT["ACCESS_TOKEN_LIFETIME"] (24h by default).
"""

from dataclasses import dataclass

from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import AccessToken

from common.exceptions import AuthError

ROLE_CLAIM = "role"


@dataclass(frozen=True)
class TokenClaims:
    username: str
    role: str


class RideAccessToken(AccessToken):
    """Access token carrying username (sub) and role claims."""

    def claims(self) -> TokenClaims:
        try:
            return TokenClaims(
                username=self[api_settings.USER_ID_CLAIM],
                role=self[ROLE_CLAIM],
            )
        except KeyError:
            raise AuthError("Token is missing identity claims")


def issue_token(username: str, role: str) -> str:
    token = RideAccessToken()
    token[api_settings.USER_ID_CLAIM] = username
    token[ROLE_CLAIM] = role
    return str(token)


def verify_token(raw_token) -> TokenClaims:
    """
    Validate signature, expiry and token type.

    Raises:
        AuthError: token is empty, malformed, expired, wrongly signed
            or lacks the identity claims
    """
    if not raw_token:
        raise AuthError("Token is required")
    try:
        token = RideAccessToken(raw_token)
    except TokenError as exc:
        raise AuthError(f"Invalid token: {exc}")
    return token.claims()
