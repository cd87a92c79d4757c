"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
from datetime import datetime, timedelta, timezone
import jwt

TOKEN_ALGORITHM: str = "HS256"


class TokenDecodeError(Exception):
    """ A token has a bad signature, is malformed or has expired. """


class TokenSignatureExpiredError(TokenDecodeError):
    """ A token is well formed and correctly signed but past its expiry. """


class TokenCodec:
    """
    Issues and validates signed tokens (HS256 JWTs) carrying a payload, an
    issuer, an audience and an expiry.

    Used for the session access tokens and for the links sent in
    verification emails.
    """

    def __init__(self, secret: str, issuer: str, audience: str):
        if not secret:
            raise ValueError("Token signing secret is not configured")

        self._secret: str = secret
        self._issuer: str = issuer
        self._audience: str = audience

    def sign(self, payload: dict, expires_in: int) -> str:
        """
        Sign a payload.

        Args:
            payload: JSON serialisable claims.
            expires_in: Seconds until the token expires.

        Returns:
            str: Encoded token.
        """
        now = datetime.now(timezone.utc)
        claims = dict(payload)
        claims.update({"iss": self._issuer,
                       "aud": self._audience,
                       "iat": now,
                       "exp": now + timedelta(seconds=expires_in)})
        return jwt.encode(claims, self._secret, algorithm=TOKEN_ALGORITHM)

    def verify(self, token: str) -> dict:
        """
        Validate a token and return its claims.

        Raises:
            TokenDecodeError: The token is not valid.
        """
        try:
            return jwt.decode(token,
                              self._secret,
                              algorithms=[TOKEN_ALGORITHM],
                              issuer=self._issuer,
                              audience=self._audience)

        except jwt.ExpiredSignatureError as ex:
            raise TokenSignatureExpiredError(str(ex)) from ex

        except jwt.PyJWTError as ex:
            raise TokenDecodeError(str(ex)) from ex
