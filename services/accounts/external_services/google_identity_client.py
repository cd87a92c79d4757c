"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
import asyncio
import typing
from google.auth import exceptions as google_auth_exceptions
import google.auth.transport.requests
import google.oauth2.id_token
import requests


class IdTokenRejectedError(Exception):
    """ Google did not accept the ID token (signature, audience, expiry). """


class IdentityProviderUnavailableError(Exception):
    """ Google could not be reached to fetch its signing certificates. """


class GoogleIdentityClient:
    """
    Verifies Google ID tokens.

    google-auth is synchronous, so verification runs in a worker thread.
    """

    def __init__(self, session: typing.Optional[requests.Session] = None):
        self._session = session or requests.Session()

    async def verify_id_token(self, id_token: str, audience: str) -> dict:
        """
        Verify an ID token and return its claims.

        Raises:
            IdTokenRejectedError: The token is not valid for the audience.
            IdentityProviderUnavailableError: Google could not be reached.
        """
        return await asyncio.to_thread(self._verify, id_token, audience)

    def _verify(self, id_token: str, audience: str) -> dict:
        request = google.auth.transport.requests.Request(
            session=self._session)

        try:
            claims = google.oauth2.id_token.verify_oauth2_token(
                id_token, request, audience)

        except google_auth_exceptions.TransportError as ex:
            raise IdentityProviderUnavailableError(str(ex)) from ex

        except (ValueError, google_auth_exceptions.GoogleAuthError) as ex:
            raise IdTokenRejectedError(str(ex)) from ex

        return claims or {}
