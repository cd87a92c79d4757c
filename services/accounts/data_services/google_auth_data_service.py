"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
from dataclasses import dataclass
import logging
import typing
from accounts_settings import AccountsSettings
from palisade_common.data_access_errors import DuplicateRecordError
from data_access_layer.credential_store import CredentialStore
from data_services.base_data_service import (BaseDataService,
                                             build_auth_response)
from data_services.device_session_data_service import (
    DeviceInfo, DeviceSessionDataService)
from database.enums import AuthProviderName
from external_services.google_identity_client import (GoogleIdentityClient,
                                                      IdTokenRejectedError)
from external_services.token_codec import TokenCodec
from service_errors import (AuthProviderMismatchError, ConflictError,
                            GoogleIdTokenMissingScopeError,
                            InvalidTokenError)
from service_result import failure, ok, ServiceResult, ServiceStatus

REQUIRED_CLAIMS: tuple = ("sub", "email", "name")


@dataclass(frozen=True)
class GoogleIdentity:
    """ The claims of a verified Google ID token the service relies on. """
    subject: str
    email: str
    name: str


async def verify_google_identity(client: GoogleIdentityClient,
                                 client_id: str, id_token: str,
                                 logger: logging.Logger
                                 ) -> typing.Union[GoogleIdentity,
                                                   ServiceResult]:
    """
    Verify a Google ID token and extract the identity it asserts.

    Returns:
        The identity, or an UNAUTHORIZED result when Google rejects the
        token or it lacks one of the ``sub``, ``email`` and ``name`` claims.
    """
    try:
        claims = await client.verify_id_token(id_token, client_id)

    except IdTokenRejectedError as ex:
        logger.warning("Google ID token rejected: %s", ex)
        return failure(ServiceStatus.UNAUTHORIZED, InvalidTokenError())

    if any(not claims.get(claim) for claim in REQUIRED_CLAIMS):
        return failure(ServiceStatus.UNAUTHORIZED,
                       GoogleIdTokenMissingScopeError())

    return GoogleIdentity(subject=str(claims["sub"]),
                          email=claims["email"],
                          name=claims["name"])


class GoogleAuthDataService(BaseDataService):
    """
    Sign in with Google.

    An identity is matched to a user through its Google link first and the
    email address second. A user found by email but without a link (it was
    unlinked earlier) is linked again and signed in. A user found by email
    that is linked to another Google account is refused.
    """

    def __init__(self, store: CredentialStore,
                 google_identity_client: GoogleIdentityClient,
                 device_sessions: DeviceSessionDataService,
                 token_codec: TokenCodec,
                 settings: AccountsSettings,
                 logger: logging.Logger):
        # pylint: disable=too-many-arguments, too-many-positional-arguments
        super().__init__(store, logger.getChild(__name__))
        self._google_identity_client = google_identity_client
        self._device_sessions = device_sessions
        self._token_codec = token_codec
        self._settings = settings

    async def login(self, id_token: str,
                    device: typing.Optional[DeviceInfo] = None
                    ) -> ServiceResult:
        """
        Sign in (or sign up) with a Google ID token.

        Returns:
            ServiceResult: OK with the sanitized user, an access token and
            ``is_first_time_login``, true only when the user was created.
        """
        try:
            identity = await verify_google_identity(
                self._google_identity_client,
                self._settings.google_client_id, id_token, self._logger)
            if isinstance(identity, ServiceResult):
                return identity

            is_first_time_login = False
            link = await self._store.auth_providers.get_by_provider_user_id(
                AuthProviderName.GOOGLE.value, identity.subject)

            if link is not None:
                user = await self._store.users.update_latest_login(
                    link["user_id"])
                if user is None:
                    self._logger.error("Google link %s has no user",
                                       link["id"])
                    return failure(ServiceStatus.UNAUTHORIZED,
                                   AuthProviderMismatchError())

            else:
                user = await self._store.users.get_by_email(identity.email)

                if user is None:
                    user = await self._store.run_in_transaction(
                        lambda: self._create_user(identity))
                    is_first_time_login = True

                else:
                    other_link = await self._store.auth_providers \
                        .get_for_user(user["id"],
                                      AuthProviderName.GOOGLE.value)
                    if other_link is not None:
                        self._logger.warning(
                            "User %s is linked to another Google account",
                            user["id"])
                        return failure(ServiceStatus.UNAUTHORIZED,
                                       AuthProviderMismatchError())

                    user = await self._store.run_in_transaction(
                        lambda: self._relink_user(user, identity))
                    if user is None:
                        return failure(ServiceStatus.UNAUTHORIZED,
                                       AuthProviderMismatchError())

            if device is not None:
                tracked = await self._device_sessions.track_login(
                    user["email"], user["id"], device)
                if not tracked.is_success:
                    return tracked

            return ok(build_auth_response(
                self._token_codec, self._settings.access_token_expires_in,
                user, is_first_time_login))

        except DuplicateRecordError as ex:
            self._logger.warning("Concurrent Google sign in (%s)",
                                 ex.constraint)
            return failure(ServiceStatus.CONFLICT,
                           ConflictError("User already exists"))

        except Exception as ex:  # pylint: disable=broad-exception-caught
            return self._failure_from_exception("google_login", ex)

    async def _create_user(self, identity: GoogleIdentity) -> dict:
        user = await self._store.users.create_activated_user(identity.email,
                                                             identity.name)
        await self._store.auth_providers.create(
            user["id"], AuthProviderName.GOOGLE.value, identity.subject,
            identity.email)
        await self._accept_all_policies(user["id"])
        return user

    async def _relink_user(self, user: dict,
                           identity: GoogleIdentity) -> typing.Optional[dict]:
        updated = await self._store.users.reactivate_for_provider(
            user["id"], identity.name)
        if updated is None:
            return None

        await self._accept_all_policies(user["id"])
        await self._store.auth_providers.create(
            user["id"], AuthProviderName.GOOGLE.value, identity.subject,
            identity.email)
        self._logger.info("Re-linked user %s to Google", user["id"])
        return updated

    async def _accept_all_policies(self, user_id) -> None:
        policies = await self._store.policies.list_policies()
        await self._store.policies.create_user_policies(
            user_id, [policy["id"] for policy in policies])
