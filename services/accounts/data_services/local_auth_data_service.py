"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
import logging
import typing
import uuid
from accounts_settings import AccountsSettings
from data_access_layer.credential_store import CredentialStore
from data_services.base_data_service import (AbortTransaction,
                                             BaseDataService,
                                             build_auth_response,
                                             sanitize_user)
from data_services.device_session_data_service import (
    DeviceInfo, DeviceSessionDataService)
from data_services.login_activity_data_service import \
    LoginActivityDataService
from data_services.verification_token_data_service import \
    VerificationTokenDataService
from database.enums import UserStatus, VerificationActionType
from external_services.email_dispatcher import EmailDispatcher, EmailSubject
from external_services.password_hasher import PasswordHasher
from external_services.token_codec import TokenCodec, TokenDecodeError
from service_errors import (ConflictError, InvalidDataError,
                            RecordNotFoundError, UnauthorizedError)
from service_result import failure, ok, ServiceResult, ServiceStatus

USER_NOT_FOUND: str = "User not found"
INVALID_CREDENTIALS: str = "Invalid credentials"
PASSWORD_MISMATCH: str = "Password and confirm password do not match"


class LocalAuthDataService(BaseDataService):
    """
    Email and password based identity: registration through a verified
    email, login guarded by the lockout policy, and password reset.
    """
    # pylint: disable=too-many-instance-attributes

    def __init__(self, store: CredentialStore,
                 verification_tokens: VerificationTokenDataService,
                 login_activity: LoginActivityDataService,
                 device_sessions: DeviceSessionDataService,
                 password_hasher: PasswordHasher,
                 token_codec: TokenCodec,
                 email_dispatcher: EmailDispatcher,
                 settings: AccountsSettings,
                 logger: logging.Logger):
        # pylint: disable=too-many-arguments, too-many-positional-arguments
        super().__init__(store, logger.getChild(__name__))
        self._verification_tokens = verification_tokens
        self._login_activity = login_activity
        self._device_sessions = device_sessions
        self._password_hasher = password_hasher
        self._token_codec = token_codec
        self._email_dispatcher = email_dispatcher
        self._settings = settings

    async def send_email_register(self, email: str) -> ServiceResult:
        """
        Start (or restart) registration of an email address. An unknown
        address gets a PENDING user, then a REGISTER token is emailed.
        """
        try:
            user = await self._store.users.get_by_email(email)

            if user is None:
                user = await self._store.users.create_pending_user(email)

            elif user["status"] != UserStatus.PENDING.value:
                return failure(ServiceStatus.CONFLICT,
                               ConflictError("User already exists"))

            return await self._verification_tokens.request_token(
                user, VerificationActionType.REGISTER)

        except Exception as ex:  # pylint: disable=broad-exception-caught
            return self._failure_from_exception("send_email_register", ex)

    async def register(self, user_id: uuid.UUID, password: str,
                       confirm_password: str, policies: list,
                       name: typing.Optional[str],
                       username: str) -> ServiceResult:
        """
        Complete registration: set the profile and password of a PENDING
        user, activate it and record the accepted policies, atomically.
        The user's REGISTER token must have been completed from its email
        link, and is used up by a successful registration.

        Returns:
            ServiceResult: OK with the sanitized user, an access token and
            ``is_first_time_login`` set. UNAUTHORIZED when there is no
            completed, unclaimed REGISTER token.
        """
        # pylint: disable=too-many-arguments, too-many-positional-arguments
        if password != confirm_password:
            return failure(ServiceStatus.BAD_REQUEST,
                           InvalidDataError(PASSWORD_MISMATCH))

        try:
            user = await self._store.users.get_by_id(user_id)
            if user is None:
                return failure(ServiceStatus.NOT_FOUND,
                               RecordNotFoundError(USER_NOT_FOUND))

            if user["status"] == UserStatus.ACTIVATED.value:
                return failure(ServiceStatus.CONFLICT,
                               ConflictError("User already activated"))

            holder = await self._store.users.get_by_username(username)
            if holder is not None and holder["id"] != user["id"]:
                return failure(ServiceStatus.CONFLICT,
                               ConflictError("Username already exists"))

            password_hash = self._password_hasher.hash(password)

            async def _activate() -> dict:
                await self._claim_token(user_id,
                                        VerificationActionType.REGISTER)
                activated = await self._store.users.activate_user(
                    user_id, name, username, password_hash)
                if activated is None:
                    raise AbortTransaction(failure(
                        ServiceStatus.NOT_FOUND,
                        RecordNotFoundError(USER_NOT_FOUND)))
                await self._store.policies.create_user_policies(
                    user_id, list(policies or []))
                return activated

            activated = await self._store.run_in_transaction(_activate)

            self._logger.info("User %s completed registration", user_id)
            return ok(build_auth_response(
                self._token_codec, self._settings.access_token_expires_in,
                activated, is_first_time_login=True))

        except Exception as ex:  # pylint: disable=broad-exception-caught
            return self._failure_from_exception("register", ex)

    async def login(self, email: str, password: str,
                    device: typing.Optional[DeviceInfo] = None
                    ) -> ServiceResult:
        """
        Password login.

        The lockout policy is consulted before the user is even looked up.
        Unknown users, federated-only users, deactivated users and wrong
        passwords all get the same UNAUTHORIZED answer. Recording the
        attempt in the activity log is left to the caller.
        """
        lockout = await self._login_activity.check_recent_login_attempts(
            email)
        if not lockout.is_success:
            return lockout

        try:
            user = await self._store.users.get_by_email(email)
            if user is None:
                return failure(ServiceStatus.UNAUTHORIZED,
                               UnauthorizedError(INVALID_CREDENTIALS))

            if user["status"] == UserStatus.PENDING.value:
                return failure(ServiceStatus.CONFLICT,
                               ConflictError("User not activated"))

            if user["status"] != UserStatus.ACTIVATED.value or \
                    not user["password_hash"]:
                return failure(ServiceStatus.UNAUTHORIZED,
                               UnauthorizedError(INVALID_CREDENTIALS))

            if not self._password_hasher.verify(password,
                                                user["password_hash"]):
                return failure(ServiceStatus.UNAUTHORIZED,
                               UnauthorizedError(INVALID_CREDENTIALS))

            user = await self._store.users.update_latest_login(user["id"])
            if user is None:
                return failure(ServiceStatus.NOT_FOUND,
                               RecordNotFoundError(USER_NOT_FOUND))

            if device is not None:
                tracked = await self._device_sessions.track_login(
                    email, user["id"], device)
                if not tracked.is_success:
                    return tracked

            return ok(build_auth_response(
                self._token_codec, self._settings.access_token_expires_in,
                user, is_first_time_login=False))

        except Exception as ex:  # pylint: disable=broad-exception-caught
            return self._failure_from_exception("local_login", ex)

    async def send_email_reset_password(self, email: str) -> ServiceResult:
        try:
            user = await self._store.users.get_by_email(email)
            if user is None:
                return failure(ServiceStatus.NOT_FOUND,
                               RecordNotFoundError(USER_NOT_FOUND))

            if user["status"] != UserStatus.ACTIVATED.value:
                return failure(ServiceStatus.CONFLICT,
                               ConflictError("User not activated"))

            return await self._verification_tokens.request_token(
                user, VerificationActionType.RESET_PASSWORD)

        except Exception as ex:  # pylint: disable=broad-exception-caught
            return self._failure_from_exception("send_email_reset_password",
                                                ex)

    async def reset_password(self, user_id: uuid.UUID, password: str,
                             confirm_password: str) -> ServiceResult:
        """
        Replace the password of a user, nothing else is changed. The user's
        RESET_PASSWORD token must have been completed from its email link
        and is used up by the reset.
        """
        if password != confirm_password:
            return failure(ServiceStatus.BAD_REQUEST,
                           InvalidDataError(PASSWORD_MISMATCH))

        try:
            password_hash = self._password_hasher.hash(password)

            async def _replace_password() -> dict:
                await self._claim_token(
                    user_id, VerificationActionType.RESET_PASSWORD)
                updated = await self._store.users.update_password(
                    user_id, password_hash)
                if updated is None:
                    raise AbortTransaction(failure(
                        ServiceStatus.NOT_FOUND,
                        RecordNotFoundError(USER_NOT_FOUND)))
                return updated

            user = await self._store.run_in_transaction(_replace_password)

            self._logger.info("Password of user %s was reset", user_id)
            await self._email_dispatcher.send(
                to=user["email"],
                subject=EmailSubject.PASSWORD_CHANGED,
                template_id=self._settings.email_templates.change_password,
                template_data={"name": user["name"]})

            return ok(sanitize_user(user))

        except Exception as ex:  # pylint: disable=broad-exception-caught
            return self._failure_from_exception("reset_password", ex)

    async def _claim_token(self, user_id: uuid.UUID,
                           action_type: VerificationActionType) -> None:
        claim = await self._verification_tokens.claim_verified(user_id,
                                                               action_type)
        if not claim.is_success:
            self._logger.warning("%s for user %s refused: %s",
                                 action_type.value, user_id, claim.data)
            raise AbortTransaction(claim)

    async def verify_email(self, token: str,
                           action_type: VerificationActionType
                           ) -> ServiceResult:
        return await self._verification_tokens.complete_token(token,
                                                              action_type)

    async def validate_access_token(self, access_token: str) -> ServiceResult:
        """
        Resolve the user an access token was issued to.

        Returns:
            ServiceResult: OK with the sanitized user, UNAUTHORIZED when the
            token is invalid or its user no longer exists.
        """
        try:
            payload = self._token_codec.verify(access_token)
            user_id = uuid.UUID(str(payload.get("id")))

        except (TokenDecodeError, ValueError):
            return failure(ServiceStatus.UNAUTHORIZED,
                           UnauthorizedError("Invalid token"))

        try:
            user = await self._store.users.get_by_id(user_id)
            if user is None:
                return failure(ServiceStatus.UNAUTHORIZED,
                               UnauthorizedError())

            return ok(sanitize_user(user))

        except Exception as ex:  # pylint: disable=broad-exception-caught
            return self._failure_from_exception("validate_access_token", ex)
