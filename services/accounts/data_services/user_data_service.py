"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
from dataclasses import dataclass, fields
import logging
import typing
import uuid
from accounts_settings import AccountsSettings
from data_access_layer.accounts_data_access_layer import utc_now
from data_access_layer.credential_store import CredentialStore
from data_services.base_data_service import BaseDataService, sanitize_user
from data_services.google_auth_data_service import verify_google_identity
from data_services.verification_token_data_service import \
    VerificationTokenDataService
from database.enums import (AuthProviderName, UserStatus,
                            VerificationActionType)
from external_services.email_dispatcher import EmailDispatcher, EmailSubject
from external_services.google_identity_client import GoogleIdentityClient
from external_services.password_hasher import PasswordHasher
from service_errors import ConflictError, RecordNotFoundError
from service_result import (created, failure, ok, ServiceResult,
                            ServiceStatus)

USER_NOT_FOUND: str = "User not found"


@dataclass(frozen=True)
class UserUpdate:
    """
    Profile fields a user may change. None means "leave unchanged".

    Attributes:
        name (str): Display name.
        username (str): New unique username.
        bio (str): Biography.
        phone_number (str): Phone number.
        image_url (str): Profile image URL.
        password (str): New plaintext password, hashed before it is stored.
    """
    name: typing.Optional[str] = None
    username: typing.Optional[str] = None
    bio: typing.Optional[str] = None
    phone_number: typing.Optional[str] = None
    image_url: typing.Optional[str] = None
    password: typing.Optional[str] = None


def merge_user_update(update: UserUpdate,
                      password_hasher: PasswordHasher) -> dict:
    """
    Turn an update into the column changes to write. Only fields declared
    on ``UserUpdate`` and given a value are included; the password is
    written as its hash.
    """
    changes: dict = {}

    for update_field in fields(UserUpdate):
        value = getattr(update, update_field.name)
        if value is None:
            continue

        if update_field.name == "password":
            changes["password_hash"] = password_hasher.hash(value)
        else:
            changes[update_field.name] = value

    return changes


class UserDataService(BaseDataService):
    """
    Account management of signed up users: profile, username availability,
    soft delete and restore, and the Google link.
    """
    # pylint: disable=too-many-instance-attributes

    def __init__(self, store: CredentialStore,
                 verification_tokens: VerificationTokenDataService,
                 password_hasher: PasswordHasher,
                 email_dispatcher: EmailDispatcher,
                 google_identity_client: GoogleIdentityClient,
                 settings: AccountsSettings,
                 logger: logging.Logger):
        # pylint: disable=too-many-arguments, too-many-positional-arguments
        super().__init__(store, logger.getChild(__name__))
        self._verification_tokens = verification_tokens
        self._password_hasher = password_hasher
        self._email_dispatcher = email_dispatcher
        self._google_identity_client = google_identity_client
        self._settings = settings

    async def get_user(self, user_id: uuid.UUID) -> ServiceResult:
        try:
            user = await self._store.users.get_by_id(user_id)
            if user is None:
                return failure(ServiceStatus.NOT_FOUND,
                               RecordNotFoundError(USER_NOT_FOUND))
            return ok(sanitize_user(user))

        except Exception as ex:  # pylint: disable=broad-exception-caught
            return self._failure_from_exception("get_user", ex)

    async def check_username(self, username: str) -> ServiceResult:
        """ OK with ``{"available": bool}``. """
        try:
            holder = await self._store.users.get_by_username(username)
            return ok({"available": holder is None})

        except Exception as ex:  # pylint: disable=broad-exception-caught
            return self._failure_from_exception("check_username", ex)

    async def update_user(self, user_id: uuid.UUID,
                          update: UserUpdate) -> ServiceResult:
        """
        Change profile fields of a user.

        A username that is already in use, the user's own included, and a
        new password equal to the current one are both CONFLICT.
        """
        try:
            user = await self._store.users.get_by_id(user_id)
            if user is None:
                return failure(ServiceStatus.NOT_FOUND,
                               RecordNotFoundError(USER_NOT_FOUND))

            if update.username is not None and \
                    await self._store.users.get_by_username(update.username):
                return failure(ServiceStatus.CONFLICT,
                               ConflictError("Username already exists"))

            if update.password is not None and \
                    self._password_hasher.verify(update.password,
                                                 user["password_hash"]):
                return failure(ServiceStatus.CONFLICT,
                               ConflictError("Duplicate password."))

            changes = merge_user_update(update, self._password_hasher)
            updated = await self._store.users.update_profile(user_id, changes)
            if updated is None:
                return failure(ServiceStatus.NOT_FOUND,
                               RecordNotFoundError(USER_NOT_FOUND))

            if "password_hash" in changes:
                await self._email_dispatcher.send(
                    to=updated["email"],
                    subject=EmailSubject.PASSWORD_CHANGED,
                    template_id=self._settings.email_templates
                    .change_password,
                    template_data={"name": updated["name"]})

            return ok(sanitize_user(updated))

        except Exception as ex:  # pylint: disable=broad-exception-caught
            return self._failure_from_exception("update_user", ex)

    async def send_email_delete_account(self,
                                        user_id: uuid.UUID) -> ServiceResult:
        """ Email an activated user the link that confirms deletion. """
        try:
            user = await self._store.users.get_by_id(user_id)
            if user is None:
                return failure(ServiceStatus.NOT_FOUND,
                               RecordNotFoundError(USER_NOT_FOUND))

            if user["status"] != UserStatus.ACTIVATED.value:
                return failure(ServiceStatus.CONFLICT,
                               ConflictError("User not activated"))

            if user["deleted_at"] is not None:
                return failure(ServiceStatus.CONFLICT,
                               ConflictError("User already deleted"))

            return await self._verification_tokens.request_token(
                user, VerificationActionType.DELETE_ACCOUNT)

        except Exception as ex:  # pylint: disable=broad-exception-caught
            return self._failure_from_exception("send_email_delete_account",
                                                ex)

    async def delete_account(self, signed_token: str) -> ServiceResult:
        """ Soft delete the user a DELETEACCOUNT token was issued to. """
        completed = await self._verification_tokens.complete_token(
            signed_token, VerificationActionType.DELETE_ACCOUNT)
        if not completed.is_success:
            return completed

        try:
            user = await self._store.users.set_deleted_at(
                completed.data["user_id"], utc_now())
            if user is None:
                return failure(ServiceStatus.NOT_FOUND,
                               RecordNotFoundError(USER_NOT_FOUND))

            self._logger.info("User %s deleted their account", user["id"])
            await self._email_dispatcher.send(
                to=user["email"],
                subject=EmailSubject.DELETE_ACCOUNT_SUCCESS,
                template_id=self._settings.email_templates
                .delete_account_success,
                template_data={"name": user["name"]})

            return ok(sanitize_user(user))

        except Exception as ex:  # pylint: disable=broad-exception-caught
            return self._failure_from_exception("delete_account", ex)

    async def restore_user(self, user_id: uuid.UUID) -> ServiceResult:
        """ Undo a soft delete. """
        try:
            user = await self._store.users.get_by_id(user_id)
            if user is None:
                return failure(ServiceStatus.NOT_FOUND,
                               RecordNotFoundError(USER_NOT_FOUND))

            if user["deleted_at"] is None:
                return failure(ServiceStatus.CONFLICT,
                               ConflictError("User is not deleted"))

            user = await self._store.users.set_deleted_at(user_id, None)
            if user is None:
                return failure(ServiceStatus.NOT_FOUND,
                               RecordNotFoundError(USER_NOT_FOUND))

            self._logger.info("User %s restored", user_id)
            await self._email_dispatcher.send(
                to=user["email"],
                subject=EmailSubject.RESTORE_ACCOUNT_SUCCESS,
                template_id=self._settings.email_templates
                .restore_account_success,
                template_data={"name": user["name"]})

            return ok(sanitize_user(user))

        except Exception as ex:  # pylint: disable=broad-exception-caught
            return self._failure_from_exception("restore_user", ex)

    async def get_auth_providers(self, user_id: uuid.UUID) -> ServiceResult:
        try:
            return ok(await self._store.auth_providers.list_for_user(user_id))

        except Exception as ex:  # pylint: disable=broad-exception-caught
            return self._failure_from_exception("get_auth_providers", ex)

    async def link_google_account(self, user_id: uuid.UUID,
                                  id_token: str) -> ServiceResult:
        """ Link the Google account asserted by ``id_token`` to a user. """
        try:
            user = await self._store.users.get_by_id(user_id)
            if user is None:
                return failure(ServiceStatus.NOT_FOUND,
                               RecordNotFoundError(USER_NOT_FOUND))

            identity = await verify_google_identity(
                self._google_identity_client,
                self._settings.google_client_id, id_token, self._logger)
            if isinstance(identity, ServiceResult):
                return identity

            provider = AuthProviderName.GOOGLE.value
            if await self._store.auth_providers.get_for_user(user_id,
                                                            provider):
                return failure(ServiceStatus.CONFLICT, ConflictError(
                    "Google account already linked"))

            if await self._store.auth_providers.get_by_provider_user_id(
                    provider, identity.subject):
                return failure(ServiceStatus.CONFLICT, ConflictError(
                    "Google account is linked to another user"))

            link = await self._store.auth_providers.create(
                user_id, provider, identity.subject, identity.email)
            return created(link)

        except Exception as ex:  # pylint: disable=broad-exception-caught
            return self._failure_from_exception("link_google_account", ex)

    async def unlink_google_account(self,
                                    user_id: uuid.UUID) -> ServiceResult:
        try:
            link = await self._store.auth_providers.delete_for_user(
                user_id, AuthProviderName.GOOGLE.value)
            if link is None:
                return failure(ServiceStatus.NOT_FOUND, RecordNotFoundError(
                    "Google account not linked"))

            self._logger.info("User %s unlinked Google", user_id)
            return ok(link)

        except Exception as ex:  # pylint: disable=broad-exception-caught
            return self._failure_from_exception("unlink_google_account", ex)
