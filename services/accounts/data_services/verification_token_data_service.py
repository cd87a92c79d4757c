"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
from dataclasses import dataclass
import logging
import uuid
from accounts_settings import AccountsSettings
from data_access_layer.accounts_data_access_layer import utc_now
from data_access_layer.credential_store import CredentialStore
from data_services.base_data_service import BaseDataService
from database.enums import VerificationActionType
from external_services.email_dispatcher import EmailDispatcher, EmailSubject
from external_services.token_codec import (TokenCodec, TokenDecodeError,
                                           TokenSignatureExpiredError)
from service_errors import InvalidTokenError, TokenExpiredError
from service_result import created, failure, ok, ServiceResult, ServiceStatus


@dataclass(frozen=True)
class VerificationEmail:
    """ What to send for one kind of verification token. """
    subject: EmailSubject
    template: str
    link_path: str


VERIFICATION_EMAILS: dict = {
    VerificationActionType.REGISTER: VerificationEmail(
        EmailSubject.VERIFY_EMAIL, "verify_email", "/verify/register"),
    VerificationActionType.RESET_PASSWORD: VerificationEmail(
        EmailSubject.RESET_PASSWORD, "reset_password",
        "/verify/reset-password"),
    VerificationActionType.DELETE_ACCOUNT: VerificationEmail(
        EmailSubject.DELETE_ACCOUNT, "delete_account",
        "/verify/delete-account"),
}


class VerificationTokenDataService(BaseDataService):
    """
    Issues and consumes the one-time tokens behind the email driven flows
    (register, reset password and delete account).

    The raw token id is stored; the email link carries it inside a signed
    token that expires together with the row.
    """

    def __init__(self, store: CredentialStore, token_codec: TokenCodec,
                 email_dispatcher: EmailDispatcher,
                 settings: AccountsSettings, logger: logging.Logger):
        # pylint: disable=too-many-arguments, too-many-positional-arguments
        super().__init__(store, logger.getChild(__name__))
        self._token_codec: TokenCodec = token_codec
        self._email_dispatcher: EmailDispatcher = email_dispatcher
        self._settings: AccountsSettings = settings

    async def request_token(self, user: dict,
                            action_type: VerificationActionType
                            ) -> ServiceResult:
        """
        Make sure the user has a usable token for ``action_type`` and email
        it.

        The latest token is reused while it is neither expired nor
        completed, otherwise a new superseding one is created. When
        ``email.rollback_on_failure`` is set, a token created by this call
        is rolled back if the email cannot be sent.

        Returns:
            ServiceResult: CREATED with the token record.
        """
        try:
            if self._settings.email_rollback_on_failure:
                record = await self._store.run_in_transaction(
                    lambda: self._issue_token(user, action_type))
            else:
                record = await self._issue_token(user, action_type)

            return created(record)

        except Exception as ex:  # pylint: disable=broad-exception-caught
            return self._failure_from_exception("request_token", ex)

    async def complete_token(self, signed_token: str,
                             action_type: VerificationActionType
                             ) -> ServiceResult:
        """
        Consume a token from an email link. A token can only be completed
        once, concurrent attempts included.

        Returns:
            ServiceResult: OK with ``{token, user_id}``, UNAUTHORIZED with
            "Invalid Token" or "Token expired" otherwise.
        """
        try:
            try:
                payload = self._token_codec.verify(signed_token)

            except TokenSignatureExpiredError:
                return failure(ServiceStatus.UNAUTHORIZED,
                               TokenExpiredError())

            except TokenDecodeError as ex:
                self._logger.debug("Verification token rejected: %s", ex)
                return failure(ServiceStatus.UNAUTHORIZED,
                               InvalidTokenError())

            token = payload.get("token")
            if not isinstance(token, str):
                return failure(ServiceStatus.UNAUTHORIZED,
                               InvalidTokenError())

            record = await self._store.email_verifications \
                .get_uncompleted_by_token(token, action_type.value)
            if record is None or \
                    str(record["user_id"]) != str(payload.get("user_id")):
                return failure(ServiceStatus.UNAUTHORIZED,
                               InvalidTokenError())

            now = utc_now()
            if now > record["expired_at"]:
                return failure(ServiceStatus.UNAUTHORIZED,
                               TokenExpiredError())

            completed = await self._store.email_verifications.mark_completed(
                record["id"], now)
            if completed is None:
                self._logger.info("Token %s was completed concurrently",
                                  record["id"])
                return failure(ServiceStatus.UNAUTHORIZED,
                               InvalidTokenError())

            return ok({"token": token, "user_id": completed["user_id"]})

        except Exception as ex:  # pylint: disable=broad-exception-caught
            return self._failure_from_exception("complete_token", ex)

    async def claim_verified(self, user_id: uuid.UUID,
                             action_type: VerificationActionType
                             ) -> ServiceResult:
        """
        Use up the user's latest token for ``action_type`` once it has been
        completed from its email link. Run it in the same transaction as
        the action it guards so a failed action leaves it claimable.

        Returns:
            ServiceResult: OK with the claimed record, UNAUTHORIZED with
            "Invalid Token" or "Token expired" otherwise.
        """
        try:
            latest = await self._store.email_verifications.get_latest(
                user_id, action_type.value)
            if latest is None or latest["completed_at"] is None or \
                    latest["expired_at"] <= latest["completed_at"]:
                return failure(ServiceStatus.UNAUTHORIZED,
                               InvalidTokenError())

            now = utc_now()
            if now > latest["expired_at"]:
                return failure(ServiceStatus.UNAUTHORIZED,
                               TokenExpiredError())

            claimed = await self._store.email_verifications.claim_completed(
                latest["id"], now)
            if claimed is None:
                return failure(ServiceStatus.UNAUTHORIZED,
                               InvalidTokenError())

            self._logger.info("Claimed %s token %s for user %s",
                              action_type.value, claimed["id"], user_id)
            return ok(claimed)

        except Exception as ex:  # pylint: disable=broad-exception-caught
            return self._failure_from_exception("claim_verified", ex)

    async def _issue_token(self, user: dict,
                           action_type: VerificationActionType) -> dict:
        now = utc_now()
        latest = await self._store.email_verifications.get_latest(
            user["id"], action_type.value)

        if latest is None or latest["completed_at"] is not None or \
                now > latest["expired_at"]:
            record = await self._store.email_verifications.create(
                user_id=user["id"],
                token=uuid.uuid4().hex,
                action_type=action_type.value,
                expired_at=now + self._settings.verification_token_ttl)
            self._logger.info("Issued %s token %s for user %s",
                              action_type.value, record["id"], user["id"])

        else:
            record = latest
            self._logger.info("Re-sending current %s token %s for user %s",
                              action_type.value, record["id"], user["id"])

        expires_in = max(int((record["expired_at"] - now).total_seconds()), 1)
        signed_token = self._token_codec.sign(
            {"user_id": str(user["id"]), "token": record["token"]},
            expires_in)

        await self._send_verification_email(user["email"], action_type,
                                            signed_token)
        return record

    async def _send_verification_email(self, email: str,
                                       action_type: VerificationActionType,
                                       signed_token: str) -> None:
        details: VerificationEmail = VERIFICATION_EMAILS[action_type]
        link = f"{self._settings.client_url}{details.link_path}" \
               f"?token={signed_token}"
        await self._email_dispatcher.send(
            to=email,
            subject=details.subject,
            template_id=getattr(self._settings.email_templates,
                                details.template),
            template_data={"verification_link": link})
