"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
from dataclasses import dataclass
import logging
import typing
import uuid
from accounts_settings import AccountsSettings
from data_access_layer.credential_store import CredentialStore
from data_services.base_data_service import BaseDataService
from external_services.email_dispatcher import EmailDispatcher, EmailSubject
from service_errors import RecordNotFoundError, SessionExpiredError
from service_result import created, failure, ok, ServiceResult, ServiceStatus


@dataclass(frozen=True)
class DeviceInfo:
    """ Device a login was made from. """
    device_id: str
    device_name: typing.Optional[str] = None
    ip_address: typing.Optional[str] = None


def session_not_found_message(user_id, device_id: str) -> str:
    return (f"UserDeviceSession userId {user_id} with deviceId "
            f"{device_id} not found")


class DeviceSessionDataService(BaseDataService):
    """
    Tracks the devices each user is signed in on.

    A user has at most ``sessions.max_device_sessions`` trusted devices. A
    login from a new device evicts the least recently active ones to make
    room. Eviction is list then delete, so concurrent logins of the same
    user may briefly leave one session over the cap.
    """

    def __init__(self, store: CredentialStore,
                 email_dispatcher: EmailDispatcher,
                 settings: AccountsSettings, logger: logging.Logger):
        super().__init__(store, logger.getChild(__name__))
        self._email_dispatcher: EmailDispatcher = email_dispatcher
        self._settings: AccountsSettings = settings

    async def upsert(self, email: str, user_id: uuid.UUID, device_id: str,
                     device_name: typing.Optional[str] = None,
                     ip_address: typing.Optional[str] = None
                     ) -> ServiceResult:
        """
        Refresh a known device, or trust a new one and tell the user about
        it by email. Insert or refresh is a single statement, so concurrent
        logins from one new device yield one session and one email.

        Returns:
            ServiceResult: OK with the refreshed session, CREATED with a new
            one.
        """
        # pylint: disable=too-many-arguments, too-many-positional-arguments
        try:
            async def _upsert_and_notify() -> tuple:
                row = await self._store.device_sessions.upsert(
                    user_id, device_id, device_name, ip_address)
                inserted = row.pop("inserted")
                if inserted:
                    await self._email_dispatcher.send(
                        to=email,
                        subject=EmailSubject.LOGIN_DEVICE,
                        template_id=self._settings.email_templates
                        .login_device,
                        template_data={"device": device_name,
                                       "ip_address": ip_address})
                return row, inserted

            if self._settings.email_rollback_on_failure:
                session, inserted = await self._store.run_in_transaction(
                    _upsert_and_notify)
            else:
                session, inserted = await _upsert_and_notify()

            if not inserted:
                return ok(session)

            self._logger.info("New device session for user %s", user_id)
            return created(session)

        except Exception as ex:  # pylint: disable=broad-exception-caught
            return self._failure_from_exception("upsert_device_session", ex)

    async def get_session(self, user_id: uuid.UUID,
                          device_id: str) -> ServiceResult:
        try:
            session = await self._store.device_sessions.get(user_id,
                                                            device_id)
            if session is None:
                return failure(ServiceStatus.NOT_FOUND, RecordNotFoundError(
                    session_not_found_message(user_id, device_id)))
            return ok(session)

        except Exception as ex:  # pylint: disable=broad-exception-caught
            return self._failure_from_exception("get_session", ex)

    async def list_active_sessions(self,
                                   user_id: uuid.UUID) -> ServiceResult:
        """ OK with the sessions of a user, least recently active first. """
        try:
            return ok(await self._store.device_sessions.list_for_user(
                user_id))

        except Exception as ex:  # pylint: disable=broad-exception-caught
            return self._failure_from_exception("list_active_sessions", ex)

    async def count_active_sessions(self,
                                    user_id: uuid.UUID) -> ServiceResult:
        try:
            return ok(await self._store.device_sessions.count_for_user(
                user_id))

        except Exception as ex:  # pylint: disable=broad-exception-caught
            return self._failure_from_exception("count_active_sessions", ex)

    async def revoke(self, user_id: uuid.UUID,
                     device_id: str) -> ServiceResult:
        """ Remove a session. An absent session is NOT_FOUND. """
        try:
            session = await self._store.device_sessions.delete(user_id,
                                                               device_id)
            if session is None:
                return failure(ServiceStatus.NOT_FOUND, RecordNotFoundError(
                    session_not_found_message(user_id, device_id)))

            self._logger.info("Revoked device session of user %s", user_id)
            return ok(session)

        except Exception as ex:  # pylint: disable=broad-exception-caught
            return self._failure_from_exception("revoke_session", ex)

    async def prune_oldest_if_exceeded(self, user_id: uuid.UUID,
                                       device_id: str) -> ServiceResult:
        """
        Make room for a login from ``device_id``.

        A device that already has a session needs no room and its session is
        returned as is. Otherwise, when the user is at the session cap, the
        least recently active sessions of other devices are revoked until
        one slot is free.
        Failures while listing or revoking are returned as CONFLICT with the
        underlying error.
        """
        try:
            existing = await self.get_session(user_id, device_id)
            if existing.is_success:
                return ok(existing.data)

            if existing.status != ServiceStatus.NOT_FOUND:
                return failure(ServiceStatus.CONFLICT, existing.data)

            listed = await self.list_active_sessions(user_id)
            if not listed.is_success:
                return failure(ServiceStatus.CONFLICT, listed.data)

            sessions: list = [session for session in listed.data
                              if session["device_id"] != device_id]
            excess = len(sessions) - self._settings.max_device_sessions + 1
            for oldest in sessions[:max(excess, 0)]:
                revoked = await self.revoke(oldest["user_id"],
                                            oldest["device_id"])
                # Already gone when a concurrent login evicted it first.
                if not revoked.is_success and \
                        revoked.status != ServiceStatus.NOT_FOUND:
                    return failure(ServiceStatus.CONFLICT, revoked.data)

            return ok(None)

        except Exception as ex:  # pylint: disable=broad-exception-caught
            return self._failure_from_exception("prune_oldest_session", ex)

    async def update_active(self, user_id: uuid.UUID,
                            device_id: str) -> ServiceResult:
        """
        Mark a device as used now.

        Returns:
            ServiceResult: OK with all sessions of the user, least recently
            active first. SESSION_EXPIRED, listing the current sessions, when
            the device is no longer trusted.
        """
        try:
            session = await self._store.device_sessions.touch(user_id,
                                                              device_id)
            sessions = await self._store.device_sessions.list_for_user(
                user_id)

            if session is None:
                self._logger.info("Device session of user %s has expired",
                                  user_id)
                return failure(ServiceStatus.SESSION_EXPIRED,
                               SessionExpiredError(user_id, device_id,
                                                   sessions))

            return ok(sessions)

        except Exception as ex:  # pylint: disable=broad-exception-caught
            return self._failure_from_exception("update_active_session", ex)

    async def track_login(self, email: str, user_id: uuid.UUID,
                          device: DeviceInfo) -> ServiceResult:
        """ Register the device of a successful login. """
        pruned = await self.prune_oldest_if_exceeded(user_id,
                                                     device.device_id)
        if not pruned.is_success:
            return pruned

        return await self.upsert(email, user_id, device.device_id,
                                 device.device_name, device.ip_address)
