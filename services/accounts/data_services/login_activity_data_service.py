"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
import logging
import math
import typing
from accounts_settings import AccountsSettings
from data_access_layer.accounts_data_access_layer import utc_now
from data_access_layer.credential_store import CredentialStore
from data_services.base_data_service import BaseDataService
from database.enums import ActivityAction
from external_services.geo_lookup_client import GeoLookupClient, GeoLookupError
from service_errors import LoginLockedError
from service_result import created, failure, ok, ServiceResult, ServiceStatus


class LoginActivityDataService(BaseDataService):
    """
    Login activity recording and the lockout policy built on it.

    A local login is locked once the number of unauthorized attempts since
    the most recent successful one, within a sliding window, reaches the
    configured limit.
    """

    def __init__(self, store: CredentialStore, geo_lookup: GeoLookupClient,
                 settings: AccountsSettings, logger: logging.Logger):
        super().__init__(store, logger.getChild(__name__))
        self._geo_lookup: GeoLookupClient = geo_lookup
        self._settings: AccountsSettings = settings

    async def check_recent_login_attempts(self, email: str) -> ServiceResult:
        """
        Decide whether local login is locked for an email. Read only, so it
        is safe to call before any credential is checked.

        Returns:
            ServiceResult: OK with the counted failed attempts, or FORBIDDEN
            with a ``LoginLockedError`` holding the seconds left.
        """
        try:
            now = utc_now()
            window = self._settings.login_attempt_window
            attempts = await self._store.activity_logs.list_recent(
                email, ActivityAction.LOGIN.value, now - window)

            # Newest first, so anything after the latest success is older
            # than it and no longer counts.
            for index, attempt in enumerate(attempts):
                if attempt["status"] == ServiceStatus.OK:
                    attempts = attempts[:index]
                    break

            failed = [attempt for attempt in attempts
                      if attempt["status"] == ServiceStatus.UNAUTHORIZED]

            if len(failed) >= self._settings.login_attempt_limit:
                oldest = min(attempt["created_at"] for attempt in failed)
                remaining = math.ceil(
                    (oldest + window - now).total_seconds())
                remaining = max(remaining, 1)
                self._logger.warning("Local login locked for %d seconds "
                                     "after %d failed attempts",
                                     remaining, len(failed))
                return failure(ServiceStatus.FORBIDDEN,
                               LoginLockedError(remaining))

            return ok(failed)

        except Exception as ex:  # pylint: disable=broad-exception-caught
            return self._failure_from_exception(
                "check_recent_login_attempts", ex)

    async def record_login_attempt(self, email: str, status: int,
                                   ip_address: typing.Optional[str] = None,
                                   user_agent: typing.Optional[str] = None,
                                   failure_reason: typing.Optional[str] = None
                                   ) -> ServiceResult:
        """
        Append a LOGIN entry to the activity log. The region of the ip
        address is looked up best effort, a failed lookup stores no
        location.
        """
        # pylint: disable=too-many-arguments, too-many-positional-arguments
        try:
            location = await self._resolve_location(ip_address)
            record = await self._store.activity_logs.create(
                email=email,
                action=ActivityAction.LOGIN.value,
                status=int(status),
                ip_address=ip_address,
                user_agent=user_agent,
                failure_reason=failure_reason,
                location=location)
            return created(record)

        except Exception as ex:  # pylint: disable=broad-exception-caught
            return self._failure_from_exception("record_login_attempt", ex)

    async def _resolve_location(self, ip_address: typing.Optional[str]
                                ) -> typing.Optional[str]:
        if not ip_address:
            return None

        try:
            info = await self._geo_lookup.lookup(ip_address)

        except GeoLookupError as ex:
            self._logger.warning("Geo lookup failed: %s", ex)
            return None

        return info.get("region") or None
