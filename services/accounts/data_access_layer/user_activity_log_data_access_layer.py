"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
from datetime import datetime
import typing
import uuid
from data_access_layer.accounts_data_access_layer import (
    AccountsDataAccessLayer, utc_now)

ACTIVITY_LOG_COLUMNS: str = ("id, email, ip_address, user_agent, status, "
                             "action, failure_reason, location, login_time, "
                             "created_at")


class UserActivityLogDataAccessLayer(AccountsDataAccessLayer):
    """ Append-only access to ``user_activity_logs``. """

    async def create(self, email: str, action: str, status: int,
                     ip_address: typing.Optional[str] = None,
                     user_agent: typing.Optional[str] = None,
                     failure_reason: typing.Optional[str] = None,
                     location: typing.Optional[str] = None) -> dict:
        # pylint: disable=too-many-arguments, too-many-positional-arguments
        now = utc_now()
        return await self._fetchrow(
            f"""
            INSERT INTO user_activity_logs (id, email, ip_address,
                                            user_agent, status, action,
                                            failure_reason, location,
                                            login_time, created_at)
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $9)
            RETURNING {ACTIVITY_LOG_COLUMNS}
            """,
            uuid.uuid4(), email, ip_address, user_agent, status, action,
            failure_reason, location, now)

    async def list_recent(self, email: str, action: str,
                          since: datetime) -> list[dict]:
        """ Entries for an email and action created at or after ``since``,
        newest first. """
        return await self._fetch(
            f"""
            SELECT {ACTIVITY_LOG_COLUMNS} FROM user_activity_logs
             WHERE email = $1 AND action = $2 AND created_at >= $3
             ORDER BY created_at DESC
            """,
            email, action, since)
