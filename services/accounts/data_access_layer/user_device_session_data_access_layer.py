"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
import typing
import uuid
from data_access_layer.accounts_data_access_layer import (
    AccountsDataAccessLayer, utc_now)

DEVICE_SESSION_COLUMNS: str = ("id, user_id, device_id, device_name, "
                               "ip_address, last_active_at, created_at, "
                               "updated_at")


class UserDeviceSessionDataAccessLayer(AccountsDataAccessLayer):
    """ Data access for ``user_device_sessions``. """

    async def get(self, user_id: uuid.UUID,
                  device_id: str) -> typing.Optional[dict]:
        return await self._fetchrow(
            f"""
            SELECT {DEVICE_SESSION_COLUMNS} FROM user_device_sessions
             WHERE user_id = $1 AND device_id = $2
            """,
            user_id, device_id)

    async def upsert(self, user_id: uuid.UUID, device_id: str,
                     device_name: typing.Optional[str],
                     ip_address: typing.Optional[str]) -> dict:
        """
        Insert a session, or refresh ``last_active_at`` of the existing one
        for the same device. The returned row carries ``inserted``, true
        only when this call created it.
        """
        now = utc_now()
        return await self._fetchrow(
            f"""
            INSERT INTO user_device_sessions (id, user_id, device_id,
                                              device_name, ip_address,
                                              last_active_at, created_at,
                                              updated_at)
            VALUES ($1, $2, $3, $4, $5, $6, $6, $6)
            ON CONFLICT (user_id, device_id) DO UPDATE
               SET last_active_at = EXCLUDED.last_active_at,
                   updated_at = EXCLUDED.updated_at
            RETURNING {DEVICE_SESSION_COLUMNS}, (xmax = 0) AS inserted
            """,
            uuid.uuid4(), user_id, device_id, device_name, ip_address, now)

    async def touch(self, user_id: uuid.UUID,
                    device_id: str) -> typing.Optional[dict]:
        """ Refresh ``last_active_at`` of a session. None when absent. """
        now = utc_now()
        return await self._fetchrow(
            f"""
            UPDATE user_device_sessions
               SET last_active_at = $3, updated_at = $3
             WHERE user_id = $1 AND device_id = $2
            RETURNING {DEVICE_SESSION_COLUMNS}
            """,
            user_id, device_id, now)

    async def list_for_user(self, user_id: uuid.UUID) -> list[dict]:
        """ Sessions of a user, least recently active first. """
        return await self._fetch(
            f"""
            SELECT {DEVICE_SESSION_COLUMNS} FROM user_device_sessions
             WHERE user_id = $1
             ORDER BY last_active_at ASC
            """,
            user_id)

    async def count_for_user(self, user_id: uuid.UUID) -> int:
        return await self._fetchval(
            "SELECT COUNT(*) FROM user_device_sessions WHERE user_id = $1",
            user_id)

    async def delete(self, user_id: uuid.UUID,
                     device_id: str) -> typing.Optional[dict]:
        """ Remove a session. Returns the deleted row, None when absent. """
        return await self._fetchrow(
            f"""
            DELETE FROM user_device_sessions
             WHERE user_id = $1 AND device_id = $2
            RETURNING {DEVICE_SESSION_COLUMNS}
            """,
            user_id, device_id)
