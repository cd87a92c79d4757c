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

EMAIL_VERIFICATION_COLUMNS: str = ("id, user_id, token, type, expired_at, "
                                   "completed_at, created_at, updated_at")


class EmailVerificationDataAccessLayer(AccountsDataAccessLayer):
    """
    Data access for one-time verification tokens.

    A (user, type) pair can have many rows, older ones being superseded.
    The current token is always the most recently created row.
    """

    async def get_latest(self, user_id: uuid.UUID,
                         action_type: str) -> typing.Optional[dict]:
        return await self._fetchrow(
            f"""
            SELECT {EMAIL_VERIFICATION_COLUMNS} FROM email_verifications
             WHERE user_id = $1 AND type = $2
             ORDER BY created_at DESC
             LIMIT 1
            """,
            user_id, action_type)

    async def create(self, user_id: uuid.UUID, token: str,
                     action_type: str, expired_at: datetime) -> dict:
        now = utc_now()
        return await self._fetchrow(
            f"""
            INSERT INTO email_verifications (id, user_id, token, type,
                                             expired_at, created_at,
                                             updated_at)
            VALUES ($1, $2, $3, $4, $5, $6, $6)
            RETURNING {EMAIL_VERIFICATION_COLUMNS}
            """,
            uuid.uuid4(), user_id, token, action_type, expired_at, now)

    async def get_uncompleted_by_token(self, token: str, action_type: str
                                       ) -> typing.Optional[dict]:
        return await self._fetchrow(
            f"""
            SELECT {EMAIL_VERIFICATION_COLUMNS} FROM email_verifications
             WHERE token = $1 AND type = $2 AND completed_at IS NULL
            """,
            token, action_type)

    async def mark_completed(self, verification_id: uuid.UUID,
                             completed_at: datetime
                             ) -> typing.Optional[dict]:
        """
        Consume a token. The update only applies while ``completed_at`` is
        still null, so of two concurrent callers only one gets the row back.

        Returns:
            The completed row, None when it was already completed.
        """
        return await self._fetchrow(
            f"""
            UPDATE email_verifications
               SET completed_at = $2, updated_at = $2
             WHERE id = $1 AND completed_at IS NULL
            RETURNING {EMAIL_VERIFICATION_COLUMNS}
            """,
            verification_id, completed_at)

    async def claim_completed(self, verification_id: uuid.UUID,
                              now: datetime) -> typing.Optional[dict]:
        """
        Use up a completed token for the action it verified. Claiming pulls
        ``expired_at`` back to ``completed_at``, so a token can be claimed
        once and only before it expires.

        Returns:
            The claimed row, None when it was not claimable.
        """
        return await self._fetchrow(
            f"""
            UPDATE email_verifications
               SET expired_at = completed_at, updated_at = $2
             WHERE id = $1
               AND completed_at IS NOT NULL
               AND expired_at > completed_at
               AND expired_at > $2
            RETURNING {EMAIL_VERIFICATION_COLUMNS}
            """,
            verification_id, now)
