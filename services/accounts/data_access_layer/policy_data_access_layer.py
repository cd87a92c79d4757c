"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
import uuid
from data_access_layer.accounts_data_access_layer import (
    AccountsDataAccessLayer, utc_now)


class PolicyDataAccessLayer(AccountsDataAccessLayer):
    """ Read access to ``policies`` and writes of policy acceptances. """

    async def list_policies(self) -> list[dict]:
        return await self._fetch(
            "SELECT id, name, created_at, updated_at FROM policies "
            "ORDER BY created_at")

    async def create_user_policies(self, user_id: uuid.UUID,
                                   policy_ids: list) -> None:
        """
        Record that a user accepted the given policies. Policies the user
        already accepted are left as they are.
        """
        if not policy_ids:
            return

        now = utc_now()
        await self._executemany(
            """
            INSERT INTO user_policies (id, user_id, policy_id, created_at,
                                       updated_at)
            VALUES ($1, $2, $3, $4, $4)
            ON CONFLICT (user_id, policy_id) DO NOTHING
            """,
            [(uuid.uuid4(), user_id, policy_id, now)
             for policy_id in policy_ids])
