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

AUTH_PROVIDER_COLUMNS: str = ("id, user_id, provider, provider_user_id, "
                              "provider_email, created_at, updated_at")


class AuthProviderDataAccessLayer(AccountsDataAccessLayer):
    """ Data access for federated identity links (``auth_providers``). """

    async def get_by_provider_user_id(self, provider: str,
                                      provider_user_id: str
                                      ) -> typing.Optional[dict]:
        return await self._fetchrow(
            f"""
            SELECT {AUTH_PROVIDER_COLUMNS} FROM auth_providers
             WHERE provider = $1 AND provider_user_id = $2
            """,
            provider, provider_user_id)

    async def get_for_user(self, user_id: uuid.UUID,
                           provider: str) -> typing.Optional[dict]:
        return await self._fetchrow(
            f"""
            SELECT {AUTH_PROVIDER_COLUMNS} FROM auth_providers
             WHERE user_id = $1 AND provider = $2
            """,
            user_id, provider)

    async def list_for_user(self, user_id: uuid.UUID) -> list[dict]:
        return await self._fetch(
            f"""
            SELECT {AUTH_PROVIDER_COLUMNS} FROM auth_providers
             WHERE user_id = $1
             ORDER BY created_at
            """,
            user_id)

    async def create(self, user_id: uuid.UUID, provider: str,
                     provider_user_id: str,
                     provider_email: typing.Optional[str]) -> dict:
        """
        Link a user to an external identity.

        Raises:
            DuplicateRecordError: The identity, or a link of the same
                provider for the user, already exists.
        """
        now = utc_now()
        link = await self._fetchrow(
            f"""
            INSERT INTO auth_providers (id, user_id, provider,
                                        provider_user_id, provider_email,
                                        created_at, updated_at)
            VALUES ($1, $2, $3, $4, $5, $6, $6)
            RETURNING {AUTH_PROVIDER_COLUMNS}
            """,
            uuid.uuid4(), user_id, provider, provider_user_id,
            provider_email, now)
        self._logger.info("Linked user %s to %s", user_id, provider)
        return link

    async def delete_for_user(self, user_id: uuid.UUID,
                              provider: str) -> typing.Optional[dict]:
        """ Remove a link. Returns the deleted link, None when absent. """
        return await self._fetchrow(
            f"""
            DELETE FROM auth_providers
             WHERE user_id = $1 AND provider = $2
            RETURNING {AUTH_PROVIDER_COLUMNS}
            """,
            user_id, provider)
