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
from database.enums import UserStatus

USER_COLUMNS: str = ("id, name, username, email, password_hash, bio, "
                     "phone_number, image_url, status, latest_login_at, "
                     "deleted_at, created_at, updated_at")

# Columns a profile update is allowed to write.
UPDATABLE_PROFILE_COLUMNS: tuple = ("name", "username", "bio",
                                    "phone_number", "image_url",
                                    "password_hash")


class UserDataAccessLayer(AccountsDataAccessLayer):
    """ Data access for the ``users`` table. """

    async def get_by_id(self, user_id: uuid.UUID) -> typing.Optional[dict]:
        return await self._fetchrow(
            f"SELECT {USER_COLUMNS} FROM users WHERE id = $1", user_id)

    async def get_by_email(self, email: str) -> typing.Optional[dict]:
        return await self._fetchrow(
            f"SELECT {USER_COLUMNS} FROM users WHERE email = $1", email)

    async def get_by_username(self,
                              username: str) -> typing.Optional[dict]:
        return await self._fetchrow(
            f"SELECT {USER_COLUMNS} FROM users WHERE username = $1",
            username)

    async def create_pending_user(self, email: str) -> dict:
        """
        Insert a user awaiting email verification: no name, username or
        password yet.
        """
        now = utc_now()
        user = await self._fetchrow(
            f"""
            INSERT INTO users (id, email, status, created_at, updated_at)
            VALUES ($1, $2, $3, $4, $4)
            RETURNING {USER_COLUMNS}
            """,
            uuid.uuid4(), email, UserStatus.PENDING.value, now)
        self._logger.info("Created pending user %s", user["id"])
        return user

    async def create_activated_user(self, email: str, name: str) -> dict:
        """ Insert a user signed up through an identity provider. """
        now = utc_now()
        user = await self._fetchrow(
            f"""
            INSERT INTO users (id, name, email, status, latest_login_at,
                               created_at, updated_at)
            VALUES ($1, $2, $3, $4, $5, $5, $5)
            RETURNING {USER_COLUMNS}
            """,
            uuid.uuid4(), name, email, UserStatus.ACTIVATED.value, now)
        self._logger.info("Created activated user %s", user["id"])
        return user

    async def activate_user(self, user_id: uuid.UUID, name: str,
                            username: str,
                            password_hash: str) -> typing.Optional[dict]:
        """
        Complete registration of a user.

        Returns:
            The updated user, None when no user has the id.
        """
        return await self._fetchrow(
            f"""
            UPDATE users
               SET name = $2, username = $3, password_hash = $4,
                   status = $5, updated_at = $6
             WHERE id = $1
            RETURNING {USER_COLUMNS}
            """,
            user_id, name, username, password_hash,
            UserStatus.ACTIVATED.value, utc_now())

    async def reactivate_for_provider(self, user_id: uuid.UUID,
                                      name: typing.Optional[str]
                                      ) -> typing.Optional[dict]:
        """
        Mark a user ACTIVATED and logged in now after an identity provider
        login. The name is only written when the user has none.
        """
        now = utc_now()
        return await self._fetchrow(
            f"""
            UPDATE users
               SET name = COALESCE(name, $2), status = $3,
                   latest_login_at = $4, updated_at = $4
             WHERE id = $1
            RETURNING {USER_COLUMNS}
            """,
            user_id, name, UserStatus.ACTIVATED.value, now)

    async def update_password(self, user_id: uuid.UUID,
                              password_hash: str) -> typing.Optional[dict]:
        return await self._fetchrow(
            f"""
            UPDATE users SET password_hash = $2, updated_at = $3
             WHERE id = $1
            RETURNING {USER_COLUMNS}
            """,
            user_id, password_hash, utc_now())

    async def update_latest_login(self, user_id: uuid.UUID
                                  ) -> typing.Optional[dict]:
        now = utc_now()
        return await self._fetchrow(
            f"""
            UPDATE users SET latest_login_at = $2, updated_at = $2
             WHERE id = $1
            RETURNING {USER_COLUMNS}
            """,
            user_id, now)

    async def update_profile(self, user_id: uuid.UUID,
                             changes: dict) -> typing.Optional[dict]:
        """
        Write profile columns of a user.

        Args:
            user_id: Id of the user.
            changes: Column to value mapping. Only the columns listed in
                ``UPDATABLE_PROFILE_COLUMNS`` are accepted.

        Raises:
            ValueError: ``changes`` names a column that is not updatable.
        """
        unknown = set(changes) - set(UPDATABLE_PROFILE_COLUMNS)
        if unknown:
            raise ValueError(f"Columns not updatable: {sorted(unknown)}")

        if not changes:
            return await self.get_by_id(user_id)

        columns = [column for column in UPDATABLE_PROFILE_COLUMNS
                   if column in changes]
        assignments = ", ".join(f"{column} = ${index}"
                                for index, column in enumerate(columns,
                                                               start=3))
        return await self._fetchrow(
            f"""
            UPDATE users SET {assignments}, updated_at = $2
             WHERE id = $1
            RETURNING {USER_COLUMNS}
            """,
            user_id, utc_now(), *[changes[column] for column in columns])

    async def set_deleted_at(self, user_id: uuid.UUID,
                             deleted_at) -> typing.Optional[dict]:
        """ Soft delete (a datetime) or restore (None) a user. """
        return await self._fetchrow(
            f"""
            UPDATE users SET deleted_at = $2, updated_at = $3
             WHERE id = $1
            RETURNING {USER_COLUMNS}
            """,
            user_id, deleted_at, utc_now())
