"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
from datetime import datetime, timezone
import logging
import typing
import asyncpg
from palisade_common.base_data_access_layer import BaseDataAccessLayer
from palisade_common.data_access_errors import (DataAccessError,
                                                DuplicateRecordError)
from palisade_common.service_health_enums import ComponentDegradationLevel
from state_object import StateObject


def utc_now() -> datetime:
    """ Current time as a timezone-aware UTC datetime. """
    return datetime.now(timezone.utc)


class AccountsDataAccessLayer(BaseDataAccessLayer):
    """
    Base for the accounts data access layers.

    Every statement goes through ``_run`` which converts asyncpg failures
    into ``DataAccessError`` (``DuplicateRecordError`` for unique constraint
    violations) and keeps the database health on the state object current.
    Rows are returned as plain dictionaries.
    """

    def __init__(self, db, logger: logging.Logger,
                 state_object: StateObject):
        super().__init__(db, logger)
        self._state_object: StateObject = state_object

    async def _fetchrow(self, query: str, *args) -> typing.Optional[dict]:
        record = await self._run(self._db.fetchrow, query, *args)
        return dict(record) if record is not None else None

    async def _fetch(self, query: str, *args) -> list[dict]:
        records = await self._run(self._db.fetch, query, *args)
        return [dict(record) for record in records]

    async def _fetchval(self, query: str, *args) -> typing.Any:
        return await self._run(self._db.fetchval, query, *args)

    async def _execute(self, query: str, *args) -> str:
        return await self._run(self._db.execute, query, *args)

    async def _executemany(self, query: str, args: list) -> None:
        await self._run(self._db.executemany, query, args)

    async def _run(self, method, query: str, *args) -> typing.Any:
        try:
            result = await method(query, *args)

        except asyncpg.UniqueViolationError as ex:
            self._logger.warning("Unique constraint '%s' violated",
                                 ex.constraint_name)
            raise DuplicateRecordError(str(ex), ex.constraint_name) from ex

        except (asyncpg.PostgresConnectionError,
                asyncpg.InterfaceError, OSError) as ex:
            self._logger.exception("Database connection error: %s", ex)
            self._state_object.mark_database_degraded(
                ComponentDegradationLevel.FULLY_DEGRADED,
                "Database unreachable")
            raise DataAccessError("Database unreachable") from ex

        except asyncpg.PostgresError as ex:
            self._logger.exception("Database query error: %s", ex)
            self._state_object.mark_database_degraded(
                ComponentDegradationLevel.PART_DEGRADED,
                "Database operation failed")
            raise DataAccessError("Database operation failed") from ex

        self._state_object.mark_database_operational()
        return result

