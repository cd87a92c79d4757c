"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
import logging
from sqlalchemy.dialects import postgresql
from sqlalchemy.schema import CreateIndex, CreateTable
from .base import Base

# Registers every table on Base.metadata.
from . import (auth_provider, email_verification, policy,  # pylint: disable=unused-import
               user, user_activity_log, user_device_session)


def schema_statements() -> list[str]:
    """
    PostgreSQL DDL creating the accounts tables and their indexes, skipping
    those that already exist. Tables come in dependency order.
    """
    dialect = postgresql.dialect()
    statements: list[str] = []

    for table in Base.metadata.sorted_tables:
        statements.append(str(CreateTable(table, if_not_exists=True)
                              .compile(dialect=dialect)).strip())

        for index in sorted(table.indexes, key=lambda index: index.name):
            statements.append(str(CreateIndex(index, if_not_exists=True)
                                  .compile(dialect=dialect)).strip())

    return statements


async def create_schema(connection, logger: logging.Logger) -> None:
    """
    Create missing tables on an asyncpg connection, in one transaction.
    """
    async with connection.transaction():
        for statement in schema_statements():
            await connection.execute(statement)

    logger.info("Database schema is up to date (%d tables)",
                len(Base.metadata.sorted_tables))
