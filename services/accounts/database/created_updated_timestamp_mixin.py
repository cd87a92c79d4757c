"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
from sqlalchemy import Column, DateTime, func


class CreatedUpdatedTimestampMixin:
    """
    SQLAlchemy mixin that adds standard timestamp fields to a model.

    Both fields are timezone-aware and default to the database clock, so rows
    written through plain asyncpg statements get them as well.

    Attributes:
        created_at (datetime): Timestamp when the record was created.
        updated_at (datetime): Timestamp when the record was last updated.
            The data access layers set it explicitly on every update.
    """
    # pylint: disable=too-few-public-methods
    created_at = Column(DateTime(timezone=True),
                        server_default=func.now(),
                        nullable=False)
    updated_at = Column(DateTime(timezone=True),
                        server_default=func.now(),
                        nullable=False)
