"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
import uuid
from sqlalchemy import Column, ForeignKey, String, UniqueConstraint, text
from sqlalchemy.dialects.postgresql import UUID
from .base import Base
from .created_updated_timestamp_mixin import CreatedUpdatedTimestampMixin


class AuthProvider(CreatedUpdatedTimestampMixin, Base):
    """
    SQLAlchemy model linking a user account to an external identity provider
    (e.g. Google).

    A user has at most one link per provider, and a provider subject id can
    only ever be linked to one user.

    Attributes:
        id (UUID): Primary key.
        user_id (UUID): Owning user (`users.id`), cascade deleted.
        provider (str): The name of the provider (e.g. "google").
        provider_user_id (str): Subject id issued by the provider.
        provider_email (str): Email the provider reported for the subject.

    Table constraints:
        uq_provider_user_id: Ensures uniqueness of `(provider,
            provider_user_id)` pairs.
        uq_user_provider: One link per provider for a user.
    """
    # pylint: disable=too-few-public-methods
    __tablename__ = "auth_providers"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
                server_default=text("gen_random_uuid()"))
    user_id = Column(UUID(as_uuid=True),
                     ForeignKey("users.id", ondelete="CASCADE"),
                     nullable=False)
    provider = Column(String(32), nullable=False)
    provider_user_id = Column(String(255), nullable=False)
    provider_email = Column(String(255))

    __table_args__ = (
        UniqueConstraint("provider", "provider_user_id",
                         name="uq_provider_user_id"),
        UniqueConstraint("user_id", "provider", name="uq_user_provider"),
    )
