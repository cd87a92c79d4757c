"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
import uuid
from sqlalchemy import Column, DateTime, String, text
from sqlalchemy.dialects.postgresql import UUID
from .base import Base
from .created_updated_timestamp_mixin import CreatedUpdatedTimestampMixin


class User(CreatedUpdatedTimestampMixin, Base):
    """
    SQLAlchemy model representing a user account.

    A user is created ``PENDING`` by the first email registration request
    (no password, no username yet) or ``ACTIVATED`` directly by a first
    Google login. Registration completion moves it to ``ACTIVATED``.
    Soft delete is tracked by ``deleted_at`` and is independent of status.

    Attributes:
        id (UUID): Primary key, unique identifier for the user.
        name (str): Optional display name.
        username (str): Unique username, null until registration completes.
        email (str): Unique email address of the user.
        password_hash (str): bcrypt hash. Null for PENDING users and for
            users that only sign in through Google.
        bio (str): Optional biography.
        phone_number (str): Optional phone number.
        image_url (str): Optional profile image URL.
        status (str): PENDING, ACTIVATED or DEACTIVATED.
        latest_login_at (datetime): Time of the most recent login.
        deleted_at (datetime): Soft delete time, null when not deleted.
    """
    # pylint: disable=too-few-public-methods
    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
                server_default=text("gen_random_uuid()"))
    name = Column(String(128))
    username = Column(String(30), unique=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(128))
    bio = Column(String(512))
    phone_number = Column(String(32))
    image_url = Column(String(1024))
    status = Column(String(16), nullable=False, server_default="PENDING")
    latest_login_at = Column(DateTime(timezone=True))
    deleted_at = Column(DateTime(timezone=True))
