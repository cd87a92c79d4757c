"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
import uuid
from sqlalchemy import (Column, DateTime, ForeignKey, String,
                        UniqueConstraint, func, text)
from sqlalchemy.dialects.postgresql import UUID
from .base import Base
from .created_updated_timestamp_mixin import CreatedUpdatedTimestampMixin


class UserDeviceSession(CreatedUpdatedTimestampMixin, Base):
    """
    A device currently trusted for a user.

    Attributes:
        id (UUID): Primary key.
        user_id (UUID): Owning user.
        device_id (str): Opaque identifier supplied by the client.
        device_name (str): Human readable device name.
        ip_address (str): Address the device was last seen from.
        last_active_at (datetime): Last authenticated use of the device.
    """
    # pylint: disable=too-few-public-methods
    __tablename__ = "user_device_sessions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
                server_default=text("gen_random_uuid()"))
    user_id = Column(UUID(as_uuid=True),
                     ForeignKey("users.id", ondelete="CASCADE"),
                     nullable=False)
    device_id = Column(String(255), nullable=False)
    device_name = Column(String(255))
    ip_address = Column(String(64))
    last_active_at = Column(DateTime(timezone=True),
                            server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "device_id", name="uq_user_device"),
    )
