"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
import uuid
from sqlalchemy import Column, DateTime, ForeignKey, Index, String, text
from sqlalchemy.dialects.postgresql import UUID
from .base import Base
from .created_updated_timestamp_mixin import CreatedUpdatedTimestampMixin


class EmailVerification(CreatedUpdatedTimestampMixin, Base):
    """
    One-time token authorising an email driven action.

    A (user, type) pair keeps every superseded row; the current token is the
    most recently created one. ``completed_at`` is written once.

    Attributes:
        id (UUID): Primary key.
        user_id (UUID): Owning user.
        token (str): Random token id embedded in the signed email link.
        type (str): REGISTER, RESETPASSWORD or DELETEACCOUNT.
        expired_at (datetime): Time after which the token is refused.
        completed_at (datetime): Consumption time, null while unused.
    """
    # pylint: disable=too-few-public-methods
    __tablename__ = "email_verifications"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
                server_default=text("gen_random_uuid()"))
    user_id = Column(UUID(as_uuid=True),
                     ForeignKey("users.id", ondelete="CASCADE"),
                     nullable=False)
    token = Column(String(64), unique=True, nullable=False)
    type = Column(String(16), nullable=False)
    expired_at = Column(DateTime(timezone=True), nullable=False)
    completed_at = Column(DateTime(timezone=True))

    __table_args__ = (
        Index("ix_email_verifications_user_type_created",
              "user_id", "type", "created_at"),
    )
