"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
import uuid
from sqlalchemy import Column, DateTime, Index, Integer, String, func, text
from sqlalchemy.dialects.postgresql import UUID
from .base import Base


class UserActivityLog(Base):
    """
    Append-only audit entry of an authentication attempt. Read by the login
    lockout check, never updated.

    Attributes:
        id (UUID): Primary key.
        email (str): Email the attempt was made for.
        ip_address (str): Client address.
        user_agent (str): Client user agent.
        status (int): HTTP status the attempt was answered with.
        action (str): Kind of activity, e.g. LOGIN.
        failure_reason (str): Error message for failed attempts.
        location (str): Region resolved from the ip address, if any.
        login_time (datetime): Time of the attempt.
        created_at (datetime): Time the entry was written.
    """
    # pylint: disable=too-few-public-methods
    __tablename__ = "user_activity_logs"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
                server_default=text("gen_random_uuid()"))
    email = Column(String(255), nullable=False)
    ip_address = Column(String(64))
    user_agent = Column(String(512))
    status = Column(Integer, nullable=False)
    action = Column(String(16), nullable=False)
    failure_reason = Column(String(512))
    location = Column(String(128))
    login_time = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(),
                        nullable=False)

    __table_args__ = (
        Index("ix_user_activity_logs_email_action_created",
              "email", "action", "created_at"),
    )
