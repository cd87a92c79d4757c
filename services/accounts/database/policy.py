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


class Policy(CreatedUpdatedTimestampMixin, Base):
    """ A policy document users have to accept. Managed outside this
    service. """
    # pylint: disable=too-few-public-methods
    __tablename__ = "policies"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
                server_default=text("gen_random_uuid()"))
    name = Column(String(128), nullable=False)


class UserPolicy(CreatedUpdatedTimestampMixin, Base):
    """ Acceptance of a policy by a user. """
    # pylint: disable=too-few-public-methods
    __tablename__ = "user_policies"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
                server_default=text("gen_random_uuid()"))
    user_id = Column(UUID(as_uuid=True),
                     ForeignKey("users.id", ondelete="CASCADE"),
                     nullable=False)
    policy_id = Column(UUID(as_uuid=True),
                       ForeignKey("policies.id", ondelete="CASCADE"),
                       nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "policy_id", name="uq_user_policy"),
    )
