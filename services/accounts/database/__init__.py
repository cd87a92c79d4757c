"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
from .base import Base
from .user import User
from .auth_provider import AuthProvider
from .email_verification import EmailVerification
from .user_activity_log import UserActivityLog
from .user_device_session import UserDeviceSession
from .policy import Policy, UserPolicy

__all__ = ["Base", "User", "AuthProvider", "EmailVerification",
           "UserActivityLog", "UserDeviceSession", "Policy", "UserPolicy"]
