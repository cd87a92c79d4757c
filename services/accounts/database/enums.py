"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
import enum


class UserStatus(str, enum.Enum):
    """ Lifecycle status of a user account. """
    PENDING = "PENDING"
    ACTIVATED = "ACTIVATED"
    DEACTIVATED = "DEACTIVATED"


class VerificationActionType(str, enum.Enum):
    """ Action an email verification token authorises. """
    REGISTER = "REGISTER"
    RESET_PASSWORD = "RESETPASSWORD"
    DELETE_ACCOUNT = "DELETEACCOUNT"


class ActivityAction(str, enum.Enum):
    """ Kind of entry in the user activity log. """
    LOGIN = "LOGIN"


class AuthProviderName(str, enum.Enum):
    """ Supported external identity providers. """
    GOOGLE = "google"
