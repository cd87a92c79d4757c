"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
import typing


class AccountsError(Exception):
    """
    Base class for errors returned as the data of a failed service result.

    Subclasses set ``default_message``; ``to_dict`` gives the JSON body sent
    back to the client.
    """
    default_message: str = "Unexpected error"

    def __init__(self, message: typing.Optional[str] = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        """ Human readable error message. """
        return str(self)

    def to_dict(self) -> dict:
        """ JSON serialisable representation of the error. """
        return {"message": self.message}


class InvalidDataError(AccountsError):
    """ Malformed input that reached the business logic. """
    default_message = "Invalid data"


class ConflictError(AccountsError):
    """ Uniqueness or state conflict. """
    default_message = "Conflict"


class RecordNotFoundError(AccountsError):
    """ A referenced user, session or token does not exist. """
    default_message = "Record not found"


class UnauthorizedError(AccountsError):
    """ Bad credentials or a missing/invalid token. """
    default_message = "Unauthorized"


class InvalidTokenError(UnauthorizedError):
    default_message = "Invalid Token"


class TokenExpiredError(UnauthorizedError):
    default_message = "Token expired"


class ForbiddenError(AccountsError):
    default_message = "Forbidden"


class LoginLockedError(ForbiddenError):
    """ Local login is locked after too many failed attempts. """

    def __init__(self, remaining_seconds: int,
                 message: typing.Optional[str] = None):
        super().__init__(
            message or
            f"Too many failed login attempts, try again in "
            f"{remaining_seconds} seconds")
        self.remaining_seconds = remaining_seconds

    def to_dict(self) -> dict:
        return {"message": self.message,
                "remaining_seconds": self.remaining_seconds}


class SessionExpiredError(AccountsError):
    """
    The device session is no longer recognised. Carries the sessions that
    are currently active for the user so the client can show them.
    """

    def __init__(self, user_id, device_id: str,
                 current_sessions: typing.Optional[list] = None):
        self.current_sessions: list = current_sessions or []
        described = ", ".join(
            f"{session.get('device_name')} - {session.get('ip_address')}"
            for session in self.current_sessions)
        super().__init__(
            f"UserDeviceSession userId {user_id} with deviceId {device_id} "
            f"not found. Current sessions: [{described}]")

    def to_dict(self) -> dict:
        return {
            "message": self.message,
            "current_sessions": [
                {"device_id": session.get("device_id"),
                 "device_name": session.get("device_name"),
                 "ip_address": session.get("ip_address"),
                 "last_active_at": session.get("last_active_at")}
                for session in self.current_sessions
            ],
        }


class GoogleIdTokenMissingScopeError(UnauthorizedError):
    default_message = "Scope is missing. required scope: sub, email, name"


class AuthProviderMismatchError(UnauthorizedError):
    default_message = "incorrect authentication provider."


class InternalServerError(AccountsError):
    default_message = "Internal server error"
