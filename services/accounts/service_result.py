"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
from dataclasses import dataclass
import enum
import typing
from service_errors import AccountsError


class ServiceStatus(enum.IntEnum):
    """
    Result status of a data service operation. Values follow the HTTP
    status the API answers with.
    """
    OK = 200
    CREATED = 201
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    CONFLICT = 409
    # Non standard, used by clients to tell "signed out on this device"
    # apart from an ordinary missing record.
    SESSION_EXPIRED = 440
    INTERNAL_SERVER_ERROR = 500


@dataclass(frozen=True)
class ServiceResult:
    """
    Outcome of a data service operation.

    Attributes:
        status: Result status.
        data: Payload on success, an ``AccountsError`` on failure.
    """
    status: ServiceStatus
    data: typing.Any = None

    @property
    def is_success(self) -> bool:
        """ True for the 2xx statuses. """
        return self.status in (ServiceStatus.OK, ServiceStatus.CREATED)

    def body(self) -> typing.Any:
        """ JSON serialisable body for the HTTP response. """
        if isinstance(self.data, AccountsError):
            return self.data.to_dict()
        return self.data


def ok(data: typing.Any = None) -> ServiceResult:
    return ServiceResult(ServiceStatus.OK, data)


def created(data: typing.Any = None) -> ServiceResult:
    return ServiceResult(ServiceStatus.CREATED, data)


def failure(status: ServiceStatus, error: AccountsError) -> ServiceResult:
    return ServiceResult(status, error)
