"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
import logging
import typing
from palisade_common.data_access_errors import (DuplicateRecordError,
                                                TransactionTimeoutError)
from data_access_layer.credential_store import CredentialStore
from external_services.email_dispatcher import EmailDispatchError
from external_services.token_codec import TokenCodec
from service_errors import ConflictError, InternalServerError
from service_result import failure, ServiceResult, ServiceStatus

# Never returned to clients.
PRIVATE_USER_FIELDS: tuple = ("password_hash",)


def sanitize_user(user: typing.Optional[dict]) -> typing.Optional[dict]:
    """ Copy of a user row without its private fields. """
    if user is None:
        return None

    return {key: value for key, value in user.items()
            if key not in PRIVATE_USER_FIELDS}


def build_auth_response(token_codec: TokenCodec, expires_in: int,
                        user: dict, is_first_time_login: bool) -> dict:
    """
    Body returned by a successful login or registration: the sanitized
    user, a signed access token and whether this is the first login.
    """
    access_token = token_codec.sign({"id": str(user["id"]),
                                     "name": user.get("name")},
                                    expires_in)
    return {"user": sanitize_user(user),
            "access_token": access_token,
            "is_first_time_login": is_first_time_login}


class AbortTransaction(Exception):
    """
    Raised inside ``run_in_transaction`` to roll back and answer with
    ``result`` instead of a generic failure.
    """

    def __init__(self, result: ServiceResult):
        super().__init__(str(result.status))
        self.result: ServiceResult = result


class BaseDataService:
    """
    Base of the accounts data services. Operations never let an exception
    escape: failures are returned as a ``ServiceResult``.
    """
    # pylint: disable=too-few-public-methods

    def __init__(self, store: CredentialStore, logger: logging.Logger):
        self._store: CredentialStore = store
        self._logger: logging.Logger = logger

    def _failure_from_exception(self, operation: str,
                                ex: Exception) -> ServiceResult:
        if isinstance(ex, AbortTransaction):
            return ex.result

        if isinstance(ex, DuplicateRecordError):
            self._logger.warning("%s: record already exists (%s)",
                                 operation, ex.constraint)
            return failure(ServiceStatus.CONFLICT,
                           ConflictError("Record already exists"))

        if isinstance(ex, (EmailDispatchError, TransactionTimeoutError)):
            self._logger.error("%s failed: %s", operation, ex)
            return failure(ServiceStatus.INTERNAL_SERVER_ERROR,
                           InternalServerError(str(ex)))

        self._logger.exception("%s failed unexpectedly: %s", operation, ex)
        return failure(ServiceStatus.INTERNAL_SERVER_ERROR,
                       InternalServerError(str(ex)))
