"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
from datetime import date, datetime
import enum
import json
import typing
import uuid
import quart


def json_default(value: typing.Any) -> typing.Any:
    """
    ``json.dumps`` hook for the values database rows carry: datetimes as
    ISO 8601 strings, UUIDs and enums as their string value.
    """
    if isinstance(value, (datetime, date)):
        return value.isoformat()

    if isinstance(value, uuid.UUID):
        return str(value)

    if isinstance(value, enum.Enum):
        return value.value

    raise TypeError(f"Object of type {type(value).__name__} is not JSON "
                    f"serializable")


class BaseApiView:
    """ Base class for the API views of a service. """

    @staticmethod
    def make_json_response(body: typing.Any, status: int) -> quart.Response:
        """
        Build a JSON response.

        Args:
            body: JSON serialisable body, see ``json_default`` for the
                extra types accepted.
            status: HTTP status code.

        Returns:
            quart.Response: The response.
        """
        return quart.Response(json.dumps(body, default=json_default),
                              status=int(status),
                              content_type="application/json")

    @staticmethod
    async def get_json_body() -> typing.Optional[dict]:
        """ The request body when it is a JSON object, otherwise None. """
        data = await quart.request.get_json(silent=True)
        return data if isinstance(data, dict) else None

    @staticmethod
    def get_bearer_token() -> typing.Optional[str]:
        """ Token of an ``Authorization: Bearer <token>`` header. """
        header: str = quart.request.headers.get("Authorization", "")
        scheme, _, token = header.partition(" ")

        if scheme.lower() != "bearer" or not token.strip():
            return None

        return token.strip()

    @staticmethod
    def get_client_ip() -> typing.Optional[str]:
        """ Client address, the first ``X-Forwarded-For`` hop if present. """
        forwarded: str = quart.request.headers.get("X-Forwarded-For", "")
        if forwarded:
            return forwarded.split(",")[0].strip()

        return quart.request.remote_addr
