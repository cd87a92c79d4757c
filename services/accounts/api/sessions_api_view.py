"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
from http import HTTPStatus
import quart
from api.accounts_api_view import AccountsApiView, DEVICE_ID_HEADER


class SessionsApiView(AccountsApiView):
    """
    API view over the device sessions of the authenticated user.
    """

    async def update_active(self):
        """
        Mark the calling device (``X-Device-Id`` header) as active.

        Returns:
            quart.Response: 200 with the sessions of the user, or 440 with
            ``current_sessions`` when the device is no longer trusted.
        """
        device_id = quart.request.headers.get(DEVICE_ID_HEADER)
        if not device_id:
            return quart.jsonify(
                {"error": f"Missing {DEVICE_ID_HEADER} header"}), \
                HTTPStatus.BAD_REQUEST

        services = self._services()
        user = await self._authenticate(services)
        if isinstance(user, quart.Response):
            return user

        result = await services.device_sessions.update_active(user["id"],
                                                              device_id)
        return self._result_response(result)

    async def list_sessions(self):
        services = self._services()
        user = await self._authenticate(services)
        if isinstance(user, quart.Response):
            return user

        result = await services.device_sessions.list_active_sessions(
            user["id"])
        return self._result_response(result)

    async def revoke(self, device_id: str):
        """ Sign a device of the authenticated user out. """
        services = self._services()
        user = await self._authenticate(services)
        if isinstance(user, quart.Response):
            return user

        result = await services.device_sessions.revoke(user["id"], device_id)
        return self._result_response(result)
