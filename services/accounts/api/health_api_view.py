"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
import http
import logging
import time
from palisade_common.base_api_view import BaseApiView
from palisade_common.service_health_enums import (ComponentDegradationLevel,
                                                  overall_status)
from state_object import StateObject


class HealthApiView(BaseApiView):
    """
    A view that provides health check information for the application.

    This includes the health status of the database, outbound email and the
    service itself, system uptime, and application version.

    Attributes:
        _logger (logging.Logger): Logger instance for recording events.
        _state_object (StateObject): Shared state object containing health and
                                     version info.
    """

    def __init__(self, logger: logging.Logger,
                 state_object: StateObject) -> None:
        self._logger = logger.getChild(__name__)
        self._state_object = state_object

    async def health(self):
        """
        Performs a health check and returns a JSON response with system status.

        Returns:
            quart.Response: A JSON-formatted HTTP response indicating the
                            overall health, dependency statuses, current
                            issues (if any), uptime, and version.
        """
        uptime: int = int(time.time()) - self._state_object.startup_time

        components: dict = {
            "database": (self._state_object.database_health,
                         self._state_object.database_health_state_str),
            "email": (self._state_object.email_health,
                      self._state_object.email_health_state_str),
            "service": (self._state_object.service_health,
                        self._state_object.service_health_state_str),
        }

        issues: list = [
            {"component": name, "status": level.value, "details": details}
            for name, (level, details) in components.items()
            if level != ComponentDegradationLevel.NONE
        ]

        status = overall_status(level for level, _ in components.values())

        response: dict = {
            "status": status.value,
            "dependencies": {name: level.value
                             for name, (level, _) in components.items()},
            "issues": issues if issues else None,
            "uptime_seconds": uptime,
            "version": self._state_object.version
        }

        return self.make_json_response(response, http.HTTPStatus.OK)
