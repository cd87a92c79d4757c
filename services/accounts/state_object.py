"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
import time
from dataclasses import dataclass, field
from palisade_common.service_health_enums import ComponentDegradationLevel


@dataclass
class StateObject:
    """
    Represents the state of the accounts service: health of its
    dependencies, version and startup time.

    Attributes:
        service_health (ComponentDegradationLevel): The current health status
                                                    of the service.
        service_health_state_str (str): A descriptive string representing the
                                        service health state.
        database_health (ComponentDegradationLevel): The current health status
                                                     of the database.
        database_health_state_str (str): A descriptive string representing the
                                         database health state.
        email_health (ComponentDegradationLevel): Health of outbound email
                                                  delivery.
        email_health_state_str (str): Description of the email health state.
        version (str): The version of the service.
        startup_time (int): The timestamp (Unix time) when the service was
                            started.
    """
    service_health: ComponentDegradationLevel = ComponentDegradationLevel.NONE
    service_health_state_str: str = ""
    database_health: ComponentDegradationLevel = ComponentDegradationLevel.NONE
    database_health_state_str: str = ""
    email_health: ComponentDegradationLevel = ComponentDegradationLevel.NONE
    email_health_state_str: str = ""
    version: str = ""
    startup_time: int = field(default_factory=lambda: int(time.time()))

    def mark_database_operational(self) -> None:
        """ Clear a partial database degradation after a good query. """
        if self.database_health != ComponentDegradationLevel.FULLY_DEGRADED:
            self.database_health = ComponentDegradationLevel.NONE
            self.database_health_state_str = "Database operational"

    def mark_database_degraded(self, level: ComponentDegradationLevel,
                               details: str) -> None:
        """ Record a database failure. """
        self.database_health = level
        self.database_health_state_str = details
