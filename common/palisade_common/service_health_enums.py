"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
from enum import Enum
import typing


class ServiceDegradationStatus(Enum):
    """ Service degradation Status """

    # Everything is working fine
    HEALTHY = "healthy"

    # Some components are slow or experiencing minor issues
    DEGRADED = "degraded"

    # A major component is down, affecting service functionality
    CRITICAL = "critical"


class ComponentDegradationLevel(Enum):
    """ Component degradation Level """

    NONE = "none"
    PART_DEGRADED = "partial"
    FULLY_DEGRADED = "fully_degraded"


def overall_status(levels: typing.Iterable[ComponentDegradationLevel]) \
        -> ServiceDegradationStatus:
    """
    Collapse a set of component levels into a single service status.

    Any fully degraded component makes the service critical, any partially
    degraded one makes it degraded.

    Args:
        levels: Degradation levels of the individual components.

    Returns:
        ServiceDegradationStatus: The overall status.
    """
    levels = list(levels)

    if ComponentDegradationLevel.FULLY_DEGRADED in levels:
        return ServiceDegradationStatus.CRITICAL

    if ComponentDegradationLevel.PART_DEGRADED in levels:
        return ServiceDegradationStatus.DEGRADED

    return ServiceDegradationStatus.HEALTHY
