"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
import logging
from quart import Blueprint
from api.policy_api_view import PolicyApiView
from data_services.service_factory import DataServiceFactory


def create_blueprint(logger: logging.Logger,
                     service_factory: DataServiceFactory) -> Blueprint:
    """
    Creates the Quart Blueprint of the policy API.

    Args:
        logger (logging.Logger): A logger instance for logging messages.
        service_factory (DataServiceFactory): Builds the data services of
            each request.

    Returns:
        Blueprint: The blueprint with the policy routes.
    """
    view = PolicyApiView(logger, service_factory)

    blueprint = Blueprint('policy_api', __name__)

    logger.debug("Registering Policy API routes:")

    logger.debug("=> /policy [GET]")

    @blueprint.route("", methods=["GET"])
    async def policy_list_request():
        return await view.list_policies()

    return blueprint
