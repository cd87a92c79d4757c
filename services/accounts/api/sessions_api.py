"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
import logging
from quart import Blueprint
from api.sessions_api_view import SessionsApiView
from data_services.service_factory import DataServiceFactory


def create_blueprint(logger: logging.Logger,
                     service_factory: DataServiceFactory) -> Blueprint:
    """
    Creates the Quart Blueprint of the device session API.

    Args:
        logger (logging.Logger): A logger instance for logging messages.
        service_factory (DataServiceFactory): Builds the data services of
            each request.

    Returns:
        Blueprint: The blueprint with the session routes.
    """
    view = SessionsApiView(logger, service_factory)

    blueprint = Blueprint('sessions_api', __name__)

    logger.debug("Registering Sessions API routes:")

    logger.debug("=> /sessions/active [PUT]")

    @blueprint.route("/active", methods=["PUT"])
    async def sessions_update_active_request():
        return await view.update_active()

    logger.debug("=> /sessions [GET]")

    @blueprint.route("", methods=["GET"])
    async def sessions_list_request():
        return await view.list_sessions()

    logger.debug("=> /sessions/<device_id> [DELETE]")

    @blueprint.route("/<device_id>", methods=["DELETE"])
    async def sessions_revoke_request(device_id: str):
        return await view.revoke(device_id)

    return blueprint
