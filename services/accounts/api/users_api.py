"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
import logging
import uuid
from quart import Blueprint
from api.users_api_view import UsersApiView
from data_services.service_factory import DataServiceFactory


def create_blueprint(logger: logging.Logger,
                     service_factory: DataServiceFactory) -> Blueprint:
    """
    Creates the Quart Blueprint of the user account API.

    Args:
        logger (logging.Logger): A logger instance for logging messages.
        service_factory (DataServiceFactory): Builds the data services of
            each request.

    Returns:
        Blueprint: The blueprint with the user routes.
    """
    # pylint: disable=too-many-locals
    view = UsersApiView(logger, service_factory)

    blueprint = Blueprint('users_api', __name__)

    logger.debug("Registering Users API routes:")

    logger.debug("=> /users/check-username/<username> [GET]")

    @blueprint.route("/check-username/<username>", methods=["GET"])
    async def users_check_username_request(username: str):
        return await view.check_username(username)

    logger.debug("=> /users/delete-account [POST]")

    @blueprint.route("/delete-account", methods=["POST"])
    async def users_delete_account_request():
        return await view.delete_account()

    logger.debug("=> /users/<user_id> [GET]")

    @blueprint.route("/<uuid:user_id>", methods=["GET"])
    async def users_get_request(user_id: uuid.UUID):
        return await view.get_user(user_id)

    logger.debug("=> /users/<user_id> [PATCH]")

    @blueprint.route("/<uuid:user_id>", methods=["PATCH"])
    async def users_update_request(user_id: uuid.UUID):
        return await view.update_user(user_id)

    logger.debug("=> /users/<user_id>/delete-request [POST]")

    @blueprint.route("/<uuid:user_id>/delete-request", methods=["POST"])
    async def users_delete_request_request(user_id: uuid.UUID):
        return await view.request_delete(user_id)

    logger.debug("=> /users/<user_id>/restore [POST]")

    @blueprint.route("/<uuid:user_id>/restore", methods=["POST"])
    async def users_restore_request(user_id: uuid.UUID):
        return await view.restore(user_id)

    logger.debug("=> /users/<user_id>/auth-providers [GET]")

    @blueprint.route("/<uuid:user_id>/auth-providers", methods=["GET"])
    async def users_auth_providers_request(user_id: uuid.UUID):
        return await view.get_auth_providers(user_id)

    logger.debug("=> /users/<user_id>/auth-providers/google [POST]")

    @blueprint.route("/<uuid:user_id>/auth-providers/google",
                     methods=["POST"])
    async def users_link_google_request(user_id: uuid.UUID):
        return await view.link_google(user_id)

    logger.debug("=> /users/<user_id>/auth-providers/google [DELETE]")

    @blueprint.route("/<uuid:user_id>/auth-providers/google",
                     methods=["DELETE"])
    async def users_unlink_google_request(user_id: uuid.UUID):
        return await view.unlink_google(user_id)

    return blueprint
