"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
import logging
import uuid
from quart import Blueprint
from api.auth_api_view import AuthApiView
from data_services.service_factory import DataServiceFactory


def create_blueprint(logger: logging.Logger,
                     service_factory: DataServiceFactory) -> Blueprint:
    """
    Creates and registers a Quart Blueprint for handling authentication.

    This function initializes an `AuthApiView` object with the provided
    logger and service factory, and then defines the authentication API
    endpoints.

    Args:
        logger (logging.Logger): A logger instance for logging messages.
        service_factory (DataServiceFactory): Builds the data services of
            each request.

    Returns:
        Blueprint: A Quart `Blueprint` object containing the registered routes.
    """
    view = AuthApiView(logger, service_factory)

    blueprint = Blueprint('auth_api', __name__)

    logger.debug("Registering Auth API routes:")

    logger.debug("=> /auth/google/login [POST]")

    @blueprint.route("/google/login", methods=["POST"])
    async def auth_google_login_request():
        return await view.google_login()

    logger.debug("=> /auth/local/register [POST]")

    @blueprint.route("/local/register", methods=["POST"])
    async def auth_local_register_request():
        return await view.register()

    logger.debug("=> /auth/local/register/complete [POST]")

    @blueprint.route("/local/register/complete", methods=["POST"])
    async def auth_local_register_complete_request():
        return await view.register_complete()

    logger.debug("=> /auth/local/login [POST]")

    @blueprint.route("/local/login", methods=["POST"])
    async def auth_local_login_request():
        return await view.local_login()

    logger.debug("=> /auth/verify-email [POST]")

    @blueprint.route("/verify-email", methods=["POST"])
    async def auth_verify_email_request():
        return await view.verify_email()

    logger.debug("=> /auth/local/reset-password [POST]")

    @blueprint.route("/local/reset-password", methods=["POST"])
    async def auth_send_reset_password_request():
        return await view.send_reset_password()

    logger.debug("=> /auth/local/reset-password/<user_id> [PUT]")

    @blueprint.route("/local/reset-password/<uuid:user_id>", methods=["PUT"])
    async def auth_reset_password_request(user_id: uuid.UUID):
        return await view.reset_password(user_id)

    logger.debug("=> /auth/validate [GET]")

    @blueprint.route("/validate", methods=["GET"])
    async def auth_validate_request():
        return await view.validate()

    return blueprint
