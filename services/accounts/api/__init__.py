"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
import logging
import quart
from data_services.service_factory import DataServiceFactory
from state_object import StateObject
from .auth_api import create_blueprint as create_auth_bp
from .health_api import create_blueprint as create_health_bp
from .policy_api import create_blueprint as create_policy_bp
from .sessions_api import create_blueprint as create_sessions_bp
from .users_api import create_blueprint as create_users_bp


def create_routes(logger: logging.Logger,
                  state_object: StateObject,
                  service_factory: DataServiceFactory) -> quart.Blueprint:
    """
    Create and configure the API route blueprint for the application.

    This function initializes a Quart blueprint for the API routes and
    registers sub-blueprints.

    Args:
        logger (logging.Logger): Logger instance for logging within the APIS.
        state_object (StateObject): Health and version of the service.
        service_factory (DataServiceFactory): Builds the data services used
            by each request.

    Returns:
        quart.Blueprint: The configured API blueprint with registered
                         sub-routes.
    """
    api_bp = quart.Blueprint("api_routes", __name__)

    api_bp.register_blueprint(create_health_bp(logger, state_object))

    api_bp.register_blueprint(create_auth_bp(logger, service_factory),
                              url_prefix="/auth")

    api_bp.register_blueprint(create_sessions_bp(logger, service_factory),
                              url_prefix="/sessions")

    api_bp.register_blueprint(create_users_bp(logger, service_factory),
                              url_prefix="/users")

    api_bp.register_blueprint(create_policy_bp(logger, service_factory),
                              url_prefix="/policy")

    return api_bp
