"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
import asyncio
import logging
import os
import sys
import typing
from palisade_common import __version__
from palisade_common.configuration.configuration import Configuration
from palisade_common.base_microservice_application \
    import BaseMicroserviceApplication
from palisade_common.logging_consts import LOGGING_DATETIME_FORMAT_STRING, \
                                           LOGGING_DEFAULT_LOG_LEVEL, \
                                           LOGGING_LOG_FORMAT_STRING
from accounts_settings import AccountsSettings, DatabaseSettings
from api import create_routes
from configuration_layout import CONFIGURATION_LAYOUT
from data_services.service_factory import DataServiceFactory, \
                                          ExternalServices
from external_services.email_dispatcher import EmailDispatcher
from external_services.geo_lookup_client import GeoLookupClient
from external_services.google_identity_client import GoogleIdentityClient
from external_services.password_hasher import PasswordHasher
from external_services.token_codec import TokenCodec
from state_object import StateObject

CONFIG_ENV_PREFIX: str = "PALISADE_ACCOUNTS"


class Application(BaseMicroserviceApplication):
    """ Palisade Accounts Service """

    def __init__(self, quart_instance):
        super().__init__()
        self._quart_instance = quart_instance
        self._config: typing.Optional[Configuration] = None
        self._state_object: StateObject = StateObject()
        self._settings: typing.Optional[AccountsSettings] = None
        self._database_settings: typing.Optional[DatabaseSettings] = None
        self._service_factory: typing.Optional[DataServiceFactory] = None

        self._logger = logging.getLogger(__name__)
        log_format = logging.Formatter(LOGGING_LOG_FORMAT_STRING,
                                       LOGGING_DATETIME_FORMAT_STRING)
        console_stream = logging.StreamHandler(sys.stdout)
        console_stream.setFormatter(log_format)
        self._logger.setLevel(LOGGING_DEFAULT_LOG_LEVEL)
        self._logger.propagate = True
        self._logger.addHandler(console_stream)

    @property
    def state_object(self) -> StateObject:
        """ Shared health and version state of the service. """
        return self._state_object

    @property
    def settings(self) -> typing.Optional[AccountsSettings]:
        return self._settings

    @property
    def database_settings(self) -> typing.Optional[DatabaseSettings]:
        """ Database settings, available once initialised. """
        return self._database_settings

    async def _initialise(self) -> bool:
        self._logger.info("Palisade Accounts Microservice %s", __version__)

        # Acceptable values
        truths: set = {"1", "true", "yes", "on"}
        falses: set = {"0", "false", "no", "off"}

        config_file = os.getenv(f"{CONFIG_ENV_PREFIX}_CONFIG_FILE", None)
        raw_required = os.getenv(f"{CONFIG_ENV_PREFIX}_CONFIG_FILE_REQUIRED",
                                 "false").strip().lower()

        if raw_required in truths:
            config_file_required: bool = True
        elif raw_required in falses:
            config_file_required: bool = False
        else:
            print(f"[FATAL ERROR] Invalid value for "
                  f"{CONFIG_ENV_PREFIX}_CONFIG_FILE_REQUIRED: "
                  f"'{raw_required}'", flush=True)
            return False

        if not config_file and config_file_required:
            print("[FATAL ERROR] Configuration file missing!", flush=True)
            return False

        self._config = Configuration(env_prefix=CONFIG_ENV_PREFIX)
        self._config.configure(CONFIGURATION_LAYOUT,
                               config_file,
                               config_file_required)

        try:
            self._config.process_config()
            self._database_settings = DatabaseSettings.from_configuration(
                self._config)
            self._settings = AccountsSettings.from_configuration(self._config)
            external_services = self._create_external_services()

        except ValueError as ex:
            self._logger.critical("Configuration error : %s", ex)
            return False

        self._logger.setLevel(self._config.get_entry("logging", "log_level"))

        self._display_configuration_details()

        # Set the version string on state object.
        self._state_object.version = __version__

        self._service_factory = DataServiceFactory(self._settings,
                                                   external_services,
                                                   self._logger,
                                                   self._state_object)

        self._quart_instance.register_blueprint(
            create_routes(self._logger, self._state_object,
                          self._service_factory))

        return True

    async def _main_loop(self) -> None:
        """ Abstract method for main application. """
        await asyncio.sleep(0.1)

    async def _shutdown(self):
        """ Shutdown logic. """

    def _create_external_services(self) -> ExternalServices:
        settings = self._settings

        return ExternalServices(
            token_codec=TokenCodec(settings.jwt_secret,
                                   settings.jwt_issuer,
                                   settings.jwt_audience),
            password_hasher=PasswordHasher(),
            email_dispatcher=EmailDispatcher(
                api_key=settings.sendgrid_api_key,
                api_url=settings.sendgrid_api_url,
                sender=settings.sender_email,
                logger=self._logger,
                state_object=self._state_object,
                timeout=settings.email_timeout_seconds),
            google_identity_client=GoogleIdentityClient(),
            geo_lookup_client=GeoLookupClient(
                settings.ipinfo_base_url,
                settings.ipinfo_api_key,
                timeout=settings.geolocation_timeout_seconds))

    def _display_configuration_details(self):
        self._logger.info("Configuration")
        self._logger.info("=============")

        for section in CONFIGURATION_LAYOUT.get_sections():
            self._logger.info("[%s]", section)

            for item in CONFIGURATION_LAYOUT.get_section(section):
                self._logger.info("=> %-32s : %s", item.item_name,
                                  self._config.display_value(section,
                                                             item.item_name))
