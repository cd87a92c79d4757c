"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
from dataclasses import dataclass
import logging
from accounts_settings import AccountsSettings
from data_access_layer.credential_store import CredentialStore
from data_services.device_session_data_service import \
    DeviceSessionDataService
from data_services.google_auth_data_service import GoogleAuthDataService
from data_services.local_auth_data_service import LocalAuthDataService
from data_services.login_activity_data_service import \
    LoginActivityDataService
from data_services.policy_data_service import PolicyDataService
from data_services.user_data_service import UserDataService
from data_services.verification_token_data_service import \
    VerificationTokenDataService
from external_services.email_dispatcher import EmailDispatcher
from external_services.geo_lookup_client import GeoLookupClient
from external_services.google_identity_client import GoogleIdentityClient
from external_services.password_hasher import PasswordHasher
from external_services.token_codec import TokenCodec
from state_object import StateObject


@dataclass(frozen=True)
class DataServices:
    """ The data services of one request, sharing one credential store. """
    login_activity: LoginActivityDataService
    verification_tokens: VerificationTokenDataService
    device_sessions: DeviceSessionDataService
    local_auth: LocalAuthDataService
    google_auth: GoogleAuthDataService
    users: UserDataService
    policies: PolicyDataService


@dataclass(frozen=True)
class ExternalServices:
    """ Long lived clients shared by every request. """
    token_codec: TokenCodec
    password_hasher: PasswordHasher
    email_dispatcher: EmailDispatcher
    google_identity_client: GoogleIdentityClient
    geo_lookup_client: GeoLookupClient


class DataServiceFactory:
    """
    Wires the data services for a request around the database connection
    the request acquired.
    """
    # pylint: disable=too-few-public-methods

    def __init__(self, settings: AccountsSettings,
                 external_services: ExternalServices,
                 logger: logging.Logger,
                 state_object: StateObject):
        self._settings = settings
        self._external = external_services
        self._logger = logger
        self._state_object = state_object

    def create(self, db) -> DataServices:
        """
        Build the data services for a database connection.

        Args:
            db: asyncpg connection of the request.

        Returns:
            DataServices: Services bound to the connection.
        """
        store = CredentialStore(
            db, self._logger, self._state_object,
            transaction_timeout=self._settings.transaction_timeout_seconds)

        login_activity = LoginActivityDataService(
            store, self._external.geo_lookup_client, self._settings,
            self._logger)
        verification_tokens = VerificationTokenDataService(
            store, self._external.token_codec,
            self._external.email_dispatcher, self._settings, self._logger)
        device_sessions = DeviceSessionDataService(
            store, self._external.email_dispatcher, self._settings,
            self._logger)

        local_auth = LocalAuthDataService(
            store, verification_tokens, login_activity, device_sessions,
            self._external.password_hasher, self._external.token_codec,
            self._external.email_dispatcher, self._settings, self._logger)
        google_auth = GoogleAuthDataService(
            store, self._external.google_identity_client, device_sessions,
            self._external.token_codec, self._settings, self._logger)
        users = UserDataService(
            store, verification_tokens, self._external.password_hasher,
            self._external.email_dispatcher,
            self._external.google_identity_client, self._settings,
            self._logger)
        policies = PolicyDataService(store, self._logger)

        return DataServices(login_activity=login_activity,
                            verification_tokens=verification_tokens,
                            device_sessions=device_sessions,
                            local_auth=local_auth,
                            google_auth=google_auth,
                            users=users,
                            policies=policies)
