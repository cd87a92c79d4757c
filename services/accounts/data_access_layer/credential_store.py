"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
import logging
import typing
from palisade_common.base_data_access_layer import (
    BaseDataAccessLayer, DEFAULT_TRANSACTION_TIMEOUT)
from data_access_layer.auth_provider_data_access_layer import \
    AuthProviderDataAccessLayer
from data_access_layer.email_verification_data_access_layer import \
    EmailVerificationDataAccessLayer
from data_access_layer.policy_data_access_layer import PolicyDataAccessLayer
from data_access_layer.user_activity_log_data_access_layer import \
    UserActivityLogDataAccessLayer
from data_access_layer.user_data_access_layer import UserDataAccessLayer
from data_access_layer.user_device_session_data_access_layer import \
    UserDeviceSessionDataAccessLayer
from state_object import StateObject


class CredentialStore(BaseDataAccessLayer):
    """
    All accounts data access layers bound to one database connection.

    Because every layer shares the connection, statements issued by any of
    them inside ``run_in_transaction`` belong to the same transaction.

    Attributes:
        users (UserDataAccessLayer): User accounts.
        auth_providers (AuthProviderDataAccessLayer): Federated identity
            links.
        email_verifications (EmailVerificationDataAccessLayer): One-time
            verification tokens.
        activity_logs (UserActivityLogDataAccessLayer): Login activity.
        device_sessions (UserDeviceSessionDataAccessLayer): Trusted devices.
        policies (PolicyDataAccessLayer): Policies and their acceptance.
    """
    # pylint: disable=too-few-public-methods

    def __init__(self, db, logger: logging.Logger,
                 state_object: StateObject,
                 transaction_timeout: float = DEFAULT_TRANSACTION_TIMEOUT):
        super().__init__(db, logger)
        self._transaction_timeout: float = transaction_timeout

        self.users = UserDataAccessLayer(db, logger, state_object)
        self.auth_providers = AuthProviderDataAccessLayer(db, logger,
                                                          state_object)
        self.email_verifications = EmailVerificationDataAccessLayer(
            db, logger, state_object)
        self.activity_logs = UserActivityLogDataAccessLayer(db, logger,
                                                            state_object)
        self.device_sessions = UserDeviceSessionDataAccessLayer(
            db, logger, state_object)
        self.policies = PolicyDataAccessLayer(db, logger, state_object)

    async def run_in_transaction(self,
                                 operation: typing.Callable[
                                     [], typing.Awaitable[typing.Any]],
                                 timeout: typing.Optional[float] = None
                                 ) -> typing.Any:
        """
        Run ``operation`` atomically, by default bounded by the configured
        transaction timeout.
        """
        return await super().run_in_transaction(
            operation,
            timeout if timeout is not None else self._transaction_timeout)
