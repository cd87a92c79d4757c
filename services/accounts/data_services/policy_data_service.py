"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
import logging
from data_access_layer.credential_store import CredentialStore
from data_services.base_data_service import BaseDataService
from service_result import ok, ServiceResult


class PolicyDataService(BaseDataService):
    """ The policies a user is asked to accept when registering. """

    def __init__(self, store: CredentialStore, logger: logging.Logger):
        super().__init__(store, logger.getChild(__name__))

    async def get_policies(self) -> ServiceResult:
        """
        Returns:
            ServiceResult: OK with every policy, oldest first. An empty list
            when none are defined.
        """
        try:
            return ok(await self._store.policies.list_policies())

        except Exception as ex:  # pylint: disable=broad-exception-caught
            return self._failure_from_exception("get_policies", ex)
