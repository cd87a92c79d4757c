import unittest
from unittest.mock import AsyncMock
from palisade_common.data_access_errors import DataAccessError
from accounts_fakes import FakeCredentialStore, make_logger
from data_services.policy_data_service import PolicyDataService
from service_result import ServiceStatus


class TestGetPolicies(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.store = FakeCredentialStore()
        self.service = PolicyDataService(self.store, make_logger())

    async def test_no_policies_is_empty_list(self):
        result = await self.service.get_policies()

        self.assertEqual(result.status, ServiceStatus.OK)
        self.assertEqual(result.data, [])

    async def test_lists_every_policy(self):
        terms = self.store.policies.add("terms-of-service")
        privacy = self.store.policies.add("privacy-policy")

        result = await self.service.get_policies()

        self.assertEqual(result.status, ServiceStatus.OK)
        self.assertEqual([policy["id"] for policy in result.data],
                         [terms["id"], privacy["id"]])

    async def test_storage_failure_is_internal_error(self):
        self.store.policies.list_policies = AsyncMock(
            side_effect=DataAccessError("Database operation failed"))

        result = await self.service.get_policies()

        self.assertEqual(result.status, ServiceStatus.INTERNAL_SERVER_ERROR)
