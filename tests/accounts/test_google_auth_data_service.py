import asyncio
import unittest
from unittest.mock import AsyncMock
from accounts_fakes import (FakeCredentialStore, make_email_dispatcher,
                            make_logger, make_settings, make_token_codec)
from data_services.device_session_data_service import (
    DeviceInfo, DeviceSessionDataService)
from data_services.google_auth_data_service import GoogleAuthDataService
from database.enums import AuthProviderName, UserStatus
from external_services.google_identity_client import (
    IdentityProviderUnavailableError, IdTokenRejectedError)
from service_errors import (AuthProviderMismatchError,
                            GoogleIdTokenMissingScopeError, InvalidTokenError)
from service_result import ServiceStatus

GOOGLE = AuthProviderName.GOOGLE.value
CLAIMS = {"sub": "google-sub-1", "email": "jane@example.com",
          "name": "Jane Doe"}


class TestGoogleLogin(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        logger = make_logger()
        self.store = FakeCredentialStore()
        self.settings = make_settings()
        self.codec = make_token_codec(self.settings)
        self.google = AsyncMock()
        self.google.verify_id_token.return_value = dict(CLAIMS)
        self.device_sessions = DeviceSessionDataService(
            self.store, make_email_dispatcher(), self.settings, logger)
        self.service = GoogleAuthDataService(
            self.store, self.google, self.device_sessions, self.codec,
            self.settings, logger)
        self.policy = self.store.policies.add("terms-of-service")

    async def test_first_login_creates_activated_user(self):
        result = await self.service.login("id-token")

        self.assertEqual(result.status, ServiceStatus.OK)
        self.assertTrue(result.data["is_first_time_login"])
        user = result.data["user"]
        self.assertEqual(user["email"], "jane@example.com")
        self.assertEqual(user["name"], "Jane Doe")
        self.assertEqual(user["status"], UserStatus.ACTIVATED.value)
        self.assertIsNone(user["username"])
        self.assertEqual(self.store.policies.accepted_by(user["id"]),
                         {self.policy["id"]})
        link = await self.store.auth_providers.get_for_user(user["id"],
                                                            GOOGLE)
        self.assertEqual(link["provider_user_id"], "google-sub-1")
        self.google.verify_id_token.assert_awaited_once_with(
            "id-token", self.settings.google_client_id)

    async def test_replayed_login_is_idempotent(self):
        first = await self.service.login("id-token")
        second = await self.service.login("id-token")

        self.assertEqual(second.status, ServiceStatus.OK)
        self.assertFalse(second.data["is_first_time_login"])
        self.assertEqual(first.data["user"]["id"],
                         second.data["user"]["id"])
        self.assertEqual(len(self.store.data["users"]), 1)
        self.assertEqual(len(self.store.data["auth_providers"]), 1)

    async def test_concurrent_first_logins_create_one_user(self):
        results = await asyncio.gather(self.service.login("id-token"),
                                       self.service.login("id-token"))

        self.assertEqual(len(self.store.data["users"]), 1)
        self.assertEqual(len(self.store.data["auth_providers"]), 1)
        statuses = sorted(result.status for result in results)
        self.assertEqual(statuses[0], ServiceStatus.OK)
        self.assertIn(statuses[1], (ServiceStatus.OK,
                                    ServiceStatus.CONFLICT))

    async def test_unlinked_user_is_linked_again(self):
        existing = self.store.users.add(
            email="jane@example.com", name=None, username="jane",
            status=UserStatus.ACTIVATED.value, password_hash="x")

        result = await self.service.login("id-token")

        self.assertEqual(result.status, ServiceStatus.OK)
        self.assertFalse(result.data["is_first_time_login"])
        self.assertEqual(result.data["user"]["id"], existing["id"])
        self.assertEqual(result.data["user"]["name"], "Jane Doe")
        link = await self.store.auth_providers.get_for_user(existing["id"],
                                                            GOOGLE)
        self.assertIsNotNone(link)
        self.assertEqual(self.store.policies.accepted_by(existing["id"]),
                         {self.policy["id"]})

    async def test_relink_keeps_existing_name(self):
        existing = self.store.users.add(email="jane@example.com",
                                        name="Janet",
                                        status=UserStatus.PENDING.value)

        result = await self.service.login("id-token")

        self.assertEqual(result.data["user"]["id"], existing["id"])
        self.assertEqual(result.data["user"]["name"], "Janet")
        self.assertEqual(result.data["user"]["status"],
                         UserStatus.ACTIVATED.value)

    async def test_email_linked_to_other_google_account_is_mismatch(self):
        existing = self.store.users.add(email="jane@example.com",
                                        status=UserStatus.ACTIVATED.value)
        await self.store.auth_providers.create(existing["id"], GOOGLE,
                                               "google-sub-other",
                                               "jane@example.com")

        result = await self.service.login("id-token")

        self.assertEqual(result.status, ServiceStatus.UNAUTHORIZED)
        self.assertIsInstance(result.data, AuthProviderMismatchError)

    async def test_missing_claim_is_missing_scope(self):
        self.google.verify_id_token.return_value = {"sub": "google-sub-1",
                                                    "email": "j@x.com"}

        result = await self.service.login("id-token")

        self.assertEqual(result.status, ServiceStatus.UNAUTHORIZED)
        self.assertIsInstance(result.data, GoogleIdTokenMissingScopeError)
        self.assertEqual(self.store.data["users"], [])

    async def test_rejected_token_is_invalid(self):
        self.google.verify_id_token.side_effect = IdTokenRejectedError(
            "Wrong audience")

        result = await self.service.login("id-token")

        self.assertEqual(result.status, ServiceStatus.UNAUTHORIZED)
        self.assertIsInstance(result.data, InvalidTokenError)

    async def test_google_unreachable_is_internal_error(self):
        self.google.verify_id_token.side_effect = \
            IdentityProviderUnavailableError("no route")

        result = await self.service.login("id-token")

        self.assertEqual(result.status, ServiceStatus.INTERNAL_SERVER_ERROR)

    async def test_link_creation_failure_rolls_back_user(self):
        self.store.auth_providers.create = AsyncMock(
            side_effect=RuntimeError("boom"))

        result = await self.service.login("id-token")

        self.assertEqual(result.status, ServiceStatus.INTERNAL_SERVER_ERROR)
        self.assertEqual(self.store.data["users"], [])

    async def test_login_with_device_tracks_session(self):
        result = await self.service.login(
            "id-token", DeviceInfo("device-1", "Phone", "10.0.0.2"))

        sessions = await self.store.device_sessions.list_for_user(
            result.data["user"]["id"])
        self.assertEqual(len(sessions), 1)
        self.assertEqual(sessions[0]["device_name"], "Phone")

    async def test_access_token_identifies_user(self):
        result = await self.service.login("id-token")

        claims = self.codec.verify(result.data["access_token"])
        self.assertEqual(claims["id"], str(result.data["user"]["id"]))
        self.assertEqual(claims["name"], "Jane Doe")
