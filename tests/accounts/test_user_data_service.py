import unittest
import uuid
from unittest.mock import AsyncMock
from accounts_fakes import (FakeCredentialStore, FakePasswordHasher,
                            make_email_dispatcher, make_logger,
                            make_settings, make_token_codec, now)
from data_services.user_data_service import (merge_user_update,
                                             UserDataService, UserUpdate)
from data_services.verification_token_data_service import \
    VerificationTokenDataService
from database.enums import (AuthProviderName, UserStatus,
                            VerificationActionType)
from external_services.email_dispatcher import EmailSubject
from external_services.google_identity_client import IdTokenRejectedError
from service_result import ServiceStatus

GOOGLE = AuthProviderName.GOOGLE.value


class TestMergeUserUpdate(unittest.TestCase):
    def test_only_given_fields_are_written(self):
        changes = merge_user_update(UserUpdate(bio="hi", name="Jane"),
                                    FakePasswordHasher())

        self.assertEqual(changes, {"name": "Jane", "bio": "hi"})

    def test_password_is_written_as_hash(self):
        changes = merge_user_update(UserUpdate(password="new password"),
                                    FakePasswordHasher())

        self.assertEqual(changes, {"password_hash": "hashed::new password"})


class UserServiceTestCase(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        logger = make_logger()
        self.store = FakeCredentialStore()
        self.settings = make_settings()
        self.codec = make_token_codec(self.settings)
        self.dispatcher = make_email_dispatcher()
        self.hasher = FakePasswordHasher()
        self.google = AsyncMock()
        self.google.verify_id_token.return_value = {
            "sub": "google-sub-1", "email": "jane@gmail.com",
            "name": "Jane"}
        self.tokens = VerificationTokenDataService(
            self.store, self.codec, self.dispatcher, self.settings, logger)
        self.service = UserDataService(
            self.store, self.tokens, self.hasher, self.dispatcher,
            self.google, self.settings, logger)
        self.user = self.store.users.add(
            email="jane@example.com", name="Jane", username="jane",
            password_hash=self.hasher.hash("old password"),
            status=UserStatus.ACTIVATED.value)


class TestProfile(UserServiceTestCase):
    async def test_get_user_hides_password_hash(self):
        result = await self.service.get_user(self.user["id"])

        self.assertEqual(result.status, ServiceStatus.OK)
        self.assertNotIn("password_hash", result.data)

    async def test_get_unknown_user_is_not_found(self):
        result = await self.service.get_user(uuid.uuid4())

        self.assertEqual(result.status, ServiceStatus.NOT_FOUND)

    async def test_check_username(self):
        taken = await self.service.check_username("jane")
        free = await self.service.check_username("janet")

        self.assertEqual(taken.data, {"available": False})
        self.assertEqual(free.data, {"available": True})

    async def test_update_profile_fields(self):
        result = await self.service.update_user(
            self.user["id"], UserUpdate(bio="hello", username="janet"))

        self.assertEqual(result.status, ServiceStatus.OK)
        self.assertEqual(result.data["bio"], "hello")
        self.assertEqual(result.data["username"], "janet")
        self.dispatcher.send.assert_not_awaited()

    async def test_update_to_taken_username_is_conflict(self):
        self.store.users.add(email="other@example.com", username="bob")

        result = await self.service.update_user(self.user["id"],
                                                UserUpdate(username="bob"))

        self.assertEqual(result.status, ServiceStatus.CONFLICT)
        self.assertEqual(result.data.message, "Username already exists")

    async def test_same_password_is_conflict(self):
        result = await self.service.update_user(
            self.user["id"], UserUpdate(password="old password"))

        self.assertEqual(result.status, ServiceStatus.CONFLICT)
        self.assertEqual(result.data.message, "Duplicate password.")

    async def test_password_change_sends_email(self):
        result = await self.service.update_user(
            self.user["id"], UserUpdate(password="new password"))

        self.assertEqual(result.status, ServiceStatus.OK)
        stored = await self.store.users.get_by_id(self.user["id"])
        self.assertEqual(stored["password_hash"], "hashed::new password")
        self.assertEqual(self.dispatcher.send.await_args.kwargs["subject"],
                         EmailSubject.PASSWORD_CHANGED)


class TestDeleteAndRestore(UserServiceTestCase):
    async def test_delete_flow(self):
        requested = await self.service.send_email_delete_account(
            self.user["id"])
        self.assertEqual(requested.status, ServiceStatus.CREATED)
        self.assertEqual(requested.data["type"],
                         VerificationActionType.DELETE_ACCOUNT.value)

        record = self.store.data["email_verifications"][0]
        signed = self.codec.sign({"user_id": str(self.user["id"]),
                                  "token": record["token"]}, 60)
        deleted = await self.service.delete_account(signed)

        self.assertEqual(deleted.status, ServiceStatus.OK)
        self.assertIsNotNone(deleted.data["deleted_at"])
        self.assertEqual(self.dispatcher.send.await_args.kwargs["subject"],
                         EmailSubject.DELETE_ACCOUNT_SUCCESS)

        again = await self.service.send_email_delete_account(self.user["id"])
        self.assertEqual(again.status, ServiceStatus.CONFLICT)
        self.assertEqual(again.data.message, "User already deleted")

    async def test_delete_with_bad_token_is_unauthorized(self):
        result = await self.service.delete_account("garbage")

        self.assertEqual(result.status, ServiceStatus.UNAUTHORIZED)
        stored = await self.store.users.get_by_id(self.user["id"])
        self.assertIsNone(stored["deleted_at"])

    async def test_delete_request_for_pending_user_is_conflict(self):
        pending = self.store.users.add(email="p@example.com")

        result = await self.service.send_email_delete_account(pending["id"])

        self.assertEqual(result.status, ServiceStatus.CONFLICT)
        self.assertEqual(result.data.message, "User not activated")

    async def test_restore(self):
        await self.store.users.set_deleted_at(self.user["id"], now())

        result = await self.service.restore_user(self.user["id"])

        self.assertEqual(result.status, ServiceStatus.OK)
        self.assertIsNone(result.data["deleted_at"])
        self.assertEqual(self.dispatcher.send.await_args.kwargs["subject"],
                         EmailSubject.RESTORE_ACCOUNT_SUCCESS)

    async def test_restore_not_deleted_is_conflict(self):
        result = await self.service.restore_user(self.user["id"])

        self.assertEqual(result.status, ServiceStatus.CONFLICT)


class TestGoogleLink(UserServiceTestCase):
    async def test_link_and_unlink(self):
        linked = await self.service.link_google_account(self.user["id"],
                                                        "id-token")

        self.assertEqual(linked.status, ServiceStatus.CREATED)
        self.assertEqual(linked.data["provider_user_id"], "google-sub-1")
        providers = await self.service.get_auth_providers(self.user["id"])
        self.assertEqual([p["provider"] for p in providers.data], [GOOGLE])

        unlinked = await self.service.unlink_google_account(self.user["id"])
        self.assertEqual(unlinked.status, ServiceStatus.OK)
        providers = await self.service.get_auth_providers(self.user["id"])
        self.assertEqual(providers.data, [])

    async def test_second_link_is_conflict(self):
        await self.service.link_google_account(self.user["id"], "id-token")

        result = await self.service.link_google_account(self.user["id"],
                                                        "id-token")

        self.assertEqual(result.status, ServiceStatus.CONFLICT)
        self.assertEqual(result.data.message,
                         "Google account already linked")

    async def test_identity_of_another_user_is_conflict(self):
        other = self.store.users.add(email="other@example.com")
        await self.store.auth_providers.create(other["id"], GOOGLE,
                                               "google-sub-1", None)

        result = await self.service.link_google_account(self.user["id"],
                                                        "id-token")

        self.assertEqual(result.status, ServiceStatus.CONFLICT)
        self.assertEqual(result.data.message,
                         "Google account is linked to another user")

    async def test_rejected_id_token_is_unauthorized(self):
        self.google.verify_id_token.side_effect = IdTokenRejectedError("no")

        result = await self.service.link_google_account(self.user["id"],
                                                        "id-token")

        self.assertEqual(result.status, ServiceStatus.UNAUTHORIZED)

    async def test_unlink_without_link_is_not_found(self):
        result = await self.service.unlink_google_account(self.user["id"])

        self.assertEqual(result.status, ServiceStatus.NOT_FOUND)
