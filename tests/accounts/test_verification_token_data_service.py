import asyncio
from datetime import timedelta
import unittest
from urllib.parse import parse_qs, urlparse
from accounts_fakes import (FakeCredentialStore, expired, make_email_dispatcher,
                            make_logger, make_settings, make_token_codec, now)
from data_services.verification_token_data_service import \
    VerificationTokenDataService
from database.enums import UserStatus, VerificationActionType
from external_services.email_dispatcher import (EmailDispatchError,
                                                EmailSubject)
from service_errors import InvalidTokenError, TokenExpiredError
from service_result import ServiceStatus


class VerificationTokenTestCase(unittest.IsolatedAsyncioTestCase):
    settings_overrides: dict = {}

    async def asyncSetUp(self):
        self.store = FakeCredentialStore()
        self.settings = make_settings(**self.settings_overrides)
        self.codec = make_token_codec(self.settings)
        self.dispatcher = make_email_dispatcher()
        self.service = VerificationTokenDataService(
            self.store, self.codec, self.dispatcher, self.settings,
            make_logger())
        self.user = self.store.users.add(email="jane@example.com",
                                         status=UserStatus.PENDING.value)

    def _sent_token(self, call_index: int = -1) -> str:
        link = self.dispatcher.send.await_args_list[call_index] \
            .kwargs["template_data"]["verification_link"]
        return parse_qs(urlparse(link).query)["token"][0]


class TestRequestToken(VerificationTokenTestCase):
    async def test_creates_token_and_sends_link(self):
        result = await self.service.request_token(
            self.user, VerificationActionType.REGISTER)

        self.assertEqual(result.status, ServiceStatus.CREATED)
        self.assertEqual(result.data["type"], "REGISTER")
        self.assertIsNone(result.data["completed_at"])
        self.assertEqual(len(self.store.data["email_verifications"]), 1)

        kwargs = self.dispatcher.send.await_args.kwargs
        self.assertEqual(kwargs["to"], "jane@example.com")
        self.assertEqual(kwargs["subject"], EmailSubject.VERIFY_EMAIL)
        link = kwargs["template_data"]["verification_link"]
        self.assertTrue(link.startswith(
            "https://app.palisade.test/verify/register?token="))

        payload = self.codec.verify(self._sent_token())
        self.assertEqual(payload["user_id"], str(self.user["id"]))
        self.assertEqual(payload["token"], result.data["token"])

    async def test_live_token_is_reused(self):
        first = await self.service.request_token(
            self.user, VerificationActionType.REGISTER)
        second = await self.service.request_token(
            self.user, VerificationActionType.REGISTER)

        self.assertEqual(first.data["id"], second.data["id"])
        self.assertEqual(len(self.store.data["email_verifications"]), 1)
        self.assertEqual(self.dispatcher.send.await_count, 2)

    async def test_expired_token_is_superseded(self):
        first = await self.service.request_token(
            self.user, VerificationActionType.REGISTER)
        self.store.data["email_verifications"][0]["expired_at"] = expired()

        second = await self.service.request_token(
            self.user, VerificationActionType.REGISTER)

        self.assertNotEqual(first.data["id"], second.data["id"])
        self.assertEqual(len(self.store.data["email_verifications"]), 2)

    async def test_token_types_are_independent(self):
        await self.service.request_token(self.user,
                                         VerificationActionType.REGISTER)
        reset = await self.service.request_token(
            self.user, VerificationActionType.RESET_PASSWORD)

        self.assertEqual(reset.data["type"], "RESETPASSWORD")
        self.assertEqual(len(self.store.data["email_verifications"]), 2)
        self.assertEqual(self.dispatcher.send.await_args.kwargs["subject"],
                         EmailSubject.RESET_PASSWORD)

    async def test_email_failure_keeps_token_by_default(self):
        self.dispatcher.send.side_effect = EmailDispatchError(
            "Unable to send email")

        result = await self.service.request_token(
            self.user, VerificationActionType.REGISTER)

        self.assertEqual(result.status, ServiceStatus.INTERNAL_SERVER_ERROR)
        self.assertEqual(result.data.message, "Unable to send email")
        self.assertEqual(len(self.store.data["email_verifications"]), 1)
        self.assertEqual(self.store.transactions, 0)


class TestRequestTokenWithRollback(VerificationTokenTestCase):
    settings_overrides = {"email_rollback_on_failure": True}

    async def test_email_failure_rolls_token_back(self):
        self.dispatcher.send.side_effect = EmailDispatchError(
            "Unable to send email")

        result = await self.service.request_token(
            self.user, VerificationActionType.REGISTER)

        self.assertEqual(result.status, ServiceStatus.INTERNAL_SERVER_ERROR)
        self.assertEqual(self.store.data["email_verifications"], [])
        self.assertEqual(self.store.transactions, 1)

    async def test_success_commits_token(self):
        result = await self.service.request_token(
            self.user, VerificationActionType.DELETE_ACCOUNT)

        self.assertEqual(result.status, ServiceStatus.CREATED)
        self.assertEqual(len(self.store.data["email_verifications"]), 1)


class TestCompleteToken(VerificationTokenTestCase):
    async def _issue(self, action_type=VerificationActionType.REGISTER):
        await self.service.request_token(self.user, action_type)
        return self._sent_token()

    async def test_completes_once(self):
        signed = await self._issue()

        result = await self.service.complete_token(
            signed, VerificationActionType.REGISTER)

        self.assertEqual(result.status, ServiceStatus.OK)
        self.assertEqual(result.data["user_id"], self.user["id"])
        self.assertIsNotNone(
            self.store.data["email_verifications"][0]["completed_at"])

        again = await self.service.complete_token(
            signed, VerificationActionType.REGISTER)
        self.assertEqual(again.status, ServiceStatus.UNAUTHORIZED)
        self.assertIsInstance(again.data, InvalidTokenError)

    async def test_concurrent_completion_only_one_wins(self):
        signed = await self._issue()

        results = await asyncio.gather(
            self.service.complete_token(signed,
                                        VerificationActionType.REGISTER),
            self.service.complete_token(signed,
                                        VerificationActionType.REGISTER))

        statuses = sorted(result.status for result in results)
        self.assertEqual(statuses, [ServiceStatus.OK,
                                    ServiceStatus.UNAUTHORIZED])

    async def test_wrong_type_is_invalid(self):
        signed = await self._issue()

        result = await self.service.complete_token(
            signed, VerificationActionType.RESET_PASSWORD)

        self.assertEqual(result.status, ServiceStatus.UNAUTHORIZED)
        self.assertEqual(result.body(), {"message": "Invalid Token"})

    async def test_garbage_token_is_invalid(self):
        result = await self.service.complete_token(
            "not-a-token", VerificationActionType.REGISTER)

        self.assertIsInstance(result.data, InvalidTokenError)

    async def test_user_mismatch_is_invalid(self):
        await self._issue()
        record = self.store.data["email_verifications"][0]
        forged = self.codec.sign({"user_id": "someone-else",
                                  "token": record["token"]}, 60)

        result = await self.service.complete_token(
            forged, VerificationActionType.REGISTER)

        self.assertIsInstance(result.data, InvalidTokenError)

    async def test_expired_row_is_expired(self):
        signed = await self._issue()
        self.store.data["email_verifications"][0]["expired_at"] = expired()

        result = await self.service.complete_token(
            signed, VerificationActionType.REGISTER)

        self.assertEqual(result.status, ServiceStatus.UNAUTHORIZED)
        self.assertIsInstance(result.data, TokenExpiredError)
        self.assertEqual(result.body(), {"message": "Token expired"})

    async def test_expired_signature_is_expired(self):
        await self._issue()
        record = self.store.data["email_verifications"][0]
        stale = self.codec.sign({"user_id": str(self.user["id"]),
                                 "token": record["token"]}, -10)

        result = await self.service.complete_token(
            stale, VerificationActionType.REGISTER)

        self.assertIsInstance(result.data, TokenExpiredError)

    async def test_superseded_token_cannot_be_completed_after_new_one(self):
        first_signed = await self._issue()
        self.store.data["email_verifications"][0]["expired_at"] = \
            now() - timedelta(seconds=1)
        await self._issue()

        result = await self.service.complete_token(
            first_signed, VerificationActionType.REGISTER)

        self.assertEqual(result.status, ServiceStatus.UNAUTHORIZED)


class TestClaimVerified(VerificationTokenTestCase):
    async def _complete(self, action_type=VerificationActionType.REGISTER):
        await self.service.request_token(self.user, action_type)
        result = await self.service.complete_token(self._sent_token(),
                                                   action_type)
        self.assertEqual(result.status, ServiceStatus.OK)

    async def test_completed_token_is_claimed_once(self):
        await self._complete()

        first = await self.service.claim_verified(
            self.user["id"], VerificationActionType.REGISTER)
        second = await self.service.claim_verified(
            self.user["id"], VerificationActionType.REGISTER)

        self.assertEqual(first.status, ServiceStatus.OK)
        self.assertEqual(first.data["user_id"], self.user["id"])
        self.assertEqual(second.status, ServiceStatus.UNAUTHORIZED)
        self.assertIsInstance(second.data, InvalidTokenError)

    async def test_concurrent_claims_only_one_wins(self):
        await self._complete()

        results = await asyncio.gather(
            self.service.claim_verified(self.user["id"],
                                        VerificationActionType.REGISTER),
            self.service.claim_verified(self.user["id"],
                                        VerificationActionType.REGISTER))

        statuses = sorted(result.status for result in results)
        self.assertEqual(statuses, [ServiceStatus.OK,
                                    ServiceStatus.UNAUTHORIZED])

    async def test_no_token_is_invalid(self):
        result = await self.service.claim_verified(
            self.user["id"], VerificationActionType.REGISTER)

        self.assertEqual(result.status, ServiceStatus.UNAUTHORIZED)
        self.assertIsInstance(result.data, InvalidTokenError)

    async def test_uncompleted_token_is_invalid(self):
        await self.service.request_token(self.user,
                                         VerificationActionType.REGISTER)

        result = await self.service.claim_verified(
            self.user["id"], VerificationActionType.REGISTER)

        self.assertIsInstance(result.data, InvalidTokenError)

    async def test_other_type_is_invalid(self):
        await self._complete(VerificationActionType.DELETE_ACCOUNT)

        result = await self.service.claim_verified(
            self.user["id"], VerificationActionType.RESET_PASSWORD)

        self.assertIsInstance(result.data, InvalidTokenError)

    async def test_expired_token_is_expired(self):
        await self._complete()
        self.store.data["email_verifications"][0]["expired_at"] = expired()

        result = await self.service.claim_verified(
            self.user["id"], VerificationActionType.REGISTER)

        self.assertEqual(result.status, ServiceStatus.UNAUTHORIZED)
        self.assertIsInstance(result.data, TokenExpiredError)

    async def test_claimed_token_makes_way_for_a_new_one(self):
        await self._complete()
        await self.service.claim_verified(self.user["id"],
                                          VerificationActionType.REGISTER)

        result = await self.service.request_token(
            self.user, VerificationActionType.REGISTER)

        self.assertEqual(result.status, ServiceStatus.CREATED)
        self.assertEqual(len(self.store.data["email_verifications"]), 2)
