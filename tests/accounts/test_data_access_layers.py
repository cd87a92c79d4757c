import asyncio
from datetime import datetime, timezone
import logging
import unittest
import uuid
from unittest.mock import AsyncMock, MagicMock
import asyncpg
from palisade_common.data_access_errors import (DataAccessError,
                                                DuplicateRecordError,
                                                TransactionTimeoutError)
from palisade_common.service_health_enums import ComponentDegradationLevel
from data_access_layer.credential_store import CredentialStore
from data_access_layer.email_verification_data_access_layer import \
    EmailVerificationDataAccessLayer
from data_access_layer.policy_data_access_layer import PolicyDataAccessLayer
from data_access_layer.user_data_access_layer import UserDataAccessLayer
from data_access_layer.user_device_session_data_access_layer import \
    UserDeviceSessionDataAccessLayer
from state_object import StateObject


def make_db() -> MagicMock:
    db = MagicMock()
    db.fetchrow = AsyncMock(return_value=None)
    db.fetch = AsyncMock(return_value=[])
    db.fetchval = AsyncMock(return_value=0)
    db.execute = AsyncMock(return_value="OK")
    db.executemany = AsyncMock(return_value=None)
    return db


class DataAccessTestCase(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.logger = logging.getLogger("test_logger")
        self.logger.addHandler(logging.NullHandler())
        self.db = make_db()
        self.state = StateObject()


class TestErrorMapping(DataAccessTestCase):
    async def asyncSetUp(self):
        await super().asyncSetUp()
        self.users = UserDataAccessLayer(self.db, self.logger, self.state)

    async def test_unique_violation_is_duplicate_record(self):
        error = asyncpg.UniqueViolationError("duplicate key")
        error.constraint_name = "users_email_key"
        self.db.fetchrow.side_effect = error

        with self.assertRaises(DuplicateRecordError) as ctx:
            await self.users.create_pending_user("jane@example.com")

        self.assertEqual(ctx.exception.constraint, "users_email_key")

    async def test_connection_loss_fully_degrades_database(self):
        self.db.fetchrow.side_effect = OSError("connection refused")

        with self.assertRaises(DataAccessError):
            await self.users.get_by_email("jane@example.com")

        self.assertEqual(self.state.database_health,
                         ComponentDegradationLevel.FULLY_DEGRADED)

    async def test_query_error_partly_degrades_database(self):
        self.db.fetchrow.side_effect = asyncpg.PostgresError("bad query")

        with self.assertRaises(DataAccessError):
            await self.users.get_by_email("jane@example.com")

        self.assertEqual(self.state.database_health,
                         ComponentDegradationLevel.PART_DEGRADED)

    async def test_success_clears_partial_degradation(self):
        self.state.mark_database_degraded(
            ComponentDegradationLevel.PART_DEGRADED, "Database failed")

        await self.users.get_by_email("jane@example.com")

        self.assertEqual(self.state.database_health,
                         ComponentDegradationLevel.NONE)

    async def test_rows_are_returned_as_dicts(self):
        user_id = uuid.uuid4()
        self.db.fetchrow.return_value = {"id": user_id, "email": "j@x.com"}

        user = await self.users.get_by_id(user_id)

        self.assertEqual(user, {"id": user_id, "email": "j@x.com"})
        query, arg = self.db.fetchrow.await_args.args
        self.assertIn("FROM users WHERE id = $1", query)
        self.assertEqual(arg, user_id)


class TestUserDataAccessLayer(DataAccessTestCase):
    async def asyncSetUp(self):
        await super().asyncSetUp()
        self.users = UserDataAccessLayer(self.db, self.logger, self.state)

    async def test_update_profile_writes_only_given_columns(self):
        user_id = uuid.uuid4()
        self.db.fetchrow.return_value = {"id": user_id}

        await self.users.update_profile(user_id, {"bio": "hello",
                                                  "name": "Jane"})

        args = self.db.fetchrow.await_args.args
        self.assertIn("SET name = $3, bio = $4, updated_at = $2", args[0])
        self.assertEqual(args[1], user_id)
        self.assertEqual(args[3:], ("Jane", "hello"))

    async def test_update_profile_rejects_unknown_columns(self):
        with self.assertRaises(ValueError):
            await self.users.update_profile(uuid.uuid4(), {"status": "X"})

        self.db.fetchrow.assert_not_awaited()

    async def test_empty_update_reads_user(self):
        await self.users.update_profile(uuid.uuid4(), {})

        query = self.db.fetchrow.await_args.args[0]
        self.assertTrue(query.startswith("SELECT"))

    async def test_update_of_missing_user_returns_none(self):
        result = await self.users.update_password(uuid.uuid4(), "hash")

        self.assertIsNone(result)


class TestOtherLayers(DataAccessTestCase):
    async def test_mark_completed_only_updates_open_tokens(self):
        layer = EmailVerificationDataAccessLayer(self.db, self.logger,
                                                 self.state)

        result = await layer.mark_completed(uuid.uuid4(),
                                            datetime.now(timezone.utc))

        self.assertIsNone(result)
        self.assertIn("completed_at IS NULL",
                      self.db.fetchrow.await_args.args[0])

    async def test_latest_token_is_newest_row(self):
        layer = EmailVerificationDataAccessLayer(self.db, self.logger,
                                                 self.state)

        await layer.get_latest(uuid.uuid4(), "REGISTER")

        query = self.db.fetchrow.await_args.args[0]
        self.assertIn("ORDER BY created_at DESC", query)
        self.assertIn("LIMIT 1", query)

    async def test_no_policies_writes_nothing(self):
        layer = PolicyDataAccessLayer(self.db, self.logger, self.state)

        await layer.create_user_policies(uuid.uuid4(), [])

        self.db.executemany.assert_not_awaited()

    async def test_policies_are_written_in_one_batch(self):
        layer = PolicyDataAccessLayer(self.db, self.logger, self.state)
        user_id = uuid.uuid4()
        policy_ids = [uuid.uuid4(), uuid.uuid4()]

        await layer.create_user_policies(user_id, policy_ids)

        query, rows = self.db.executemany.await_args.args
        self.assertIn("ON CONFLICT (user_id, policy_id) DO NOTHING", query)
        self.assertEqual([row[2] for row in rows], policy_ids)
        self.assertTrue(all(row[1] == user_id for row in rows))

    async def test_session_count(self):
        layer = UserDeviceSessionDataAccessLayer(self.db, self.logger,
                                                 self.state)
        self.db.fetchval.return_value = 3

        self.assertEqual(await layer.count_for_user(uuid.uuid4()), 3)

    async def test_claim_requires_completed_unclaimed_token(self):
        layer = EmailVerificationDataAccessLayer(self.db, self.logger,
                                                 self.state)

        result = await layer.claim_completed(uuid.uuid4(),
                                              datetime.now(timezone.utc))

        self.assertIsNone(result)
        query = self.db.fetchrow.await_args.args[0]
        self.assertIn("SET expired_at = completed_at", query)
        self.assertIn("completed_at IS NOT NULL", query)
        self.assertIn("expired_at > completed_at", query)

    async def test_session_upsert_is_one_statement(self):
        layer = UserDeviceSessionDataAccessLayer(self.db, self.logger,
                                                 self.state)
        user_id = uuid.uuid4()
        self.db.fetchrow.return_value = {"id": uuid.uuid4(),
                                         "user_id": user_id,
                                         "device_id": "device-1",
                                         "inserted": True}

        row = await layer.upsert(user_id, "device-1", "Laptop", "10.0.0.1")

        self.assertTrue(row["inserted"])
        self.db.fetchrow.assert_awaited_once()
        query = self.db.fetchrow.await_args.args[0]
        self.assertIn("ON CONFLICT (user_id, device_id) DO UPDATE", query)
        self.assertIn("(xmax = 0) AS inserted", query)


class TestCredentialStoreTransactions(DataAccessTestCase):
    def _transaction(self):
        transaction = MagicMock()
        transaction.__aenter__ = AsyncMock(return_value=None)
        transaction.__aexit__ = AsyncMock(return_value=False)
        self.db.transaction = MagicMock(return_value=transaction)
        return transaction

    async def test_operation_runs_inside_transaction(self):
        transaction = self._transaction()
        store = CredentialStore(self.db, self.logger, self.state)

        result = await store.run_in_transaction(AsyncMock(return_value=42))

        self.assertEqual(result, 42)
        transaction.__aenter__.assert_awaited_once()
        transaction.__aexit__.assert_awaited_once()

    async def test_failure_propagates_through_transaction(self):
        transaction = self._transaction()
        store = CredentialStore(self.db, self.logger, self.state)

        with self.assertRaises(RuntimeError):
            await store.run_in_transaction(
                AsyncMock(side_effect=RuntimeError("boom")))

        exc_type = transaction.__aexit__.await_args.args[0]
        self.assertIs(exc_type, RuntimeError)

    async def test_slow_transaction_times_out(self):
        self._transaction()
        store = CredentialStore(self.db, self.logger, self.state,
                                transaction_timeout=0.01)

        async def slow():
            await asyncio.sleep(1)

        with self.assertRaises(TransactionTimeoutError):
            await store.run_in_transaction(slow)

    async def test_layers_share_the_connection(self):
        store = CredentialStore(self.db, self.logger, self.state)

        await store.users.get_by_email("jane@example.com")
        await store.device_sessions.list_for_user(uuid.uuid4())

        self.db.fetchrow.assert_awaited_once()
        self.db.fetch.assert_awaited_once()
