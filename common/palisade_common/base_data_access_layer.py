"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
import abc
import asyncio
import logging
import typing
from palisade_common.data_access_errors import TransactionTimeoutError

DEFAULT_TRANSACTION_TIMEOUT: float = 5.0


class BaseDataAccessLayer(abc.ABC):
    """
    Base class for data access layers that work on a single asyncpg
    connection (or anything exposing the same ``fetch``/``fetchrow``/
    ``execute``/``transaction`` methods).
    """

    def __init__(self, db, logger: logging.Logger):
        self._db = db
        self._logger: logging.Logger = logger.getChild(__name__)

    async def run_in_transaction(self,
                                 operation: typing.Callable[
                                     [], typing.Awaitable[typing.Any]],
                                 timeout: float = DEFAULT_TRANSACTION_TIMEOUT
                                 ) -> typing.Any:
        """
        Run a group of statements atomically.

        The operation is awaited inside a database transaction. If it raises
        or does not complete within ``timeout`` seconds the transaction is
        rolled back.

        Args:
            operation: Zero-argument coroutine function issuing the
                statements, using the same connection as this layer.
            timeout: Transaction time limit in seconds.

        Returns:
            Whatever the operation returns.

        Raises:
            TransactionTimeoutError: The time limit was exceeded.
        """

        async def _transaction():
            async with self._db.transaction():
                return await operation()

        try:
            return await asyncio.wait_for(_transaction(), timeout=timeout)

        except asyncio.TimeoutError as ex:
            self._logger.error("Transaction exceeded %.1fs and was rolled "
                               "back", timeout)
            raise TransactionTimeoutError(
                "Transaction timed out, please retry") from ex
