"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""


class DataAccessError(Exception):
    """ Raised when a database operation could not be completed. """


class DuplicateRecordError(DataAccessError):
    """ Raised when a write breaks a unique constraint. """

    def __init__(self, message: str, constraint: str = None):
        super().__init__(message)
        self.constraint = constraint


class TransactionTimeoutError(DataAccessError):
    """
    Raised when a transaction did not finish within its time limit. The
    transaction has been rolled back and the operation can be retried.
    """
