"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
from passlib.hash import bcrypt


class PasswordHasher:
    """ One-way password hashing with bcrypt. """

    def hash(self, plaintext: str) -> str:
        return bcrypt.hash(plaintext)

    def verify(self, plaintext: str, password_hash: str) -> bool:
        """ False on a mismatch or when the stored hash is unusable. """
        if not password_hash:
            return False

        try:
            return bcrypt.verify(plaintext, password_hash)

        except ValueError:
            return False
