"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
from sqlalchemy.orm import declarative_base

# Declarative base shared by every accounts table.
Base = declarative_base()
