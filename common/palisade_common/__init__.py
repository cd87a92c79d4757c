"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""

# Semantic version components
MAJOR = 0
MINOR = 3
PATCH = 0

# e.g. "alpha", "beta", "rc1", or None
PRE_RELEASE = "beta"

# Version tuple for comparisons
VERSION = (MAJOR, MINOR, PATCH, PRE_RELEASE)

# Construct the string representation
__version__ = f"V{MAJOR}.{MINOR}.{PATCH}"

if PRE_RELEASE:
    __version__ += f"-{PRE_RELEASE}"
