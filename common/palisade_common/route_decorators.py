"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""

NOT_USING_DB_ATTRIBUTE = "_not_using_db"


def route_not_using_db(func):
    """
    Decorator to mark a route handler as not requiring database access.

    When applied, this sets an internal attribute `_not_using_db = True`
    on the function, which is checked by the ``before_request`` hook of the
    service so that no pooled connection is acquired for this route.

    Args:
        func (Callable): The route handler function to decorate.

    Returns:
        Callable: The same function with the `_not_using_db` attribute set.
    """
    setattr(func, NOT_USING_DB_ATTRIBUTE, True)
    return func


def is_route_using_db(func) -> bool:
    """
    Check whether a route handler needs a database connection.

    Args:
        func (Callable | None): The view function resolved for the request.

    Returns:
        bool: False if the handler was marked with ``route_not_using_db``.
    """
    return not getattr(func, NOT_USING_DB_ATTRIBUTE, False)
