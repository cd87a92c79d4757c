"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
from api.accounts_api_view import AccountsApiView


class PolicyApiView(AccountsApiView):
    """ Public, read only view of the registration policies. """

    async def list_policies(self):
        result = await self._services().policies.get_policies()
        return self._result_response(result)
