"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
import typing
import httpx


class GeoLookupError(Exception):
    """ The location of an ip address could not be resolved. """


class GeoLookupClient:
    """ Resolves ip addresses through the ipinfo.io API. """

    def __init__(self, base_url: str, api_key: str, timeout: float = 3.0,
                 transport: typing.Optional[httpx.AsyncBaseTransport] = None):
        self._base_url: str = base_url.rstrip("/")
        self._api_key: str = api_key
        self._timeout: float = timeout
        self._transport = transport

    async def lookup(self, ip_address: str) -> dict:
        """
        Look up an ip address.

        Returns:
            dict: ipinfo response, the region is under ``region``.

        Raises:
            GeoLookupError: The request failed or returned no JSON object.
        """
        params = {"token": self._api_key} if self._api_key else None

        try:
            async with httpx.AsyncClient(transport=self._transport,
                                         timeout=self._timeout) as client:
                response = await client.get(
                    f"{self._base_url}/{ip_address}", params=params)
                response.raise_for_status()
                info = response.json()

        except (httpx.HTTPError, ValueError) as ex:
            raise GeoLookupError(
                f"Lookup of {ip_address} failed: {ex}") from ex

        if not isinstance(info, dict):
            raise GeoLookupError(f"Unexpected lookup response for "
                                 f"{ip_address}")

        return info
