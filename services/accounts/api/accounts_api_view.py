"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
from http import HTTPStatus
import logging
import typing
import uuid
from pydantic import BaseModel, ValidationError
import quart
from palisade_common.base_api_view import BaseApiView
from data_services.device_session_data_service import DeviceInfo
from data_services.service_factory import DataServiceFactory, DataServices
from service_errors import ForbiddenError, UnauthorizedError
from service_result import ServiceResult

DEVICE_ID_HEADER: str = "X-Device-Id"
DEVICE_NAME_HEADER: str = "X-Device-Name"

ModelType = typing.TypeVar("ModelType", bound=BaseModel)


class AccountsApiView(BaseApiView):
    """
    Base of the accounts service views: request body parsing, rendering of
    service results and bearer token authentication.
    """

    def __init__(self, logger: logging.Logger,
                 service_factory: DataServiceFactory) -> None:
        self._logger = logger.getChild(__name__)
        self._service_factory = service_factory

    def _services(self) -> DataServices:
        """ Data services bound to the connection of this request. """
        return self._service_factory.create(quart.g.db)

    async def _parse_body(self, model: typing.Type[ModelType]
                          ) -> typing.Union[ModelType, tuple]:
        """
        Validate the JSON body against a request model.

        Returns:
            The model instance, or a 400 ``(json, status)`` response.
        """
        data = await self.get_json_body()
        if data is None:
            return quart.jsonify({"error": "Invalid or missing JSON body"}), \
                HTTPStatus.BAD_REQUEST

        try:
            return model(**data)

        except ValidationError as ex:
            return quart.jsonify({"error": str(ex)}), HTTPStatus.BAD_REQUEST

    def _result_response(self, result: ServiceResult,
                         body: typing.Any = None) -> quart.Response:
        """
        Render a service result, optionally with a different success body.
        """
        if result.is_success and body is not None:
            return self.make_json_response(body, result.status)

        return self.make_json_response(result.body(), result.status)

    def _device_info(self, device_id: typing.Optional[str] = None,
                     device_name: typing.Optional[str] = None
                     ) -> typing.Optional[DeviceInfo]:
        """ The calling device, from the body values or the headers. """
        device_id = device_id or quart.request.headers.get(DEVICE_ID_HEADER)
        if not device_id:
            return None

        return DeviceInfo(
            device_id=device_id,
            device_name=device_name or quart.request.headers.get(
                DEVICE_NAME_HEADER),
            ip_address=self.get_client_ip())

    async def _authenticate(self, services: DataServices
                            ) -> typing.Union[dict, quart.Response]:
        """
        Resolve the user of the bearer token.

        Returns:
            The sanitized user, or a 401 response.
        """
        token = self.get_bearer_token()
        if token is None:
            return self.make_json_response(
                UnauthorizedError("Missing bearer token").to_dict(),
                HTTPStatus.UNAUTHORIZED)

        result = await services.local_auth.validate_access_token(token)
        if not result.is_success:
            return self._result_response(result)

        return result.data

    async def _authenticate_as(self, services: DataServices,
                               user_id: uuid.UUID
                               ) -> typing.Optional[quart.Response]:
        """
        Check the bearer token belongs to ``user_id``.

        Returns:
            None when it does, otherwise the 401 or 403 response to send.
        """
        user = await self._authenticate(services)
        if isinstance(user, quart.Response):
            return user

        if user["id"] != user_id:
            self._logger.warning("User %s attempted to access user %s",
                                 user["id"], user_id)
            return self.make_json_response(ForbiddenError().to_dict(),
                                           HTTPStatus.FORBIDDEN)

        return None
