"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
import typing
import uuid
from pydantic import BaseModel, Field
from api.accounts_api_view import AccountsApiView
from api.auth_api_view import PASSWORD_MAX_LENGTH, PASSWORD_MIN_LENGTH
from data_services.user_data_service import UserUpdate
from service_result import ServiceResult


# --- Request Models ---
class UpdateUserRequest(BaseModel):
    """
    Request model for a profile update. Omitted fields are left unchanged,
    unknown fields are ignored.
    """
    name: typing.Optional[str] = Field(default=None, max_length=128)
    username: typing.Optional[str] = Field(default=None, min_length=3,
                                           max_length=30)
    bio: typing.Optional[str] = Field(default=None, max_length=512)
    phone_number: typing.Optional[str] = Field(default=None, max_length=32)
    image_url: typing.Optional[str] = Field(default=None, max_length=1024)
    password: typing.Optional[str] = Field(default=None,
                                           min_length=PASSWORD_MIN_LENGTH,
                                           max_length=PASSWORD_MAX_LENGTH)


class DeleteAccountRequest(BaseModel):
    """ Request model confirming an account deletion. """
    token: str


class LinkGoogleRequest(BaseModel):
    """ Request model for linking a Google account. """
    id_token: str


def deletion_requested_body(result: ServiceResult) -> dict:
    return {"message": "Account deletion email sent",
            "expired_at": result.data["expired_at"]}


class UsersApiView(AccountsApiView):
    """
    API view for account management. Every route acting on a user id only
    accepts the access token of that user.
    """

    async def get_user(self, user_id: uuid.UUID):
        services = self._services()
        denied = await self._authenticate_as(services, user_id)
        if denied is not None:
            return denied

        return self._result_response(await services.users.get_user(user_id))

    async def update_user(self, user_id: uuid.UUID):
        """ Change profile fields and, optionally, the password. """
        req = await self._parse_body(UpdateUserRequest)
        if isinstance(req, tuple):
            return req

        services = self._services()
        denied = await self._authenticate_as(services, user_id)
        if denied is not None:
            return denied

        update = UserUpdate(name=req.name,
                            username=req.username,
                            bio=req.bio,
                            phone_number=req.phone_number,
                            image_url=req.image_url,
                            password=req.password)
        result = await services.users.update_user(user_id, update)
        return self._result_response(result)

    async def check_username(self, username: str):
        result = await self._services().users.check_username(username)
        return self._result_response(result)

    async def request_delete(self, user_id: uuid.UUID):
        """ Email the link that confirms an account deletion. """
        services = self._services()
        denied = await self._authenticate_as(services, user_id)
        if denied is not None:
            return denied

        result = await services.users.send_email_delete_account(user_id)
        return self._result_response(
            result,
            deletion_requested_body(result) if result.is_success else None)

    async def delete_account(self):
        """ Confirm a deletion with the token from the email link. """
        req = await self._parse_body(DeleteAccountRequest)
        if isinstance(req, tuple):
            return req

        result = await self._services().users.delete_account(req.token)
        return self._result_response(result)

    async def restore(self, user_id: uuid.UUID):
        services = self._services()
        denied = await self._authenticate_as(services, user_id)
        if denied is not None:
            return denied

        return self._result_response(
            await services.users.restore_user(user_id))

    async def get_auth_providers(self, user_id: uuid.UUID):
        services = self._services()
        denied = await self._authenticate_as(services, user_id)
        if denied is not None:
            return denied

        return self._result_response(
            await services.users.get_auth_providers(user_id))

    async def link_google(self, user_id: uuid.UUID):
        req = await self._parse_body(LinkGoogleRequest)
        if isinstance(req, tuple):
            return req

        services = self._services()
        denied = await self._authenticate_as(services, user_id)
        if denied is not None:
            return denied

        result = await services.users.link_google_account(user_id,
                                                          req.id_token)
        return self._result_response(result)

    async def unlink_google(self, user_id: uuid.UUID):
        services = self._services()
        denied = await self._authenticate_as(services, user_id)
        if denied is not None:
            return denied

        return self._result_response(
            await services.users.unlink_google_account(user_id))
