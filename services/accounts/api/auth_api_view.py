"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
from http import HTTPStatus
import typing
import uuid
from pydantic import BaseModel, EmailStr, Field
import quart
from api.accounts_api_view import AccountsApiView
from database.enums import VerificationActionType
from service_result import ServiceResult

# bcrypt only uses the first 72 bytes of a password.
PASSWORD_MIN_LENGTH: int = 8
PASSWORD_MAX_LENGTH: int = 72


# --- Request Models ---
class GoogleLoginRequest(BaseModel):
    """
    Request model for signing in with Google.

    Attributes:
        id_token (str): Google ID token obtained by the client.
        device_id (Optional[str]): Identifier of the client device, the
            ``X-Device-Id`` header is used when absent.
        device_name (Optional[str]): Human readable device name.
    """
    id_token: str
    device_id: typing.Optional[str] = None
    device_name: typing.Optional[str] = None


class EmailRequest(BaseModel):
    """ Request model carrying only an email address. """
    email: EmailStr


class RegisterCompleteRequest(BaseModel):
    """
    Request model for completing a registration.

    Attributes:
        user_id (UUID): The PENDING user created by the register request.
        password (str): The chosen password.
        confirm_password (str): Must equal ``password``.
        policies (list[UUID]): Ids of the policies the user accepted.
        name (Optional[str]): Display name.
        username (str): Desired unique username.
    """
    user_id: uuid.UUID
    password: str = Field(min_length=PASSWORD_MIN_LENGTH,
                          max_length=PASSWORD_MAX_LENGTH)
    confirm_password: str
    policies: list[uuid.UUID] = Field(default_factory=list)
    name: typing.Optional[str] = Field(default=None, max_length=128)
    username: str = Field(min_length=3, max_length=30)


class LocalLoginRequest(BaseModel):
    """
    Request body schema for logging in with an email and password.

    Attributes:
        email (EmailStr): Email of the user.
        password (str): The plaintext password provided by the user. This will
            be validated against the stored password hash in the database.
        device_id (Optional[str]): Identifier of the client device.
        device_name (Optional[str]): Human readable device name.
    """
    email: EmailStr
    password: str
    device_id: typing.Optional[str] = None
    device_name: typing.Optional[str] = None


class VerifyEmailRequest(BaseModel):
    """ Request model for consuming a verification token. """
    token: str
    type: VerificationActionType = VerificationActionType.REGISTER


class ResetPasswordRequest(BaseModel):
    """ Request model for setting a new password. """
    password: str = Field(min_length=PASSWORD_MIN_LENGTH,
                          max_length=PASSWORD_MAX_LENGTH)
    confirm_password: str


def verification_sent_body(result: ServiceResult) -> dict:
    """ Success body of the requests that email a verification link. """
    return {"message": "Verification email sent",
            "expired_at": result.data["expired_at"]}


class AuthApiView(AccountsApiView):
    """
    API view handling sign up, sign in and the email verification flows.
    """

    async def google_login(self):
        """
        Handle sign in with a Google ID token.

        Returns:
            quart.Response: 200 with the user, access token and
            ``is_first_time_login``; 400, 401, 409 or 500 on failure.
        """
        req = await self._parse_body(GoogleLoginRequest)
        if isinstance(req, tuple):
            return req

        services = self._services()
        result = await services.google_auth.login(
            req.id_token, self._device_info(req.device_id, req.device_name))
        return self._result_response(result)

    async def register(self):
        """ Email a registration link to an address. """
        req = await self._parse_body(EmailRequest)
        if isinstance(req, tuple):
            return req

        result = await self._services().local_auth.send_email_register(
            req.email)
        return self._result_response(
            result,
            verification_sent_body(result) if result.is_success else None)

    async def register_complete(self):
        """ Complete a registration after the email was verified. """
        req = await self._parse_body(RegisterCompleteRequest)
        if isinstance(req, tuple):
            return req

        result = await self._services().local_auth.register(
            user_id=req.user_id,
            password=req.password,
            confirm_password=req.confirm_password,
            policies=req.policies,
            name=req.name,
            username=req.username)
        return self._result_response(result)

    async def local_login(self):
        """
        Handle login with email and password.

        Every attempt with a valid body is written to the activity log with
        its outcome, which is what the lockout policy counts.

        Returns:
            quart.Response: 200 on success; 401 for bad credentials, 403
            while locked (with ``remaining_seconds``), 409 for a user that
            did not complete registration.
        """
        req = await self._parse_body(LocalLoginRequest)
        if isinstance(req, tuple):
            return req

        services = self._services()
        device = self._device_info(req.device_id, req.device_name)
        result = await services.local_auth.login(req.email, req.password,
                                                 device)

        recorded = await services.login_activity.record_login_attempt(
            email=req.email,
            status=result.status,
            ip_address=self.get_client_ip(),
            user_agent=quart.request.headers.get("User-Agent"),
            failure_reason=None if result.is_success else
            result.data.message)
        if not recorded.is_success:
            self._logger.error("Login attempt could not be recorded: %s",
                               recorded.data.message)

        return self._result_response(result)

    async def verify_email(self):
        """ Consume the token of a verification link. """
        req = await self._parse_body(VerifyEmailRequest)
        if isinstance(req, tuple):
            return req

        result = await self._services().local_auth.verify_email(req.token,
                                                                req.type)
        return self._result_response(result)

    async def send_reset_password(self):
        """ Email a password reset link. """
        req = await self._parse_body(EmailRequest)
        if isinstance(req, tuple):
            return req

        result = await self._services().local_auth \
            .send_email_reset_password(req.email)
        return self._result_response(
            result,
            verification_sent_body(result) if result.is_success else None)

    async def reset_password(self, user_id: uuid.UUID):
        """
        Set a new password for a user whose reset link was followed through
        ``/auth/verify-email``.
        """
        req = await self._parse_body(ResetPasswordRequest)
        if isinstance(req, tuple):
            return req

        result = await self._services().local_auth.reset_password(
            user_id, req.password, req.confirm_password)
        return self._result_response(result)

    async def validate(self):
        """ Return the user of the bearer access token. """
        services = self._services()
        user = await self._authenticate(services)
        if isinstance(user, quart.Response):
            return user

        return self.make_json_response(user, HTTPStatus.OK)
