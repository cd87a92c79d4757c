"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
import enum
import logging
import typing
import httpx
from palisade_common.service_health_enums import ComponentDegradationLevel
from state_object import StateObject


class EmailSubject(str, enum.Enum):
    """ Subjects of the emails sent by the accounts service. """
    VERIFY_EMAIL = "Palisade - Verify your email address"
    RESET_PASSWORD = "Palisade - Reset your password"
    PASSWORD_CHANGED = "Palisade - Your password has been changed"
    LOGIN_DEVICE = "Palisade - Sign in from a new device"
    DELETE_ACCOUNT = "Palisade - Confirm your account deletion"
    DELETE_ACCOUNT_SUCCESS = "Palisade - Your account has been deleted"
    RESTORE_ACCOUNT_SUCCESS = "Palisade - Your account has been reactivated"


class EmailDispatchError(Exception):
    """ An email could not be handed over to the mail provider. """


class EmailDispatcher:
    """
    Sends templated emails through the SendGrid v3 mail send API.

    When no API key is configured the dispatcher only logs the message,
    which is what development and test deployments use.
    """
    # pylint: disable=too-many-arguments, too-many-positional-arguments

    def __init__(self, api_key: str, api_url: str, sender: str,
                 logger: logging.Logger, state_object: StateObject,
                 timeout: float = 10.0,
                 transport: typing.Optional[httpx.AsyncBaseTransport] = None):
        self._api_key: str = api_key
        self._api_url: str = api_url
        self._sender: str = sender
        self._logger = logger.getChild(__name__)
        self._state_object: StateObject = state_object
        self._timeout: float = timeout
        self._transport = transport

    async def send(self, to: str, subject: str, template_id: str,
                   template_data: dict) -> None:
        """
        Send an email built from a dynamic template.

        Args:
            to: Recipient address.
            subject: Email subject.
            template_id: SendGrid dynamic template id.
            template_data: Values substituted into the template.

        Raises:
            EmailDispatchError: The provider could not be reached or refused
                the message.
        """
        subject = str(getattr(subject, "value", subject))

        if not self._api_key:
            self._logger.info("Email delivery disabled, not sending '%s'",
                              subject)
            self._logger.debug("Undelivered email to %s: %s", to,
                               template_data)
            return

        body: dict = {
            "personalizations": [{"to": [{"email": to}],
                                  "dynamic_template_data": template_data}],
            "from": {"email": self._sender},
            "subject": subject,
            "template_id": template_id,
        }

        try:
            async with httpx.AsyncClient(transport=self._transport,
                                         timeout=self._timeout) as client:
                response = await client.post(
                    self._api_url,
                    headers={"Authorization": f"Bearer {self._api_key}"},
                    json=body)
                response.raise_for_status()

        except httpx.HTTPError as ex:
            self._logger.error("Sending email '%s' failed: %s", subject, ex)
            self._state_object.email_health = \
                ComponentDegradationLevel.PART_DEGRADED
            self._state_object.email_health_state_str = \
                "Email delivery failing"
            raise EmailDispatchError(
                f"Unable to send email '{subject}'") from ex

        self._state_object.email_health = ComponentDegradationLevel.NONE
        self._state_object.email_health_state_str = ""
        self._logger.debug("Sent email '%s' to %s", subject, to)
