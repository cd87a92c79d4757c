"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
from dataclasses import dataclass, field
from datetime import timedelta
from palisade_common.configuration.configuration import Configuration


@dataclass(frozen=True)
class DatabaseSettings:
    """
    Connection settings for the accounts database.

    Attributes:
        host (str): Database host address.
        port (int): Database port number.
        name (str): Database name.
        user (str): Database username.
        password (str): Database password.
        pool_min_size (int): Minimum number of pooled connections.
        pool_max_size (int): Maximum number of pooled connections.
        create_schema (bool): Create missing tables at startup.
    """
    # pylint: disable=too-many-instance-attributes
    host: str
    port: int
    name: str
    user: str
    password: str
    pool_min_size: int = 1
    pool_max_size: int = 10
    create_schema: bool = False

    @classmethod
    def from_configuration(cls, config: Configuration) -> "DatabaseSettings":
        section = config.get_section("database")
        return cls(host=section["host"],
                   port=section["port"],
                   name=section["name"],
                   user=section["user"],
                   password=section["password"],
                   pool_min_size=section["pool_min_size"],
                   pool_max_size=section["pool_max_size"],
                   create_schema=section["create_schema"])


@dataclass(frozen=True)
class EmailTemplates:
    """ SendGrid dynamic template ids, one per kind of email sent. """
    verify_email: str = ""
    reset_password: str = ""
    change_password: str = ""
    login_device: str = ""
    delete_account: str = ""
    delete_account_success: str = ""
    restore_account_success: str = ""


@dataclass(frozen=True)
class AccountsSettings:
    """
    Settings of the accounts service, built once at startup and passed to
    every component that needs them.
    """
    # pylint: disable=too-many-instance-attributes
    jwt_secret: str
    jwt_issuer: str = "palisade-accounts"
    jwt_audience: str = "palisade"
    access_token_expires_in: int = 7 * 24 * 60 * 60
    verification_token_ttl: timedelta = timedelta(days=1)
    google_client_id: str = ""
    client_url: str = "http://localhost:3000"
    sendgrid_api_key: str = ""
    sendgrid_api_url: str = "https://api.sendgrid.com/v3/mail/send"
    sender_email: str = "no-reply@palisade.local"
    email_timeout_seconds: float = 10.0
    email_rollback_on_failure: bool = False
    email_templates: EmailTemplates = field(default_factory=EmailTemplates)
    login_attempt_limit: int = 5
    login_attempt_window: timedelta = timedelta(minutes=15)
    max_device_sessions: int = 1
    transaction_timeout_seconds: float = 5.0
    ipinfo_base_url: str = "https://ipinfo.io"
    ipinfo_api_key: str = ""
    geolocation_timeout_seconds: float = 3.0

    @classmethod
    def from_configuration(cls, config: Configuration) -> "AccountsSettings":
        """
        Build the settings from a processed configuration.

        Raises:
            ValueError: A value is out of its accepted range.
        """
        security = config.get_section("security")
        email = config.get_section("email")
        lockout = config.get_section("lockout")
        geolocation = config.get_section("geolocation")

        if lockout["attempt_limit"] < 1:
            raise ValueError("[ConfigError] 'lockout::attempt_limit' must "
                             "be at least 1")

        max_device_sessions = config.get_entry("sessions",
                                               "max_device_sessions")
        if max_device_sessions < 1:
            raise ValueError("[ConfigError] 'sessions::max_device_sessions' "
                             "must be at least 1")

        templates = EmailTemplates(
            verify_email=email["template_verify_email"],
            reset_password=email["template_reset_password"],
            change_password=email["template_change_password"],
            login_device=email["template_login_device"],
            delete_account=email["template_delete_account"],
            delete_account_success=email["template_delete_account_success"],
            restore_account_success=email[
                "template_restore_account_success"])

        return cls(
            jwt_secret=security["jwt_secret"],
            jwt_issuer=security["jwt_issuer"],
            jwt_audience=security["jwt_audience"],
            access_token_expires_in=security["access_token_expires_in"],
            verification_token_ttl=timedelta(
                hours=security["verification_token_ttl_hours"]),
            google_client_id=config.get_entry("google", "client_id"),
            client_url=email["client_url"].rstrip("/"),
            sendgrid_api_key=email["sendgrid_api_key"],
            sendgrid_api_url=email["sendgrid_api_url"],
            sender_email=email["sender_email"],
            email_timeout_seconds=email["timeout_seconds"],
            email_rollback_on_failure=email["rollback_on_failure"],
            email_templates=templates,
            login_attempt_limit=lockout["attempt_limit"],
            login_attempt_window=timedelta(minutes=lockout["window_minutes"]),
            max_device_sessions=max_device_sessions,
            transaction_timeout_seconds=config.get_entry(
                "database", "transaction_timeout_seconds"),
            ipinfo_base_url=geolocation["ipinfo_base_url"].rstrip("/"),
            ipinfo_api_key=geolocation["ipinfo_api_key"],
            geolocation_timeout_seconds=geolocation["timeout_seconds"])
