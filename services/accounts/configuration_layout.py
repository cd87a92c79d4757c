"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
from palisade_common.configuration.configuration_setup import (
    ConfigItemDataType,
    ConfigurationSetup,
    ConfigurationSetupItem)
from palisade_common.logging_consts import LOGGING_VALID_LOG_LEVELS

CONFIGURATION_LAYOUT = ConfigurationSetup(
    {
        "logging": [
            ConfigurationSetupItem(
                "log_level", ConfigItemDataType.STRING,
                valid_values=LOGGING_VALID_LOG_LEVELS, default_value="INFO")
        ],
        "database": [
            ConfigurationSetupItem("host", ConfigItemDataType.STRING,
                                   default_value="127.0.0.1"),
            ConfigurationSetupItem("port", ConfigItemDataType.UNSIGNED_INT,
                                   default_value=5432),
            ConfigurationSetupItem("name", ConfigItemDataType.STRING,
                                   is_required=True),
            ConfigurationSetupItem("user", ConfigItemDataType.STRING,
                                   is_required=True),
            ConfigurationSetupItem("password", ConfigItemDataType.STRING,
                                   is_required=True, is_secret=True),
            ConfigurationSetupItem("pool_min_size",
                                   ConfigItemDataType.UNSIGNED_INT,
                                   default_value=1),
            ConfigurationSetupItem("pool_max_size",
                                   ConfigItemDataType.UNSIGNED_INT,
                                   default_value=10),
            ConfigurationSetupItem("create_schema",
                                   ConfigItemDataType.BOOLEAN,
                                   default_value=False),
            ConfigurationSetupItem("transaction_timeout_seconds",
                                   ConfigItemDataType.FLOAT,
                                   default_value=5.0),
        ],
        "security": [
            ConfigurationSetupItem("jwt_secret", ConfigItemDataType.STRING,
                                   is_required=True, is_secret=True),
            ConfigurationSetupItem("jwt_issuer", ConfigItemDataType.STRING,
                                   default_value="palisade-accounts"),
            ConfigurationSetupItem("jwt_audience", ConfigItemDataType.STRING,
                                   default_value="palisade"),
            ConfigurationSetupItem("access_token_expires_in",
                                   ConfigItemDataType.UNSIGNED_INT,
                                   default_value=7 * 24 * 60 * 60),
            ConfigurationSetupItem("verification_token_ttl_hours",
                                   ConfigItemDataType.UNSIGNED_INT,
                                   default_value=24),
        ],
        "google": [
            ConfigurationSetupItem("client_id", ConfigItemDataType.STRING,
                                   default_value=""),
        ],
        "email": [
            ConfigurationSetupItem("sendgrid_api_key",
                                   ConfigItemDataType.STRING,
                                   default_value="", is_secret=True),
            ConfigurationSetupItem("sendgrid_api_url",
                                   ConfigItemDataType.STRING,
                                   default_value=
                                   "https://api.sendgrid.com/v3/mail/send"),
            ConfigurationSetupItem("sender_email", ConfigItemDataType.STRING,
                                   default_value="no-reply@palisade.local"),
            ConfigurationSetupItem("client_url", ConfigItemDataType.STRING,
                                   default_value="http://localhost:3000"),
            ConfigurationSetupItem("rollback_on_failure",
                                   ConfigItemDataType.BOOLEAN,
                                   default_value=False),
            ConfigurationSetupItem("timeout_seconds",
                                   ConfigItemDataType.FLOAT,
                                   default_value=10.0),
            ConfigurationSetupItem("template_verify_email",
                                   ConfigItemDataType.STRING,
                                   default_value=""),
            ConfigurationSetupItem("template_reset_password",
                                   ConfigItemDataType.STRING,
                                   default_value=""),
            ConfigurationSetupItem("template_change_password",
                                   ConfigItemDataType.STRING,
                                   default_value=""),
            ConfigurationSetupItem("template_login_device",
                                   ConfigItemDataType.STRING,
                                   default_value=""),
            ConfigurationSetupItem("template_delete_account",
                                   ConfigItemDataType.STRING,
                                   default_value=""),
            ConfigurationSetupItem("template_delete_account_success",
                                   ConfigItemDataType.STRING,
                                   default_value=""),
            ConfigurationSetupItem("template_restore_account_success",
                                   ConfigItemDataType.STRING,
                                   default_value=""),
        ],
        "lockout": [
            ConfigurationSetupItem("attempt_limit",
                                   ConfigItemDataType.UNSIGNED_INT,
                                   default_value=5),
            ConfigurationSetupItem("window_minutes",
                                   ConfigItemDataType.UNSIGNED_INT,
                                   default_value=15),
        ],
        "sessions": [
            ConfigurationSetupItem("max_device_sessions",
                                   ConfigItemDataType.UNSIGNED_INT,
                                   default_value=1),
        ],
        "geolocation": [
            ConfigurationSetupItem("ipinfo_base_url",
                                   ConfigItemDataType.STRING,
                                   default_value="https://ipinfo.io"),
            ConfigurationSetupItem("ipinfo_api_key",
                                   ConfigItemDataType.STRING,
                                   default_value="", is_secret=True),
            ConfigurationSetupItem("timeout_seconds",
                                   ConfigItemDataType.FLOAT,
                                   default_value=3.0),
        ],
    }
)
