import logging
import os
import unittest
from contextlib import ExitStack
from unittest.mock import AsyncMock, call, MagicMock, patch
from quart import Blueprint, Quart
import application as app_mod
from application import Application, CONFIG_ENV_PREFIX
from palisade_common.configuration.configuration import MASKED_VALUE

REQUIRED_ENVIRONMENT = {
    "PALISADE_ACCOUNTS_DATABASE_NAME": "accounts",
    "PALISADE_ACCOUNTS_DATABASE_USER": "palisade",
    "PALISADE_ACCOUNTS_DATABASE_PASSWORD": "db-password",
    "PALISADE_ACCOUNTS_SECURITY_JWT_SECRET": "jwt-secret",
}


class TestApplication(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.quart_app = Quart(__name__)

    async def test_init_sets_logger_and_stream_handler(self):
        app = Application(self.quart_app)

        self.assertIs(app._quart_instance, self.quart_app)
        self.assertIsNone(app._config)
        self.assertIsNone(app.settings)
        self.assertIsInstance(app._logger, logging.Logger)
        self.assertEqual(app._logger.level, app_mod.LOGGING_DEFAULT_LOG_LEVEL)
        self.assertTrue(any(isinstance(h, logging.StreamHandler)
                            for h in app._logger.handlers))

    async def test_environment_prefix(self):
        self.assertEqual(CONFIG_ENV_PREFIX, "PALISADE_ACCOUNTS")

    @patch.dict(os.environ, {
        "PALISADE_ACCOUNTS_CONFIG_FILE_REQUIRED": "true"
    }, clear=True)
    async def test_initialise_missing_required_config_returns_false(self):
        app = Application(self.quart_app)

        with patch("builtins.print") as mock_print:
            ok = await app._initialise()

        self.assertFalse(ok)
        mock_print.assert_called_once_with(
            "[FATAL ERROR] Configuration file missing!", flush=True)

    @patch.dict(os.environ, {
        "PALISADE_ACCOUNTS_CONFIG_FILE_REQUIRED": "maybe"
    }, clear=True)
    async def test_initialise_invalid_required_flag_returns_false(self):
        app = Application(self.quart_app)

        with patch("builtins.print") as mock_print:
            ok = await app._initialise()

        self.assertFalse(ok)
        self.assertIn("'maybe'", mock_print.call_args.args[0])

    @patch.dict(os.environ, {}, clear=True)
    async def test_initialise_configuration_error_logs_critical(self):
        app = Application(self.quart_app)
        app._logger = MagicMock()

        mock_cfg = MagicMock()
        mock_cfg.process_config.side_effect = ValueError("bad config")

        with patch.object(app_mod, "Configuration",
                          return_value=mock_cfg) as mock_config_class:
            ok = await app._initialise()

        self.assertFalse(ok)
        app._logger.critical.assert_called_once()
        mock_config_class.assert_called_once_with(
            env_prefix="PALISADE_ACCOUNTS")
        mock_cfg.configure.assert_called_once_with(
            app_mod.CONFIGURATION_LAYOUT, None, False)

    @patch.dict(os.environ, {}, clear=True)
    async def test_initialise_without_required_values_fails(self):
        app = Application(self.quart_app)
        app._logger = MagicMock()

        ok = await app._initialise()

        self.assertFalse(ok)
        message = app._logger.critical.call_args.args[1]
        self.assertIn("database::name", str(message))

    @patch.dict(os.environ, {**REQUIRED_ENVIRONMENT,
                             "PALISADE_ACCOUNTS_LOCKOUT_ATTEMPT_LIMIT": "0"},
                clear=True)
    async def test_initialise_rejects_out_of_range_settings(self):
        app = Application(self.quart_app)
        app._logger = MagicMock()

        ok = await app._initialise()

        self.assertFalse(ok)
        app._logger.critical.assert_called_once()

    @patch.dict(os.environ, {}, clear=True)
    async def test_initialise_success_registers_routes(self):
        app = Application(self.quart_app)
        app._logger = MagicMock()

        mock_cfg = MagicMock()
        mock_cfg.get_entry = MagicMock(return_value="INFO")
        fake_bp = Blueprint("api_routes", __name__)

        with ExitStack() as stack:
            stack.enter_context(patch.object(app_mod, "Configuration",
                                             return_value=mock_cfg))
            mock_database = stack.enter_context(
                patch.object(app_mod, "DatabaseSettings"))
            mock_settings = stack.enter_context(
                patch.object(app_mod, "AccountsSettings"))
            mock_external = stack.enter_context(
                patch.object(Application, "_create_external_services"))
            mock_factory_class = stack.enter_context(
                patch.object(app_mod, "DataServiceFactory"))
            mock_display = stack.enter_context(
                patch.object(Application, "_display_configuration_details"))
            mock_create_routes = stack.enter_context(
                patch.object(app_mod, "create_routes", return_value=fake_bp))
            mock_register = MagicMock()
            self.quart_app.register_blueprint = mock_register

            ok = await app._initialise()

        self.assertTrue(ok)
        app._logger.setLevel.assert_called_once_with("INFO")
        mock_display.assert_called_once()
        self.assertIs(app.database_settings,
                      mock_database.from_configuration.return_value)
        mock_factory_class.assert_called_once_with(
            mock_settings.from_configuration.return_value,
            mock_external.return_value, app._logger, app.state_object)
        mock_create_routes.assert_called_once_with(
            app._logger, app.state_object, mock_factory_class.return_value)
        mock_register.assert_called_once_with(fake_bp)
        self.assertEqual(app.state_object.version, app_mod.__version__)

    @patch.dict(os.environ, REQUIRED_ENVIRONMENT, clear=True)
    async def test_initialise_from_environment(self):
        app = Application(self.quart_app)

        with patch.object(Application, "_display_configuration_details"):
            ok = await app.initialise()

        self.assertTrue(ok)
        self.assertTrue(app.is_initialised)
        self.assertEqual(app.database_settings.name, "accounts")
        self.assertEqual(app.database_settings.port, 5432)
        self.assertFalse(app.database_settings.create_schema)
        self.assertEqual(app.settings.jwt_secret, "jwt-secret")
        self.assertEqual(app.settings.max_device_sessions, 1)
        self.assertEqual(app.settings.login_attempt_limit, 5)
        routes = {rule.rule for rule in self.quart_app.url_map.iter_rules()}
        self.assertIn("/auth/local/login", routes)

    async def test_main_loop_sleeps(self):
        app = Application(self.quart_app)
        with patch("application.asyncio.sleep",
                   new=AsyncMock()) as mock_sleep:
            await app._main_loop()
        mock_sleep.assert_awaited_once_with(0.1)

    async def test_shutdown_noop(self):
        app = Application(self.quart_app)
        result = await app._shutdown()
        self.assertIsNone(result)

    @patch.dict(os.environ, REQUIRED_ENVIRONMENT, clear=True)
    async def test_display_configuration_details_masks_secrets(self):
        app = Application(self.quart_app)
        app._logger = MagicMock()
        app._config = app_mod.Configuration(env_prefix=CONFIG_ENV_PREFIX)
        app._config.configure(app_mod.CONFIGURATION_LAYOUT)
        app._config.process_config()

        app._display_configuration_details()

        app._logger.info.assert_has_calls([
            call("Configuration"),
            call("============="),
            call("[%s]", "logging"),
            call("=> %-32s : %s", "log_level", "INFO"),
        ])
        app._logger.info.assert_any_call("=> %-32s : %s", "password",
                                         MASKED_VALUE)
        app._logger.info.assert_any_call("=> %-32s : %s", "jwt_secret",
                                         MASKED_VALUE)
        app._logger.info.assert_any_call("=> %-32s : %s", "name",
                                         "accounts")
