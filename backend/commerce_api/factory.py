"""Build the commerce API: settings, storage, auth, routes and error pages."""

from __future__ import annotations

from flask import Flask

from commerce_api.core.config import BaseConfig, get_config
from commerce_api.core.logger import configure_logging, init_app as init_logging


def _load_settings(
    app: Flask,
    config: str | type[BaseConfig] | object | None,
    instance_config_filename: str | None,
) -> None:
    app.config.from_object(get_config() if config is None else config)
    if instance_config_filename:
        # Deployment overrides live in ``instance/<filename>``
        app.config.from_pyfile(instance_config_filename, silent=True)


def _install_auth_settings(app: Flask) -> None:
    from commerce_api.api.deps import AUTH_SETTINGS_KEY
    from commerce_api.services.auth import AuthSettings

    # Raises on a missing key or a non-positive lifetime
    app.extensions[AUTH_SETTINGS_KEY] = AuthSettings.from_config(app.config)


def _install_components(app: Flask) -> None:
    from commerce_api import cli
    from commerce_api.api import init_app as init_api
    from commerce_api.core import cors, errors, extensions, proxy

    proxy.init_app(app)
    extensions.init_app(app)
    init_logging(app)
    cors.init_app(app)
    init_api(app)
    errors.init_app(app)
    cli.init_app(app)


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Return a ready-to-serve application.

    Token signing settings are checked before anything else is wired, so a
    bad ``JWT_SECRET_KEY`` stops the process at startup rather than on the
    first login.

    :param config: Config class, import path or object. ``None`` picks one
        from ``APP_ENV``.
    :param instance_relative_config: Also read ``instance/<filename>``.
    :param instance_config_filename: Name of the optional instance file.
    :raises ValidationError: If the auth settings are invalid.
    """
    app = Flask(__name__, instance_relative_config=instance_relative_config)
    _load_settings(
        app, config, instance_config_filename if instance_relative_config else None
    )
    configure_logging(app.config.get("LOG_LEVEL", "INFO"))
    _install_auth_settings(app)
    _install_components(app)
    return app
