"""Flask application factory and bootstrap.

This module provides the create_app() factory function for initializing
the Flask application with its blueprints, error handlers and the shared
directory client.
"""
from __future__ import annotations
import logging
from typing import Optional

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

from directory_gateway.config import AppConfig, load_settings
from directory_gateway.core.directory import DirectoryClient, RetryPolicy, build_session


# ─────────────────────────────────────────────────────────────────────────────
# Application Factory
# ─────────────────────────────────────────────────────────────────────────────
def create_app(cfg: Optional[AppConfig] = None, directory_client: Optional[DirectoryClient] = None) -> Flask:
    """Create and configure Flask application.

    Args:
        cfg: Settings (defaults to load_settings())
        directory_client: Pre-built client, e.g. one wired to a fake transport
    """
    cfg = cfg or load_settings()
    _configure_logging(cfg.log_level)

    app = Flask(__name__)
    app.config["APP_CONFIG"] = cfg
    app.json.sort_keys = False  # type: ignore[attr-defined]

    # Trust X-Forwarded-* headers from proxy (nginx)
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)  # type: ignore

    # One client (and connection pool) per process, shared by all request threads
    app.extensions["directory_client"] = directory_client or build_directory_client(cfg)

    from directory_gateway.api import errors, health, persons

    app.register_blueprint(health.bp)
    app.register_blueprint(persons.bp, url_prefix="/api")
    errors.register_error_handlers(app)

    mode_label = "DEMO" if cfg.demo_mode else "PRODUCTION"
    app.logger.info(f"Mode={mode_label}; directory API registered at /api -> {cfg.directory_base_url}")
    return app


def build_directory_client(cfg: AppConfig) -> DirectoryClient:
    """Build the directory client described by ``cfg``."""
    return DirectoryClient(
        cfg.directory_base_url,
        session=build_session(cfg.directory_pool_size),
        timeout=cfg.directory_timeout,
        retry=RetryPolicy(max_retries=cfg.directory_max_retries, delay=cfg.directory_retry_delay),
    )


def _configure_logging(level: str) -> None:
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
