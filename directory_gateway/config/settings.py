"""Settings loader with environment variable and Docker secrets integration."""
from __future__ import annotations
import os
import secrets
from dataclasses import dataclass
from pathlib import Path


def _load_secret_from_file(secret_name: str, env_var: str | None = None) -> str | None:
    """
    Load secret from /run/secrets (Docker secrets pattern).

    Priority:
    1. /run/secrets/{secret_name} (Docker secrets mount)
    2. Environment variable (fallback)

    Args:
        secret_name: Name of the secret file in /run/secrets
        env_var: Optional environment variable name to check as fallback

    Returns:
        Secret value or None if not found
    """
    secret_file = Path("/run/secrets") / secret_name

    if secret_file.exists() and secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
            if secret_value:
                print(f"[settings] ✓ Loaded {secret_name} from /run/secrets")
                return secret_value
        except OSError as e:
            print(f"[settings] ✗ Failed to read /run/secrets/{secret_name}: {e}")

    if env_var:
        secret_value = os.getenv(env_var)
        if secret_value:
            print(f"[settings] ✓ Loaded {env_var} from environment (fallback)")
            return secret_value

    return None


@dataclass
class AppConfig:
    """Application configuration container."""
    demo_mode: bool

    # Bearer token verification
    jwt_access_secret: str
    jwt_algorithm: str = "HS256"
    jwt_leeway: int = 5

    # Remote directory
    directory_base_url: str = ""
    directory_timeout: float = 5.0
    directory_max_retries: int = 3
    directory_retry_delay: float = 1.0
    directory_pool_size: int = 10

    log_level: str = "INFO"


def _get_or_generate(var_name: str, demo_default: str | None = None, required: bool = True, demo_mode: bool = False) -> str:
    """Get environment variable or use demo default."""
    value = os.environ.get(var_name)
    if value:
        return value

    if demo_mode and demo_default is not None:
        print(f"[demo-mode] Using default for {var_name}")
        os.environ[var_name] = demo_default
        return demo_default

    if not required:
        return ""

    raise RuntimeError(f"Environment variable {var_name} is required in production mode.")


def _read_number(var_name: str, default, cast, minimum=0):
    raw = os.environ.get(var_name)
    if raw is None or not raw.strip():
        return default
    try:
        value = cast(raw.strip())
    except ValueError:
        raise RuntimeError(f"Environment variable {var_name} must be a number, got '{raw}'") from None
    if value < minimum:
        raise RuntimeError(f"Environment variable {var_name} must be >= {minimum}, got {value}")
    return value


def load_settings() -> AppConfig:
    """Load application settings from environment and /run/secrets."""
    demo_mode = os.environ.get("DEMO_MODE", "false").lower() == "true"

    jwt_access_secret = _load_secret_from_file("jwt_access_secret", "JWT_ACCESS_SECRET")
    if not jwt_access_secret:
        if demo_mode:
            jwt_access_secret = secrets.token_urlsafe(48)
            os.environ["JWT_ACCESS_SECRET"] = jwt_access_secret
            print("[demo-mode] Generated temporary JWT_ACCESS_SECRET")
        else:
            raise RuntimeError("JWT_ACCESS_SECRET not found in /run/secrets or environment")

    directory_base_url = _get_or_generate(
        "DIRECTORY_BASE_URL",
        demo_default="http://localhost:8081/api",
        demo_mode=demo_mode,
    ).rstrip("/")

    directory_timeout = _read_number("DIRECTORY_TIMEOUT", 5.0, float, minimum=0.1)
    directory_max_retries = _read_number("DIRECTORY_MAX_RETRIES", 3, int)
    directory_retry_delay = _read_number("DIRECTORY_RETRY_DELAY", 1.0, float)
    directory_pool_size = _read_number("DIRECTORY_POOL_SIZE", 10, int, minimum=1)

    log_level = os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO"

    mode_label = "DEMO" if demo_mode else "PRODUCTION"
    print(f"[settings] Mode={mode_label}; directory={directory_base_url}; retries={directory_max_retries}")

    if demo_mode:
        print("[settings] WARNING: Demo token secret in use. Do not deploy with these defaults.")

    return AppConfig(
        demo_mode=demo_mode,
        jwt_access_secret=jwt_access_secret,
        directory_base_url=directory_base_url,
        directory_timeout=directory_timeout,
        directory_max_retries=directory_max_retries,
        directory_retry_delay=directory_retry_delay,
        directory_pool_size=directory_pool_size,
        log_level=log_level,
    )
