"""
Flask decorators for bearer-token authentication.

Tokens are issued by the separate authentication service; this gateway only
verifies them (RFC 6750 Bearer usage, RFC 7519 JWT) and turns the claims into
a CallerIdentity. Capability checks happen later, in the operation gate.
"""

import logging
from functools import wraps
from typing import Dict, Optional

import jwt
from jwt.exceptions import (
    DecodeError,
    ExpiredSignatureError,
    InvalidSignatureError,
    InvalidTokenError,
    MissingRequiredClaimError,
)
from flask import current_app, g, jsonify, request

from directory_gateway.core.rbac import CallerIdentity, identity_from_claims

logger = logging.getLogger(__name__)


class TokenValidationError(Exception):
    """Exception raised when JWT token validation fails."""
    pass


def validate_jwt_token(token: str) -> Dict[str, object]:
    """
    Verify a JWT access token and return its claims.

    Checks the HMAC signature against the configured access secret and
    requires ``exp`` and ``sub``.

    Args:
        token: JWT token string (without "Bearer " prefix)

    Returns:
        dict: Validated token claims

    Raises:
        TokenValidationError: If any validation fails
    """
    cfg = current_app.config["APP_CONFIG"]
    try:
        return jwt.decode(
            token,
            cfg.jwt_access_secret,
            algorithms=[cfg.jwt_algorithm],
            options={"require": ["exp", "sub"]},
            leeway=cfg.jwt_leeway,
        )
    except ExpiredSignatureError:
        raise TokenValidationError("Token expired (exp claim)")
    except InvalidSignatureError:
        raise TokenValidationError("Invalid signature (token tampered or wrong key)")
    except MissingRequiredClaimError as e:
        raise TokenValidationError(f"Missing required claim: {e.claim}")
    except DecodeError as e:
        raise TokenValidationError(f"Token decode error (malformed JWT): {e}")
    except InvalidTokenError as e:
        raise TokenValidationError(f"Token validation failed: {e}")


def _unauthorized(message: str):
    response = jsonify({"error": "Unauthorized", "message": message})
    response.status_code = 401
    response.headers["WWW-Authenticate"] = 'Bearer realm="directory-gateway"'
    return response


def require_identity(fn):
    """
    Decorator requiring a valid Bearer token.

    On success the CallerIdentity is stored in ``g.identity``; on failure a
    401 JSON response is returned and the view never runs.

    Example:
        @bp.route("/all")
        @require_identity
        def find_all():
            identity = current_identity()
    """
    @wraps(fn)
    def wrapper(*args, **kwargs):
        auth_header = request.headers.get("Authorization", "")
        if not auth_header:
            logger.warning("Request missing Authorization header")
            return _unauthorized("Authorization header required. Use 'Authorization: Bearer <token>'")

        if not auth_header.startswith("Bearer "):
            logger.warning("Request with invalid Authorization format")
            return _unauthorized("Invalid Authorization header format. Expected 'Bearer <token>'")

        token = auth_header[7:].strip()
        if not token:
            return _unauthorized("Bearer token is empty")

        try:
            claims = validate_jwt_token(token)
        except TokenValidationError as e:
            logger.warning(f"JWT validation failed: {e}")
            return _unauthorized(str(e))

        g.identity = identity_from_claims(claims)
        logger.debug(f"Authenticated {g.identity.principal} with {sorted(c.value for c in g.identity.capabilities)}")
        return fn(*args, **kwargs)

    return wrapper


def current_identity() -> Optional[CallerIdentity]:
    """
    Get the CallerIdentity of the current request.

    Must be called after @require_identity.
    """
    return getattr(g, "identity", None)
