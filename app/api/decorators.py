"""
Flask decorators for bearer token authentication and role checks.

Access tokens are issued by the Keycloak realm and verified locally:
- RSA-SHA256 signature verification via JWKS (RFC 7517)
- Expiration and issuer validation (RFC 7519)
- JWKS caching (1-hour refresh)

Verified claims are mapped to ROLE_* authorities by app.core.rbac.
"""

import logging
from functools import wraps
from typing import Optional, Dict, Any

import jwt
from jwt import PyJWKClient
from jwt.exceptions import (
    ExpiredSignatureError,
    InvalidIssuerError,
    InvalidSignatureError,
    DecodeError,
    PyJWTError,
)
from flask import request, current_app, g

from app.core.errors import AuthenticationError, AuthorizationError
from app.core.rbac import has_authority, map_claims_to_authorities

logger = logging.getLogger(__name__)

# Global JWKS client (cached singleton)
_jwks_client: Optional[PyJWKClient] = None


class TokenValidationError(AuthenticationError):
    """Raised when JWT token validation fails."""


def get_jwks_client() -> PyJWKClient:
    """
    Get cached JWKS client (singleton pattern).

    Returns:
        PyJWKClient: Configured client for the Keycloak realm
    """
    global _jwks_client

    if _jwks_client is None:
        cfg = current_app.config["APP_CONFIG"]
        logger.info(f"Initializing JWKS client for: {cfg.jwks_url}")
        _jwks_client = PyJWKClient(
            cfg.jwks_url,
            cache_keys=True,
            max_cached_keys=16,
            lifespan=3600,
        )

    return _jwks_client


def validate_jwt_token(token: str) -> Dict[str, Any]:
    """
    Validate JWT Bearer token and return its claims.

    Args:
        token: JWT token string (without "Bearer " prefix)

    Returns:
        dict: Validated token claims

    Raises:
        TokenValidationError: If any validation fails
    """
    cfg = current_app.config["APP_CONFIG"]

    try:
        signing_key = get_jwks_client().get_signing_key_from_jwt(token)
        claims = jwt.decode(
            token,
            signing_key.key,
            algorithms=["RS256"],
            issuer=cfg.keycloak_issuer,
            options={
                "verify_signature": True,
                "verify_exp": True,
                "verify_iss": True,
                "verify_aud": False,   # Keycloak access tokens carry aud=["account"]
                "require": ["exp", "iat"],
            },
            leeway=5,
        )
    except ExpiredSignatureError:
        raise TokenValidationError("Token expired (exp claim)")
    except InvalidIssuerError as e:
        raise TokenValidationError(f"Invalid issuer: {e}")
    except InvalidSignatureError:
        raise TokenValidationError("Invalid signature")
    except DecodeError as e:
        raise TokenValidationError(f"Token decode error (malformed JWT): {e}")
    except PyJWTError as e:
        logger.error(f"JWT validation failed: {e}")
        raise TokenValidationError(f"Token validation failed: {e}")

    logger.debug(f"JWT validated for subject: {claims.get('sub')}")
    return claims


def _bearer_token() -> str:
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer ") or not auth_header[7:].strip():
        raise AuthenticationError("Authorization header required. Use 'Authorization: Bearer <token>'")
    return auth_header[7:].strip()


def require_bearer_token(roles: Optional[list] = None):
    """
    Decorator requiring a valid bearer token and, optionally, one of the given roles.

    Sets g.token_claims and g.authorities for the view.

    Raises:
        AuthenticationError (401): Missing, invalid or expired token
        AuthorizationError (403): None of the required roles granted

    Example:
        @bp.route("/api/auth/admin/users", methods=["POST"])
        @require_bearer_token(roles=[Role.ADMIN])
        def create_user():
            ...
    """
    roles = roles or []

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            token = _bearer_token()
            try:
                claims = validate_jwt_token(token)
            except TokenValidationError as e:
                logger.warning(f"Bearer token rejected: {e}")
                raise

            authorities = map_claims_to_authorities(claims)
            if roles and not any(has_authority(authorities, role) for role in roles):
                logger.warning(f"Request to {request.path} lacks required roles {roles}")
                raise AuthorizationError("Insufficient role")

            g.token_claims = claims
            g.authorities = authorities
            return fn(*args, **kwargs)

        return wrapper
    return decorator
