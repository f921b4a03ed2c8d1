# marketplace/adapters/security/__init__.py
from .admin_auth import ADMIN_COOKIE_NAME, AdminTokenVerifier, sign_admin_token
from .rate_limiter import RateLimiter

__all__ = ["ADMIN_COOKIE_NAME", "AdminTokenVerifier", "RateLimiter", "sign_admin_token"]
