"""Authentication module"""

from teamhub.auth.firebase import FirebaseAuthService
from teamhub.auth.jwt import create_access_token, create_refresh_token, verify_token, issue_tokens
from teamhub.auth.unified import AuthContext, get_auth_context, require_admin, require_moderator

__all__ = [
    "FirebaseAuthService",
    "create_access_token",
    "create_refresh_token",
    "verify_token",
    "issue_tokens",
    "AuthContext",
    "get_auth_context",
    "require_admin",
    "require_moderator",
]
