"""Authentication utilities."""

__all__ = [
    "AuthContext",
    "JWTManager",
    "Role",
    "SessionGate",
    "TokenData",
    "get_current_auth",
    "require_admin",
    "require_candidate",
]

from .gate import SessionGate
from .jwt import JWTManager, Role, TokenData
from .middleware import AuthContext, get_current_auth, require_admin, require_candidate
