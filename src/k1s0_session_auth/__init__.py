"""k1s0 session_auth library."""

from .config import SessionAuthConfig, load_config
from .cookie import Cookie, CookieOptions, Cookies, parse_cookie_header
from .engine import SessionEngine, classify_session
from .exceptions import SessionAuthError, SessionAuthErrorCodes
from .generator import generate_id_from_entropy_size, generate_session_id
from .memory import InMemorySessionStore
from .models import Session, SessionAndUser, SessionRecord, SessionState, User
from .origin import verify_request_origin
from .store import SessionStore

__all__ = [
    "SessionAuthConfig",
    "load_config",
    "Cookie",
    "Cookies",
    "CookieOptions",
    "parse_cookie_header",
    "SessionEngine",
    "classify_session",
    "SessionStore",
    "InMemorySessionStore",
    "Session",
    "User",
    "SessionAndUser",
    "SessionRecord",
    "SessionState",
    "generate_id_from_entropy_size",
    "generate_session_id",
    "verify_request_origin",
    "SessionAuthError",
    "SessionAuthErrorCodes",
]
