import logging
from typing import MutableMapping, Optional

from passlib.context import CryptContext

from .errors import SessionUnavailable
from .schemas import Principal

logger = logging.getLogger(__name__)

# Use pbkdf2_sha256 as default to avoid bcrypt 72-byte limitation in some envs
pwd_context = CryptContext(schemes=["pbkdf2_sha256", "bcrypt"], deprecated="auto")

# session keys; values are always strings
AUTHENTICATED_KEY = "is_authenticated"
USERNAME_KEY = "username"
DISPLAY_NAME_KEY = "display_name"
ROLE_KEY = "role"

SessionContext = MutableMapping[str, str]


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def _require(ctx: Optional[SessionContext]) -> SessionContext:
    if ctx is None:
        raise SessionUnavailable("no session context available")
    return ctx


class IdentityGate:
    """Resolves the current principal from a per-client session context.

    The context is passed into every call instead of being looked up from
    ambient request state, so the gate can be driven with a plain dict.
    ``users`` must provide ``find_by_credentials(username, password)``.
    """

    def __init__(self, users):
        self.users = users

    def login(self, ctx: Optional[SessionContext], username: str, password: str) -> bool:
        ctx = _require(ctx)
        user = self.users.find_by_credentials(username, password)
        if user is None:
            logger.info("login failed for %r", username)
            return False
        ctx[AUTHENTICATED_KEY] = "true"
        ctx[USERNAME_KEY] = user.username
        ctx[DISPLAY_NAME_KEY] = user.name
        ctx[ROLE_KEY] = user.role
        logger.info("login ok for %r (role=%s)", user.username, user.role)
        return True

    def logout(self, ctx: Optional[SessionContext]) -> None:
        ctx = _require(ctx)
        username = ctx.get(USERNAME_KEY)
        ctx.clear()
        if username:
            logger.info("logout for %r", username)

    def is_authenticated(self, ctx: Optional[SessionContext]) -> bool:
        return _require(ctx).get(AUTHENTICATED_KEY) == "true"

    def has_role(self, ctx: Optional[SessionContext], role: str) -> bool:
        # exact match, no hierarchy: Administrator does not satisfy Client
        stored = _require(ctx).get(ROLE_KEY)
        return stored is not None and stored == role

    def principal(self, ctx: Optional[SessionContext]) -> Principal:
        ctx = _require(ctx)
        if not self.is_authenticated(ctx):
            return Principal()
        return Principal(
            authenticated=True,
            username=ctx.get(USERNAME_KEY),
            display_name=ctx.get(DISPLAY_NAME_KEY),
            role=ctx.get(ROLE_KEY),
        )
