"""Player identity for a session, backed by the remote store's credentials."""

from .config import MIN_PASSWORD_LENGTH
from .interfaces import RemoteStore


class AuthError(Exception):
    """Credential problem with a message fit to show the player."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthState:
    """Current identity of a session (None = guest)."""

    def __init__(self, user_id: str | None = None):
        self.user_id = user_id
        self.loading = False

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None


def validate_password(password: str, confirm_password: str | None = None) -> None:
    if confirm_password is not None and password != confirm_password:
        raise AuthError("Passwords do not match.")
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise AuthError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")


def sign_up(store: RemoteStore, auth: AuthState, user_id: str, password: str,
            confirm_password: str | None = None) -> None:
    """Create an account and sign the session into it."""
    user_id = (user_id or '').strip()
    if not user_id:
        raise AuthError("User name is required.")
    validate_password(password, confirm_password)
    auth.loading = True
    try:
        if store.user_exists(user_id) or not store.create_user(user_id, password):
            raise AuthError("User already exists")
        auth.user_id = user_id
    finally:
        auth.loading = False


def sign_in(store: RemoteStore, auth: AuthState, user_id: str, password: str) -> None:
    """Sign the session into an existing account."""
    auth.loading = True
    try:
        if not user_id or not store.verify_password(user_id, password):
            raise AuthError("Invalid login credentials")
        auth.user_id = user_id
    finally:
        auth.loading = False


def sign_out(auth: AuthState) -> None:
    auth.user_id = None
