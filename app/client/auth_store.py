"""
Client-side authentication state

The session is an explicit state machine:

    any --begin_login--> Authenticating
    Authenticating --login_succeeded--> Authenticated
    Authenticating --login_failed--> Failed
    any --logout--> Anonymous
    Failed --clear_error--> Anonymous

Transitions are pure functions over immutable states. `AuthStore` drives them
against the HTTP API and persists `{user, token, isAuthenticated}` through an
explicit serialize/deserialize boundary. Starting a login discards the
previous session in memory and in storage, so the two never disagree.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union
import json
import logging

import httpx

logger = logging.getLogger(__name__)

CONNECTION_ERROR_MESSAGE = "Connection error. Please try again."
DEFAULT_AUTH_ERROR_MESSAGE = "Authentication error"

@dataclass(frozen=True)
class Anonymous:
    pass

@dataclass(frozen=True)
class Authenticating:
    pass

@dataclass(frozen=True)
class Authenticated:
    user: dict
    token: str

@dataclass(frozen=True)
class Failed:
    error: str

AuthState = Union[Anonymous, Authenticating, Authenticated, Failed]

class InvalidTransition(ValueError):
    """Raised when a transition is not defined for the current state"""

@dataclass(frozen=True)
class AuthSnapshot:
    """Flat view of the state as consumed by the UI"""
    user: Optional[dict]
    token: Optional[str]
    is_authenticated: bool
    is_loading: bool
    error: Optional[str]

    def to_dict(self) -> dict:
        return {
            "user": self.user,
            "token": self.token,
            "isAuthenticated": self.is_authenticated,
            "isLoading": self.is_loading,
            "error": self.error,
        }

def snapshot(state: AuthState) -> AuthSnapshot:
    if isinstance(state, Authenticated):
        return AuthSnapshot(state.user, state.token, True, False, None)
    if isinstance(state, Authenticating):
        return AuthSnapshot(None, None, False, True, None)
    if isinstance(state, Failed):
        return AuthSnapshot(None, None, False, False, state.error)
    return AuthSnapshot(None, None, False, False, None)

# Transitions

def begin_login(state: AuthState) -> AuthState:
    return Authenticating()

def login_succeeded(state: AuthState, user: dict, token: str) -> AuthState:
    if not isinstance(state, Authenticating):
        raise InvalidTransition(f"login_succeeded from {type(state).__name__}")
    return Authenticated(user=user, token=token)

def login_failed(state: AuthState, error: str) -> AuthState:
    if not isinstance(state, Authenticating):
        raise InvalidTransition(f"login_failed from {type(state).__name__}")
    return Failed(error=error)

def logout(state: AuthState) -> AuthState:
    return Anonymous()

def clear_error(state: AuthState) -> AuthState:
    if isinstance(state, Failed):
        return Anonymous()
    return state

def restore(persisted: Optional[dict]) -> AuthState:
    """Rebuild the state from persisted data; a stored token is trusted until verified"""
    if persisted and persisted.get("token"):
        return Authenticated(user=persisted.get("user") or {}, token=persisted["token"])
    return Anonymous()

# Persistence boundary

def serialize(state: AuthState) -> str:
    view = snapshot(state)
    return json.dumps({
        "user": view.user,
        "token": view.token,
        "isAuthenticated": view.is_authenticated,
    })

def deserialize(raw: Optional[str]) -> Optional[dict]:
    """Parse persisted state; unreadable data is treated as nothing stored"""
    if not raw:
        return None
    try:
        data = json.loads(raw)
    except ValueError:
        logger.warning("Discarding unreadable persisted auth state")
        return None
    if not isinstance(data, dict):
        return None
    return data

class FileStorage:
    """Best-effort JSON file storage for the persisted session"""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self) -> Optional[str]:
        try:
            return self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning(f"Could not read auth storage {self.path}: {e}")
            return None

    def save(self, raw: str) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(raw, encoding="utf-8")
        except OSError as e:
            logger.warning(f"Could not persist auth state to {self.path}: {e}")

    def clear(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not clear auth storage {self.path}: {e}")

class AuthStore:
    """Holds the current session and talks to the authentication endpoints"""

    def __init__(self, http: httpx.Client, storage: Optional[FileStorage] = None):
        self.http = http
        self.storage = storage
        self._state: AuthState = Anonymous()

    @classmethod
    def connect(cls, base_url: str, storage_path: Union[str, Path] = "auth-storage.json", timeout: float = 10.0):
        return cls(httpx.Client(base_url=base_url, timeout=timeout), FileStorage(storage_path))

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def snapshot(self) -> AuthSnapshot:
        return snapshot(self._state)

    def _persist(self):
        if self.storage is not None:
            self.storage.save(serialize(self._state))

    def login(self, email: str, password: str) -> AuthSnapshot:
        """Submit credentials; failures are surfaced as the error message, never retried"""
        self._state = begin_login(self._state)
        if self.storage is not None:
            self.storage.clear()

        try:
            response = self.http.post("/api/auth/login", json={"email": email, "password": password})
        except httpx.HTTPError as e:
            logger.warning(f"Login request failed: {e}")
            self._state = login_failed(self._state, CONNECTION_ERROR_MESSAGE)
            return self.snapshot

        try:
            result = response.json()
        except ValueError:
            result = {}

        if response.is_success and result.get("success"):
            data = result.get("data") or {}
            self._state = login_succeeded(self._state, data.get("user") or {}, data.get("token"))
            self._persist()
            logger.info(f"Signed in as {email}")
        else:
            self._state = login_failed(self._state, result.get("message") or DEFAULT_AUTH_ERROR_MESSAGE)

        return self.snapshot

    def logout(self) -> AuthSnapshot:
        self._state = logout(self._state)
        if self.storage is not None:
            self.storage.clear()
        logger.info("Session closed")
        return self.snapshot

    def clear_error(self) -> AuthSnapshot:
        self._state = clear_error(self._state)
        return self.snapshot

    def init_auth(self, verify: bool = False) -> AuthSnapshot:
        """Restore the persisted session, optionally confirming the token with the server"""
        persisted = deserialize(self.storage.load()) if self.storage is not None else None
        self._state = restore(persisted)

        if verify and isinstance(self._state, Authenticated):
            try:
                response = self.http.get("/api/auth/me", headers=self.authorization_headers())
            except httpx.HTTPError as e:
                # Keep the stored session when the server cannot be reached
                logger.warning(f"Could not verify stored session: {e}")
                return self.snapshot

            if response.status_code == 401:
                logger.info("Stored session expired")
                return self.logout()
            if response.is_success:
                self._state = Authenticated(user=response.json()["data"], token=self._state.token)
                self._persist()

        return self.snapshot

    def authorization_headers(self) -> dict:
        if isinstance(self._state, Authenticated):
            return {"Authorization": f"Bearer {self._state.token}"}
        return {}
