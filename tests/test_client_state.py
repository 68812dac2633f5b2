"""
Unit tests for the client-side session and layout state
"""

import json

import httpx
import pytest

from app.client import auth_store
from app.client.auth_store import (
    Anonymous, AuthStore, Authenticated, Authenticating, Failed, FileStorage, InvalidTransition,
    CONNECTION_ERROR_MESSAGE
)
from app.client.dashboard_store import DashboardStore

USER = {"id": "u-1", "email": "ana@clinic.mx", "fullName": "Ana Torres", "role": "therapist"}

class TestTransitions:
    """Test cases for the pure state transitions"""

    def test_successful_login_path(self):
        state = auth_store.begin_login(Anonymous())
        assert auth_store.snapshot(state).is_loading is True

        state = auth_store.login_succeeded(state, USER, "tok")
        view = auth_store.snapshot(state)
        assert view.is_authenticated is True
        assert view.is_loading is False
        assert view.user == USER
        assert view.token == "tok"
        assert view.error is None

    def test_failed_login_then_clear_error(self):
        state = auth_store.login_failed(Authenticating(), "Invalid credentials")
        assert auth_store.snapshot(state).to_dict() == {
            "user": None,
            "token": None,
            "isAuthenticated": False,
            "isLoading": False,
            "error": "Invalid credentials",
        }

        assert auth_store.clear_error(state) == Anonymous()

    def test_clear_error_keeps_other_states(self):
        state = Authenticated(user=USER, token="tok")
        assert auth_store.clear_error(state) is state

    @pytest.mark.parametrize("state", [Anonymous(), Failed("x"), Authenticated(user=USER, token="tok")])
    def test_outcomes_only_from_authenticating(self, state):
        with pytest.raises(InvalidTransition):
            auth_store.login_succeeded(state, USER, "tok")
        with pytest.raises(InvalidTransition):
            auth_store.login_failed(state, "error")

    def test_logout_from_any_state(self):
        for state in [Anonymous(), Authenticating(), Failed("x"), Authenticated(user=USER, token="tok")]:
            assert auth_store.logout(state) == Anonymous()

    def test_restore(self):
        assert auth_store.restore(None) == Anonymous()
        assert auth_store.restore({"user": USER, "token": None}) == Anonymous()
        assert auth_store.restore({"user": USER, "token": "tok"}) == Authenticated(user=USER, token="tok")

class TestPersistence:
    """Test cases for the serialize/deserialize boundary"""

    def test_serialize_authenticated(self):
        raw = auth_store.serialize(Authenticated(user=USER, token="tok"))
        assert json.loads(raw) == {"user": USER, "token": "tok", "isAuthenticated": True}

    def test_transient_fields_are_not_persisted(self):
        data = json.loads(auth_store.serialize(Failed("Invalid credentials")))
        assert data == {"user": None, "token": None, "isAuthenticated": False}

    @pytest.mark.parametrize("raw", [None, "", "{not json", "[1, 2]"])
    def test_deserialize_unreadable(self, raw):
        assert auth_store.deserialize(raw) is None

    def test_file_storage(self, tmp_path):
        storage = FileStorage(tmp_path / "nested" / "auth-storage.json")
        assert storage.load() is None

        storage.save('{"token": "tok"}')
        assert storage.load() == '{"token": "tok"}'

        storage.clear()
        assert storage.load() is None
        storage.clear()

    def test_file_storage_write_failure_is_logged_not_raised(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("x")

        storage = FileStorage(blocker / "auth-storage.json")
        storage.save("{}")
        assert storage.load() is None

class TestAuthStore:
    """Test cases for the store driven against the API"""

    @pytest.fixture()
    def storage(self, tmp_path):
        return FileStorage(tmp_path / "auth-storage.json")

    def test_login_success_persists_session(self, client, make_user, storage):
        make_user(email="ana@clinic.mx", password="Secret123!")
        store = AuthStore(client, storage)

        view = store.login("ana@clinic.mx", "Secret123!")
        assert view.is_authenticated is True
        assert view.user["email"] == "ana@clinic.mx"
        assert view.token

        persisted = json.loads(storage.load())
        assert persisted["isAuthenticated"] is True
        assert persisted["token"] == view.token
        assert store.authorization_headers() == {"Authorization": f"Bearer {view.token}"}

    def test_login_failure_surfaces_server_message(self, client, make_user, storage):
        make_user(email="ana@clinic.mx", password="Secret123!")
        store = AuthStore(client, storage)

        view = store.login("ana@clinic.mx", "wrong")
        assert view.is_authenticated is False
        assert view.error == "Invalid credentials"
        assert storage.load() is None

        view = store.clear_error()
        assert view.error is None
        assert isinstance(store.state, Anonymous)

    def test_failed_relogin_keeps_memory_and_storage_in_step(self, client, make_user, storage):
        make_user(email="ana@clinic.mx", password="Secret123!")
        store = AuthStore(client, storage)
        store.login("ana@clinic.mx", "Secret123!")

        view = store.login("ana@clinic.mx", "wrong")
        assert view.is_authenticated is False
        assert view.error == "Invalid credentials"
        assert storage.load() is None

        restored = AuthStore(client, storage).init_auth()
        assert restored.is_authenticated is False
        assert restored.token is None

    def test_relogin_as_another_user_replaces_persisted_session(self, client, make_user, storage):
        make_user(email="ana@clinic.mx", password="Secret123!")
        make_user(email="luis@clinic.mx", password="Secret456!", full_name="Luis Mora")
        store = AuthStore(client, storage)
        store.login("ana@clinic.mx", "Secret123!")

        store.login("luis@clinic.mx", "Secret456!")
        assert json.loads(storage.load())["user"]["email"] == "luis@clinic.mx"

    def test_login_missing_fields_message(self, client, make_user, storage):
        view = AuthStore(client, storage).login("", "")
        assert view.error == "Email and password are required"

    def test_connection_error(self, storage):
        requests = []

        def refuse(request):
            requests.append(request)
            raise httpx.ConnectError("connection refused", request=request)

        http = httpx.Client(base_url="http://clinic.invalid", transport=httpx.MockTransport(refuse))
        view = AuthStore(http, storage).login("ana@clinic.mx", "Secret123!")

        assert view.error == CONNECTION_ERROR_MESSAGE
        assert view.is_loading is False
        assert len(requests) == 1

    def test_logout_clears_storage(self, client, make_user, storage):
        make_user(email="ana@clinic.mx", password="Secret123!")
        store = AuthStore(client, storage)
        store.login("ana@clinic.mx", "Secret123!")

        view = store.logout()
        assert view.is_authenticated is False
        assert view.token is None
        assert storage.load() is None
        assert store.authorization_headers() == {}

    def test_init_auth_restores_persisted_session(self, client, make_user, storage):
        make_user(email="ana@clinic.mx", password="Secret123!")
        AuthStore(client, storage).login("ana@clinic.mx", "Secret123!")

        restored = AuthStore(client, storage)
        view = restored.init_auth(verify=True)
        assert view.is_authenticated is True
        assert view.user["email"] == "ana@clinic.mx"

    def test_init_auth_without_storage_is_anonymous(self, client, storage):
        view = AuthStore(client, storage).init_auth()
        assert view.is_authenticated is False

    def test_init_auth_drops_rejected_token(self, client, make_user, storage):
        storage.save(json.dumps({"user": USER, "token": "expired", "isAuthenticated": True}))
        store = AuthStore(client, storage)

        assert store.init_auth().is_authenticated is True

        view = store.init_auth(verify=True)
        assert view.is_authenticated is False
        assert storage.load() is None

class TestDashboardStore:
    """Test cases for sidebar visibility"""

    def test_initially_closed(self):
        assert DashboardStore().is_sidebar_open is False

    def test_toggle_and_set(self):
        store = DashboardStore()
        assert store.toggle_sidebar() is True
        assert store.toggle_sidebar() is False
        assert store.set_sidebar_open(True) is True
        assert store.set_sidebar_open(True) is True
        assert store.is_sidebar_open is True

if __name__ == "__main__":
    pytest.main([__file__])
