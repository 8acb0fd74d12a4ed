import json
from datetime import timedelta

import pytest

from rooma_client.local_storage import LocalStorage
from rooma_client.session_data import Session
from rooma_client.token_storage import ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY, CookieJarStorage


class TestLocalStorage:
    def test_set_get_remove(self, storage):
        assert storage.get_item("k") is None
        storage.set_item("k", "v")
        assert storage.get_item("k") == "v"
        storage.remove_item("k")
        assert storage.get_item("k") is None

    def test_values_survive_a_new_instance(self, storage):
        storage.set_item("rooma_bookings", "[]")
        assert LocalStorage(storage.path).get_item("rooma_bookings") == "[]"

    def test_unreadable_file_reads_as_empty(self, storage):
        storage.path.write_text("{definitely not json", encoding="utf-8")
        assert storage.get_item("anything") is None
        storage.set_item("k", "v")
        assert storage.get_item("k") == "v"

    @pytest.mark.parametrize("contents", ["{definitely not json", "[1, 2]"])
    def test_corrupt_file_is_moved_aside_before_the_next_write(self, storage, contents):
        storage.path.write_text(contents, encoding="utf-8")

        storage.set_item("k", "v")

        assert storage.corrupt_path.read_text(encoding="utf-8") == contents
        assert json.loads(storage.path.read_text(encoding="utf-8")) == {"k": "v"}

    def test_writes_leave_no_temp_files(self, storage):
        storage.set_item("a", "1")
        storage.set_item("b", "2")
        assert [p.name for p in storage.path.parent.iterdir()] == [storage.path.name]


class TestCookieJarStorage:
    def test_entries_expire(self, storage, clock):
        now = clock()
        current = {"now": now}
        cookies = CookieJarStorage(storage, clock=lambda: current["now"])
        cookies.set("accessToken", "a1", expires_days=7)

        current["now"] = now + timedelta(days=6, hours=23)
        assert cookies.get("accessToken") == "a1"

        current["now"] = now + timedelta(days=7)
        assert cookies.get("accessToken") is None
        assert storage.get_item("accessToken") is None

    def test_garbage_entry_is_dropped(self, storage, cookies):
        storage.set_item("accessToken", "not a cookie")
        assert cookies.get("accessToken") is None
        assert storage.get_item("accessToken") is None


class TestSession:
    def test_establish_persists_both_tokens_with_their_expirations(self, session, cookies, clock):
        session.establish("a1", "r1")

        assert session.is_authenticated
        assert cookies.get_entry(ACCESS_TOKEN_KEY).expires_at == clock() + timedelta(days=7)
        assert cookies.get_entry(REFRESH_TOKEN_KEY).expires_at == clock() + timedelta(days=30)

    def test_establish_requires_both_tokens(self, session):
        with pytest.raises(ValueError):
            session.establish("a1", None)
        assert not session.is_authenticated

    def test_init_restores_a_persisted_session(self, session, cookies):
        session.establish("a1", "r1")
        restored = Session(cookies).init()
        assert restored.access_token == "a1"
        assert restored.refresh_token == "r1"

    def test_init_discards_a_partial_session(self, cookies):
        cookies.set(REFRESH_TOKEN_KEY, "r1", expires_days=30)
        session = Session(cookies).init()
        assert not session.is_authenticated
        assert session.refresh_token is None
        assert cookies.get(REFRESH_TOKEN_KEY) is None

    def test_rotate_keeps_refresh_token_unless_replaced(self, session, cookies):
        session.establish("a1", "r1")
        session.rotate("a2")
        assert (session.access_token, session.refresh_token) == ("a2", "r1")
        assert cookies.get(ACCESS_TOKEN_KEY) == "a2"

        session.rotate("a3", "r2")
        assert (session.access_token, session.refresh_token) == ("a3", "r2")
        assert cookies.get(REFRESH_TOKEN_KEY) == "r2"

    def test_teardown_clears_everything(self, session, cookies):
        session.establish("a1", "r1")
        session.remember_user({"id": "u1"})
        session.teardown()
        assert session.data.access_token is None
        assert session.data.user is None
        assert cookies.get(ACCESS_TOKEN_KEY) is None
        assert cookies.get(REFRESH_TOKEN_KEY) is None

    def test_rotate_with_the_same_refresh_token_keeps_its_expiry(self, storage, clock):
        issued = clock()
        current = {"now": issued}
        cookies = CookieJarStorage(storage, clock=lambda: current["now"])
        session = Session(cookies).init()
        session.establish("a1", "r1")

        current["now"] = issued + timedelta(days=3)
        session.rotate("a2", "r1")

        assert cookies.get_entry(REFRESH_TOKEN_KEY).expires_at == issued + timedelta(days=30)
        assert cookies.get_entry(ACCESS_TOKEN_KEY).expires_at == issued + timedelta(days=10)
