"""Tests for credential storage (youtube_api/cookies.py)."""

from __future__ import annotations

import json

import pytest

from youtube_api.cookies import Cookie, CookieStore, MemoryCookieStore


class TestCookie:
    def test_from_string(self) -> None:
        cookie = Cookie.from_string("youtube_oauth", "access_token=a; refresh_token=r=x; junk")
        assert cookie.values() == {"access_token": "a", "refresh_token": "r=x"}

    def test_values_is_a_copy(self) -> None:
        cookie = Cookie("svc", {"a": "1"})
        cookie.values()["a"] = "2"
        assert cookie.values() == {"a": "1"}

    def test_set_merges(self) -> None:
        cookie = Cookie("svc", {"a": "1", "b": "2"})
        cookie.set({"b": "3", "c": 4})
        assert cookie.values() == {"a": "1", "b": "3", "c": "4"}

    def test_str(self) -> None:
        assert str(Cookie("svc", {"a": "1", "b": "2"})) == "a=1; b=2"


class TestMemoryCookieStore:
    def test_get_missing_service(self) -> None:
        assert MemoryCookieStore().get("youtube_oauth") is None

    def test_entries_of_any_shape(self) -> None:
        store = MemoryCookieStore({
            "a": ["x=1"],
            "b": [{"y": "2"}],
            "c": [Cookie("c", {"z": "3"})],
        })
        assert store.get("a").values() == {"x": "1"}
        assert store.get("b").values() == {"y": "2"}
        assert store.get("c").values() == {"z": "3"}

    def test_update_is_visible_on_next_get(self) -> None:
        store = MemoryCookieStore({"svc": ["a=1"]})
        store.update(store.get("svc"), {"a": "2"})
        assert store.get("svc").values() == {"a": "2"}

    def test_to_json(self) -> None:
        store = MemoryCookieStore({"svc": ["a=1; b=2"]})
        assert store.to_json() == {"svc": ["a=1; b=2"]}


class TestCookieStore:
    def test_missing_file_is_empty(self, tmp_path) -> None:
        store = CookieStore(str(tmp_path / "missing.json"))
        assert store.get("youtube_oauth") is None

    def test_load(self, tmp_path) -> None:
        path = tmp_path / "cookies.json"
        path.write_text(json.dumps({"youtube_oauth": ["access_token=a"], "single": "k=v"}))
        store = CookieStore(str(path))
        assert store.get("youtube_oauth").values() == {"access_token": "a"}
        assert store.get("single").values() == {"k": "v"}

    def test_invalid_file(self, tmp_path) -> None:
        path = tmp_path / "cookies.json"
        path.write_text("[]")
        with pytest.raises(ValueError):
            CookieStore(str(path))

    def test_update_written_back(self, tmp_path) -> None:
        path = tmp_path / "cookies.json"
        path.write_text(json.dumps({"youtube_oauth": ["access_token=a; expires=1"]}))
        store = CookieStore(str(path))

        store.update(store.get("youtube_oauth"), {"access_token": "b", "expiry_date": "2"})

        saved = json.loads(path.read_text())
        assert saved == {"youtube_oauth": ["access_token=b; expires=1; expiry_date=2"]}
        assert not (tmp_path / "cookies.json.tmp").exists()
