from __future__ import annotations

import copy

import pytest
import requests

from src.geo_attendance.geo_attendance.core.exceptions import StoreUnavailable
from src.geo_attendance.geo_attendance.store.connection import StoreConfig, StoreConnection
from src.geo_attendance.geo_attendance.store.jsonblob_store import JsonBlobStore

BASE_URL = "https://jsonblob.example/api/jsonBlob"


class FakeResponse:
    def __init__(self, status_code=200, payload=None, headers=None):
        self.status_code = status_code
        self._payload = payload
        self.headers = headers or {}

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return copy.deepcopy(self._payload)


class FakeHttpSession:
    def __init__(self, document):
        self.document = document
        self.calls: list[tuple[str, str]] = []
        self.get_status = 200
        self.put_status = 200
        self.fail_with = None

    def get(self, url, timeout=None):
        self.calls.append(("GET", url))
        if self.fail_with:
            raise self.fail_with
        return FakeResponse(self.get_status, self.document)

    def put(self, url, json=None, timeout=None):
        self.calls.append(("PUT", url))
        if self.put_status < 400:
            self.document = copy.deepcopy(json)
        return FakeResponse(self.put_status, json)

    def post(self, url, json=None, timeout=None):
        self.calls.append(("POST", url))
        return FakeResponse(201, None, {"Location": f"{BASE_URL}/1356691772465668096"})


def _store(http: FakeHttpSession) -> JsonBlobStore:
    config = StoreConfig(base_url=BASE_URL, document_id="doc-1", timeout=1.0)
    return JsonBlobStore(StoreConnection(config, session=http))


def test_fetch_drops_null_entries_and_keeps_other_keys():
    http = FakeHttpSession({"users": [None, {"id": "u1"}], "sessions": [None], "theme": "dark"})

    doc = _store(http).fetch_document("doc-1")

    assert doc == {"users": [{"id": "u1"}], "sessions": [], "attendanceRecords": [], "theme": "dark"}
    assert http.calls == [("GET", f"{BASE_URL}/doc-1")]


def test_merge_write_reads_then_puts_merged_document():
    http = FakeHttpSession(
        {
            "users": [{"id": "u1"}],
            "sessions": [{"id": "s1", "code": "OLD"}],
            "attendanceRecords": [],
            "theme": "dark",
        }
    )

    _store(http).merge_write("doc-1", {"sessions": [{"id": "s1", "code": "NEW"}, {"id": "s2"}]})

    assert [c[0] for c in http.calls] == ["GET", "PUT"]
    assert http.document["sessions"] == [{"id": "s1", "code": "NEW"}, {"id": "s2"}]
    assert http.document["users"] == [{"id": "u1"}]
    assert http.document["theme"] == "dark"


def test_fetch_non_success_raises_store_unavailable():
    http = FakeHttpSession({})
    http.get_status = 404

    with pytest.raises(StoreUnavailable):
        _store(http).fetch_document("doc-1")


def test_failed_put_after_successful_read_is_reported():
    original = {"users": [], "sessions": [], "attendanceRecords": [{"id": "a1"}]}
    http = FakeHttpSession(copy.deepcopy(original))
    http.put_status = 500

    with pytest.raises(StoreUnavailable):
        _store(http).merge_write("doc-1", {"attendanceRecords": [{"id": "a2"}]})

    assert http.document == original


def test_transport_error_raises_store_unavailable():
    http = FakeHttpSession({})
    http.fail_with = requests.ConnectionError("network down")

    with pytest.raises(StoreUnavailable):
        _store(http).merge_write("doc-1", {"users": [{"id": "u1"}]})

    assert [c[0] for c in http.calls] == ["GET"]


def test_invalid_json_body_raises_store_unavailable():
    http = FakeHttpSession(ValueError("not json"))

    with pytest.raises(StoreUnavailable):
        _store(http).fetch_document("doc-1")


def test_create_document_returns_id_from_location_header():
    http = FakeHttpSession({})

    document_id = _store(http).create_document({"users": [], "sessions": [], "attendanceRecords": []})

    assert document_id == "1356691772465668096"
    assert http.calls == [("POST", BASE_URL)]
