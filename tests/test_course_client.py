"""Tests for the course API client, with requests faked out."""

from __future__ import annotations

import pytest
import requests

from clubhouse import course_client
from clubhouse.course_client import CourseApiError, fetch_course, load_course
from millbrook_sim.course import MILLBROOK_COURSE


def _payload():
    return {
        "id": 4411,
        "name": "Dutchess Links",
        "city": "Poughkeepsie",
        "state": "NY",
        "tees": [{
            "id": "blue",
            "name": "Blue",
            "color": "Blue",
            "rating": "71.3",
            "slope": 128,
            "holes": [
                {"number": n, "par": 3 if n % 6 == 0 else 4, "length": 300 + n, "handicap": 19 - n}
                for n in range(1, 19)
            ],
        }],
    }


class FakeResponse:
    def __init__(self, payload=None, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)

    def json(self):
        if self.payload is None:
            raise ValueError("No JSON object could be decoded")
        return self.payload


@pytest.fixture
def calls(monkeypatch):
    monkeypatch.delenv("COURSE_API_KEY", raising=False)
    monkeypatch.setenv("COURSE_API_URL", "https://courses.example.test/v1/")
    return []


def _fake_get(calls, response):
    def get(url, headers=None, timeout=None):
        calls.append({"url": url, "headers": headers, "timeout": timeout})
        if isinstance(response, Exception):
            raise response
        return response
    return get


def test_fetch_course_maps_payload(monkeypatch, calls):
    monkeypatch.setattr(course_client.requests, "get", _fake_get(calls, FakeResponse(_payload())))
    course = fetch_course("4411")
    assert calls[0]["url"] == "https://courses.example.test/v1/courses/4411"
    assert calls[0]["timeout"] == course_client.TIMEOUT
    assert "Authorization" not in calls[0]["headers"]
    assert course.id == "4411"
    assert course.location == "Poughkeepsie, NY"
    tee = course.get_tee("blue")
    assert tee.rating == 71.3
    assert tee.holes[0].yardage == 301
    assert tee.holes[0].stroke_index == 18
    assert tee.holes[5].par == 3


def test_api_key_sent(monkeypatch, calls):
    monkeypatch.setenv("COURSE_API_KEY", "secret")
    monkeypatch.setattr(course_client.requests, "get", _fake_get(calls, FakeResponse(_payload())))
    fetch_course("4411")
    assert calls[0]["headers"]["Authorization"] == "Bearer secret"


def test_http_error_carries_status(monkeypatch, calls):
    monkeypatch.setattr(course_client.requests, "get", _fake_get(calls, FakeResponse(status_code=404)))
    with pytest.raises(CourseApiError) as exc:
        fetch_course("nope")
    assert exc.value.status_code == 404


def test_malformed_payload(monkeypatch, calls):
    monkeypatch.setattr(course_client.requests, "get", _fake_get(calls, FakeResponse({"name": "x"})))
    with pytest.raises(CourseApiError, match="malformed"):
        fetch_course("4411")


def test_load_course_default_skips_http(monkeypatch, calls):
    monkeypatch.setattr(course_client.requests, "get", _fake_get(calls, AssertionError("no HTTP")))
    assert load_course(None) is MILLBROOK_COURSE
    assert load_course("millbrook") is MILLBROOK_COURSE
    assert calls == []


@pytest.mark.parametrize("response", [
    requests.ConnectionError("refused"),
    FakeResponse(status_code=503),
    FakeResponse({"id": 1, "name": "No Tees", "tees": []}),
])
def test_load_course_falls_back(monkeypatch, calls, caplog, response):
    monkeypatch.setattr(course_client.requests, "get", _fake_get(calls, response))
    assert load_course("4411") is MILLBROOK_COURSE
    assert "falling back" in caplog.text.lower()


def test_load_course_success(monkeypatch, calls):
    monkeypatch.setattr(course_client.requests, "get", _fake_get(calls, FakeResponse(_payload())))
    course = load_course("4411")
    assert course.name == "Dutchess Links"
    holes = course_client.resolve_player_holes(course, ["blue"])
    assert len(holes) == 4
    assert holes[0][0].stroke_index == 18
