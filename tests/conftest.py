# tests/conftest.py

import json
from pathlib import Path

import pytest

from core.config import Settings
from core.state import Store


def envelope(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def itinerary_envelope(data):
    return envelope(json.dumps(data))


class FakeClient:
    """Replays scripted results: a dict is returned, an exception is raised."""

    def __init__(self, *script, on_call=None):
        self.script = list(script)
        self.payloads = []
        self.on_call = on_call

    def generate(self, payload):
        self.payloads.append(payload)
        if self.on_call:
            self.on_call()
        item = self.script.pop(0) if len(self.script) > 1 else self.script[0]
        if isinstance(item, BaseException):
            raise item
        return item


class RecordingSleep:
    def __init__(self):
        self.delays = []

    def __call__(self, seconds):
        self.delays.append(seconds)


@pytest.fixture
def settings(tmp_path: Path):
    return Settings(api_key="test-key", preferences_file=tmp_path / "prefs.json")


@pytest.fixture
def store():
    return Store()


@pytest.fixture
def sleep():
    return RecordingSleep()
