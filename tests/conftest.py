import os
from types import SimpleNamespace

import pytest

FIXTURES = os.path.join(os.path.dirname(__file__), "fixtures")


@pytest.fixture
def load_page():
    def _load(name: str) -> str:
        with open(os.path.join(FIXTURES, name), encoding="utf-8") as f:
            return f.read()
    return _load


class FakeAnthropic:
    """Stands in for anthropic.Anthropic; records calls, returns canned text."""

    def __init__(self, reply: str = "", error: Exception = None):
        self.reply = reply
        self.error = error
        self.calls = []
        self.messages = self

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        return SimpleNamespace(content=[SimpleNamespace(type="text", text=self.reply)])


class FakeOpenAI:
    def __init__(self, reply: str = ""):
        self.reply = reply
        self.calls = []
        self.chat = SimpleNamespace(completions=self)

    def create(self, **kwargs):
        self.calls.append(kwargs)
        message = SimpleNamespace(content=self.reply)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


COVER_REPLY = (
    'Here is what I found:\n'
    '{"title": "Dune", "author": "Frank Herbert", "year": "1965", '
    '"description": "A desert planet epic."}'
)


@pytest.fixture
def fake_anthropic():
    return FakeAnthropic(COVER_REPLY)


@pytest.fixture
def fake_openai():
    return FakeOpenAI(COVER_REPLY)
