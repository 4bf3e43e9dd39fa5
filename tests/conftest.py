# tests/conftest.py
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from limeai.deps import get_admission, get_deepseek, get_flowchart_cache, get_gemini, get_playdialog
from limeai.infra.admission import AdmissionConfig, AdmissionController
from limeai.infra.result_cache import ResultCache
from limeai.main import app


class FakeClock:
    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeUpstream:
    """Plays back queued results; an Exception instance in the queue is raised."""

    def __init__(self):
        self.queue: list = []
        self.calls: list[tuple] = []
        self.configured = True

    def _next(self, *args):
        self.calls.append(args)
        item = self.queue.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    # DeepSeekClient
    def complete(self, prompt, system_prompt):
        return self._next(prompt, system_prompt)

    # GeminiClient
    def generate(self, model, contents, temperature, max_output_tokens):
        return self._next(model, contents, temperature, max_output_tokens)

    # PlayDialogClient
    def start_job(self, text, style):
        return self._next(text, style)

    def job_status(self, job_id):
        return self._next(job_id)

    def stream_audio(self, url):
        return self._next(url)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def admission(clock):
    return AdmissionController(AdmissionConfig(), clock=clock)


@pytest.fixture
def cache():
    return ResultCache(max_entries=100)


@pytest.fixture
def deepseek():
    return FakeUpstream()


@pytest.fixture
def gemini():
    return FakeUpstream()


@pytest.fixture
def playdialog():
    return FakeUpstream()


@pytest.fixture
def client(admission, cache, deepseek, gemini, playdialog):
    app.dependency_overrides[get_admission] = lambda: admission
    app.dependency_overrides[get_flowchart_cache] = lambda: cache
    app.dependency_overrides[get_deepseek] = lambda: deepseek
    app.dependency_overrides[get_gemini] = lambda: gemini
    app.dependency_overrides[get_playdialog] = lambda: playdialog
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
