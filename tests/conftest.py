"""
Pytest fixtures: a throwaway data directory with a teacher roster and a question bank.
"""
import json

import pytest
from fastapi.testclient import TestClient

import config
from api.app import create_app
from classroom_quiz.services.exam_service import load_questions
from classroom_quiz.services.record_store import JsonRecordStore
from classroom_quiz.services.session_clock import SessionClock

TEACHERS = {"teachers": [{"firstName": "Ada", "lastName": "Lovelace"}]}

QUESTIONS = {
    "questions": [
        {"id": "q1", "text": "Pick A", "type": "multiple-choice", "choices": ["A", "B"], "correctAnswer": "a"},
        {"id": "q2", "text": "Capital of France?", "type": "multiple-choice",
         "choices": ["Paris", "Rome", "Oslo"], "correctAnswer": "Paris"},
        {"id": "q3", "text": "Why is the sky blue?", "type": "open-ended"},
        {"id": "q4", "text": "Describe photosynthesis.", "type": "open-ended"},
    ]
}


def write_json(directory, name, data):
    (directory / f"{name}.json").write_text(json.dumps(data), encoding="utf-8")


@pytest.fixture
def data_dir(tmp_path):
    directory = tmp_path / "data"
    directory.mkdir()
    write_json(directory, "teachers", TEACHERS)
    write_json(directory, "questions", QUESTIONS)
    return directory


@pytest.fixture
def store(data_dir):
    return JsonRecordStore(str(data_dir))


@pytest.fixture
def questions(store):
    return load_questions(store)


@pytest.fixture
def clock(store):
    return SessionClock(store)


@pytest.fixture
def make_client(data_dir, tmp_path, monkeypatch):
    def _make(**settings):
        for name, value in settings.items():
            monkeypatch.setattr(config, name, value)
        app = create_app(data_dir=str(data_dir), static_dir=str(tmp_path / "public"))
        return TestClient(app)
    return _make


@pytest.fixture
def client(make_client):
    return make_client()
