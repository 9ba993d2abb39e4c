import os
import tempfile

# app.py builds a module-level app on import; keep its file out of the repo
_SESSION_DIR = tempfile.mkdtemp(prefix="questions-test-")
os.environ.setdefault("QUESTIONS_FILE", os.path.join(_SESSION_DIR, "questions.json"))
os.environ.setdefault("STATIC_DIR", os.path.join(_SESSION_DIR, "public"))

import pytest

from qa_store import QuestionStore


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "questions.json"


@pytest.fixture
def store(store_path):
    s = QuestionStore(store_path)
    s.ensure_initialized()
    return s


@pytest.fixture
def static_dir(tmp_path):
    d = tmp_path / "public"
    d.mkdir()
    (d / "index.html").write_text("<html><body>questions</body></html>", encoding="utf-8")
    (d / "app.js").write_text("console.log('hi');", encoding="utf-8")
    return d


@pytest.fixture
def client(store_path, static_dir):
    from app import create_app

    app = create_app(questions_file=store_path, static_dir=static_dir)
    app.config["TESTING"] = True
    return app.test_client()
