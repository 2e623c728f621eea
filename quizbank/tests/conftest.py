import os
import sys
import pytest
from pathlib import Path

# Ensure project root on sys.path
_THIS_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _THIS_DIR.parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


@pytest.fixture(scope="session")
def tmp_db_path(tmp_path_factory):
    from quizbank.db import close_database, initialize_database

    path = tmp_path_factory.mktemp("db") / "quiz_test.db"
    # Point quizbank to this temp DB
    os.environ["QUIZ_DB_PATH"] = str(path)
    close_database()
    initialize_database()
    yield str(path)
    close_database()


@pytest.fixture()
def client(tmp_db_path):
    from quizbank.api import app
    from fastapi.testclient import TestClient
    return TestClient(app)


@pytest.fixture(autouse=True)
def _clean_db(tmp_db_path):
    # Safety: ensure we only ever wipe the temp DB, never a real one
    assert os.environ.get("QUIZ_DB_PATH") == tmp_db_path, "Refusing to clean non-temp DB"
    from quizbank.db import get_conn
    with get_conn() as conn:
        for t in ("alternatives", "questions", "themes", "operation_log"):
            conn.execute(f"DELETE FROM {t}")
    yield


@pytest.fixture()
def math_theme():
    from quizbank.services.theme_svc import create_theme
    return create_theme("Math", color="#7C4DFF")
