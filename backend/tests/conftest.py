import os

# Must be set before calmwalk.core.config is imported anywhere
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["TIMEZONE"] = "UTC"
for key in ("OPENROUTE_API_KEY", "GRAPHHOPPER_API_KEY"):
    os.environ.pop(key, None)

import pytest  # noqa: E402


@pytest.fixture
def client():
    from fastapi.testclient import TestClient  # noqa: WPS433
    from calmwalk.main import app  # noqa: WPS433
    from calmwalk.db import SessionLocal  # noqa: WPS433
    from calmwalk import store  # noqa: WPS433

    db = SessionLocal()
    try:
        store.clear_all_data(db)
    finally:
        db.close()
    return TestClient(app)
