import pytest

from backend import create_app
from backend import rate_limit
from backend.db import db


@pytest.fixture
def app(tmp_path):
    app = create_app(
        {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'test.db'}",
            "REPORTS_DIR": str(tmp_path / "reports"),
        }
    )
    rate_limit.reset()
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()
