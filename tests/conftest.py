import re

import pytest
from fastapi.testclient import TestClient

from pixsoul.common import get_mailer
from pixsoul.config import Settings
from pixsoul.core.exceptions import MailDeliveryError
from pixsoul.init_db import get_db
from pixsoul.main import create_app

DEFAULT_PASSWORD = "Passw0rd!"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


class FakeMailer:
    def __init__(self):
        self.sent = []
        self.fail = False

    async def send(self, to_email, subject, body):
        if self.fail:
            raise MailDeliveryError("connection refused")
        self.sent.append({"to": to_email, "subject": subject, "body": body})

    def last_code(self):
        return re.search(r"\b(\d{6})\b", self.sent[-1]["body"]).group(1)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        environment="test",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'pixsoul.db'}",
        auto_create_tables=True,
        upload_dir=str(tmp_path / "uploads"),
    )


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def app(settings, mailer):
    app = create_app(settings)
    app.dependency_overrides[get_mailer] = lambda: mailer
    return app


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def patch_db_session(app):
    """Serve later requests with a session that `patch(db, factory)` has modified."""
    def _install(patch):
        async def _get_db():
            factory = app.state.database.session_factory
            db = factory()
            patch(db, factory)
            try:
                yield db
            finally:
                await db.close()
        app.dependency_overrides[get_db] = _get_db
    yield _install
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def make_user(client):
    def _make(username, password=DEFAULT_PASSWORD):
        email = f"{username.lower()}@example.com"
        resp = client.post("/signup", data={"username": username, "email": email, "password": password})
        assert resp.status_code == 200, resp.text
        return {"username": username, "email": email, "password": password}
    return _make


@pytest.fixture
def login_as(client):
    def _login(user):
        resp = client.post("/login", json={"email": user["email"], "password": user["password"]})
        assert resp.status_code == 200, resp.text
        me = client.get("/api/user").json()["user"]
        user["id"] = me["id"]
        return me["id"]
    return _login


@pytest.fixture
def upload(client):
    def _upload(caption="A day at the beach", emotion="happy", filename="photo.png"):
        resp = client.post(
            "/api/upload",
            files={"image": (filename, PNG_BYTES, "image/png")},
            data={"caption": caption, "emotion": emotion},
            follow_redirects=False,
        )
        assert resp.status_code == 303, resp.text
        return client.get("/api/my-memories").json()[0]
    return _upload


@pytest.fixture
def friends(client, make_user, login_as):
    """Two users who follow each other; the client ends logged out."""
    alice = make_user("Alice")
    bob = make_user("Bob")
    login_as(bob)
    login_as(alice)
    client.post(f"/api/follow/{bob['id']}")
    login_as(bob)
    client.post(f"/api/follow/{alice['id']}")
    client.get("/logout", follow_redirects=False)
    return alice, bob
