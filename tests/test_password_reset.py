from datetime import timedelta

import pytest

from pixsoul.services import password_reset_service
from pixsoul.utils import time_utils

NEW_PASSWORD = "N3wSecret$"


def reset(client, email, otp, new_password=NEW_PASSWORD):
    return client.post("/reset-password", json={"email": email, "otp": otp, "newPassword": new_password})


@pytest.mark.parametrize("email", ["nobody@example.com", "not-an-email", ""])
def test_forgot_password_does_not_reveal_accounts(client, make_user, mailer, email):
    alice = make_user("Alice")

    known = client.post("/forgot-password", json={"email": alice["email"]})
    unknown = client.post("/forgot-password", json={"email": email})

    assert known.status_code == unknown.status_code == 200
    assert known.json() == unknown.json() == {
        "success": True,
        "message": "If the email exists, an OTP has been sent.",
    }
    assert [m["to"] for m in mailer.sent] == [alice["email"]]


def test_otp_is_six_digits(client, make_user, mailer):
    alice = make_user("Alice")

    client.post("/forgot-password", json={"email": alice["email"]})

    code = mailer.last_code()
    assert len(code) == 6 and code.isdigit()
    assert "5 minutes" in mailer.sent[-1]["body"]


def test_mail_failure_is_reported(client, make_user, mailer):
    alice = make_user("Alice")
    mailer.fail = True

    resp = client.post("/forgot-password", json={"email": alice["email"]})

    assert resp.status_code == 500
    assert resp.json() == {"success": False, "message": "Error sending OTP"}


def test_undelivered_otp_is_not_usable(client, make_user, login_as, mailer, monkeypatch):
    alice = make_user("Alice")
    login_as(alice)
    monkeypatch.setattr(password_reset_service, "generate_otp", lambda: "123456")
    mailer.fail = True
    assert client.post("/forgot-password", json={"email": alice["email"]}).status_code == 500

    resp = reset(client, alice["email"], "123456")

    assert resp.status_code == 400
    assert resp.json() == {"success": False, "message": "Invalid or expired OTP"}
    assert client.post("/login", json={"email": alice["email"], "password": alice["password"]}).status_code == 200


def test_reset_password_flow(client, make_user, mailer):
    alice = make_user("Alice")
    client.post("/forgot-password", json={"email": alice["email"]})

    resp = reset(client, alice["email"], mailer.last_code())

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "message": "Password reset successfully"}
    assert client.post("/login", json={"email": alice["email"], "password": alice["password"]}).status_code == 401
    assert client.post("/login", json={"email": alice["email"], "password": NEW_PASSWORD}).status_code == 200


def test_otp_is_single_use(client, make_user, mailer):
    alice = make_user("Alice")
    client.post("/forgot-password", json={"email": alice["email"]})
    code = mailer.last_code()
    assert reset(client, alice["email"], code).status_code == 200

    resp = reset(client, alice["email"], code, "An0ther$pass")

    assert resp.status_code == 400
    assert resp.json() == {"success": False, "message": "Invalid or expired OTP"}


def test_reset_without_request_fails(client, make_user):
    alice = make_user("Alice")

    resp = reset(client, alice["email"], "123456")

    assert resp.status_code == 400
    assert resp.json()["message"] == "Invalid or expired OTP"


def test_reset_rejects_wrong_code_and_wrong_email(client, make_user, mailer):
    alice = make_user("Alice")
    bob = make_user("Bob")
    client.post("/forgot-password", json={"email": alice["email"]})
    code = mailer.last_code()
    wrong = "000000" if code != "000000" else "111111"

    assert reset(client, alice["email"], wrong).status_code == 400
    assert reset(client, bob["email"], code).status_code == 400
    # The right pair still works afterwards
    assert reset(client, alice["email"], code).status_code == 200


def test_otp_expires_after_five_minutes(client, make_user, mailer, monkeypatch):
    alice = make_user("Alice")
    client.post("/forgot-password", json={"email": alice["email"]})
    code = mailer.last_code()

    later = time_utils.utcnow() + timedelta(minutes=5, seconds=1)
    monkeypatch.setattr(time_utils, "utcnow", lambda: later)
    resp = reset(client, alice["email"], code)

    assert resp.status_code == 400
    assert resp.json()["message"] == "Invalid or expired OTP"
    assert client.post("/login", json={"email": alice["email"], "password": alice["password"]}).status_code == 200


def test_otp_still_valid_just_before_expiry(client, make_user, mailer, monkeypatch):
    alice = make_user("Alice")
    client.post("/forgot-password", json={"email": alice["email"]})
    code = mailer.last_code()

    later = time_utils.utcnow() + timedelta(minutes=4, seconds=50)
    monkeypatch.setattr(time_utils, "utcnow", lambda: later)

    assert reset(client, alice["email"], code).status_code == 200


def test_reset_rejects_weak_password_and_keeps_code(client, make_user, mailer):
    alice = make_user("Alice")
    client.post("/forgot-password", json={"email": alice["email"]})
    code = mailer.last_code()

    resp = reset(client, alice["email"], code, "weak")

    assert resp.status_code == 400
    assert resp.json()["message"] == "Password must contain letters, numbers, and special chars"
    assert reset(client, alice["email"], code).status_code == 200


def test_otp_is_bound_to_the_requesting_session(client, make_user, mailer):
    alice = make_user("Alice")
    client.post("/forgot-password", json={"email": alice["email"]})
    code = mailer.last_code()

    client.cookies.clear()

    assert reset(client, alice["email"], code).status_code == 400
