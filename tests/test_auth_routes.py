from gatehunt.models import User
from tests.factories import create_user


def test_register_logs_in(client):
    resp = client.post("/api/auth/register", json={"username": "newuser", "password": "secret123"})
    assert resp.status_code == 201
    assert User.query.filter_by(username="newuser").count() == 1
    # session cookie is live
    assert client.get("/api/hunters").status_code == 200


def test_register_duplicate_username(client):
    create_user("dup")
    resp = client.post("/api/auth/register", json={"username": "DUP", "password": "secret123"})
    assert resp.status_code == 409
    assert resp.get_json()["error"] == "username_taken"


def test_register_short_password(client):
    resp = client.post("/api/auth/register", json={"username": "shorty", "password": "123"})
    assert resp.status_code == 400


def test_login_and_logout(client):
    create_user("loginuser", "pass123")
    resp = client.post("/api/auth/login", json={"username": "loginuser", "password": "pass123"})
    assert resp.status_code == 200
    assert client.get("/api/hunters").status_code == 200
    assert client.post("/api/auth/logout").status_code == 200
    assert client.get("/api/hunters").status_code == 401


def test_login_failure(client):
    create_user("someone", "right-pass")
    resp = client.post("/api/auth/login", json={"username": "someone", "password": "wrong-pass"})
    assert resp.status_code == 401
    assert resp.get_json()["error"] == "invalid_credentials"


def test_api_requires_login_json(client):
    resp = client.post("/api/gate/locate", json={"hunterId": 1})
    assert resp.status_code == 401
    assert resp.get_json() == {"error": "unauthorized", "message": "Login required."}
