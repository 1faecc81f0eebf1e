from contextlib import contextmanager
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from app.core.database import get_db
from app.main import app


@contextmanager
def _client(session_factory, engine):
    app.dependency_overrides.clear()
    previous_engine = app.state.engine

    def _override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _override_get_db
    app.state.engine = engine
    app.state.session_factory = session_factory
    try:
        with TestClient(app) as client:
            yield client
    finally:
        app.dependency_overrides.clear()
        app.state.engine = previous_engine
        del app.state.session_factory


@pytest.fixture
def client(session_factory, engine):
    with _client(session_factory, engine) as client:
        yield client


def _register(client, name="alice"):
    res = client.post(
        "/api/v1/auth/register",
        json={"username": name, "email": f"{name}@example.com", "password": "secret123"},
    )
    assert res.status_code == 201
    return res.json()


def _auth(tokens):
    return {"Authorization": f"Bearer {tokens['access_token']}"}


def _fund(client, headers, amount="100"):
    res = client.post("/api/v1/wallet/deposit", json={"amount": amount}, headers=headers)
    assert res.status_code == 201
    return res.json()


def test_register_login_and_me(client):
    tokens = _register(client)
    assert tokens["username"] == "alice"
    assert tokens["token_type"] == "bearer"

    res = client.post("/api/v1/auth/login", json={"email": "ALICE@example.com", "password": "secret123"})
    assert res.status_code == 200

    me = client.get("/api/v1/auth/me", headers=_auth(res.json()))
    assert me.status_code == 200
    assert me.json()["email"] == "alice@example.com"
    assert me.json()["wallet_address"].startswith("0x")


def test_duplicate_registration_is_rejected(client):
    _register(client)
    res = client.post(
        "/api/v1/auth/register",
        json={"username": "alice2", "email": "alice@example.com", "password": "secret123"},
    )
    assert res.status_code == 400
    assert res.json()["detail"] == "Email already registered"


def test_bad_credentials_and_missing_token(client):
    _register(client)
    res = client.post("/api/v1/auth/login", json={"email": "alice@example.com", "password": "wrong-pass"})
    assert res.status_code == 401

    assert client.get("/api/v1/wallet/balance").status_code == 401
    res = client.get("/api/v1/wallet/balance", headers={"Authorization": "Bearer not-a-token"})
    assert res.status_code == 401


def test_refresh_issues_new_pair_and_refuses_access_tokens(client):
    tokens = _register(client)

    res = client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert res.status_code == 200
    assert client.get("/api/v1/wallet/balance", headers=_auth(res.json())).status_code == 200

    res = client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["access_token"]})
    assert res.status_code == 401
    res = client.get("/api/v1/wallet/balance", headers={"Authorization": f"Bearer {tokens['refresh_token']}"})
    assert res.status_code == 401


def test_deposit_is_confirmed_in_background(client):
    headers = _auth(_register(client))
    balance = client.get("/api/v1/wallet/balance", headers=headers).json()
    assert Decimal(balance["amount"]) == Decimal("0")
    assert balance["currency"] == "USDT"

    deposit = _fund(client, headers, "25.5")
    assert deposit["status"] == "pending"

    balance = client.get("/api/v1/wallet/balance", headers=headers).json()
    assert Decimal(balance["amount"]) == Decimal("25.5")

    deposits = client.get("/api/v1/wallet/deposits", headers=headers).json()
    assert deposits[0]["status"] == "confirmed"
    assert deposits[0]["transaction_hash"].startswith("0x")

    txs = client.get("/api/v1/wallet/transactions", headers=headers).json()
    assert [tx["tx_type"] for tx in txs] == ["deposit"]


def test_float_deposit_amount_is_rejected(client):
    headers = _auth(_register(client))
    res = client.post("/api/v1/wallet/deposit", json={"amount": 10.5}, headers=headers)
    assert res.status_code == 422


def test_oversized_deposit_is_rejected(client):
    headers = _auth(_register(client))
    res = client.post("/api/v1/wallet/deposit", json={"amount": "100000000000000000000000"}, headers=headers)
    assert res.status_code == 422
    assert client.get("/api/v1/wallet/deposits", headers=headers).json() == []


def test_single_shot_bet_and_history(client, rng):
    headers = _auth(_register(client))
    _fund(client, headers, "50")

    rng.push(0.7)  # tails
    res = client.post(
        "/api/v1/bets",
        json={"game_type": "coinflip", "bet_amount": "20", "choice": "heads"},
        headers=headers,
    )
    assert res.status_code == 200
    body = res.json()
    assert body["outcome"] == "loss"
    assert Decimal(body["balance"]) == Decimal("30")
    assert "multiplier" not in body

    rng.push(0.755)  # roll 75
    res = client.post(
        "/api/v1/bets",
        json={"game_type": "dice", "bet_amount": "10", "target": 50, "direction": "over"},
        headers=headers,
    )
    assert res.json()["outcome"] == "win"
    assert Decimal(res.json()["multiplier"]) == Decimal("2")

    recent = client.get("/api/v1/bets/recent", params={"limit": 1}, headers=headers).json()
    assert len(recent) == 1
    assert recent[0]["game_type"] == "dice"

    stats = client.get("/api/v1/wallet/stats", headers=headers).json()
    assert stats["total_bets"] == 2
    assert Decimal(stats["balance"]) == Decimal("40")
    assert Decimal(stats["total_winnings"]) == Decimal("20")


def test_insufficient_funds_error_shape(client):
    headers = _auth(_register(client))
    res = client.post(
        "/api/v1/bets",
        json={"game_type": "coinflip", "bet_amount": "1", "choice": "heads"},
        headers=headers,
    )
    assert res.status_code == 400
    assert res.json() == {"detail": {"message": "Insufficient balance", "code": "INSUFFICIENT_FUNDS"}}


def test_mines_flow_over_http(client):
    headers = _auth(_register(client))
    _fund(client, headers, "100")

    res = client.post("/api/v1/games/mines/start", json={"bet_amount": "10", "mine_count": 5}, headers=headers)
    assert res.status_code == 200
    assert res.json()["active"] is True
    assert "mine_positions" not in res.json()

    res = client.post("/api/v1/games/mines/start", json={"bet_amount": "10", "mine_count": 5}, headers=headers)
    assert res.status_code == 409
    assert res.json()["detail"]["code"] == "SESSION_ALREADY_ACTIVE"

    res = client.post("/api/v1/games/mines/cashout", headers=headers)
    assert res.status_code == 400
    assert res.json()["detail"]["code"] == "NOTHING_TO_CASH_OUT"

    res = client.post("/api/v1/games/mines/reveal", json={"tile_index": 10}, headers=headers)
    assert Decimal(res.json()["multiplier"]) == Decimal("1.25")

    status = client.get("/api/v1/games/mines/status", headers=headers).json()
    assert status["revealed_tiles"] == [10]

    res = client.post("/api/v1/games/mines/cashout", headers=headers)
    assert res.status_code == 200
    assert Decimal(res.json()["payout"]) == Decimal("12.5")

    res = client.post("/api/v1/games/mines/cashout", headers=headers)
    assert res.status_code == 404
    assert res.json()["detail"]["message"] == "No active mines game found"

    balance = client.get("/api/v1/wallet/balance", headers=headers).json()
    assert Decimal(balance["amount"]) == Decimal("102.5")


def test_tower_and_crash_over_http(client, rng, clock):
    headers = _auth(_register(client))
    _fund(client, headers, "100")

    client.post("/api/v1/games/tower/start", json={"bet_amount": "10"}, headers=headers)
    res = client.post("/api/v1/games/tower/play", json={"difficulty": "medium"}, headers=headers)
    assert res.json()["level"] == 1
    res = client.post("/api/v1/games/tower/cashout", headers=headers)
    assert Decimal(res.json()["payout"]) == Decimal("20")

    rng.push(0.99)
    client.post("/api/v1/games/crash/start", json={"bet_amount": "10"}, headers=headers)
    clock.advance(1)
    res = client.get("/api/v1/games/crash/status", headers=headers)
    assert res.json()["crashed"] is True
    assert res.json()["active"] is False

    res = client.get("/api/v1/games/crash/status", headers=headers)
    assert res.json() == {"game_type": "crash", "active": False}

    balance = client.get("/api/v1/wallet/balance", headers=headers).json()
    assert Decimal(balance["amount"]) == Decimal("100")


def test_unknown_session_game_is_422(client):
    headers = _auth(_register(client))
    assert client.post("/api/v1/games/dice/cashout", headers=headers).status_code == 422


def test_health_reports_sessions(client):
    res = client.get("/healthz")
    assert res.status_code == 200
    assert res.json()["active_sessions"] == 0
