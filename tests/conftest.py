import os


def _set_test_env() -> None:
    defaults = {
        "APP_NAME": "Wager Engine Test",
        "ENVIRONMENT": "test",
        "SECRET_KEY": "test-secret",
        "ACCESS_TOKEN_EXPIRE_MINUTES": "30",
        "REFRESH_TOKEN_EXPIRE_DAYS": "7",
        "PASSWORD_BCRYPT_ROUNDS": "4",
        "AUTO_CREATE_TABLES": "false",
        "DATABASE_URL": "sqlite://",
        "CURRENCY": "USDT",
        "MAX_BET_AMOUNT": "1000000",
        "DEPOSIT_CONFIRMATION_DELAY_SECONDS": "0",
        "RATE_LIMIT_ENABLED": "false",
        "LOG_LEVEL": "WARNING",
        "CORS_ORIGINS": "http://localhost:5173,http://localhost:3000",
    }
    for key, value in defaults.items():
        os.environ.setdefault(key, value)


_set_test_env()

from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.core.database import Base  # noqa: E402
from app.models import User  # noqa: E402
from app.services import ledger  # noqa: E402
from app.services.engine import WageringEngine  # noqa: E402
from app.services.rng import RandomSource  # noqa: E402


class ScriptedRandom(RandomSource):
    """Returns queued draws in order, then ``fallback`` forever."""

    def __init__(self, *values, fallback=0.0):
        super().__init__()
        self.values = list(values)
        self.fallback = fallback

    def push(self, *values):
        self.values.extend(values)

    def random(self):
        if self.values:
            return self.values.pop(0)
        return self.fallback


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def rng():
    return ScriptedRandom()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def engine(rng, clock):
    return WageringEngine(rng=rng, clock=clock)


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(balance="0"):
        counter["n"] += 1
        n = counter["n"]
        user = User(
            username=f"player{n}",
            email=f"player{n}@example.com",
            hashed_password="x",
            wallet_address="0x" + "0" * 40,
        )
        db.add(user)
        db.flush()
        ledger.set_balance(db, user.id, Decimal(balance))
        db.commit()
        return user.id

    return _make


@pytest.fixture
def balance_of(db):
    def _balance(user_id) -> Decimal:
        db.expire_all()
        return Decimal(ledger.get_balance(db, user_id).amount)

    return _balance
