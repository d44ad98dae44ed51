import time
from typing import Generator

import pytest
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from db.models import Base
from tests.helpers.stubs import RecordingSleep

# One shared connection so background threads see the same in-memory database.
engine: Engine = create_engine(
    "sqlite:///:memory:", connect_args={"check_same_thread": False}, poolclass=StaticPool
)
_session_factory = sessionmaker(engine)


@pytest.fixture(scope="function")
def session_factory() -> sessionmaker[Session]:
    return _session_factory


@pytest.fixture(scope="function")
def test_session() -> Generator[Session, None, None]:
    with _session_factory() as session:
        yield session


@pytest.fixture(scope="function", autouse=True)
def reset_db() -> Generator[None, None, None]:
    Base.metadata.create_all(engine)
    yield
    Base.metadata.drop_all(engine)


@pytest.fixture(scope="function", autouse=True)
def backoff_sleep(monkeypatch: pytest.MonkeyPatch) -> RecordingSleep:
    """Records retry waits instead of sleeping through them."""
    sleep = RecordingSleep()
    monkeypatch.setattr(time, "sleep", sleep)
    return sleep
