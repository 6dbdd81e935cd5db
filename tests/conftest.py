# pylint: disable=redefined-outer-name
"""pytest 에서 사용될 전역 Fixture들을 정의합니다."""
from __future__ import annotations

from pathlib import Path
from typing import Generator

import pytest
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from fastuow.config import UnitOfWorkConfig
from fastuow.orm import SessionMaker, create_sessionmaker, engine_from_config, init_db
from tests.app.adapters.orm import start_mappers
from tests.app.domain.models import User


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """테이블이 생성된 메모리 SQLite 엔진."""
    engine = init_db(engine_from_config(UnitOfWorkConfig()), start_mappers())
    yield engine
    engine.dispose()


@pytest.fixture
def file_engine(tmp_path: Path) -> Generator[Engine, None, None]:
    """커넥션마다 독립된 트랜잭션을 갖는 파일 SQLite 엔진."""
    config = UnitOfWorkConfig(db_url=f"sqlite:///{tmp_path / 'fastuow.db'}")
    engine = init_db(engine_from_config(config), start_mappers())
    yield engine
    engine.dispose()


@pytest.fixture
def get_session(engine: Engine) -> SessionMaker:
    """:class:`.Session` 팩토리 메소드를 리턴하는 픽스쳐 입니다."""
    return create_sessionmaker(engine=engine)


@pytest.fixture
def session(get_session: SessionMaker) -> Generator[Session, None, None]:
    """테스트에 사용될 새로운 :class:`.Session` 픽스처를 리턴합니다."""
    session = get_session()
    yield session
    session.close()


@pytest.fixture
def add_users(get_session: SessionMaker):
    """주어진 이름의 사용자들을 DB 에 커밋하고 id 목록을 리턴합니다."""

    def wrapper(*names: str) -> list[int]:
        with get_session() as session:
            users = [User(name) for name in names]
            session.add_all(users)
            session.commit()
            return [it.id for it in users]

    return wrapper
