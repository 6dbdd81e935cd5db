"""ORM 어댑터 모듈"""
from __future__ import annotations

import logging
from contextlib import AbstractContextManager, contextmanager
from typing import Any, Callable, Generator, Optional, Type, cast

from sqlalchemy import MetaData, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.orm.session import Session
from sqlalchemy.pool import Pool

from fastuow.config import UnitOfWorkConfig
from fastuow.core._logging import set_log_level

SessionMaker = Callable[[], Session]
"""Session 팩토리 타입."""
ScopedSession = AbstractContextManager[Session]


def init_engine(
    url: str,
    connect_args: Optional[dict[str, Any]] = None,
    poolclass: Optional[Type[Pool]] = None,
    show_log: bool = False,
    isolation_level: Optional[str] = None,
) -> Engine:
    """ORM Engine을 초기화 합니다."""
    kwargs: dict[str, Any] = {}
    if poolclass:
        kwargs["poolclass"] = poolclass
    if isolation_level:
        kwargs["isolation_level"] = isolation_level

    if show_log:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)

    return create_engine(url, connect_args=connect_args or {}, **kwargs)


def engine_from_config(config: UnitOfWorkConfig) -> Engine:
    """설정으로부터 엔진을 만들고 ``fastuow`` 로거 레벨을 설정합니다."""
    set_log_level(config.log_level)
    return init_engine(
        config.get_db_url(),
        connect_args=config.get_db_connect_args(),
        poolclass=config.get_db_poolclass(),
        show_log=config.echo,
        isolation_level=config.isolation_level,
    )


def create_sessionmaker(
    config: Optional[UnitOfWorkConfig] = None,
    engine: Optional[Engine] = None,
) -> SessionMaker:
    """SqlAlchemy Session 팩토리를 만듭니다.

    변경 사항은 ``save_changes()`` 전까지 보류되어야 하므로 ``autoflush`` 를 끕니다.
    """
    if not engine:
        engine = engine_from_config(config or UnitOfWorkConfig())
    return cast(SessionMaker, sessionmaker(engine, autoflush=False))


def init_db(
    engine: Engine,
    metadata: MetaData,
    drop_all: bool = False,
) -> Engine:
    """테스트/개발용으로 매핑된 테이블을 생성합니다."""
    if drop_all:
        metadata.drop_all(engine)
    metadata.create_all(engine)
    return engine


def get_scoped_session(engine: Engine) -> Callable[[], ScopedSession]:
    """``with...`` 문으로 자동 리소스가 반환되는 세션을 리턴합니다.

    Example: ::

        with get_scoped_session(engine)() as db:
            users = db.query(User).all()
            ...

    Args:
        engine: Engine.

    """
    session_factory = sessionmaker(engine, autoflush=False)

    @contextmanager
    def scoped_session() -> Generator[Session, None, None]:
        session: Optional[Session] = None
        try:
            yield (session := session_factory())  # pylint: disable=superfluous-parens
        finally:
            if session:
                session.close()  # pylint: disable=no-member

    return scoped_session
