"""기본 환경 설정."""

from __future__ import annotations

import os
from configparser import ConfigParser
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional, Type

from sqlalchemy.pool import Pool, StaticPool

from fastuow.core._logging import to_log_level

DB_URL_ENV = "FASTUOW_DB_URL"
"""DB URL 을 덮어쓰는 OS 환경변수 이름."""


def load_setupcfg(path: Path) -> Optional[dict[str, str]]:
    if (path / "setup.cfg").exists():
        # 경로에 "setup.cfg" 파일이 있다면 [fastuow] 섹션에서
        # db_url, echo 등의 정보를 읽습니다.
        config = ConfigParser()
        config.read(path / "setup.cfg")
        if "fastuow" in config:
            return dict(config["fastuow"])
    return None


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class UnitOfWorkConfig:
    """FastUoW 설정."""

    db_url: str = "sqlite://"
    echo: bool = False
    """SqlAlchemy 엔진이 실행하는 SQL 을 로그로 출력할지 여부."""
    isolation_level: Optional[str] = None
    log_level: str = "INFO"

    def __post_init__(self):
        self.echo = _to_bool(self.echo)
        to_log_level(self.log_level)  # 잘못된 레벨 이름이면 ValueError

    @staticmethod
    def load_from_config(path=Path(".")) -> UnitOfWorkConfig:
        """`setup.cfg` 의 ``[fastuow]`` 섹션을 읽어 설정을 만듭니다.

        ``FASTUOW_DB_URL`` 환경변수가 있으면 `db_url` 보다 우선합니다.
        """
        names = {it.name for it in fields(UnitOfWorkConfig)}
        cfg = load_setupcfg(path) or {}
        kwargs: dict[str, Any] = {k: v for k, v in cfg.items() if k in names}

        if os.environ.get(DB_URL_ENV):
            kwargs["db_url"] = os.environ[DB_URL_ENV]

        return UnitOfWorkConfig(**kwargs)

    def is_memory_db(self) -> bool:
        return self.db_url in ("sqlite://", "sqlite:///:memory:")

    def get_db_url(self) -> str:
        """SqlAlchemy 에서 사용 가능한 형식의 DB URL을 리턴합니다."""
        return self.db_url

    def get_db_connect_args(self) -> dict[str, Any]:
        """Get db connection arguments for SQLAlchemy's engine creation.

        Example:
            For SQLite dbs, it could be: ::

                {'check_same_thread': False}
        """
        if self.db_url.startswith("sqlite"):
            return {"check_same_thread": False}
        return {}

    def get_db_poolclass(self) -> Optional[Type[Pool]]:
        """메모리 SQLite DB 는 모든 커넥션이 같은 DB 를 보도록 StaticPool 을 씁니다."""
        if self.is_memory_db():
            return StaticPool
        return None
