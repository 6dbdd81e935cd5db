"""ORM 어댑터 모듈"""
from __future__ import annotations

from sqlalchemy import Column, Integer, MetaData, String, Table
from sqlalchemy.orm import registry

from tests.app.domain.models import OrderLine, User

metadata = MetaData()
mapper_registry = registry(metadata=metadata)

user = Table(
    "user",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), unique=True, nullable=False),
)

order_line = Table(
    "order_line",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("orderid", String(255)),
    Column("qty", Integer, nullable=False),
)

_started = False


def start_mappers() -> MetaData:
    """도메인 객체들을 SqlAlchemy ORM 매퍼에 등록합니다."""
    global _started  # pylint: disable=global-statement

    if not _started:
        mapper_registry.map_imperatively(User, user)
        mapper_registry.map_imperatively(OrderLine, order_line)
        _started = True

    return metadata
