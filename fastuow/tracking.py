"""SqlAlchemy :class:`~sqlalchemy.orm.Session` 의 변경 추적 상태를 다루는 모듈.

세션이 추적하는 객체를 :class:`SessionEntry` 로 감싸서
:class:`~fastuow.core.EntityState` 로 읽고 쓸 수 있게 해줍니다.
"""
from __future__ import annotations

from typing import Any, Iterable, List, Optional, Type

from sqlalchemy import inspect
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import flag_dirty

from fastuow.core import EntityState, InvalidStateTransition, TrackedEntry


class SessionEntry:
    """세션 안의 엔티티 하나에 대한 트래킹 엔트리."""

    def __init__(self, session: Session, entity: Any):
        self.session = session
        self.entity = entity

    def __repr__(self) -> str:
        return f"SessionEntry[{self.entity!r}, {self.state.name}]"

    @property
    def state(self) -> EntityState:
        insp = inspect(self.entity)
        if insp.session is not self.session:
            return EntityState.DETACHED
        if insp.pending:
            return EntityState.ADDED
        if insp.deleted or self.entity in self.session.deleted:
            return EntityState.DELETED
        if insp.modified:
            return EntityState.MODIFIED
        return EntityState.UNCHANGED

    @state.setter
    def state(self, new_state: EntityState) -> None:
        current = self.state
        if new_state is current:
            return

        session, entity = self.session, self.entity

        if new_state is EntityState.DETACHED:
            session.expunge(entity)
        elif new_state is EntityState.ADDED:
            if current is not EntityState.DETACHED:
                raise InvalidStateTransition(entity, current, new_state)
            session.add(entity)
        elif new_state is EntityState.DELETED:
            if current is EntityState.ADDED:
                raise InvalidStateTransition(entity, current, new_state)
            session.delete(entity)
        elif new_state is EntityState.MODIFIED:
            if current is EntityState.DELETED:
                # 삭제 예정 표시를 지우고 다시 세션에 붙입니다.
                session.expunge(entity)
                session.add(entity)
            elif current is not EntityState.UNCHANGED:
                raise InvalidStateTransition(entity, current, new_state)
            flag_dirty(entity)
        elif new_state is EntityState.UNCHANGED:
            if current is not EntityState.MODIFIED:
                raise InvalidStateTransition(entity, current, new_state)
            # 반영되지 않은 속성 변경을 버리고 다음 접근 시 DB 에서 다시 읽습니다.
            session.expire(entity)


def session_entries(
    session: Session, entity_class: Optional[Type[Any]] = None
) -> List[SessionEntry]:
    """세션이 추적중인 모든 엔티티의 엔트리 목록을 리턴합니다.

    `entity_class` 가 주어지면 그 타입의 인스턴스만 포함합니다.
    """
    entities = list(session.new) + list(session.identity_map.values())
    return [
        SessionEntry(session, entity)
        for entity in entities
        if entity_class is None or isinstance(entity, entity_class)
    ]


def reject_entries(entries: Iterable[TrackedEntry]) -> None:
    """엔트리들의 커밋되지 않은 변경을 되돌립니다.

    - ``MODIFIED``, ``DELETED``: ``MODIFIED`` 를 거쳐 ``UNCHANGED`` 로.
      ``DELETED`` 는 곧바로 ``UNCHANGED`` 가 될 수 없습니다.
    - ``ADDED``: ``DETACHED`` 로. 다시 추가하면 새 엔티티로 취급됩니다.
    - ``UNCHANGED``: 그대로 둡니다.
    """
    for entry in list(entries):
        if entry.state in (EntityState.MODIFIED, EntityState.DELETED):
            entry.state = EntityState.MODIFIED
            entry.state = EntityState.UNCHANGED
        elif entry.state is EntityState.ADDED:
            entry.state = EntityState.DETACHED
