"""테스트용 도메인 모델."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(eq=False)
class User:
    """사용자 모델입니다. `name` 은 중복될 수 없습니다."""

    name: str
    id: Optional[int] = None  # pylint: disable=invalid-name


@dataclass(eq=False)
class OrderLine:
    """주문선 모델입니다."""

    orderid: str
    qty: int
    id: Optional[int] = None  # pylint: disable=invalid-name
