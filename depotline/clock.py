from __future__ import annotations

from datetime import datetime, timezone
from typing import Protocol
from uuid import uuid4


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class IdProvider(Protocol):
    def new_id(self) -> str: ...


class UUIDProvider:
    def new_id(self) -> str:
        return uuid4().hex
