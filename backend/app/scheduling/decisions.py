from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from app.scheduling.errors import SchedulingError

T = TypeVar("T")


@dataclass(frozen=True)
class Approved(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Rejected:
    error: SchedulingError

    @property
    def ok(self) -> bool:
        return False

    @property
    def kind(self) -> str:
        return self.error.kind

    @property
    def code(self) -> str:
        return self.error.code

    def unwrap(self):
        raise self.error


Decision = Union[Approved[T], Rejected]
