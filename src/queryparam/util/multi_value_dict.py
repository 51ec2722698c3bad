from collections import UserDict
from collections.abc import Iterable
from typing import Generic, Optional, TypeVar

__all__ = ("MultiValueDict",)

T = TypeVar("T")


class MultiValueDict(Generic[T], UserDict):
    """Ordered mapping of key to every value recorded for it.

    Keys keep the order in which they were first added and values keep the
    order in which they were recorded.
    """

    def __init__(self, initial: Iterable[tuple[str, T]] = None):
        super().__init__()

        if initial:
            for key, value in initial:
                self.add(key, value)

    def get_all(self, key: str, default: list[T] = None) -> Optional[list[T]]:
        return self.data.get(key, default)

    def add(self, key: str, value: T):
        if key not in self.data:
            self.data[key] = []
        self.data[key].append(value)

    def discard(self, key: str):
        self.data.pop(key, None)

    def count(self) -> int:
        return sum(len(values) for values in self.data.values())
