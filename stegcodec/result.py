"""Decode results.

A decode either recovers a :class:`Message` or reports :class:`NotFound`.
``NotFound`` is falsy so callers can write ``if result:``.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Message:
    data: bytes

    found = True

    @property
    def text(self) -> str:
        return self.data.decode("utf-8")

    def __bool__(self) -> bool:
        return True


@dataclass(frozen=True)
class NotFound:
    reason: str = "no hidden message"

    found = False

    def __bool__(self) -> bool:
        return False
