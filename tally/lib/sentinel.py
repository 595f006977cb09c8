from __future__ import annotations

import typing as t


class NotSet(object):
    """Marks an update parameter as omitted, where None is a meaningful value.

    There is only ever one instance, and it is falsy::

        def update(description: str | None | NotSet = NotSet()): ...
    """

    _instance: t.ClassVar[NotSet | None] = None

    def __new__(cls) -> NotSet:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NotSet"

    def __bool__(self) -> bool:
        return False


class NotReady(object):
    """Stands in for container values that are only known once the container has booted."""

    _instance: t.ClassVar[NotReady | None] = None

    def __new__(cls) -> NotReady:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NotReady"
