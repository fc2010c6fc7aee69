"""User-facing notices raised by user-initiated actions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Literal

NoticeLevel = Literal["info", "error"]


@dataclass(frozen=True)
class Notice:
    level: NoticeLevel
    title: str
    message: str


NoticeListener = Callable[[Notice], None]


class NoticeBoard:
    """Collect notices and forward them to whatever renders them."""

    def __init__(self) -> None:
        self.history: list[Notice] = []
        self._listeners: list[NoticeListener] = []

    def register_listener(self, listener: NoticeListener) -> None:
        self._listeners.append(listener)

    def info(self, title: str, message: str) -> Notice:
        return self._publish(Notice("info", title, message))

    def error(self, title: str, message: str) -> Notice:
        return self._publish(Notice("error", title, message))

    def errors(self) -> list[Notice]:
        return [notice for notice in self.history if notice.level == "error"]

    def _publish(self, notice: Notice) -> Notice:
        self.history.append(notice)
        for listener in self._listeners:
            listener(notice)
        return notice
