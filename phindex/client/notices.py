"""Transient user-facing notifications raised by the client helpers."""

from dataclasses import dataclass
from typing import Callable

from loguru import logger


@dataclass(frozen=True)
class Notice:
    title: str
    description: str = ""
    variant: str = "default"  # default or destructive

    @property
    def is_error(self) -> bool:
        return self.variant == "destructive"


Notifier = Callable[[Notice], None]


def log_notice(notice: Notice) -> None:
    logger.log("WARNING" if notice.is_error else "INFO", "{}: {}", notice.title, notice.description)
