from __future__ import annotations

from typing import Optional, Protocol

from alerts import Notification


class PresentationLike(Protocol):
    def show_status(self, text: str) -> None:
        ...

    def show_message(self, text: str, *, level: str = "info") -> None:
        ...


class RuntimeUIPublisher:
    """Forwards runtime output to the presentation when one is attached."""
    def __init__(self, presentation: Optional[PresentationLike]):
        self._presentation = presentation
        self._last_status: Optional[str] = None

    def publish_status(self, text: str) -> None:
        if text == self._last_status:
            return
        self._last_status = text
        if self._presentation:
            self._presentation.show_status(text)

    def publish_message(self, text: str) -> None:
        if self._presentation:
            self._presentation.show_message(text)

    def publish_warning(self, text: str) -> None:
        if self._presentation:
            self._presentation.show_message(text, level="warning")

    def publish_notification(self, notification: Notification) -> None:
        if self._presentation:
            self._presentation.show_message(
                f"{notification.title} {notification.body}",
                level="notification",
            )
