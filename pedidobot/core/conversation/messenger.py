"""
Outbound messaging abstraction used by the conversation engine.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Sequence, Union

from pedidobot.core.conversation.models import InboundMessage

# Local file, raw bytes or a public URL
ImageSource = Union[Path, bytes, str]


class BaseMessenger(ABC):
    """Channel transport: sends to a sender or chat identifier."""

    @abstractmethod
    async def send_text(
        self,
        to: str,
        text: str,
        quick_replies: Optional[Sequence[str]] = None,
    ) -> None:
        """Send a text message, optionally with quick-reply buttons."""
        pass

    @abstractmethod
    async def send_image(self, to: str, image: ImageSource, caption: Optional[str] = None) -> None:
        """Send an image with an optional caption."""
        pass

    @abstractmethod
    async def send_document(
        self,
        to: str,
        document: Path,
        caption: Optional[str] = None,
        filename: Optional[str] = None,
    ) -> None:
        """Send a local file as a document."""
        pass

    @abstractmethod
    async def forward(self, to: str, message: InboundMessage) -> None:
        """Forward a received message unchanged."""
        pass

    @abstractmethod
    async def download_image(self, message: InboundMessage, thumbnail: bool = False) -> Optional[bytes]:
        """
        Download the image attached to a message.

        Args:
            message: Received message with an image
            thumbnail: Fetch the reduced-size version instead of the original

        Returns:
            Image bytes or None if the message has no image
        """
        pass
