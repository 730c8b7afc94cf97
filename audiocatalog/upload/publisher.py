"""Upload event publisher for pub/sub fan-out."""

import logging
from typing import Callable

from pubsub import pub

from ..models.upload import UploadEvent

logger = logging.getLogger(__name__)

DEFAULT_UPLOAD_TOPIC = "upload.events"


class UploadPublisher:
    """Publishes upload events using pubsub.pub so several listeners can follow an upload."""

    def __init__(self, topic: str = DEFAULT_UPLOAD_TOPIC):
        """Initialize upload publisher.

        Args:
            topic: Pub/sub topic name for upload events
        """
        self.topic = topic
        logger.info(f"UploadPublisher initialized with topic: {topic}")

    def publish_upload_event(self, event: UploadEvent) -> None:
        """Publish an upload event to the pub/sub topic.

        Args:
            event: Event emitted by an upload session
        """
        pub.sendMessage(self.topic, event=event)
        logger.debug(f"Published upload event: {type(event).__name__}")

    def get_callback(self) -> Callable[[UploadEvent], None]:
        """Get callback function for UploadSession.add_listener."""
        return self.publish_upload_event
