"""
Infrastructure adapter: Amazon SNS → IMessagePublisher.

The topic id handed to publish() is the SNS topic ARN.  Each call is one
Publish request; errors from botocore propagate to the caller unchanged.
"""

import os
from typing import Any

import boto3

from chunk_pipeline.domain.ports.message_publisher_port import IMessagePublisher


class SNSMessagePublisher(IMessagePublisher):
    """Publishes string messages to SNS topics."""

    def __init__(self, client: Any = None, region: str | None = None) -> None:
        self._client = client or boto3.client(
            "sns",
            region_name=region or os.environ.get("AWS_DEFAULT_REGION", "us-east-1"),
        )

    def publish(self, topic_id: str, message: str) -> str:
        response = self._client.publish(TopicArn=topic_id, Message=message)
        return response["MessageId"]
