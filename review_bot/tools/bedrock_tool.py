"""AWS Bedrock wrapper for model inference."""

import asyncio
import json
from typing import Any, Dict, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ..utils import get_logger


class InferenceError(RuntimeError):
    """Raised when a model invocation fails or returns an unusable body."""
    pass


class BedrockTool:
    """
    Thin async wrapper over the bedrock-runtime ``invoke_model`` call.

    Calls are bounded by ``timeout`` seconds and never retried, since a
    retried analysis could post duplicate comments.
    """

    def __init__(
        self,
        model_id: str,
        region: str = "us-east-1",
        timeout: float = 120.0,
        client: Optional[Any] = None
    ):
        """
        Initialize Bedrock tool.

        Args:
            model_id: Bedrock model identifier (e.g. anthropic.claude-3-5-sonnet-20240620-v1:0)
            region: AWS region of the runtime endpoint
            timeout: Upper bound in seconds for a single invocation
            client: Pre-built bedrock-runtime client (mainly for tests)
        """
        self.model_id = model_id
        self.timeout = timeout
        self.logger = get_logger()
        self._client = client or boto3.client(
            "bedrock-runtime",
            region_name=region,
            config=Config(
                read_timeout=timeout,
                retries={"total_max_attempts": 1},
            ),
        )

    def _invoke(self, body: str) -> Dict[str, Any]:
        response = self._client.invoke_model(
            modelId=self.model_id,
            body=body,
            contentType="application/json",
            accept="application/json",
        )
        return json.loads(response["body"].read())

    async def invoke(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Send a request payload and return the decoded response body.

        Raises:
            InferenceError: on client/transport errors, timeout or a body
                that is not valid JSON
        """
        body = json.dumps(payload)
        self.logger.debug(f"Invoking {self.model_id} ({len(body)} bytes)")

        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self._invoke, body),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise InferenceError(f"Model invocation timed out after {self.timeout}s") from e
        except (BotoCoreError, ClientError) as e:
            raise InferenceError(f"Model invocation failed: {e}") from e
        except (json.JSONDecodeError, KeyError) as e:
            raise InferenceError(f"Undecodable model response: {e}") from e
