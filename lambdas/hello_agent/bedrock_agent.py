# lambdas/hello_agent/bedrock_agent.py
import json
from pathlib import Path
from typing import Any, Dict, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .errors import GenerationError
from .models import settings

PROMPT_PATH = Path(__file__).parent / "agent_prompt.txt"


def load_prompt(path: Path = PROMPT_PATH) -> str:
    return path.read_text().strip()


class BedrockAgent:
    """
    Asks an Amazon Nova model on Bedrock for a reply to a single user prompt.
    """
    def __init__(self, bedrock_runtime: Optional[Any] = None, model_id: Optional[str] = None):
        self.bedrock_model_id = model_id or settings.bedrock_model_id
        self.max_tokens = settings.bedrock_max_tokens
        if bedrock_runtime is None:
            try:
                bedrock_runtime = boto3.client(
                    service_name="bedrock-runtime",
                    region_name=settings.bedrock_region,
                )
            except (BotoCoreError, ClientError) as e:
                print(f"Error initializing Bedrock client: {e}")
                raise GenerationError(f"Bedrock client is not initialized: {e}") from e
        self.bedrock_runtime = bedrock_runtime

    def generate_text(self, prompt: str) -> str:
        """
        Sends the prompt to the configured model and returns the reply text.

        Raises:
            GenerationError: If the Bedrock call fails or the reply has no text.
        """
        if not prompt:
            raise GenerationError("Prompt cannot be empty.")

        try:
            response = self.bedrock_runtime.invoke_model(
                modelId=self.bedrock_model_id,
                body=json.dumps(self._request_body(prompt)),
                accept="application/json",
                contentType="application/json",
            )
            response_body = json.loads(response["body"].read())
        except (BotoCoreError, ClientError, KeyError, ValueError) as e:
            print(f"Bedrock API problem: {e}")
            raise GenerationError(f"Bedrock API call failed: {e}") from e

        reply = self._reply_text(response_body)
        if not reply:
            raise GenerationError(f"No reply text in Bedrock response: {response_body}")
        return reply

    def _request_body(self, prompt: str) -> Dict[str, Any]:
        # Nova messages schema
        return {
            "messages": [{"role": "user", "content": [{"text": prompt}]}],
            "inferenceConfig": {"maxTokens": self.max_tokens, "temperature": 0.5},
        }

    @staticmethod
    def _reply_text(body: Any) -> str:
        """Joins the text blocks of the assistant message."""
        if not isinstance(body, dict):
            return ""
        message = (body.get("output") or {}).get("message") or {}
        texts = [
            block["text"] for block in message.get("content") or []
            if isinstance(block, dict) and block.get("text")
        ]
        return "".join(texts).strip()
