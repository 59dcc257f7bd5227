# tests/test_bedrock_agent.py
import io
import json
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from lambdas.hello_agent.bedrock_agent import BedrockAgent, load_prompt
from lambdas.hello_agent.errors import GenerationError


def bedrock_reply(body: dict) -> dict:
    return {"body": io.BytesIO(json.dumps(body).encode("utf-8"))}


def nova_reply(*texts: str) -> dict:
    return bedrock_reply({
        "output": {"message": {"role": "assistant", "content": [{"text": t} for t in texts]}},
        "stopReason": "end_turn",
    })


@pytest.fixture
def runtime() -> MagicMock:
    return MagicMock()


@pytest.fixture
def agent(runtime) -> BedrockAgent:
    return BedrockAgent(bedrock_runtime=runtime, model_id="amazon.nova-micro-v1:0")


def test_request_and_reply(agent, runtime):
    runtime.invoke_model.return_value = nova_reply("  Static types catch bugs early.  ")

    text = agent.generate_text("Why TypeScript?")

    assert text == "Static types catch bugs early."
    kwargs = runtime.invoke_model.call_args.kwargs
    assert kwargs["modelId"] == "amazon.nova-micro-v1:0"
    request_body = json.loads(kwargs["body"])
    assert request_body["messages"] == [{"role": "user", "content": [{"text": "Why TypeScript?"}]}]
    assert request_body["inferenceConfig"]["maxTokens"] == agent.max_tokens


def test_text_blocks_are_joined(agent, runtime):
    runtime.invoke_model.return_value = nova_reply("Tooling ", "and refactoring.")

    assert agent.generate_text("Why TypeScript?") == "Tooling and refactoring."


def test_client_error_raises_generation_error(agent, runtime):
    runtime.invoke_model.side_effect = ClientError(
        {"Error": {"Code": "ValidationException", "Message": "on-demand throughput isn't supported"}},
        "InvokeModel",
    )

    with pytest.raises(GenerationError):
        agent.generate_text("Why TypeScript?")


@pytest.mark.parametrize("body", [
    {"output": {"message": {"content": []}}},
    {"content": [{"type": "text", "text": "not a Nova reply"}]},
])
def test_reply_without_text_raises_generation_error(agent, runtime, body):
    runtime.invoke_model.return_value = bedrock_reply(body)

    with pytest.raises(GenerationError):
        agent.generate_text("Why TypeScript?")


def test_empty_prompt_is_rejected(agent, runtime):
    with pytest.raises(GenerationError):
        agent.generate_text("")
    runtime.invoke_model.assert_not_called()


def test_bundled_prompt_is_loaded():
    assert "TypeScript" in load_prompt()
