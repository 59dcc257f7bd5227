# tests/test_app.py
import json
from unittest.mock import MagicMock, patch

from lambdas.hello_agent.app import handler
from lambdas.hello_agent.errors import QueryError
from lambdas.hello_agent.models import MetricsResponse, ServiceSummary

SAMPLE_API_EVENT = {"httpMethod": "GET", "path": "/hello", "queryStringParameters": None}


def sample_metrics() -> MetricsResponse:
    summary = ServiceSummary(
        account_id="381491980507",
        total_requests=300,
        total_5xx=2,
        number_of_days=2,
        query_dates=["20240101", "20240102"],
        total_success_percentage=198,
        success_percentage=99.0,
    )
    return MetricsResponse(
        total_results=2,
        data={"eor-people-hub-bff-test-api": summary},
        query_time="2024-01-03T12:00:00+00:00",
    )


@patch('lambdas.hello_agent.app.NewrelicService')
@patch('lambdas.hello_agent.app.get_secret_field')
@patch('lambdas.hello_agent.app.BedrockAgent')
def test_handler_merges_reply_and_metrics(mock_agent_cls, mock_get_secret, mock_service_cls):
    """
    Tests that the handler returns the model reply next to the aggregated metrics.
    """
    # Arrange
    mock_agent_cls.return_value.generate_text.return_value = "Static types help."
    mock_get_secret.return_value = "NRAK-123"
    mock_service = MagicMock()
    mock_service.get_metrics.return_value = sample_metrics()
    mock_service_cls.return_value = mock_service

    # Act
    result = handler(SAMPLE_API_EVENT, None)

    # Assert
    assert result["statusCode"] == 200
    assert result["headers"]["Content-Type"] == "application/json"
    assert "Access-Control-Allow-Origin" in result["headers"]
    body = json.loads(result["body"])
    assert body["message"] == "Static types help."
    assert body["metrics"]["totalResults"] == 2
    assert body["metrics"]["queryTime"] == "2024-01-03T12:00:00+00:00"
    assert body["metrics"]["data"]["eor-people-hub-bff-test-api"]["successPercentage"] == 99.0
    mock_service.get_metrics.assert_called_once_with("NRAK-123")


@patch('lambdas.hello_agent.app.NewrelicService')
@patch('lambdas.hello_agent.app.get_secret_field')
@patch('lambdas.hello_agent.app.BedrockAgent')
def test_metrics_failure_fails_the_whole_request(mock_agent_cls, mock_get_secret, mock_service_cls):
    mock_agent_cls.return_value.generate_text.return_value = "Static types help."
    mock_get_secret.return_value = "NRAK-123"
    mock_service_cls.return_value.get_metrics.side_effect = QueryError([{"message": "NRQL Syntax Error"}])

    result = handler(SAMPLE_API_EVENT, None)

    assert result["statusCode"] == 500
    body = json.loads(result["body"])
    assert body["message"] == "Error occurred in hello-agent"
    assert body["errorType"] == "QueryError"
    assert "NRQL Syntax Error" in body["error"]
    assert "metrics" not in body
    assert "timestamp" in body


@patch('lambdas.hello_agent.app.NewrelicService')
@patch('lambdas.hello_agent.app.get_secret_field')
@patch('lambdas.hello_agent.app.BedrockAgent')
def test_generation_failure_skips_metrics(mock_agent_cls, mock_get_secret, mock_service_cls):
    mock_agent_cls.return_value.generate_text.side_effect = RuntimeError("model unavailable")

    result = handler(SAMPLE_API_EVENT, None)

    assert result["statusCode"] == 500
    assert json.loads(result["body"])["errorType"] == "RuntimeError"
    mock_get_secret.assert_not_called()
    mock_service_cls.assert_not_called()
