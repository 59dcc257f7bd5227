# hello-agent/run_live.py
import os
import json
import argparse
from dotenv import load_dotenv

# Load environment variables from a .env file for local testing
load_dotenv()

from lambdas.hello_agent.app import handler
from lambdas.hello_agent.models import settings
from lambdas.hello_agent.newrelic_service import NewrelicService
from lambdas.hello_agent.secret_store import get_secret_field


def run_metrics_only(days_ago: int | None = None):
    """Queries New Relic directly, skipping the Bedrock call."""
    api_key = os.environ.get("NEWRELIC_API_KEY")
    if not api_key:
        print("NEWRELIC_API_KEY not set. Reading the key from Secrets Manager...")
        api_key = get_secret_field(settings.newrelic_secret_name, settings.newrelic_secret_key)

    service = NewrelicService()
    if days_ago is not None:
        service.days_ago = days_ago

    metrics = service.get_metrics(api_key)
    print("\n--- Aggregated metrics: ---")
    print(json.dumps(metrics.to_dict(), indent=2))


def run_live():
    """Executes the hello_agent Lambda handler using your live AWS credentials."""
    print("--- Starting LIVE Run of hello_agent Lambda ---")

    # The handler ignores the request itself, a minimal API Gateway event is enough.
    mock_api_event = {"httpMethod": "GET", "path": "/hello", "queryStringParameters": None}

    print("\n--- Invoking Lambda handler (this will call AWS Bedrock, Secrets Manager and New Relic) ---")
    result = handler(mock_api_event, {})
    print("--- Lambda handler execution finished ---")

    print(f"\n--- Final JSON Output from Lambda (status {result['statusCode']}): ---")
    print(json.dumps(json.loads(result['body']), indent=2))


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run the hello_agent Lambda locally.")
    parser.add_argument("--metrics-only", action="store_true", help="Only query and aggregate New Relic metrics.")
    parser.add_argument("--days-ago", type=int, default=None, help="Override the lookback window in days.")
    args = parser.parse_args()

    if args.metrics_only:
        run_metrics_only(args.days_ago)
    else:
        run_live()
