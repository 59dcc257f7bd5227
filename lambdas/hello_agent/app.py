# lambdas/hello_agent/app.py
import json
from datetime import datetime, timezone

from .bedrock_agent import BedrockAgent, load_prompt
from .newrelic_service import NewrelicService
from .models import settings
from .secret_store import get_secret_field


def build_response(status_code: int, body: dict) -> dict:
    """Helper function to build the API Gateway proxy response."""
    return {
        'statusCode': status_code,
        'headers': {
            'Content-Type': 'application/json',
            'Access-Control-Allow-Origin': settings.allowed_origin
        },
        'body': json.dumps(body, default=str)
    }


def handler(event: dict, context: object) -> dict:
    """
    API Gateway handler that asks a Bedrock model for a reply and attaches the
    last few days of API Gateway success metrics from New Relic.
    """
    print(f"Received event: {json.dumps(event, default=str)}")

    try:
        # --- 1. Generate the agent reply ---
        agent = BedrockAgent()
        message = agent.generate_text(load_prompt())

        # --- 2. Fetch and aggregate the metrics ---
        api_key = get_secret_field(settings.newrelic_secret_name, settings.newrelic_secret_key)
        metrics = NewrelicService().get_metrics(api_key)
        print(f"✅ Aggregated {metrics.total_results} rows into {len(metrics.data)} services.")

        # --- 3. Build the Success Response ---
        return build_response(200, {
            'message': message,
            'metrics': metrics.to_dict(),
        })

    except Exception as e:
        print(f"❌ Error in hello-agent: {type(e).__name__}: {e}")
        return build_response(500, {
            'message': 'Error occurred in hello-agent',
            'error': str(e),
            'errorType': type(e).__name__,
            'timestamp': datetime.now(timezone.utc).isoformat(),
        })
