# lambdas/hello_agent/newrelic_service.py
from datetime import datetime
from typing import Any, Dict, List, Optional

import requests

from .aggregator import build_metrics_response
from .date_range import get_date_range
from .errors import FetchError, NoResultsError, QueryError
from .models import AppSettings, DateRange, MetricsResponse, ServiceRow, settings as default_settings

NRQL_TEMPLATE = (
    "SELECT 100 - (sum(`aws.apigateway.5XXError`) + sum(`aws.apigateway.5xx`)) * 100 / sum(`aws.apigateway.Count`) AS 'successPercentage', "
    "(sum(`aws.apigateway.5XXError`) + sum(`aws.apigateway.5xx`)) AS 'total5xx', "
    "sum(`aws.apigateway.Count`) AS 'totalRequests', "
    "average(`aws.apigateway.Latency`) AS 'latency', "
    "average(`aws.apigateway.IntegrationLatency`) AS 'integrationLatency', "
    "count(`aws.apigateway.Latency`) AS `latencyCount` "
    "FROM Metric "
    "WHERE aws.accountId IN ({aws_account_ids}) "
    "AND aws.apigateway.ApiName IS NOT NULL AND aws.apigateway.Method IS NOT NULL "
    "AND aws.apigateway.Resource IS NOT NULL AND aws.apigateway.Stage IS NOT NULL "
    "FACET aws.accountId as accountId, aws.apigateway.ApiName AS apiName, toDatetime(timestamp, 'yyyyMMdd') as date "
    "SINCE '{start}' UNTIL '{end}' LIMIT MAX"
)

GRAPHQL_TEMPLATE = """{{
  actor {{
    account(id: {account_id}) {{
      nrql(
        query: "{nrql}",
        timeout: {timeout}
      ) {{
        results
      }}
    }}
  }}
}}"""


class NewrelicService:
    """
    Queries New Relic NerdGraph for API Gateway metrics and rolls them up per
    service (BFF) over the configured lookback window.
    """
    def __init__(self, app_settings: Optional[AppSettings] = None):
        self.settings = app_settings or default_settings
        self.graphql_url = self.settings.newrelic_graphql_url
        self.account_id = self.settings.newrelic_account_id
        self.aws_account_ids = self.settings.newrelic_aws_account_ids
        self.known_service_ids = self.settings.known_service_ids
        self.days_ago = self.settings.newrelic_days_ago

    def build_query(self, date_range: DateRange) -> str:
        """Renders the GraphQL document wrapping the NRQL metrics query."""
        nrql = NRQL_TEMPLATE.format(
            aws_account_ids=self.aws_account_ids,
            start=date_range.start,
            end=date_range.end,
        )
        return GRAPHQL_TEMPLATE.format(
            account_id=self.account_id,
            nrql=nrql,
            timeout=self.settings.newrelic_query_timeout,
        )

    def fetch_rows(self, api_key: str, date_range: DateRange, timeout: Optional[float] = None) -> List[ServiceRow]:
        """
        Sends one query to New Relic and decodes the result rows.

        Raises:
            FetchError: On transport failures, non-2xx answers or a non-JSON body.
            QueryError: If the response carries GraphQL errors.
            NoResultsError: If the query produced no rows.
            MalformedRowError: If a row does not have the expected facet shape.
        """
        if timeout is None:
            timeout = self.settings.newrelic_request_timeout

        try:
            response = requests.post(
                self.graphql_url,
                headers={
                    'Content-Type': 'application/json',
                    'API-Key': api_key,
                },
                json={'query': self.build_query(date_range)},
                timeout=timeout,
            )
        except requests.exceptions.RequestException as e:
            print(f"❌ Could not reach New Relic: {e}")
            raise FetchError(None, str(e)) from e

        if not response.ok:
            print(f"API Error Response: {response.text}")
            raise FetchError(response.status_code, response.text)

        try:
            body: Dict[str, Any] = response.json()
        except ValueError as e:
            raise FetchError(response.status_code, response.text) from e
        if not isinstance(body, dict):
            raise FetchError(response.status_code, response.text)

        # an empty errors list still means the query was rejected
        if body.get('errors') is not None:
            print(f"GraphQL Errors: {body['errors']}")
            raise QueryError(body['errors'])

        results = (
            ((((body.get('data') or {}).get('actor') or {}).get('account') or {}).get('nrql') or {})
            .get('results')
        )
        if not results:
            print("No results found for the query window.")
            raise NoResultsError(f"No results found between {date_range.start} and {date_range.end}")

        print(f"Total results: {len(results)}")
        return [ServiceRow.from_result(result) for result in results]

    def get_metrics(self, api_key: str, timeout: Optional[float] = None, now: Optional[datetime] = None) -> MetricsResponse:
        """
        Fetches the last `days_ago` days of metrics and aggregates them per service.
        """
        print("Starting New Relic query...")
        date_range = get_date_range(self.days_ago, now=now)
        print(f"Query window: {date_range.start} -> {date_range.end}")

        rows = self.fetch_rows(api_key, date_range, timeout=timeout)
        return build_metrics_response(rows, self.known_service_ids, now=now)
