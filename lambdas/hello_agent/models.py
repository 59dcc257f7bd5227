# lambdas/hello_agent/models.py
"""
Pydantic models and settings for the hello-agent Lambda.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Set, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import MalformedRowError


class AppSettings(BaseSettings):
    """
    It would manages env var using Pydantic BaseSettings
    it would automatically read .env file
    """
    model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8', extra='ignore')

    aws_region: str = Field("eu-west-1", alias='AWS_REGION')
    allowed_origin: str = Field("*", alias='ALLOWED_ORIGIN')

    # Bedrock
    bedrock_region: str = Field("us-east-1", alias='BEDROCK_REGION')
    bedrock_model_id: str = Field("amazon.nova-micro-v1:0", alias='BEDROCK_MODEL_ID')
    bedrock_max_tokens: int = Field(1000, alias='BEDROCK_MAX_TOKENS')

    # New Relic
    newrelic_secret_name: str = Field("newrelic", alias='NEWRELIC_SECRET_NAME')
    newrelic_secret_key: str = Field("apiKey", alias='NEWRELIC_SECRET_KEY')
    newrelic_graphql_url: str = Field("https://api.newrelic.com/graphql", alias='NEWRELIC_GRAPHQL_URL')
    newrelic_account_id: str = Field("1747307", alias='NEWRELIC_ACCOUNT_ID')
    # test, demo, prod
    newrelic_aws_account_ids: str = Field(
        "381491980507, 010526243585, 905418104963", alias='NEWRELIC_AWS_ACCOUNT_IDS'
    )
    newrelic_service_ids: str = Field(
        "eor-people-hub-bff-test-api,eor-people-hub-bff-demo-api,eor-people-hub-bff-prod-api",
        alias='NEWRELIC_SERVICE_IDS',
    )
    newrelic_days_ago: int = Field(3, alias='NEWRELIC_DAYS_AGO')
    newrelic_query_timeout: int = Field(200, alias='NEWRELIC_QUERY_TIMEOUT')
    newrelic_request_timeout: float = Field(30.0, alias='NEWRELIC_REQUEST_TIMEOUT')

    @property
    def known_service_ids(self) -> Set[str]:
        return {s.strip() for s in self.newrelic_service_ids.split(",") if s.strip()}


# Create a single, shared instance to be imported by other modules.
settings = AppSettings()


@dataclass
class DateRange:
    """UTC query window formatted for NRQL SINCE/UNTIL clauses."""
    start: str
    end: str


class ServiceRow(BaseModel):
    """
    One NRQL result row, faceted by (accountId, apiName, date).
    """
    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    facet: List[Optional[str]]
    total_requests: Union[int, float] = Field(0, alias='totalRequests')
    total_5xx: Union[int, float] = Field(0, alias='total5xx')
    success_percentage: Union[int, float] = Field(0, alias='successPercentage')
    latency: Union[int, float] = 0
    integration_latency: Union[int, float] = Field(0, alias='integrationLatency')
    latency_count: Union[int, float] = Field(0, alias='latencyCount')

    @field_validator(
        'total_requests', 'total_5xx', 'success_percentage',
        'latency', 'integration_latency', 'latency_count',
        mode='before',
    )
    @classmethod
    def _null_as_zero(cls, value: Any) -> Any:
        # NRQL returns null for aggregates over an empty set
        return 0 if value is None else value

    @field_validator('facet', mode='before')
    @classmethod
    def _facet_as_strings(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            return [None if v is None else str(v) for v in value]
        return value

    @property
    def account_id(self) -> Optional[str]:
        return self.facet[0]

    @property
    def service_id(self) -> Optional[str]:
        return self.facet[1]

    @property
    def date(self) -> Optional[str]:
        return self.facet[2]

    @classmethod
    def from_result(cls, result: Any) -> "ServiceRow":
        """
        Decodes a raw result object and checks the facet shape.

        Raises:
            MalformedRowError: If the row is not an object or has fewer than
                three facet values.
        """
        if not isinstance(result, dict):
            raise MalformedRowError(f"Result row is not an object: {result!r}")
        try:
            row = cls.model_validate(result)
        except ValidationError as e:
            raise MalformedRowError(f"Could not decode result row {result!r}: {e}") from e
        if len(row.facet) < 3:
            raise MalformedRowError(
                f"Expected at least 3 facet values (accountId, apiName, date), got {row.facet!r}"
            )
        return row


class ServiceSummary(BaseModel):
    """
    Rolling statistics for one service, built up one row at a time.
    """
    model_config = ConfigDict(populate_by_name=True)

    account_id: Optional[str] = Field(None, alias='accountId')
    total_requests: Union[int, float] = Field(0, alias='totalRequests')
    total_5xx: Union[int, float] = Field(0, alias='total5xx')
    number_of_days: int = Field(0, alias='numberOfDays')
    query_dates: List[Optional[str]] = Field(default_factory=list, alias='queryDates')
    total_success_percentage: Union[int, float] = Field(0, alias='totalSuccessPercentage')
    success_percentage: Optional[float] = Field(None, alias='successPercentage')

    def fold(self, row: ServiceRow) -> None:
        self.total_requests += row.total_requests
        self.total_5xx += row.total_5xx
        self.total_success_percentage += row.success_percentage
        self.number_of_days += 1
        self.query_dates.append(row.date)

    def finalize(self) -> None:
        # number_of_days >= 1: a summary only exists once a row was folded in
        self.success_percentage = self.total_success_percentage / self.number_of_days


class MetricsResponse(BaseModel):
    """
    Represents the final metrics structure returned to the handler.
    """
    model_config = ConfigDict(populate_by_name=True)

    total_results: int = Field(..., alias='totalResults')
    data: Dict[str, ServiceSummary]
    # The default_factory ensures a new UTC timestamp is created for each instance.
    query_time: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(), alias='queryTime'
    )

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)
