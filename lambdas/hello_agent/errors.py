# lambdas/hello_agent/errors.py
import json
from typing import Any, Optional


class NewrelicError(Exception):
    """Base class for failures while fetching or decoding New Relic metrics."""
    pass


class FetchError(NewrelicError):
    """The GraphQL endpoint could not be reached or answered with a non-2xx status."""

    def __init__(self, status: Optional[int], body: str):
        self.status = status
        self.body = body
        super().__init__(f"New Relic API error: {status} - {body}")


class QueryError(NewrelicError):
    """The request went through but New Relic rejected the query."""

    def __init__(self, errors: Any):
        self.errors = errors
        super().__init__(f"GraphQL errors: {json.dumps(errors, default=str)}")


class NoResultsError(NewrelicError):
    """The query succeeded but returned no result rows."""


class MalformedRowError(NewrelicError, ValueError):
    """A result row lacks the accountId, apiName and date facets."""


class SecretNotFoundError(KeyError):
    """The secret, or the requested field in it, does not exist."""


class GenerationError(RuntimeError):
    """The Bedrock model call failed or returned no text."""
