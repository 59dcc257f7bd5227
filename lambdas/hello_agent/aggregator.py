# lambdas/hello_agent/aggregator.py
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from .models import MetricsResponse, ServiceRow, ServiceSummary


def filter_known_service_rows(rows: Iterable[ServiceRow], known_service_ids: Iterable[str]) -> List[ServiceRow]:
    """
    Keeps only the rows where any facet value is one of the known service ids.
    """
    known = set(known_service_ids)
    return [row for row in rows if any(value in known for value in row.facet)]


def _get_or_create_summary(summaries: Dict[str, ServiceSummary], row: ServiceRow) -> ServiceSummary:
    summary = summaries.get(row.service_id)
    if summary is None:
        # accountId comes from the first row seen for the service
        summary = ServiceSummary(account_id=row.account_id)
        summaries[row.service_id] = summary
    return summary


def group_service_rows(rows: Iterable[ServiceRow]) -> Dict[str, ServiceSummary]:
    """
    Folds rows into one summary per service id, in input order, then averages
    the success percentage over the number of folded rows.

    Rows for the same service and date are all folded in; numberOfDays counts
    rows, not distinct dates.
    """
    summaries: Dict[str, ServiceSummary] = {}

    for row in rows:
        if not row.service_id:
            print(f"⚠️ No service id found in facet: {row.facet}. Skipping.")
            continue

        summary = _get_or_create_summary(summaries, row)
        summary.fold(row)

    for summary in summaries.values():
        summary.finalize()

    return summaries


def aggregate(rows: Iterable[ServiceRow], known_service_ids: Iterable[str]) -> Dict[str, ServiceSummary]:
    """Filters rows to the known services and groups them per service."""
    return group_service_rows(filter_known_service_rows(rows, known_service_ids))


def build_metrics_response(
    rows: Iterable[ServiceRow],
    known_service_ids: Iterable[str],
    now: Optional[datetime] = None,
) -> MetricsResponse:
    """
    Runs the full filter/group/average pass and wraps it in a MetricsResponse.
    totalResults counts every row that passed the filter, including rows later
    skipped for a missing service id.
    """
    known = set(known_service_ids)
    filtered_rows = filter_known_service_rows(rows, known)

    print(f"Filtered results: {len(filtered_rows)}")
    print(f"Services found: {sorted({v for r in filtered_rows for v in r.facet if v in known})}")

    data = group_service_rows(filtered_rows)
    if now is None:
        # queryTime defaults to the moment the response is built
        return MetricsResponse(total_results=len(filtered_rows), data=data)
    return MetricsResponse(total_results=len(filtered_rows), data=data, query_time=now.isoformat())
