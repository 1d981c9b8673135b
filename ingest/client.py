"""
ingest/client.py

A minimal EIA API v2 client used by the pipeline to fetch EIA-930 Hourly
Electric Grid Monitor rows within a given UTC hour window.

Responsibilities
---------------
- Build the query parameters for the fuel-type, interchange and region
  data routes (hourly frequency, deterministic sort order).
- Page through results with offset pagination until a short page.
- Perform HTTP GET requests with a bounded timeout, a custom User-Agent,
  and simple exponential backoff retries for transient failures.

Environment Variables
---------------------
EIA_API_KEY
    API key for https://api.eia.gov. Required.
EIA_BASE_API
    Base API endpoint. Defaults to "https://api.eia.gov/v2".

Notes
-----
- Start and end bounds are both inclusive and are formatted as UTC hours
  ("YYYY-MM-DDTHH"), which is also the format of the `period` field.
- The API caps a page at 5000 rows; a full page means more may follow.
"""

from __future__ import annotations

import logging
import os
import time
from datetime import datetime, timezone

import requests
from dotenv import load_dotenv

# Load `.env` for local development so the API key need not be exported.
load_dotenv()

logger = logging.getLogger(__name__)

BASE_API = os.getenv("EIA_BASE_API", "https://api.eia.gov/v2")

FUEL_TYPE_DATA_ROUTE = "electricity/rto/fuel-type-data/data"
INTERCHANGE_DATA_ROUTE = "electricity/rto/interchange-data/data"
REGION_DATA_ROUTE = "electricity/rto/region-data/data"

# Region data types kept: demand, net generation, total interchange.
REGION_TYPES = ("D", "NG", "TI")

# HTTP client settings.
HTTP_TIMEOUT = 30  # seconds
USER_AGENT = "us-grid-emissions/0.1 (+https://github.com/)"
MAX_RETRIES = 5  # total attempts including the first try
MAX_ROWS = 5000  # upstream page size cap


class APIRequestError(Exception):
    """The EIA API could not be reached or reported an error."""


def get_api_key() -> str:
    """Return ``EIA_API_KEY`` from the environment.

    Raises:
        APIRequestError: If the variable is not set.
    """
    api_key = os.environ.get("EIA_API_KEY")
    if not api_key:
        raise APIRequestError("EIA_API_KEY environment variable is not set.")
    return api_key


def format_timestamp(dt: datetime) -> str:
    """Format a datetime as an EIA hourly period in UTC ("YYYY-MM-DDTHH")."""
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H")


def build_params(route: str, start: datetime, end: datetime) -> list[tuple[str, str]]:
    """Build the query parameters for one of the hourly data routes.

    The bracketed keys (``data[0]``, ``sort[0][column]`` ...) are the API's
    own notation, so parameters are returned as an ordered list of pairs
    rather than a dict.

    Args:
        route: One of the ``*_DATA_ROUTE`` constants.
        start: Inclusive first hour.
        end: Inclusive last hour.

    Returns:
        A list of (key, value) pairs without paging or credentials.
    """
    if route == FUEL_TYPE_DATA_ROUTE:
        sort_columns = ["period", "respondent"]
    elif route == INTERCHANGE_DATA_ROUTE:
        sort_columns = ["period", "fromba", "toba"]
    elif route == REGION_DATA_ROUTE:
        sort_columns = ["period", "respondent", "type"]
    else:
        raise ValueError(f"Unknown EIA route: {route}")

    params = [
        ("start", format_timestamp(start)),
        ("end", format_timestamp(end)),
        ("frequency", "hourly"),
        ("data[0]", "value"),
    ]
    for i, column in enumerate(sort_columns):
        params.append((f"sort[{i}][column]", column))
        params.append((f"sort[{i}][direction]", "asc"))

    if route == REGION_DATA_ROUTE:
        for i, region_type in enumerate(REGION_TYPES):
            params.append((f"facets[type][{i}]", region_type))

    return params


def fetch_page(route: str, params: list[tuple[str, str]], offset: int = 0) -> list[dict]:
    """Fetch one page of rows from ``route`` with retry.

    Args:
        route: API route below ``BASE_API``.
        params: Base query parameters from :func:`build_params`.
        offset: Row offset into the result set.

    Returns:
        The list of raw row dicts under ``response.data``.

    Raises:
        APIRequestError: If the API reports errors in the body, or if all
            retry attempts fail (chained from the last transport error).
    """
    url = f"{BASE_API}/{route}"
    query = params + [
        ("length", str(MAX_ROWS)),
        ("offset", str(offset)),
        ("api_key", get_api_key()),
    ]
    headers = {"User-Agent": USER_AGENT}

    for attempt in range(MAX_RETRIES):
        try:
            r = requests.get(url, params=query, headers=headers, timeout=HTTP_TIMEOUT)
            r.raise_for_status()
            body = r.json()
            break
        except (requests.RequestException, ValueError) as exc:
            if attempt == MAX_RETRIES - 1:
                raise APIRequestError(f"EIA API request failed: {exc}") from exc
            logger.info("EIA request to %s failed (%s), retrying", route, exc)
            # Exponential backoff: 1, 2, 4, 8... seconds between retries.
            time.sleep(2**attempt)

    response = body.get("response", {})
    if response.get("errors"):
        raise APIRequestError(f"Response errors: {'; '.join(response['errors'])}")
    return response.get("data", [])


def fetch_all(route: str, start: datetime, end: datetime) -> list[dict]:
    """Fetch every row of ``route`` for the inclusive hour window [start, end].

    Args:
        route: One of the ``*_DATA_ROUTE`` constants.
        start: Inclusive first hour.
        end: Inclusive last hour.

    Returns:
        All rows of the window, in the API's sort order.

    Raises:
        APIRequestError: If any page cannot be fetched.
    """
    params = build_params(route, start, end)
    offset = 0
    rows: list[dict] = []

    while True:
        page = fetch_page(route, params, offset=offset)
        rows.extend(page)
        offset += len(page)
        # A short page means we have reached the end of the window.
        if len(page) < MAX_ROWS:
            break

    logger.info("Fetched %d rows from %s", len(rows), route)
    return rows


def fetch_fuel_type_data(start: datetime, end: datetime) -> list[dict]:
    """Fetch hourly net generation by BA and energy source.

    Args:
        start: Inclusive first hour.
        end: Inclusive last hour.

    Returns:
        Raw fuel-type rows (`period`, `respondent`, `fueltype`, `value`, ...).

    Raises:
        APIRequestError: If a page cannot be fetched.
    """
    return fetch_all(FUEL_TYPE_DATA_ROUTE, start, end)


def fetch_interchange_data(start: datetime, end: datetime) -> list[dict]:
    """Fetch hourly interchange between neighbouring balancing authorities.

    Args:
        start: Inclusive first hour.
        end: Inclusive last hour.

    Returns:
        Raw interchange rows (`period`, `fromba`, `toba`, `value`, ...);
        a negative value means `fromba` received energy from `toba`.

    Raises:
        APIRequestError: If a page cannot be fetched.
    """
    return fetch_all(INTERCHANGE_DATA_ROUTE, start, end)


def fetch_region_data(start: datetime, end: datetime) -> list[dict]:
    """Fetch hourly demand, net generation and total interchange by BA.

    Args:
        start: Inclusive first hour.
        end: Inclusive last hour.

    Returns:
        Raw region rows restricted to the types in `REGION_TYPES`.

    Raises:
        APIRequestError: If a page cannot be fetched.
    """
    return fetch_all(REGION_DATA_ROUTE, start, end)
