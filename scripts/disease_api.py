"""
Thin client for the disease.sh COVID-19 API

Two endpoints, one GET each:
- /all        -> global aggregate counters (a JSON object)
- /countries  -> one record per country (a JSON array)

Failures are turned into StatsFetchError / CountryFetchError so callers can
decide what the user sees. We don't retry; one best-effort attempt per build.
"""
from __future__ import annotations

import requests

DISEASE_API_BASE = "https://disease.sh/v3/covid-19"
REQUEST_TIMEOUT = 30


class StatsFetchError(Exception):
    """Global counters could not be fetched."""


class CountryFetchError(Exception):
    """Per-country data could not be fetched."""


def _get_json(url, params=None, timeout=REQUEST_TIMEOUT):
    """
    Small wrapper around requests.get + JSON decode with basic error handling.
    """
    r = requests.get(url, params=params or {}, timeout=timeout)
    r.raise_for_status()
    return r.json()


def fetch_global_stats(api_base: str = DISEASE_API_BASE, timeout: float = REQUEST_TIMEOUT) -> dict:
    """
    Fetch the global counters (tests, cases, deaths, ...).

    Returns:
        dict: the counter mapping exactly as the API sent it.

    Raises:
        StatsFetchError: transport/HTTP error, bad JSON, or a non-object body.
    """
    url = f"{api_base.rstrip('/')}/all"
    try:
        data = _get_json(url, timeout=timeout)
    except (requests.RequestException, ValueError) as e:
        raise StatsFetchError(str(e)) from e

    if not isinstance(data, dict):
        raise StatsFetchError(f"Unexpected response from {url}")
    return data


def fetch_countries(api_base: str = DISEASE_API_BASE, timeout: float = REQUEST_TIMEOUT):
    """
    Fetch the per-country dataset.

    We hand back whatever JSON came over the wire. Shape checks (is it a
    non-empty list?) belong to the caller since an odd payload is not an
    HTTP failure.

    Raises:
        CountryFetchError: transport/HTTP error or bad JSON.
    """
    url = f"{api_base.rstrip('/')}/countries"
    try:
        return _get_json(url, timeout=timeout)
    except (requests.RequestException, ValueError) as e:
        raise CountryFetchError(str(e)) from e
