"""
Global counters panel

Fetch the worldwide totals once and render them as a small block of HTML
that sits under the map. If the fetch fails we show the error message and
every counter stays at "-".
"""
from __future__ import annotations

from html import escape
from typing import Iterable, Optional, Tuple

from scripts.disease_api import StatsFetchError, fetch_global_stats

PLACEHOLDER = "-"

# (field, label, css class) in display order
STAT_FIELDS = [
    ("tests", "Total Tests", "tracker-stat-primary"),
    ("testsPerOneMillion", "Per 1 Million", "tracker-stat-secondary"),
    ("cases", "Total Cases", "tracker-stat-primary"),
    ("casesPerOneMillion", "Per 1 Million", "tracker-stat-secondary"),
    ("deaths", "Total Deaths", "tracker-stat-primary"),
    ("deathsPerOneMillion", "Per 1 Million", "tracker-stat-secondary"),
    ("active", "Active", "tracker-stat-primary"),
    ("critical", "Critical", "tracker-stat-primary"),
    ("recovered", "Recovered", "tracker-stat-primary"),
]


def load_stats(fetch=fetch_global_stats) -> Tuple[Optional[dict], str]:
    """
    One best-effort attempt at the global counters.

    Returns:
        tuple[dict | None, str]: (stats, "") on success, (None, message) on failure.
    """
    try:
        stats = fetch()
    except StatsFetchError as e:
        print(f"[ERROR] Failed to fetch global stats: {e}")
        return None, str(e)
    print(f"[INFO] Loaded {len(stats)} global counters")
    return stats, ""


def stat_value(stats: Optional[dict], key: str) -> str:
    if not stats or stats.get(key) is None:
        return PLACEHOLDER
    return str(stats[key])


def render_stats_panel(stats: Optional[dict], error: str = "", notices: Iterable[str] = ()) -> str:
    """
    HTML for the counters block. Missing counters show as "-".

    Args:
        stats: counter mapping from load_stats (or None).
        error: stats error message; shown in red when set.
        notices: other non-fatal messages (e.g. country data unavailable).
    """
    parts = ['<div class="container container-content text-center home-start">']
    if error:
        parts.append(f'<p class="text-danger">{escape(error)}</p>')
    for notice in notices:
        parts.append(f'<p class="text-muted">{escape(notice)}</p>')

    parts.append('<div class="tracker-stats">')
    for key, label, css in STAT_FIELDS:
        parts.append(
            f'<p class="{css}">{escape(stat_value(stats, key))}<strong> {label}</strong></p>'
        )
    parts.append("</div>")
    parts.append("</div>")
    return "\n".join(parts)
