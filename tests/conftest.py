import sys
from pathlib import Path

import pytest

# Insert the repo root (parent of the tests/ directory) at the front of sys.path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture
def countries():
    # Trimmed-down records in the shape disease.sh returns
    return [
        {
            "country": "Italy",
            "countryInfo": {"iso2": "IT", "lat": 42.8333, "long": 12.8333},
            "updated": 1600000000000,
            "cases": 12345,
            "deaths": 678,
            "recovered": 9000,
        },
        {
            "country": "Vatican",
            "countryInfo": {"iso2": "VA", "lat": 41.9, "long": 12.45},
            "updated": 1600000000000,
            "cases": 27,
            "deaths": 0,
            "recovered": 15,
        },
    ]


@pytest.fixture
def global_stats():
    return {
        "tests": 1000000,
        "testsPerOneMillion": 128.3,
        "cases": 50000,
        "casesPerOneMillion": 6.4,
        "deaths": 1200,
        "deathsPerOneMillion": 0.15,
        "active": 20000,
        "critical": 300,
        "recovered": 28800,
    }
