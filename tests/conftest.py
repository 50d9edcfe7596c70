"""Pytest configuration and fixtures for filter engine tests."""

import sys
from pathlib import Path

import duckdb
import pandas as pd
import pytest

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from filter_engine.models import FilterCatalog, FilterValue  # noqa: E402
from filter_engine.state import FilterState  # noqa: E402

NULL_OPTION = FilterValue(id="none", label="None")

CATEGORIES = [
    {
        "id": "status",
        "label": "Status",
        "variant": "single-select",
        "values": [
            {"id": "active", "label": "Active"},
            {"id": "inactive", "label": "Inactive"},
            {"id": "pending", "label": "Pending"},
        ],
    },
    {
        "id": "tags",
        "label": "Tags",
        "variant": "multi-select",
        "values": [
            {"id": "urgent", "label": "Urgent"},
            {"id": "billing", "label": "Billing"},
            {"id": "review", "label": "Needs review"},
            {"id": "archived", "label": "Archived"},
        ],
    },
    {
        "id": "age",
        "label": "Patient age",
        "variant": "range",
        "min": 0,
        "max": 120,
        "step": 1,
    },
    {
        "id": "payerFamily",
        "label": "Payer family",
        "variant": "single-select",
        "values": [
            {"id": "United Healthcare", "label": "United Healthcare"},
            {"id": "Aetna", "label": "Aetna"},
        ],
    },
    {
        "id": "payer",
        "label": "Payer",
        "variant": "multi-select",
        "values": [
            {"id": "uhc-ppo", "label": "United Healthcare - PPO"},
            {"id": "uhc-hmo", "label": "United Healthcare - HMO"},
            {"id": "aetna-commercial", "label": "Aetna - Commercial"},
        ],
        "dependency": {"depends_on": "payerFamily", "match_mode": "substring"},
    },
]


@pytest.fixture
def catalog():
    """Catalog of every variant, with a null option."""
    return FilterCatalog.from_categories(CATEGORIES, include_null=NULL_OPTION)


@pytest.fixture
def catalog_without_null():
    """Same catalog without the null option."""
    return FilterCatalog.from_categories(CATEGORIES)


@pytest.fixture
def empty_state():
    return FilterState()


def build_state(catalog, *selections):
    """Build a state from (instance_id, category_id, value) triples."""
    state = FilterState()
    for instance_id, category_id, value in selections:
        state = state.add_instance(catalog, category_id, instance_id=instance_id).state
        if value is not None:
            state = state.update_instance_value(catalog, instance_id, value).state
    return state


@pytest.fixture
def make_state(catalog):
    """Factory building states against the default catalog."""
    def _make(*selections):
        return build_state(catalog, *selections)
    return _make


@pytest.fixture
def sample_records():
    """Sample records covering scalar, list and empty fields."""
    return [
        {
            "label": "Claim 1001",
            "value": "c-1001",
            "category": "claims",
            "status": "active",
            "tags": ["urgent", "billing"],
            "age": 34,
            "payerFamily": "United Healthcare",
            "payer": "uhc-ppo",
        },
        {
            "label": "Claim 1002",
            "value": "c-1002",
            "category": "claims",
            "status": "inactive",
            "tags": ["review"],
            "age": 67,
            "payerFamily": "Aetna",
            "payer": "aetna-commercial",
        },
        {
            "label": "Referral 2001",
            "value": "r-2001",
            "category": "referrals",
            "status": None,
            "tags": [],
            "age": 12,
            "payerFamily": "United Healthcare",
            "payer": "uhc-hmo",
        },
        {
            "label": "Referral 2002",
            "value": "r-2002",
            "category": "referrals",
            "status": "none",
            "tags": "billing",
            "age": "unknown",
            "payer": "",
        },
    ]


@pytest.fixture
def sample_dataframe():
    """Scalar-only records as a DataFrame."""
    return pd.DataFrame({
        "label": ["Claim 1001", "Claim 1002", "Referral 2001", "Referral 2002"],
        "category": ["claims", "claims", "referrals", "referrals"],
        "status": ["active", "inactive", None, "none"],
        "age": [34.0, 67.0, 12.0, float("nan")],
    })


@pytest.fixture
def test_db():
    """Create in-memory DuckDB for testing."""
    conn = duckdb.connect(":memory:")

    conn.execute("""
        CREATE TABLE claims (
            label VARCHAR,
            category VARCHAR,
            status VARCHAR,
            age INTEGER,
            payer VARCHAR
        )
    """)

    conn.execute("""
        INSERT INTO claims VALUES
        ('Claim 1001', 'claims', 'active', 34, 'uhc-ppo'),
        ('Claim 1002', 'claims', 'inactive', 67, 'aetna-commercial'),
        ('Referral 2001', 'referrals', NULL, 12, 'uhc-hmo'),
        ('Referral 2002', 'referrals', 'none', NULL, ''),
        ('Referral 2003', 'referrals', '', 45, 'uhc-ppo')
    """)

    yield conn
    conn.close()
