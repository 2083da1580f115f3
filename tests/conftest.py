"""
Pytest configuration and shared fixtures.

Provides:
- anyio backend selection for ``@pytest.mark.anyio`` tests
- FastAPI TestClient
- Sample expressions used across compiler, renderer and codec tests
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]

# Add project root to path for imports
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Set test environment variables before importing the app
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("OBSERVABILITY_STRUCTURED_LOGS", "false")

import pytest  # noqa: E402 (import after path setup)
from fastapi.testclient import TestClient  # noqa: E402 (import after path setup)

from dmn_rules.expression.model import (  # noqa: E402
    CompositeExpression,
    Condition,
    Expression,
)
from dmn_rules.main import create_app  # noqa: E402


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def client() -> TestClient:
    return TestClient(create_app())


@pytest.fixture
def amount_and_status() -> Expression:
    """(amount > 100) AND (status == active)"""
    return CompositeExpression.all_of(
        Condition.greater_than("amount", "100"),
        Condition.equals("status", "active"),
    )


@pytest.fixture
def amount_or_vip() -> Expression:
    """(amount > 500) OR (customerType == vip)"""
    return CompositeExpression.any_of(
        Condition.greater_than("amount", "500"),
        Condition.equals("customerType", "vip"),
    )


@pytest.fixture
def driver_eligibility() -> Expression:
    """(age >= 60) AND (hasLicense == true)"""
    return CompositeExpression.all_of(
        Condition.greater_than_or_equal("age", "60"),
        Condition.equals("hasLicense", "true"),
    )
