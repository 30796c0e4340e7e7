"""
Pytest configuration and shared fixtures for the Order Desk test suite.
"""
import os
import shutil
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Generator

import pytest

PROJECT_ROOT = Path(__file__).parent.parent
os.chdir(PROJECT_ROOT)

FIXED_NOW = datetime(2025, 10, 19, 14, 32, 5)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for test files."""
    tmp_path = tempfile.mkdtemp(prefix="orderdesk_test_")
    yield Path(tmp_path)
    shutil.rmtree(tmp_path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path, monkeypatch) -> "Config":
    """Provide a local-mode configuration with isolated directories and no latency."""
    from config import Config

    monkeypatch.delenv("ORDERS_API_URL", raising=False)
    monkeypatch.delenv("REFERENCE_API_URL", raising=False)
    monkeypatch.setenv("CONFIG_DIR", str(temp_dir / "config"))

    config = Config()
    config.api_base_url = None
    config.reference_api_url = None
    config.storage_path = temp_dir / "output" / "orders.db"
    config.output_dir = temp_dir / "output" / "documents"
    config.sales_latency_seconds = 0
    config.purchase_latency_seconds = 0
    config.products_csv = temp_dir / "data" / "products.csv"
    config.suppliers_csv = temp_dir / "data" / "suppliers.csv"
    config.customers_csv = temp_dir / "data" / "customers.csv"
    config.products_csv.parent.mkdir(parents=True, exist_ok=True)
    return config


@pytest.fixture
def sample_products_csv(test_config) -> Path:
    """Create a sample products CSV file."""
    test_config.products_csv.write_text(
        "id,name,unit_cost\n"
        "1,Milk Vita Butter 100gm,150\n"
        "2,Farm Fresh Milk Powder 1L,910\n"
        "3,ACI Pure Chinigura Rice 1kg,310\n"
        "4,Mojo 1L,60\n",
        encoding="utf-8",
    )
    test_config.suppliers_csv.write_text(
        "id,name,email,phone\n"
        "1,Acme Traders,,\n"
        "2,Global Mart Ltd,orders@globalmart.example,\n",
        encoding="utf-8",
    )
    test_config.customers_csv.write_text(
        "id,name,email,phone\n"
        "7,Rahman Grocery,,\n",
        encoding="utf-8",
    )
    return test_config.products_csv


@pytest.fixture
def reference():
    """Reference data matching the sample catalogue."""
    from models.reference import Party, Product
    from ordering.reference_data import ReferenceData

    return ReferenceData(
        products=[
            Product(id=1, name="Milk Vita Butter 100gm", unit_cost=150),
            Product(id=2, name="Farm Fresh Milk Powder 1L", unit_cost=910),
            Product(id=3, name="ACI Pure Chinigura Rice 1kg", unit_cost=310),
            Product(id=4, name="Mojo 1L", unit_cost=60),
        ],
        suppliers=[Party(id=1, name="Acme Traders"), Party(id=2, name="Global Mart Ltd")],
        customers=[Party(id=7, name="Rahman Grocery")],
    )


@pytest.fixture
def memory_storage():
    from ordering.storage import MemoryStorage
    return MemoryStorage()


@pytest.fixture
def local_gateway(memory_storage):
    """Purchase-direction local gateway over in-memory storage, no latency."""
    from ordering.gateway import LocalFallbackGateway
    return LocalFallbackGateway(memory_storage, "purchaseRecords", latency_seconds=0)


@pytest.fixture
def sample_header():
    """The worked example: shipping 50, discount 100, tax 5%."""
    from models.order import OrderHeader
    return OrderHeader(
        document_number="PO-251019-1432",
        order_date="2025-10-19",
        expected_date="2025-10-26",
        party_id=1,
        status="Pending",
        shipping_fee=50,
        discount=100,
        tax_rate_percent=5,
        notes="Deliver to back door",
    )


@pytest.fixture
def sample_items():
    from models.order import LineItem
    return [
        LineItem(product_id=1, unit_cost=150, quantity=2),
        LineItem(product_id=2, unit_cost=910, quantity=1),
    ]


@pytest.fixture
def sample_record(sample_header, sample_items):
    from ordering.assembler import assemble_submission
    return assemble_submission(sample_header, sample_items, "purchase")


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


# Configure pytest markers
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow tests")
