"""
Central configuration for the order desk.

All endpoints, paths, latencies and document settings are defined here.
Override via environment variables or by passing a Config instance directly.

Settings priority (highest wins):
  1. Environment variables
  2. config/order_settings.json  (admin-editable, persisted)
  3. Hardcoded defaults in this file
"""
import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

# Project root (directory containing this file)
PROJECT_ROOT = Path(__file__).parent

# Default data locations (relative to project root)
DEFAULT_PRODUCTS_CSV   = PROJECT_ROOT / "data" / "products.csv"
DEFAULT_SUPPLIERS_CSV  = PROJECT_ROOT / "data" / "suppliers.csv"
DEFAULT_CUSTOMERS_CSV  = PROJECT_ROOT / "data" / "customers.csv"
DEFAULT_OUTPUT_DIR     = PROJECT_ROOT / "output"
DEFAULT_STORAGE_PATH   = DEFAULT_OUTPUT_DIR / "orders.db"
DEFAULT_DOCUMENTS_DIR  = DEFAULT_OUTPUT_DIR / "documents"


def _optional_env(name: str) -> Optional[str]:
    value = os.getenv(name, "").strip()
    return value or None


@dataclass
class Config:
    # --- Order API ---
    # When set, orders are POSTed to <api_base_url>/sales or /purchases.
    # When unset, orders are kept in local storage instead (see storage_path).
    api_base_url: Optional[str] = field(
        default_factory=lambda: _optional_env("ORDERS_API_URL")
    )
    api_headers_json: Optional[str] = field(
        default_factory=lambda: _optional_env("ORDERS_API_HEADERS")
    )
    request_timeout_seconds: float = field(
        default_factory=lambda: float(os.getenv("REQUEST_TIMEOUT", "30"))
    )

    # --- Reference data ---
    # API serving /api/products, /api/suppliers, /api/customers; CSV files otherwise.
    reference_api_url: Optional[str] = field(
        default_factory=lambda: _optional_env("REFERENCE_API_URL")
    )
    products_csv:  Path = field(default_factory=lambda: DEFAULT_PRODUCTS_CSV)
    suppliers_csv: Path = field(default_factory=lambda: DEFAULT_SUPPLIERS_CSV)
    customers_csv: Path = field(default_factory=lambda: DEFAULT_CUSTOMERS_CSV)

    # --- Local fallback ---
    storage_path: Path = field(
        default_factory=lambda: Path(os.getenv("STORAGE_PATH", str(DEFAULT_STORAGE_PATH)))
    )
    sales_latency_seconds: float = field(
        default_factory=lambda: float(os.getenv("SALES_LATENCY", "0.4"))
    )
    purchase_latency_seconds: float = field(
        default_factory=lambda: float(os.getenv("PURCHASE_LATENCY", "0.5"))
    )

    # --- Order defaults ---
    default_tax_rate_percent: float = field(
        default_factory=lambda: float(os.getenv("DEFAULT_TAX_RATE", "5"))
    )

    # --- Documents ---
    currency_symbol: str = field(
        default_factory=lambda: os.getenv("CURRENCY_SYMBOL", "৳")
    )
    closing_note: str = "Thank you for your business!"
    output_dir: Path = field(
        default_factory=lambda: Path(os.getenv("OUTPUT_DIR", str(DEFAULT_DOCUMENTS_DIR)))
    )
    invoice_template: Optional[Path] = field(
        default_factory=lambda: (
            Path(os.environ["INVOICE_TEMPLATE"]) if os.getenv("INVOICE_TEMPLATE") else None
        )
    )

    def __post_init__(self) -> None:
        """Overlay runtime-tunable settings from order_settings.json if present."""
        config_dir = Path(os.getenv("CONFIG_DIR", str(PROJECT_ROOT / "config")))
        settings_file = config_dir / "order_settings.json"
        if not settings_file.exists():
            return
        _type_map: dict[str, type] = {
            "api_base_url":              str,
            "api_headers_json":          str,
            "request_timeout_seconds":   float,
            "reference_api_url":         str,
            "sales_latency_seconds":     float,
            "purchase_latency_seconds":  float,
            "default_tax_rate_percent":  float,
            "currency_symbol":           str,
            "closing_note":              str,
        }
        try:
            with open(settings_file, encoding="utf-8") as f:
                overrides = {k: v for k, v in json.load(f).items() if not k.startswith("_")}
            for key, val in overrides.items():
                if key in _type_map and hasattr(self, key):
                    setattr(self, key, _type_map[key](val) if val is not None else None)
        except Exception as exc:
            logger.warning("Failed to load order_settings.json: %s", exc)
