"""
Reference data (products and parties) used to fill and print orders.

Loaded either from CSV files in data/ or from a reference API:
  GET <base>/api/products   -> [{id, name, cost | defaultCost | unitCost, ...}]
  GET <base>/api/suppliers  -> [{id, name, ...}]
  GET <base>/api/customers  -> [{id, name, ...}]

Lookups are by id, compared as text so that a form value of "2" resolves the
product whose id is 2.
"""
import csv
import json
import logging
import urllib.error
import urllib.request
from pathlib import Path
from typing import Any, Iterable, Optional, Union

from models.reference import Party, Product

from .errors import TransportError
from .pricing import to_number

logger = logging.getLogger(__name__)

_COST_KEYS = ("unit_cost", "unitCost", "cost", "defaultCost")


def _id_key(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def parse_id(value: Any) -> Union[int, str]:
    """Numeric ids become ints, everything else stays text."""
    text = str(value).strip()
    return int(text) if text.isdigit() else text


def _load_dicts(path: Path) -> list[dict]:
    """Load a CSV file as a list of dicts (empty if the file does not exist)."""
    if not path.exists():
        logger.warning("CSV file not found: %s", path)
        return []
    try:
        with open(path, newline="", encoding="utf-8") as f:
            return list(csv.DictReader(f))
    except (OSError, csv.Error) as e:
        logger.error("Failed to load CSV %s: %s", path, e)
        return []


def _product_from_row(row: dict) -> Optional[Product]:
    if not row.get("id") or not row.get("name"):
        logger.warning("Skipping product row without id/name: %s", row)
        return None
    cost = next((row[k] for k in _COST_KEYS if row.get(k) not in (None, "")), 0)
    return Product(id=parse_id(row["id"]), name=str(row["name"]).strip(), unit_cost=to_number(cost))


def _party_from_row(row: dict) -> Optional[Party]:
    if not row.get("id") or not row.get("name"):
        logger.warning("Skipping party row without id/name: %s", row)
        return None
    return Party(
        id=parse_id(row["id"]),
        name=str(row["name"]).strip(),
        email=row.get("email") or None,
        phone=row.get("phone") or None,
    )


class ReferenceData:
    """Products plus the suppliers and customers orders may be placed with."""

    def __init__(
        self,
        products: Iterable[Product] = (),
        suppliers: Iterable[Party] = (),
        customers: Iterable[Party] = (),
    ) -> None:
        self.products = list(products)
        self.suppliers = list(suppliers)
        self.customers = list(customers)
        self._products_by_id = {_id_key(p.id): p for p in self.products}

    def product(self, product_id: Any) -> Optional[Product]:
        if product_id is None:
            return None
        return self._products_by_id.get(_id_key(product_id))

    def parties(self, direction: str) -> list[Party]:
        return self.customers if direction == "sale" else self.suppliers

    def party(self, direction: str, party_id: Any) -> Optional[Party]:
        if party_id is None:
            return None
        key = _id_key(party_id)
        return next((p for p in self.parties(direction) if _id_key(p.id) == key), None)

    # ------------------------------------------------------------------
    # Loaders
    # ------------------------------------------------------------------

    @classmethod
    def from_rows(
        cls,
        products: Iterable[dict],
        suppliers: Iterable[dict] = (),
        customers: Iterable[dict] = (),
    ) -> "ReferenceData":
        return cls(
            products=[p for p in map(_product_from_row, products) if p],
            suppliers=[s for s in map(_party_from_row, suppliers) if s],
            customers=[c for c in map(_party_from_row, customers) if c],
        )

    @classmethod
    def from_csv(
        cls,
        products_csv: Path,
        suppliers_csv: Path,
        customers_csv: Path,
    ) -> "ReferenceData":
        data = cls.from_rows(
            _load_dicts(Path(products_csv)),
            _load_dicts(Path(suppliers_csv)),
            _load_dicts(Path(customers_csv)),
        )
        logger.info(
            "Loaded reference data: %d products, %d suppliers, %d customers",
            len(data.products), len(data.suppliers), len(data.customers),
        )
        return data

    @classmethod
    def from_api(cls, base_url: str, timeout: float = 30) -> "ReferenceData":
        base = base_url.rstrip("/")
        return cls.from_rows(
            _fetch_list(f"{base}/api/products", timeout),
            _fetch_list(f"{base}/api/suppliers", timeout),
            _fetch_list(f"{base}/api/customers", timeout),
        )


def _fetch_list(url: str, timeout: float) -> list[dict]:
    req = urllib.request.Request(url, method="GET")
    req.add_header("Accept", "application/json")
    try:
        with urllib.request.urlopen(req, timeout=timeout) as response:
            body = response.read().decode("utf-8", errors="replace")
    except urllib.error.HTTPError as e:
        logger.error("GET %s failed: HTTP %d", url, e.code)
        raise TransportError(f"GET {url} failed: HTTP {e.code}", status_code=e.code) from e
    except (urllib.error.URLError, OSError) as e:
        logger.error("GET %s failed: %s", url, e)
        raise TransportError(f"GET {url} failed: {e}") from e
    try:
        rows = json.loads(body)
    except json.JSONDecodeError as e:
        raise TransportError(f"GET {url} returned invalid JSON") from e
    if not isinstance(rows, list):
        raise TransportError(f"GET {url} did not return a list")
    return [r for r in rows if isinstance(r, dict)]


def load_reference_data(config: Any) -> ReferenceData:
    """Reference API when configured, CSV files otherwise."""
    if config.reference_api_url:
        return ReferenceData.from_api(config.reference_api_url, config.request_timeout_seconds)
    return ReferenceData.from_csv(config.products_csv, config.suppliers_csv, config.customers_csv)
