# storecart/services/product_client.py
from dataclasses import dataclass
from decimal import Decimal

import requests

from storecart.utils.retry import http_retry
from storecart.utils.settings import PRODUCT_SERVICE_URL, HTTP_TIMEOUT_SECONDS
from storecart.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProductOffering:
    id: int
    store_id: int
    name: str
    price: Decimal
    is_active: bool


class ProductClient:
    def __init__(self, base_url: str | None = None, timeout: int = HTTP_TIMEOUT_SECONDS):
        self.base_url = (base_url or PRODUCT_SERVICE_URL).rstrip("/")
        self.timeout = timeout

    @http_retry()
    def fetch_offering(self, store_id: int, offering_id: int) -> ProductOffering | None:
        url = f"{self.base_url}/stores/{store_id}/products/{offering_id}"
        logger.info(f"ProductClient GET {url}")

        resp = requests.get(url, timeout=self.timeout)
        if resp.status_code == 404:
            return None
        resp.raise_for_status()

        data = resp.json()
        return ProductOffering(
            id=int(data["id"]),
            store_id=int(data.get("store_id", store_id)),
            name=data["name"],
            price=Decimal(str(data["price"])).quantize(Decimal("0.01")),
            is_active=bool(data.get("is_active", True)),
        )
