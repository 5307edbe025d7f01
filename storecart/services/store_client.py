# storecart/services/store_client.py
import requests

from storecart.utils.retry import http_retry
from storecart.utils.settings import STORE_SERVICE_URL, HTTP_TIMEOUT_SECONDS
from storecart.utils.logging import get_logger

logger = get_logger(__name__)


class StoreClient:
    def __init__(self, base_url: str | None = None, timeout: int = HTTP_TIMEOUT_SECONDS):
        self.base_url = (base_url or STORE_SERVICE_URL).rstrip("/")
        self.timeout = timeout

    @http_retry()
    def store_exists(self, store_id: int) -> bool:
        url = f"{self.base_url}/stores/{store_id}"
        logger.info(f"StoreClient GET {url}")

        resp = requests.get(url, timeout=self.timeout)
        if resp.status_code == 404:
            return False
        resp.raise_for_status()
        return True
