"""
Webflow CMS SKU inventory client.

Webflow is authoritative for sales. Inventory is read and set
absolutely through the item's inventory sub-resource.
"""

from typing import Any
import structlog

from config.settings import Settings
from exceptions import MalformedResponseError
from integrations.base import ApiClient

logger = structlog.get_logger(__name__)

FINITE_INVENTORY = "finite"


class WebflowClient(ApiClient):
    """
    Client for one Webflow SKU collection.

    Usage:
        client = WebflowClient.from_settings(settings, event_log=log)
        qty = client.fetch_inventory("item-id")
    """

    service_name = "webflow"

    def __init__(self, collection_id: str, page_size: int = 100, **kwargs: Any):
        super().__init__(**kwargs)
        self.collection_id = collection_id
        self.page_size = page_size

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> "WebflowClient":
        """Build a client from application settings."""
        return cls(
            collection_id=settings.webflow_sku_collection,
            page_size=settings.webflow_page_size,
            base_url=settings.webflow_base_url,
            api_key=settings.webflow_api_key,
            timeout=settings.request_timeout_seconds,
            max_retries=settings.max_retries,
            request_delay=settings.request_delay_seconds,
            **kwargs
        )

    @property
    def _items_path(self) -> str:
        return f"/collections/{self.collection_id}/items"

    def fetch_all_skus(self) -> list[dict]:
        """
        Fetch every item of the SKU collection using offset/limit paging.

        Raises:
            MalformedResponseError: If a page lacks `items` or `pagination`
        """
        offset = 0
        items: list[dict] = []

        while True:
            body = self._request(
                "GET",
                self._items_path,
                correlation_id=f"OFFSET-{offset}",
                params={"limit": self.page_size, "offset": offset}
            )

            page_items = body.get("items")
            pagination = body.get("pagination")
            if not isinstance(page_items, list) or not isinstance(pagination, dict):
                logger.error("webflow_page_malformed", offset=offset, keys=sorted(body))
                raise MalformedResponseError(self.service_name, "Invalid Webflow response structure")

            total = pagination.get("total")
            if not isinstance(total, int):
                raise MalformedResponseError(self.service_name, "Webflow pagination has no total")

            items.extend(page_items)
            offset += self.page_size
            self.pause()
            if offset >= total:
                break

        logger.info("webflow_skus_fetched", count=len(items))
        return items

    def fetch_inventory(self, item_id: str) -> int:
        """Current inventory quantity of an item (0 when unset)."""
        body = self._request(
            "GET",
            f"{self._items_path}/{item_id}/inventory",
            correlation_id=str(item_id)
        )
        quantity = body.get("quantity")
        if quantity is None:
            return 0
        if isinstance(quantity, bool) or not isinstance(quantity, (int, float)):
            raise MalformedResponseError(
                self.service_name,
                f"Item {item_id} inventory quantity is not numeric"
            )
        if isinstance(quantity, float) and not quantity.is_integer():
            raise MalformedResponseError(
                self.service_name,
                f"Item {item_id} inventory quantity {quantity} is not a whole number"
            )
        return int(quantity)

    def update_inventory(self, item_id: str, quantity: int) -> dict:
        """Set an item's inventory to an absolute, finite quantity."""
        logger.info("updating_webflow_inventory", item_id=item_id, quantity=quantity)
        return self._request(
            "PATCH",
            f"{self._items_path}/{item_id}/inventory",
            correlation_id=str(item_id),
            json={"inventoryType": FINITE_INVENTORY, "quantity": quantity}
        )
