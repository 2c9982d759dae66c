"""
Marianatek product variant API client.

Marianatek is authoritative for restocks. Its inventory can only be
changed by relative adjustments at a location; there is no absolute set.
"""

from typing import Any, Optional
import structlog

from config.settings import Settings
from exceptions import MalformedResponseError
from integrations.base import ApiClient

logger = structlog.get_logger(__name__)

JSON_API_CONTENT_TYPE = "application/vnd.api+json"


class MarianatekClient(ApiClient):
    """
    Client for /product_variants endpoints.

    Usage:
        client = MarianatekClient.from_settings(settings, event_log=log)
        variants = client.fetch_all_variants()
    """

    service_name = "marianatek"

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> "MarianatekClient":
        """Build a client from application settings."""
        return cls(
            base_url=settings.marianatek_base_url,
            api_key=settings.marianatek_api_key,
            timeout=settings.request_timeout_seconds,
            max_retries=settings.max_retries,
            request_delay=settings.request_delay_seconds,
            **kwargs
        )

    def fetch_all_variants(self) -> list[dict]:
        """
        Fetch every product variant, page by page.

        Returns:
            List of JSON:API variant resources ({"id", "attributes", ...})

        Raises:
            MalformedResponseError: If a page lacks `data` or `meta.pagination`
        """
        page = 1
        variants: list[dict] = []

        while True:
            body = self._request(
                "GET",
                "/product_variants/",
                correlation_id=f"PAGE-{page}",
                params={"page": page}
            )

            data = body.get("data")
            pagination = (body.get("meta") or {}).get("pagination")
            if not isinstance(data, list) or not isinstance(pagination, dict):
                logger.error("marianatek_page_malformed", page=page, keys=sorted(body))
                raise MalformedResponseError(self.service_name, "Invalid Marianatek response structure")

            pages = pagination.get("pages")
            if not isinstance(pages, int):
                raise MalformedResponseError(self.service_name, "Marianatek pagination has no page count")

            variants.extend(data)
            logger.debug("marianatek_page_fetched", page=page, pages=pages, count=len(data))

            has_more = page < pages
            page += 1
            self.pause()
            if not has_more:
                break

        logger.info("marianatek_variants_fetched", count=len(variants), pages=page - 1)
        return variants

    def fetch_variant(self, variant_id: str) -> dict:
        """
        Fetch a single variant resource.

        Raises:
            MalformedResponseError: If the resource has no attributes
        """
        body = self._request(
            "GET",
            f"/product_variants/{variant_id}",
            correlation_id=str(variant_id)
        )
        data = body.get("data")
        if not isinstance(data, dict) or not isinstance(data.get("attributes"), dict):
            raise MalformedResponseError(
                self.service_name,
                f"Variant {variant_id} response has no attributes"
            )
        return data

    def adjust_inventory(
        self,
        variant_id: str,
        delta: int,
        location_id: Optional[str]
    ) -> dict:
        """
        Apply a relative inventory change at a location.

        Args:
            variant_id: Marianatek variant id
            delta: Signed change in quantity
            location_id: Marianatek location id
        """
        payload = {
            "data": [
                {
                    "variant_id": variant_id,
                    "adjustments": [
                        {"change_in_quantity": delta, "location_id": location_id}
                    ],
                }
            ]
        }
        logger.info(
            "adjusting_marianatek_inventory",
            variant_id=variant_id,
            delta=delta,
            location_id=location_id
        )
        return self._request(
            "POST",
            "/product_variants/adjust_inventory",
            correlation_id=str(variant_id),
            json=payload,
            headers={"Content-Type": JSON_API_CONTENT_TYPE}
        )
