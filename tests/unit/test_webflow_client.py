"""
Unit tests for WebflowClient.

Run: pytest tests/unit/test_webflow_client.py -v
"""

import pytest
from unittest.mock import call

from integrations.webflow import WebflowClient
from exceptions import MalformedResponseError, TransientServerError
from tests.factories import WebflowSkuFactory, ResponseFactory


class TestFetchAllSkus:
    """Tests for WebflowClient.fetch_all_skus()"""

    def test_offset_paging(self, webflow_client, mock_session, mock_sleep):
        """250 items at 100 per page: offsets 0, 100, 200."""
        mock_session.request.side_effect = [
            ResponseFactory.create(json_body=WebflowSkuFactory.page(
                [WebflowSkuFactory.create() for _ in range(100)], total=250, offset=0)),
            ResponseFactory.create(json_body=WebflowSkuFactory.page(
                [WebflowSkuFactory.create() for _ in range(100)], total=250, offset=100)),
            ResponseFactory.create(json_body=WebflowSkuFactory.page(
                [WebflowSkuFactory.create() for _ in range(50)], total=250, offset=200)),
        ]

        items = webflow_client.fetch_all_skus()

        assert len(items) == 250
        params = [c.kwargs["params"] for c in mock_session.request.call_args_list]
        assert params == [
            {"limit": 100, "offset": 0},
            {"limit": 100, "offset": 100},
            {"limit": 100, "offset": 200},
        ]
        assert mock_session.request.call_args_list[0].args == (
            "GET", "https://webflow.test/v2/collections/coll-1/items"
        )
        assert mock_sleep.call_args_list == [call(0.3)] * 3

    def test_empty_collection_single_request(self, webflow_client, mock_session):
        mock_session.request.side_effect = [
            ResponseFactory.create(json_body=WebflowSkuFactory.page([], total=0))
        ]

        items = webflow_client.fetch_all_skus()

        assert items == []
        assert mock_session.request.call_count == 1

    def test_exact_multiple_of_page_size(self, mock_session, mock_sleep):
        """total == page size needs exactly one page."""
        client = WebflowClient(
            collection_id="coll-1",
            page_size=2,
            base_url="https://webflow.test/v2",
            api_key="wf-key",
            session=mock_session,
            sleep=mock_sleep,
        )
        mock_session.request.side_effect = [
            ResponseFactory.create(json_body=WebflowSkuFactory.page(
                [WebflowSkuFactory.create(), WebflowSkuFactory.create()], total=2, limit=2))
        ]

        items = client.fetch_all_skus()

        assert len(items) == 2
        assert mock_session.request.call_count == 1

    def test_missing_pagination_raises(self, webflow_client, mock_session):
        mock_session.request.side_effect = [
            ResponseFactory.create(json_body={"items": []})
        ]

        with pytest.raises(MalformedResponseError):
            webflow_client.fetch_all_skus()

    def test_missing_items_raises(self, webflow_client, mock_session):
        mock_session.request.side_effect = [
            ResponseFactory.create(json_body={"pagination": {"total": 0}})
        ]

        with pytest.raises(MalformedResponseError):
            webflow_client.fetch_all_skus()


class TestFetchInventory:
    """Tests for WebflowClient.fetch_inventory()"""

    def test_returns_quantity(self, webflow_client, mock_session):
        mock_session.request.side_effect = [
            ResponseFactory.create(json_body={"inventoryType": "finite", "quantity": 9})
        ]

        assert webflow_client.fetch_inventory("B1") == 9
        assert mock_session.request.call_args.args == (
            "GET", "https://webflow.test/v2/collections/coll-1/items/B1/inventory"
        )

    def test_missing_quantity_is_zero(self, webflow_client, mock_session):
        """Infinite inventory carries no quantity; treated as 0."""
        mock_session.request.side_effect = [
            ResponseFactory.create(json_body={"inventoryType": "infinite", "quantity": None})
        ]

        assert webflow_client.fetch_inventory("B1") == 0

    def test_non_numeric_quantity_raises(self, webflow_client, mock_session):
        mock_session.request.side_effect = [
            ResponseFactory.create(json_body={"quantity": "lots"})
        ]

        with pytest.raises(MalformedResponseError):
            webflow_client.fetch_inventory("B1")

    def test_fractional_quantity_raises(self, webflow_client, mock_session):
        """2.7 is rejected rather than truncated to 2."""
        mock_session.request.side_effect = [
            ResponseFactory.create(json_body={"inventoryType": "finite", "quantity": 2.7})
        ]

        with pytest.raises(MalformedResponseError):
            webflow_client.fetch_inventory("B1")

    def test_server_error_retried_then_raised(self, webflow_client, mock_session, mock_sleep):
        """500 on every attempt: 1 + 3 retries, then TransientServerError."""
        mock_session.request.side_effect = [
            ResponseFactory.create(status_code=500) for _ in range(4)
        ]

        with pytest.raises(TransientServerError):
            webflow_client.fetch_inventory("B1")

        assert mock_session.request.call_count == 4
        assert mock_sleep.call_args_list == [call(1)] * 3


class TestUpdateInventory:
    """Tests for WebflowClient.update_inventory()"""

    def test_patches_finite_quantity(self, webflow_client, mock_session):
        """Should set an absolute quantity and mark inventory finite."""
        mock_session.request.side_effect = [
            ResponseFactory.create(json_body={"inventoryType": "finite", "quantity": 7})
        ]

        webflow_client.update_inventory("B1", 7)

        sent = mock_session.request.call_args
        assert sent.args == (
            "PATCH", "https://webflow.test/v2/collections/coll-1/items/B1/inventory"
        )
        assert sent.kwargs["json"] == {"inventoryType": "finite", "quantity": 7}
        assert mock_session.headers["Authorization"] == "Bearer wf-key"
