"""
Shopify Admin GraphQL API client.
Reads customer purchase metrics and writes customer tags.
"""
from datetime import datetime
from typing import Any, AsyncIterator

import httpx

from b2b_manager.config import get_settings
from b2b_manager.models.tagging import CustomerMetrics
from b2b_manager.utils.errors import ShopifyAPIError, with_retry
from b2b_manager.utils.logging import get_logger

logger = get_logger(__name__)

CUSTOMER_FIELDS = """
    id
    tags
    numberOfOrders
    amountSpent {
        amount
    }
    orders(first: 1, sortKey: CREATED_AT) {
        edges {
            node {
                createdAt
            }
        }
    }
"""

CUSTOMER_QUERY = f"""
query getCustomerMetrics($id: ID!) {{
    customer(id: $id) {{
        {CUSTOMER_FIELDS}
    }}
}}
"""

CUSTOMERS_QUERY = f"""
query listCustomers($first: Int!, $after: String) {{
    customers(first: $first, after: $after) {{
        edges {{
            node {{
                {CUSTOMER_FIELDS}
            }}
        }}
        pageInfo {{
            hasNextPage
            endCursor
        }}
    }}
}}
"""

TAGS_ADD_MUTATION = """
mutation addTags($id: ID!, $tags: [String!]!) {
    tagsAdd(id: $id, tags: $tags) {
        node {
            id
        }
        userErrors {
            field
            message
        }
    }
}
"""


def customer_gid(customer_id: str | int) -> str:
    """Accept a numeric ID or a GID and return the GID form."""
    customer_id = str(customer_id)
    if customer_id.startswith("gid://"):
        return customer_id
    return f"gid://shopify/Customer/{customer_id}"


def _parse_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def parse_customer(node: dict[str, Any]) -> CustomerMetrics:
    """Map a GraphQL customer node to a metrics snapshot."""
    total_spent = float((node.get("amountSpent") or {}).get("amount") or 0)
    orders_count = int(node.get("numberOfOrders") or 0)
    edges = (node.get("orders") or {}).get("edges") or []
    first_order = _parse_datetime(edges[0]["node"]["createdAt"]) if edges else None

    return CustomerMetrics(
        customer_id=str(node["id"]).rsplit("/", 1)[-1],
        total_spent=total_spent,
        orders_count=orders_count,
        first_order_date=first_order,
        average_order_value=round(total_spent / orders_count, 2) if orders_count else 0.0,
        existing_tags=list(node.get("tags") or []),
    )


class ShopifyClient:
    """Client for one shop's Admin GraphQL API."""

    def __init__(
        self,
        shop_domain: str,
        access_token: str,
        api_version: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = get_settings()
        self.shop_domain = shop_domain.replace("https://", "").replace("http://", "").rstrip("/")
        self.access_token = access_token
        self.api_version = api_version or self.settings.shopify_api_version
        self.graphql_url = (
            f"https://{self.shop_domain}/admin/api/{self.api_version}/graphql.json"
        )
        self.transport = transport

    def _get_headers(self) -> dict[str, str]:
        return {
            "X-Shopify-Access-Token": self.access_token,
            "Content-Type": "application/json",
        }

    async def _post(self, payload: dict[str, Any]) -> dict[str, Any]:
        async with httpx.AsyncClient(
            transport=self.transport,
            timeout=self.settings.request_timeout,
        ) as client:
            try:
                response = await client.post(
                    self.graphql_url, headers=self._get_headers(), json=payload
                )
            except httpx.HTTPError as e:
                raise ShopifyAPIError(f"Shopify request failed: {e}") from e

        if response.status_code == 429 or response.status_code >= 500:
            raise ShopifyAPIError(
                f"Shopify returned {response.status_code}", status_code=502
            )
        if response.status_code >= 400:
            raise ShopifyAPIError(
                f"Shopify returned {response.status_code}",
                status_code=400,
                details=response.text[:500],
            )

        result = response.json()
        if result.get("errors"):
            raise ShopifyAPIError(
                "Shopify GraphQL errors", status_code=400, details=result["errors"]
            )
        return result.get("data") or {}

    async def execute(
        self, query: str, variables: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Execute a GraphQL operation, retrying throttling and server errors."""
        payload: dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables

        return await with_retry(
            lambda: self._post(payload),
            max_retries=self.settings.max_retries,
            delay=self.settings.retry_delay,
        )

    async def get_customer_metrics(self, customer_id: str | int) -> CustomerMetrics | None:
        """Fetch a customer's purchase snapshot, or None if the customer is unknown."""
        data = await self.execute(CUSTOMER_QUERY, {"id": customer_gid(customer_id)})
        node = data.get("customer")
        if not node:
            return None
        return parse_customer(node)

    async def iter_customers(self, page_size: int | None = None) -> AsyncIterator[CustomerMetrics]:
        """Yield every customer of the shop, following pagination cursors."""
        page_size = page_size or self.settings.customer_page_size
        cursor: str | None = None

        while True:
            variables: dict[str, Any] = {"first": page_size}
            if cursor:
                variables["after"] = cursor

            data = await self.execute(CUSTOMERS_QUERY, variables)
            connection = data.get("customers") or {}

            for edge in connection.get("edges") or []:
                yield parse_customer(edge["node"])

            page_info = connection.get("pageInfo") or {}
            if not page_info.get("hasNextPage"):
                break
            cursor = page_info.get("endCursor")

    async def add_customer_tags(self, customer_id: str | int, tags: list[str]) -> None:
        """Add tags to a customer; existing tags are left in place."""
        data = await self.execute(
            TAGS_ADD_MUTATION, {"id": customer_gid(customer_id), "tags": tags}
        )
        user_errors = (data.get("tagsAdd") or {}).get("userErrors") or []
        if user_errors:
            raise ShopifyAPIError(
                "Shopify rejected tag update", status_code=400, details=user_errors
            )

        logger.debug(
            "customer_tags_added",
            shop=self.shop_domain,
            customer_id=str(customer_id),
            tags=tags,
        )
