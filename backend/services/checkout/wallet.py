import logging
from decimal import Decimal
from typing import Any, Dict, Optional

import httpx

from errors import ErrorKind
from services.pricing import to_money
from .capture import CaptureResult, PaymentMethod

logger = logging.getLogger("storefront")

ORDER_DESCRIPTION = "Candit Purchase"
CAPTURABLE_STATUSES = {"APPROVED", "COMPLETED"}


def checkout_tag(user_id: Optional[str], reference: str) -> str:
    """Value stored in `custom_id` that binds a PayPal order to one checkout."""
    return f"{user_id}:{reference}"


class PayPalClient:
    def __init__(
        self,
        base_url: str,
        client_id: str,
        client_secret: str,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.client_id = client_id
        self.client_secret = client_secret
        self._transport = transport
        self._timeout = timeout

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url, timeout=self._timeout, transport=self._transport
        )

    async def _access_token(self, client: httpx.AsyncClient) -> str:
        response = await client.post(
            "/v1/oauth2/token",
            auth=(self.client_id, self.client_secret),
            data={"grant_type": "client_credentials"},
        )
        response.raise_for_status()
        return response.json()["access_token"]

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        request_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        async with self._client() as client:
            token = await self._access_token(client)
            headers = {"Authorization": f"Bearer {token}"}
            if request_id:
                headers["PayPal-Request-Id"] = request_id
            response = await client.request(method, path, json=json, headers=headers)
        response.raise_for_status()
        return response.json()

    async def create_order(
        self,
        amount: Decimal,
        currency: str,
        request_id: str,
        *,
        custom_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        unit: Dict[str, Any] = {
            "amount": {
                "value": f"{to_money(amount):.2f}",
                "currency_code": currency,
            },
            "description": ORDER_DESCRIPTION,
        }
        if custom_id:
            unit["custom_id"] = custom_id
        payload = {"intent": "CAPTURE", "purchase_units": [unit]}
        return await self._request(
            "POST",
            "/v2/checkout/orders",
            json=payload,
            request_id=f"{request_id}-create",
        )

    async def get_order(self, order_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/v2/checkout/orders/{order_id}")

    async def capture_order(self, order_id: str, request_id: str) -> Dict[str, Any]:
        return await self._request(
            "POST",
            f"/v2/checkout/orders/{order_id}/capture",
            json={},
            request_id=f"{request_id}-capture",
        )


def _order_amount(order: Dict[str, Any]) -> tuple[Optional[str], Optional[str]]:
    units = order.get("purchase_units") or []
    if not units:
        return None, None
    amount = units[0].get("amount") or {}
    return amount.get("value"), amount.get("currency_code")


def _custom_id(order: Dict[str, Any]) -> Optional[str]:
    units = order.get("purchase_units") or []
    return units[0].get("custom_id") if units else None


def _capture_id(order: Dict[str, Any]) -> Optional[str]:
    for unit in order.get("purchase_units") or []:
        captures = (unit.get("payments") or {}).get("captures") or []
        for capture in captures:
            if capture.get("status") == "COMPLETED":
                return capture.get("id")
    return None


def _issue_names(response: httpx.Response) -> set[str]:
    try:
        body = response.json()
    except ValueError:
        return set()
    details = body.get("details") if isinstance(body, dict) else None
    return {item.get("issue") for item in details or [] if isinstance(item, dict)}


class WalletCapture:
    method = PaymentMethod.PAYPAL

    def __init__(
        self,
        wallet_order_id: Optional[str],
        *,
        client: PayPalClient,
        currency: str,
        user_id: Optional[str] = None,
    ) -> None:
        self.wallet_order_id = wallet_order_id
        self.client = client
        self.currency = currency.upper()
        self.user_id = user_id

    async def capture(self, amount: Decimal, reference: str) -> CaptureResult:
        if not self.client.is_configured:
            return CaptureResult.failure(
                self.method,
                ErrorKind.CONFIGURATION_ERROR,
                "PayPal credentials not configured",
            )
        if not self.wallet_order_id:
            return CaptureResult.failure(
                self.method, ErrorKind.USER_CANCELLED, "PayPal payment was not approved"
            )

        order_id = self.wallet_order_id
        try:
            order = await self.client.get_order(order_id)
            status = order.get("status")
            if status not in CAPTURABLE_STATUSES:
                return CaptureResult.failure(
                    self.method,
                    ErrorKind.USER_CANCELLED,
                    f"PayPal order is {status}",
                    order_id,
                )
            value, currency = _order_amount(order)
            expected = f"{to_money(amount):.2f}"
            if value != expected or (currency or "").upper() != self.currency:
                logger.warning(
                    "PayPal order %s amount %s %s does not match %s %s",
                    order_id,
                    value,
                    currency,
                    expected,
                    self.currency,
                )
                return CaptureResult.failure(
                    self.method,
                    ErrorKind.CAPTURE_ERROR,
                    "PayPal order amount does not match the order total",
                    order_id,
                )
            # Orders are bound to the user and checkout key that created them.
            if _custom_id(order) != checkout_tag(self.user_id, reference):
                logger.warning(
                    "PayPal order %s is not bound to checkout %s of user %s",
                    order_id,
                    reference,
                    self.user_id,
                )
                return CaptureResult.failure(
                    self.method,
                    ErrorKind.CAPTURE_ERROR,
                    "PayPal order does not belong to this checkout",
                    order_id,
                )
            if status == "COMPLETED":
                captured = order
            else:
                captured = await self.client.capture_order(order_id, reference)
        except httpx.HTTPStatusError as exc:
            code = exc.response.status_code
            if code == 401:
                return CaptureResult.failure(
                    self.method,
                    ErrorKind.CONFIGURATION_ERROR,
                    "PayPal rejected the configured credentials",
                    order_id,
                )
            if "ORDER_NOT_APPROVED" in _issue_names(exc.response):
                return CaptureResult.failure(
                    self.method,
                    ErrorKind.USER_CANCELLED,
                    "PayPal payment was not approved",
                    order_id,
                )
            logger.warning("PayPal capture for %s failed with HTTP %s", order_id, code)
            return CaptureResult.failure(
                self.method, ErrorKind.CAPTURE_ERROR, "PayPal capture failed", order_id
            )
        except httpx.RequestError as exc:
            logger.warning("PayPal unreachable: %s", exc)
            return CaptureResult.failure(
                self.method,
                ErrorKind.NETWORK_ERROR,
                "PayPal is unreachable",
                order_id,
            )

        capture_id = _capture_id(captured)
        if captured.get("status") != "COMPLETED" or not capture_id:
            return CaptureResult.failure(
                self.method,
                ErrorKind.CAPTURE_ERROR,
                f"PayPal capture is {captured.get('status')}",
                order_id,
            )
        return CaptureResult.success(self.method, capture_id)
