"""Paynow Gateway - Implementation of PaymentGatewayPort over httpx.

Architecture: Hexagonal - Adapter implementation in infrastructure layer
"""

import logging
from decimal import Decimal
from functools import lru_cache
from typing import Mapping

import httpx

from config import settings
from domain.payments import (
    InitiatedPayment,
    PaymentGatewayError,
    PaymentOutcome,
    PaymentGatewayPort,
    classify_status,
    generate_hash,
    parse_response,
    verify_hash,
)

logger = logging.getLogger(__name__)


class PaynowGateway(PaymentGatewayPort):
    """Paynow (Zimbabwe) hosted-checkout integration.

    Example:
        gateway = PaynowGateway(integration_id="1234", integration_key="secret")
        payment = gateway.initiate(...)
    """

    def __init__(
        self,
        integration_id: str,
        integration_key: str,
        base_url: str = "https://www.paynow.co.zw",
        timeout: float = 30.0,
        client: httpx.Client = None,
    ):
        self.integration_id = integration_id
        self.integration_key = integration_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    def _post(self, url: str, data: Mapping[str, str]) -> httpx.Response:
        if self._client is not None:
            return self._client.post(url, data=data)
        with httpx.Client(timeout=self.timeout) as client:
            return client.post(url, data=data)

    def initiate(
        self,
        amount: Decimal,
        currency: str,
        reference: str,
        email: str,
        return_url: str,
        result_url: str,
    ) -> InitiatedPayment:
        if not self.integration_id or not self.integration_key:
            raise PaymentGatewayError("Paynow integration is not configured")

        fields = {
            "id": self.integration_id,
            "reference": reference,
            "amount": f"{Decimal(amount):.2f}",
            "additionalinfo": email,
            "returnurl": return_url,
            "resulturl": result_url,
            "authemail": email,
            "status": "Message",
        }
        fields["hash"] = generate_hash(fields, self.integration_key)

        try:
            response = self._post(f"{self.base_url}/interface/initiatetransaction", fields)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Paynow HTTP error: reference={reference}, error={e}")
            raise PaymentGatewayError("Payment service unavailable")

        reply = parse_response(response.text)
        if reply.get("status", "").lower() != "ok":
            error = reply.get("error") or "Payment initiation failed"
            logger.warning(f"Paynow rejected payment: reference={reference}, error={error}")
            raise PaymentGatewayError(error)

        if not verify_hash(reply, self.integration_key):
            logger.error(f"Paynow reply failed hash check: reference={reference}")
            raise PaymentGatewayError("Payment gateway response could not be verified")

        logger.info(f"Paynow payment initiated: reference={reference}, amount={currency} {fields['amount']}")
        return InitiatedPayment(
            redirect_url=reply.get("browserurl", ""),
            poll_reference=reply.get("pollurl", ""),
            provider_reference=reply.get("paynowreference"),
        )

    def verify_notification(self, payload: Mapping[str, str]) -> bool:
        if not self.integration_key:
            return False
        return verify_hash(payload, self.integration_key)

    def is_settled(self, status: str) -> bool:
        return classify_status(status) == PaymentOutcome.SETTLED


@lru_cache()
def get_payment_gateway() -> PaymentGatewayPort:
    """FastAPI dependency returning the configured payment gateway."""
    return PaynowGateway(
        integration_id=settings.PAYNOW_INTEGRATION_ID,
        integration_key=settings.PAYNOW_INTEGRATION_KEY,
        base_url=settings.PAYNOW_BASE_URL,
        timeout=settings.PAYNOW_TIMEOUT_SECONDS,
    )
