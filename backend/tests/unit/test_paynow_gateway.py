"""Unit tests for the Paynow gateway adapter over an httpx mock transport"""

from decimal import Decimal
from urllib.parse import parse_qsl, urlencode

import httpx
import pytest

from domain.payments import PaymentGatewayError, generate_hash, verify_hash
from infrastructure.payments import PaynowGateway


KEY = "integration-key"


def gateway_with(handler) -> PaynowGateway:
    return PaynowGateway(
        integration_id="1201",
        integration_key=KEY,
        base_url="https://paynow.test/",
        client=httpx.Client(transport=httpx.MockTransport(handler)),
    )


def signed(reply: dict) -> str:
    reply = dict(reply)
    reply["hash"] = generate_hash(reply, KEY)
    return urlencode(reply)


def initiate(gateway: PaynowGateway):
    return gateway.initiate(
        amount=Decimal("75"),
        currency="USD",
        reference="EACZ-FEE-IND-APP-2025-0001",
        email="tendai@example.com",
        return_url="http://localhost:3000/application/IND-APP-2025-0001/payment-complete",
        result_url="http://localhost:8000/api/public/applications/IND-APP-2025-0001/fee/callback",
    )


class TestInitiate:
    def test_signed_request_and_parsed_reply(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["fields"] = dict(parse_qsl(request.content.decode()))
            return httpx.Response(200, text=signed({
                "status": "Ok",
                "browserurl": "https://paynow.test/pay/1",
                "pollurl": "https://paynow.test/poll/1",
                "paynowreference": "555",
            }))

        payment = initiate(gateway_with(handler))

        assert seen["url"] == "https://paynow.test/interface/initiatetransaction"
        assert seen["fields"]["amount"] == "75.00"
        assert seen["fields"]["reference"] == "EACZ-FEE-IND-APP-2025-0001"
        assert seen["fields"]["status"] == "Message"
        assert verify_hash(seen["fields"], KEY) is True

        assert payment.redirect_url == "https://paynow.test/pay/1"
        assert payment.poll_reference == "https://paynow.test/poll/1"
        assert payment.provider_reference == "555"

    def test_error_reply(self):
        gateway = gateway_with(lambda r: httpx.Response(200, text="status=Error&error=Invalid+Id"))
        with pytest.raises(PaymentGatewayError, match="Invalid Id"):
            initiate(gateway)

    def test_unsigned_reply_rejected(self):
        reply = urlencode({"status": "Ok", "browserurl": "https://evil.test", "pollurl": "x", "hash": "00"})
        gateway = gateway_with(lambda r: httpx.Response(200, text=reply))
        with pytest.raises(PaymentGatewayError, match="could not be verified"):
            initiate(gateway)

    def test_http_failure(self):
        def handler(request):
            raise httpx.ConnectError("connection refused")

        with pytest.raises(PaymentGatewayError, match="Payment service unavailable"):
            initiate(gateway_with(handler))

    def test_server_error(self):
        gateway = gateway_with(lambda r: httpx.Response(503, text="down"))
        with pytest.raises(PaymentGatewayError, match="Payment service unavailable"):
            initiate(gateway)

    def test_not_configured(self):
        gateway = PaynowGateway(integration_id="", integration_key="")
        with pytest.raises(PaymentGatewayError, match="not configured"):
            initiate(gateway)


class TestNotifications:
    def test_verify_notification(self):
        gateway = PaynowGateway(integration_id="1201", integration_key=KEY)
        payload = {"reference": "EACZ-FEE-IND-APP-2025-0001", "status": "Paid"}
        payload["hash"] = generate_hash(payload, KEY)

        assert gateway.verify_notification(payload) is True
        assert gateway.verify_notification({**payload, "status": "Cancelled"}) is False

    def test_unconfigured_gateway_trusts_nothing(self):
        gateway = PaynowGateway(integration_id="", integration_key="")
        assert gateway.verify_notification({"status": "Paid", "hash": "X"}) is False

    @pytest.mark.parametrize("status,settled", [
        ("Paid", True),
        ("Awaiting Delivery", True),
        ("Delivered", True),
        ("Created", False),
        ("Cancelled", False),
    ])
    def test_is_settled(self, status, settled):
        assert PaynowGateway("1", KEY).is_settled(status) is settled
