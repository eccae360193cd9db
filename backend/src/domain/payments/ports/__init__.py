"""Payment gateway port interface"""

from .payment_gateway_port import InitiatedPayment, PaymentGatewayError, PaymentGatewayPort

__all__ = ["PaymentGatewayPort", "PaymentGatewayError", "InitiatedPayment"]
