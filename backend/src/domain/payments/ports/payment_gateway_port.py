"""Payment Gateway Port - Domain interface for collecting application fees.

Architecture: Hexagonal - Port interface in domain layer
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Mapping, Optional


class PaymentGatewayError(Exception):
    """Raised when the gateway refuses or cannot be reached."""
    pass


@dataclass(frozen=True)
class InitiatedPayment:
    """A payment the gateway accepted.

    Attributes:
        redirect_url: Hosted checkout page the applicant is sent to
        poll_reference: URL for polling the transaction status
        provider_reference: Gateway's own transaction reference, when returned
    """
    redirect_url: str
    poll_reference: str
    provider_reference: Optional[str] = None


class PaymentGatewayPort(ABC):
    """Port interface for initiating fee payments and trusting their callbacks.

    Example Usage:
        gateway = PaynowGateway(...)
        payment = gateway.initiate(
            amount=Decimal("50"),
            currency="USD",
            reference="EACZ-FEE-IND-APP-2025-0001",
            email="applicant@example.com",
            return_url="https://portal/application/IND-APP-2025-0001/payment-complete",
            result_url="https://api/api/public/applications/IND-APP-2025-0001/fee/callback",
        )
        redirect(payment.redirect_url)
    """

    @abstractmethod
    def initiate(
        self,
        amount: Decimal,
        currency: str,
        reference: str,
        email: str,
        return_url: str,
        result_url: str,
    ) -> InitiatedPayment:
        """Open a transaction with the gateway.

        Raises:
            PaymentGatewayError: If the gateway rejects the request or is unreachable
        """
        pass

    @abstractmethod
    def verify_notification(self, payload: Mapping[str, str]) -> bool:
        """True when a status notification carries a valid integrity hash."""
        pass

    @abstractmethod
    def is_settled(self, status: str) -> bool:
        """True when a gateway transaction status means the money arrived."""
        pass
