"""Payment gateway adapters"""

from .paynow_gateway import PaynowGateway, get_payment_gateway

__all__ = ["PaynowGateway", "get_payment_gateway"]
