"""Payment gateway integration."""
from finquest.payments.razorpay import GatewayResult, RazorpayGateway

__all__ = ["GatewayResult", "RazorpayGateway"]
