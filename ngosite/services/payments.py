# ngosite/services/payments.py
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional
from urllib.parse import quote, urlencode

import segno

UPI_SCHEME = "upi://pay"
CENT = Decimal("0.01")


class PaymentService:
    """UPI deep links and their QR codes for the pledge payment step. No network calls, no provider SDK."""

    @staticmethod
    def format_amount(amount: Any) -> Optional[str]:
        """Two-decimal string for an amount that is still positive once rounded to 0.01; None otherwise."""
        if amount is None or isinstance(amount, bool):
            return None
        try:
            d = Decimal(str(amount))
        except (InvalidOperation, ValueError):
            return None
        if not d.is_finite() or d <= 0:
            return None
        q = d.quantize(CENT, rounding=ROUND_HALF_UP)
        return str(q) if q > 0 else None

    @staticmethod
    def build_payment_uri(
        handle: Optional[str],
        payee_name: Optional[str],
        currency: str = "INR",
        amount: Any = None,
    ) -> Optional[str]:
        """
        ``upi://pay?pa=<handle>&pn=<payee>&cu=<currency>[&am=<amount>]``.
        Returns None when the site has no payment handle configured.
        """
        handle = (handle or "").strip()
        if not handle:
            return None
        params = [("pa", handle), ("pn", (payee_name or "").strip()), ("cu", (currency or "INR").upper())]
        am = PaymentService.format_amount(amount)
        if am is not None:
            params.append(("am", am))
        # '@' stays literal in the VPA; everything else is percent-encoded
        return f"{UPI_SCHEME}?{urlencode(params, quote_via=quote, safe='@')}"

    @staticmethod
    def qr_svg(uri: Optional[str], scale: int = 5) -> Optional[str]:
        """Inline ``<svg>`` QR code for ``uri`` (no XML declaration), or None without a URI."""
        if not uri:
            return None
        return segno.make(uri, error="m", micro=False).svg_inline(
            scale=scale, border=2, title="UPI payment QR code", svgclass="qr-code"
        )
