# storefront/core/vnpay.py
"""
VNPay redirect payment helpers.

Request signing:
  1. drop empty parameters
  2. sort by key (ordinal)
  3. url-encode key and value (spaces as '+')
  4. join as k=v&k=v
  5. HMAC-SHA512 with the merchant hash secret, lowercase hex

The callback is verified the same way over every `vnp_*` query parameter
except the hash fields themselves.
"""
import hashlib
import hmac
import time
import uuid
from datetime import datetime, timedelta, timezone
from typing import Mapping
from urllib.parse import quote_plus

from storefront.core.config import Settings
from storefront.schemas.payment import PaymentResult

# Gateway timestamps are Indochina Time (UTC+7), no DST.
VNPAY_TZ = timezone(timedelta(hours=7))

SUCCESS_RESPONSE_CODE = "00"

HASH_FIELDS = {"vnp_SecureHash", "vnp_SecureHashType"}


def hmac_sha512(key: str, data: str) -> str:
    return hmac.new(
        key.encode("utf-8"),
        data.encode("utf-8"),
        hashlib.sha512,
    ).hexdigest()


def build_query(params: Mapping[str, str | None], skip_empty: bool = True) -> str:
    """
    Build the canonical (sorted, url-encoded) query string that gets signed.
    """
    parts = []
    for key in sorted(params):
        value = params[key]
        if value is None:
            value = ""
        value = str(value)
        if skip_empty and not value:
            continue
        parts.append(f"{quote_plus(key)}={quote_plus(value)}")
    return "&".join(parts)


def extract_order_id(order_info: str | None) -> str | None:
    """
    Find the order UUID inside vnp_OrderInfo.

    Format written by create_payment_url: "<description> <order_id>",
    where description itself may contain "#<order_id>".
    """
    if not order_info:
        return None
    for part in order_info.split():
        candidate = part.strip("#")
        try:
            return str(uuid.UUID(candidate))
        except ValueError:
            continue
    return None


class VNPayClient:
    """
    Builds signed payment URLs and validates signed callbacks.
    """

    def __init__(
        self,
        tmn_code: str,
        hash_secret: str,
        payment_url: str,
        return_url: str,
        version: str = "2.1.0",
        locale: str = "vn",
        order_type: str = "other",
    ):
        self.tmn_code = tmn_code
        self.hash_secret = hash_secret
        self.payment_url = payment_url
        self.return_url = return_url
        self.version = version
        self.locale = locale
        self.order_type = order_type

    @classmethod
    def from_settings(cls, settings: Settings) -> "VNPayClient":
        return cls(
            tmn_code=settings.VNPAY_TMN_CODE,
            hash_secret=settings.VNPAY_HASH_SECRET,
            payment_url=settings.VNPAY_PAYMENT_URL,
            return_url=settings.VNPAY_RETURN_URL,
            version=settings.VNPAY_VERSION,
            locale=settings.VNPAY_LOCALE,
            order_type=settings.VNPAY_ORDER_TYPE,
        )

    def sign(self, params: Mapping[str, str | None], skip_empty: bool = True) -> str:
        return hmac_sha512(self.hash_secret, build_query(params, skip_empty))

    def create_payment_url(
        self,
        order_id: uuid.UUID | str,
        amount: float,
        description: str,
        ip_addr: str | None = None,
        now: datetime | None = None,
    ) -> str:
        """
        Build the redirect URL for a payment.

        vnp_Amount is expressed in the smallest currency unit (VND * 100);
        the amount is truncated to whole VND first.
        """
        now = now or datetime.now(timezone.utc)

        params = {
            "vnp_Version": self.version,
            "vnp_Command": "pay",
            "vnp_TmnCode": self.tmn_code,
            "vnp_Amount": str(int(amount) * 100),
            "vnp_CreateDate": now.astimezone(VNPAY_TZ).strftime("%Y%m%d%H%M%S"),
            "vnp_CurrCode": "VND",
            "vnp_IpAddr": ip_addr or "127.0.0.1",
            "vnp_Locale": self.locale,
            "vnp_OrderInfo": f"{description} {order_id}",
            "vnp_OrderType": self.order_type,
            "vnp_ReturnUrl": self.return_url,
            # Unique per attempt so a failed order can be paid again
            "vnp_TxnRef": str(time.time_ns() // 100),
        }

        query = build_query(params)
        secure_hash = hmac_sha512(self.hash_secret, query)
        return f"{self.payment_url}?{query}&vnp_SecureHash={secure_hash}"

    def verify_signature(self, query: Mapping[str, str]) -> bool:
        received = query.get("vnp_SecureHash") or ""
        if not received:
            return False
        data = {
            k: v
            for k, v in query.items()
            if k.startswith("vnp_") and k not in HASH_FIELDS
        }
        expected = self.sign(data, skip_empty=False)
        # Bytes: compare_digest rejects non-ASCII str input
        return hmac.compare_digest(
            expected.encode("utf-8"), received.lower().encode("utf-8")
        )

    def parse_callback(self, query: Mapping[str, str]) -> PaymentResult:
        """
        Parse and verify the gateway's return/callback query string.
        """
        response_code = query.get("vnp_ResponseCode")
        order_info = query.get("vnp_OrderInfo")

        amount: float | None = None
        raw_amount = query.get("vnp_Amount")
        if raw_amount:
            try:
                amount = int(raw_amount) / 100
            except ValueError:
                amount = None

        return PaymentResult(
            valid_signature=self.verify_signature(query),
            success=response_code == SUCCESS_RESPONSE_CODE,
            order_id=extract_order_id(order_info),
            transaction_id=query.get("vnp_TransactionNo") or None,
            payment_method=query.get("vnp_CardType") or None,
            response_code=response_code,
            amount=amount,
            order_description=order_info,
        )
