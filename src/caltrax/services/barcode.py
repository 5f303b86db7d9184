"""Barcode lookups backed by Open Food Facts."""

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from caltrax.adapters.openfoodfacts_client import OpenFoodFactsClient
from caltrax.domain.barcode import BarcodeProduct
from caltrax.domain.nutrition import MacroProfile, coerce_amount
from caltrax.services.cache import Cache

_NUTRIMENT_KEYS = {
    "calories": "energy-kcal",
    "protein_g": "proteins",
    "fat_g": "fat",
    "carbs_g": "carbohydrates",
}

_NOT_FOUND = "not-found"

_logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable


@dataclass
class BarcodeService:
    """Service for barcode lookups with caching."""

    client: OpenFoodFactsClient
    cache: Cache
    product_ttl_seconds: int = 86400
    missing_ttl_seconds: int = 3600
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3

    async def lookup(self, barcode: str) -> BarcodeProduct | None:
        """Return the product for a barcode, or None when it is unknown."""
        code = barcode.strip()
        if not code.isdigit():
            return None
        cache_key = f"off:product:{code}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, BarcodeProduct):
            return cached
        if cached == _NOT_FOUND:
            return None

        payload = await self._call_with_retry(
            lambda: self.client.get_product(code), action=f"get_product:{code}"
        )
        product = payload.get("product")
        if payload.get("status") != 1 or not isinstance(product, dict):
            self.cache.set(cache_key, _NOT_FOUND, ttl_seconds=self.missing_ttl_seconds)
            _logger.info("Barcode not found: %s", code)
            return None

        resolved = _parse_product(code, product)
        self.cache.set(cache_key, resolved, ttl_seconds=self.product_ttl_seconds)
        return resolved

    async def _call_with_retry(
        self, func: "Callable[[], Awaitable[dict[str, object]]]", *, action: str
    ) -> dict[str, object]:
        """Call an async function with a short retry."""
        attempt = 0
        while True:
            try:
                return await func()
            except Exception as exc:
                attempt += 1
                _logger.warning(
                    "Barcode %s failed (attempt %s/%s, status=%s): %s",
                    action,
                    attempt,
                    self.retry_attempts + 1,
                    _status_code_from_exception(exc),
                    exc,
                )
                if attempt > self.retry_attempts:
                    raise
                await asyncio.sleep(self.retry_delay_seconds)


def _status_code_from_exception(exc: Exception) -> str:
    """Extract HTTP status code from an exception, if available."""
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return str(status_code)
    return "n/a"


def _parse_product(barcode: str, product: dict[str, object]) -> BarcodeProduct:
    """Build a product, preferring per-serving nutriments over per-100g."""
    nutriments = product.get("nutriments")
    if not isinstance(nutriments, dict):
        nutriments = {}
    has_serving = any(
        f"{key}_serving" in nutriments for key in _NUTRIMENT_KEYS.values()
    )
    suffix = "serving" if has_serving else "100g"
    macros = MacroProfile(
        **{
            field: coerce_amount(nutriments.get(f"{key}_{suffix}"))
            for field, key in _NUTRIMENT_KEYS.items()
        }
    )
    name = product.get("product_name") or product.get("generic_name") or barcode
    brands = product.get("brands")
    return BarcodeProduct(
        barcode=barcode,
        name=str(name),
        brand=str(brands).split(",")[0].strip() if brands else None,
        nutrition=macros,
        basis=suffix,
        serving_size=(
            str(product["serving_size"]) if product.get("serving_size") else None
        ),
        nutriscore_grade=product.get("nutriscore_grade") or None,
    )
