"""
catalog_cache.py: cache storefront catalog reads.

Demonstrates read-through caching of the category list and a paginated
product search, a periodic expiry sweep, and purging product listings after
an admin mutation.

Usage:
    export STORECACHE_BACKEND=sqlite
    python examples/catalog_cache.py
"""

import asyncio

from storecache import (
    CATEGORIES_TTL_MS,
    PRODUCT_UPDATED,
    PRODUCTS_TTL_MS,
    ExpirationSweeper,
    PatternInvalidator,
    CacheSettings,
    aget_or_fetch,
    create_cache_store_from_env,
)


async def fetch_categories() -> list[dict]:
    await asyncio.sleep(0.1)  # stands in for GET /api/categories
    return [{"id": 1, "name": "Mechanical/ Water Pump Seals"}, {"id": 2, "name": "Pumps"}]


async def search_products() -> dict:
    await asyncio.sleep(0.1)  # stands in for GET /api/products?page=1&search=seal
    return {"page": 1, "items": [{"id": 10, "name": "Cartridge seal 35mm"}]}


async def main() -> None:
    settings = CacheSettings.from_env()
    store = create_cache_store_from_env(settings)
    sweeper = ExpirationSweeper(store, interval_s=settings.sweep_interval_s)
    invalidator = PatternInvalidator(store)
    await sweeper.start()
    try:
        categories = await aget_or_fetch(
            store, "/api/categories", fetch_categories, ttl_ms=CATEGORIES_TTL_MS
        )
        products = await aget_or_fetch(
            store,
            "/api/products",
            search_products,
            params={"search": "seal", "page": 1},
            ttl_ms=PRODUCTS_TTL_MS,
        )
        print(f"{len(categories)} categories, {len(products['items'])} products")
        print(store.stats())

        # An admin created a product: every cached listing is now suspect.
        invalidator.notify(PRODUCT_UPDATED)
        print(store.stats())
    finally:
        await sweeper.stop()


if __name__ == "__main__":
    asyncio.run(main())
