"""Batch fetch of per-product specification attributes from the product API.

Runs a fixed window of concurrent requests (asyncio.Semaphore), retries each
failed product with linearly increasing backoff, and checkpoints partial
results so a crash mid-run keeps completed work. A product that still fails
after the last retry is kept with ``attributes=None`` and recorded in the
error report; it never aborts the batch.

Progress goes through an explicit ``on_progress`` callback rather than
module-level counters.
"""

from __future__ import annotations

import asyncio
import json
import time
from collections.abc import Callable
from pathlib import Path

import httpx

from product_families.config import settings
from product_families.models import FetchError, FetchProgress, FetchReport, Product, ProductAttributes
from product_families.utils.logging import get_logger, format_progress, GREEN, RED, YELLOW, BOLD, DIM, RESET

log = get_logger()

ProgressCallback = Callable[[FetchProgress], None]


class AttributeFetchError(Exception):
    """One attempt to fetch a product's attributes failed."""


def attributes_url(base_url: str, product_code: str) -> str:
    return f"{base_url.rstrip('/')}/{product_code}/attributes"


async def fetch_attributes(client: httpx.AsyncClient, base_url: str, product_code: str) -> ProductAttributes:
    """Single attempt. Non-200 responses and unparseable bodies raise AttributeFetchError."""
    url = attributes_url(base_url, product_code)
    try:
        response = await client.get(url)
    except httpx.HTTPError as e:
        raise AttributeFetchError(f"Request failed for product {product_code}: {e}") from e

    if response.status_code != 200:
        raise AttributeFetchError(f"HTTP {response.status_code} for product {product_code}")
    try:
        return ProductAttributes.model_validate(response.json())
    except ValueError as e:
        raise AttributeFetchError(f"Failed to parse JSON for product {product_code}: {e}") from e


async def fetch_with_retry(
    client: httpx.AsyncClient,
    base_url: str,
    product_code: str,
    retry_attempts: int = 3,
    retry_delay: float = 1.0,
) -> ProductAttributes:
    """Try up to ``retry_attempts`` times, sleeping ``retry_delay * attempt`` between tries."""
    for attempt in range(1, retry_attempts + 1):
        try:
            return await fetch_attributes(client, base_url, product_code)
        except AttributeFetchError:
            if attempt >= retry_attempts:
                raise
            log.debug(f"  {DIM}Retry {attempt}/{retry_attempts} for {product_code}{RESET}")
            await asyncio.sleep(retry_delay * attempt)
    raise AttributeFetchError(f"No attempts made for product {product_code}")


def _result_dict(product: Product) -> dict:
    data = product.to_json_dict()
    # Failed products keep an explicit "attributes": null
    data.setdefault("attributes", None)
    return data


def write_checkpoint(results: list[Product | None], path: str | Path) -> None:
    done = [_result_dict(p) for p in results if p is not None]
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    with open(tmp, "w", encoding="utf-8") as f:
        json.dump(done, f, indent=2, ensure_ascii=False)
    tmp.replace(path)


async def fetch_all_attributes(
    products: list[Product],
    *,
    base_url: str | None = None,
    concurrency: int | None = None,
    retry_attempts: int | None = None,
    retry_delay: float | None = None,
    checkpoint_path: str | Path | None = None,
    checkpoint_every: int | None = None,
    on_progress: ProgressCallback | None = None,
    client: httpx.AsyncClient | None = None,
) -> FetchReport:
    """Fetch attributes for every product; results keep the input order."""
    base_url = base_url or settings.attribute_api_base
    concurrency = concurrency or settings.fetch_concurrency
    retry_attempts = retry_attempts or settings.fetch_retry_attempts
    retry_delay = settings.fetch_retry_delay_ms / 1000.0 if retry_delay is None else retry_delay
    checkpoint_every = checkpoint_every or settings.fetch_checkpoint_every

    log.info(f"{BOLD}FETCH ATTRIBUTES{RESET} — {len(products)} products (concurrency={concurrency})")

    semaphore = asyncio.Semaphore(concurrency)
    results: list[Product | None] = [None] * len(products)
    errors: list[FetchError] = []
    processed = 0
    start = time.monotonic()

    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(timeout=settings.fetch_timeout_s)

    async def _process(index: int, product: Product) -> None:
        nonlocal processed
        async with semaphore:
            try:
                attributes = await fetch_with_retry(
                    client, base_url, product.product_code, retry_attempts, retry_delay
                )
                results[index] = product.model_copy(
                    update={"attributes": attributes, "attribute_error": None}
                )
            except AttributeFetchError as e:
                errors.append(FetchError(product_code=product.product_code, error=str(e)))
                log.error(f"  {RED}✗{RESET} Error processing {product.product_code}: {e}")
                results[index] = product.model_copy(
                    update={"attributes": None, "attribute_error": str(e)}
                )

        processed += 1
        if on_progress is not None:
            on_progress(FetchProgress(
                processed=processed,
                total=len(products),
                errors=len(errors),
                elapsed=time.monotonic() - start,
            ))
        if checkpoint_path is not None and processed % checkpoint_every == 0:
            write_checkpoint(results, checkpoint_path)

    try:
        await asyncio.gather(*(_process(i, p) for i, p in enumerate(products)))
    finally:
        if owns_client:
            await client.aclose()

    if checkpoint_path is not None:
        Path(checkpoint_path).unlink(missing_ok=True)

    elapsed = time.monotonic() - start
    ok = len(products) - len(errors)
    color = GREEN if not errors else YELLOW
    log.info(
        f"\n{BOLD}Fetch complete{RESET} in {elapsed / 60:.2f} min — "
        f"{color}{ok}/{len(products)}{RESET} succeeded, {len(errors)} errors"
    )
    return FetchReport(
        results=[r for r in results if r is not None],
        errors=errors,
        elapsed=elapsed,
    )


def log_progress(progress: FetchProgress) -> None:
    """Default progress callback: one log line every 10 products and at the end."""
    if progress.processed % 10 == 0 or progress.processed == progress.total:
        log.info(f"  {GREEN}▸{RESET} " + format_progress(
            progress.processed, progress.total, progress.errors, progress.elapsed
        ))


def write_fetch_results(
    report: FetchReport,
    results_path: str | Path,
    errors_path: str | Path | None = None,
) -> None:
    """Write the results file and, when anything failed, the error report."""
    results_path = Path(results_path)
    results_path.parent.mkdir(parents=True, exist_ok=True)
    with open(results_path, "w", encoding="utf-8") as f:
        json.dump([_result_dict(p) for p in report.results], f, indent=2, ensure_ascii=False)
    log.info(f"  {GREEN}✓{RESET} Results saved to: {results_path}")

    if report.errors and errors_path is not None:
        errors_path = Path(errors_path)
        errors_path.parent.mkdir(parents=True, exist_ok=True)
        with open(errors_path, "w", encoding="utf-8") as f:
            json.dump([e.to_json_dict() for e in report.errors], f, indent=2, ensure_ascii=False)
        log.info(f"  {YELLOW}–{RESET} Error report saved to: {errors_path}")
