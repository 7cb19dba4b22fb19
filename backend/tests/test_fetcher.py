import asyncio
import json

import httpx

from conftest import make_products

from product_families.fetcher import (
    attributes_url,
    fetch_all_attributes,
    fetch_with_retry,
    write_checkpoint,
    write_fetch_results,
)

BASE = "http://products.test/products"

SPEC_PAYLOAD = {"groups": [{"name": "Specifications", "attributes": [
    {"name": "Width", "values": ["600"], "uom": "mm"},
]}]}


def client_for(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def product_code(request):
    return request.url.path.split("/")[-2]


def test_attributes_url():
    assert attributes_url(BASE + "/", "123") == f"{BASE}/123/attributes"


def test_retry_until_success():
    calls = []

    def handler(request):
        calls.append(request.url.path)
        if len(calls) < 3:
            return httpx.Response(503)
        return httpx.Response(200, json=SPEC_PAYLOAD)

    async def run():
        async with client_for(handler) as client:
            return await fetch_with_retry(client, BASE, "1000", retry_attempts=3, retry_delay=0)

    attributes = asyncio.run(run())
    assert len(calls) == 3
    assert attributes.specifications().attributes[0].name == "Width"


def test_failures_recorded_and_kept():
    attempts = {}

    def handler(request):
        code = product_code(request)
        attempts[code] = attempts.get(code, 0) + 1
        if code == "1001":
            return httpx.Response(404)
        if code == "1002":
            return httpx.Response(200, text="not json")
        return httpx.Response(200, json=SPEC_PAYLOAD)

    products = make_products("Rail 600mm", "Rail 700mm", "Rail 800mm", "Rail 900mm")
    report = asyncio.run(fetch_all_attributes(
        products,
        base_url=BASE,
        concurrency=2,
        retry_attempts=2,
        retry_delay=0,
        client=client_for(handler),
    ))

    assert [p.product_code for p in report.results] == ["1000", "1001", "1002", "1003"]
    assert sorted(e.product_code for e in report.errors) == ["1001", "1002"]
    assert attempts["1001"] == attempts["1002"] == 2
    assert attempts["1000"] == 1

    failed = report.results[1]
    assert failed.attributes is None
    assert "HTTP 404" in failed.attribute_error
    assert report.results[0].attributes.specifications() is not None
    assert report.results[0].attribute_error is None


def test_progress_callback_and_checkpoint(tmp_path):
    seen = []
    checkpoint = tmp_path / "attributes.json.partial"

    def handler(request):
        return httpx.Response(200, json=SPEC_PAYLOAD)

    def on_progress(progress):
        seen.append((progress.processed, progress.total))
        assert progress.rate >= 0
        if progress.processed == 2:
            assert json.loads(checkpoint.read_text(encoding="utf-8"))[0]["productCode"] in {"1000", "1001", "1002"}

    products = make_products("A", "B", "C")
    report = asyncio.run(fetch_all_attributes(
        products,
        base_url=BASE,
        concurrency=1,
        retry_delay=0,
        checkpoint_path=checkpoint,
        checkpoint_every=1,
        on_progress=on_progress,
        client=client_for(handler),
    ))

    assert seen == [(1, 3), (2, 3), (3, 3)]
    assert len(report.results) == 3
    assert not checkpoint.exists()


def test_write_checkpoint_keeps_completed_only(tmp_path):
    products = make_products("A", "B")
    path = tmp_path / "checkpoint.json"
    write_checkpoint([products[0], None], path)
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data == [{"productCode": "1000", "productTitle": "A", "attributes": None}]


def test_write_fetch_results(tmp_path):
    def handler(request):
        if product_code(request) == "1001":
            return httpx.Response(500)
        return httpx.Response(200, json=SPEC_PAYLOAD)

    report = asyncio.run(fetch_all_attributes(
        make_products("A", "B"),
        base_url=BASE,
        retry_attempts=1,
        retry_delay=0,
        client=client_for(handler),
    ))
    results_path = tmp_path / "results.json"
    errors_path = tmp_path / "errors.json"
    write_fetch_results(report, results_path, errors_path)

    results = json.loads(results_path.read_text(encoding="utf-8"))
    assert results[0]["attributes"]["groups"][0]["name"] == "Specifications"
    assert results[1]["attributes"] is None
    assert results[1]["attributeError"] == "HTTP 500 for product 1001"

    errors = json.loads(errors_path.read_text(encoding="utf-8"))
    assert errors == [{"productCode": "1001", "error": "HTTP 500 for product 1001"}]
