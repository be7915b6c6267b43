import json
import logging

from property_manager.core.logger import EndpointFilter, JsonFormatter, mask_id, mask_storage_key, sanitize


def test_sanitize_strips_line_breaks():
    assert sanitize("photo\r\n.jpg\tx") == "photo.jpg x"
    assert sanitize(None) == ""


def test_mask_id():
    assert mask_id("3f1c2b7a-9d1e-4c55-8a0b-6b7e2c91d0a3") == "3f1c2b7a-****"
    assert mask_id("short") == "short"
    assert mask_id(None) == ""


def test_mask_storage_key():
    key = "3f1c2b7a-9d1e-4c55-8a0b-6b7e2c91d0a3/properties/2026/abc.jpg"
    assert mask_storage_key(key) == "3f1c2b7a-****/properties/2026/abc.jpg"
    assert mask_storage_key("no-slash") == "no-slash"


def test_mask_storage_key_masks_every_identifier_segment():
    key = "b9185c04-1111-4c55-8a0b-6b7e2c91d0a3/../18483de7-bc73-4c55-8a0b-6b7e2c91d0a3/properties/2026/abc.jpg"
    assert mask_storage_key(key) == "b9185c04-****/../18483de7-****/properties/2026/abc.jpg"


def test_json_formatter():
    record = logging.LogRecord("property_manager", logging.INFO, __file__, 1, "hello %s", ("world",), None)
    payload = json.loads(JsonFormatter().format(record))
    assert payload["message"] == "hello world"
    assert payload["level"] == "INFO"


def test_endpoint_filter_drops_metrics():
    metrics = logging.LogRecord("uvicorn.access", logging.INFO, __file__, 1, "GET /metrics 200", None, None)
    photos = logging.LogRecord("uvicorn.access", logging.INFO, __file__, 1, "GET /api/v1/properties 200", None, None)
    assert EndpointFilter().filter(metrics) is False
    assert EndpointFilter().filter(photos) is True
