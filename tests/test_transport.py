"""Tests for the HTTP transport."""

import json

import httpx
import pytest

from kvcache.exceptions import TransportError
from kvcache.services.routing import CacheNode
from kvcache.services.transport import HttpTransport, NodeHealth

NODE = CacheNode("http://node-a:8081")


def transport_for(handler):
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return HttpTransport(client=client)


def test_write_posts_json_body():
    seen = {}

    def handler(request):
        seen["method"] = request.method
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(201)

    transport_for(handler).write(NODE, "k1", "v1")

    assert seen == {
        "method": "POST",
        "url": "http://node-a:8081/put",
        "body": {"key": "k1", "value": "v1"},
    }


@pytest.mark.parametrize("status", [400, 404, 500, 503])
def test_write_non_success_status_is_transport_error(status):
    transport = transport_for(lambda request: httpx.Response(status))
    with pytest.raises(TransportError) as excinfo:
        transport.write(NODE, "k", "v")
    assert excinfo.value.node == NODE


def test_write_timeout_is_transport_error():
    def handler(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    with pytest.raises(TransportError):
        transport_for(handler).write(NODE, "k", "v")


def test_read_found_and_missing():
    def handler(request):
        if request.url.path == "/get/present":
            return httpx.Response(200, text="hello")
        return httpx.Response(404)

    transport = transport_for(handler)
    hit = transport.read(NODE, "present")
    assert hit.found and hit.value == "hello"

    miss = transport.read(NODE, "absent")
    assert not miss.found and miss.value is None


def test_read_quotes_key_in_path():
    seen = {}

    def handler(request):
        seen["raw_path"] = request.url.raw_path
        return httpx.Response(404)

    transport_for(handler).read(NODE, "a b/c")
    assert seen["raw_path"] == b"/get/a%20b%2Fc"


def test_read_errors_are_transport_errors():
    with pytest.raises(TransportError):
        transport_for(lambda request: httpx.Response(500)).read(NODE, "k")

    def refuse(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(TransportError):
        transport_for(refuse).read(NODE, "k")


def test_probe():
    assert transport_for(lambda request: httpx.Response(200, text="OK")).probe(NODE) == NodeHealth.UP
    assert transport_for(lambda request: httpx.Response(503)).probe(NODE) == NodeHealth.DOWN

    def refuse(request):
        raise httpx.ConnectError("refused", request=request)

    assert transport_for(refuse).probe(NODE) == NodeHealth.DOWN


def test_close_leaves_external_client_open():
    client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200)))
    HttpTransport(client=client).close()
    assert not client.is_closed

    owned = HttpTransport(timeout_seconds=0.5)
    owned.close()
    assert owned._client.is_closed
