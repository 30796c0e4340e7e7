"""
Integration tests for the remote gateway against a local HTTP server.
"""
import asyncio
import json
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest

from ordering.errors import TransportError
from ordering.gateway import RemoteGateway


class _OrdersHandler(BaseHTTPRequestHandler):
    """Answers according to the server's `responses` table and records requests."""

    def _reply(self):
        server = self.server
        length = int(self.headers.get("Content-Length") or 0)
        body = self.rfile.read(length) if length else b""
        server.requests.append({
            "method": self.command,
            "path": self.path,
            "headers": self.headers,
            "body": body,
        })
        status, payload = server.responses.get((self.command, self.path.split("?")[0]), (404, ""))
        data = payload if isinstance(payload, str) else json.dumps(payload)
        encoded = data.encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(encoded)))
        self.end_headers()
        self.wfile.write(encoded)

    do_GET = _reply
    do_POST = _reply

    def log_message(self, format, *args):
        pass


@pytest.fixture
def orders_server():
    server = ThreadingHTTPServer(("127.0.0.1", 0), _OrdersHandler)
    server.requests = []
    server.responses = {}
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield server
    server.shutdown()
    server.server_close()


def _base_url(server):
    host, port = server.server_address[:2]
    return f"http://{host}:{port}/api"


@pytest.mark.integration
class TestRemoteGateway:

    def test_submit_posts_payload_verbatim(self, orders_server, sample_record):
        orders_server.responses[("POST", "/api/purchases")] = (201, {"id": 17})
        gateway = RemoteGateway(_base_url(orders_server), "purchases",
                                headers={"Authorization": "Bearer t0ken"})
        payload = sample_record.to_payload()

        result = asyncio.run(gateway.submit(payload))

        assert result == {"id": 17}
        request = orders_server.requests[0]
        assert request["method"] == "POST"
        assert json.loads(request["body"]) == payload
        assert request["headers"]["Content-Type"].startswith("application/json")
        assert request["headers"]["Authorization"] == "Bearer t0ken"

    def test_server_error_raises_transport_error(self, orders_server, sample_record):
        orders_server.responses[("POST", "/api/purchases")] = (500, {"error": "boom"})
        gateway = RemoteGateway(_base_url(orders_server), "purchases")

        with pytest.raises(TransportError) as exc_info:
            asyncio.run(gateway.submit(sample_record.to_payload()))

        assert exc_info.value.status_code == 500
        assert "boom" in exc_info.value.response_excerpt
        assert exc_info.value.__cause__ is not None

    def test_unreachable_service_raises_transport_error(self, sample_record):
        gateway = RemoteGateway("http://127.0.0.1:9", "sales", timeout=2)

        with pytest.raises(TransportError) as exc_info:
            asyncio.run(gateway.submit(sample_record.to_payload()))
        assert exc_info.value.status_code is None

    def test_list_passes_only_given_query_params(self, orders_server):
        orders_server.responses[("GET", "/api/sales")] = (200, [{"invoiceNumber": "INV-1"}])
        gateway = RemoteGateway(_base_url(orders_server), "sales")

        assert asyncio.run(gateway.list(page=2, q="rahman")) == [{"invoiceNumber": "INV-1"}]
        assert asyncio.run(gateway.list()) == [{"invoiceNumber": "INV-1"}]

        paths = [r["path"] for r in orders_server.requests]
        assert paths == ["/api/sales?page=2&q=rahman", "/api/sales"]

    def test_get_by_id(self, orders_server):
        orders_server.responses[("GET", "/api/sales/42")] = (200, {"invoiceNumber": "INV-42"})
        gateway = RemoteGateway(_base_url(orders_server), "sales")

        assert asyncio.run(gateway.get_by_id(42)) == {"invoiceNumber": "INV-42"}

    def test_missing_record_is_a_transport_error(self, orders_server):
        gateway = RemoteGateway(_base_url(orders_server), "sales")

        with pytest.raises(TransportError) as exc_info:
            asyncio.run(gateway.get_by_id(404))
        assert exc_info.value.status_code == 404

    def test_opaque_response_bodies(self, orders_server, sample_record):
        orders_server.responses[("POST", "/api/purchases")] = (200, "saved")
        gateway = RemoteGateway(_base_url(orders_server), "purchases")
        assert asyncio.run(gateway.submit(sample_record.to_payload())) == "saved"

        orders_server.responses[("POST", "/api/purchases")] = (204, "")
        assert asyncio.run(gateway.submit(sample_record.to_payload())) is None
