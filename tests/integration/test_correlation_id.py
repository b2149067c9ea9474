import logging
import uuid

import pytest

pytestmark = pytest.mark.integration


class TestCorrelationIdMiddleware:
    def test_echoes_scanner_request_id(self, client):
        scanner_id = "qr-scan-op-20240315-0007"
        response = client.get("/health", HTTP_X_REQUEST_ID=scanner_id)
        assert response["X-Request-ID"] == scanner_id

    def test_generates_uuid4_when_missing(self, client):
        request_id = client.get("/health")["X-Request-ID"]
        assert str(uuid.UUID(request_id, version=4)) == request_id

    def test_header_set_on_api_responses(self, api_client_with_correlation):
        api_client, cid = api_client_with_correlation
        response = api_client.get("/api/v1/orders/")
        assert response.status_code == 401
        assert response["X-Request-ID"] == cid

    def test_correlation_id_bound_to_request_logs(self, client, caplog):
        scanner_id = "qr-scan-log-check"
        with caplog.at_level(logging.INFO):
            client.get("/health", HTTP_X_REQUEST_ID=scanner_id)
        messages = [record.getMessage() for record in caplog.records]
        assert any(scanner_id in message for message in messages), messages
