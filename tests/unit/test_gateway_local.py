"""
Unit tests for the local fallback gateway and gateway selection.
"""
import asyncio
import json

import pytest

from ordering.errors import StorageError, SubmissionError
from ordering.gateway import LocalFallbackGateway, RemoteGateway, create_gateway
from ordering.storage import MemoryStorage


@pytest.mark.unit
class TestLocalFallbackGateway:

    def test_submit_appends_and_returns_descriptor(self, local_gateway, sample_record):
        payload = sample_record.to_payload()
        result = asyncio.run(local_gateway.submit(payload))

        assert result == {"ok": True, "source": "local_storage", "data": payload}
        stored = json.loads(local_gateway.storage.get("purchaseRecords"))
        assert len(stored) == 1

    def test_round_trip_is_field_for_field(self, local_gateway, sample_record):
        payload = sample_record.to_payload()
        asyncio.run(local_gateway.submit(payload))

        listed = asyncio.run(local_gateway.list())
        assert listed == [payload]

    def test_submissions_keep_order(self, local_gateway, sample_record):
        first = sample_record.to_payload()
        second = dict(first, poNumber="PO-2")
        asyncio.run(local_gateway.submit(first))
        asyncio.run(local_gateway.submit(second))

        assert [r["poNumber"] for r in asyncio.run(local_gateway.list())] == [
            "PO-251019-1432", "PO-2",
        ]

    def test_get_by_id_is_one_based_position(self, local_gateway, sample_record):
        first = sample_record.to_payload()
        second = dict(first, poNumber="PO-2")
        asyncio.run(local_gateway.submit(first))
        asyncio.run(local_gateway.submit(second))

        assert asyncio.run(local_gateway.get_by_id(1))["poNumber"] == "PO-251019-1432"
        assert asyncio.run(local_gateway.get_by_id("2"))["poNumber"] == "PO-2"

    @pytest.mark.parametrize("record_id", [0, 3, -1, "abc", None, 1.5])
    def test_get_by_id_misses_return_none(self, local_gateway, sample_record, record_id):
        asyncio.run(local_gateway.submit(sample_record.to_payload()))
        assert asyncio.run(local_gateway.get_by_id(record_id)) is None

    @pytest.mark.parametrize("raw", ["not json", '{"a": 1}', "42"])
    def test_malformed_storage_reads_as_empty(self, memory_storage, raw):
        memory_storage.set("purchaseRecords", raw)
        gateway = LocalFallbackGateway(memory_storage, "purchaseRecords", latency_seconds=0)

        assert asyncio.run(gateway.list()) == []

    def test_malformed_storage_is_replaced_on_submit(self, memory_storage, sample_record):
        memory_storage.set("purchaseRecords", "not json")
        gateway = LocalFallbackGateway(memory_storage, "purchaseRecords", latency_seconds=0)
        asyncio.run(gateway.submit(sample_record.to_payload()))

        assert len(asyncio.run(gateway.list())) == 1

    def test_storage_full_surfaces_as_submission_error(self, sample_record):
        gateway = LocalFallbackGateway(MemoryStorage(quota_bytes=50), "purchaseRecords", latency_seconds=0)

        with pytest.raises(StorageError):
            asyncio.run(gateway.submit(sample_record.to_payload()))
        assert issubclass(StorageError, SubmissionError)
        assert asyncio.run(gateway.list()) == []

    def test_latency_is_simulated(self, memory_storage, sample_record):
        gateway = LocalFallbackGateway(memory_storage, "purchaseRecords", latency_seconds=0.05)

        async def scenario():
            loop = asyncio.get_running_loop()
            start = loop.time()
            await gateway.submit(sample_record.to_payload())
            return loop.time() - start

        assert asyncio.run(scenario()) >= 0.04

    def test_clear(self, local_gateway, sample_record):
        asyncio.run(local_gateway.submit(sample_record.to_payload()))
        local_gateway.clear()
        assert asyncio.run(local_gateway.list()) == []


@pytest.mark.unit
class TestCreateGateway:

    def test_local_mode_without_api_url(self, test_config, memory_storage):
        gateway = create_gateway(test_config, "sale", memory_storage)

        assert isinstance(gateway, LocalFallbackGateway)
        assert gateway.mode == "local"
        assert gateway.storage_key == "salesRecords"
        assert gateway.storage is memory_storage

    def test_local_mode_defaults_to_sqlite_storage(self, test_config):
        from ordering.storage import SqliteStorage

        gateway = create_gateway(test_config, "purchase")
        assert isinstance(gateway.storage, SqliteStorage)
        assert gateway.storage_key == "purchaseRecords"

    def test_remote_mode_with_api_url(self, test_config):
        test_config.api_base_url = "http://orders.example/api/"
        gateway = create_gateway(test_config, "purchase")

        assert isinstance(gateway, RemoteGateway)
        assert gateway.mode == "remote"
        assert gateway.url == "http://orders.example/api/purchases"

    def test_remote_headers_from_config(self, test_config):
        test_config.api_base_url = "http://orders.example"
        test_config.api_headers_json = '{"Authorization": "Bearer t0ken"}'
        gateway = create_gateway(test_config, "sale")

        assert gateway.url == "http://orders.example/sales"
        assert gateway.headers == {"Authorization": "Bearer t0ken"}
