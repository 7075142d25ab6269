"""Tests for MetadataPublisher (Pinata), with httpx mocked."""

from __future__ import annotations

import json

import httpx
import pytest
from pytest_httpx import HTTPXMock

from receiptoverse.errors import StorageUploadError
from receiptoverse.storage.publisher import MetadataPublisher

PIN_URL = "https://api.pinata.cloud/pinning/pinFileToIPFS"
CID = "QmYwAPJzv5CZsnA625s3Xf2nemtYgPpHdWEz79ojWnPbdG"
DOCUMENT = {"name": "Receipt from Cafe X", "properties": {"total": 4.5}}


def _publisher() -> MetadataPublisher:
    return MetadataPublisher(jwt="test-jwt")


class TestPublishSuccess:
    @pytest.mark.asyncio
    async def test_returns_gateway_uri(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(method="POST", url=PIN_URL, json={"IpfsHash": CID})
        uri = await _publisher().publish(DOCUMENT, "receipt-1.json")
        assert uri == f"https://gateway.pinata.cloud/ipfs/{CID}"

    @pytest.mark.asyncio
    async def test_sends_bearer_and_file(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(method="POST", url=PIN_URL, json={"IpfsHash": CID})
        await _publisher().publish(DOCUMENT, "receipt-1.json")

        request = httpx_mock.get_requests()[0]
        assert request.headers["Authorization"] == "Bearer test-jwt"
        assert request.headers["Content-Type"].startswith("multipart/form-data")
        body = request.content.decode("utf-8")
        assert 'filename="receipt-1.json"' in body
        assert json.dumps(DOCUMENT, indent=2) in body
        assert "receipt_nft_metadata" in body

    @pytest.mark.asyncio
    async def test_custom_gateway(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(method="POST", url=PIN_URL, json={"IpfsHash": CID})
        publisher = MetadataPublisher(jwt="j", gateway_url="https://ipfs.example.com/")
        uri = await publisher.publish(DOCUMENT, "r.json")
        assert uri == f"https://ipfs.example.com/ipfs/{CID}"


class TestPublishFailure:
    @pytest.mark.asyncio
    async def test_http_error_preserves_upstream_message(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(
            method="POST",
            url=PIN_URL,
            status_code=401,
            json={"error": {"reason": "INVALID_CREDENTIALS"}},
        )
        with pytest.raises(StorageUploadError) as exc_info:
            await _publisher().publish(DOCUMENT, "r.json")
        assert exc_info.value.code == "HTTP_401"
        assert "INVALID_CREDENTIALS" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_timeout(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_exception(httpx.ReadTimeout("slow"), method="POST", url=PIN_URL)
        with pytest.raises(StorageUploadError) as exc_info:
            await _publisher().publish(DOCUMENT, "r.json")
        assert exc_info.value.code == "TIMEOUT"

    @pytest.mark.asyncio
    async def test_connection_error(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_exception(httpx.ConnectError("refused"), method="POST", url=PIN_URL)
        with pytest.raises(StorageUploadError) as exc_info:
            await _publisher().publish(DOCUMENT, "r.json")
        assert exc_info.value.code == "CONNECTION_FAILED"

    @pytest.mark.asyncio
    async def test_missing_hash(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(method="POST", url=PIN_URL, json={"ok": True})
        with pytest.raises(StorageUploadError) as exc_info:
            await _publisher().publish(DOCUMENT, "r.json")
        assert exc_info.value.code == "INVALID_RESPONSE"

    @pytest.mark.asyncio
    async def test_empty_filename_rejected(self) -> None:
        with pytest.raises(ValueError):
            await _publisher().publish(DOCUMENT, "")
