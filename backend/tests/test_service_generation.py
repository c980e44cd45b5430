"""Tests for GenerationClient (hosted img2img model)."""
import asyncio
import base64
import random
import time
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, patch

import httpx
import pytest

from app.core.config import Settings
from app.models.stylize import GenerationRequest, GenerationResult
from app.services.generation import SEED_RANGE, GenerationClient

IMAGE_URL = "https://space.example/file=/tmp/out.png"


def _request(**kwargs: Any) -> GenerationRequest:
    defaults: dict[str, Any] = {
        "image_bytes": b"\x89PNG sketch",
        "mime_type": "image/png",
        "prompt": "Create a Studio Ghibli style artwork",
        "iterations": 3,
        "strength": 0.8,
        "seed": 42,
    }
    defaults.update(kwargs)
    return GenerationRequest(**defaults)


def _http_client(status_code: int = 200, content: bytes = b"remote-image", headers: dict | None = None) -> httpx.Client:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.host == "space.example"
        return httpx.Response(status_code, content=content, headers=headers or {})

    return httpx.Client(transport=httpx.MockTransport(handler))


@pytest.fixture
def gradio_client():
    """Patch gradio_client.Client; yields the connected client mock."""
    with patch("app.services.generation.Client") as client_cls:
        yield client_cls


def _generate(client: GenerationClient, request: GenerationRequest | None = None) -> GenerationResult:
    return asyncio.run(client.generate(request or _request()))


class TestGenerate:
    def test_bare_string_is_wrapped(self, gradio_client: MagicMock) -> None:
        gradio_client.return_value.predict.return_value = "iVBORw0KGgo="
        result = _generate(GenerationClient(space="test/space"))
        assert result.success
        assert result.image_data_url == "data:image/png;base64,iVBORw0KGgo="
        assert result.image_url is None

    def test_data_url_passes_through(self, gradio_client: MagicMock) -> None:
        gradio_client.return_value.predict.return_value = "data:image/jpeg;base64,AAAA"
        result = _generate(GenerationClient(space="test/space"))
        assert result.image_data_url == "data:image/jpeg;base64,AAAA"

    def test_data_list_with_bare_string_is_wrapped(self, gradio_client: MagicMock) -> None:
        gradio_client.return_value.predict.return_value = {"data": ["some string not starting with data:"]}
        result = _generate(GenerationClient(space="test/space"))
        assert result.image_data_url == "data:image/png;base64,some string not starting with data:"

    def test_url_resource_is_fetched_and_encoded(self, gradio_client: MagicMock) -> None:
        gradio_client.return_value.predict.return_value = {"data": [{"url": IMAGE_URL}]}
        client = GenerationClient(
            space="test/space",
            http_client=_http_client(headers={"content-type": "image/jpeg"}),
        )
        result = _generate(client)
        expected = base64.b64encode(b"remote-image").decode()
        assert result.success
        assert result.image_data_url == f"data:image/jpeg;base64,{expected}"
        assert result.image_url == IMAGE_URL

    def test_url_resource_defaults_to_png(self, gradio_client: MagicMock) -> None:
        gradio_client.return_value.predict.return_value = [{"url": IMAGE_URL}]
        result = _generate(GenerationClient(space="test/space", http_client=_http_client()))
        assert result.image_data_url is not None
        assert result.image_data_url.startswith("data:image/png;base64,")

    def test_url_fetch_error_is_failure(self, gradio_client: MagicMock) -> None:
        gradio_client.return_value.predict.return_value = {"url": IMAGE_URL}
        result = _generate(GenerationClient(space="test/space", http_client=_http_client(status_code=404)))
        assert not result.success
        assert result.error_kind == "UpstreamUnavailable"

    def test_local_file_output_is_read(self, gradio_client: MagicMock, tmp_path: Path) -> None:
        """gradio_client downloads image outputs and returns the local path."""
        output = tmp_path / "result.jpg"
        output.write_bytes(b"jpeg-bytes")
        gradio_client.return_value.predict.return_value = str(output)
        result = _generate(GenerationClient(space="test/space", download_dir=str(tmp_path)))
        assert result.image_data_url == "data:image/jpeg;base64," + base64.b64encode(b"jpeg-bytes").decode()

    def test_file_data_path_is_read(self, gradio_client: MagicMock, tmp_path: Path) -> None:
        output = tmp_path / "result.png"
        output.write_bytes(b"png-bytes")
        gradio_client.return_value.predict.return_value = {"path": str(output), "url": None}
        result = _generate(GenerationClient(space="test/space", download_dir=str(tmp_path)))
        assert result.image_data_url == "data:image/png;base64," + base64.b64encode(b"png-bytes").decode()

    def test_file_outside_download_dir_is_not_read(self, gradio_client: MagicMock, tmp_path: Path) -> None:
        downloads = tmp_path / "downloads"
        downloads.mkdir()
        secret = tmp_path / "secret.txt"
        secret.write_bytes(b"do-not-read")
        gradio_client.return_value.predict.return_value = str(secret)
        result = _generate(GenerationClient(space="test/space", download_dir=str(downloads)))
        assert result.image_data_url == f"data:image/png;base64,{secret}"

    def test_traversal_out_of_download_dir_is_not_read(self, gradio_client: MagicMock, tmp_path: Path) -> None:
        downloads = tmp_path / "downloads"
        downloads.mkdir()
        (tmp_path / "secret.png").write_bytes(b"do-not-read")
        gradio_client.return_value.predict.return_value = {"path": str(downloads / ".." / "secret.png")}
        result = _generate(GenerationClient(space="test/space", download_dir=str(downloads)))
        assert not result.success
        assert result.error_kind == "UnexpectedResponse"

    @pytest.mark.parametrize("response", [42, None, [], {"foo": "bar"}, {"data": []}])
    def test_unexpected_shape_is_failure(self, gradio_client: MagicMock, response: object) -> None:
        gradio_client.return_value.predict.return_value = response
        result = _generate(GenerationClient(space="test/space"))
        assert not result.success
        assert result.error == "Unexpected API response"
        assert result.error_kind == "UnexpectedResponse"

    def test_predict_exception_is_failure(self, gradio_client: MagicMock) -> None:
        gradio_client.return_value.predict.side_effect = ConnectionError("space is sleeping")
        result = _generate(GenerationClient(space="test/space"))
        assert not result.success
        assert result.error == "space is sleeping"
        assert result.error_kind == "UpstreamUnavailable"

    def test_connect_exception_is_failure(self, gradio_client: MagicMock) -> None:
        gradio_client.side_effect = ValueError("Could not fetch config")
        result = _generate(GenerationClient(space="test/space"))
        assert not result.success
        assert result.error == "Could not fetch config"

    def test_timeout_is_failure(self) -> None:
        client = GenerationClient(space="test/space", timeout=0.05)

        def slow(request: GenerationRequest) -> GenerationResult:
            time.sleep(0.3)
            return GenerationResult.ok("data:image/png;base64,AA")

        with patch.object(client, "_generate_sync", side_effect=slow):
            result = _generate(client)
        assert not result.success
        assert result.error_kind == "UpstreamUnavailable"
        assert "timed out" in (result.error or "")

    def test_predict_call_arguments(self, gradio_client: MagicMock) -> None:
        predict = gradio_client.return_value.predict
        predict.return_value = "data:image/png;base64,AA"
        _generate(GenerationClient(space="test/space"), _request(iterations=5, seed=7, strength=0.1))

        args, kwargs = predict.call_args
        assert args[1:] == ("Create a Studio Ghibli style artwork", 5, 7, 0.1)
        assert kwargs == {"api_name": "/predict"}

    def test_connection_is_reused(self, gradio_client: MagicMock) -> None:
        gradio_client.return_value.predict.return_value = "data:image/png;base64,AA"
        client = GenerationClient(space="test/space", token="hf_x", download_dir="/tmp/outputs")
        _generate(client)
        _generate(client)
        gradio_client.assert_called_once_with(
            "test/space", token="hf_x", verbose=False, download_files="/tmp/outputs"
        )

    def test_empty_token_is_anonymous(self, gradio_client: MagicMock) -> None:
        gradio_client.return_value.predict.return_value = "data:image/png;base64,AA"
        _generate(GenerationClient(space="test/space", token="", download_dir="/tmp/outputs"))
        gradio_client.assert_called_once_with(
            "test/space", token=None, verbose=False, download_files="/tmp/outputs"
        )


class TestGetRandomSeed:
    @pytest.mark.parametrize(("value", "expected"), [(12345, 12345), ("678", 678), (901.0, 901), ("55.9", 55)])
    def test_remote_seed(self, gradio_client: MagicMock, value: object, expected: int) -> None:
        gradio_client.return_value.predict.return_value = value
        client = GenerationClient(space="test/space")
        assert asyncio.run(client.get_random_seed()) == expected
        gradio_client.return_value.predict.assert_called_once_with(api_name="/get_random_value")

    def test_failure_falls_back_to_local_seed(self, gradio_client: MagicMock) -> None:
        gradio_client.return_value.predict.side_effect = RuntimeError("boom")
        client = GenerationClient(space="test/space", rng=random.Random(3))
        seed = asyncio.run(client.get_random_seed())
        assert seed == random.Random(3).randrange(SEED_RANGE)

    @pytest.mark.parametrize("value", [None, "", "not-a-number", [1, 2]])
    def test_unusable_value_falls_back(self, gradio_client: MagicMock, value: object) -> None:
        gradio_client.return_value.predict.return_value = value
        seed = asyncio.run(GenerationClient(space="test/space").get_random_seed())
        assert 0 <= seed < SEED_RANGE

    def test_connect_failure_falls_back(self, gradio_client: MagicMock) -> None:
        gradio_client.side_effect = OSError("no network")
        seed = asyncio.run(GenerationClient(space="test/space").get_random_seed())
        assert 0 <= seed < SEED_RANGE


def test_from_settings() -> None:
    settings = Settings(
        _env_file=None,
        gradio_space="me/space",
        hf_token="tok",
        generation_timeout_seconds=10,
        fetch_timeout_seconds=2,
        gradio_download_dir="/tmp/outputs",
    )
    client = GenerationClient.from_settings(settings)
    assert client.space == "me/space"
    assert client.token == "tok"
    assert client.timeout == 10
    assert client.fetch_timeout == 2
    assert client.predict_api_name == "/predict"
    assert client.download_dir == Path("/tmp/outputs")
