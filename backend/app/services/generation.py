"""Client for the hosted img2img model (Gradio Space)."""
import asyncio
import logging
import mimetypes
import random
import tempfile
import threading
from pathlib import Path
from typing import Any, Mapping, Optional

import httpx
from gradio_client import Client, handle_file

from app.core.config import Settings
from app.core.errors import UnexpectedResponse, UpstreamUnavailable
from app.models.stylize import GenerationRequest, GenerationResult
from app.utils.data_url import DEFAULT_MIME_TYPE, is_data_url, to_data_url, wrap_base64

logger = logging.getLogger(__name__)

SEED_RANGE = 1_000_000


class GenerationClient:
    """Sends sketches to the hosted model and normalises its answers into data URLs.

    ``generate`` and ``get_random_seed`` never raise: failures come back as a
    failed ``GenerationResult`` or a locally drawn seed respectively. The
    blocking Gradio and HTTP calls run in a worker thread bounded by
    ``timeout`` seconds.
    """

    def __init__(
        self,
        space: str,
        token: Optional[str] = None,
        predict_api_name: str = "/predict",
        seed_api_name: str = "/get_random_value",
        timeout: float = 120.0,
        fetch_timeout: float = 30.0,
        download_dir: Optional[str] = None,
        http_client: Optional[httpx.Client] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.space = space
        self.token = token or None
        self.predict_api_name = predict_api_name
        self.seed_api_name = seed_api_name
        self.timeout = timeout
        self.fetch_timeout = fetch_timeout
        self.download_dir = Path(download_dir or Path(tempfile.gettempdir()) / "sketch-stylizer")
        self._http_client = http_client
        self._rng = rng if rng is not None else random.Random()
        # Connected lazily on first use, then shared by all requests.
        self._client: Optional[Client] = None
        self._client_lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> "GenerationClient":
        return cls(
            space=settings.gradio_space,
            token=settings.hf_token,
            predict_api_name=settings.predict_api_name,
            seed_api_name=settings.seed_api_name,
            timeout=settings.generation_timeout_seconds,
            fetch_timeout=settings.fetch_timeout_seconds,
            download_dir=settings.gradio_download_dir,
        )

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        """Run one img2img prediction.

        Args:
            request: Source image, prompt and clamped generation parameters.

        Returns:
            Success with the image as a data URL, or failure with the error
            message and its kind (``UpstreamUnavailable`` / ``UnexpectedResponse``).
        """
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self._generate_sync, request), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            message = f"Generation timed out after {self.timeout:g}s"
            logger.error(message, extra={"error_type": UpstreamUnavailable.__name__})
            return GenerationResult.failure(message, UpstreamUnavailable.__name__)
        except UnexpectedResponse as exc:
            logger.error("Generation failed: %s", exc, extra={"error_type": type(exc).__name__})
            return GenerationResult.failure(exc.message, UnexpectedResponse.__name__)
        except Exception as exc:
            logger.error(
                "Generation failed: %s: %s",
                type(exc).__name__,
                exc,
                exc_info=True,
                extra={"error_type": type(exc).__name__},
            )
            return GenerationResult.failure(str(exc) or "Processing failed", UpstreamUnavailable.__name__)

    async def get_random_seed(self) -> int:
        """Ask the hosted model for a seed, falling back to a local one on any failure."""
        try:
            value = await asyncio.wait_for(
                asyncio.to_thread(self._fetch_seed), timeout=self.timeout
            )
        except Exception as exc:
            logger.warning("Seed fetch failed (%s), using local seed", type(exc).__name__)
            return self._local_seed()

        if not value:
            return self._local_seed()
        try:
            return int(float(str(value)))
        except (TypeError, ValueError, OverflowError):
            logger.warning("Unparseable seed %r, using local seed", value)
            return self._local_seed()

    def _local_seed(self) -> int:
        return self._rng.randrange(SEED_RANGE)

    def _connect(self) -> Client:
        with self._client_lock:
            if self._client is None:
                logger.info("Connecting to Gradio space %s", self.space)
                self._client = Client(
                    self.space,
                    token=self.token,
                    verbose=False,
                    download_files=str(self.download_dir),
                )
            return self._client

    def _fetch_seed(self) -> Any:
        return self._connect().predict(api_name=self.seed_api_name)

    def _generate_sync(self, request: GenerationRequest) -> GenerationResult:
        result = self._predict(request)
        return self._normalize(result)

    def _predict(self, request: GenerationRequest) -> Any:
        """Call the prediction endpoint with the sketch stored in a temporary file."""
        client = self._connect()
        suffix = mimetypes.guess_extension(request.mime_type) or ".png"
        with tempfile.TemporaryDirectory(prefix="sketch-") as tmp_dir:
            image_path = Path(tmp_dir) / f"input{suffix}"
            image_path.write_bytes(request.image_bytes)
            logger.debug(
                "predict: iterations=%d strength=%.2f seed=%d",
                request.iterations,
                request.strength,
                request.seed,
            )
            return client.predict(
                handle_file(str(image_path)),
                request.prompt,
                request.iterations,
                request.seed,
                request.strength,
                api_name=self.predict_api_name,
            )

    def _normalize(self, result: Any) -> GenerationResult:
        """Turn whatever the hosted model returned into a data URL result.

        Raises:
            UnexpectedResponse: When the shape is not recognised.
        """
        value = result
        if isinstance(value, Mapping) and "data" in value:
            value = value["data"]
        if isinstance(value, (list, tuple)):
            if not value:
                raise UnexpectedResponse("Unexpected API response")
            value = value[0]

        if isinstance(value, Mapping):
            url = value.get("url")
            if url:
                data, mime_type = self._fetch(url)
                return GenerationResult.ok(to_data_url(data, mime_type), image_url=url)
            path = value.get("path")
            if path and self._is_download(path):
                return GenerationResult.ok(self._read_file(path))
            raise UnexpectedResponse("Unexpected API response")

        if isinstance(value, str):
            if is_data_url(value):
                return GenerationResult.ok(value)
            if self._is_download(value):
                return GenerationResult.ok(self._read_file(value))
            return GenerationResult.ok(wrap_base64(value))

        raise UnexpectedResponse("Unexpected API response")

    def _fetch(self, url: str) -> tuple[bytes, str]:
        if self._http_client is not None:
            response = self._http_client.get(url)
        else:
            with httpx.Client(timeout=self.fetch_timeout, follow_redirects=True) as client:
                response = client.get(url)
        response.raise_for_status()
        content_type = response.headers.get("content-type") or DEFAULT_MIME_TYPE
        return response.content, content_type.split(";")[0].strip()

    def _is_download(self, path: str) -> bool:
        """True for existing files inside the gradio download directory only."""
        try:
            resolved = Path(path).resolve()
            return resolved.is_file() and resolved.is_relative_to(self.download_dir.resolve())
        except (OSError, ValueError):
            return False

    @staticmethod
    def _read_file(path: str) -> str:
        mime_type, _ = mimetypes.guess_type(path)
        return to_data_url(Path(path).read_bytes(), mime_type or DEFAULT_MIME_TYPE)
