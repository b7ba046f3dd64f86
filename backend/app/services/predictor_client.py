r"""backend/app/services/predictor_client.py

Clients that ask a remote model for one product's demand prediction.

Both clients return a tagged :class:`PredictResult` instead of raising: any
transport failure, timeout or non-2xx status becomes ``PredictResult.failure``
with a normalised message.  The only exception that escapes ``predict`` is
:class:`ConfigurationError`, raised when the endpoint is not configured at all.

* :class:`HttpPredictorClient` posts ``{productId, currentStock}`` to
  ``{base_url}{path}`` and expects ``{"data": [...]}`` back.
* :class:`GradioPredictorClient` calls the hosted Gradio model directly,
  feeding it the training file referenced by ``TRAINING_LINK``.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, List, Optional, Protocol

import requests
from gradio_client import Client, handle_file

from ..core.errors import ConfigurationError

LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True)
class PredictResult:
    """Outcome of a single predictor call."""

    ok: bool
    data: Optional[List[Any]] = None
    error: Optional[str] = None
    status_code: Optional[int] = None

    @classmethod
    def success(cls, data: List[Any], status_code: Optional[int] = None) -> "PredictResult":
        return cls(ok=True, data=data, status_code=status_code)

    @classmethod
    def failure(cls, error: str, status_code: Optional[int] = None) -> "PredictResult":
        return cls(ok=False, error=error, status_code=status_code)


class Predictor(Protocol):
    def predict(self, product_id: str, current_stock: int) -> PredictResult:
        ...


def _validate_inputs(product_id: object, current_stock: object) -> Optional[str]:
    if not isinstance(product_id, str) or not product_id.strip():
        return "productId must be a non-empty string"
    if isinstance(current_stock, bool) or not isinstance(current_stock, int) or current_stock < 0:
        return "currentStock must be a non-negative integer"
    return None


def _as_sequence(value: Any) -> List[Any]:
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


class HttpPredictorClient:
    """Call a prediction endpoint over HTTP with a bounded timeout."""

    def __init__(
        self,
        base_url: Optional[str],
        path: str = "/api/v1/predict",
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
        headers: Optional[dict] = None,
    ) -> None:
        self.base_url = (base_url or "").rstrip("/")
        self.path = path if path.startswith("/") else f"/{path}"
        self.timeout = timeout
        self.session = session or requests.Session()
        self.headers = dict(headers or {})

    @property
    def url(self) -> str:
        return f"{self.base_url}{self.path}"

    def predict(self, product_id: str, current_stock: int) -> PredictResult:
        if not self.base_url:
            raise ConfigurationError("PREDICTOR_BASE_URL environment variable is not set")

        invalid = _validate_inputs(product_id, current_stock)
        if invalid:
            return PredictResult.failure(invalid)

        LOGGER.debug("Requesting prediction for %s with stock %s", product_id, current_stock)
        try:
            response = self.session.post(
                self.url,
                json={"productId": product_id, "currentStock": current_stock},
                headers=self.headers,
                timeout=self.timeout,
            )
        except requests.Timeout:
            return PredictResult.failure(f"Request timed out after {self.timeout:g}s")
        except requests.RequestException as exc:
            return PredictResult.failure(str(exc) or exc.__class__.__name__)

        try:
            payload = response.json()
        except ValueError:
            payload = {}
        if not isinstance(payload, dict):
            payload = {}

        if not response.ok:
            message = payload.get("error")
            if not isinstance(message, str) or not message:
                message = f"HTTP {response.status_code}"
            return PredictResult.failure(message, status_code=response.status_code)

        data = payload.get("data")
        if data is None:
            return PredictResult.failure("Response did not include prediction data", response.status_code)
        return PredictResult.success(_as_sequence(data), status_code=response.status_code)


class GradioPredictorClient:
    """Call the Gradio-hosted model's ``/predict`` endpoint."""

    def __init__(
        self,
        gradio_link: Optional[str],
        training_link: Optional[str],
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        api_name: str = "/predict",
    ) -> None:
        self.gradio_link = gradio_link
        self.training_link = training_link
        self.timeout = timeout
        self.api_name = api_name
        self._client: Optional[Client] = None
        self._lock = threading.Lock()

    def _check_configuration(self) -> None:
        if not self.gradio_link:
            raise ConfigurationError("GRADIO_LINK environment variable is not set")
        if not self.training_link:
            raise ConfigurationError("TRAINING_LINK environment variable is not set")

    def _connect(self) -> Client:
        with self._lock:
            if self._client is None:
                self._client = Client(self.gradio_link, verbose=False)
            return self._client

    def predict(self, product_id: str, current_stock: int) -> PredictResult:
        self._check_configuration()

        invalid = _validate_inputs(product_id, current_stock)
        if invalid:
            return PredictResult.failure(invalid)

        try:
            client = self._connect()
            job = client.submit(
                file=handle_file(self.training_link),
                product_id=product_id,
                current_stock=current_stock,
                api_name=self.api_name,
            )
            result = job.result(timeout=self.timeout)
        except TimeoutError:
            return PredictResult.failure(f"Prediction timed out after {self.timeout:g}s")
        except Exception as exc:
            LOGGER.warning("Gradio prediction failed for %s: %s", product_id, exc)
            return PredictResult.failure(str(exc) or exc.__class__.__name__)

        return PredictResult.success(_as_sequence(result))
