"""AI trade review — Gemini API integration.

Builds the review request from a draft trade (a plain-text summary of the
form plus an optional chart screenshot), sends it to Google's
``generateContent`` endpoint over ``httpx``, and returns the model's text.

The reviewer is a fallible outside service.  :meth:`TradeAnalyzer.analyze`
never raises: a missing key, network error, HTTP error or unusable body is
logged and replaced by :data:`ANALYSIS_FALLBACK`, so saving a trade never
depends on the review succeeding.  It also never retries.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import BaseModel

from trade_journal.core.config import AnalysisConfig
from trade_journal.journal.record import TradeFormData

from .errors import AnalysisUnavailableError

logger = logging.getLogger(__name__)

ANALYSIS_FALLBACK = (
    "Unable to complete AI analysis at this time. "
    "Please check your API key or internet connection."
)
NO_ANALYSIS_TEXT = "No analysis generated."

DEFAULT_IMAGE_MIME = "image/jpeg"

_PROMPT_TEMPLATE = """\
You are a professional senior trading mentor with 20 years of experience in technical analysis.
Please analyze this trade based on the user's notes and the attached chart screenshot (if available).

Trade Details:
{details}

Please provide:
1. A critique of the market structure visible (if image provided).
2. Validation of the entry model.
3. Psychology check based on the outcome.
4. Constructive feedback for improvement.

Keep the response concise, bulleted, and professional."""


# ---------------------------------------------------------------------------
# Request building
# ---------------------------------------------------------------------------


class AnalysisRequest(BaseModel):
    """Exact input handed to the review service."""

    prompt: str
    image_base64: str | None = None
    mime_type: str = DEFAULT_IMAGE_MIME

    def to_payload(self) -> dict[str, Any]:
        """Body for a Gemini ``generateContent`` call."""
        parts: list[dict[str, Any]] = [{"text": self.prompt}]
        if self.image_base64:
            parts.append({
                "inline_data": {
                    "mime_type": self.mime_type,
                    "data": self.image_base64,
                }
            })
        return {"contents": [{"parts": parts}]}


def split_data_url(image: str) -> tuple[str, str]:
    """Split ``data:image/png;base64,AAAA`` into ``("image/png", "AAAA")``.

    A bare base64 string is returned as-is with the default JPEG type.
    """
    if image.startswith("data:") and "," in image:
        header, data = image.split(",", 1)
        mime = header[len("data:"):].split(";", 1)[0] or DEFAULT_IMAGE_MIME
        return mime, data
    return DEFAULT_IMAGE_MIME, image


def build_trade_context(form: TradeFormData) -> str:
    """Plain-text trade summary sent alongside the screenshot."""
    return form.analysis_context()


def build_analysis_request(context: str, image: str | None = None) -> AnalysisRequest:
    """Wrap *context* in the mentor prompt and attach the optional image."""
    request = AnalysisRequest(prompt=_PROMPT_TEMPLATE.format(details=context))
    if image:
        mime, data = split_data_url(image)
        request.image_base64 = data
        request.mime_type = mime
    return request


def extract_text(body: Any) -> str:
    """Concatenate the text parts of the first candidate.

    Returns an empty string when the body has no text.

    Raises
    ------
    ValueError
        *body* does not have the ``generateContent`` response shape.
    """
    if not isinstance(body, dict):
        raise ValueError("response body is not a JSON object")
    candidates = body.get("candidates") or []
    if not candidates:
        return ""
    try:
        parts = candidates[0].get("content", {}).get("parts", [])
        return "".join(p.get("text", "") for p in parts if isinstance(p, dict)).strip()
    except AttributeError as exc:
        raise ValueError(f"unexpected response shape: {exc}") from exc


# ---------------------------------------------------------------------------
# Collaborator
# ---------------------------------------------------------------------------


class TradeAnalyzer:
    """Calls the review service for one draft trade at a time.

    Parameters
    ----------
    config:
        Model name, endpoint, key env var and timeout.
    api_key:
        Explicit key; defaults to ``config.api_key`` (read from the env).
    client:
        Shared ``httpx.AsyncClient``.  When omitted a client is opened and
        closed per call.
    """

    def __init__(
        self,
        config: AnalysisConfig | None = None,
        *,
        api_key: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config or AnalysisConfig()
        self._api_key = api_key
        self._client = client

    @property
    def api_key(self) -> str:
        return self._api_key if self._api_key is not None else self._config.api_key

    @property
    def endpoint(self) -> str:
        base = self._config.base_url.rstrip("/")
        return f"{base}/models/{self._config.model}:generateContent"

    async def analyze(self, image: str | None, context: str) -> str:
        """Return review text for the trade, or the fallback string."""
        request = build_analysis_request(context, image)
        try:
            text = await self.call_api(request)
        except AnalysisUnavailableError as exc:
            logger.warning("Trade analysis skipped: %s", exc)
            return ANALYSIS_FALLBACK
        except Exception:
            logger.exception("Trade analysis call failed")
            return ANALYSIS_FALLBACK

        if not text:
            logger.warning("Analysis service returned no text")
            return NO_ANALYSIS_TEXT
        logger.info(
            "Trade analysis received: %d chars, image=%s",
            len(text),
            request.image_base64 is not None,
        )
        return text

    async def call_api(self, request: AnalysisRequest) -> str:
        """POST *request* and return the response text (may be empty).

        Raises
        ------
        AnalysisUnavailableError
            No API key is configured.
        httpx.HTTPError
            Transport failure or non-2xx status.
        ValueError
            The body is not the expected JSON shape.
        """
        api_key = self.api_key
        if not api_key:
            raise AnalysisUnavailableError(
                f"{self._config.api_key_env} not set; cannot call the analysis service"
            )

        headers = {
            "x-goog-api-key": api_key,
            "content-type": "application/json",
        }
        payload = request.to_payload()

        if self._client is not None:
            resp = await self._client.post(self.endpoint, headers=headers, json=payload)
        else:
            async with httpx.AsyncClient(timeout=self._config.timeout_seconds) as http:
                resp = await http.post(self.endpoint, headers=headers, json=payload)

        resp.raise_for_status()
        return extract_text(resp.json())
