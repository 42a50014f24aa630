"""FastAPI relay between front ends and the upstream completion API.

The relay keeps the provider API key on the server. It accepts
``{"messages": [...]}``, adds the credential, model and fixed sampling
settings, forwards the request upstream and returns the upstream JSON
verbatim. Failures come back as ``{"error", "details"}`` with HTTP 500.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from crispe import __version__
from crispe.core.config import get_config_value, load_config
from crispe.core.errors import MISSING_KEY_MESSAGE
from crispe.llm.adapter import MAX_TOKENS, TEMPERATURE
from crispe.llm.clients.openai import DEFAULT_BASE_URL, DEFAULT_MODEL
from crispe.relay.schemas import ErrorResponse, OptimizeRequest

logger = logging.getLogger(__name__)

UPSTREAM_FAILURE_MESSAGE = "Failed to generate prompt"


@dataclass
class RelaySettings:
    """Relay configuration.

    Attributes:
        api_key: Upstream provider key (None means requests are refused)
        upstream_url: Base URL of the OpenAI-compatible upstream API
        model: Upstream model name
        timeout: Upstream request timeout in seconds
    """

    api_key: Optional[str] = None
    upstream_url: str = DEFAULT_BASE_URL
    model: str = DEFAULT_MODEL
    timeout: float = 120.0

    @classmethod
    def from_config(cls) -> "RelaySettings":
        """Load settings from config.json with environment fallback."""
        config = load_config()
        return cls(
            api_key=get_config_value(["siliconflow", "api_key"], config=config),
            upstream_url=get_config_value(["siliconflow", "base_url"], default=DEFAULT_BASE_URL, config=config),
            model=get_config_value(["siliconflow", "model"], default=DEFAULT_MODEL, config=config),
            timeout=float(get_config_value(["siliconflow", "timeout"], default=120.0, config=config)),
        )


def _error(message: str, details: Optional[str] = None) -> JSONResponse:
    body = ErrorResponse(error=message, details=details).model_dump(exclude_none=True)
    return JSONResponse(status_code=500, content=body)


def create_app(
    settings: Optional[RelaySettings] = None,
    transport: Optional[httpx.BaseTransport] = None,
) -> FastAPI:
    """Build the relay application.

    Args:
        settings: Relay settings (loaded from config.json if None)
        transport: Optional httpx transport for the upstream client, mainly for tests

    Returns:
        FastAPI app exposing ``POST /api/optimize``
    """
    settings = settings or RelaySettings.from_config()

    origins = get_config_value(["relay", "allow_origins"], default=["http://localhost:5173"])
    if isinstance(origins, str):
        # RELAY_ALLOW_ORIGINS is comma-separated
        origins = [origin.strip() for origin in origins.split(",") if origin.strip()]

    app = FastAPI(title="CRISPE Relay", version=__version__)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_methods=["POST"],
        allow_headers=["*"],
    )

    @app.post("/api/optimize")
    def optimize(request: OptimizeRequest):
        if not settings.api_key:
            logger.error("Relay request refused: upstream API key missing")
            return _error(MISSING_KEY_MESSAGE)

        body = {
            "model": settings.model,
            "messages": [message.model_dump() for message in request.messages],
            "temperature": request.temperature if request.temperature is not None else TEMPERATURE,
            "max_tokens": request.max_tokens if request.max_tokens is not None else MAX_TOKENS,
            "stream": False,
        }
        url = f"{settings.upstream_url.rstrip('/')}/chat/completions"
        headers = {"Authorization": f"Bearer {settings.api_key}"}

        try:
            with httpx.Client(timeout=settings.timeout, transport=transport) as client:
                response = client.post(url, json=body, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"Upstream request failed: Type: {type(e).__name__}, Message: {str(e)}")
            return _error(UPSTREAM_FAILURE_MESSAGE, str(e))

        if not response.is_success:
            details = f"Upstream API Error: {response.status_code} {response.text}"
            logger.error(details[:500])
            return _error(UPSTREAM_FAILURE_MESSAGE, details)

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"Upstream returned invalid JSON: {response.text[:500]}")
            return _error(UPSTREAM_FAILURE_MESSAGE, str(e))

        logger.info(f"Relayed request with {len(request.messages)} messages")
        return JSONResponse(status_code=200, content=data)

    return app
