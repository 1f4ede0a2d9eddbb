"""FastAPI wrapper for vendor discovery.

POST /discover       rank vendors for a natural-language query
GET  /places/photo   proxy a place photo without exposing the API key
GET  /health         health check
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI, Header, HTTPException, Query as QueryParam, Request
from fastapi.responses import Response
from pydantic import BaseModel, Field

from vendor_discovery.config import load_config
from vendor_discovery.errors import InvalidQueryError, PlaceSearchError
from vendor_discovery.logging_setup import configure_logging
from vendor_discovery.pipeline import DiscoveryPipeline, build_pipeline
from vendor_discovery.places import PlaceSearchClient

logger = logging.getLogger(__name__)


# ---- Request / Response models ----

class DiscoveryRequest(BaseModel):
    """Incoming discovery request from the UI."""

    # Validated by build_query so a bad query is a 400, not a schema 422
    query: Any = None
    context: dict[str, Any] | None = None


class DiscoveryResponse(BaseModel):
    status: str  # "success"
    results: list[dict] = Field(default_factory=list)
    message: str | None = None


# ---- App ----

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Clients hold connection pools, so they are built once and shared across requests
    config = load_config()
    app.state.pipeline = build_pipeline(config)
    app.state.places = PlaceSearchClient(
        api_key=config.google_places_api_key,
        timeout=config.search_timeout,
    )
    try:
        yield
    finally:
        app.state.pipeline.close()
        app.state.places.close()


app = FastAPI(
    title="Vendor Discovery",
    version="0.1.0",
    lifespan=lifespan,
)


def require_auth(authorization: str | None = Header(default=None)):
    """Check API key if API_SECRET is configured."""
    api_secret = load_config().api_secret
    if not api_secret:
        return  # no auth required
    if not authorization:
        raise HTTPException(status_code=401, detail="Missing Authorization header")
    # Accept "Bearer <token>" or just "<token>"
    token = authorization.replace("Bearer ", "").strip()
    if token != api_secret:
        raise HTTPException(status_code=403, detail="Invalid API key")


def get_pipeline(request: Request) -> DiscoveryPipeline:
    return request.app.state.pipeline


def get_places_client(request: Request) -> PlaceSearchClient:
    return request.app.state.places


@app.get("/health")
async def health():
    return {"status": "ok", "service": "vendor-discovery"}


@app.post("/discover", response_model=DiscoveryResponse, dependencies=[Depends(require_auth)])
def discover(
    request: DiscoveryRequest,
    pipeline: DiscoveryPipeline = Depends(get_pipeline),
):
    """Search, enhance and rank vendors for a query."""

    try:
        result = pipeline.discover(request.query, request.context)
    except InvalidQueryError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return DiscoveryResponse(
        status="success",
        results=[r.model_dump(mode="json", by_alias=True) for r in result.results],
        message=result.message,
    )


@app.get("/places/photo")
def place_photo(
    reference: str | None = None,
    maxwidth: int | None = QueryParam(default=None, gt=0),
    maxheight: int | None = QueryParam(default=None, gt=0),
    places: PlaceSearchClient = Depends(get_places_client),
):
    """Proxy a place photo so the API key never reaches the browser."""

    if not reference:
        raise HTTPException(status_code=400, detail="Missing photo reference")

    try:
        content, content_type = places.fetch_photo(reference, max_width=maxwidth, max_height=maxheight)
    except PlaceSearchError as e:
        logger.error("Photo proxy failed for %s: %s", reference[:35], e)
        raise HTTPException(status_code=502, detail="Failed to fetch photo")

    return Response(
        content=content,
        media_type=content_type,
        headers={"Cache-Control": "public, max-age=86400"},
    )


def start_server(host: str = "0.0.0.0", port: int = 8000):
    """Start the API server (used by CLI)."""
    import uvicorn

    configure_logging(load_config().log_level)
    uvicorn.run(
        "vendor_discovery.api:app",
        host=host,
        port=int(os.getenv("PORT", port)),
        reload=False,
    )


if __name__ == "__main__":
    start_server()
