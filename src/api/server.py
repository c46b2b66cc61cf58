"""FastAPI server exposing the dispatch optimizer over HTTP."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from fastapi import Body, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from src.dispatch.config import DispatchConfig, load_config
from src.dispatch.engine import DispatchEngine
from src.dispatch.loader import InputValidationError

logger = logging.getLogger(__name__)

CONFIG_PATH = Path(__file__).resolve().parents[2] / "config" / "default_dispatch.yaml"

app = FastAPI(title="Delivery Dispatch Optimizer API", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/api/health")
async def health() -> dict:
    """Basic readiness endpoint."""

    return {"status": "ok"}


def _load_runtime_config(use_cache: bool | None) -> DispatchConfig:
    base = load_config(CONFIG_PATH) if CONFIG_PATH.exists() else DispatchConfig()
    return base.with_overrides(use_cache=use_cache)


@app.post("/api/optimize")
def optimize(
    inputs: dict[str, Any] = Body(...),
    use_cache: bool | None = None,
) -> dict:
    """Assign drivers to orders for one request body of drivers, orders and graph."""

    config = _load_runtime_config(use_cache)
    try:
        plan = DispatchEngine(config).run(inputs)
    except InputValidationError as exc:
        logger.info("rejected optimize request: %s", exc)
        raise HTTPException(status_code=422, detail={"errors": exc.errors}) from exc
    return plan.to_dict()
