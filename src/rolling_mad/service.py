"""FastAPI service exposing stream scoring."""

from __future__ import annotations

from importlib import metadata
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field, StrictInt

from .config import DEFAULT_SETSIZE, MadConfig
from .errors import ConfigurationError
from .pipeline import run_stream
from .statistics import DEFAULT_CCONST
from .streaming.sources import record_rows

try:
    __version__ = metadata.version("rolling-mad")
except metadata.PackageNotFoundError:  # pragma: no cover
    __version__ = "0.1.0"


class ScoreRequest(BaseModel):
    observations: List[Optional[float]] = Field(default_factory=list)
    setsize: StrictInt = DEFAULT_SETSIZE
    cconst: float = DEFAULT_CCONST


def create_app() -> FastAPI:
    app = FastAPI(title="Rolling MAD API", version=__version__)

    @app.get("/health")
    def health() -> Dict[str, str]:
        return {"status": "ok"}

    @app.get("/version")
    def version() -> Dict[str, str]:
        return {"version": __version__}

    @app.post("/score")
    def score(request: ScoreRequest) -> Dict[str, Any]:
        try:
            cfg = MadConfig.from_mapping({"setsize": request.setsize, "cconst": request.cconst})
        except ConfigurationError as exc:
            raise HTTPException(status_code=422, detail=str(exc))
        result = run_stream(request.observations, cfg)
        if result.error:
            raise HTTPException(
                status_code=400,
                detail={"error": result.error.as_dict(), "records": record_rows(result.records)},
            )
        return {"config": cfg.model_dump(), "records": record_rows(result.records)}

    return app
