"""
HTTP server for the reference search service.
Run with: python -m refsearch_server.core.server --port 50001
"""
import argparse
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field


def _load_env() -> None:
    """
    Load environment variables from the project root `.env`.

    Do not rely on current working directory (uvicorn may import this module from elsewhere).
    """
    project_root = Path(__file__).resolve().parents[2]
    env_path = project_root / ".env"
    if env_path.exists():
        load_dotenv(env_path, override=True)
        return

    # Fallback to CWD for compatibility
    cwd_env = Path.cwd() / ".env"
    if cwd_env.exists():
        load_dotenv(cwd_env, override=True)


_load_env()

from .config import DEFAULT_MAX_RESULTS, DEFAULT_PORT, DEFAULT_RELATED_LIMIT, MAX_RESULTS_CAP, get_log_config
from .logger import get_logger, setup_logger
from ..models.schema import Location
from ..reference.codec import decode, route_path
from ..search.service import SearchService, build_search_service

logger = get_logger(__name__)


class ReferenceInfo(BaseModel):
    reference_id: str
    valid: bool
    entity_type: Optional[str] = None
    prefix: Optional[str] = None
    district_code: Optional[str] = None
    sequence: Optional[int] = None
    path: str = Field("/", description="Client route for the entity, '/' when the id is malformed")


@lru_cache(maxsize=1)
def get_service() -> SearchService:
    """Process-wide service over the configured data directory."""
    return build_search_service()


app = FastAPI(
    title="Reference Search Server",
    description="Universal search, suggestions and related items over local entity collections",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


def _location(lat: Optional[float], lng: Optional[float]) -> Optional[Location]:
    if lat is None or lng is None:
        return None
    return {"lat": lat, "lng": lng}


@app.get("/search/universal")
async def search_universal(
    q: str = Query("", description="Search term or Reference ID"),
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
    limit: int = Query(DEFAULT_MAX_RESULTS, ge=1, le=MAX_RESULTS_CAP),
    service: SearchService = Depends(get_service),
) -> List[Dict[str, Any]]:
    """Ranked results as a bare list, the shape remote search clients expect."""
    location = _location(lat, lng)
    logger.info(f"Universal search: q={q!r} location={location} limit={limit}")
    response = await service.search(q, location, limit)
    return response["results"]


@app.get("/search/universal/details")
async def search_universal_details(
    q: str = Query("", description="Search term or Reference ID"),
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
    limit: int = Query(DEFAULT_MAX_RESULTS, ge=1, le=MAX_RESULTS_CAP),
    service: SearchService = Depends(get_service),
) -> Dict[str, Any]:
    """Same search, wrapped with the answering tier, counts and per-collection errors."""
    location = _location(lat, lng)
    logger.info(f"Universal search (details): q={q!r} location={location} limit={limit}")
    return await service.search(q, location, limit)


@app.get("/search/suggestions")
async def search_suggestions(
    q: str = Query("", description="Partial search term"),
    service: SearchService = Depends(get_service),
) -> List[Dict[str, Any]]:
    return await service.suggest(q)


@app.get("/search/related")
async def search_related(
    reference_id: str = Query("", alias="referenceId"),
    limit: int = Query(DEFAULT_RELATED_LIMIT, ge=1, le=MAX_RESULTS_CAP),
    service: SearchService = Depends(get_service),
) -> List[Dict[str, Any]]:
    return await service.related_items(reference_id, limit)


@app.get("/reference/{reference_id}", response_model=ReferenceInfo)
async def reference_info(reference_id: str) -> ReferenceInfo:
    """Decode a Reference ID. Malformed ids are reported as invalid, not rejected."""
    parts = decode(reference_id)
    if parts is None:
        return ReferenceInfo(reference_id=reference_id, valid=False, path=route_path(reference_id))
    return ReferenceInfo(
        reference_id=reference_id,
        valid=True,
        entity_type=parts.kind.value,
        prefix=parts.prefix,
        district_code=parts.district_code,
        sequence=parts.sequence,
        path=route_path(reference_id),
    )


def parse_args(argv: Optional[List[str]] = None):
    log_cfg = get_log_config()
    parser = argparse.ArgumentParser(description="Reference Search HTTP Server")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help=f"Server port (default: {DEFAULT_PORT})")
    parser.add_argument("--host", default="0.0.0.0", help="Server host (default: 0.0.0.0)")
    parser.add_argument(
        "--log-level",
        default=log_cfg["level"],
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: REFSEARCH_LOG_LEVEL or INFO)",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=str(log_cfg["log_file"]) if log_cfg["log_file"] else None,
        help="Log file path (default: REFSEARCH_LOG_FILE, console only when unset)",
    )
    parser.add_argument(
        "--data-dir",
        type=str,
        default=None,
        help="Directory with <collection>.json files (default: REFSEARCH_DATA_DIR or ./data)",
    )
    return parser.parse_args(argv)


def print_startup_env() -> None:
    """Print relevant environment variables to console at server startup."""
    keys = [
        "REFSEARCH_REMOTE_BASE_URL",
        "REFSEARCH_REMOTE_TIMEOUT",
        "REFSEARCH_GATEWAY_TIMEOUT",
        "REFSEARCH_DATA_DIR",
        "REFSEARCH_LOG_LEVEL",
        "REFSEARCH_LOG_FILE",
    ]
    print("=== Reference search server env ===")
    for k in keys:
        v = os.getenv(k)
        print(f"  {k}= {v}" if v else f"  {k}= (unset)")
    print("===================================")


def main(argv: Optional[List[str]] = None) -> None:
    import uvicorn

    args = parse_args(argv)
    log_file = Path(args.log_file) if args.log_file else None
    setup_logger(level=args.log_level, log_file=log_file)
    if log_file:
        logger.info(f"Log file: {log_file.resolve()}")

    if args.data_dir:
        os.environ["REFSEARCH_DATA_DIR"] = args.data_dir
        get_service.cache_clear()

    print_startup_env()
    logger.info(f"Starting reference search server on {args.host}:{args.port}")
    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level.lower())


if __name__ == "__main__":
    main()
