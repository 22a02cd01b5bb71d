"""
Harvest report read API.

Ingests one report at startup, then serves it:
    GET /coll          whole collection
    GET /unit/{unit}   records for one management unit

Usage:
    python -m elk_harvest.server --source huntData/CO2017.csv --port 8080
"""

import re
import logging
import argparse

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from elk_harvest import __version__
from elk_harvest.config import load_settings
from elk_harvest.parse_harvest_report import HarvestCollection, parse_harvest_report
from elk_harvest.sources import ReportSourceError

log = logging.getLogger(__name__)

# Same shape a plain decimal integer path segment has; anything else is rejected
UNIT_RE = re.compile(r'[+-]?[0-9]+')


def create_app(collection: HarvestCollection) -> FastAPI:
    """Build the API around an already-ingested collection."""
    app = FastAPI(
        title="Harvest Report API",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.collection = collection

    @app.get("/coll")
    def coll_request(request: Request):
        return JSONResponse(request.app.state.collection.as_json())

    @app.get("/unit/{unit}")
    def unit_request(unit: str, request: Request):
        if not UNIT_RE.fullmatch(unit):
            log.debug(f"Rejected unit path segment: '{unit}'")
            return Response(status_code=500, media_type="application/json")

        records = request.app.state.collection.unit_harvests(int(unit))
        return JSONResponse([r.as_json() for r in records])

    return app


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Serve a CPW harvest report as JSON.",
        epilog="Settings also come from HARVEST_SOURCE, HARVEST_ANIMAL, HARVEST_YEAR, "
               "HARVEST_HOST, HARVEST_PORT and HARVEST_LOG_LEVEL; flags win.",
    )
    parser.add_argument("--source", default=None, help="Report file to ingest (default: huntData/CO2017.csv)")
    parser.add_argument("--animal", default=None, help="Animal named in section titles (default: elk)")
    parser.add_argument("--year", type=int, default=None, help="Report year (default: taken from the file name)")
    parser.add_argument("--host", default=None, help="Bind address (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=None, help="Port (default: 8080)")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ... (default: INFO)")
    args = parser.parse_args(argv)

    try:
        settings = load_settings(
            source_path=args.source,
            animal=args.animal,
            year=args.year,
            host=args.host,
            port=args.port,
            log_level=args.log_level,
        )
    except ValueError as e:
        parser.error(str(e))

    logging.basicConfig(level=settings.log_level, format="%(levelname)s: %(message)s")

    try:
        collection, _ = parse_harvest_report(settings.source_path, settings.animal, settings.year)
    except ReportSourceError as e:
        log.error(f"Cannot start without harvest data: {e}")
        return 1

    app = create_app(collection)
    log.info(f"Serving {collection.record_count()} records on {settings.host}:{settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
