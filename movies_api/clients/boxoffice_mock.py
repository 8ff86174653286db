"""
Stand-in box-office provider for local runs and integration tests.

Serves ``GET /boxoffice?title=...`` from a JSON file that maps titles to
provider records, and answers 404 for unknown titles.

Usage:
    boxoffice-mock --data mock-boxoffice.json --port 9099
"""

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Dict

from fastapi import FastAPI, Header, HTTPException, Query

logger = logging.getLogger(__name__)


def create_mock_app(entries: Dict[str, Dict[str, Any]], api_key: str | None = None) -> FastAPI:
    """
    Build the mock provider app.

    Args:
        entries: Provider records keyed by exact title
        api_key: If set, requests must send this value in X-API-Key
    """
    app = FastAPI(title="Box Office Mock")

    @app.get("/boxoffice")
    def get_box_office(
        title: str = Query(...),
        x_api_key: str | None = Header(None),
    ):
        if api_key is not None and x_api_key != api_key:
            raise HTTPException(status_code=401, detail="invalid api key")
        entry = entries.get(title)
        if entry is None:
            raise HTTPException(status_code=404, detail="Not Found")
        return {"title": title, **entry}

    return app


def load_entries(path: str) -> Dict[str, Dict[str, Any]]:
    """Load provider records from a JSON object keyed by title."""
    with Path(path).open(encoding="utf-8") as f:
        entries = json.load(f)
    if not isinstance(entries, dict):
        raise ValueError(f"{path} must contain a JSON object keyed by title")
    return entries


def main():
    """Command-line entry point."""
    import uvicorn

    parser = argparse.ArgumentParser(description="Serve mock box office data")
    parser.add_argument('--port', type=int, default=9099, help='Port to listen on (default: 9099)')
    parser.add_argument('--data', type=str, default='mock-boxoffice.json', help='Path to mock data file')
    parser.add_argument('--api-key', type=str, default=None, help='Require this X-API-Key value')
    args = parser.parse_args()

    entries = load_entries(args.data)
    logger.info("Loaded %d mock entries", len(entries))
    uvicorn.run(create_mock_app(entries, api_key=args.api_key), host="0.0.0.0", port=args.port)


if __name__ == "__main__":
    main()
