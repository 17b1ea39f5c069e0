"""FastAPI service answering hierarchy queries over a local source tree."""

from __future__ import annotations

import argparse

from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse

from .exceptions import AmbiguousClassName, ClassNotFound, ConfigError, SourceIOError
from .finder import Finder
from .logging_config import setup_logging
from .models import SearchMode
from .output import build_payload


app = FastAPI(title="ClassIntel Hierarchy API")


def _build_finder(root: str, exclude: list[str], no_cache: bool) -> Finder:
    try:
        return Finder(root, exclude=exclude, use_cache=not no_cache)
    except (SourceIOError, ConfigError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _query(
    root: str,
    name: str,
    module: str | None,
    mode: SearchMode,
    exclude: list[str],
    no_cache: bool,
    parents: bool,
) -> JSONResponse:
    finder = _build_finder(root, exclude, no_cache)
    try:
        if parents:
            references = finder.find_parent_classes(name, module, mode)
        else:
            references = finder.find_subclasses(name, module, mode)
    except AmbiguousClassName as exc:
        raise HTTPException(
            status_code=409,
            detail={"message": str(exc), "candidates": exc.candidates},
        ) from exc
    except ClassNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    return JSONResponse(content=build_payload(name, module, references, parents=parents))


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/subclasses")
def subclasses(
    root: str = Query(..., description="Root directory of the codebase"),
    name: str = Query(..., description="Class name"),
    module: str | None = Query(default=None),
    mode: SearchMode = Query(default=SearchMode.ALL),
    exclude: list[str] = Query(default=[]),
    no_cache: bool = False,
) -> JSONResponse:
    return _query(root, name, module, mode, exclude, no_cache, parents=False)


@app.get("/parents")
def parents(
    root: str = Query(..., description="Root directory of the codebase"),
    name: str = Query(..., description="Class name"),
    module: str | None = Query(default=None),
    mode: SearchMode = Query(default=SearchMode.ALL),
    exclude: list[str] = Query(default=[]),
    no_cache: bool = False,
) -> JSONResponse:
    return _query(root, name, module, mode, exclude, no_cache, parents=True)


def main() -> int:
    parser = argparse.ArgumentParser(description="Run the ClassIntel hierarchy API server")
    parser.add_argument("--host", default="127.0.0.1", help="Bind host")
    parser.add_argument("--port", type=int, default=9000, help="Bind port")
    args = parser.parse_args()

    import uvicorn

    setup_logging()
    uvicorn.run("classintel.api:app", host=args.host, port=args.port, reload=False)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
