"""FastAPI application entrypoint for tocgen service mode."""

from __future__ import annotations

from typing import Any, Callable, List, Optional

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..errors import MalformedTocBlock
from ..patcher import InsertionPolicy
from ..pipeline import TocGenerator, TocOptions, collect_outline
from ..render import RenderOptions, render_toc


class RenderSettings(BaseModel):
    max_depth: Optional[int] = None
    min_level: int = 1
    ordered: bool = False
    link_prefix: str = "#"
    title: Optional[str] = None


class TocRequest(BaseModel):
    text: str
    toc: RenderSettings = RenderSettings()
    insert: str = InsertionPolicy.AFTER_FIRST_HEADING.value


class TocResponse(BaseModel):
    text: str
    changed: bool


class RenderRequest(BaseModel):
    text: str
    toc: RenderSettings = RenderSettings()


class RenderResponse(BaseModel):
    fragment: str
    anchors: List[str]


class HealthResponse(BaseModel):
    status: str


def _default_options() -> TocOptions:
    return TocOptions()


def create_app(
    options_factory: Callable[[], TocOptions] = _default_options,
) -> FastAPI:
    """Create the FastAPI application exposing TOC generation."""

    app = FastAPI(title="tocgen service", version="0.1.0")

    def get_generator(toc: RenderSettings, insert: str) -> TocGenerator:
        # A fresh generator per request keeps document runs independent.
        options = options_factory()
        options.render = RenderOptions(
            max_depth=toc.max_depth,
            min_level=toc.min_level,
            ordered=toc.ordered,
            link_prefix=toc.link_prefix,
            bullet=options.render.bullet,
            indent=options.render.indent,
            title=toc.title,
        )
        options.insert = InsertionPolicy.parse(insert)
        return TocGenerator(options)

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/toc", response_model=TocResponse)
    async def update_toc(payload: TocRequest) -> TocResponse:
        generator = get_generator(payload.toc, payload.insert)
        updated = generator.process(payload.text).text
        return TocResponse(text=updated, changed=updated != payload.text)

    @app.post("/render", response_model=RenderResponse)
    async def render(payload: RenderRequest) -> RenderResponse:
        options = get_generator(payload.toc, InsertionPolicy.AFTER_FIRST_HEADING.value).options
        # Unpaired markers are tolerated when only the fragment is wanted.
        outline = collect_outline(payload.text, options)
        return RenderResponse(
            fragment=render_toc(outline, options.render), anchors=outline.anchors()
        )

    @app.exception_handler(MalformedTocBlock)
    async def malformed_block_handler(_: Any, exc: MalformedTocBlock) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": str(exc), "line": exc.line})

    @app.exception_handler(ValueError)
    async def value_error_handler(_: Any, exc: ValueError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(
    host: str = "127.0.0.1", port: int = 8000
) -> None:  # pragma: no cover - integration path
    try:
        import uvicorn
    except ModuleNotFoundError as exc:  # pragma: no cover - optional dependency
        raise RuntimeError(
            "uvicorn is required to run the service. Install it with `pip install uvicorn`."
        ) from exc

    uvicorn.run(create_app(), host=host, port=port)
