import os

from fastapi import APIRouter, Request
from fastapi.responses import FileResponse, PlainTextResponse

router = APIRouter(tags=["feeds"])


def _published(request: Request, filename: str) -> str:
    return os.path.join(request.app.state.docs_dir, filename)


def _not_found(message: str = "Not found") -> PlainTextResponse:
    return PlainTextResponse(message, status_code=404)


@router.get("/")
@router.get("/index.html")
def read_index(request: Request):
    path = _published(request, "index.html")
    if not os.path.isfile(path):
        return _not_found()
    return FileResponse(path, media_type="text/html")


@router.get("/rss.xml")
def read_rss(request: Request):
    path = _published(request, "rss.xml")
    if not os.path.isfile(path):
        return _not_found("RSS feed not found")
    return FileResponse(path, media_type="application/rss+xml")


@router.get("/{path:path}")
def read_dataset(path: str, request: Request):
    """Serve the published dataset; every other path is a 404."""
    dataset = request.app.state.domain.dataset_filename
    if path != dataset:
        return _not_found()
    full = _published(request, dataset)
    if not os.path.isfile(full):
        return _not_found()
    return FileResponse(full, media_type="application/json")
