import os
from typing import Optional

from fastapi import FastAPI

from linkfeed.api.routers.feeds import router as feeds_router
from linkfeed.services.domains import get_domain


def create_app(docs_dir: Optional[str] = None, domain: Optional[str] = None) -> FastAPI:
    """Read-only server over the published artifacts.

    Files are read per request, so a rebuild is visible without a restart.
    """
    app = FastAPI(title="linkfeed", version="0.1", docs_url=None, redoc_url=None, openapi_url=None)
    app.state.docs_dir = docs_dir or os.getenv("LINKFEED_DOCS_DIR") or "docs"
    app.state.domain = get_domain(domain or os.getenv("LINKFEED_DOMAIN"))
    app.include_router(feeds_router)
    return app


app = create_app()
