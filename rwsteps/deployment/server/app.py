"""
rwsteps/deployment/server/app.py
================================
FastAPI server for rwsteps.
Exposes /explain, /steps, /rules as REST endpoints.
Requires: fastapi, uvicorn
"""
from __future__ import annotations
import logging
import uvicorn
from fastapi import FastAPI
from rwsteps.deployment.server.routes import router
from rwsteps.deployment.server.middleware import setup_middleware
from rwsteps.version import FRAMEWORK_NAME, __version__

logger = logging.getLogger(__name__)

app = FastAPI(
    title="rwsteps Server",
    description="Rewrite proof traces to named rewrite steps",
    version=__version__,
)

setup_middleware(app)
app.include_router(router, prefix="/api/v1")


@app.get("/health")
async def health():
    return {"status": "ok", "framework": FRAMEWORK_NAME, "version": __version__}


def serve(host: str = "0.0.0.0", port: int = 8000, reload: bool = False):
    logger.info(f"Serving rwsteps {__version__} on {host}:{port}")
    uvicorn.run("rwsteps.deployment.server.app:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    serve()
