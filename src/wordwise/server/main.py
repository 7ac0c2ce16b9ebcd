"""
Wordwise API Server.
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute

from wordwise.config import get_settings
from wordwise.server.routes import jobs, lexicons

logger = logging.getLogger(__name__)


def log_routes(app: FastAPI):
    routes = []
    for route in app.routes:
        if isinstance(route, APIRoute):
            methods = ", ".join(sorted(route.methods - {"HEAD", "OPTIONS"}))
            routes.append((methods, route.path, route.name))

    routes.sort(key=lambda r: (r[1], r[0]))

    for methods, path, name in routes:
        logger.info("  %-8s %-40s → %s", methods, path, name)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(level=get_settings().log_level.upper())
    log_routes(app)
    yield


app = FastAPI(title="Wordwise API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://localhost:5173", "tauri://localhost"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(lexicons.router)
app.include_router(jobs.router)


@app.get("/")
async def root():
    return {"name": "Wordwise API", "version": "0.1.0"}


def run(host: str = "127.0.0.1", port: int = 8000, reload: bool = False):
    uvicorn.run("wordwise.server.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    run()
