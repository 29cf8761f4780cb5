from dotenv import load_dotenv

# Load environment variables BEFORE any imports that use them (e.g. Firebase, settings)
load_dotenv()

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routers import health, jobs
from common.config import settings
from common.log_setup import configure_logging
import uvicorn

configure_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Tracking sessions are owned by their requests, so there is nothing to
    release here.
    """
    yield


app = FastAPI(
    title="Document Job Progress API",
    description="""
    Live progress for resume and story ingestion jobs.

    ## Features

    * **Point reads** - current snapshot of a document job
    * **Progress stream** - Server-Sent Events with phase steps and a merged activity feed
    * **Phase catalogs** - ordered phases per job type
    """,
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)

app.include_router(
    jobs.router,
    prefix="/api/v1/jobs",
    tags=["Jobs"]
)


def run_server():
    """
    Run the API server.

    This function is used as an entry point for the CLI command.
    """
    uvicorn.run(
        "api.app:app",
        host="0.0.0.0",
        port=8000,
        reload=False
    )


if __name__ == "__main__":
    run_server()
