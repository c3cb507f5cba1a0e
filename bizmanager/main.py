"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from bizmanager.config import settings
from bizmanager.database import database
from bizmanager.routers import auth, clients, dashboard, invoices, projects, reports, tasks, timers


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown events."""
    configure_logging()
    await database.connect()
    yield
    await database.disconnect()


app = FastAPI(
    title="Business Manager API",
    description="Clients, projects, invoices, time tracking and reports",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(clients.router)
app.include_router(projects.router)
app.include_router(tasks.router)
app.include_router(invoices.router)
app.include_router(timers.router)
app.include_router(reports.router)
app.include_router(dashboard.router)


@app.get("/")
async def root():
    """Root endpoint - health check."""
    return {"status": "ok", "message": "Business Manager API"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
