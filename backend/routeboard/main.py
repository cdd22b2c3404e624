"""FastAPI app entry point"""
from contextlib import asynccontextmanager

from fastapi import FastAPI

from routeboard.config import get_settings
from routeboard.logging_config import configure_logging

settings = get_settings()
configure_logging(settings.log_level)
from fastapi.middleware.cors import CORSMiddleware

from routeboard.api import mobile, routes
from routeboard.core.errors import register_exception_handlers


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield


app = FastAPI(
    title="Routeboard",
    description="Delivery back office - driver route assignment",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
register_exception_handlers(app)

app.include_router(routes.router)
app.include_router(mobile.router)


@app.get("/health")
def health():
    return {"status": "ok"}
