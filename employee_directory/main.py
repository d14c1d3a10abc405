from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from employee_directory.api.v1.router import api_router
from employee_directory.core.config import settings
from employee_directory.services.employee_store import employee_store
from employee_directory.services.view_controller import directory_controller

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncIterator[None]:
    try:
        await employee_store.initialize(settings)
    except Exception:
        logger.exception("Failed to initialize EmployeeStoreClient — continuing with in-memory cache")
    await directory_controller.load()
    yield
    await employee_store.close()


app = FastAPI(
    title="Employee Directory API",
    description="Employee directory with local fallback cache",
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.get("/")
async def root():
    return {"message": "Employee Directory API"}
