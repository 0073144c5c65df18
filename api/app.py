"""
api/app.py — FastAPI app instance + error handlers + static file serving
"""

import logging
import os
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

import config
from api.routes import router
from classroom_quiz.errors import QuizError
from classroom_quiz.services.record_store import JsonRecordStore
from classroom_quiz.services.session_clock import SessionClock

logger = logging.getLogger(__name__)


def create_app(data_dir: Optional[str] = None, static_dir: Optional[str] = None) -> FastAPI:
    app = FastAPI(title="Classroom Quiz", docs_url=None, redoc_url=None)

    store = JsonRecordStore(data_dir or config.DATA_DIR)
    app.state.store = store
    app.state.clock = SessionClock(
        store,
        duration_ms=config.SESSION_MINUTES * 60 * 1000,
        require_end_time=config.REQUIRE_END_TIME,
    )
    app.state.enforce_submit_window = config.ENFORCE_SUBMIT_WINDOW

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["Content-Type"],
    )

    # Service errors -> {"error": message} with the error's status
    @app.exception_handler(QuizError)
    async def quiz_error_handler(request: Request, exc: QuizError):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    # Malformed request bodies are plain bad requests
    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        logger.info(f"Malformed request to {request.url.path}: {exc.errors()}")
        return JSONResponse(status_code=400, content={"error": "Malformed request"})

    app.include_router(router)

    # public/ is served at the root, after the API routes
    static_dir = static_dir or config.STATIC_DIR
    if os.path.isdir(static_dir):
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")

    logger.info(f"Quiz API ready, data directory: {store.data_dir}")
    return app
