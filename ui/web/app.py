"""
FastAPI Application - Main web application setup
===============================================

This module creates and configures the FastAPI application that
exposes the rules engine over HTTP.
"""

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from core import __version__
from core.config import Config, load_config
from core.exceptions import ResponderError
from core.logging import setup_logging, get_logger
from rules.engine import RulesEngine

logger = get_logger("web.app")


def create_app(
    config: Optional[Config] = None,
    engine: Optional[RulesEngine] = None,
    debug: bool = False
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Application configuration
        engine: Pre-built rules engine (built from config if omitted)
        debug: Enable debug mode

    Returns:
        Configured FastAPI application
    """
    if config is None:
        config = load_config()

    setup_logging(
        log_dir=config.log_dir or None,
        log_level="DEBUG" if debug else config.logging.level,
        json_format=config.logging.json_format,
        console_output=config.logging.console_output
    )

    if engine is None:
        engine = RulesEngine.from_config(config)

    app = FastAPI(
        title="Rule Responder",
        description="Template responses for chat input, matched without a language model",
        version=__version__,
        debug=debug or config.debug,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.config = config
    app.state.rules_engine = engine

    from .routes import router as main_router
    app.include_router(main_router, prefix="")

    @app.exception_handler(ResponderError)
    async def responder_exception_handler(request: Request, exc: ResponderError):
        logger.error(f"Request failed: {exc}")
        return JSONResponse(
            status_code=500,
            content={"error": exc.message, "details": exc.details}
        )

    logger.info("Web application created")

    return app


def run_app(
    host: str = "127.0.0.1",
    port: int = 8080,
    debug: bool = False,
    config: Optional[Config] = None
) -> None:
    """
    Run the web application server.

    Args:
        host: Host address to bind
        port: Port to listen on
        debug: Enable debug mode
        config: Application configuration
    """
    if config is None:
        config = load_config()

    app = create_app(config=config, debug=debug)

    logger.info(f"Starting web server on {host}:{port}")

    import uvicorn
    uvicorn.run(
        app,
        host=host,
        port=port,
        log_level="debug" if debug else "info"
    )
