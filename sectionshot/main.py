# sectionshot/main.py
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import Body, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from sectionshot.auth import AccessGate, require_api_key
from sectionshot.browser import CaptureEngine
from sectionshot.config import Settings
from sectionshot.errors import BrowserError, ServiceError
from sectionshot.logger import get_logger, setup_logging
from sectionshot.models import ScreenshotRequest, ScreenshotResponse

logger = get_logger("sectionshot.main")


def create_app(settings: Optional[Settings] = None, engine: Optional[CaptureEngine] = None) -> FastAPI:
    """Build the app. Usable as `uvicorn --factory sectionshot.main:create_app`."""
    settings = (settings or Settings.from_env()).validate()
    setup_logging(settings.log_level)

    if settings.require_api_key and settings.uses_default_api_key:
        logger.warning("API_KEY is not set; falling back to the insecure default key")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            f"Screenshot service starting (auth {'on' if settings.require_api_key else 'off'}, "
            f"max {settings.max_concurrent_sessions} concurrent browser sessions)"
        )
        yield
        logger.info("Screenshot service shutting down")

    app = FastAPI(title="Screenshot Service", lifespan=lifespan)
    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])

    app.state.settings = settings
    app.state.access_gate = AccessGate(settings.api_key) if settings.require_api_key else None
    app.state.engine = engine or CaptureEngine(settings)

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        return JSONResponse({"error": exc.message}, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.debug(f"Rejected request body for {request.url.path}: {exc.errors()}")
        return JSONResponse({"error": "Invalid request body"}, status_code=400)

    @app.get("/", response_class=PlainTextResponse)
    async def home():
        return "Screenshot Service"

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.post("/screenshot", response_model=ScreenshotResponse, dependencies=[Depends(require_api_key)])
    async def screenshot(request: Request, payload: Optional[ScreenshotRequest] = Body(None)):
        engine = request.app.state.engine
        payload = payload or ScreenshotRequest()
        try:
            result = await engine.capture(payload.url, payload.section_height)
        except BrowserError as e:
            logger.error(f"Screenshot error: {e}", exc_info=True)
            raise
        except ServiceError:
            raise
        except Exception as e:
            logger.exception(f"Screenshot error: {e}")
            raise BrowserError(str(e)) from e
        return result.to_response()

    return app


def main():
    settings = Settings.from_env()
    app = create_app(settings)
    logger.info(f"Server ready on port {settings.port}.")
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
