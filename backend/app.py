from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend.application import Broadcaster, DemoAuthProvider, GoogleAuthProvider, PayrollService
from backend.core.errors import AuthError, UpstreamError
from backend.core.logging_config import configure_logging
from backend.core.settings import Settings
from backend.core.validation import ValidationError
from backend.infrastructure import GoogleOAuthClient, GoogleSheetsClient, InMemoryPayrollStore, SheetsPayrollStore
from backend.routes import auth, employee, realtime
from backend.workers.sync import SyncWorker


def build_payroll_service(settings: Settings) -> PayrollService:
    """Wire the store and auth provider selected by ``PAYROLL_MODE``."""

    broadcaster = Broadcaster()
    if settings.demo:
        return PayrollService(InMemoryPayrollStore(), DemoAuthProvider(), broadcaster)

    oauth = GoogleOAuthClient(
        settings.google_client_id,
        settings.google_client_secret,
        settings.google_redirect_url,
    )
    provider = GoogleAuthProvider(oauth)
    sheets = GoogleSheetsClient(settings.spreadsheet_id, provider.access_token)
    store = SheetsPayrollStore(sheets, provider.is_authenticated)
    return PayrollService(store, provider, broadcaster)


def create_app(settings: Settings | None = None, *, service: PayrollService | None = None) -> FastAPI:
    settings = settings or Settings.from_env()
    logger = configure_logging(settings.log_level)
    service = service or build_payroll_service(settings)
    worker = SyncWorker(service, settings.sync_interval)

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        worker.start()
        logger.info("Payroll calculator running in %s mode", "demo" if settings.demo else "sheets")
        try:
            yield
        finally:
            await worker.stop()
            service.close()

    app = FastAPI(title="Payroll Calculator API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.payroll_service = service
    app.state.sync_worker = worker

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ValidationError)
    async def validation_failed(_: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse({"error": exc.message, "field": exc.field}, status_code=400)

    @app.exception_handler(AuthError)
    async def not_authenticated(_: Request, exc: AuthError) -> JSONResponse:
        return JSONResponse({"error": str(exc)}, status_code=401)

    @app.exception_handler(UpstreamError)
    async def upstream_failed(_: Request, exc: UpstreamError) -> JSONResponse:
        logger.error("Upstream failure: %s", exc)
        return JSONResponse({"error": str(exc)}, status_code=500)

    app.include_router(auth.router)
    app.include_router(employee.router)
    app.include_router(realtime.router)

    @app.get("/", include_in_schema=False)
    async def root() -> JSONResponse:
        """Provide a lightweight landing page for container checks."""
        return JSONResponse(
            {
                "message": "Payroll Calculator API",
                "docs": "/docs",
                "health": "/api/auth/status",
            }
        )

    return app


app = create_app()
