from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
import logging
import time
from typing import Optional

from opentelemetry.trace import get_current_span
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.api.routes.auth import router as auth_router
from app.api.routes.users import router as users_router
from app.api.routes.subscriptions import router as subscriptions_router
from app.api.routes.workflows import router as workflows_router
from app.api.routes.health import router as health_router
from app.utils.envelopes import api_success, api_error
from app.utils.exceptions import AppException
from app.core.db import dispose_engine, init_engine_and_session


logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app = FastAPI(title=settings.APP_NAME, debug=settings.DEBUG)

# Telemetry / Azure Monitor (optional)
_logger = logging.getLogger("subdub.api")
try:
	if settings.ENABLE_APP_INSIGHTS and settings.AZURE_MONITOR_CONN_STR:
		from azure.monitor.opentelemetry import configure_azure_monitor
		from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
		from opentelemetry.instrumentation.logging import LoggingInstrumentor

		configure_azure_monitor(
			connection_string=settings.AZURE_MONITOR_CONN_STR,
			sampling_ratio=settings.SAMPLING_RATIO,
		)
		# Include trace/span ids in stdlib logging records
		LoggingInstrumentor().instrument(set_logging_format=True)
		FastAPIInstrumentor.instrument_app(app)
		_logger.info("Azure Monitor telemetry is enabled")
except Exception as telemetry_exc:
	# Do not block app startup if telemetry fails
	_logger.warning("Failed to initialize Azure Monitor telemetry: %s", telemetry_exc)

app.add_middleware(
	CORSMiddleware,
	allow_origins=["*"],
	allow_credentials=True,
	allow_methods=["*"],
	allow_headers=["*"],
)

# Normalize API prefix (must not end with '/')
_api_prefix = settings.API_PREFIX.rstrip("/")

app.include_router(auth_router, prefix=_api_prefix)
app.include_router(users_router, prefix=_api_prefix)
app.include_router(subscriptions_router, prefix=_api_prefix)
app.include_router(workflows_router, prefix=_api_prefix)
app.include_router(health_router, prefix=_api_prefix)


def _trace_id() -> Optional[str]:
	_current_span = get_current_span()
	trace_id_int = _current_span.get_span_context().trace_id if _current_span else 0
	return f"{trace_id_int:032x}" if trace_id_int else None


# Structured request logging (includes trace correlation where available)
@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
	start_time = time.perf_counter()
	client_ip: Optional[str] = request.headers.get("x-forwarded-for") or (request.client.host if request.client else None)
	user_agent: Optional[str] = request.headers.get("user-agent")
	status_code: Optional[int] = None
	try:
		response = await call_next(request)
		status_code = response.status_code
		return response
	except Exception:
		_logger.exception(
			"Unhandled exception during request",
			extra={
				"http.method": request.method,
				"http.route": request.url.path,
				"net.peer.ip": client_ip,
				"http.user_agent": user_agent,
				"trace_id": _trace_id(),
			},
		)
		raise
	finally:
		elapsed_ms = (time.perf_counter() - start_time) * 1000.0
		_logger.info(
			"HTTP request",
			extra={
				"http.method": request.method,
				"http.route": request.url.path,
				"http.status_code": status_code,
				"http.duration_ms": round(elapsed_ms, 2),
				"net.peer.ip": client_ip,
				"http.user_agent": user_agent,
				"trace_id": _trace_id(),
			},
		)


@app.on_event("startup")
def on_startup() -> None:
	init_engine_and_session()


@app.on_event("shutdown")
async def on_shutdown() -> None:
	await dispose_engine()


@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException):
	if exc.status_code >= 500:
		_logger.error(
			f"{exc.code}: {exc.message}",
			extra={"http.method": request.method, "http.route": request.url.path, "trace_id": _trace_id()},
		)
	return JSONResponse(
		status_code=exc.status_code,
		content=api_error(code=exc.code, message=exc.message, details=jsonable_encoder(exc.details)),
	)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
	code = "UNAUTHORIZED" if exc.status_code == 401 else "HTTP_ERROR"
	return JSONResponse(
		status_code=exc.status_code,
		content=api_error(code=code, message=str(exc.detail)),
		headers=getattr(exc, "headers", None),
	)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
	# ctx may carry the raised ValueError, which is not JSON serializable
	errors = [{key: value for key, value in error.items() if key != "ctx"} for error in exc.errors()]
	return JSONResponse(
		status_code=422,
		content=api_error(code="VALIDATION_ERROR", message="Request validation failed", details=jsonable_encoder(errors)),
	)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
	_logger.exception(
		"Unhandled exception",
		extra={
			"http.method": request.method,
			"http.route": request.url.path,
			"trace_id": _trace_id(),
		},
	)
	return JSONResponse(status_code=500, content=api_error(code="INTERNAL_SERVER_ERROR", message="An unexpected error occurred"))


@app.get("/")
async def root():
	return api_success({"service": settings.APP_NAME, "status": "ok"})
