import logging
import platform
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import Body, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import ValidationError

from .config import ENV_PATH, get_settings, mask_key
from .llm import ConfigurationError, LLMError
from .models import DebugConfigResponse, ErrorResponse, GeneratePlanResponse, HealthResponse
from .planner import Planner
from .rate_limit import FixedWindowRateLimiter, RateLimitExceeded, client_address
from .validation import parse_plan_request, validate_plan_request

settings = get_settings()
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)
logger.info(f"[Config] .env path: {ENV_PATH} exists: {ENV_PATH.exists()}")
logger.info(
    f"[Config] OPENROUTER_API_KEY present: {settings.has_api_key} "
    f"preview: {mask_key(settings.openrouter_api_key)}"
)

app = FastAPI(title="AI Fitness Plan API", version="0.2.0")


# Bare OPTIONS requests (no CORS preflight headers) still get a 200
@app.middleware("http")
async def short_circuit_options(request: Request, call_next):
    if request.method == "OPTIONS":
        return Response(status_code=200)
    return await call_next(request)


# CORS: any origin may call the API. Added last so preflights are answered here first.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

planner = Planner()
app.state.rate_limiter = FixedWindowRateLimiter(
    max_requests=settings.rate_limit_max_requests,
    window_seconds=settings.rate_limit_window_seconds,
)
app.state.trusted_proxy_hops = settings.trusted_proxy_hops


def _error(status_code: int, message: str, details: Optional[str] = None) -> JSONResponse:
    body = ErrorResponse(error=message, details=details).model_dump(exclude_none=True)
    return JSONResponse(status_code=status_code, content=body)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return _error(400, "Request body must be a JSON object")


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    resp = _error(429, str(exc))
    resp.headers["Retry-After"] = str(int(exc.decision.reset_after) + 1)
    return resp


def enforce_rate_limit(request: Request) -> None:
    key = client_address(
        request.headers.get("x-forwarded-for"),
        request.client.host if request.client else None,
        request.app.state.trusted_proxy_hops,
    )
    decision = request.app.state.rate_limiter.hit(key)
    if not decision.allowed:
        logger.warning(f"Rate limit exceeded for {key}")
        raise RateLimitExceeded(decision)


@app.get("/api/health", response_model=HealthResponse)
def health():
    return HealthResponse(status="OK", timestamp=datetime.now(timezone.utc).isoformat())


@app.get("/api/debug-config", response_model=DebugConfigResponse)
def debug_config():
    current = get_settings()
    return DebugConfigResponse(
        env_path=str(ENV_PATH),
        env_exists=ENV_PATH.exists(),
        has_openrouter_key=current.has_api_key,
        openrouter_key_preview=mask_key(current.openrouter_api_key),
        openrouter_api_url=current.openrouter_api_url,
        openrouter_model=current.openrouter_model,
        python_version=platform.python_version(),
        environment=current.environment,
    )


@app.post(
    "/api/generate-plan",
    response_model=GeneratePlanResponse,
    responses={400: {"model": ErrorResponse}, 402: {"model": ErrorResponse},
               429: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    dependencies=[Depends(enforce_rate_limit)],
)
def generate_plan(payload: Dict[str, Any] = Body(...)):
    validation = validate_plan_request(payload)
    if not validation.valid:
        return _error(400, validation.error)
    try:
        request = parse_plan_request(payload)
    except ValidationError as e:
        return _error(400, f"Invalid plan request: {e.errors()[0].get('msg', 'bad value')}")

    try:
        return planner.generate_plan(request)
    except ConfigurationError as e:
        logger.error("Missing OPENROUTER_API_KEY at request time")
        return _error(e.status_code, e.message)
    except LLMError as e:
        logger.error(f"Error generating fitness plan: {e.message} ({e.details})")
        return _error(e.status_code, e.message, e.details)
    except Exception as e:
        logger.exception("Unexpected error generating fitness plan")
        return _error(500, "Failed to generate fitness plan", str(e))


def run() -> None:
    import uvicorn

    uvicorn.run("backend.main:app", host="0.0.0.0", port=get_settings().port)


if __name__ == "__main__":
    run()
