import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .cache import ResponseCache
from .llm_client import LLMClient
from .llm_service import LLMService
from .retry import RetryPolicy
from .settings import settings
from .routers import analyze, assessment, content, health, tutor

logging.basicConfig(
	level=settings.log_level.upper(),
	format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Learn Your Way API")
app.include_router(health.router)
app.include_router(content.router)
app.include_router(assessment.router)
app.include_router(tutor.router)
app.include_router(analyze.router)

# Next.js dev server
app.add_middleware(
	CORSMiddleware,
	allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
	allow_methods=["*"],
	allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
	# The browser UI reads failures from "error"
	return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
	errors = exc.errors()
	first = errors[0] if errors else {"loc": (), "msg": "invalid request"}
	# Drop the leading "body" segment FastAPI adds
	path = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
	return JSONResponse(status_code=400, content={"error": f"Validation error: {path} - {first.get('msg')}"})


@app.get("/info")
def root():
	return {"status": "ok", "llm_configured": bool(settings.llm_provider or settings.llm_base_url)}


@app.on_event("startup")
async def startup_event():
	client = LLMClient()
	cache = ResponseCache(default_ttl=settings.cache_ttl_seconds)
	app.state.llm_service = LLMService(client, cache, RetryPolicy.from_settings())
	logger.info("LLM service ready (cache ttl %.0fs)", settings.cache_ttl_seconds)


@app.on_event("shutdown")
async def shutdown_event():
	service = getattr(app.state, "llm_service", None)
	if service is not None:
		await service.client.aclose()
