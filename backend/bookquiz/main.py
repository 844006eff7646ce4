from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from fastapi.responses import JSONResponse, RedirectResponse
import uvicorn

from .errors import QuizError
from .logging_config import configure_logging
from .settings import settings
from .routers import health, quiz

BASE_DIR = Path(__file__).resolve().parents[2]
FRONTEND_DIR = BASE_DIR / "frontend"

logger = configure_logging()

app = FastAPI(title="Book Quiz API")
app.include_router(health.router)
app.include_router(quiz.router)

# Static frontend at /app (use absolute paths so cwd doesn't matter when launching)
if FRONTEND_DIR.is_dir():
	app.mount("/app", StaticFiles(directory=FRONTEND_DIR, html=True), name="frontend")


@app.exception_handler(QuizError)
async def quiz_error_handler(request: Request, exc: QuizError):
	return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
	first = exc.errors()[0] if exc.errors() else {}
	field = ".".join(str(p) for p in first.get("loc", ())[1:])
	message = f"Invalid request: {field} {first.get('msg', '')}".strip()
	return JSONResponse(status_code=400, content={"error": message})


@app.get("/", include_in_schema=False)
async def redirect_root_to_app():
	return RedirectResponse(url="/app")

@app.get("/info")
def root():
	return {"status": "ok", "llm_provider": settings.llm_provider, "llm_configured": settings.llm_configured}


def run() -> None:
	logger.info("Server running on port %s", settings.port)
	uvicorn.run(app, host="0.0.0.0", port=settings.port)
