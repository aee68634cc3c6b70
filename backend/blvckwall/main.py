from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from dotenv import load_dotenv
import logging
import math
import pathlib
from typing import Optional

# Load environment variables from .env (if present)
# Try to load from the project root first, then current directory
project_root = pathlib.Path(__file__).parent.parent.parent
env_path = project_root / ".env"
if env_path.exists():
    load_dotenv(env_path)
else:
    load_dotenv()

from .api.deps import Runtime, build_runtime
from .api.routes import api_router
from .config import get_settings
from .errors import BlvckwallError, ProviderError, RateLimited

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(),
    ]
)

logger = logging.getLogger(__name__)


async def blvckwall_error_handler(request: Request, exc: BlvckwallError):
    status_code = exc.status_code
    headers = {}
    if isinstance(exc, RateLimited):
        headers["Retry-After"] = str(max(1, math.ceil(exc.retry_after)))
    elif isinstance(exc, ProviderError) and exc.status == 404:
        status_code = 404
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=status_code, content=exc.to_dict(), headers=headers)


def create_app(runtime: Optional[Runtime] = None) -> FastAPI:
    settings = runtime.settings if runtime else get_settings()
    app = FastAPI(title="BlvckWall AI Backend")
    app.state.runtime = runtime or build_runtime(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(BlvckwallError, blvckwall_error_handler)
    app.include_router(api_router, prefix="/api")

    @app.get("/")
    async def root():
        return {"status": "ok", "providers": app.state.runtime.providers.modes()}

    return app


app = create_app()


def run():
    import uvicorn

    uvicorn.run("blvckwall.main:app", host="0.0.0.0", port=8000)
