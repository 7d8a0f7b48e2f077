import logging
import time
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request

from courtrecords.api.routes import get_resolver
from courtrecords.api.routes import router as api_router
from courtrecords.config import load_settings
from courtrecords.providers.cascade import CaseResolver
from courtrecords.providers.reference import ReferenceDataClient
from courtrecords.providers.transport import RetryingTransport

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%H:%M:%S",
)

# Outgoing provider requests
logging.getLogger("httpx").setLevel(logging.INFO)
logging.getLogger("httpcore").setLevel(logging.WARNING)

logger = logging.getLogger("courtrecords")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Raises ConfigurationError before serving if any credential is missing
    settings = load_settings()
    transport = RetryingTransport(settings)
    app.state.resolver = CaseResolver(settings, transport)
    app.state.reference = ReferenceDataClient(settings, transport)
    logger.info(f"Serving {len(settings.providers)} providers")
    try:
        yield
    finally:
        await transport.close()


app = FastAPI(
    title="Court Records",
    description="Unified case lookup across Indian court data providers",
    lifespan=lifespan,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all incoming requests with timing."""
    start = time.perf_counter()
    logger.info(f">>> {request.method} {request.url.path}")

    response = await call_next(request)

    duration = (time.perf_counter() - start) * 1000
    logger.info(f"<<< {response.status_code} in {duration:.0f}ms")
    return response


app.include_router(api_router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "ok"}


@app.get("/health/providers")
async def provider_health(resolver: CaseResolver = Depends(get_resolver)):
    """Reachability of every upstream provider."""
    status = await resolver.check_providers()
    providers = {
        provider.value: {"ok": error is None, **({"error": error} if error else {})}
        for provider, error in status.items()
    }
    return {"status": "ok" if all(error is None for error in status.values()) else "degraded", "providers": providers}
