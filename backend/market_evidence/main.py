import os
import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import get_search_env, log_runtime_env_diagnostics_once
from .routers.evidence import router as evidence_router


# Load environment variables from .env file
load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):

    # Startup
    env = get_search_env()
    print("Starting Market Evidence Engine")
    print(f"   Serper.dev:  {'Configured' if env.serper_configured else 'Not set'}")
    print(f"   Google CSE:  {'Configured' if env.google_cse_configured else 'Not set'}")
    print("   Hacker News: No key required")
    if not env.configured:
        print("   Web search disabled: evidence will carry a missing_config warning")
    log_runtime_env_diagnostics_once("startup")

    yield

    print("Shutting down Market Evidence Engine")


app = FastAPI(
    title="Market Evidence Engine",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",      # Next.js dev server
        "http://127.0.0.1:3000",      # Alternative localhost
        "http://localhost:3001",      # Alternative port
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(evidence_router)


@app.get(
    "/",
    summary="API Root",
    description="Welcome endpoint with API information",
    tags=["General"]
)
async def root():
    """Root endpoint with API information."""
    return {
        "name": "Market Evidence Engine",
        "version": "0.1.0",
        "description": "Evidence aggregation and market-signal scoring",
        "docs": "/docs",
        "endpoints": {
            "search": "POST /evidence/search - Gather and score market evidence",
            "sources": "GET /evidence/sources - Provider configuration",
            "health": "GET /evidence/health - Service health check"
        }
    }


@app.get(
    "/health",
    summary="Global Health Check",
    description="Check if the API server is running",
    tags=["General"]
)
async def health():
    """Global health check endpoint."""
    return {
        "status": "healthy",
        "service": "market-evidence-engine",
        "version": "0.1.0"
    }


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler for unhandled errors."""
    logging.getLogger(__name__).exception("Unhandled error on %s", request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal server error",
            "detail": str(exc) if os.getenv("DEBUG", "false").lower() == "true" else "An unexpected error occurred"
        }
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "market_evidence.main:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("DEBUG", "true").lower() == "true",
    )
