"""
FastAPI Backend dla planera GOAP.

Endpoints:
    GET  /api/templates  - lista stockowych szablonów akcji
    POST /api/plan       - zaplanuj sekwencję akcji dla agenta
    POST /api/strategic  - wybierz i rozłóż cel strategiczny
    GET  /api/health     - health check

Uruchomienie:
    python -m api.main   (albo: uvicorn api.main:app --reload)
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import sys
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from api.routers import planning


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown events."""
    # Startup
    print("🚀 GOAP Planner API starting...")
    yield
    # Shutdown
    print("👋 GOAP Planner API shutting down...")


app = FastAPI(
    title="GOAP Planner API",
    description="Goal-oriented action planning over hex-grid world facts",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS - allow all origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(planning.router, prefix="/api", tags=["Planning"])


@app.get("/api/health")
async def health():
    """API health check."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api.main:app", host="127.0.0.1", port=8000)
