"""
FastAPI application setup for the PLM bridge.
"""

from dotenv import load_dotenv
from fastapi import FastAPI

from plm_platform import __version__ as PLATFORM_VERSION

from . import __version__ as WEB_VERSION
from .routes import router

# Load .env file (if present) so PLM_BRIDGE_* settings are available via os.environ
load_dotenv()

# App
app = FastAPI(
    title="plm-bridge",
    description="Session-aware service-call bridge to a PLM backend",
    version=WEB_VERSION,
)

# Include API routes
app.include_router(router)


@app.get("/health")
async def health():
    """Liveness probe."""
    return {"status": "ok", "version": WEB_VERSION, "platform_version": PLATFORM_VERSION}
