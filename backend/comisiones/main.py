"""
Application FastAPI principale.
"""
import logging
from pathlib import Path
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Charger le .env situé dans le dossier backend/ (un niveau au-dessus de comisiones/)
_env_path = Path(__file__).parent.parent / ".env"
load_dotenv(_env_path)

from comisiones.api import router  # noqa: E402
from comisiones.core.config import load_settings  # noqa: E402
from comisiones.storage import SummaryCache  # noqa: E402

settings = load_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

app = FastAPI(title="Comisiones API", version="0.1.0")

app.state.settings = settings
app.state.summary_cache = SummaryCache(max_entries=settings.cache_max_entries)

# CORS pour le frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",
        "http://localhost:3000",
        "http://localhost",
        *settings.allowed_origins,
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router, prefix="/api", tags=["api"])


@app.get("/")
async def root():
    return {"message": "Comisiones API", "version": "0.1.0"}


@app.get("/health")
async def health():
    return {"status": "ok", "cache": app.state.summary_cache.stats()}
