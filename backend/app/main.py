from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from .api.websocket import router as ws_router
from .core.config import get_settings

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

app = FastAPI(title="morning-routine-timer", version="0.1.0", description="Step-by-step morning routine timer")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(ws_router)

@app.get("/api/health")
async def health_check():
    return {"status": "ok", "message": "morning-routine-timer API is running", "tick_interval_sec": settings.tick_interval_sec}
