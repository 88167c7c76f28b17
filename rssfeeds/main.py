# rssfeeds/main.py
from typing import Dict

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from rssfeeds.config import ALLOWED_ORIGINS
from rssfeeds.routes.feeds import router as feeds_router

app = FastAPI(title="RSS Feeds")

# Browser-based readers fetch feeds cross-origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS or ["*"],
    allow_methods=["GET"],
    allow_headers=["*"],
)

# Routers
app.include_router(feeds_router)


@app.get("/health")
def health() -> Dict[str, str]:
    return {"ok": "true"}
