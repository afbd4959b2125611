# main.py
# Entry point for the PortiFlex backend service.
# - Initializes FastAPI app and logging
# - Registers API routes (auth, portfolio)
# - Provides root health-check endpoint
# - Run with: uvicorn main:app --reload --app-dir backend/src
import logging
import sys
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

sys.path.insert(0, str(Path(__file__).parent))
from api.auth_routes import router as auth_router
from api.portfolio_routes import router as portfolio_router
from api.portfolio_routes import users_router
from config.settings import get_settings

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="PortiFlex Backend API",
    description="Portfolio builder backend: accounts and portfolio documents",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.get("/")
def root():
    return {"status": "healthy", "message": "Backend API is running"}

@app.get("/health")
def health_check():
    return {"status": "ok"}


# Register API routes
app.include_router(auth_router)
app.include_router(portfolio_router)
app.include_router(users_router)

if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="127.0.0.1", port=8000, reload=True)
