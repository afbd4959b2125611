# API routes module
# Contains all API endpoint definitions

from .auth_routes import router as auth_router
from .portfolio_routes import router as portfolio_router
from .portfolio_routes import users_router

__all__ = ["auth_router", "portfolio_router", "users_router"]
