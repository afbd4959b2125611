"""
Pytest configuration and fixtures
"""
import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Add backend/src to sys.path so `api`, `portfolio`, `services` resolve.
PROJECT_ROOT = Path(__file__).resolve().parent.parent
BACKEND_SRC = PROJECT_ROOT / "backend" / "src"
if str(BACKEND_SRC) not in sys.path:
    sys.path.insert(0, str(BACKEND_SRC))

# Set required env vars BEFORE importing the app so settings resolve.
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-service-role-key")
os.environ.setdefault("PORTFOLIO_STORE", "memory")

from main import app  # noqa: E402
from api.dependencies import AuthContext, get_auth_context, get_portfolio_gateway  # noqa: E402
from portfolio.document import PortfolioDocument, Project, Skill  # noqa: E402
from services.portfolio_gateway import PortfolioGateway  # noqa: E402
from services.portfolio_store import InMemoryPortfolioStore  # noqa: E402

TEST_USER_ID = "user-123"


@pytest.fixture
def store():
    return InMemoryPortfolioStore()


@pytest.fixture
def gateway(store):
    return PortfolioGateway(store)


@pytest.fixture
def auth_context():
    return AuthContext(
        user_id=TEST_USER_ID,
        access_token="test-token",
        email="user@example.com",
        name="Alex Morgan",
    )


@pytest.fixture
def client(gateway, auth_context):
    """Return a TestClient with auth and storage overridden."""
    app.dependency_overrides[get_auth_context] = lambda: auth_context
    app.dependency_overrides[get_portfolio_gateway] = lambda: gateway
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def sample_document():
    """A document with two projects and two skills."""
    return PortfolioDocument(
        colors={"heroBg": "#441c90ff", "aboutText": "#333333"},
        projects=[
            Project(
                id=1,
                title="EcoTrack Sustainability Dashboard",
                description="Real-time monitoring of environmental data.",
                tags=["React", "D3.js"],
            ),
            Project(
                id=2,
                title="LocalArt Marketplace",
                description="Connects local artists with buyers.",
                link="https://localart.example.com",
                tags=["Vue.js", "Stripe API"],
            ),
        ],
        skills=[
            Skill(id=1, name="JavaScript/TypeScript", level=9),
            Skill(id=2, name="UI/UX Design", level=7),
        ],
    )
