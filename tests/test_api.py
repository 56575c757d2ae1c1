"""
Testy dla FastAPI backendu planera.
"""

import pytest
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from fastapi.testclient import TestClient

from api.main import app


# ═══════════════════════════════════════════════════════════════════════════
# FIXTURES
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def duel_request():
    """Agent u na (0, 0), ork z 2 HP na (2, 0)."""
    return {
        "agent_id": "u",
        "facts": {
            "at(u)": [0, 0],
            "at(orc)": [2, 0],
            "alive(orc)": True,
            "health(orc)": 2,
        },
        "goal": {"alive(orc)": False},
        "domains": {"positions": [[0, 0], [2, 0]], "enemies": ["orc"]},
    }


# ═══════════════════════════════════════════════════════════════════════════
# TEST: ENDPOINTY
# ═══════════════════════════════════════════════════════════════════════════

def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_templates(client):
    """Lista stockowych szablonów."""
    response = client.get("/api/templates")
    ids = [t["id"] for t in response.json()]

    assert response.status_code == 200
    assert ids == ["MoveTo", "Attack", "Pickup"]


def test_plan_found(client, duel_request):
    """Plan podejścia i dwóch ataków."""
    response = client.post("/api/plan", json=duel_request)
    data = response.json()

    assert response.status_code == 200
    assert data["status"] == "FOUND"
    assert data["actions"] == ["MoveTo((2, 0))", "Attack(orc)", "Attack(orc)"]
    assert data["plan"]["cost"] == 4.0


def test_plan_budget_exceeded(client, duel_request):
    """Budżet z requestu."""
    duel_request["max_expansions"] = 1
    data = client.post("/api/plan", json=duel_request).json()

    assert data["status"] == "BUDGET_EXCEEDED"
    assert data["plan"] is None
    assert data["actions"] == []


def test_plan_unreachable(client, duel_request):
    """Nieosiągalny cel -> NO_PLAN_FOUND (200, nie błąd)."""
    duel_request["goal"] = {"holding(u)": "sword"}
    response = client.post("/api/plan", json=duel_request)

    assert response.status_code == 200
    assert response.json()["status"] == "NO_PLAN_FOUND"


def test_plan_invalid_fact_value(client, duel_request):
    """Float nie jest wartością faktu."""
    duel_request["facts"]["speed(u)"] = 1.5
    response = client.post("/api/plan", json=duel_request)
    assert response.status_code == 400


def test_plan_malformed_position_domain(client, duel_request):
    """Pozycja w domenie musi być parą [q, r]."""
    duel_request["domains"]["positions"] = [[1]]
    response = client.post("/api/plan", json=duel_request)

    assert response.status_code == 400
    assert "Invalid position" in response.json()["detail"]


def test_strategic_selection(client):
    """Wybór celu strategicznego i cel na bieżącą turę."""
    response = client.post("/api/strategic", json={
        "unit_id": "u",
        "facts": {"at(u)": [0, 0], "castle_at(keep)": [10, 0], "castle_hp(keep)": 50},
        "goals": ["ReachArea:8,0:rally", "SiegeCastle:keep"],
    })
    data = response.json()

    assert response.status_code == 200
    assert data["selected"] == "SiegeCastle:keep"
    assert data["goal"]["conditions"] == {"at(u)": [3, 0]}


def test_strategic_unknown_goal(client):
    response = client.post("/api/strategic", json={"unit_id": "u", "facts": {}, "goals": ["Dance:now"]})
    assert response.status_code == 400
