import pytest

from retireplan.api import app


@pytest.fixture
def client():
    app.config["TESTING"] = True
    with app.test_client() as client:
        yield client


def _payload(**overrides):
    payload = {
        "name": "Test Plan",
        "startYear": 2025,
        "horizonYears": 10,
        "profile": {"birthYear": 1990, "retirementAge": 60, "lifeExpectancy": 90},
        "settings": {"inflationRate": 2.0, "investmentReturnRate": 5.0},
        "items": [
            {"title": "Salary", "category": "income", "type": "labor", "amount": 500, "isFixedToRetirement": True},
            {"title": "Living", "category": "expense", "amount": 300},
            {"title": "Fund", "category": "savings", "type": "fund", "amount": 20000, "monthlyContribution": 50},
            {"title": "Bad Row", "category": "crypto", "amount": 1},
        ],
        "children": [{"birthYear": 2022}],
        "virtualExpenses": {"education": True, "medical": True, "tier": "normal"},
    }
    payload.update(overrides)
    return payload


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.get_json() == {"status": "ok"}
    assert response.headers["Access-Control-Allow-Origin"] == "*"


def test_schema_lists_item_columns(client):
    data = client.get("/api/schema").get_json()

    fields = [column["field"] for column in data["items"]["columns"]]
    assert "Title" in fields
    assert data["items"]["monthFields"] == ["Start Month", "End Month"]
    assert len(data["items"]["defaults"]) == 7
    assert set(data["presets"]) == {"optimistic", "average", "pessimistic"}


def test_simulation_returns_result_scores_and_chart(client):
    response = client.post("/api/simulations", json=_payload())

    assert response.status_code == 200
    data = response.get_json()
    snapshots = data["result"]["snapshots"]
    assert [snapshot["year"] for snapshot in snapshots] == list(range(2025, 2035))
    assert 0 <= data["scores"]["overall"] <= 100
    assert data["grade"]
    assert data["chart"]["labels"][0] == "2025"
    expense_titles = {entry["title"] for entry in snapshots[0]["expense_breakdown"]}
    assert "Living" in expense_titles
    assert any(title.startswith("Child 1") for title in expense_titles)


def test_missing_birth_year_is_rejected(client):
    response = client.post("/api/simulations", json=_payload(profile={"retirementAge": 60}))

    assert response.status_code == 400
    assert "error" in response.get_json()


def test_unknown_preset_is_rejected(client):
    response = client.post("/api/simulations", json=_payload(settings={"scenario": "apocalyptic"}))

    assert response.status_code == 400


def test_unknown_chart_period_is_rejected(client):
    response = client.post("/api/simulations", json=_payload(freq="Q"))

    assert response.status_code == 400


def test_export_in_english(client):
    response = client.post("/api/simulations/export?locale=en", json=_payload())

    assert response.status_code == 200
    data = response.get_json()
    assert data["Basic Info"]["Plan Name"] == "Test Plan"
    assert len(data["Yearly"]) == 10


def test_export_rejects_unknown_locale(client):
    response = client.post("/api/simulations/export?locale=fr", json=_payload())

    assert response.status_code == 400


def test_virtual_expense_options_must_be_an_object(client):
    response = client.post("/api/simulations", json=_payload(virtualExpenses=True))

    assert response.status_code == 400
    assert "virtualExpenses" in response.get_json()["error"]
