"""
Integration tests for all REST API endpoints via TestClient.
"""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

PROJECT_ROOT = Path(__file__).resolve().parents[2]
SAMPLE_PATH = PROJECT_ROOT / "data" / "sample" / "stanton_extract.json"


@pytest.fixture(scope="module")
def client(tmp_path_factory):
    """Create a test client over the sample feed and a throwaway database."""
    import starnav.api.database as db_mod
    from starnav.api.main import app

    db_path = tmp_path_factory.mktemp("db") / "api.db"
    with pytest.MonkeyPatch.context() as mp:
        mp.setenv("STARNAV_DATA_PATH", str(SAMPLE_PATH))
        mp.setenv("STARNAV_CONFIG_DIR", str(PROJECT_ROOT / "config"))
        mp.delenv("DATABASE_URL", raising=False)
        mp.setattr(db_mod, "DB_PATH", db_path)
        mp.setattr(db_mod, "_engine", None)
        mp.setattr(db_mod, "_SessionLocal", None)
        with TestClient(app) as c:
            yield c


class TestHealthEndpoint:
    def test_health(self, client):
        r = client.get("/api/health")
        assert r.status_code == 200
        data = r.json()
        assert data["status"] == "ok"
        assert data["system"] == "Stanton"
        assert data["objects_loaded"] == 16
        assert data["root_id"] == "stanton_star"
        assert data["valid"] is True


class TestObjectsEndpoints:
    def test_list_objects(self, client):
        r = client.get("/api/objects")
        assert r.status_code == 200
        data = r.json()
        assert len(data) == 16
        assert {"id", "display_name", "object_type", "parent_id", "inferred"} <= set(data[0])

    def test_list_objects_filter_type(self, client):
        r = client.get("/api/objects?object_type=Planet")
        assert r.status_code == 200
        assert [o["id"] for o in r.json()] == ["stanton1", "stanton2", "stanton3", "stanton4"]

    def test_list_objects_unknown_type(self, client):
        r = client.get("/api/objects?object_type=Nebula")
        assert r.status_code == 400

    def test_list_objects_filter_parent(self, client):
        r = client.get("/api/objects?parent_id=stanton4")
        ids = {o["id"] for o in r.json()}
        assert ids == {"stanton4_outpost_shubin", "stanton4_landingzone_newbabbage"}

    def test_list_objects_pagination(self, client):
        r = client.get("/api/objects?limit=5&offset=10")
        assert r.status_code == 200
        assert len(r.json()) == 5

    def test_get_object(self, client):
        r = client.get("/api/objects/stanton1a")
        assert r.status_code == 200
        data = r.json()
        assert data["display_name"] == "Arial"
        assert data["object_type"] == "Moon"
        assert data["parent_id"] == "stanton1"
        assert data["absolute_position"] == {"x": 12850457.0 - 151050.0, "y": 294500.0, "z": 0.0}

    def test_get_inferred_object(self, client):
        r = client.get("/api/objects/stanton1_l1")
        assert r.status_code == 200
        data = r.json()
        assert data["inferred"] is True
        assert data["object_type"] == "LagrangePoint"
        assert data["parent_id"] == "stanton1"
        assert data["children"] == ["stanton1_l1_station_reststop"]

    def test_get_object_not_found(self, client):
        r = client.get("/api/objects/stanton9")
        assert r.status_code == 404

    def test_children(self, client):
        r = client.get("/api/objects/stanton2/children")
        assert r.status_code == 200
        assert {o["id"] for o in r.json()} == {"stanton2b", "stanton2_l4", "stanton_station_portolisar"}

    def test_children_not_found(self, client):
        assert client.get("/api/objects/stanton9/children").status_code == 404

    def test_absolute_position(self, client):
        r = client.get("/api/objects/stanton1/absolute-position")
        assert r.status_code == 200
        assert r.json() == {"x": 12850457.0, "y": 0.0, "z": 0.0}

    def test_orbit(self, client):
        r = client.get("/api/objects/stanton1a/orbit?steps=12")
        assert r.status_code == 200
        assert len(r.json()["points"]) == 12

    def test_orbit_not_found(self, client):
        assert client.get("/api/objects/nope/orbit").status_code == 404


class TestSystemEndpoints:
    def test_validation(self, client):
        r = client.get("/api/system/validation")
        assert r.status_code == 200
        assert r.json() == {"valid": True, "issues": []}

    def test_statistics(self, client):
        r = client.get("/api/system/statistics")
        assert r.status_code == 200
        data = r.json()
        assert data["object_count"] == 16
        assert data["counts_by_type"]["Planet"] == 4
        assert data["max_depth"] == 3
        assert data["parent_stats"]["stanton_star"] == 6

    def test_hierarchy(self, client):
        r = client.get("/api/system/hierarchy")
        assert r.status_code == 200
        lines = r.text.splitlines()
        assert lines[0] == "Star System: Stanton"
        assert lines[1] == "Stanton (Star)"
        assert "    L1 (LagrangePoint)" in lines

    def test_disconnected(self, client):
        r = client.get("/api/system/disconnected")
        assert r.status_code == 200
        assert r.json() == []

    def test_repairs(self, client):
        r = client.get("/api/system/repairs")
        assert r.status_code == 200
        rules = {d["object_id"]: d["rule"] for d in r.json()}
        assert rules == {
            "stanton_star": "root_sentinel_cleared",
            "stanton2_l4": "lagrange_to_planet",
            "stanton_orbitmarker_om1": "default_to_root",
        }


class TestAlertAndRouteEndpoints:
    def test_plan_route(self, client):
        r = client.post("/api/routes/plan", json={"start_id": "stanton1", "end_id": "stanton3"})
        assert r.status_code == 200
        data = r.json()
        assert len(data["waypoints"]) == 3
        assert data["fuel_required"] == 0.0

    def test_plan_route_with_ship(self, client):
        r = client.post("/api/routes/plan", json={
            "start_id": "stanton1",
            "end_id": "stanton3",
            "ship": {"quantum_speed": 100000, "fuel_consumption": 1.0},
        })
        assert r.status_code == 200
        data = r.json()
        assert data["total_time"] == pytest.approx(data["total_distance"] / 100000)
        assert data["fuel_required"] == pytest.approx(data["total_distance"] / 1_000_000)

    def test_plan_route_not_found(self, client):
        r = client.post("/api/routes/plan", json={"start_id": "stanton1", "end_id": "stanton9"})
        assert r.status_code == 404

    def test_plan_route_invalid_body(self, client):
        r = client.post("/api/routes/plan", json={"start_id": "stanton1"})
        assert r.status_code == 422

    def test_report_and_vote(self, client):
        report = {
            "user_id": "api_pilot",
            "position": {"x": 12850457.0, "y": 0.0, "z": 0.0},
            "region_id": "stanton1",
            "alert_type": "pirate",
            "description": "Interdiction near Hurston",
        }
        r = client.post("/api/alerts", json=report)
        assert r.status_code == 201
        alert = r.json()
        assert alert["safety_score"] == 20.0
        assert alert["confirmations"] == 1
        assert alert["color"] == "#FF4136"

        # Throttled: same user, same region
        r = client.post("/api/alerts", json=report)
        assert r.status_code == 429

        r = client.post(f"/api/alerts/{alert['id']}/dispute", json={"user_id": "wingman"})
        assert r.status_code == 200
        assert r.json()["disputes"] == 1
        assert r.json()["safety_score"] == pytest.approx(80.0)

        r = client.post(f"/api/alerts/{alert['id']}/confirm", json={"user_id": "wingman"})
        assert r.json()["confirmations"] == 2
        assert r.json()["disputes"] == 0

        r = client.get("/api/alerts?region_id=stanton1")
        assert [a["id"] for a in r.json()] == [alert["id"]]

        # The hazard now shows up on routes starting at Hurston
        r = client.post("/api/routes/plan", json={"start_id": "stanton1", "end_id": "stanton3"})
        assert r.json()["waypoints"][0]["nearby_alert_ids"] == [alert["id"]]

        r = client.post("/api/routes/alternatives", json={"start_id": "stanton1", "end_id": "stanton3"})
        assert r.status_code == 200
        scores = [p["overall_safety_score"] for p in r.json()]
        assert scores == sorted(scores, reverse=True)

    def test_vote_unknown_alert(self, client):
        r = client.post("/api/alerts/alert_0_nobody/confirm", json={"user_id": "x"})
        assert r.status_code == 404

    def test_report_invalid_type(self, client):
        r = client.post("/api/alerts", json={
            "user_id": "u",
            "position": {"x": 0, "y": 0, "z": 0},
            "region_id": "r",
            "alert_type": "meteor",
        })
        assert r.status_code == 422

    def test_saved_routes(self, client):
        r = client.post("/api/routes/saved", json={
            "start_id": "stanton2",
            "end_id": "stanton4",
            "user_id": "hauler_one",
            "name": "Crusader to microTech",
        })
        assert r.status_code == 201
        saved = r.json()
        assert saved["id"].startswith("route_")
        assert saved["waypoints"] == ["stanton2", "midpoint", "stanton4"]

        r = client.get("/api/routes/saved?user_id=hauler_one")
        assert [s["id"] for s in r.json()] == [saved["id"]]

    def test_fresh_alert_has_no_decay(self, client):
        r = client.post("/api/alerts", json={
            "user_id": "decay_pilot",
            "position": {"x": 0, "y": 0, "z": 0},
            "region_id": "stanton4",
            "alert_type": "debris",
        })
        assert r.status_code == 201
        assert 0.0 <= r.json()["decay"] < 0.01

    def test_expired_alert_decay_uses_configured_rate(self, client):
        from starnav.alerts.scoring import create_route_alert
        from starnav.api.database import store_alert
        from starnav.utils.geometry import Position

        old = create_route_alert("old_pilot", Position(0, 0, 0), "stale_region", "anomaly", "s1", now=1_700_000_000_000)
        store_alert(old)

        r = client.get("/api/alerts?region_id=stale_region&include_inactive=true")
        assert r.status_code == 200
        [alert] = r.json()
        assert alert["is_active"] is False
        assert alert["decay"] == pytest.approx(0.5)
