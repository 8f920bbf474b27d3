import unittest

from fastapi.testclient import TestClient

from dublinbikes.document_db import InMemoryDocumentClient
from dublinbikes.factory import StationServices
from dublinbikes.main import app as fastapi_app
from dublinbikes.models import Station
from dublinbikes.result_cache import ResultCache
from dublinbikes.station_service import StationService
from dublinbikes.station_store import DocumentStationStore, SnapshotStationStore


def _stations():
    return [
        Station(number=1, name="Parnell Square", address="Parnell Square North", bike_stands=10, available_bikes=6),
        Station(number=2, name="Other", address="Nowhere", bike_stands=10, available_bikes=2, status="CLOSED"),
    ]


class TestApi(unittest.TestCase):
    def setUp(self):
        cache = ResultCache(ttl_seconds=60)
        document_store = DocumentStationStore(InMemoryDocumentClient(), database_id="db", container_id="c")
        document_store.initialize(None)
        for station in _stations():
            document_store.add(station)
        self._orig_services = getattr(fastapi_app.state, "services", None)
        fastapi_app.state.services = StationServices(
            cache=cache,
            snapshot=StationService(SnapshotStationStore(_stations()), cache),
            document=StationService(document_store, cache),
            feed=None,
        )
        # no lifespan: services are injected above
        self.client = TestClient(fastapi_app)

    def tearDown(self):
        fastapi_app.state.services = self._orig_services

    def test_ping(self):
        resp = self.client.get("/ping")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["status"], "alive")

    def test_list_with_min_bikes(self):
        for version in ("v1", "v2"):
            resp = self.client.get(f"/api/{version}/stations", params={"minBikes": 5})
            self.assertEqual(resp.status_code, 200)
            data = resp.json()
            self.assertEqual(data["total"], 1)
            self.assertEqual([s["number"] for s in data["items"]], [1])
            self.assertAlmostEqual(data["items"][0]["occupancy"], 0.6)

    def test_list_paging_and_sorting(self):
        resp = self.client.get("/api/v1/stations", params={"page": 2, "pageSize": 1})
        data = resp.json()
        self.assertEqual(data["total"], 2)
        self.assertEqual([s["number"] for s in data["items"]], [2])

        resp = self.client.get("/api/v1/stations", params={"sort": "name", "dir": "desc"})
        self.assertEqual([s["name"] for s in resp.json()["items"]], ["Parnell Square", "Other"])

    def test_unknown_version_rejected(self):
        self.assertEqual(self.client.get("/api/v3/stations").status_code, 422)

    def test_get_station(self):
        resp = self.client.get("/api/v2/stations/2")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["status"], "CLOSED")
        self.assertEqual(self.client.get("/api/v2/stations/99").status_code, 404)

    def test_summary(self):
        data = self.client.get("/api/v1/stations/summary").json()
        self.assertEqual(data["total_stations"], 2)
        self.assertEqual(data["total_available_bikes"], 8)
        self.assertEqual(data["counts_by_status"], {"OPEN": 1, "CLOSED": 1})

    def test_create_then_list(self):
        before = self.client.get("/api/v1/stations").json()["total"]
        resp = self.client.post("/api/v1/stations", json={"number": 30, "name": "New", "bike_stands": 5})
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.headers["location"], "/api/v1/stations/30")
        self.assertEqual(self.client.get("/api/v1/stations").json()["total"], before + 1)

    def test_create_returns_stored_timestamps(self):
        body = {"number": 32, "name": "Stamped", "last_update_utc": "2020-01-01T00:00:00Z"}
        resp = self.client.post("/api/v2/stations", json=body)
        self.assertEqual(resp.status_code, 201)
        stored = self.client.get("/api/v2/stations/32").json()
        self.assertNotEqual(resp.json()["last_update_utc"], "2020-01-01T00:00:00Z")
        self.assertEqual(resp.json()["last_update_utc"], stored["last_update_utc"])

    def test_create_negative_stands_400(self):
        resp = self.client.post("/api/v1/stations", json={"number": 31, "bike_stands": -2})
        self.assertEqual(resp.status_code, 400)

    def test_create_duplicate_document_409(self):
        resp = self.client.post("/api/v2/stations", json={"number": 1, "name": "again"})
        self.assertEqual(resp.status_code, 409)

    def test_update(self):
        body = {"number": 2, "name": "Other", "bike_stands": 10, "available_bikes": 9}
        self.assertEqual(self.client.put("/api/v1/stations/2", json=body).status_code, 204)
        self.assertEqual(self.client.get("/api/v1/stations/2").json()["available_bikes"], 9)

    def test_update_number_mismatch_400(self):
        resp = self.client.put("/api/v1/stations/1", json={"number": 2})
        self.assertEqual(resp.status_code, 400)

    def test_update_missing_404(self):
        resp = self.client.put("/api/v2/stations/77", json={"number": 77})
        self.assertEqual(resp.status_code, 404)


if __name__ == "__main__":
    unittest.main()
