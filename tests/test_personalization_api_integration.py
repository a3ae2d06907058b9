from __future__ import annotations

import asyncio
import unittest

from fastapi import FastAPI
from fastapi.testclient import TestClient

from affinity.api.deps import get_personalization_sessions
from affinity.api.v1.endpoints import personalization as personalization_endpoints
from affinity.personalization.keys import PersonalizationKeys
from affinity.personalization.sessions import PersonalizationSessions
from affinity.personalization.store import RedisKeyValueStore
from tests.catalog_fixtures import build_snapshot
from tests.fake_redis import FakeRedis, FakeRedisClient

_BASE = "/api/v1/personalization"


class PersonalizationApiIntegrationTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._redis = FakeRedis()
        store = RedisKeyValueStore(FakeRedisClient(self._redis))  # type: ignore[arg-type]
        self._sessions = PersonalizationSessions(build_snapshot(), store, keys=PersonalizationKeys.with_prefix(""))

        app = FastAPI()
        app.include_router(personalization_endpoints.router, prefix=_BASE)
        app.dependency_overrides[get_personalization_sessions] = lambda: self._sessions
        # 复用同一个事件循环，后台写任务不会随单次请求结束被取消
        self._client = TestClient(app)
        self._client.__enter__()

        asyncio.run(self._redis.flushdb())

    def tearDown(self) -> None:
        self._client.__exit__(None, None, None)

    def _like_all(self, user_id: str, product_ids: list[str]) -> dict:
        body: dict = {}
        for pid in product_ids:
            r = self._client.put(f"{_BASE}/{user_id}/likes/{pid}")
            self.assertEqual(r.status_code, 200, r.text)
            body = r.json()
        return body

    def test_like_flow_triggers_on_fourth(self) -> None:
        body = self._like_all("u1", ["nav-1", "nav-2", "nav-3"])
        self.assertIsNone(body["trigger"])
        self.assertEqual(body["total"], 3)

        r = self._client.get(f"{_BASE}/u1/trigger")
        self.assertEqual(r.status_code, 404, r.text)

        body = self._like_all("u1", ["nav-4"])
        self.assertEqual(body["trigger"]["collection_id"], "navitimer")
        self.assertEqual(body["trigger"]["like_count"], 4)
        self.assertAlmostEqual(body["trigger"]["confidence"], 4 / 6, places=6)

        r = self._client.get(f"{_BASE}/u1/trigger")
        self.assertEqual(r.status_code, 200, r.text)
        self.assertEqual(r.json()["title"], "Navitimer tagline")

        r = self._client.get(f"{_BASE}/u1/likes")
        self.assertEqual(r.status_code, 200, r.text)
        self.assertEqual(r.json()["liked_ids"], ["nav-1", "nav-2", "nav-3", "nav-4"])

    def test_unlike_is_idempotent(self) -> None:
        self._like_all("u1", ["nav-1"])
        for _ in range(2):
            r = self._client.delete(f"{_BASE}/u1/likes/nav-1")
            self.assertEqual(r.status_code, 200, r.text)
            self.assertEqual(r.json()["liked_ids"], [])

    def test_content_package(self) -> None:
        r = self._client.get(f"{_BASE}/u2/content")
        self.assertEqual(r.status_code, 404, r.text)

        self._like_all("u2", ["nav-1", "nav-2", "nav-3", "nav-4"])
        r = self._client.get(f"{_BASE}/u2/content")
        self.assertEqual(r.status_code, 200, r.text)
        content = r.json()
        self.assertEqual(content["collection"]["id"], "navitimer")
        self.assertEqual([x["product"]["id"] for x in content["recommendations"]], ["nav-5", "chr-1"])
        self.assertEqual(content["recommendations"][1]["priority"], 3)
        self.assertEqual(len(content["actions"]), 4)
        self.assertEqual(content["insights"][0]["id"], "navitimer-heritage-appreciation")

    def test_insights_endpoint(self) -> None:
        self._like_all("u3", ["nav-1", "nav-2", "sku-123"])
        r = self._client.get(f"{_BASE}/u3/insights")
        self.assertEqual(r.status_code, 200, r.text)
        body = r.json()
        self.assertEqual(body["total_likes"], 3)
        self.assertEqual(body["collection_affinities"], {"Navitimer": 2})
        self.assertEqual(body["dominant_collection"]["id"], "navitimer")

    def test_recommendations_by_context(self) -> None:
        r = self._client.get(f"{_BASE}/u4/recommendations", params={"collection_id": "chronomat"})
        self.assertEqual(r.status_code, 200, r.text)
        self.assertEqual(r.json()["context"], "collection_browsing")
        self.assertEqual([x["product"]["id"] for x in r.json()["items"]], ["chr-1", "chr-2"])

        r = self._client.get(f"{_BASE}/u4/recommendations", params={"product_id": "so-1"})
        self.assertEqual(r.status_code, 200, r.text)
        self.assertEqual(r.json()["context"], "product_viewing")
        self.assertEqual([x["product"]["id"] for x in r.json()["items"]], ["so-2", "so-3"])

        r = self._client.get(f"{_BASE}/u4/recommendations")
        self.assertEqual(r.status_code, 200, r.text)
        self.assertEqual(r.json(), {"context": "personalization_modal", "items": []})

        r = self._client.get(
            f"{_BASE}/u4/recommendations", params={"collection_id": "chronomat", "product_id": "so-1"}
        )
        self.assertEqual(r.status_code, 400, r.text)

    def test_page_view_tracking(self) -> None:
        r = self._client.post(
            f"{_BASE}/u5/page-views",
            json={"page": "product_detail", "product_id": "nav-1", "collection_id": "navitimer"},
        )
        self.assertEqual(r.status_code, 200, r.text)
        self.assertTrue(r.json()["success"])

        r = self._client.post(f"{_BASE}/u5/page-views", json={"page": "nowhere"})
        self.assertEqual(r.status_code, 422, r.text)


if __name__ == "__main__":
    unittest.main()
