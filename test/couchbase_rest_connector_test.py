import asyncio
import base64
import unittest
from urllib.parse import parse_qs

import httpx

from clustermgr.connectors import CouchbaseRestConnector
from clustermgr.core.exceptions import (
    BucketAlreadyExistsError,
    BucketNotFoundError,
    DecodeError,
    TransportError,
)
from clustermgr.core.registry import get_all_connectors, get_connector_class
from clustermgr.models import BucketSettings, ClusterInfo, OperationKind, OperationRequest

BUCKET_ENTRY = {
    "name": "travel",
    "bucketType": "membase",
    "quota": {"rawRAM": 256 * 1024 * 1024},
    "replicaNumber": 1,
    "controllers": {},
}


class FakeCouchbase:
    """Routes requests like the management REST API and records them"""

    def __init__(self):
        self.buckets = {"travel": BUCKET_ENTRY}
        self.requests = []
        self.overrides = {}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path)
        if key in self.overrides:
            override = self.overrides[key]
            if isinstance(override, Exception):
                raise override
            return override

        path = request.url.path
        if key == ("GET", "/pools"):
            return httpx.Response(200, json={"implementationVersion": "7.2.0"})
        if key == ("GET", "/pools/default"):
            return httpx.Response(200, json={
                "nodes": [{"hostname": "10.0.0.1:8091", "version": "7.2.0-5325-enterprise"}],
                "storageTotals": {},
            })
        if key == ("GET", "/pools/default/buckets"):
            return httpx.Response(200, json=list(self.buckets.values()))
        if key == ("POST", "/pools/default/buckets"):
            form = parse_qs(request.content.decode())
            name = form["name"][0]
            if name in self.buckets:
                return httpx.Response(400, json={"errors": {"name": "Bucket with given name already exists"}})
            self.buckets[name] = {
                "name": name,
                "bucketType": form["bucketType"][0],
                "quota": {"rawRAM": int(form["ramQuotaMB"][0]) * 1024 * 1024},
            }
            return httpx.Response(202)

        name = path.rsplit("/", 1)[-1]
        if name not in self.buckets:
            return httpx.Response(404, text="Requested resource not found.")
        if request.method == "GET":
            return httpx.Response(200, json=self.buckets[name])
        if request.method == "DELETE":
            del self.buckets[name]
        return httpx.Response(200)


class TestCouchbaseRestConnector(unittest.TestCase):

    def setUp(self):
        self.server = FakeCouchbase()
        self.connector = CouchbaseRestConnector(
            host="cb.local",
            username="admin",
            password="password",
            transport=httpx.MockTransport(self.server),
        )
        self.connector.start(timeout=5)

    def tearDown(self):
        self.connector.stop(timeout=5)

    def execute(self, kind, name=None, settings=None):
        request = OperationRequest(kind, name=name, settings=settings)
        return self.connector.submit(request).wait(5)

    def test_registered(self):
        self.assertIs(get_connector_class("couchbase-rest"), CouchbaseRestConnector)
        self.assertIn("couchbase-rest", get_all_connectors())

    def test_base_url(self):
        self.assertEqual(self.connector.base_url, "http://cb.local:8091")
        secure = CouchbaseRestConnector(host="cb.local", use_ssl=True, port=18091)
        self.assertEqual(secure.base_url, "https://cb.local:18091")

    def test_basic_auth_is_sent(self):
        self.execute(OperationKind.INFO)
        expected = base64.b64encode(b"admin:password").decode()
        self.assertEqual(self.server.requests[-1].headers["authorization"], f"Basic {expected}")

    def test_info(self):
        info = self.execute(OperationKind.INFO)
        self.assertIsInstance(info, ClusterInfo)
        self.assertEqual(info.min_version, (7, 2, 0))

    def test_get_buckets(self):
        buckets = self.execute(OperationKind.LIST)
        self.assertEqual([b.name for b in buckets], ["travel"])
        self.assertEqual(buckets[0].quota, 256)

    def test_get_bucket(self):
        settings = self.execute(OperationKind.GET, name="travel")
        self.assertEqual(settings.name, "travel")
        self.assertEqual(settings.replicas, 1)

    def test_get_missing_bucket(self):
        with self.assertRaises(BucketNotFoundError) as ctx:
            self.execute(OperationKind.GET, name="missing")
        self.assertEqual(ctx.exception.operation, "get_bucket")
        self.assertEqual(ctx.exception.target, "missing")

    def test_has_bucket_does_not_decode_body(self):
        self.server.overrides[("GET", "/pools/default/buckets/travel")] = httpx.Response(200, text="not json")
        self.assertTrue(self.execute(OperationKind.HAS, name="travel"))

    def test_insert_bucket_posts_form(self):
        settings = BucketSettings(name="beer", quota=128, enable_flush=True)
        self.assertEqual(self.execute(OperationKind.INSERT, settings=settings), settings)

        request = self.server.requests[-1]
        self.assertEqual(request.method, "POST")
        form = parse_qs(request.content.decode())
        self.assertEqual(form["name"], ["beer"])
        self.assertEqual(form["ramQuotaMB"], ["128"])
        self.assertEqual(form["flushEnabled"], ["1"])
        self.assertIn("beer", self.server.buckets)

    def test_insert_existing_bucket(self):
        with self.assertRaises(BucketAlreadyExistsError):
            self.execute(OperationKind.INSERT, settings=BucketSettings(name="travel"))

    def test_insert_rejected_for_other_reason(self):
        self.server.overrides[("POST", "/pools/default/buckets")] = httpx.Response(
            400, json={"errors": {"ramQuotaMB": "RAM quota cannot be less than 100 MB"}}
        )
        with self.assertRaises(TransportError) as ctx:
            self.execute(OperationKind.INSERT, settings=BucketSettings(name="tiny", quota=10))
        self.assertEqual(ctx.exception.status_code, 400)
        self.assertIn("RAM quota", ctx.exception.details["body"])

    def test_update_bucket_posts_to_bucket_path(self):
        settings = BucketSettings(name="travel", quota=512)
        self.assertEqual(self.execute(OperationKind.UPDATE, settings=settings), settings)

        request = self.server.requests[-1]
        self.assertEqual((request.method, request.url.path), ("POST", "/pools/default/buckets/travel"))
        form = parse_qs(request.content.decode())
        self.assertNotIn("name", form)
        self.assertEqual(form["ramQuotaMB"], ["512"])

    def test_update_missing_bucket(self):
        with self.assertRaises(BucketNotFoundError):
            self.execute(OperationKind.UPDATE, settings=BucketSettings(name="missing"))

    def test_remove_bucket(self):
        self.assertTrue(self.execute(OperationKind.REMOVE, name="travel"))
        self.assertEqual(self.server.requests[-1].method, "DELETE")
        with self.assertRaises(BucketNotFoundError):
            self.execute(OperationKind.REMOVE, name="travel")

    def test_bucket_name_is_quoted(self):
        with self.assertRaises(BucketNotFoundError):
            self.execute(OperationKind.GET, name="a/b")
        self.assertEqual(self.server.requests[-1].url.raw_path, b"/pools/default/buckets/a%2Fb")

    def test_server_error(self):
        self.server.overrides[("GET", "/pools/default")] = httpx.Response(500, text="internal")
        with self.assertRaises(TransportError) as ctx:
            self.execute(OperationKind.INFO)
        self.assertEqual(ctx.exception.status_code, 500)

    def test_info_not_found_is_transport_error(self):
        self.server.overrides[("GET", "/pools/default")] = httpx.Response(404)
        with self.assertRaises(TransportError):
            self.execute(OperationKind.INFO)

    def test_connection_error(self):
        self.server.overrides[("GET", "/pools/default/buckets")] = httpx.ConnectError("refused")
        with self.assertRaises(TransportError) as ctx:
            self.execute(OperationKind.LIST)
        self.assertIsInstance(ctx.exception.__cause__, httpx.ConnectError)

    def test_invalid_json(self):
        self.server.overrides[("GET", "/pools/default/buckets/travel")] = httpx.Response(200, text="{")
        with self.assertRaises(DecodeError):
            self.execute(OperationKind.GET, name="travel")

    def test_unexpected_shape(self):
        self.server.overrides[("GET", "/pools/default/buckets")] = httpx.Response(200, json={"name": "x"})
        with self.assertRaises(DecodeError):
            self.execute(OperationKind.LIST)

    def test_incomplete_request_is_transport_error(self):
        sent = len(self.server.requests)
        with self.assertRaises(TransportError) as ctx:
            self.execute(OperationKind.GET)
        self.assertEqual(ctx.exception.operation, "get_bucket")
        with self.assertRaises(TransportError):
            self.execute(OperationKind.UPDATE, name="travel")
        self.assertEqual(len(self.server.requests), sent)

    def test_health_check(self):
        healthy = asyncio.run_coroutine_threadsafe(
            self.connector.health_check(), self.connector.loop
        ).result(5)
        self.assertTrue(healthy)
        self.assertTrue(self.connector.is_healthy())

    def test_health_check_failure(self):
        self.server.overrides[("GET", "/pools")] = httpx.ConnectError("refused")
        healthy = asyncio.run_coroutine_threadsafe(
            self.connector.health_check(), self.connector.loop
        ).result(5)
        self.assertFalse(healthy)
        self.assertFalse(self.connector.is_healthy())


class TestConnectorLifecycle(unittest.TestCase):

    def test_submit_before_start_fails(self):
        connector = CouchbaseRestConnector(transport=httpx.MockTransport(FakeCouchbase()))
        pending = connector.submit(OperationRequest(OperationKind.INFO))
        with self.assertRaises(TransportError) as ctx:
            pending.wait(1)
        self.assertIn("not started", ctx.exception.message)

    def test_context_manager_starts_and_stops(self):
        connector = CouchbaseRestConnector(transport=httpx.MockTransport(FakeCouchbase()))
        with connector:
            self.assertTrue(connector.is_running())
            self.assertTrue(connector.is_healthy())
        self.assertFalse(connector.is_running())
        self.assertFalse(connector.is_healthy())

    def test_start_is_idempotent(self):
        connector = CouchbaseRestConnector(transport=httpx.MockTransport(FakeCouchbase()))
        try:
            connector.start(timeout=5)
            loop = connector.loop
            connector.start(timeout=5)
            self.assertIs(connector.loop, loop)
        finally:
            connector.stop(timeout=5)

    def test_stop_from_loop_thread_is_refused(self):
        connector = CouchbaseRestConnector(transport=httpx.MockTransport(FakeCouchbase()))
        connector.start(timeout=5)

        async def stop_on_loop():
            connector.stop(timeout=1)

        try:
            with self.assertRaises(RuntimeError):
                asyncio.run_coroutine_threadsafe(stop_on_loop(), connector.loop).result(5)
            self.assertTrue(connector.is_running())
        finally:
            connector.stop(timeout=5)


if __name__ == "__main__":
    unittest.main()
