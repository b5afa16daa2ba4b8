import unittest

from fake_cluster import InMemoryClusterConnector, bucket

from clustermgr.config import Settings
from clustermgr.connectors import CouchbaseRestConnector
from clustermgr.core.base_class.observer import EventPublisher, MetricsObserver
from clustermgr.core.factories import ConnectorFactory, create_cluster_manager
from clustermgr.interface import AsyncClusterManager, ClusterManager


class TestConnectorFactory(unittest.TestCase):

    def test_creates_configured_connector(self):
        settings = Settings(
            _env_file=None,
            cluster_host="cb.example.com",
            cluster_port=18091,
            cluster_username="admin",
            cluster_password="secret",
            cluster_use_ssl=True,
            cluster_request_timeout=12,
        )
        connector = ConnectorFactory(settings).create_cluster_connector()

        self.assertIsInstance(connector, CouchbaseRestConnector)
        self.assertEqual(connector.base_url, "https://cb.example.com:18091")
        self.assertEqual(connector.username, "admin")
        self.assertEqual(connector.password, "secret")
        self.assertEqual(connector.request_timeout, 12)
        self.assertFalse(connector.is_running())

    def test_rejects_incomplete_config(self):
        settings = Settings(_env_file=None, cluster_host="")
        with self.assertRaises(ValueError):
            ConnectorFactory(settings).create_cluster_connector()

    def test_unknown_connector(self):
        settings = Settings(_env_file=None, cluster_connector="carrier-pigeon")
        with self.assertRaises(KeyError):
            ConnectorFactory(settings).create_cluster_connector()


class TestCreateClusterManager(unittest.TestCase):

    def setUp(self):
        self.settings = Settings(_env_file=None, cluster_management_timeout=9)

    def test_wires_manager_over_given_connector(self):
        connector = InMemoryClusterConnector()
        metrics = MetricsObserver()
        publisher = EventPublisher()
        publisher.subscribe(metrics)

        with create_cluster_manager(
            self.settings, connector=connector, event_publisher=publisher
        ) as manager:
            self.assertIsInstance(manager, ClusterManager)
            self.assertIsInstance(manager.async_(), AsyncClusterManager)
            self.assertIs(manager.async_().worker, connector)
            self.assertEqual(manager.default_timeout, 9.0)
            self.assertTrue(connector.is_running())

            manager.insert_bucket(bucket("travel"))

        self.assertFalse(connector.is_running())
        self.assertEqual(metrics.get_metrics()["in-memory.insert_bucket"]["count"], 1)

    def test_default_publisher(self):
        manager = create_cluster_manager(
            self.settings, connector=InMemoryClusterConnector(), start=False
        )
        observers = manager.async_().event_publisher.observers
        self.assertEqual(
            sorted(type(o).__name__ for o in observers), ["LoggingObserver", "MetricsObserver"]
        )
        self.assertFalse(manager.async_().worker.is_running())

    def test_connect_builds_rest_connector(self):
        with ClusterManager.connect(self.settings) as manager:
            self.assertIsInstance(manager.async_().worker, CouchbaseRestConnector)
            self.assertTrue(manager.async_().worker.is_running())


if __name__ == "__main__":
    unittest.main()
