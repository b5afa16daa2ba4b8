from typing import Optional

import clustermgr.connectors  # noqa: F401  (registers bundled connectors)
from clustermgr.config.config import Settings, get_settings
from clustermgr.core.base_class.base_connectors import ClusterConnector
from clustermgr.core.base_class.observer import EventPublisher, LoggingObserver, MetricsObserver
from clustermgr.core.registry import get_connector_class, get_interface_class
from clustermgr.interface.async_cluster_manager import AsyncClusterManager
from clustermgr.interface.cluster_manager import ClusterManager
from clustermgr.utils.logging import get_logger_from_config


class ConnectorFactory:
    """
    Factory for creating connector instances based on configuration.

    The connector class is looked up in the registry by
    ``settings.cluster_connector`` so alternative transports only need to be
    registered with ``@register_connector``.
    """

    def __init__(self, config: Settings):
        """
        Initialize the connector factory with configuration.

        Args:
            config: Application settings/configuration object
        """
        self.config: Settings = config

    def _validate_cluster_config(self) -> bool:
        """Validate cluster configuration"""
        cluster_cfg = self.config.cluster
        return all([
            cluster_cfg.connector,
            cluster_cfg.host,
            cluster_cfg.port,
            cluster_cfg.username,
        ])

    def create_cluster_connector(self) -> ClusterConnector:
        """Create a cluster connector (not started)"""
        if not self._validate_cluster_config():
            raise ValueError("Invalid cluster configuration provided")
        return _create_cluster_connector(self.config)


def _create_cluster_connector(config: Settings) -> ClusterConnector:
    """
    Create the configured cluster connector from Settings (config.cluster).

    Raises:
        KeyError: If no connector is registered under ``cluster_connector``
    """
    logger = get_logger_from_config(config)
    cluster_cfg = config.cluster
    connector_cls = get_connector_class(cluster_cfg.connector)

    return connector_cls(
        host=cluster_cfg.host,
        username=cluster_cfg.username,
        password=cluster_cfg.password,
        get_logger=lambda: logger,
        port=cluster_cfg.port,
        use_ssl=cluster_cfg.use_ssl,
        verify_ssl=cluster_cfg.verify_ssl,
        connect_timeout=cluster_cfg.connect_timeout,
        request_timeout=cluster_cfg.request_timeout,
        max_connections=cluster_cfg.max_connections,
    )


def create_event_publisher(config: Settings) -> EventPublisher:
    """Event publisher with logging and metrics observers attached"""
    logger = get_logger_from_config(config)
    publisher = EventPublisher(logger)
    publisher.subscribe(LoggingObserver(logger))
    publisher.subscribe(MetricsObserver())
    return publisher


def create_cluster_manager(
    settings: Optional[Settings] = None,
    *,
    connector: Optional[ClusterConnector] = None,
    event_publisher: Optional[EventPublisher] = None,
    start: bool = True,
) -> ClusterManager:
    """
    Wire connector, event publisher, asynchronous manager and blocking facade.

    Args:
        settings: Settings to build from (defaults to the global instance)
        connector: Use this connector instead of creating one from settings
        event_publisher: Use this publisher instead of the logging + metrics default
        start: Start the connector before returning

    Returns:
        ClusterManager whose ``async_()`` is the wired AsyncClusterManager
    """
    settings = settings or get_settings()
    logger = get_logger_from_config(settings)

    if connector is None:
        connector = ConnectorFactory(settings).create_cluster_connector()
    if event_publisher is None:
        event_publisher = create_event_publisher(settings)

    interface_cls = get_interface_class("async-cluster-manager")
    async_manager: AsyncClusterManager = interface_cls(connector, event_publisher=event_publisher)
    manager = ClusterManager(
        async_manager,
        default_timeout=settings.cluster_management_timeout,
        get_logger=lambda: logger,
    )

    if start:
        manager.start()
    return manager
