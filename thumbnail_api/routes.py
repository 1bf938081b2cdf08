"""
Routes map request hostnames to an ordered list of storages.

The route table is built once at start-up from the route definitions and is
read-only afterwards, so it can be shared by all request threads.
"""

import logging
from types import MappingProxyType
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from .errors import ConfigurationError
from .local_client import LocalClient, LocalConfig
from .object_store import ObjectStore
from .s3_client import S3Client
from .s3_config import S3Config
from .storages import IIIF_STORAGE_NAME, IiifImageServer, MediaStorage, UploadImageStorage

StorageConfig = Union[S3Config, LocalConfig]
RouteDefinition = Tuple[Sequence[str], Sequence[str]]


def create_client(config: StorageConfig, logger: Optional[logging.Logger] = None) -> ObjectStore:
    """Create the object store client for a storage configuration."""
    if isinstance(config, LocalConfig):
        return LocalClient(config, logger)
    return S3Client(config, logger)


def server_name(hostname: str, port: Optional[int] = None) -> str:
    """
    Return the name used to look up the route of a request. For localhost
    the port is appended so different routes can be tried on one machine.
    """
    if hostname.lower() == 'localhost' and port:
        return f"{hostname}:{port}"
    return hostname


def top_level_name(name: str) -> str:
    """Return the part of a hostname before the first dot."""
    return name.split('.', 1)[0]


class StorageRoutes:
    """
    Immutable route table: route name -> ordered tuple of storages.
    The first storage in a route is checked first.
    """

    def __init__(
        self,
        routes: Mapping[str, Sequence[MediaStorage]],
        default_route: str,
        upload_storage: Optional[UploadImageStorage] = None,
        logger: Optional[logging.Logger] = None
    ):
        if not routes:
            raise ConfigurationError("No routes and storages configured!")
        if default_route not in routes:
            raise ConfigurationError(f"Default route {default_route} is not configured")
        for route, storages in routes.items():
            if not storages:
                raise ConfigurationError(f"No storage defined for route {route}")

        self.logger = logger or logging.getLogger(__name__)
        self._routes = MappingProxyType({route: tuple(storages) for route, storages in routes.items()})
        self.default_route = default_route
        self.upload_storage = upload_storage

        storages: Dict[str, MediaStorage] = {}
        for route_storages in self._routes.values():
            for storage in route_storages:
                storages.setdefault(storage.name, storage)
        self._storages = MappingProxyType(storages)

    @classmethod
    def build(
        cls,
        routes: Iterable[RouteDefinition],
        storage_configs: Mapping[str, StorageConfig],
        upload_storage: Optional[str] = None,
        legacy_storages: Iterable[str] = (),
        client_factory: Callable[..., ObjectStore] = create_client,
        logger: Optional[logging.Logger] = None
    ) -> 'StorageRoutes':
        """
        Build the route table from route definitions.

        Args:
            routes: ordered (route names, storage names) pairs. The first route
                name of the first pair becomes the default route.
            storage_configs: connection settings per storage name
            upload_storage: name of the storage that accepts uploads, if any
            legacy_storages: names of storages whose hits are reported for migration tracking
            client_factory: creates an object store client from a storage configuration
            logger: Optional logger instance

        Raises:
            ConfigurationError: if no routes are defined, a route has no
                storages or a storage has no valid configuration
        """
        logger = logger or logging.getLogger(__name__)
        upload_name = upload_storage.strip() if upload_storage and upload_storage.strip() else None
        if upload_name:
            logger.info(f"Configured logo upload storage = {upload_name}")
        legacy = {name.strip().lower() for name in legacy_storages}

        created: Dict[str, MediaStorage] = {}

        def get_storage(name: str) -> MediaStorage:
            cache_key = IIIF_STORAGE_NAME if name.lower() == IIIF_STORAGE_NAME.lower() else name
            storage = created.get(cache_key)
            if storage is not None:
                logger.info(f"Reusing existing storage {storage.name}")
                return storage

            logger.info(f"Setting up new storage {name}...")
            is_legacy = name.lower() in legacy
            if cache_key == IIIF_STORAGE_NAME:
                storage = IiifImageServer(legacy=is_legacy)
            else:
                config = storage_configs.get(name)
                if config is None:
                    raise ConfigurationError(f"No configuration found for storage {name}")
                errors = config.validate()
                if errors:
                    raise ConfigurationError(f"Invalid configuration for storage {name}: " + "; ".join(errors))
                client = client_factory(config)
                if upload_name and name.lower() == upload_name.lower():
                    storage = UploadImageStorage(name, client, legacy=is_legacy)
                else:
                    storage = MediaStorage(name, client, legacy=is_legacy)
            created[cache_key] = storage
            return storage

        table: Dict[str, List[MediaStorage]] = {}
        default_route = None
        for route_names, storage_names in routes:
            names = [n.strip() for n in route_names if n and n.strip()]
            storage_names = [s.strip() for s in storage_names if s and s.strip()]
            if not names:
                continue
            if not storage_names:
                raise ConfigurationError(f"No storage defined for route(s) {names}")
            if default_route is None:
                default_route = names[0]
            route_storages = [get_storage(s) for s in storage_names]
            for name in names:
                logger.info(f"Adding route {name} with storage(s) {storage_names}")
                table[name] = route_storages

        if not table:
            raise ConfigurationError("No routes and storages configured!")

        upload = None
        if upload_name:
            upload = next((s for s in created.values() if isinstance(s, UploadImageStorage)), None)
            if upload is None:
                raise ConfigurationError(f"Upload storage {upload_name} is not used in any route")
        return cls(table, default_route, upload_storage=upload, logger=logger)

    @property
    def routes(self) -> Mapping[str, Tuple[MediaStorage, ...]]:
        """Read-only mapping of route name to ordered storages."""
        return self._routes

    @property
    def storages(self) -> Mapping[str, MediaStorage]:
        """Read-only mapping of storage name to storage, each storage appearing once."""
        return self._storages

    def get_storages(self, name: str) -> Tuple[MediaStorage, ...]:
        """
        Return the storages to retrieve a thumbnail from for a request hostname.

        Matching uses only the part before the first dot: an exact match wins,
        then the first configured route name contained in it, and otherwise
        the default route.
        """
        top_level = top_level_name(name)

        result = self._routes.get(top_level)
        if result is not None:
            self.logger.debug(f"Route {top_level} - found exact match")
            return result

        for route, storages in self._routes.items():
            if route in top_level:
                self.logger.debug(f"Route {top_level} - matched with {route}")
                return storages

        self.logger.warning(f"Route {top_level} - no configured storage found, using default")
        return self._routes[self.default_route]
