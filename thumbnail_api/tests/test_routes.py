"""Tests for StorageRoutes."""

import logging
from unittest.mock import MagicMock

import pytest

from thumbnail_api.errors import ConfigurationError
from thumbnail_api.local_client import LocalClient, LocalConfig
from thumbnail_api.routes import StorageRoutes, create_client, server_name
from thumbnail_api.s3_config import S3Config
from thumbnail_api.storages import IiifImageServer, UploadImageStorage

ROUTES = [
    (['acme', 'localhost:8081'], ['default', 'prod1', 'prod2', 'IIIF-IS']),
    (['test2'], ['test2']),
    (['unittest3'], ['default']),
]


def valid_config(name):
    return S3Config(name=name, bucket=f"{name}-bucket", access_key='key', secret_key='secret', region='eu')


def storage_configs(*names):
    return {name: valid_config(name) for name in names}


def storage_names(storages):
    return [s.name for s in storages]


class TestStorageRoutes:
    """Tests for building the route table and resolving hostnames."""

    @pytest.fixture
    def client_factory(self):
        return MagicMock(side_effect=lambda config: MagicMock(name=config.name))

    @pytest.fixture
    def routes(self, client_factory):
        return StorageRoutes.build(
            ROUTES,
            storage_configs('default', 'prod1', 'prod2', 'test2'),
            client_factory=client_factory,
        )

    def test_routes(self, routes):
        """Test that every route gets its storages in the configured order."""
        assert storage_names(routes.get_storages('acme')) == ['default', 'prod1', 'prod2', 'IIIF-IS']
        assert storage_names(routes.get_storages('localhost:8081')) == ['default', 'prod1', 'prod2', 'IIIF-IS']
        assert storage_names(routes.get_storages('test2')) == ['test2']
        assert storage_names(routes.get_storages('unittest3')) == ['default']
        assert routes.default_route == 'acme'
        assert routes.upload_storage is None

    def test_exact_match_uses_top_level_name(self, routes):
        assert storage_names(routes.get_storages('test2.europeana.eu')) == ['test2']

    def test_contains_match(self, routes):
        """Test that a configured route name contained in the hostname matches."""
        assert storage_names(routes.get_storages('my-unittest2-route')) == ['test2']
        assert storage_names(routes.get_storages('my-unittest3.example.org')) == ['default']

    def test_default_route(self, routes, caplog):
        """Test that unknown hostnames get the first route, with a warning."""
        with caplog.at_level(logging.WARNING):
            result = routes.get_storages('unrelated.org')

        assert result == routes.get_storages('acme')
        assert "no configured storage found" in caplog.text

    def test_storages_are_shared(self, routes, client_factory):
        """Test that a storage used by several routes is created once."""
        assert routes.get_storages('acme')[0] is routes.get_storages('unittest3')[0]
        assert client_factory.call_count == 4
        assert set(routes.storages) == {'default', 'prod1', 'prod2', 'test2', 'IIIF-IS'}
        assert isinstance(routes.storages['IIIF-IS'], IiifImageServer)

    def test_iiif_name_case_insensitive(self, client_factory):
        routes = StorageRoutes.build(
            [(['a'], ['iiif-is']), (['b'], ['IIIF-IS'])], {}, client_factory=client_factory
        )
        assert routes.get_storages('a')[0] is routes.get_storages('b')[0]
        client_factory.assert_not_called()

    def test_routes_are_read_only(self, routes):
        with pytest.raises(TypeError):
            routes.routes['new'] = ()
        assert isinstance(routes.get_storages('acme'), tuple)

    def test_legacy_storages(self, client_factory):
        routes = StorageRoutes.build(ROUTES, storage_configs('default', 'prod1', 'prod2', 'test2'),
                                     legacy_storages=['prod2'], client_factory=client_factory)

        assert [s.legacy for s in routes.get_storages('acme')] == [False, False, True, False]

    def test_upload_storage(self, client_factory):
        routes = StorageRoutes.build(
            ROUTES + [(['logos'], ['logo-storage'])],
            storage_configs('default', 'prod1', 'prod2', 'test2', 'logo-storage'),
            upload_storage='logo-storage',
            client_factory=client_factory,
        )

        assert isinstance(routes.upload_storage, UploadImageStorage)
        assert routes.upload_storage is routes.get_storages('logos')[0]

    def test_upload_storage_not_in_routes(self, client_factory):
        with pytest.raises(ConfigurationError):
            StorageRoutes.build(ROUTES, storage_configs('default', 'prod1', 'prod2', 'test2', 'logo-storage'),
                                upload_storage='logo-storage', client_factory=client_factory)

    def test_no_routes(self, client_factory):
        with pytest.raises(ConfigurationError):
            StorageRoutes.build([], {}, client_factory=client_factory)

    def test_route_without_storages(self, client_factory):
        with pytest.raises(ConfigurationError):
            StorageRoutes.build([(['acme'], [])], {}, client_factory=client_factory)

    def test_storage_without_config(self, client_factory):
        """Test that a storage without connection settings is a configuration error."""
        with pytest.raises(ConfigurationError):
            StorageRoutes.build(ROUTES, storage_configs('default', 'prod1'), client_factory=client_factory)

    def test_storage_with_invalid_config(self, client_factory):
        configs = storage_configs('default', 'prod1', 'prod2', 'test2')
        configs['prod1'] = S3Config(name='prod1')

        with pytest.raises(ConfigurationError) as e:
            StorageRoutes.build(ROUTES, configs, client_factory=client_factory)
        assert 'PROD1_S3_BUCKET' in e.value.message

    def test_route_definitions(self, client_factory):
        """Test that the shipped route definitions build a valid route table."""
        import route_definitions

        names = {name for _, storages in route_definitions.ROUTES for name in storages}
        routes = StorageRoutes.build(
            route_definitions.ROUTES,
            storage_configs(*names),
            upload_storage=route_definitions.LOGO_UPLOAD_STORAGE,
            legacy_storages=route_definitions.LEGACY_STORAGES,
            client_factory=client_factory,
        )

        assert routes.default_route == route_definitions.ROUTES[0][0][0]
        assert routes.upload_storage is not None


class TestServerName:
    """Tests for server_name and create_client."""

    def test_localhost_gets_port(self):
        assert server_name('localhost', 8081) == 'localhost:8081'
        assert server_name('LOCALHOST', 8081) == 'LOCALHOST:8081'

    def test_other_hosts_without_port(self):
        assert server_name('api.europeana.eu', 8081) == 'api.europeana.eu'

    def test_create_local_client(self, tmp_path):
        client = create_client(LocalConfig(name='local', root_path=str(tmp_path)))
        assert isinstance(client, LocalClient)
