#!/usr/bin/env python3

import logging

from bottle import BaseRequest

import settings
import route_definitions
from thumbnail_api.errors import ConfigurationError
from thumbnail_api.local_client import LocalConfig
from thumbnail_api.routes import StorageRoutes
from thumbnail_api.s3_config import S3Config
from thumbnail_api.storages import IIIF_STORAGE_NAME
from thumbnail_api.web import create_app

# Configure logging
level = logging.getLevelName(settings.LOG_LEVEL)
logging.basicConfig(filename=settings.LOG_FILE or None, level=level,
                    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s')
logging.getLogger('boto3').setLevel(logging.WARNING)
logging.getLogger('botocore').setLevel(logging.WARNING)

BaseRequest.MEMFILE_MAX = settings.MEMFILE_MAX


def storage_configs(routes):
    """Return the connection settings of every storage used in the routes."""
    configs = {}
    for _, storage_names in routes:
        for name in storage_names:
            if name in configs or name.lower() == IIIF_STORAGE_NAME.lower():
                continue
            if name in settings.LOCAL_STORAGES:
                configs[name] = LocalConfig(name=name, root_path=settings.LOCAL_STORAGE_ROOT, prefix=name)
            else:
                configs[name] = S3Config.from_env(name)
    return configs


def build_routes():
    try:
        return StorageRoutes.build(
            route_definitions.ROUTES,
            storage_configs(route_definitions.ROUTES),
            upload_storage=route_definitions.LOGO_UPLOAD_STORAGE,
            legacy_storages=route_definitions.LEGACY_STORAGES,
        )
    except ConfigurationError as e:
        logging.critical(f"Invalid configuration, not starting: {e.message}")
        raise


app = application = create_app(build_routes())


if __name__ == '__main__':
    from bottle import run
    logging.info("running server...")

    run(app=application,
        host=settings.HOST,
        port=settings.PORT,
        server=settings.SERVER,
        debug=settings.DEBUG_APP,
        reloader=settings.DEBUG_APP
    )

    logging.info("Exiting.")
