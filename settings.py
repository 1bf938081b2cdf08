# Process settings for the thumbnail server. Every value can be overridden
# with an environment variable of the same name.
import os

LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
# empty means log to stderr
LOG_FILE = os.getenv('LOG_FILE', '')

HOST = os.getenv('HOST', '0.0.0.0')
PORT = int(os.getenv('PORT', '8080'))

# bottle server adapter, e.g. 'wsgiref', 'paste', 'gunicorn'
SERVER = os.getenv('SERVER', 'wsgiref')
DEBUG_APP = os.getenv('DEBUG_APP', 'false').lower() in ('true', '1', 'yes')

# uploads larger than this are buffered on disk instead of in memory
MEMFILE_MAX = int(os.getenv('MEMFILE_MAX', str(10 * 1024 * 1024)))

# storages read their connection settings from <NAME>_S3_* variables,
# except the ones listed here which use a directory on the local filesystem
LOCAL_STORAGE_ROOT = os.getenv('LOCAL_STORAGE_ROOT', '')
LOCAL_STORAGES = [s.strip() for s in os.getenv('LOCAL_STORAGES', '').split(',') if s.strip()]
