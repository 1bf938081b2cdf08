# Route definitions: which storages are checked, in which order, for
# requests to a hostname. Only the part of the hostname before the first
# dot is matched. The first route name of the first entry is the default
# route, used for hostnames that match no route.
#
# A storage name refers to the <NAME>_S3_* environment variables holding its
# connection settings, except IIIF-IS which is the Europeana IIIF image server.

ROUTES = [
    (['api', 'localhost:8080'], ['uim-prod', 'metis-prod', 'IIIF-IS']),
    (['api-test', 'localhost:8081'], ['metis-test', 'uim-prod', 'IIIF-IS']),
    (['acceptance', 'localhost:8082'], ['metis-acceptance', 'uim-prod', 'IIIF-IS']),
    (['logos'], ['logo-uploads']),
]

# storage that accepts logo uploads; it must be used in one of the routes.
# None disables uploading.
LOGO_UPLOAD_STORAGE = 'logo-uploads'

# hits from these storages are logged on the thumbnail_api.migration logger
LEGACY_STORAGES = ['uim-prod']
