from multiarchlib import constants

CLI_OPTS = {
    'namespace': {
        'env': 'MULTIARCH_NAMESPACE',
        'help': 'Registry namespace (organization) images are pushed to',
        'default': 'jenkins',
    },
    'image': {
        'env': 'MULTIARCH_IMAGE',
        'help': 'Image repository name within the namespace',
        'default': 'jenkins-experimental',
    },
    'registry_url': {
        'env': 'MULTIARCH_REGISTRY_URL',
        'help': 'Base URL of the registry v2 API',
        'default': 'https://index.docker.io',
    },
    'auth_url': {
        'env': 'MULTIARCH_AUTH_URL',
        'help': 'Bearer token issuance endpoint',
        'default': 'https://auth.docker.io/token',
    },
    'auth_service': {
        'env': 'MULTIARCH_AUTH_SERVICE',
        'help': 'Service name requested from the token endpoint',
        'default': 'registry.docker.io',
    },
    'upstream_url': {
        'env': 'MULTIARCH_UPSTREAM_URL',
        'help': 'Maven repository directory holding the upstream artifact releases',
        'default': constants.UPSTREAM_URL,
    },
    'base_image': {
        'env': 'MULTIARCH_BASE_IMAGE',
        'help': 'Unqualified base image the per-arch base images are derived from',
        'default': 'openjdk:8-jdk',
    },
    'qemu_version': {
        'env': 'MULTIARCH_QEMU_VERSION',
        'help': 'Release of multiarch/qemu-user-static to download handlers from',
        'default': 'v2.9.1-1',
    },
    'http_timeout': {
        'env': 'MULTIARCH_HTTP_TIMEOUT',
        'help': 'Seconds before an HTTP request is abandoned (empty for no timeout)',
    },
    'working_dir': {
        'env': 'MULTIARCH_WORKING_DIR',
        'help': 'Directory helper tools are downloaded to',
    },
}


CLI_ENV_VARS = {k: v['env'] for (k, v) in CLI_OPTS.items() if 'env' in v}

CLI_DEFAULTS = {k: v['default'] for (k, v) in CLI_OPTS.items() if 'default' in v}

CLI_CONFIG_TEMPLATE = '\n'.join(['#{}\n#{}: {}\n'.format(v['help'], k, v.get('default', '')) for (k, v) in CLI_OPTS.items()])


def config_is_empty(path):
    with open(path, 'r') as f:
        cfg = f.read()
        return (cfg == CLI_CONFIG_TEMPLATE)
