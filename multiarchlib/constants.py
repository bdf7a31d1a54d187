# Order matters for reproducible logs and manifest-tool platform lists.
ARCHS = ['arm', 'arm64', 's390x', 'amd64']

# Name of the qemu-user-static handler for each architecture.
QEMU_ARCHS = {
    'arm': 'arm',
    'arm64': 'aarch64',
    's390x': 's390x',
    'amd64': 'x86_64',
}

VARIANTS = ['alpine', 'slim']

# Strict N.N.N shape. Weekly releases (N.N) never match.
LTS_VERSION_PATTERN = r'^[0-9]+\.[0-9]+\.[0-9]+$'
VERSION_PATTERN = r'[0-9]+(\.[0-9]+)+'

MANIFEST_V2_MEDIA_TYPE = 'application/vnd.docker.distribution.manifest.v2+json'

# Placeholders in the multiarch/Dockerfile.* templates
BASEIMAGE_PLACEHOLDER = 'BASEIMAGE'
ARCH_PLACEHOLDER = 'ARCH'
CROSS_BUILD_MARKER = 'CROSS_BUILD_'

TEMPLATE_DIR = 'multiarch'

UPSTREAM_URL = 'https://repo.jenkins-ci.org/releases/org/jenkins-ci/main/jenkins-war'
MANIFEST_TOOL_REPO = 'estesp/manifest-tool'
GITHUB_API_URL = 'https://api.github.com'
QEMU_RELEASES_URL = 'https://github.com/multiarch/qemu-user-static/releases/download'
BINFMT_REGISTER_IMAGE = 'multiarch/qemu-user-static:register'

MANIFEST_TOOL_BINARY = 'manifest-tool'
# manifest-tool substitutes each platform's architecture for this in --template
MANIFEST_TOOL_ARCH = 'ARCH'

# Alias tags maintained on top of versioned tags
ALIAS_LATEST = 'latest'
ALIAS_LTS = 'lts'
