"""
Chooses the base image each architecture/variant pair is built FROM and
renders the multiarch/Dockerfile.* templates into per-arch Dockerfiles.

Templates carry three placeholders:

    BASEIMAGE     replaced with the resolved base image
    ARCH          replaced with the qemu handler name (emulated builds only)
    CROSS_BUILD_  prefix of directives only needed for emulated builds, e.g.

        CROSS_BUILD_COPY qemu-ARCH-static /usr/bin/

Native (amd64) builds drop every CROSS_BUILD_ line. Emulated builds keep them
with the marker removed.
"""
import io
import os
from collections import namedtuple
from typing import Optional

from dockerfile_parse import DockerfileParser

from multiarchlib import constants, logutil
from multiarchlib.util import variant_suffix

logger = logutil.getLogger(__name__)

DEFAULT_BASE_IMAGE = 'openjdk:8-jdk'

# Docker official image vendor namespaces for each architecture
VENDOR_PREFIXES = {
    'amd64': '',
    'arm': 'arm32v7',
    'arm64': 'arm64v8',
    's390x': 's390x',
}

BaseImageResolution = namedtuple('BaseImageResolution', [
    'variant', 'arch', 'base_image', 'template', 'emulated', 'emulation_arch'
])


def _normalize_variant(variant: Optional[str]) -> str:
    variant = (variant or '').lstrip('-')
    if variant and variant not in constants.VARIANTS:
        raise ValueError('Unknown variant: {}'.format(variant))
    return variant


def _qualified(base_image, prefix):
    return '{}/{}'.format(prefix, base_image) if prefix else base_image


class BaseImageResolver(object):

    def __init__(self, base_image=DEFAULT_BASE_IMAGE):
        self.base_image = base_image

    def resolve(self, variant: Optional[str], arch: str) -> BaseImageResolution:
        if arch not in VENDOR_PREFIXES:
            raise ValueError('Unknown architecture: {}'.format(arch))
        variant = _normalize_variant(variant)

        base_image = _qualified(self.base_image, VENDOR_PREFIXES[arch])

        if variant == 'alpine' and arch == 'arm':
            # There is no arm32v7 openjdk alpine image; arm32v6 publishes one
            base_image = _qualified(self.base_image, 'arm32v6') + '-alpine'
        elif variant == 'alpine':
            base_image += '-alpine'
        elif variant == 'slim':
            base_image += '-slim'

        if variant == 'alpine':
            template = 'Dockerfile.alpine'
        elif variant == 'slim':
            template = 'Dockerfile.slim'
        else:
            template = 'Dockerfile.debian'

        emulated = arch != 'amd64'
        emulation_arch = None
        if emulated:
            emulation_arch = 'aarch64' if arch == 'arm64' else arch

        return BaseImageResolution(
            variant=variant,
            arch=arch,
            base_image=base_image,
            template=template,
            emulated=emulated,
            emulation_arch=emulation_arch,
        )


def dockerfile_name(variant: Optional[str], arch: str) -> str:
    """
    dockerfile_name('alpine', 'arm') -> 'Dockerfile-alpine-arm'
    """
    return 'Dockerfile{}-{}'.format(variant_suffix(variant), arch)


def rewrite_template(content: str, resolution: BaseImageResolution) -> str:
    """
    Applies the cross build rewrite rules of a resolution to template content.
    The BASEIMAGE placeholder is left for the Dockerfile parser.
    """
    lines = []
    for line in content.splitlines(keepends=True):
        if not resolution.emulated:
            if constants.CROSS_BUILD_MARKER in line:
                continue
        else:
            line = line.replace(constants.ARCH_PLACEHOLDER, resolution.emulation_arch)
            line = line.replace(constants.CROSS_BUILD_MARKER, '')
        lines.append(line)
    return ''.join(lines)


def render_dockerfile(resolution: BaseImageResolution, context_dir: str) -> str:
    """
    Writes <context_dir>/multiarch/Dockerfile<variant>-<arch> from the
    template selected by the resolution.
    :return: The path of the generated Dockerfile, relative to context_dir
    """
    template_dir = os.path.join(context_dir, constants.TEMPLATE_DIR)
    template_path = os.path.join(template_dir, resolution.template)
    with io.open(template_path, 'r', encoding='utf-8') as f:
        content = rewrite_template(f.read(), resolution)

    dfp = DockerfileParser(fileobj=io.BytesIO())
    dfp.content = content
    parents = dfp.parent_images
    if constants.BASEIMAGE_PLACEHOLDER not in parents:
        raise ValueError('{} has no FROM {} instruction'.format(template_path, constants.BASEIMAGE_PLACEHOLDER))
    dfp.parent_images = [resolution.base_image if p == constants.BASEIMAGE_PLACEHOLDER else p for p in parents]

    relative_path = os.path.join(constants.TEMPLATE_DIR, dockerfile_name(resolution.variant, resolution.arch))
    with io.open(os.path.join(context_dir, relative_path), 'w', encoding='utf-8') as f:
        f.write(dfp.content)
    logger.debug('Generated %s FROM %s', relative_path, resolution.base_image)
    return relative_path
