"""
The build step: one image per architecture for a version/variant, tagged
<namespace>/<image>:<version><variant>-<arch>.
"""
from typing import Iterable, List, Optional

from multiarchlib import constants, dockercli, logutil
from multiarchlib.base_image import BaseImageResolver, render_dockerfile
from multiarchlib.exceptions import BuildError
from multiarchlib.registry import RegistryClient
from multiarchlib.util import arch_tag, variant_suffix

logger = logutil.getLogger(__name__)

VERSION_BUILD_ARG = 'JENKINS_VERSION'
CHECKSUM_BUILD_ARG = 'JENKINS_SHA'


class ImageBuilder(object):

    def __init__(self, registry: RegistryClient, resolver: BaseImageResolver, context_dir: str,
                 archs: Iterable[str] = constants.ARCHS, dry_run=False):
        self.registry = registry
        self.resolver = resolver
        self.context_dir = context_dir
        self.archs = list(archs)
        self.dry_run = dry_run

    @property
    def build_options(self) -> List[str]:
        # dry runs reuse the local build cache
        return [] if self.dry_run else ['--no-cache', '--pull']

    def build_arch(self, version: str, variant: Optional[str], arch: str, checksum: str) -> str:
        tag = arch_tag(version + variant_suffix(variant), arch)
        resolution = self.resolver.resolve(variant, arch)
        dockerfile = render_dockerfile(resolution, self.context_dir)
        ref = self.registry.image_ref(tag)
        logger.info('Building %s FROM %s', ref, resolution.base_image)
        try:
            dockercli.build(
                ref, dockerfile, self.context_dir,
                build_args={VERSION_BUILD_ARG: version, CHECKSUM_BUILD_ARG: checksum},
                options=self.build_options,
            )
            self.registry.push(tag)
        except ChildProcessError as e:
            raise BuildError('Failed to build or push {}: {}'.format(ref, e))
        return tag

    def build(self, version: str, variant: Optional[str], checksum: str) -> List[str]:
        """
        Builds and pushes every architecture of a version.
        :return: The architecture specific tags produced
        """
        return [self.build_arch(version, variant, arch, checksum) for arch in self.archs]
