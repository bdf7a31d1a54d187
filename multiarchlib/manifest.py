"""
Publishes manifest lists with manifest-tool. A manifest list named
ns/image:<tag> aggregates ns/image:<tag>-<arch> for every architecture.
"""
from typing import Iterable, List, Optional

from multiarchlib import constants, exectools, logutil
from multiarchlib.exceptions import ManifestAssemblyError
from multiarchlib.registry import RegistryClient
from multiarchlib.util import arch_tag

logger = logutil.getLogger(__name__)


def parse_manifest_platforms(archs: Iterable[str] = constants.ARCHS) -> str:
    """
    Makes the comma separated platform list manifest-tool expects.
    parse_manifest_platforms(['arm', 'amd64']) -> 'linux/arm,linux/amd64'
    """
    return ','.join('linux/{}'.format(arch) for arch in archs)


class ManifestPublisher(object):

    def __init__(self, registry: RegistryClient, tool_path: str, archs: Iterable[str] = constants.ARCHS,
                 dry_run: bool = False):
        """
        :param registry: Used to name images and to check that every member exists
        :param tool_path: Path to the manifest-tool binary
        :param archs: Architectures included in each manifest list
        :param dry_run: Log the push instead of performing it
        """
        self.registry = registry
        self.tool_path = tool_path
        self.archs = list(archs)
        self.dry_run = dry_run

    def command(self, tag: str) -> List[str]:
        return [
            self.tool_path, 'push', 'from-args',
            '--platforms', parse_manifest_platforms(self.archs),
            '--template', self.registry.image_ref(arch_tag(tag, constants.MANIFEST_TOOL_ARCH)),
            '--target', self.registry.image_ref(tag),
        ]

    def missing_members(self, tag: str) -> List[str]:
        return [arch for arch in self.archs if not self.registry.is_published(arch_tag(tag, arch))]

    def publish(self, tag: str, cwd: Optional[str] = None):
        cmd = self.command(tag)
        if self.dry_run:
            logger.info('Would push manifest list %s: %s', self.registry.image_ref(tag), ' '.join(cmd))
            return

        missing = self.missing_members(tag)
        if missing:
            raise ManifestAssemblyError(tag, 'missing architecture(s) {}'.format(', '.join(missing)))

        logger.info('Pushing manifest list %s', self.registry.image_ref(tag))
        rc, out, err = exectools.cmd_gather(cmd, cwd=cwd)
        if rc != exectools.SUCCESS:
            raise ManifestAssemblyError(tag, (err or out).strip() or 'manifest-tool exited with {}'.format(rc))
