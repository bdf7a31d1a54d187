"""
Keeps alias tags (latest, lts, alpine, slim) pointing at the same content
as a versioned tag without pushing when nothing changed.

Each architecture is compared on its own by image configuration digest.
Running reconcile again after a successful update is a no-op because the
digests then match; running it after a failed update repeats the same
comparison and push.
"""
from typing import Iterable, List, Optional

from multiarchlib import constants, logutil
from multiarchlib.exceptions import TagNotFound
from multiarchlib.registry import RegistryClient
from multiarchlib.util import arch_tag

logger = logutil.getLogger(__name__)


class TagReconciler(object):

    def __init__(self, registry: RegistryClient, target_namespace: Optional[str] = None):
        self.registry = registry
        self.target_namespace = target_namespace or registry.namespace

    def _digest_or_empty(self, tag: str, log) -> str:
        log.debug('Getting digest for %s', tag)
        try:
            return self.registry.digest_of(tag)
        except TagNotFound:
            # first publish of an alias, or a dry run which never pushed the source
            log.info('Unable to get digest for %s', tag)
            return ''

    def reconcile(self, source_tag: str, target_tag: str, arch: str) -> bool:
        """
        Points target_tag-arch at source_tag-arch unless they already hold the same image.
        :return: True if the alias was tagged and pushed
        """
        source = arch_tag(source_tag, arch)
        target = arch_tag(target_tag, arch)
        log = logutil.getEntityLogger(target, __name__)

        digest_source = self._digest_or_empty(source, log)
        digest_target = self._digest_or_empty(target, log)

        if digest_target and digest_source == digest_target:
            log.info('Images %s [%s] and %s [%s] are already the same, not updating tags',
                     source, digest_source, target, digest_target)
            return False

        log.info('Creating tag %s pointing to %s', target, source)
        self.registry.tag_and_push(source, self.target_namespace, target)
        return True

    def reconcile_all(self, source_tag: str, target_tag: str, archs: Iterable[str] = constants.ARCHS) -> List[str]:
        """
        Reconciles every architecture in order.
        :return: The architectures whose alias was updated
        """
        return [arch for arch in archs if self.reconcile(source_tag, target_tag, arch)]
