"""
Drives a publish run:

    resolve versions
      -> for each version: skip if already published, otherwise build and push every arch
      -> publish the manifest list of the last version
      -> reconcile and publish the variant, latest and lts aliases
      -> clean up

Nothing is remembered between runs. Every decision comes from a registry
query made during the run, so re-running after a partial failure picks up
where the registry says things are.
"""
from enum import Enum
from typing import List, Optional

from multiarchlib import constants, logutil
from multiarchlib.builder import ImageBuilder
from multiarchlib.manifest import ManifestPublisher
from multiarchlib.reconciler import TagReconciler
from multiarchlib.registry import RegistryClient
from multiarchlib.tools import HelperTools
from multiarchlib.util import variant_suffix
from multiarchlib.versions import VersionResolver, is_lts

logger = logutil.getLogger(__name__)


class Stage(Enum):
    RESOLVING_VERSIONS = 'resolving versions'
    DECIDING_PUBLISH = 'deciding publish'
    BUILDING = 'building'
    RECONCILING_ALIASES = 'reconciling aliases'
    PUBLISHING_MANIFESTS = 'publishing manifests'
    DONE = 'done'


class PublishReport(object):
    """What a run did, for the summary printed by the CLI"""

    def __init__(self):
        self.versions = []
        self.built = []
        self.skipped = []
        self.manifests = []
        self.aliases = {}  # alias tag -> architectures updated
        self.lts_version = None

    @property
    def latest_version(self):
        return self.versions[-1] if self.versions else None


class Publisher(object):

    def __init__(self, versions: VersionResolver, registry: RegistryClient, builder: ImageBuilder,
                 reconciler: TagReconciler, manifests: ManifestPublisher, variant: Optional[str] = None,
                 tools: Optional[HelperTools] = None, limit: Optional[int] = None):
        self.versions = versions
        self.registry = registry
        self.builder = builder
        self.reconciler = reconciler
        self.manifests = manifests
        self.variant = (variant or '').lstrip('-') or None
        self.suffix = variant_suffix(self.variant)
        self.tools = tools
        self.limit = limit
        self.stage = None
        self.report = PublishReport()

    def _enter(self, stage: Stage, subject: str = ''):
        self.stage = stage
        logger.debug('Stage: %s %s', stage.value, subject)

    def publish_version(self, version: str) -> bool:
        """
        Builds every architecture of a version unless its tag is already in the registry.
        :return: True if the version was built
        """
        tag = version + self.suffix
        self._enter(Stage.DECIDING_PUBLISH, tag)
        if self.registry.is_published(tag):
            logger.info('Tag is already published: %s', tag)
            self.report.skipped.append(tag)
            return False

        self._enter(Stage.BUILDING, tag)
        logger.info('Publishing version: %s', tag)
        checksum = self.versions.checksum(version)
        self.builder.build(version, self.variant, checksum)
        self.report.built.append(tag)
        return True

    def publish_manifest(self, tag: str):
        self._enter(Stage.PUBLISHING_MANIFESTS, tag)
        self.manifests.publish(tag)
        self.report.manifests.append(tag)

    def reconcile_alias(self, source_tag: str, alias: str) -> List[str]:
        self._enter(Stage.RECONCILING_ALIASES, alias)
        updated = self.reconciler.reconcile_all(source_tag, alias, self.manifests.archs)
        self.report.aliases[alias] = updated
        return updated

    def publish_variant(self, version: str):
        if not self.variant:
            return
        self.reconcile_alias(version + self.suffix, self.variant)
        self.publish_manifest(self.variant)

    def publish_latest(self, version: str):
        # latest only ever names the default variant
        if self.variant:
            return
        self.reconcile_alias(version, constants.ALIAS_LATEST)
        self.publish_manifest(constants.ALIAS_LATEST)

    def publish_lts(self, lts_version: str):
        alias = constants.ALIAS_LTS + self.suffix
        self.reconcile_alias(lts_version + self.suffix, alias)
        self.publish_manifest(alias)

    def run(self) -> PublishReport:
        self._enter(Stage.RESOLVING_VERSIONS)
        versions = self.versions.latest_versions(limit=self.limit)
        self.report.versions = versions

        lts_version = None
        version = None
        for version in versions:
            self.publish_version(version)
            if is_lts(version):
                lts_version = version
        self.report.lts_version = lts_version

        # The last version iterated gets the alias treatment whether or not
        # it was built by this run.
        self.publish_manifest(version + self.suffix)
        self.publish_variant(version)
        self.publish_latest(version)
        if lts_version:
            self.publish_lts(lts_version)

        self._enter(Stage.DONE)
        if self.tools:
            self.tools.cleanup()
        return self.report
