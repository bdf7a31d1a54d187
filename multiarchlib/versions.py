"""
Discovers released versions of the upstream artifact from its maven
repository metadata and orders them.
"""
import re
import xml.etree.ElementTree as ET
from typing import Iterable, List, Optional, Tuple

import requests

from multiarchlib import constants, logutil
from multiarchlib.exceptions import UpstreamUnavailable

logger = logutil.getLogger(__name__)

_VERSION_RE = re.compile(constants.VERSION_PATTERN)
_LTS_RE = re.compile(constants.LTS_VERSION_PATTERN)


def version_key(version: str) -> Tuple[int, ...]:
    """
    Sort key comparing each dot separated component numerically,
    so that 8.10.0 sorts after 8.9.0.
    """
    return tuple(int(c) for c in version.split('.'))


def sort_versions(versions: Iterable[str]) -> List[str]:
    """Dedupe and sort ascending"""
    return sorted(set(versions), key=version_key)


def is_lts(version: str) -> bool:
    return bool(_LTS_RE.match(version))


def find_lts(versions: Iterable[str]) -> Optional[str]:
    """
    Walks versions in the order given and returns the last LTS shaped entry.
    Later weekly versions do not reset it.
    """
    lts_version = None
    for version in versions:
        if is_lts(version):
            lts_version = version
    return lts_version


def parse_versions(metadata_xml: str) -> List[str]:
    """
    Extracts the numeric versions from every <version> element
    of a maven-metadata.xml document.
    """
    try:
        root = ET.fromstring(metadata_xml)
    except ET.ParseError as e:
        raise UpstreamUnavailable('Unable to parse upstream release index: {}'.format(e))

    versions = []
    # maven 3 writes a default namespace on <metadata>
    for element in root.iterfind('.//{*}version'):
        match = _VERSION_RE.search(element.text or '')
        if match:
            versions.append(match.group(0))
    return versions


class VersionResolver(object):

    def __init__(self, session: requests.Session, upstream_url: str, artifact='jenkins-war', timeout=None):
        """
        :param session: requests session used for all upstream queries
        :param upstream_url: Maven directory of the artifact, e.g.
            https://repo.jenkins-ci.org/releases/org/jenkins-ci/main/jenkins-war
        :param artifact: Artifact id, used to build checksum file names
        :param timeout: Optional requests timeout in seconds
        """
        self.session = session
        self.upstream_url = upstream_url.rstrip('/')
        self.artifact = artifact
        self.timeout = timeout

    @property
    def metadata_url(self):
        return '{}/maven-metadata.xml'.format(self.upstream_url)

    def checksum_url(self, version):
        return '{0}/{1}/{2}-{1}.war.sha256'.format(self.upstream_url, version, self.artifact)

    def _get(self, url):
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise UpstreamUnavailable('Unable to fetch {}: {}'.format(url, e))
        return response

    def latest_versions(self, limit: Optional[int] = None) -> List[str]:
        """
        Returns the released versions in ascending order.
        :param limit: If given, only the `limit` highest versions are returned
        """
        response = self._get(self.metadata_url)
        versions = sort_versions(parse_versions(response.text))
        if not versions:
            raise UpstreamUnavailable('No versions found in {}'.format(self.metadata_url))
        if limit:
            versions = versions[-limit:]
        logger.info('Found %s upstream version(s); latest is %s', len(versions), versions[-1])
        return versions

    def checksum(self, version: str) -> str:
        """
        Returns the published sha256 of the artifact for a version.
        """
        url = self.checksum_url(version)
        content = self._get(url).text.split()
        if not content:
            raise UpstreamUnavailable('Empty checksum file {}'.format(url))
        return content[0]
