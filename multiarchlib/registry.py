"""
Queries and updates the image registry. Reads go through the registry v2
HTTP API with a bearer token; writes go through the docker command line.
"""
import json
from collections import namedtuple
from typing import Optional

import requests

from multiarchlib import constants, dockercli, logutil
from multiarchlib.exceptions import PushError, RegistryError, TagNotFound

logger = logutil.getLogger(__name__)

# Token scoped to one repository. Passed to RegistryClient explicitly.
RegistryCredentials = namedtuple('RegistryCredentials', ['repository', 'token'])


def login_token(session: requests.Session, auth_url: str, service: str, repository: str, timeout=None) -> RegistryCredentials:
    """
    Requests an anonymous pull token for a repository from a docker
    distribution token endpoint.
    """
    params = {
        'service': service,
        'scope': 'repository:{}:pull'.format(repository),
    }
    try:
        response = session.get(auth_url, params=params, timeout=timeout)
    except requests.RequestException as e:
        raise RegistryError(None, message='Unable to reach token endpoint {}: {}'.format(auth_url, e))
    if response.status_code != 200:
        raise RegistryError(response.status_code, message='Token endpoint {} returned {}'.format(auth_url, response.status_code))
    token = response.json().get('token')
    if not token:
        raise RegistryError(response.status_code, message='Token endpoint {} returned no token'.format(auth_url))
    return RegistryCredentials(repository=repository, token=token)


class RegistryClient(object):

    def __init__(self, session: requests.Session, registry_url: str, credentials: RegistryCredentials,
                 namespace: str, image: str, dry_run=False, timeout=None):
        """
        :param session: requests session used for manifest queries
        :param registry_url: Base URL of the registry, e.g. https://index.docker.io
        :param credentials: Token scoped to the repository being published
        :param namespace: Namespace images are pushed to
        :param image: Image repository name
        :param dry_run: Never push; reads still happen
        :param timeout: Optional requests timeout in seconds
        """
        self.session = session
        self.registry_url = registry_url.rstrip('/')
        self.credentials = credentials
        self.namespace = namespace
        self.image = image
        self.dry_run = dry_run
        self.timeout = timeout

    def image_ref(self, tag: str, namespace: Optional[str] = None) -> str:
        return '{}/{}:{}'.format(namespace or self.namespace, self.image, tag)

    def manifest_url(self, tag: str) -> str:
        return '{}/v2/{}/manifests/{}'.format(self.registry_url, self.credentials.repository, tag)

    def _fetch_manifest(self, tag: str) -> requests.Response:
        headers = {
            'Accept': constants.MANIFEST_V2_MEDIA_TYPE,
            'Authorization': 'Bearer {}'.format(self.credentials.token),
        }
        url = self.manifest_url(tag)
        try:
            return self.session.get(url, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise RegistryError(None, tag, message='Unable to query {}: {}'.format(url, e))

    def is_published(self, tag: str) -> bool:
        response = self._fetch_manifest(tag)
        if response.status_code == 404:
            return False
        if response.status_code == 200:
            return True
        raise RegistryError(response.status_code, tag)

    def get_manifest(self, tag: str) -> dict:
        response = self._fetch_manifest(tag)
        if response.status_code == 404:
            raise TagNotFound(tag)
        if response.status_code != 200:
            raise RegistryError(response.status_code, tag)
        logger.debug('Manifest for %s: %s', tag, response.text)
        try:
            return json.loads(response.text)
        except ValueError:
            raise TagNotFound(tag)

    def digest_of(self, tag: str) -> str:
        """
        Returns the image configuration digest of a tag. Two tags with the
        same digest hold the same image.
        """
        manifest = self.get_manifest(tag)
        config = manifest.get('config') if isinstance(manifest, dict) else None
        digest = config.get('digest') if isinstance(config, dict) else None
        if not digest:
            raise TagNotFound(tag)
        return digest

    def push(self, tag: str, namespace: Optional[str] = None):
        ref = self.image_ref(tag, namespace)
        if self.dry_run:
            logger.info('Would push %s', ref)
            return
        logger.info('Pushing %s', ref)
        dockercli.push(ref)

    def tag_and_push(self, source_tag: str, target_namespace: str, target_tag: str):
        """
        Points target_namespace/image:target_tag at the image currently
        tagged source_tag and pushes it (unless dry run).
        """
        source_ref = self.image_ref(source_tag)
        target_ref = self.image_ref(target_tag, target_namespace)
        try:
            if not dockercli.pull(source_ref, check=not self.dry_run):
                # A dry run builds without pushing, so the source may only exist locally
                logger.warning('Unable to pull %s; tagging the local image', source_ref)
            dockercli.tag(source_ref, target_ref)
            self.push(target_tag, target_namespace)
        except ChildProcessError as e:
            raise PushError(target_ref, e)
