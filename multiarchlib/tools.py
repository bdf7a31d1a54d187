"""
Fetches the helper binaries a publish run needs and removes them
(together with generated Dockerfiles) when the run is done.
"""
import glob
import io
import os
import stat
import tarfile
from typing import Iterable

import requests

from multiarchlib import constants, dockercli, logutil
from multiarchlib.exceptions import MultiarchFatalError

logger = logutil.getLogger(__name__)


class HelperTools(object):

    def __init__(self, session: requests.Session, working_dir: str, context_dir: str,
                 qemu_version: str, timeout=None):
        """
        :param session: requests session used for downloads
        :param working_dir: Directory manifest-tool is downloaded to
        :param context_dir: Docker build context; qemu handlers must live here to be COPY'd
        :param qemu_version: multiarch/qemu-user-static release to download handlers from
        """
        self.session = session
        self.working_dir = working_dir
        self.context_dir = context_dir
        self.qemu_version = qemu_version
        self.timeout = timeout
        # helpers fetched by this run; anything else was supplied by the user
        self.downloaded = []

    @property
    def manifest_tool_path(self):
        return os.path.join(self.working_dir, constants.MANIFEST_TOOL_BINARY)

    def _get(self, url):
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise MultiarchFatalError('Error downloading {}: {}'.format(url, e))
        return response

    def latest_manifest_tool_version(self) -> str:
        url = '{}/repos/{}/tags'.format(constants.GITHUB_API_URL, constants.MANIFEST_TOOL_REPO)
        tags = self._get(url).json()
        if not tags:
            raise MultiarchFatalError('No manifest-tool releases found at {}'.format(url))
        return tags[0]['name']

    def get_manifest_tool(self) -> str:
        path = self.manifest_tool_path
        if os.path.isfile(path):
            return path
        version = self.latest_manifest_tool_version()
        url = 'https://github.com/{}/releases/download/{}/manifest-tool-linux-amd64'.format(
            constants.MANIFEST_TOOL_REPO, version)
        logger.info('Downloading manifest-tool %s', version)
        with open(path, 'wb') as f:
            f.write(self._get(url).content)
        os.chmod(path, os.stat(path).st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        self.downloaded.append(path)
        return path

    def qemu_handlers(self):
        return glob.glob(os.path.join(self.context_dir, 'qemu-*'))

    def get_qemu_handlers(self, qemu_archs: Iterable[str] = constants.QEMU_ARCHS.values()):
        if self.qemu_handlers():
            return
        logger.info('Downloading Qemu handlers')
        for target_arch in qemu_archs:
            url = '{}/{}/x86_64_qemu-{}-static.tar.gz'.format(
                constants.QEMU_RELEASES_URL, self.qemu_version, target_arch)
            with tarfile.open(fileobj=io.BytesIO(self._get(url).content), mode='r:gz') as tar:
                for member in tar.getmembers():
                    name = os.path.basename(member.name)
                    if not member.isfile() or not name.startswith('qemu-'):
                        continue
                    dest = os.path.join(self.context_dir, name)
                    with tar.extractfile(member) as src, open(dest, 'wb') as f:
                        f.write(src.read())
                    os.chmod(dest, 0o755)
                    self.downloaded.append(dest)

    def register_binfmt(self):
        """
        Register binfmt_misc to run cross platform builds against non x86 architectures
        """
        try:
            dockercli.run_privileged(constants.BINFMT_REGISTER_IMAGE, '--reset')
        except ChildProcessError as e:
            raise MultiarchFatalError('Unable to register binfmt handlers: {}'.format(e))

    def setup(self) -> str:
        tool = self.get_manifest_tool()
        self.get_qemu_handlers()
        self.register_binfmt()
        return tool

    def generated_dockerfiles(self):
        return glob.glob(os.path.join(self.context_dir, constants.TEMPLATE_DIR, 'Dockerfile-*'))

    def cleanup(self):
        logger.info('Cleaning up')
        paths = self.downloaded + self.generated_dockerfiles()
        for path in paths:
            if os.path.isfile(path):
                os.remove(path)
        self.downloaded = []
