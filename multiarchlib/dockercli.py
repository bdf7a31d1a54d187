"""
Thin wrappers around the docker command line. Every function raises
ChildProcessError (from exectools.cmd_assert) when docker fails.
"""
from typing import Dict, List, Optional

from multiarchlib import exectools, logutil

logger = logutil.getLogger(__name__)

DOCKER = 'docker'


def pull(ref: str, check=True) -> bool:
    """
    :param check: Raise when the pull fails. Otherwise return False.
    """
    if check:
        exectools.cmd_assert([DOCKER, 'pull', ref])
        return True
    rc, _, _ = exectools.cmd_gather([DOCKER, 'pull', ref])
    return rc == exectools.SUCCESS


def tag(source_ref: str, target_ref: str):
    """
    Try tagging with and without -f to support all versions of docker.
    Older releases refuse to move an existing tag without -f, newer
    releases no longer accept the flag.
    """
    rc, out, err = exectools.cmd_gather([DOCKER, 'tag', '-f', source_ref, target_ref])
    if rc == exectools.SUCCESS:
        return
    logger.debug('docker tag -f failed, retrying without -f: %s', err.strip())
    exectools.cmd_assert([DOCKER, 'tag', source_ref, target_ref])


def push(ref: str):
    exectools.cmd_assert([DOCKER, 'push', ref], realtime=True)


def build(ref: str, dockerfile: str, context_dir: str, build_args: Optional[Dict[str, str]] = None,
          options: Optional[List[str]] = None):
    cmd = [DOCKER, 'build', '--file', dockerfile]
    for key, value in (build_args or {}).items():
        cmd.extend(['--build-arg', '{}={}'.format(key, value)])
    cmd.extend(['--tag', ref])
    cmd.extend(options or [])
    cmd.append('.')
    exectools.cmd_assert(cmd, cwd=context_dir, realtime=True)


def run_privileged(image: str, *args):
    exectools.cmd_assert([DOCKER, 'run', '--rm', '--privileged', image] + list(args))
