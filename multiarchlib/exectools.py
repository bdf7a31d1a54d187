"""
This module contains a set of functions for managing shell commands
consistently. It adds some logging and some additional capabilties to the
ordinary subprocess behaviors.

Nothing here retries. A failed command is a failed run.
"""

import os
import shlex
import subprocess
import threading
from typing import Dict, List, Optional, Tuple, Union

import click

from . import assertion
from . import logutil
from .util import stringify, timer

SUCCESS = 0

logger = logutil.getLogger(__name__)

cmd_counter_lock = threading.Lock()
cmd_counter = 0  # Increments atomically to help search logs for command start/stop


def _cmd_list(cmd: Union[str, List[str]]) -> List[str]:
    if not isinstance(cmd, list):
        return shlex.split(cmd)
    # convert any non-str into str
    return [str(c) for c in cmd]


def cmd_gather(cmd: Union[str, List[str]], cwd: Optional[str] = None, set_env: Optional[Dict[str, str]] = None,
               realtime=False, strip=False, log_stdout=False, log_stderr=True) -> Tuple[int, str, str]:
    """
    Runs a command and returns rc,stdout,stderr as a tuple.

    :param cmd: The command and arguments to execute
    :param cwd: Directory in which to run the command
    :param set_env: Dict of env vars to override in the current environment.
    :param realtime: If True, stream output to the console while the command runs (e.g. docker build).
    :param strip: Strip extra whitespace from stdout/err before returning.
    :param log_stdout: Whether stdout should be logged into the DEBUG log.
    :param log_stderr: Whether stderr should be logged into the DEBUG log
    :return: (rc,stdout,stderr)
    """
    global cmd_counter, cmd_counter_lock

    with cmd_counter_lock:
        my_id = cmd_counter
        cmd_counter = cmd_counter + 1

    cmd_list = _cmd_list(cmd)
    cmd_info = f'${my_id}: {cmd_list} - [cwd={cwd}]'

    env = os.environ.copy()
    if set_env:
        cmd_info = '{} [env={}]'.format(cmd_info, set_env)
        env.update(set_env)

    with timer(logger.info, f'{cmd_info}: Executed:cmd_gather'):
        logger.info(f'{cmd_info}: Executing:cmd_gather')
        try:
            proc = subprocess.Popen(
                cmd_list, cwd=cwd, env=env,
                stdout=subprocess.PIPE,
                stderr=None if realtime else subprocess.PIPE,
                stdin=subprocess.DEVNULL)
        except OSError as exc:
            description = "{}: Errored:\nException:\n{}\nIs {} installed?".format(cmd_info, exc, cmd_list[0])
            logger.error(description)
            return exc.errno, "", description

        if realtime:
            # stderr is inherited so build progress reaches the console as it happens
            out = b''
            for line in iter(proc.stdout.readline, b''):
                click.echo(stringify(line), nl=False)
                out += line
            proc.stdout.close()
            rc = proc.wait()
            err = b''
        else:
            out, err = proc.communicate()
            rc = proc.returncode

        out = out.decode('utf-8')
        err = err.decode('utf-8')

        log_output_stdout = out
        log_output_stderr = err
        if not log_stdout and len(out) > 200:
            log_output_stdout = f'{out[:200]}\n..truncated..'
        if not log_stderr and len(err) > 200:
            log_output_stderr = f'{err[:200]}\n..truncated..'

        if rc:
            logger.debug(
                "{}: Exited with error: {}\nstdout>>{}<<\nstderr>>{}<<\n".
                format(cmd_info, rc, log_output_stdout, log_output_stderr))
        else:
            logger.debug(
                "{}: Exited with: {}\nstdout>>{}<<\nstderr>>{}<<\n".
                format(cmd_info, rc, log_output_stdout, log_output_stderr))

    if strip:
        out = out.strip()
        err = err.strip()

    return rc, out, err


def cmd_assert(cmd: Union[str, List[str]], cwd: Optional[str] = None, set_env: Optional[Dict[str, str]] = None,
               realtime=False, strip=False, log_stdout: bool = False, log_stderr: bool = True) -> Tuple[str, str]:
    """
    Run a command, logging (using cmd_gather) and raise an exception if the
    return code of the command indicates failure.

    :param cmd <string|list>: A shell command
    :param cwd: Directory in which to run the command
    :param set_env: Dict of env vars to set for command (overriding existing)
    :param realtime: If True, output stdout and stderr in realtime instead of all at once.
    :param strip: Strip extra whitespace from stdout/err before returning.
    :param log_stdout: Whether stdout should be logged into the DEBUG log.
    :param log_stderr: Whether stderr should be logged into the DEBUG log
    :return: (stdout,stderr) if exit code is zero
    """
    result, stdout, stderr = cmd_gather(cmd, cwd=cwd, set_env=set_env, realtime=realtime, strip=strip,
                                        log_stdout=log_stdout, log_stderr=log_stderr)

    assertion.success(
        result,
        "Error running [{}] {}. See debug log.".
        format(cwd, cmd))

    return stdout, stderr
