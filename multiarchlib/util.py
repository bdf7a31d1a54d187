import os
import pathlib
from contextlib import contextmanager
from datetime import datetime
from inspect import getframeinfo, stack
from typing import Optional

import click


def stringify(val):
    """
    Accepts either str or bytes and returns a str
    """
    try:
        val = val.decode('utf-8')
    except (UnicodeDecodeError, AttributeError):
        pass
    return val


def red_print(msg, file=None):
    """Print out a message in red text"""
    click.secho(stringify(msg), nl=True, bold=False, fg='red', file=file)


def green_print(msg, file=None):
    """Print out a message in green text"""
    click.secho(stringify(msg), nl=True, bold=False, fg='green', file=file)


def yellow_print(msg, file=None):
    """Print out a message in yellow text"""
    click.secho(stringify(msg), nl=True, bold=False, fg='yellow', file=file)


def mkdirs(path, mode=0o755):
    """
    Make sure a directory exists. Similar to shell command `mkdir -p`.
    :param path: Str path or pathlib.Path
    """
    pathlib.Path(str(path)).mkdir(mode=mode, parents=True, exist_ok=True)


@contextmanager
def timer(out_method, msg):
    caller = getframeinfo(stack()[2][0])  # Line that called this method
    start_time = datetime.now()
    try:
        yield
    finally:
        time_elapsed = datetime.now() - start_time
        entry = f'Time elapsed (hh:mm:ss.ms) {time_elapsed} in {os.path.basename(caller.filename)}:{caller.lineno} : {msg}'
        out_method(entry)


def variant_suffix(variant: Optional[str]) -> str:
    """
    Renders a variant name as it appears in a tag.
    variant_suffix('alpine') -> '-alpine', variant_suffix(None) -> ''
    """
    if not variant:
        return ''
    return variant if variant.startswith('-') else f'-{variant}'


def arch_tag(tag: str, arch: str) -> str:
    """
    Returns the architecture specific form of a manifest list level tag.
    arch_tag('2.301-alpine', 'arm64') -> '2.301-alpine-arm64'
    """
    return f'{tag}-{arch}'
