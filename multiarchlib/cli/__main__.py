import os
import shutil
import sys

import click

from multiarchlib import cli as cli_package
from multiarchlib import constants
from multiarchlib.base_image import BaseImageResolver
from multiarchlib.builder import ImageBuilder
from multiarchlib.cli import cli, pass_runtime
from multiarchlib.exceptions import MultiarchFatalError
from multiarchlib.manifest import ManifestPublisher
from multiarchlib.publisher import Publisher
from multiarchlib.reconciler import TagReconciler
from multiarchlib.registry import RegistryClient, login_token
from multiarchlib.tools import HelperTools
from multiarchlib.util import green_print, red_print, yellow_print
from multiarchlib.versions import VersionResolver, find_lts


@cli.command("versions", short_help="List upstream versions and the current latest and LTS")
@click.option("--limit", metavar="N", type=click.IntRange(min=1), default=None,
              help="Only consider the N highest versions")
@pass_runtime
def versions(runtime, limit):
    """
    Prints the upstream versions a publish run would iterate, in order.
    """
    runtime.initialize()
    resolver = VersionResolver(runtime.session, runtime.upstream_url, timeout=runtime.http_timeout)
    found = resolver.latest_versions(limit=limit)
    for v in found:
        click.echo(v)
    green_print('latest: {}'.format(found[-1]))
    lts_version = find_lts(found)
    if lts_version:
        green_print('lts: {}'.format(lts_version))
    else:
        yellow_print('lts: none')


@cli.command("publish", short_help="Publish versions not yet in the registry and update alias tags")
@click.option("--context-dir", metavar="PATH", default=".",
              type=click.Path(exists=True, file_okay=False),
              help="Docker build context holding the multiarch/Dockerfile.* templates")
@click.option("--limit", metavar="N", type=click.IntRange(min=1), default=None,
              help="Only consider the N highest upstream versions")
@click.option("--skip-setup", default=False, is_flag=True,
              help="Do not download manifest-tool and qemu handlers or register binfmt; use what is installed")
@pass_runtime
def publish(runtime, context_dir, limit, skip_setup):
    """
    Builds every upstream version whose tag is not in the registry yet, for
    every architecture, then points the variant, latest and lts aliases at
    the newest versions and publishes their manifest lists.

    Safe to re-run: aliases are only pushed when their image digest differs.

    \b
    $ multiarch -n publish --context-dir ~/src/docker
    $ multiarch -v alpine publish --limit 1
    """
    runtime.initialize()
    context_dir = os.path.abspath(context_dir)

    tools = HelperTools(runtime.session, runtime.working_dir, context_dir, runtime.qemu_version,
                        timeout=runtime.http_timeout)
    if skip_setup:
        manifest_tool = shutil.which(constants.MANIFEST_TOOL_BINARY) or tools.manifest_tool_path
    else:
        manifest_tool = tools.setup()

    credentials = login_token(runtime.session, runtime.auth_url, runtime.auth_service, runtime.repository,
                              timeout=runtime.http_timeout)
    registry = RegistryClient(runtime.session, runtime.registry_url, credentials,
                              runtime.namespace, runtime.image, dry_run=runtime.dry_run, timeout=runtime.http_timeout)

    publisher = Publisher(
        versions=VersionResolver(runtime.session, runtime.upstream_url, timeout=runtime.http_timeout),
        registry=registry,
        builder=ImageBuilder(registry, BaseImageResolver(runtime.base_image), context_dir, dry_run=runtime.dry_run),
        reconciler=TagReconciler(registry),
        manifests=ManifestPublisher(registry, manifest_tool, dry_run=runtime.dry_run),
        variant=runtime.variant,
        tools=tools,
        limit=limit,
    )
    report = publisher.run()

    green_print('Published: {}'.format(', '.join(report.built) or 'nothing new'))
    if report.skipped:
        click.echo('Already published: {}'.format(', '.join(report.skipped)))
    for alias, archs in report.aliases.items():
        if archs:
            green_print('Updated {} for {}'.format(alias, ', '.join(archs)))
        else:
            click.echo('{} already up to date'.format(alias))


def main():
    try:
        cli(obj={})
    except MultiarchFatalError as ex:
        # Allow capturing actual tool errors and print them
        # nicely instead of a gross stack-trace.
        red_print('\nmultiarch failed with error:\n' + str(ex))
        if cli_package.CTX_GLOBAL and cli_package.CTX_GLOBAL.obj and cli_package.CTX_GLOBAL.obj.logger:
            cli_package.CTX_GLOBAL.obj.logger.debug('Run aborted', exc_info=True)
        sys.exit(1)


if __name__ == '__main__':
    main()
