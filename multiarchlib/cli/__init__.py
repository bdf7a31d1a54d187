import os
import sys

import click

from multiarchlib import cli_opts, constants, dotconfig, version
from multiarchlib.runtime import Runtime
from multiarchlib.util import yellow_print

CTX_GLOBAL = None
pass_runtime = click.make_pass_decorator(Runtime)
context_settings = dict(help_option_names=['-h', '--help'])


def print_version(ctx, param, value):
    if not value or ctx.resilient_parsing:
        return
    click.echo('multiarch v{}'.format(version()))
    click.echo('Python v{}'.format(sys.version))
    ctx.exit()


# ============================================================================
# GLOBAL OPTIONS: parameters for all commands
# ============================================================================
@click.group(context_settings=context_settings)
@click.option('--version', is_flag=True, callback=print_version,
              expose_value=False, is_eager=True)
@click.option('-n', '--dry-run', default=False, is_flag=True,
              help='Do not push images, alias tags or manifest lists. Builds reuse the local cache. Registry reads still happen.')
@click.option('-d', '--debug', default=False, is_flag=True,
              help='Show debug output on console, including HTTP requests and manifest bodies.')
@click.option('-q', '--quiet', default=False, is_flag=True, help='Suppress non-critical output')
@click.option('-v', '--variant', default=None, type=click.Choice(constants.VARIANTS),
              help='Base OS flavor to publish. The Debian based default is used when unset.')
@click.option('--working-dir', metavar='PATH', default=None,
              help='Directory helper tools and logs are written to (a temporary directory by default).\n Env var: MULTIARCH_WORKING_DIR')
@click.option('--settings', metavar='PATH', default=None,
              help='YAML settings file. Defaults to ~/.config/multiarch/settings.yaml')
@click.option('--namespace', metavar='NAME', default=None,
              help='Registry namespace to publish to. Env var: MULTIARCH_NAMESPACE')
@click.option('--image', metavar='NAME', default=None,
              help='Image repository to publish to. Env var: MULTIARCH_IMAGE')
@click.pass_context
def cli(ctx, settings, **kwargs):
    global CTX_GLOBAL

    cfg = dotconfig.Config('multiarch', 'settings',
                           template=cli_opts.CLI_CONFIG_TEMPLATE,
                           envvars=cli_opts.CLI_ENV_VARS,
                           defaults=cli_opts.CLI_DEFAULTS,
                           cli_args=kwargs,
                           path_override=settings)

    if cfg.full_path != os.devnull and cli_opts.config_is_empty(cfg.full_path):
        msg = (
            "It appears you may be using multiarch for the first time.\n"
            "Registry, namespace and upstream settings can be changed in:\n"
            "{}\n"
        ).format(cfg.full_path)
        yellow_print(msg)

    ctx.obj = Runtime(cfg_obj=cfg, command=ctx.invoked_subcommand, **cfg.to_dict())
    CTX_GLOBAL = ctx
