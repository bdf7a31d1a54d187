"""
Settings for the tool live in a YAML file, by default
~/.config/multiarch/settings.yaml. Values are layered with the following
precedence (highest first):

    1. command line arguments which are not None
    2. environment variables
    3. the settings file
    4. built-in defaults
"""
import io
import os

import yaml

from multiarchlib import logutil

logger = logutil.getLogger(__name__)


class Config(object):

    def __init__(self, name, settings_name, template='', envvars=None, cli_args=None,
                 defaults=None, path_override=None):
        """
        :param name: Application name; the settings file lives in ~/.config/<name>/
        :param settings_name: File name (without .yaml) of the settings file
        :param template: Content written when the settings file does not exist yet
        :param envvars: Map of setting key -> environment variable name
        :param cli_args: Map of setting key -> value given on the command line
        :param defaults: Map of setting key -> default value
        :param path_override: Full path of a settings file to use instead
        """
        if path_override:
            self.full_path = os.path.abspath(os.path.expanduser(path_override))
        else:
            config_home = os.environ.get('XDG_CONFIG_HOME', os.path.expanduser('~/.config'))
            self.full_path = os.path.join(config_home, name, '{}.yaml'.format(settings_name))

        if not os.path.isfile(self.full_path):
            self._write_template(template)

        with io.open(self.full_path, 'r', encoding='utf-8') as f:
            settings = yaml.safe_load(f) or {}
        if not isinstance(settings, dict):
            raise ValueError('{} must contain a YAML mapping'.format(self.full_path))

        self.config = dict(defaults or {})
        self.config.update({k: v for k, v in settings.items() if v is not None})

        for key, env in (envvars or {}).items():
            if env in os.environ:
                self.config[key] = os.environ[env]

        for key, value in (cli_args or {}).items():
            if value is not None:
                self.config[key] = value

    def _write_template(self, template):
        try:
            os.makedirs(os.path.dirname(self.full_path), exist_ok=True)
            with io.open(self.full_path, 'w', encoding='utf-8') as f:
                f.write(template)
        except OSError as e:
            # A read-only home is fine; fall back to defaults, env and CLI
            logger.warning('Unable to create settings file %s: %s', self.full_path, e)
            self.full_path = os.devnull

    def __getattr__(self, key):
        try:
            return self.__dict__['config'][key]
        except KeyError:
            raise AttributeError(key)

    def to_dict(self):
        return dict(self.config)
