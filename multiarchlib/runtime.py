import atexit
import logging
import os
import shutil
import signal
import tempfile

import click
import requests

from multiarchlib import logutil
from multiarchlib.util import mkdirs, variant_suffix


# docker builds are cancelled on SIGINT (Ctrl-C)
# but CI systems send a SIGTERM when cancelling a job.
def handle_sigterm(*_):
    raise KeyboardInterrupt()


signal.signal(signal.SIGTERM, handle_sigterm)


def remove_tmp_working_dir(runtime):
    if runtime.remove_tmp_working_dir:
        shutil.rmtree(runtime.working_dir, ignore_errors=True)
    else:
        click.echo("Temporary working directory preserved by operation: %s" % runtime.working_dir)


# ============================================================================
# Runtime object definition
# ============================================================================


class Runtime(object):

    def __init__(self, **kwargs):
        # initialize defaults in case no value is given
        self.dry_run = False
        self.debug = False
        self.quiet = False
        self.variant = None
        self.working_dir = None
        self.http_timeout = None
        self.command = None
        self.cfg_obj = None

        for key, val in kwargs.items():
            self.__dict__[key] = val

        if self.variant:
            self.variant = self.variant.lstrip('-')

        if self.http_timeout in ('', None):
            self.http_timeout = None
        else:
            self.http_timeout = float(self.http_timeout)

        self.remove_tmp_working_dir = False
        self.debug_log_path = None
        self.logger = logutil.getLogger()
        self._session = None
        self.initialized = False

    @property
    def variant_suffix(self):
        return variant_suffix(self.variant)

    @property
    def repository(self):
        return '{}/{}'.format(self.namespace, self.image)

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
        return self._session

    def initialize(self):

        if self.initialized:
            return

        if self.quiet and self.debug:
            click.echo("Flags --quiet and --debug are mutually exclusive")
            exit(1)

        if self.working_dir is None:
            self.working_dir = tempfile.mkdtemp(".tmp", "multiarch-")
            # This can be set to False by operations which want the working directory to be left around
            self.remove_tmp_working_dir = True
            atexit.register(remove_tmp_working_dir, self)
        else:
            self.working_dir = os.path.abspath(os.path.expanduser(self.working_dir))
            mkdirs(self.working_dir)

        self.initialize_logging()

        if self.dry_run:
            self.logger.info('Dry run, will not publish images')

        self.initialized = True

    def initialize_logging(self):

        if self.initialized:
            return

        # --debug increases the log level and traces HTTP requests
        # --quiet only shows warnings and errors
        if self.debug:
            log_level = logging.DEBUG
        elif self.quiet:
            log_level = logging.WARN
        else:
            log_level = logging.INFO

        default_log_formatter = logging.Formatter('%(asctime)s %(levelname)s %(message)s')

        root_logger = logging.getLogger()
        root_logger.setLevel(logging.WARN)
        root_stream_handler = logging.StreamHandler()
        root_stream_handler.setFormatter(default_log_formatter)
        root_logger.addHandler(root_stream_handler)

        if self.debug:
            # urllib3 logs every request and response status at DEBUG
            root_logger.setLevel(logging.DEBUG)
            logging.getLogger('urllib3').setLevel(logging.DEBUG)
        else:
            # Otherwise, only allow children of multiarch to log
            root_logger.addFilter(logging.Filter("multiarch"))

        self.logger = logutil.getLogger()
        self.logger.propagate = False

        # levels will be set at the handler level. Make sure master level is low.
        self.logger.setLevel(logging.DEBUG)

        main_stream_handler = logging.StreamHandler()
        main_stream_handler.setFormatter(default_log_formatter)
        main_stream_handler.setLevel(log_level)
        self.logger.addHandler(main_stream_handler)

        self.debug_log_path = os.path.join(self.working_dir, "debug.log")
        debug_log_handler = logging.FileHandler(self.debug_log_path)
        debug_log_handler.setFormatter(logging.Formatter('%(asctime)s %(levelname)s (%(thread)d) %(message)s'))
        debug_log_handler.setLevel(logging.DEBUG)
        self.logger.addHandler(debug_log_handler)
