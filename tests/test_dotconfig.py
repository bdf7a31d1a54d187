import io
import os
import shutil
import tempfile
import unittest
from unittest import mock

from multiarchlib import cli_opts, dotconfig


class TestConfig(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.settings = os.path.join(self.temp_dir, "settings.yaml")

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def _write(self, content):
        with io.open(self.settings, "w") as f:
            f.write(content)

    def _config(self, cli_args=None):
        return dotconfig.Config("multiarch", "settings",
                                template=cli_opts.CLI_CONFIG_TEMPLATE,
                                envvars=cli_opts.CLI_ENV_VARS,
                                defaults=cli_opts.CLI_DEFAULTS,
                                cli_args=cli_args,
                                path_override=self.settings)

    @mock.patch.dict(os.environ, {}, clear=True)
    def test_template_created(self):
        cfg = self._config()
        self.assertTrue(cli_opts.config_is_empty(cfg.full_path))
        self.assertEqual(cfg.namespace, "jenkins")
        self.assertEqual(cfg.image, "jenkins-experimental")
        self.assertEqual(cfg.qemu_version, "v2.9.1-1")

    @mock.patch.dict(os.environ, {}, clear=True)
    def test_settings_file(self):
        self._write("namespace: example\nhttp_timeout: 10\n")
        cfg = self._config()
        self.assertEqual(cfg.namespace, "example")
        self.assertEqual(cfg.http_timeout, 10)
        self.assertEqual(cfg.image, "jenkins-experimental")

    @mock.patch.dict(os.environ, {"MULTIARCH_NAMESPACE": "from-env", "MULTIARCH_IMAGE": "env-image"}, clear=True)
    def test_precedence(self):
        self._write("namespace: from-file\nimage: file-image\n")
        cfg = self._config(cli_args={"namespace": "from-cli", "image": None})
        self.assertEqual(cfg.namespace, "from-cli")
        self.assertEqual(cfg.image, "env-image")

    def test_unknown_key(self):
        self._write("namespace: example\n")
        with self.assertRaises(AttributeError):
            self._config().does_not_exist

    def test_not_a_mapping(self):
        self._write("- a\n- b\n")
        with self.assertRaises(ValueError):
            self._config()

    def test_to_dict(self):
        self._write("")
        cfg = self._config(cli_args={"dry_run": True})
        d = cfg.to_dict()
        self.assertTrue(d["dry_run"])
        d["dry_run"] = False
        self.assertTrue(cfg.dry_run)


if __name__ == "__main__":
    unittest.main()
