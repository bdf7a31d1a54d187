import io
import os
import shutil
import tarfile
import tempfile
import unittest
from unittest.mock import MagicMock

import requests
from flexmock import flexmock

from multiarchlib import dockercli
from multiarchlib.exceptions import MultiarchFatalError
from multiarchlib.tools import HelperTools


def _response(content=b"", json_body=None, status=200):
    response = MagicMock()
    response.content = content
    response.json.return_value = json_body
    if status >= 400:
        response.raise_for_status.side_effect = requests.HTTPError("{} Error".format(status))
    return response


def _qemu_tarball(name):
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tar:
        data = b"\x7fELF"
        info = tarfile.TarInfo("./" + name)
        info.size = len(data)
        tar.addfile(info, io.BytesIO(data))
        readme = b"readme"
        info = tarfile.TarInfo("README")
        info.size = len(readme)
        tar.addfile(info, io.BytesIO(readme))
    return buf.getvalue()


class TestHelperTools(unittest.TestCase):

    def setUp(self):
        self.working_dir = tempfile.mkdtemp()
        self.context_dir = tempfile.mkdtemp()
        os.makedirs(os.path.join(self.context_dir, "multiarch"))
        self.session = MagicMock()
        self.tools = HelperTools(self.session, self.working_dir, self.context_dir, "v2.9.1-1", timeout=5)

    def tearDown(self):
        shutil.rmtree(self.working_dir)
        shutil.rmtree(self.context_dir)

    def test_get_manifest_tool(self):
        self.session.get.side_effect = [
            _response(json_body=[{"name": "v0.7.0"}, {"name": "v0.6.0"}]),
            _response(content=b"binary"),
        ]
        path = self.tools.get_manifest_tool()
        self.assertEqual(path, os.path.join(self.working_dir, "manifest-tool"))
        self.assertTrue(os.access(path, os.X_OK))
        with open(path, "rb") as f:
            self.assertEqual(f.read(), b"binary")
        url = self.session.get.call_args_list[1][0][0]
        self.assertIn("/releases/download/v0.7.0/manifest-tool-linux-amd64", url)

    def test_get_manifest_tool_reuses_existing(self):
        with open(self.tools.manifest_tool_path, "w") as f:
            f.write("already here")
        self.assertEqual(self.tools.get_manifest_tool(), self.tools.manifest_tool_path)
        self.session.get.assert_not_called()

    def test_no_manifest_tool_releases(self):
        self.session.get.return_value = _response(json_body=[])
        with self.assertRaises(MultiarchFatalError):
            self.tools.get_manifest_tool()

    def test_download_failure(self):
        self.session.get.return_value = _response(status=503)
        with self.assertRaises(MultiarchFatalError):
            self.tools.latest_manifest_tool_version()

    def test_get_qemu_handlers(self):
        self.session.get.side_effect = [_response(content=_qemu_tarball("qemu-arm-static")),
                                        _response(content=_qemu_tarball("qemu-aarch64-static"))]
        self.tools.get_qemu_handlers(["arm", "aarch64"])
        handlers = sorted(os.path.basename(p) for p in self.tools.qemu_handlers())
        self.assertEqual(handlers, ["qemu-aarch64-static", "qemu-arm-static"])
        self.assertFalse(os.path.exists(os.path.join(self.context_dir, "README")))
        self.assertTrue(os.access(os.path.join(self.context_dir, "qemu-arm-static"), os.X_OK))
        self.assertIn("v2.9.1-1/x86_64_qemu-arm-static.tar.gz", self.session.get.call_args_list[0][0][0])

    def test_get_qemu_handlers_already_present(self):
        open(os.path.join(self.context_dir, "qemu-arm-static"), "w").close()
        self.tools.get_qemu_handlers(["arm"])
        self.session.get.assert_not_called()

    def test_register_binfmt_failure(self):
        flexmock(dockercli).should_receive("run_privileged").and_raise(ChildProcessError("denied"))
        with self.assertRaises(MultiarchFatalError):
            self.tools.register_binfmt()

    def test_cleanup(self):
        self.session.get.side_effect = [
            _response(json_body=[{"name": "v0.7.0"}]),
            _response(content=b"binary"),
            _response(content=_qemu_tarball("qemu-arm-static")),
        ]
        self.tools.get_manifest_tool()
        self.tools.get_qemu_handlers(["arm"])
        keep = os.path.join(self.context_dir, "multiarch", "Dockerfile.alpine")
        generated = [os.path.join(self.context_dir, "multiarch", "Dockerfile-alpine-arm"),
                     os.path.join(self.context_dir, "multiarch", "Dockerfile-amd64")]
        for path in generated + [keep]:
            open(path, "w").close()

        self.tools.cleanup()

        self.assertFalse(os.path.exists(self.tools.manifest_tool_path))
        self.assertEqual(self.tools.qemu_handlers(), [])
        self.assertEqual([p for p in generated if os.path.exists(p)], [])
        self.assertTrue(os.path.exists(keep))

    def test_cleanup_keeps_supplied_helpers(self):
        supplied = [self.tools.manifest_tool_path, os.path.join(self.context_dir, "qemu-arm-static")]
        for path in supplied:
            open(path, "w").close()
        self.tools.get_manifest_tool()
        self.tools.get_qemu_handlers(["arm"])
        generated = os.path.join(self.context_dir, "multiarch", "Dockerfile-arm")
        open(generated, "w").close()

        self.tools.cleanup()

        self.session.get.assert_not_called()
        self.assertEqual([p for p in supplied if os.path.exists(p)], supplied)
        self.assertFalse(os.path.exists(generated))


if __name__ == "__main__":
    unittest.main()
