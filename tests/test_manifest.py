import unittest
from unittest.mock import patch

from multiarchlib import manifest
from multiarchlib.exceptions import ManifestAssemblyError

from fakes import FakeRegistry

ARCH_TAGS = ["2.301-arm", "2.301-arm64", "2.301-s390x", "2.301-amd64"]


class TestManifestPublisher(unittest.TestCase):

    def test_platforms(self):
        self.assertEqual(manifest.parse_manifest_platforms(), "linux/arm,linux/arm64,linux/s390x,linux/amd64")
        self.assertEqual(manifest.parse_manifest_platforms(["amd64"]), "linux/amd64")

    def test_command(self):
        publisher = manifest.ManifestPublisher(FakeRegistry(), "/tmp/manifest-tool")
        self.assertEqual(publisher.command("lts-alpine"), [
            "/tmp/manifest-tool", "push", "from-args",
            "--platforms", "linux/arm,linux/arm64,linux/s390x,linux/amd64",
            "--template", "jenkins/jenkins-experimental:lts-alpine-ARCH",
            "--target", "jenkins/jenkins-experimental:lts-alpine",
        ])

    @patch("multiarchlib.exectools.cmd_gather", return_value=(0, "Digest: sha256:abc", ""))
    def test_publish(self, cmd_gather):
        publisher = manifest.ManifestPublisher(FakeRegistry(published=ARCH_TAGS), "manifest-tool")
        publisher.publish("2.301")
        cmd_gather.assert_called_once_with(publisher.command("2.301"), cwd=None)

    @patch("multiarchlib.exectools.cmd_gather")
    def test_publish_missing_member(self, cmd_gather):
        publisher = manifest.ManifestPublisher(FakeRegistry(published=ARCH_TAGS[:2] + ARCH_TAGS[3:]), "manifest-tool")
        with self.assertRaisesRegex(ManifestAssemblyError, "s390x"):
            publisher.publish("2.301")
        cmd_gather.assert_not_called()

    @patch("multiarchlib.exectools.cmd_gather", return_value=(1, "", "unauthorized: authentication required"))
    def test_publish_tool_failure(self, cmd_gather):
        publisher = manifest.ManifestPublisher(FakeRegistry(published=ARCH_TAGS), "manifest-tool")
        with self.assertRaisesRegex(ManifestAssemblyError, "unauthorized"):
            publisher.publish("2.301")

    @patch("multiarchlib.exectools.cmd_gather")
    def test_publish_dry_run(self, cmd_gather):
        publisher = manifest.ManifestPublisher(FakeRegistry(), "manifest-tool", dry_run=True)
        publisher.publish("latest")
        cmd_gather.assert_not_called()


if __name__ == "__main__":
    unittest.main()
