import unittest

from flexmock import flexmock

from multiarchlib import dockercli, exectools


class TestDockerCli(unittest.TestCase):

    def test_tag_force(self):
        flexmock(exectools).should_receive("cmd_gather").with_args(["docker", "tag", "-f", "a:1", "b:1"]).once().and_return((0, "", ""))
        flexmock(exectools).should_receive("cmd_assert").never()
        dockercli.tag("a:1", "b:1")

    def test_tag_falls_back_without_force(self):
        flexmock(exectools).should_receive("cmd_gather").once().and_return((125, "", "unknown shorthand flag: 'f' in -f"))
        flexmock(exectools).should_receive("cmd_assert").with_args(["docker", "tag", "a:1", "b:1"]).once().and_return(("", ""))
        dockercli.tag("a:1", "b:1")

    def test_pull(self):
        flexmock(exectools).should_receive("cmd_assert").with_args(["docker", "pull", "a:1"]).once()
        self.assertTrue(dockercli.pull("a:1"))

    def test_pull_unchecked(self):
        flexmock(exectools).should_receive("cmd_gather").with_args(["docker", "pull", "a:1"]).once().and_return((1, "", "not found"))
        self.assertFalse(dockercli.pull("a:1", check=False))

    def test_build(self):
        flexmock(exectools).should_receive("cmd_assert").with_args(
            ["docker", "build", "--file", "multiarch/Dockerfile-arm",
             "--build-arg", "JENKINS_VERSION=2.301",
             "--tag", "jenkins/jenkins-experimental:2.301-arm",
             "--no-cache", "--pull", "."],
            cwd="/src", realtime=True).once()
        dockercli.build("jenkins/jenkins-experimental:2.301-arm", "multiarch/Dockerfile-arm", "/src",
                        build_args={"JENKINS_VERSION": "2.301"}, options=["--no-cache", "--pull"])

    def test_push(self):
        flexmock(exectools).should_receive("cmd_assert").with_args(["docker", "push", "a:1"], realtime=True).once()
        dockercli.push("a:1")


if __name__ == "__main__":
    unittest.main()
