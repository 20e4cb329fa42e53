""" Tests for the staging directory. """
import os
import stat

import pytest

from krebuild.common import ImplementationError
from krebuild.common.runner import CommandFailed
from krebuild.tools.rebuild.staging import StagingArea

from conftest import FakeRunner, Workspace


class TestStaging:
    """ Tests for the staging directory. """

    def test_create_and_cleanup(self, workspace: Workspace):
        """ The staging dir is created below temp_root and removed afterwards. """
        with StagingArea(workspace.config, FakeRunner()) as staging:
            path = staging.create()
            assert os.path.isdir(path)
            assert os.path.dirname(path) == str(workspace.temp_root)
            assert os.path.basename(path).startswith('gokr-rebuild-kernel')

        assert not os.path.exists(path)
        assert workspace.staging_dirs() == []

    def test_unique_dirs(self, workspace: Workspace):
        """ Each staging area gets a new folder. """
        with StagingArea(workspace.config, FakeRunner()) as first:
            with StagingArea(workspace.config, FakeRunner()) as second:
                assert first.create() != second.create()

        assert workspace.staging_dirs() == []

    def test_cleanup_on_error(self, workspace: Workspace):
        """ The staging dir is removed if an exception is raised. """
        with pytest.raises(ValueError):
            with StagingArea(workspace.config, FakeRunner()) as staging:
                path = staging.create()
                raise ValueError('failure')

        assert not os.path.exists(path)

    def test_not_created(self, workspace: Workspace):
        """ Using the staging area before create is an error. """
        with StagingArea(workspace.config, FakeRunner()) as staging:
            with pytest.raises(ImplementationError):
                staging.file('Dockerfile')

    def test_build_helper(self, workspace: Workspace):
        """ The helper is built in the staging dir for the target OS. """
        runner = FakeRunner()

        with StagingArea(workspace.config, runner) as staging:
            path = staging.create()
            helper = staging.build_helper()

            assert helper == os.path.join(path, 'gokr-build-kernel')
            assert os.path.isfile(helper)

        (cmd, cwd, env) = runner.calls[0]
        assert cmd == ['go', 'build', 'github.com/gokrazy/kernel/cmd/gokr-build-kernel']
        assert cwd == path
        assert env == {'GOOS': 'linux'}

    def test_build_helper_fails(self, workspace: Workspace):
        """ A failing helper build is raised. """
        with StagingArea(workspace.config, FakeRunner(fail=['go build'])) as staging:
            staging.create()
            with pytest.raises(CommandFailed):
                staging.build_helper()

    def test_add_file(self, workspace: Workspace, tmp_path):
        """ Files are copied with name and mode. """
        src = tmp_path / 'some.patch'
        src.write_bytes(b'patch content')
        src.chmod(0o640)

        with StagingArea(workspace.config, FakeRunner()) as staging:
            path = staging.create()
            target = staging.add_file(str(src))

            assert target == os.path.join(path, 'some.patch')
            with open(target, 'rb') as f:
                assert f.read() == b'patch content'
            assert stat.S_IMODE(os.stat(target).st_mode) == 0o640

    def test_write_file(self, workspace: Workspace):
        """ Generated files are written to the staging dir. """
        with StagingArea(workspace.config, FakeRunner()) as staging:
            staging.create()
            target = staging.write_file('Dockerfile', 'FROM scratch\n')

            with open(target, 'r', encoding='utf-8') as f:
                assert f.read() == 'FROM scratch\n'
