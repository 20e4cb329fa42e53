""" Shared fixtures for the kernel rebuild tests. """
import os

from pathlib import Path
from typing import Optional

import pytest

from krebuild.common.config import Config
from krebuild.common.runner import CommandFailed, CommandResult, Runner


class FakeRunner(Runner):
    """ Runner which records the commands instead of executing them. """

    def __init__(
        self,
        fail: Optional[list[str]] = None,
        outputs: Optional[dict[str, bytes]] = None,
        gopath: str = '/home/user/go'
    ) -> None:
        # Commands, as "<binary> <subcommand>", which fail.
        self.fail: list[str] = fail or []
        # Files written to the working directory by "docker run".
        self.outputs: dict[str, bytes] = outputs or {}
        self.gopath = gopath
        self.calls: list[tuple[list[str], Optional[str], Optional[dict[str, str]]]] = []

    def commands(self) -> list[str]:
        """ Executed commands, as "<binary> <subcommand>". """
        return [' '.join(cmd[:2]) for (cmd, _cwd, _env) in self.calls]

    def run_cmd(self, cmd, cwd=None, env=None, check=True, capture_output=False) -> CommandResult:
        self.calls.append((list(cmd), cwd, env))
        key = ' '.join(cmd[:2])

        if key in self.fail:
            if check:
                raise CommandFailed(f'Execution of command {" ".join(cmd)} failed with returncode 1!')
            return CommandResult(None, None, 1)

        if key == 'go env':
            return CommandResult(self.gopath + '\n', '', 0)

        if key == 'go build' and cwd:
            helper = Path(cwd) / cmd[2].split('/')[-1]
            helper.write_bytes(b'\x7fELF')
            helper.chmod(0o755)

        if key == 'docker run' and cwd:
            for (name, content) in self.outputs.items():
                (Path(cwd) / name).write_bytes(content)

        return CommandResult(None, None, 0)


class Workspace:
    """ Input files and folders of a rebuild. """

    def __init__(self, root: Path) -> None:
        self.root = root
        self.cwd = root / 'work'
        self.gopath = root / 'go'
        self.temp_root = root / 'tmp'

        self.cwd.mkdir()
        self.temp_root.mkdir()

        self.config = Config()
        self.config.temp_root = str(self.temp_root)
        self.config.toolchain_root = str(self.gopath)

        self.search_dir = self.gopath / self.config.search_subpath
        self.search_dir.mkdir(parents=True)

        for patch in self.config.patches:
            (self.search_dir / patch).write_text(f'patch {patch}\n')

        (self.cwd / self.config.kernel_image).write_bytes(b'old kernel')
        for dtb in self.config.device_trees:
            (self.cwd / dtb).write_bytes(b'old dtb')

    def staging_dirs(self) -> list[str]:
        """ Leftover staging folders. """
        return os.listdir(self.temp_root)


@pytest.fixture
def workspace(tmp_path: Path) -> Workspace:
    """ Workspace with all required input files. """
    return Workspace(tmp_path)


@pytest.fixture
def placeholders() -> dict[str, bytes]:
    """ Build results deposited by the fake container. """
    return {
        'vmlinuz': b'new kernel',
        'bcm2710-rpi-3-b.dtb': b'new dtb',
        'bcm2710-rpi-3-b-plus.dtb': b'new dtb plus',
    }
