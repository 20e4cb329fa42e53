""" Staging directory for the container build context. """
import logging
import os
import shutil
import tempfile

from typing import Optional

from krebuild.common import ImplementationError
from krebuild.common.config import Config
from krebuild.common.files import copy_file
from krebuild.common.runner import Runner


class StagingArea:
    """
    Temporary folder holding the container build context.

    The folder is created by create() and removed when the context is
    left, also if an exception is raised.
    """

    def __init__(self, config: Config, runner: Runner) -> None:
        self.config = config
        self.runner = runner
        self.path: Optional[str] = None

    def __enter__(self) -> 'StagingArea':
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.cleanup()

    def create(self) -> str:
        """ Create a new, empty staging directory. """
        os.makedirs(self.config.temp_root, exist_ok=True)
        self.path = tempfile.mkdtemp(prefix='gokr-rebuild-kernel', dir=self.config.temp_root)
        logging.debug('Staging directory: %s', self.path)
        return self.path

    def cleanup(self) -> None:
        """ Remove the staging directory. """
        if self.path and os.path.exists(self.path):
            logging.debug('Removing staging directory %s...', self.path)
            shutil.rmtree(self.path)

    @property
    def directory(self) -> str:
        """ Path of the staging directory. """
        if not self.path:
            raise ImplementationError('Staging area is not initialized!')
        return self.path

    def build_helper(self) -> str:
        """ Build the kernel build helper into the staging directory.

        Returns:
            Path of the helper binary.
        """
        logging.info('Building %s...', self.config.helper_package)

        self.runner.run_cmd(
            ['go', 'build', self.config.helper_package],
            cwd=self.directory,
            env={'GOOS': self.config.helper_goos}
        )

        return os.path.join(self.directory, self.config.helper_name)

    def add_file(self, path: str) -> str:
        """ Copy a file into the staging directory, keeping its name. """
        target = os.path.join(self.directory, os.path.basename(path))
        copy_file(target, path)
        return target

    def write_file(self, name: str, text: str) -> str:
        """ Write a generated file to the staging directory. """
        target = os.path.join(self.directory, name)
        logging.debug('Writing %s...', target)
        with open(target, 'w', encoding='utf-8') as f:
            f.write(text)
        return target

    def file(self, name: str) -> str:
        """ Path of a file in the staging directory. """
        return os.path.join(self.directory, name)
