""" Container engine driver. """
import logging

from krebuild.common.config import Config
from krebuild.common.runner import CommandResult, Runner


class ContainerEngine:
    """ Build and run the kernel build container. """

    def __init__(self, config: Config, runner: Runner, context_dir: str) -> None:
        self.config = config
        self.runner = runner
        self.context_dir = context_dir

    def build_cmd(self) -> list[str]:
        """ Command to build the container image. """
        return [
            self.config.container_engine,
            'build',
            '--rm=true',
            f'--tag={self.config.container_tag}',
            '.'
        ]

    def run_cmd(self) -> list[str]:
        """ Command to run the container image. """
        return [
            self.config.container_engine,
            'run',
            '--rm',
            '--volume', f'{self.context_dir}:{self.config.result_mount}:Z',
            self.config.container_tag
        ]

    def build(self) -> CommandResult:
        """ Build the container image from the staging directory. """
        logging.info('building %s container for kernel compilation',
                     self.config.container_engine)
        return self.runner.run_cmd(self.build_cmd(), cwd=self.context_dir)

    def run(self) -> CommandResult:
        """ Run the container with the staging directory mounted. """
        logging.info('compiling kernel')
        return self.runner.run_cmd(self.run_cmd(), cwd=self.context_dir)
