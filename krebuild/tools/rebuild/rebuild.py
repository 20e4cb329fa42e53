#!/usr/bin/env python
""" Kernel rebuild for the Raspberry Pi 3 in a build container. """
import argparse
import logging
import os
import sys
import tempfile

from contextlib import contextmanager
from typing import Iterator, Optional, Protocol

from krebuild.common import init_logging, log_exception
from krebuild.common.config import Config
from krebuild.common.files import Resolver, copy_file
from krebuild.common.runner import Runner
from krebuild.common.toolchain import GoEnvRoot, StaticRoot
from krebuild.common.types.phase import Phase

from .dockerfile import RenderContext, load_template, render_dockerfile
from .engine import ContainerEngine
from .staging import StagingArea


class PhaseFailed(Exception):
    """ Raised if a phase of the rebuild fails. """

    def __init__(self, phase: Phase, cause: Exception) -> None:
        super().__init__(f'{phase} failed: {cause}')
        self.phase = phase
        self.cause = cause


class ArtifactMissing(Exception):
    """ Raised if the build container did not produce an expected file. """


class ToolchainRoot(Protocol):
    """ Provides the toolchain root folder. """

    def root(self) -> str: ...  # pragma: no cover


@contextmanager
def phase(current: Phase) -> Iterator[None]:
    """ Wrap all errors of a phase in PhaseFailed. """
    logging.debug('Entering phase %s.', current)
    try:
        yield
    except PhaseFailed:
        raise
    except Exception as e:
        raise PhaseFailed(current, e) from e


class KernelRebuilder:
    """ Kernel rebuild pipeline. """

    def __init__(
        self,
        config: Config,
        runner: Optional[Runner] = None,
        toolchain: Optional[ToolchainRoot] = None,
        cwd: Optional[str] = None,
        uid: Optional[int] = None,
        gid: Optional[int] = None,
    ) -> None:
        """ Prepare the rebuild.

        The toolchain root is resolved here, a failure aborts before any
        file is touched.

        Args:
            config: Rebuild configuration.
            runner: Runner for external commands.
            toolchain: Provider of the toolchain root.
            cwd: Primary search folder, defaults to the working directory.
            uid: User id for the build container, defaults to the invoking user.
            gid: Group id for the build container, defaults to the invoking user.
        """
        self.config = config
        self.runner = runner or Runner()

        if toolchain is None:
            if config.toolchain_root:
                toolchain = StaticRoot(config.toolchain_root)
            else:
                toolchain = GoEnvRoot(self.runner)

        search_dir = os.path.join(toolchain.root(), config.search_subpath)
        self.resolver = Resolver(search_dir, cwd=cwd)

        self.uid = uid
        self.gid = gid

        # Staging folder of the last run, removed after the run.
        self.staging_dir: Optional[str] = None
        # Resolved locations of the build results.
        self.outputs: dict[str, str] = {}

    def rebuild(self) -> list[str]:
        """ Run all phases of the kernel rebuild.

        Returns:
            Paths of the replaced kernel image and device trees.
        """
        with phase(Phase.RESOLVE):
            patch_paths = self.resolver.find_all(self.config.patches)
            self.outputs = {
                name: self.resolver.find(name) for name in self.config.outputs
            }
            logging.debug('Patches: %s', patch_paths)
            logging.debug('Outputs: %s', self.outputs)

        with StagingArea(self.config, self.runner) as staging:
            with phase(Phase.STAGE):
                self.staging_dir = staging.create()
                staging.build_helper()
                # Copy all files into the staging directory so that
                # the container engine includes them in the build context.
                for path in patch_paths:
                    staging.add_file(path)

            with phase(Phase.RENDER):
                context = RenderContext.from_config(self.config, self.uid, self.gid)
                template = load_template(self.config.template)
                staging.write_file('Dockerfile', render_dockerfile(template, context))

            engine = ContainerEngine(self.config, self.runner, staging.directory)

            with phase(Phase.BUILD):
                engine.build()

            with phase(Phase.RUN):
                engine.run()

            with phase(Phase.EXTRACT):
                return self.extract(staging)

    def extract(self, staging: StagingArea) -> list[str]:
        """ Copy the build results over the resolved input files.

        All results are checked and copied before the first input is replaced.
        """
        for name in self.outputs:
            result = staging.file(name)
            if not os.path.isfile(result):
                raise ArtifactMissing(f'Build result {name} was not created!')
            if os.path.getsize(result) == 0:
                raise ArtifactMissing(f'Build result {name} is empty!')

        # Copy next to the inputs first, then replace all inputs at once.
        pending: list[tuple[str, str]] = []
        try:
            for (name, dst) in self.outputs.items():
                (fd, tmp) = tempfile.mkstemp(prefix=f".{name}.", dir=os.path.dirname(dst))
                os.close(fd)
                pending.append((tmp, dst))
                copy_file(tmp, staging.file(name))
        except Exception:
            for (tmp, _dst) in pending:
                if os.path.exists(tmp):
                    os.remove(tmp)
            raise

        replaced = []
        for (tmp, dst) in pending:
            os.replace(tmp, dst)
            replaced.append(dst)

        return replaced


@log_exception(call_exit=True)
def main() -> None:
    """ Main entrypoint of the kernel rebuild. """
    init_logging()

    logging.info('\n==============\n'
                 'Kernel Rebuild\n'
                 '==============\n')

    parser = argparse.ArgumentParser(
        description='Rebuild the Raspberry Pi 3 kernel in a build container. '
                    'A YAML configuration file can be provided using the '
                    'environment variable KERNEL_REBUILD_CONFIG.')
    args = parser.parse_args()

    logging.debug('Running kernel rebuild with args %s', args)

    config = Config(os.getenv('KERNEL_REBUILD_CONFIG', None) or None)
    rebuilder = KernelRebuilder(config)

    try:
        results = rebuilder.rebuild()
    except PhaseFailed as e:
        logging.critical('%s', e)
        sys.exit(1)

    print(f'Results were written to {", ".join(results)}.')


if __name__ == '__main__':
    main()
