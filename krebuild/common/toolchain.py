""" Lookup of the Go toolchain workspace root. """
import logging

from typing import Optional

from .runner import CommandFailed, Runner


class ToolchainNotFound(Exception):
    """ Raised if the toolchain root can not be determined. """


class StaticRoot:
    """ Toolchain root with a fixed path. """

    def __init__(self, path: str) -> None:
        self.path = path

    def root(self) -> str:
        """ Get the toolchain root. """
        return self.path


class GoEnvRoot:
    """ Toolchain root as reported by `go env GOPATH`. """

    def __init__(self, runner: Runner, go: str = 'go') -> None:
        self.runner = runner
        self.go = go

    def root(self) -> str:
        """ Get the toolchain root. """
        try:
            (out, _err, _rc) = self.runner.run_cmd(
                [self.go, 'env', 'GOPATH'], capture_output=True)
        except CommandFailed as e:
            raise ToolchainNotFound(f'Unable to determine GOPATH: {e}') from e

        gopath: Optional[str] = out.strip() if out else None
        if not gopath:
            raise ToolchainNotFound('go env GOPATH returned an empty path!')

        logging.debug('Using GOPATH %s.', gopath)
        return gopath
