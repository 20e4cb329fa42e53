""" Subprocess helper. """
import logging
import os
import shlex
import subprocess

from subprocess import PIPE
from typing import Any, NamedTuple, Optional


class CommandFailed(Exception):
    """ Raised if a command returns and returncode which is not 0. """


class CommandResult(NamedTuple):
    """ Outcome of a command execution. """
    stdout: Optional[str]
    stderr: Optional[str]
    returncode: int


class Runner:
    """
    Runs external commands.

    Output is streamed to the standard streams of this process unless
    capture_output is requested. Tests replace this class with a fake
    which records the calls.
    """

    def run_cmd(
        self,
        cmd: list[str],
        cwd: Optional[str] = None,
        env: Optional[dict[str, str]] = None,
        check: bool = True,
        capture_output: bool = False,
    ) -> CommandResult:
        """ Run a command.

        Args:
            cmd: Command and arguments.
            cwd: Working directory of the command.
            env: Additional environment variables, merged into os.environ.
            check: Raise CommandFailed if the returncode is not 0.
            capture_output: Capture and return stdout and stderr.

        Returns:
            The CommandResult of the command.
        """
        cmd_str = shlex.join(cmd)
        logging.info('Running command: %s', cmd_str)

        run_env: Optional[dict[str, str]] = None
        if env:
            logging.debug('Additional environment: %s', env)
            run_env = dict(os.environ)
            run_env.update(env)

        out: Any = PIPE if capture_output else None
        err: Any = PIPE if capture_output else None

        try:
            p = subprocess.run(
                cmd,
                check=False,
                stdout=out,
                stderr=err,
                cwd=cwd,
                env=run_env
            )
        except OSError as e:
            logging.error('Starting command %s failed: %s', cmd_str, e)
            raise CommandFailed(f'Execution of command {cmd_str} failed: {e}') from e

        pout: Optional[str] = None
        perr: Optional[str] = None
        if capture_output:
            pout = p.stdout.decode('utf8')
            if pout.strip():
                logging.debug('STDOUT: %s', pout)

            perr = p.stderr.decode('utf8')
            if perr.strip():
                logging.error('%s has stderr output.\nSTDERR: %s', cmd_str, perr)

        if p.returncode != 0:
            logging.info('Returncode: %s', p.returncode)
            if check:
                logging.error(
                    'Execution of command %s failed with returncode %s!', cmd_str, p.returncode)
                raise CommandFailed(
                    f'Execution of command {cmd_str} failed with returncode {p.returncode}!')

        return CommandResult(pout, perr, p.returncode)
