""" Files helpers. """
import logging
import os
import shutil
import stat

from typing import Optional


class FileNotFound(Exception):
    """ Raised if a required file was not found. """


class Resolver:
    """ Find input files in the working directory or a secondary search directory. """

    def __init__(self, search_dir: str, cwd: Optional[str] = None) -> None:
        self.search_dir: str = os.path.abspath(search_dir)
        self.cwd: Optional[str] = cwd

    def find(self, filename: str) -> str:
        """ Get the absolute path of filename.

        The current working directory is searched first, then the search dir.

        Args:
            filename: Name of the file to find.

        Returns:
            Absolute path of the existing file.
        """
        cwd = self.cwd or os.getcwd()

        local = os.path.abspath(os.path.join(cwd, filename))
        if os.path.isfile(local):
            logging.debug('Found %s in working directory.', filename)
            return local

        path = os.path.join(self.search_dir, filename)
        if os.path.isfile(path):
            logging.debug('Found %s in %s.', filename, self.search_dir)
            return path

        raise FileNotFound(f'could not find file {filename!r} (looked in {cwd} and {path})')

    def find_all(self, filenames: list[str]) -> list[str]:
        """ Resolve all filenames, keeping the order. """
        return [self.find(filename) for filename in filenames]


def copy_file(dst: str, src: str) -> None:
    """ Copy src to dst, byte by byte, and take over the permission bits of src.

    Existing files are overwritten. Any I/O error is raised to the caller.
    """
    logging.info('Copying file %s to %s...', src, dst)

    with open(src, 'rb') as fin, open(dst, 'wb') as fout:
        shutil.copyfileobj(fin, fout)
        mode = stat.S_IMODE(os.fstat(fin.fileno()).st_mode)
        os.fchmod(fout.fileno(), mode)


def resolve_file(
    file: str,
    relative_base_dir: Optional[str] = None,
) -> str:
    """ Resolve path of file. """
    if relative_base_dir:
        return os.path.abspath(os.path.join(relative_base_dir, file))
    return os.path.abspath(file)
