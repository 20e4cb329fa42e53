""" Phases of the kernel rebuild pipeline. """
from enum import Enum


class Phase(Enum):
    """ Phases of the kernel rebuild pipeline, in execution order. """
    RESOLVE = 1
    STAGE = 2
    RENDER = 3
    BUILD = 4
    RUN = 5
    EXTRACT = 6

    def __str__(self) -> str:
        return self.name.lower()
