""" Containerised kernel rebuild tools for the Raspberry Pi 3. """
__version__ = "1.0.0"
__dependencies__ = "go docker"
