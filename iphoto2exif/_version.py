""" version info """

__version__ = "1.0.0"
