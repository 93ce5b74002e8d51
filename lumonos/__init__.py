"""A small user environment: a pipeline shell, core utilities and uniform I/O over a simulated file system."""

__version__ = "0.1.0"