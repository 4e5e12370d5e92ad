"""Monitor servers by ping and TCP port checks, with a Tkinter desktop window."""

__version__ = "0.1.0"