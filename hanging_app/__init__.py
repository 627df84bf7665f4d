"""Art Hanging Toolbox: nail placement calculations for hanging artwork."""

__version__ = "0.3.0"
