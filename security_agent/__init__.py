"""Security Review Agent: AI-assisted security analysis of source files."""

__version__ = "0.1.0"
