"""git2txt: turn a public GitHub repository into a single annotated text file."""

__version__ = "0.1.0"
