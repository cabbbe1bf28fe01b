"""A small interactive shell with pipes, logical operators, subshells, redirections and here-documents."""

__version__ = "0.1.0"