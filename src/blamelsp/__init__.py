"""blame-lsp package.

A small language server that shows who last changed the line under the
cursor and links to that line on the hosting forge.
"""

__version__ = "0.1.0"

__all__ = [
    "config",
    "git",
    "cache",
    "format",
    "remote",
    "lsp",
]
