"""
vim-simplecov: highlight untested lines in Vim from SimpleCov results.

This package reads the ``coverage/.resultset.json`` report written by SimpleCov,
works out which lines of the file open in Vim were never executed, and asks the
vim-simplecov plugin to paint them. The Vim plugin talks to the server over a
Unix domain socket, and the same actions are exposed as MCP tools.
"""

__version__ = "0.1.0"
