"""
ShellScribe: a terminal assistant that turns plain-language requests into
shell commands, runs them and explains the result.
"""

__version__ = "0.1.0"
