"""
crate_compat: backward-compatibility checker for the public API of a Rust library crate.

It compares the public declarations of the crate at a git commit with the ones in the
current working tree and reports every declaration that would break external callers.
"""

__version__ = "0.1.0"
