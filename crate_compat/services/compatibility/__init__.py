"""
Package `crate_compat.services.compatibility`

Compares the public surface of two snapshots of a crate and reports the declarations
that would break external callers.

Public API:
- check_compatibility(old_modules, new_modules) -> CompatibilityReport

The logic is split across modules:
- shapes: equality of field layouts and function parameters
- rules: per declaration kind compatibility policy
- checker: module matching by path and declaration matching by identity key
"""

from .checker import check_compatibility

__all__ = ["check_compatibility"]
