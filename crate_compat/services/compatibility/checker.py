"""
This module matches the two snapshots and emits the verdicts.

Main responsibility:
- Pairs old and new modules by identical SourcePath (no fuzzy or rename matching).
- Pairs declarations by identity key (kind, name), never by position.
- Applies the per kind policy from `rules` and keeps every verdict that is not
  `compatible`, in a deterministic order.
"""

import logging
from typing import Dict, Iterable, List

from crate_compat.models.schemas import (
    CompatibilityReport,
    Declaration,
    Module,
    SourcePath,
    Verdict,
    show_path,
)
from .rules import evaluate

logger = logging.getLogger(__name__)


def compare_declaration(path: SourcePath, old: Declaration, new_module: Module) -> Verdict:
    """Verdict for one old declaration against the module with the same path."""
    new = new_module.find(old.identity_key)
    if new is None:
        return Verdict(module_path=path, status="missing", old=old)
    if evaluate(old, new):
        return Verdict(module_path=path, status="compatible", old=old)
    return Verdict(module_path=path, status="incompatible", old=old, new=new)


def check_compatibility(old_modules: Iterable[Module], new_modules: Iterable[Module]) -> CompatibilityReport:
    """
    Compares every old module with the new module at the same path.

    Old modules are visited in SourcePath order and declarations in source order, so
    running the check twice over the same snapshots yields the same sequence.

    Returns:
        CompatibilityReport: the `incompatible`, `missing` and `module_missing`
        verdicts, with the number of declarations checked and found compatible.
    """
    new_by_path: Dict[SourcePath, Module] = {}
    for module in new_modules:
        new_by_path.setdefault(module.path, module)

    verdicts: List[Verdict] = []
    checked = 0
    compatible = 0

    for old_module in sorted(old_modules, key=lambda m: m.path):
        new_module = new_by_path.get(old_module.path)
        if new_module is None:
            logger.debug("Module %s does not exist anymore", show_path(old_module.path))
            verdicts.append(Verdict(module_path=old_module.path, status="module_missing"))
            continue

        for old in old_module.declarations:
            checked += 1
            verdict = compare_declaration(old_module.path, old, new_module)
            if verdict.status == "compatible":
                compatible += 1
                continue
            logger.debug("%s::(%s) is %s", show_path(old_module.path), old.show_name(), verdict.status)
            verdicts.append(verdict)

    logger.info("Checked %d declarations: %d compatible, %d reported", checked, compatible, len(verdicts))
    return CompatibilityReport(verdicts=tuple(verdicts), checked_count=checked, compatible_count=compatible)
