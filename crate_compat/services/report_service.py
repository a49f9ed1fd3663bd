"""
This module renders a CompatibilityReport as the line oriented text printed by the CLI.
"""

import sys
from typing import List, Optional, TextIO

from crate_compat.models.schemas import CompatibilityReport, Verdict, show_path

PREFIX = "Uncompatible"


def format_verdict(verdict: Verdict) -> str:
    """
    Formats one non-compatible verdict.

    Examples:
        Uncompatible: crate::net::(fn connect)
        Uncompatible: crate::(struct Config) does not exist
        Uncompatible: crate::legacy module does not exist
    """
    module = show_path(verdict.module_path)
    if verdict.status == "module_missing":
        return f"{PREFIX}: {module} module does not exist"
    if verdict.old is None:
        raise ValueError(f"verdict {verdict.status} for {module} has no declaration")
    line = f"{PREFIX}: {module}::({verdict.old.show_name()})"
    if verdict.status == "missing":
        line += " does not exist"
    return line


def render_report(report: CompatibilityReport) -> List[str]:
    return [format_verdict(v) for v in report.verdicts if v.status != "compatible"]


def print_report(report: CompatibilityReport, stream: Optional[TextIO] = None) -> int:
    """Writes one line per reported verdict and returns the number of lines written."""
    out = stream if stream is not None else sys.stdout
    lines = render_report(report)
    for line in lines:
        out.write(line + "\n")
    return len(lines)
