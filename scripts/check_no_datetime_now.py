#!/usr/bin/env python3
"""Fail the commit when dinepick/ reads the wall clock directly.

Deadline decisions must go through an injected TimeAuthorityProtocol so a
sweep can be replayed "as of" any instant and tests can move time with
FakeTimeAuthority. The check parses each module and flags calls to
``datetime.now()``, ``datetime.utcnow()``, ``time.time()`` and
``time.monotonic()`` (also spelled ``datetime.datetime.now()``). Calls on
other objects, such as ``self._time.monotonic()``, are fine.

Usage:
    python scripts/check_no_datetime_now.py

Exit codes:
    0: Clean (or dinepick/ not found)
    1: At least one direct clock read
"""

import ast
import sys
from pathlib import Path

PACKAGE_DIR = "dinepick"

# module name -> forbidden attribute calls on it
CLOCK_CALLS: dict[str, frozenset[str]] = {
    "datetime": frozenset({"now", "utcnow"}),
    "time": frozenset({"time", "monotonic"}),
}

# The one implementation allowed to read the clock
ALLOWED_FILES = frozenset({"dinepick/application/services/time_authority_service.py"})


def _receiver_name(node: ast.expr) -> str | None:
    if isinstance(node, ast.Name):
        return node.id
    # datetime.datetime.now()
    if isinstance(node, ast.Attribute) and isinstance(node.value, ast.Name):
        if node.value.id == node.attr == "datetime":
            return "datetime"
    return None


def _is_clock_call(node: ast.AST) -> bool:
    if not isinstance(node, ast.Call) or not isinstance(node.func, ast.Attribute):
        return False
    receiver = _receiver_name(node.func.value)
    return receiver is not None and node.func.attr in CLOCK_CALLS.get(receiver, ())


def check_file(file_path: Path) -> list[tuple[int, str]]:
    """Return (line_number, source_line) for every direct clock read.

    Unreadable or unparseable files yield no findings.
    """
    try:
        source = file_path.read_text(encoding="utf-8")
        tree = ast.parse(source, filename=str(file_path))
    except (OSError, UnicodeDecodeError, SyntaxError):
        return []

    lines = source.splitlines()
    found = sorted({node.lineno for node in ast.walk(tree) if _is_clock_call(node)})
    return [(lineno, lines[lineno - 1].strip()) for lineno in found]


def find_violations(root: Path) -> dict[str, list[tuple[int, str]]]:
    """Scan root/dinepick, keyed by repo-relative POSIX path."""
    report: dict[str, list[tuple[int, str]]] = {}
    for module in sorted((root / PACKAGE_DIR).rglob("*.py")):
        relative = module.relative_to(root).as_posix()
        if relative in ALLOWED_FILES:
            continue
        findings = check_file(module)
        if findings:
            report[relative] = findings
    return report


def main() -> int:
    root = Path.cwd()
    if not (root / PACKAGE_DIR).is_dir():
        print(f"{PACKAGE_DIR}/ not found under {root}; nothing to check")
        return 0

    report = find_violations(root)
    if not report:
        print(f"{PACKAGE_DIR}/: no direct clock reads")
        return 0

    total = sum(len(findings) for findings in report.values())
    print(f"{total} direct clock read(s) in {len(report)} file(s):")
    for relative, findings in report.items():
        for lineno, text in findings:
            print(f"  {relative}:{lineno}: {text}")
    print()
    print("Take a TimeAuthorityProtocol in the constructor and call self._time.utcnow().")
    return 1


if __name__ == "__main__":
    sys.exit(main())
