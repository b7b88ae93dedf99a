"""Mutation testing analysis for the square root algorithms.

Reads ``mutmut results`` (mutmut 3.x) and maps every surviving mutant
back to the white-box branches of the function it lives in, so a gap in
the test suite points at a ``BranchSpec`` id rather than a bare mutant
name.

Workflow::

    pip install -e .[mutation]
    mutmut run                 # paths come from [tool.mutmut] in pyproject.toml
    python -m validation.mutation_analysis

mutmut 3 prints one line per mutant, ``<module>.<mangled>__mutmut_<n>:
<status>``.  Top-level functions are mangled as ``x_<name>`` and methods
as ``xǁ<Class>ǁ<name>``.  ``--all true`` includes the killed mutants,
which the score needs.
"""
from __future__ import annotations

import re
import subprocess
import sys
from collections import Counter
from dataclasses import dataclass, field

sys.path.insert(0, ".")

from spec import build_spec  # noqa: E402

TARGET = "isqrt.py"

# Which BranchSpec operation each mutated function implements
FUNCTION_OPERATIONS = {
    "linear_sqrt": "linear",
    "binary_sqrt": "binary",
    "newton_sqrt": "newton",
    "IntegerSquareRoot._validate": "validation",
    "IntegerSquareRoot.__post_init__": "validation",
}

_RESULT_LINE = re.compile(
    r"^\s*(?P<key>[\w.ǁ]+__mutmut_\d+):\s*(?P<status>[a-z][a-z ]*?)\s*$"
)
_MANGLED = re.compile(
    r"^(?P<module>[\w.]+?)\.x(?:_(?P<func>\w+?)|ǁ(?P<cls>\w+)ǁ(?P<meth>\w+?))"
    r"__mutmut_\d+$"
)


@dataclass
class Mutant:
    key: str
    status: str
    function: str

    @property
    def branches(self) -> list[str]:
        operation = FUNCTION_OPERATIONS.get(self.function)
        if operation is None:
            return []
        return build_spec().branch_ids(operation)


@dataclass
class MutationReport:
    counts: Counter = field(default_factory=Counter)
    survivors: list[Mutant] = field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    @property
    def killed(self) -> int:
        return self.counts["killed"]

    @property
    def survived(self) -> int:
        return self.counts["survived"]

    @property
    def score(self) -> float:
        # Mutants mutmut never ran say nothing about the suite
        checked = self.total - self.counts["not checked"] - self.counts["skipped"]
        if checked <= 0:
            return 0.0
        return (self.killed + self.counts["timeout"]) / checked

    def summary(self) -> str:
        lines = [f"Mutation report for {TARGET}", "=" * 40]
        for status, count in sorted(self.counts.items()):
            lines.append(f"{status + ':':<16} {count}")
        lines.append(f"{'score:':<16} {self.score:.1%}")
        if not self.survivors:
            lines.append("\nNo surviving mutants.")
            return "\n".join(lines)

        lines.append("\nSurviving mutants by function:")
        by_function: dict[str, list[Mutant]] = {}
        for m in self.survivors:
            by_function.setdefault(m.function, []).append(m)
        for function, mutants in sorted(by_function.items()):
            branches = ", ".join(mutants[0].branches) or "no mapped branches"
            lines.append(f"  {function}  ({len(mutants)})  check tests for {branches}")
            for m in mutants:
                lines.append(f"      mutmut show {m.key}")
        return "\n".join(lines)


def function_name(key: str) -> str:
    """Demangle a mutmut 3 mutant key into ``func`` or ``Class.method``."""
    match = _MANGLED.match(key)
    if match is None:
        return key
    if match["func"]:
        return match["func"]
    return f"{match['cls']}.{match['meth']}"


def parse_results(output: str) -> MutationReport:
    """Build a report from ``mutmut results --all true`` output.

    Lines that are not mutant results (progress bars, blank lines,
    headings) are skipped.
    """
    report = MutationReport()
    for line in output.splitlines():
        match = _RESULT_LINE.match(line)
        if match is None:
            continue
        key, status = match["key"], match["status"]
        report.counts[status] += 1
        if status in ("survived", "suspicious"):
            report.survivors.append(
                Mutant(key=key, status=status, function=function_name(key))
            )
    return report


def collect() -> MutationReport:
    try:
        result = subprocess.run(
            ["mutmut", "results", "--all", "true"],
            capture_output=True, text=True, cwd=".",
        )
    except FileNotFoundError:
        print("mutmut not installed.  Install with: pip install -e .[mutation]")
        sys.exit(1)
    if result.returncode != 0:
        print(result.stderr.strip())
        sys.exit(result.returncode)
    return parse_results(result.stdout)


def main() -> None:
    report = collect()
    if report.total == 0:
        print("No mutmut results found.  Run `mutmut run` first.")
        sys.exit(1)
    print(report.summary())
    if report.survivors:
        sys.exit(1)


if __name__ == "__main__":
    main()
