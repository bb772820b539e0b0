#!/usr/bin/env python3
"""
nameclear CLI
=============
Offline command-line front end. Reads local JSON only; namespace checks
come from whatever adapters the user ran beforehand.

Usage:
    nameclear variants "MyCoolTool"
    nameclear compare "MyCoolTool" "MyKoolTool"
    nameclear analyze "MyCoolTool" --checks checks.json --corpus corpus.json
    nameclear analyze "MyCoolTool" --checks checks.json --risk-tolerance balanced --json
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Add parent to path
_parent = Path(__file__).parent.parent
if str(_parent) not in sys.path:
    sys.path.insert(0, str(_parent))

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from nameclear import __version__
from nameclear.corpus import CorpusError, load_corpus
from nameclear.models import RiskTolerance
from nameclear.numeric import format_fixed
from nameclear.pipeline import analyze
from nameclear.scoring.similarity import compare_pair
from nameclear.variants import generate_variants

TIER_STYLES = {
    "green": "bold green",
    "yellow": "bold yellow",
    "red": "bold red",
}

SEVERITY_STYLES = {
    "high": "red",
    "medium": "yellow",
    "low": "dim",
}


# =============================================================================
# Utilities
# =============================================================================

class Output:
    """CLI output through a rich console, with quiet mode and raw JSON."""

    def __init__(self, quiet: bool = False, console: Console = None):
        self.quiet = quiet
        self.console = console or Console()
        self.err_console = Console(stderr=True)

    def print(self, *args, **kwargs):
        if not self.quiet:
            self.console.print(*args, **kwargs)

    def json(self, data):
        # Plain stdout so the output stays machine-readable
        print(json.dumps(data, indent=2, ensure_ascii=False))

    def error(self, msg: str):
        self.err_console.print(f"Error: {msg}", style="red", markup=False, highlight=False)


def load_checks(path: str) -> list:
    """Read namespace checks from a JSON file (a list, or {"checks": [...]})."""
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"Checks file not found: {file_path}")
    data = json.loads(file_path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("checks", [])
    if not isinstance(data, list):
        raise ValueError(f'Checks file must hold a list or a "checks" array: {file_path}')
    return data


# =============================================================================
# Commands
# =============================================================================

def cmd_variants(args, out: Output):
    """Show the variant forms and warnings for a name."""
    variant_set = generate_variants(args.name)
    if args.json:
        out.json(variant_set.to_dict())
        return 0

    table = Table(title=f"Variants of {escape(args.name)}", box=box.SIMPLE)
    table.add_column("Kind", style="cyan")
    table.add_column("Value")
    for form in variant_set.forms:
        table.add_row(form.kind.value, form.value)
    out.print(table)

    for warning in variant_set.warnings:
        out.print(f"[{SEVERITY_STYLES.get(warning.severity.value, 'yellow')}]"
                  f"{warning.code}[/]: {escape(warning.message)}")

    if args.verbose and variant_set.fuzzy_variants:
        out.print(f"Fuzzy variants: {', '.join(variant_set.fuzzy_variants)}")
    return 0


def cmd_compare(args, out: Output):
    """Compare two names on looks and sound."""
    result = compare_pair(args.a, args.b)
    if args.json:
        out.json(result.to_dict())
        return 0

    table = Table(title=escape(f"{args.a} vs {args.b}"), box=box.SIMPLE)
    table.add_column("Axis", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Label")
    table.add_row("Looks", format_fixed(result.looks.score), result.looks.label)
    table.add_row("Sounds", format_fixed(result.sounds.score), result.sounds.label)
    table.add_row("Overall", format_fixed(result.overall, 3), "")
    out.print(table)
    for line in result.why:
        out.print(f"  - {line}", markup=False)
    return 0


def cmd_analyze(args, out: Output):
    """Run the full analysis against a checks file."""
    checks = load_checks(args.checks)
    corpus = load_corpus(args.corpus) if args.corpus else None
    channels = [c.strip() for c in args.channels.split(",") if c.strip()] if args.channels else None

    result = analyze(
        args.name,
        checks,
        risk_tolerance=args.risk_tolerance,
        corpus=corpus,
        intake_channels=channels,
        suggest=args.suggest,
        cards=args.cards,
    )
    if args.json:
        out.json(result.to_dict())
        return 0

    opinion = result.opinion
    style = TIER_STYLES[opinion.tier.value]
    out.print(Panel(
        escape(f"{opinion.summary}\n\n{opinion.risk_narrative}"),
        title=f"[{style}]{opinion.tier.value.upper()}[/]  {escape(args.name)}",
        subtitle=result.run_id,
    ))

    breakdown = opinion.score_breakdown
    table = Table(title=f"Score {breakdown.overall_score}/100", box=box.SIMPLE)
    table.add_column("Sub-score", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Weight", justify="right")
    table.add_column("Details")
    for label, sub in (
        ("Namespace availability", breakdown.namespace_availability),
        ("Coverage completeness", breakdown.coverage_completeness),
        ("Conflict severity", breakdown.conflict_severity),
        ("Domain availability", breakdown.domain_availability),
    ):
        table.add_row(label, str(sub.score), str(sub.weight), sub.details)
    out.print(table)

    factors = Table(title="Top factors", box=box.SIMPLE)
    factors.add_column("Weight")
    factors.add_column("Factor", style="cyan")
    factors.add_column("Statement")
    for factor in opinion.top_factors:
        factors.add_row(factor.weight, factor.factor, factor.statement)
    out.print(factors)

    for finding in result.findings:
        sev = SEVERITY_STYLES.get(finding.severity.value, "yellow")
        out.print(f"[{sev}]{finding.kind.value}[/] {escape(finding.summary)}", highlight=False)

    if opinion.safer_alternatives:
        out.print("Alternatives: " + ", ".join(a.name for a in opinion.safer_alternatives))

    for action in opinion.next_actions:
        link = f" ({action.url})" if action.url else ""
        out.print(f"-> [{action.urgency}] {action.label}: {action.reason}{link}", markup=False)

    out.print(f"Coverage: {opinion.coverage_score}%", style="dim")
    if args.verbose:
        out.print(opinion.disclaimer, style="dim")
    return 0


# =============================================================================
# Entry point
# =============================================================================

def main(argv=None):
    parser = argparse.ArgumentParser(
        prog='nameclear',
        description='Name collision analysis and clearance opinion',
    )
    parser.add_argument('--version', '-V', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('--quiet', '-q', action='store_true', help='Suppress non-essential output')
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging and extra detail')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    p = subparsers.add_parser('variants', aliases=['var'], help='Show variant forms of a name')
    p.add_argument('name', help='Candidate name')
    p.add_argument('--json', '-j', action='store_true', help='Output as JSON')

    p = subparsers.add_parser('compare', aliases=['cmp'], help='Compare two names')
    p.add_argument('a', help='Candidate name')
    p.add_argument('b', help='Known name')
    p.add_argument('--json', '-j', action='store_true', help='Output as JSON')

    p = subparsers.add_parser('analyze', aliases=['a'], help='Full clearance analysis')
    p.add_argument('name', help='Candidate name')
    p.add_argument('--checks', required=True, help='JSON file with namespace check results')
    p.add_argument('--corpus', help='JSON file with known marks')
    p.add_argument('--risk-tolerance', '-r', default=RiskTolerance.CONSERVATIVE.value,
                   choices=[t.value for t in RiskTolerance], help='Risk tolerance (default: conservative)')
    p.add_argument('--channels', help='Comma-separated channels that were checked')
    p.add_argument('--suggest', action='store_true', help='Include safer alternatives')
    p.add_argument('--cards', action='store_true', help='Include collision cards')
    p.add_argument('--json', '-j', action='store_true', help='Output as JSON')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )

    cmd_map = {'var': 'variants', 'cmp': 'compare', 'a': 'analyze'}
    command = cmd_map.get(args.command, args.command)

    out = Output(quiet=args.quiet)

    commands = {
        'variants': cmd_variants,
        'compare': cmd_compare,
        'analyze': cmd_analyze,
    }

    handler = commands.get(command)
    if handler:
        try:
            return handler(args, out)
        except KeyboardInterrupt:
            out.print("\nCancelled.")
            return 130
        except (CorpusError, ValueError, FileNotFoundError) as e:
            out.error(str(e))
            return 1

    parser.print_help()
    return 0


if __name__ == '__main__':
    sys.exit(main())
