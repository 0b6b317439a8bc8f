import os
import sys
import logging
import argparse

try:
    from rich.console import Console
    from rich.table import Table
    from rich.panel import Panel
    from rich.progress import Progress, SpinnerColumn, BarColumn, TextColumn
    from rich import box
except ImportError:
    print("Error: The 'rich' library is required for the CLI but not installed.", file=sys.stderr)
    print("Please install it with: pip install otoedit", file=sys.stderr)
    sys.exit(1)

from otolib import __version__
from otolib.audio import WaveformDecodeError, probe_duration_ms
from otolib.catalog import CatalogError, load_timing_catalog, save_timing_catalog
from otolib.config import (
    ConfigError, default_config, load_preset, merge_configs, save_preset, validate_config,
)
from otolib.models import CutoffKind, TimedSample, Voicebank
from otolib.timing import TimingModel, repair_cutoff

console = Console()


def parse_arguments(argv=None):
    parser = argparse.ArgumentParser(
        description="OtoEdit - inspect and fix UTAU oto.ini timing catalogs",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument("--version", action="version",
                        version=f"otoedit {__version__}")
    parser.add_argument("--preset", type=str, default=None,
                        help="JSON preset file with editor settings")
    parser.add_argument("--encoding", type=str, default=None,
                        help="Text encoding of oto.ini files (overrides the preset)")
    parser.add_argument("--save-preset", type=str, default=None, metavar="PATH",
                        help="Write the effective settings (non-defaults only) to a JSON preset")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Log library activity to stderr")

    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    p_list = sub.add_parser("list", help="List every timing record")
    p_list.add_argument("voicebank", type=str, help="Voicebank directory")

    p_check = sub.add_parser("check", help="Report records whose cutoff lies before the minimum")
    p_check.add_argument("voicebank", type=str, help="Voicebank directory")

    p_repair = sub.add_parser("repair", help="Pull violating cutoffs up to the minimum")
    p_repair.add_argument("voicebank", type=str, help="Voicebank directory")
    p_repair.add_argument("-x", "--execute", action="store_true",
                          help="Write the repaired catalog. Without -x this is a dry run.")

    p_set = sub.add_parser("set", help="Set timing fields of one record (absolute ms)")
    p_set.add_argument("voicebank", type=str, help="Voicebank directory")
    p_set.add_argument("alias", type=str, help="Alias of the record to edit")
    for name in ("offset", "overlap", "preutter", "consonant", "cutoff"):
        p_set.add_argument(f"--{name}", type=float, default=None,
                           help=f"New absolute {name} position (ms)")
    p_set.add_argument("-x", "--execute", action="store_true",
                       help="Write the edited catalog. Without -x this is a dry run.")

    if argv is None and len(sys.argv) == 1:
        parser.print_help(sys.stderr)
        sys.exit(1)

    args = parser.parse_args(argv)
    if args.command is None:
        parser.error("a command is required")
    if args.command == "set" and all(
            getattr(args, n) is None
            for n in ("offset", "overlap", "preutter", "consonant", "cutoff")):
        parser.error("set needs at least one of --offset/--overlap/--preutter/--consonant/--cutoff")
    return args


def build_config(args) -> dict:
    config = default_config()
    if args.preset:
        config = merge_configs(config, load_preset(args.preset))
    if args.encoding:
        config = merge_configs(config, {"text_encoding": args.encoding})
    validate_config(config)
    return config


# ---------------------------------------------------------------------------
# Rich console rendering
# ---------------------------------------------------------------------------

def _fmt(value: float) -> str:
    return f"{value:.1f}"


def _cutoff_label(sample: TimedSample) -> str:
    if sample.cutoff.kind is CutoffKind.FROM_END:
        return f"{_fmt(sample.cutoff.raw)}"
    return f"[magenta]{_fmt(sample.cutoff.raw)}[/]"


def _rel_file(bank: Voicebank, sample: TimedSample) -> str:
    return os.path.relpath(sample.file, bank.location)


def print_samples(bank: Voicebank, samples: list[TimedSample], title: str):
    table = Table(box=box.ROUNDED, title=title, title_justify="left")
    table.add_column("Alias", style="bold cyan")
    table.add_column("File", style="dim", max_width=40)
    table.add_column("Offset", justify="right")
    table.add_column("Consonant", justify="right")
    table.add_column("Cutoff", justify="right")
    table.add_column("Preutter", justify="right")
    table.add_column("Overlap", justify="right")
    for s in samples:
        table.add_row(s.alias, _rel_file(bank, s), _fmt(s.offset), _fmt(s.consonant),
                      _cutoff_label(s), _fmt(s.preutter), _fmt(s.overlap))
    console.print(table)


def print_errors(bank: Voicebank):
    if not bank.errors:
        return
    console.print(f"\n[bold yellow]⚠ {len(bank.errors)} malformed line(s) skipped[/]")
    for e in bank.errors:
        console.print(f"    [dim]* {e}[/]")


def header(bank: Voicebank, config: dict, mode: str | None = None):
    lines = [
        "[bold]OtoEdit[/]",
        f"Voicebank: [cyan]{bank.name}[/] | Records: [cyan]{len(bank.samples)}[/]",
        f"Encoding: [cyan]{config['text_encoding']}[/]",
    ]
    info = bank.info
    for label, value in (("Character", info.name), ("Author", info.author),
                         ("Voice", info.voice), ("Web", info.web), ("Version", info.version)):
        if value:
            lines.append(f"{label}: [cyan]{value}[/]")
    if mode:
        lines.append(f"Mode: [cyan]{mode}[/]")
    console.print(Panel.fit("\n".join(lines), title="Catalog"))


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def find_violations(bank: Voicebank) -> tuple[list[tuple[TimedSample, float, float, float]], list[str]]:
    """Probe every waveform and collect records whose cutoff is too early.

    Returns ``(violations, unreadable)`` where each violation is
    ``(sample, total_ms, cutoff_ms, min_cutoff_ms)``.
    """
    violations = []
    unreadable: list[str] = []
    durations: dict[str, float] = {}
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.completed}/{task.total}"),
        console=console,
        transient=True,
    ) as progress:
        task_id = progress.add_task("[cyan]Probing waveforms...", total=len(bank.samples))
        for s in bank.samples:
            progress.advance(task_id)
            if s.file not in durations:
                try:
                    durations[s.file] = probe_duration_ms(s.file)
                except WaveformDecodeError as e:
                    unreadable.append(f"{s.alias}: {e}")
                    continue
            total = durations[s.file]
            cutoff = s.cutoff_ms(total)
            minimum = s.min_cutoff_ms()
            if cutoff < minimum:
                violations.append((s, total, cutoff, minimum))
    return violations, unreadable


def print_violations(bank: Voicebank, violations, unreadable):
    if unreadable:
        console.print(f"\n[bold yellow]⚠ {len(unreadable)} unreadable waveform(s)[/]")
        for u in unreadable:
            console.print(f"    [dim]* {u}[/]")
    if not violations:
        console.print("\n[bold green]\U0001f7e2 All cutoffs valid[/]")
        return
    table = Table(box=box.ROUNDED, title=f"Cutoff Violations ({len(violations)})",
                  title_justify="left")
    table.add_column("Alias", style="bold cyan")
    table.add_column("File", style="dim", max_width=40)
    table.add_column("Length", justify="right")
    table.add_column("Cutoff at", justify="right", style="red")
    table.add_column("Minimum", justify="right", style="green")
    for s, total, cutoff, minimum in violations:
        table.add_row(s.alias, _rel_file(bank, s), _fmt(total), _fmt(cutoff), _fmt(minimum))
    console.print(table)


def cmd_list(args, bank: Voicebank, config: dict) -> int:
    header(bank, config)
    print_samples(bank, bank.samples, "Timing Records")
    print_errors(bank)
    return 0


def cmd_check(args, bank: Voicebank, config: dict) -> int:
    header(bank, config)
    violations, unreadable = find_violations(bank)
    print_violations(bank, violations, unreadable)
    return 1 if violations else 0


def cmd_repair(args, bank: Voicebank, config: dict) -> int:
    header(bank, config, "EXECUTE" if args.execute else "DRY-RUN")
    violations, unreadable = find_violations(bank)
    print_violations(bank, violations, unreadable)
    if not violations:
        return 0
    for s, total, _cutoff, _minimum in violations:
        if repair_cutoff(s, total):
            bank.dirty = True
    print_samples(bank, [v[0] for v in violations], "Repaired Records")
    if not args.execute:
        console.print("\n[dim]Dry run: nothing written. Use -x to save.[/]")
        return 0
    save_timing_catalog(bank)
    console.print(f"\n[green]Saved {len(violations)} repaired record(s).[/]")
    return 0


def cmd_set(args, bank: Voicebank, config: dict) -> int:
    header(bank, config, "EXECUTE" if args.execute else "DRY-RUN")
    sample = bank.find(args.alias)
    if sample is None:
        console.print(f"[bold red]Error:[/] Alias '{args.alias}' not found.")
        return 1
    try:
        total = probe_duration_ms(sample.file)
    except WaveformDecodeError as e:
        console.print(f"[bold red]Error:[/] {e}")
        return 1

    def mark_dirty():
        bank.dirty = True

    print_samples(bank, [sample], "Before")
    model = TimingModel(on_modified=mark_dirty)
    model.sample = sample
    setters = [
        (args.offset, model.set_offset),
        (args.overlap, model.set_overlap),
        (args.preutter, model.set_preutter),
        (args.consonant, model.set_consonant),
        (args.cutoff, model.set_cutoff),
    ]
    for value, setter in setters:
        if value is not None:
            setter(value, total)
    print_samples(bank, [sample], "After")

    if not args.execute:
        console.print("\n[dim]Dry run: nothing written. Use -x to save.[/]")
        return 0
    save_timing_catalog(bank)
    console.print(f"\n[green]Saved {bank.name}.[/]")
    return 0


COMMANDS = {
    "list": cmd_list,
    "check": cmd_check,
    "repair": cmd_repair,
    "set": cmd_set,
}


def main(argv=None) -> int:
    args = parse_arguments(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not os.path.isdir(args.voicebank):
        console.print(f"[bold red]Error:[/] Directory '{args.voicebank}' not found.")
        return 1

    try:
        config = build_config(args)
    except ConfigError as e:
        console.print(f"[bold red]Error:[/] {e}")
        return 1

    if args.save_preset:
        try:
            save_preset(config, args.save_preset, description=f"otoedit {__version__}")
        except OSError as e:
            console.print(f"[bold red]Error:[/] Cannot write preset: {e}")
            return 1
        console.print(f"[dim]Preset written to {args.save_preset}[/]")

    try:
        bank = load_timing_catalog(args.voicebank, config["text_encoding"])
        return COMMANDS[args.command](args, bank, config)
    except CatalogError as e:
        console.print(f"[bold red]Error:[/] {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
