"""Benchmark graphyaml vs other YAML engines using synthetic dense documents."""

from __future__ import annotations

import argparse
import io
import time
from collections.abc import Callable
from collections.abc import Sequence

import ruamel.yaml
import yaml as pyyaml

import graphyaml

OK = 0


def _build_doc(keys: int, depth: int) -> str:
    lines = ["defaults: &defaults", "  retries: 3", "  timeout: 1.5", "records:"]
    for i in range(keys):
        lines.append(f"  - id: {i}")
        lines.append(f'    name: "record {i}"')
        lines.append("    <<: *defaults")
        indent = "    "
        for level in range(depth):
            lines.append(f"{indent}level{level}:")
            indent += "  "
        lines.append(f"{indent}tags: [a{i}, b{i}]")
    return "\n".join(lines) + "\n"


def _bench(callback: Callable[[], object], runs: int) -> float:
    start = time.perf_counter()
    for _ in range(runs):
        callback()
    return (time.perf_counter() - start) / runs


def _stream_dump(
    dump_func: Callable[[object, io.StringIO], object],
    data: object,
) -> Callable[[], object]:
    def _call() -> object:
        buffer = io.StringIO()
        return dump_func(data, buffer)

    return _call


def _format_line(label: str, seconds: float) -> str:
    return f"{label:<24}: {seconds * 1000:.3f} ms"


def _run_benchmarks(runs: int, keys: int, depth: int) -> list[str]:
    doc = _build_doc(keys, depth)
    flow = graphyaml.YamlConfig(use_block_style=False)
    preserve = graphyaml.YamlConfig.PRESERVE_ANCHORS
    ruamel_loader = ruamel.yaml.YAML(typ="safe")
    ruamel_dumper = ruamel.yaml.YAML(typ="safe")

    data = graphyaml.loads(doc)
    tree = graphyaml.parse(doc, preserve)

    lines: list[str] = [
        f"Runs: {runs}",
        f"Records: {keys} (nesting depth {depth})",
        f"Document size: {len(doc)} characters",
    ]
    lines.extend((
        _format_line("graphyaml.loads", _bench(lambda: graphyaml.loads(doc), runs)),
        _format_line(
            "graphyaml.parse (keep &)",
            _bench(lambda: graphyaml.parse(doc, preserve), runs),
        ),
        _format_line("graphyaml.dumps", _bench(lambda: graphyaml.dumps(data), runs)),
        _format_line("graphyaml.dumps (flow)", _bench(lambda: graphyaml.dumps(data, flow), runs)),
        _format_line(
            "graphyaml.render (keep &)",
            _bench(lambda: graphyaml.render(tree, preserve), runs),
        ),
        _format_line("PyYAML safe_load", _bench(lambda: pyyaml.safe_load(doc), runs)),
        _format_line("PyYAML safe_dump", _bench(lambda: pyyaml.safe_dump(data), runs)),
        _format_line("ruamel safe_load", _bench(lambda: ruamel_loader.load(doc), runs)),
        _format_line(
            "ruamel safe_dump",
            _bench(_stream_dump(ruamel_dumper.dump, data), runs),  # type: ignore[arg-type]
        ),
    ))
    return lines


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Benchmark graphyaml vs other YAML engines")
    parser.add_argument(
        "--runs",
        type=int,
        default=50,
        help="Number of iterations per operation (default: 50)",
    )
    parser.add_argument(
        "--keys",
        type=int,
        default=300,
        help="Number of records in the synthetic document (default: 300)",
    )
    parser.add_argument(
        "--depth",
        type=int,
        default=4,
        help="Nesting depth below each record (default: 4)",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run YAML library benchmarks and print results.

    Parameters
    ----------
    argv : Sequence[str] | None, optional
        Command line arguments. If None, uses sys.argv.

    Returns:
    -------
    int
        Exit code (0 for success).
    """
    parser = _build_parser()
    args = parser.parse_args(argv)
    for line in _run_benchmarks(runs=args.runs, keys=args.keys, depth=args.depth):
        print(line)
    return OK


if __name__ == "__main__":
    raise SystemExit(main())
