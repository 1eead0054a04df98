"""Compare graphyaml with PyYAML and ruamel.yaml on the bundled sample."""

from __future__ import annotations

import io
import math
import os
import pathlib
from collections.abc import Callable
from dataclasses import dataclass
from time import perf_counter
from typing import Any
from typing import TextIO

import ruamel.yaml
import yaml as pyyaml

import graphyaml

RUNS = 500
FILENAME = "config_sample.yaml"


@dataclass(frozen=True)
class Engine:
    """
    A loader/dumper pair under measurement.

    :param label: The display name for this engine.
    :type label: str
    :param loads: Function to parse document text into Python objects.
    :type loads: Callable[[str], Any]
    :param dump: Function writing Python objects to a text stream.
    :type dump: Callable[[Any, TextIO], None]
    """

    label: str
    loads: Callable[[str], Any]
    dump: Callable[[Any, TextIO], None]


def _graphyaml_dump(config: graphyaml.YamlConfig) -> Callable[[Any, TextIO], None]:
    def _dump(data: Any, stream: TextIO) -> None:
        with graphyaml.YamlWriter(stream, config) as writer:
            writer.write(data)

    return _dump


def _pyyaml_dump(data: Any, stream: TextIO) -> None:
    pyyaml.safe_dump(data, stream)


def _build_engines() -> tuple[Engine, ...]:
    ruamel_loader = ruamel.yaml.YAML(typ="safe")
    ruamel_dumper = ruamel.yaml.YAML(typ="safe")
    flow = graphyaml.YamlConfig(use_block_style=False)
    return (
        Engine("graphyaml (block)", graphyaml.loads, _graphyaml_dump(graphyaml.YamlConfig.DEFAULT)),
        Engine("graphyaml (flow)", graphyaml.loads, _graphyaml_dump(flow)),
        Engine("PyYAML safe", pyyaml.safe_load, _pyyaml_dump),
        Engine("ruamel safe", ruamel_loader.load, ruamel_dumper.dump),  # type: ignore[arg-type]
    )


def _time_loads(engine: Engine, text: str, runs: int) -> tuple[Any | None, float]:
    total = 0.0
    result = None
    for iteration in range(runs):
        start = perf_counter()
        try:
            result = engine.loads(text)
        except Exception as exc:  # noqa: BLE001
            print(f"{engine.label} load failed on iteration {iteration + 1}: {exc}")
            return None, math.inf
        total += perf_counter() - start
    return result, total / runs


def _time_dumps(engine: Engine, data: Any, runs: int) -> tuple[str | None, float]:
    """Run engine.dump(data, stream) ``runs`` times, writing to os.devnull."""
    total = 0.0
    for iteration in range(runs):
        with open(os.devnull, "w", encoding="utf-8") as handle:  # noqa: PTH123
            start = perf_counter()
            try:
                engine.dump(data, handle)
            except Exception as exc:  # noqa: BLE001
                print(f"{engine.label} dump failed on iteration {iteration + 1}: {exc}")
                return None, math.inf
            total += perf_counter() - start
    sample = io.StringIO()
    engine.dump(data, sample)
    return sample.getvalue(), total / runs


def _as_plain(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _as_plain(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_as_plain(v) for v in value]
    return value


def _show_model(text: str) -> None:
    root = graphyaml.parse(text, graphyaml.YamlConfig.PRESERVE_ANCHORS).get_as_yaml_mapping()
    service = root.get_as_yaml_mapping("service")
    print("service name:", service.get_as_string("name"))
    print("service port:", service.get_as_integer("port"))
    print("defaults anchor:", root["defaults"].get_as_yaml_anchor().name)
    staging = root.get_as_yaml_sequence("environments").get_as_yaml_mapping(0)
    print("staging merge source:", staging["<<"])


def main() -> None:
    path = pathlib.Path(__file__).resolve().parent / FILENAME
    text = path.read_text(encoding="utf-8")
    print(f"===== {path.name} =====")
    _show_model(text)

    reference = _as_plain(ruamel.yaml.YAML(typ="safe").load(text))
    timings: list[tuple[str, float]] = []
    for engine in _build_engines():
        data, load_elapsed = _time_loads(engine, text, RUNS)
        timings.append((f"{engine.label} load", load_elapsed))
        if data is None:
            timings.append((f"{engine.label} dump", math.inf))
            continue
        sample, dump_elapsed = _time_dumps(engine, data, RUNS)
        timings.append((f"{engine.label} dump", dump_elapsed))
        print(f"{engine.label} matches ruamel data:", _as_plain(data) == reference)
        if sample is not None:
            print(f"{engine.label} round-trip stable:", _as_plain(engine.loads(sample)) == data)

    print(f"\n=== Timing summary (ms, avg over {RUNS}) ===")
    for label, elapsed in timings:
        display = "infinity" if math.isinf(elapsed) else f"{elapsed * 1000:.3f}"
        print(f"{label:>24}: {display}")


if __name__ == "__main__":
    main()
