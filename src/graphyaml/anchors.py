"""Document-scoped anchor table."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from collections.abc import Mapping

from graphyaml.errors import YamlConstructionError
from graphyaml.errors import YamlSyntaxError
from graphyaml.model import YamlAlias
from graphyaml.model import YamlAnchor
from graphyaml.model import YamlElement
from graphyaml.model import validate_anchor_name
from graphyaml.scanner import Line

logger = logging.getLogger(__name__)


class AnchorTable(Mapping[str, YamlElement]):
    """Name to value table filled left to right, depth first, during one parse.

    In resolve mode aliases are looked up immediately, so an alias may only
    reference an anchor that was completely read before it. In preserve mode
    the table is still filled but aliases are never looked up.
    """

    def __init__(self, *, resolve: bool) -> None:
        self.resolve = resolve
        self._anchors: dict[str, YamlElement] = {}

    def __getitem__(self, name: str) -> YamlElement:
        return self._anchors[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._anchors)

    def __len__(self) -> int:
        return len(self._anchors)

    def clear(self) -> None:
        self._anchors.clear()

    def define(self, name: str, value: YamlElement, line: Line) -> YamlElement:
        """Record ``value`` under ``name``.

        Returns the node to place in the tree: the value itself in resolve
        mode, an anchor wrapper around it in preserve mode.
        """
        checked = check_name(name, line)
        if isinstance(value, YamlAlias):
            msg = "an anchor cannot be attached to an alias"
            raise YamlSyntaxError(msg, line.line_no, line.raw)
        if checked in self._anchors:
            logger.debug("anchor '%s' redefined at line %d", checked, line.line_no)
        self._anchors[checked] = value
        if self.resolve:
            return value
        return YamlAnchor(checked, value)

    def reference(self, name: str, line: Line) -> YamlElement:
        """Return the node that stands at an alias site."""
        checked = check_name(name, line)
        if not self.resolve:
            return YamlAlias(checked)
        try:
            value = self._anchors[checked]
        except KeyError:
            msg = f"undefined anchor '{checked}'"
            raise YamlSyntaxError(msg, line.line_no, line.raw) from None
        logger.debug("alias '*%s' resolved at line %d", checked, line.line_no)
        return value


def check_name(name: str, line: Line) -> str:
    """Validate an anchor or alias name read from ``line``."""
    try:
        return validate_anchor_name(name)
    except YamlConstructionError as exc:
        raise YamlSyntaxError(str(exc), line.line_no, line.raw) from exc
