"""Physical locations and location layers.

A Loc is an immutable location text, either a local path or a URL
(``s3://bucket/key``, ``http://host/path``). Locations are suffixed
with tree path segments when they are derived from a root, and carry
an optional serialization extension.

Example:
    >>> root = Loc.from_text("/data/run1")
    >>> (root / "inputs" / "table").add_ext_if_missing("csv").to_text()
    '/data/run1/inputs/table.csv'
"""

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class Loc:
    """A physical location.

    Attributes:
        text: Location text, without trailing separator.
    """

    text: str

    @classmethod
    def from_text(cls, text: str) -> "Loc":
        """Parse a location from its text representation.

        Trailing separators are dropped, except for a bare root.
        """
        stripped = text.rstrip("/")
        if not stripped and text:
            stripped = "/"
        return cls(stripped)

    def to_text(self) -> str:
        return self.text

    def __truediv__(self, segment: str) -> "Loc":
        if not self.text:
            return Loc(segment)
        if self.text.endswith("/"):
            return Loc(self.text + segment)
        return Loc(f"{self.text}/{segment}")

    @property
    def basename(self) -> str:
        return self.text.rsplit("/", 1)[-1]

    def split_ext(self) -> Tuple["Loc", Optional[str]]:
        """Split the extension off the last segment.

        Returns:
            (location without extension, extension or None).
        """
        base = self.basename
        dot = base.rfind(".")
        if dot <= 0:
            return self, None
        return Loc(self.text[: len(self.text) - len(base) + dot]), base[dot + 1:]

    def add_ext_if_missing(self, ext: Optional[str]) -> "Loc":
        """Append ``.ext`` unless the location already has an extension."""
        if not ext:
            return self
        _, current = self.split_ext()
        if current is not None:
            return self
        return Loc(f"{self.text}.{ext}")

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class Layer:
    """One candidate location in a fallback chain.

    Attributes:
        loc: The physical location.
        ext: Serialization extension (None lets the resource decide).
    """

    loc: Loc
    ext: Optional[str] = None

    @classmethod
    def from_text(cls, text: str) -> "Layer":
        """Parse ``some/loc.ext`` into a layer, splitting the extension."""
        loc, ext = Loc.from_text(text).split_ext()
        return cls(loc, ext)

    def with_default_ext(self, ext: Optional[str]) -> "Layer":
        if self.ext is not None:
            return self
        return Layer(self.loc, ext)

    def to_text(self) -> str:
        return self.loc.add_ext_if_missing(self.ext).to_text()

    def __str__(self) -> str:
        return self.to_text()


# Type alias for a prioritized fallback chain, most specific first.
LocLayers = Tuple[Layer, ...]

LAYER_SEPARATOR = " << "


def render_layers(layers: LocLayers) -> str:
    """Render a layer chain with the fallback separator."""
    return LAYER_SEPARATOR.join(layer.to_text() for layer in layers)


__all__ = [
    "Loc",
    "Layer",
    "LocLayers",
    "LAYER_SEPARATOR",
    "render_layers",
]
