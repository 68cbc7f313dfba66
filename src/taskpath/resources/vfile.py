"""Virtual files: typed resource declarations.

A VirtualFile is what a pipeline stage declares when it needs to read
or write some data without knowing where that data lives. It carries
two opaque type identifiers (what is read, what is written) and some
metadata describing how the resource should be mapped.

Type identifiers are plain Python classes. They are only ever compared,
never used to cast or inspect data.

Example:
    >>> vf = VirtualFile.for_reading(dict, ext="json", description="model params")
    >>> vf.describe()
    'reading; reads dict; default ext .json; model params'
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, FrozenSet, List, Optional, Tuple

from taskpath.locations.loc import Loc
from taskpath.resources.errors import IncompatibleResourceError

NoneType = type(None)


class VFIntent(Enum):
    """What a virtual file is used for.

    READING, WRITING and READ_WRITE resources are mapped to physical
    locations. EMBEDDED resources are small values written literally in
    the configuration document instead.
    """

    READING = "reading"
    WRITING = "writing"
    READ_WRITE = "read/write"
    EMBEDDED = "embedded config data"

    @property
    def is_mapped(self) -> bool:
        return self is not VFIntent.EMBEDDED


def merge_intents(a: Optional[VFIntent], b: Optional[VFIntent]) -> Optional[VFIntent]:
    """Combine the intents of two declarations of the same resource.

    Commutative and associative: embedding absorbs everything, and any
    two different mapped intents give READ_WRITE.
    """
    if a is None:
        return b
    if b is None or a is b:
        return a
    if VFIntent.EMBEDDED in (a, b):
        return VFIntent.EMBEDDED
    return VFIntent.READ_WRITE


def _merge_optional(what: str, a: Any, b: Any) -> Any:
    if a is None:
        return b
    if b is None or a == b:
        return a
    raise IncompatibleResourceError(f"conflicting {what}: {a!r} vs {b!r}")


@dataclass(frozen=True)
class VFMetadata:
    """Mapping-related metadata of a virtual file.

    Attributes:
        intent: How the resource is used (None if not decided yet).
        default_ext: Serialization extension used when a layer has none.
        default_value: Literal default, used by embedded resources.
        descriptions: Free-form documentation, one entry per declarer.
        mapped_by_default: False for resources that must be mapped
            explicitly to be used.
    """

    intent: Optional[VFIntent] = None
    default_ext: Optional[str] = None
    default_value: Any = None
    descriptions: FrozenSet[str] = frozenset()
    mapped_by_default: bool = True

    def merge(self, other: "VFMetadata") -> "VFMetadata":
        """Combine two metadata records, independently of order.

        Raises:
            IncompatibleResourceError: If both sides set a different
                default extension or default value.
        """
        return VFMetadata(
            intent=merge_intents(self.intent, other.intent),
            default_ext=_merge_optional("default extensions", self.default_ext, other.default_ext),
            default_value=_merge_optional("default values", self.default_value, other.default_value),
            descriptions=self.descriptions | other.descriptions,
            mapped_by_default=self.mapped_by_default or other.mapped_by_default,
        )


def _type_name(t: Any) -> str:
    return getattr(t, "__name__", repr(t))


@dataclass(frozen=True)
class VirtualFile:
    """A typed resource requirement, not bound to any storage yet.

    Attributes:
        read_type: Type identifier of the data read from the resource.
        write_type: Type identifier of the data written to it.
        metadata: Mapping metadata.
    """

    read_type: Any = NoneType
    write_type: Any = NoneType
    metadata: VFMetadata = field(default_factory=VFMetadata)

    @classmethod
    def for_reading(
        cls,
        read_type: Any,
        ext: Optional[str] = None,
        description: Optional[str] = None,
        mapped_by_default: bool = True,
    ) -> "VirtualFile":
        """Declare a data source."""
        return cls(
            read_type=read_type,
            metadata=_metadata(VFIntent.READING, ext, None, description, mapped_by_default),
        )

    @classmethod
    def for_writing(
        cls,
        write_type: Any,
        ext: Optional[str] = None,
        description: Optional[str] = None,
        mapped_by_default: bool = True,
    ) -> "VirtualFile":
        """Declare a data sink."""
        return cls(
            write_type=write_type,
            metadata=_metadata(VFIntent.WRITING, ext, None, description, mapped_by_default),
        )

    @classmethod
    def for_read_write(
        cls,
        data_type: Any,
        ext: Optional[str] = None,
        description: Optional[str] = None,
        mapped_by_default: bool = True,
    ) -> "VirtualFile":
        """Declare a resource that is both written and read back."""
        return cls(
            read_type=data_type,
            write_type=data_type,
            metadata=_metadata(VFIntent.READ_WRITE, ext, None, description, mapped_by_default),
        )

    @classmethod
    def embedded(
        cls,
        data_type: Any,
        default: Any = None,
        description: Optional[str] = None,
    ) -> "VirtualFile":
        """Declare a small value stored literally in the config document."""
        return cls(
            read_type=data_type,
            metadata=_metadata(VFIntent.EMBEDDED, None, default, description, True),
        )

    @property
    def type_tags(self) -> Tuple[Any, Any]:
        return (self.read_type, self.write_type)

    @property
    def intent(self) -> Optional[VFIntent]:
        return self.metadata.intent

    @property
    def default_ext(self) -> Optional[str]:
        return self.metadata.default_ext

    @property
    def default_value(self) -> Any:
        return self.metadata.default_value

    def is_mapped_by_default(self) -> bool:
        return self.metadata.mapped_by_default

    def with_metadata(self, **changes: Any) -> "VirtualFile":
        return replace(self, metadata=replace(self.metadata, **changes))

    def merge(self, other: "VirtualFile") -> "VirtualFile":
        """Combine two declarations of the same resource.

        Raises:
            IncompatibleResourceError: If the read/write types differ,
                or the metadata conflict.
        """
        if self.type_tags != other.type_tags:
            raise IncompatibleResourceError(
                f"types (reads {_type_name(self.read_type)}, "
                f"writes {_type_name(self.write_type)}) vs "
                f"(reads {_type_name(other.read_type)}, "
                f"writes {_type_name(other.write_type)})"
            )
        return VirtualFile(self.read_type, self.write_type, self.metadata.merge(other.metadata))

    def describe(self) -> str:
        """Human readable label, for diagnostics only."""
        md = self.metadata
        parts = [md.intent.value if md.intent is not None else "unused"]
        if self.read_type is not NoneType:
            parts.append(f"reads {_type_name(self.read_type)}")
        if self.write_type is not NoneType:
            parts.append(f"writes {_type_name(self.write_type)}")
        if md.default_ext:
            parts.append(f"default ext .{md.default_ext}")
        parts.extend(sorted(md.descriptions))
        return "; ".join(parts)


def _metadata(
    intent: VFIntent,
    ext: Optional[str],
    default: Any,
    description: Optional[str],
    mapped_by_default: bool,
) -> VFMetadata:
    return VFMetadata(
        intent=intent,
        default_ext=ext,
        default_value=default,
        descriptions=frozenset([description]) if description else frozenset(),
        mapped_by_default=mapped_by_default,
    )


@dataclass(frozen=True)
class DataAccessDone:
    """Log entry for one physical access."""

    loc: Loc


@dataclass(frozen=True)
class DidReadLoc(DataAccessDone):
    pass


@dataclass(frozen=True)
class DidWriteLoc(DataAccessDone):
    pass


# (input) -> (output, access log)
AccessFn = Callable[[Any], Tuple[Any, List[DataAccessDone]]]


@dataclass(frozen=True)
class DataAccess:
    """A concrete access function bound to a resource.

    Built by the execution layer from a location-bound node. The type
    identifiers are those of the virtual file it was bound from.
    """

    read_type: Any
    write_type: Any
    fn: AccessFn

    def __call__(self, value: Any) -> Tuple[Any, List[DataAccessDone]]:
        return self.fn(value)

    def merge(self, other: "DataAccess") -> "DataAccess":
        """Run both accesses in order.

        The output is the first one's; the access logs are concatenated.
        """
        if (self.read_type, self.write_type) != (other.read_type, other.write_type):
            raise IncompatibleResourceError("data accesses of different types")
        first, second = self.fn, other.fn

        def both(value: Any) -> Tuple[Any, List[DataAccessDone]]:
            out, log = first(value)
            _, log2 = second(value)
            return out, list(log) + list(log2)

        return DataAccess(self.read_type, self.write_type, both)


__all__ = [
    "NoneType",
    "VFIntent",
    "merge_intents",
    "VFMetadata",
    "VirtualFile",
    "DataAccessDone",
    "DidReadLoc",
    "DidWriteLoc",
    "AccessFn",
    "DataAccess",
]
