"""Documented records and their schema-typed configuration reader.

A DocRecord is an ordered list of documented fields. Each field has a
path (fields are hierarchical), an optional value, a documentation
string and a type annotation. The record is the typed default of a
configuration: one CLI flag is derived per field, using its
documentation as help text.

Values come from three sources, in increasing precedence:
    Source.DEFAULT < Source.FILE < Source.CLI

A field left unset on the command line never hides the value found in
the configuration file.

Example:
    >>> class Settings(BaseModel):
    ...     workers: int = Field(4, description="Number of worker processes")
    ...     output_format: str = Field("csv", description="Format of the results")
    >>> reader = docrec_configuration_reader(Settings)
    >>> overrides = reader.parse_overrides(["--workers", "8"])
    >>> result = reader.merge_with_file_source({"workers": 2, "output_format": "json"}, overrides)
    >>> result.unwrap().to_dict()
    {'workers': 8, 'output_format': 'json'}
"""

import argparse
from dataclasses import dataclass, replace
from enum import IntEnum
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Tuple,
    Type,
    TypeVar,
    Union,
    get_origin,
)

import yaml
from pydantic import BaseModel, TypeAdapter, ValidationError
from pydantic_core import PydanticUndefined

from taskpath.config.loader import parse_yaml
from taskpath.config.reader import ConfigurationReader, MergeResult, OverridesParser
from taskpath.locations.tree import path_to_dotted

M = TypeVar("M", bound=BaseModel)

FieldPath = Tuple[str, ...]

_DEST_PREFIX = "docrec__"


class Source(IntEnum):
    """Where a field value comes from. Higher wins."""

    DEFAULT = 0
    FILE = 1
    CLI = 2


class DocumentDecodeError(ValueError):
    """A document could not be decoded into a record."""

    pass


@dataclass(frozen=True)
class DocField:
    """A documented, typed field with an optional value.

    Attributes:
        path: Hierarchical field name.
        value: Current value (None when unset).
        doc: Documentation, used as CLI help.
        annotation: Type the values are validated against.
    """

    path: FieldPath
    value: Any = None
    doc: str = ""
    annotation: Any = Any

    @property
    def name(self) -> str:
        return path_to_dotted(self.path)

    @property
    def flag(self) -> str:
        return "--" + "-".join(seg.replace("_", "-") for seg in self.path)

    @property
    def dest(self) -> str:
        return _DEST_PREFIX + "__".join(self.path)

    def validate(self, raw: Any) -> Any:
        """Validate ``raw`` against the field's annotation.

        Raises:
            pydantic.ValidationError: If the value does not fit.
        """
        return TypeAdapter(self.annotation).validate_python(raw)

    def with_value(self, value: Any) -> "DocField":
        return replace(self, value=value)


@dataclass(frozen=True)
class SourcedDocField:
    """A field tagged with the source of its value."""

    field: DocField
    source: Source = Source.DEFAULT


def choose_highest_priority(a: SourcedDocField, b: SourcedDocField) -> SourcedDocField:
    """Keep the field whose source has the higher precedence (``a`` on ties)."""
    return b if b.source > a.source else a


class DocRecord:
    """Ordered collection of documented fields.

    Build it explicitly from fields, or from a pydantic model with
    ``DocRecord.from_model``.
    """

    def __init__(self, fields: Iterable[DocField]):
        self._fields: Tuple[DocField, ...] = tuple(fields)
        seen = set()
        for f in self._fields:
            if f.path in seen:
                raise ValueError(f"Duplicate field in record: {f.name}")
            seen.add(f.path)

    @classmethod
    def from_model(
        cls,
        model: Union[Type[BaseModel], BaseModel],
        prefix: FieldPath = (),
    ) -> "DocRecord":
        """Build a record from a pydantic model class or instance.

        Fields come in declaration order. ``Field(description=...)`` is
        the documentation. Nested models are flattened into dotted
        paths. Values come from the instance, or the defaults of the
        class.
        """
        model_cls = model if isinstance(model, type) else type(model)
        fields: List[DocField] = []
        for name, info in model_cls.model_fields.items():
            path = prefix + (name,)
            if isinstance(model, BaseModel):
                value = getattr(model, name)
            elif info.default is not PydanticUndefined:
                value = info.default
            elif info.default_factory is not None:
                value = info.default_factory()  # type: ignore[call-arg]
            else:
                value = None

            annotation = info.annotation
            if _is_model_class(annotation):
                nested = value if isinstance(value, BaseModel) else annotation
                fields.extend(cls.from_model(nested, path).fields)
                continue
            fields.append(DocField(path, value, info.description or "", annotation))
        return cls(fields)

    @property
    def fields(self) -> Tuple[DocField, ...]:
        return self._fields

    def __iter__(self) -> Iterator[DocField]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __getitem__(self, name: str) -> Any:
        for f in self._fields:
            if f.name == name:
                return f.value
        raise KeyError(name)

    def get(self, name: str, default: Any = None) -> Any:
        try:
            return self[name]
        except KeyError:
            return default

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DocRecord):
            return NotImplemented
        return self._fields == other._fields

    def __repr__(self) -> str:
        return f"DocRecord({self.to_dict()!r})"

    def to_dict(self) -> Dict[str, Any]:
        """Values as a nested document."""
        doc: Dict[str, Any] = {}
        for f in self._fields:
            target = doc
            for seg in f.path[:-1]:
                target = target.setdefault(seg, {})
            target[f.path[-1]] = f.value
        return doc

    def to_model(self, model_cls: Type[M]) -> M:
        """Validate the values into ``model_cls``."""
        return model_cls.model_validate(self.to_dict())


def _is_model_class(annotation: Any) -> bool:
    return (
        isinstance(annotation, type)
        and get_origin(annotation) is None
        and issubclass(annotation, BaseModel)
    )


def tag_with_source(record: DocRecord, source: Source) -> List[SourcedDocField]:
    return [SourcedDocField(f, source) for f in record]


def rm_tags(fields: Iterable[SourcedDocField]) -> DocRecord:
    return DocRecord(sf.field for sf in fields)


def _lookup(document: Mapping[str, Any], path: FieldPath) -> Tuple[bool, Any]:
    current: Any = document
    for seg in path:
        if not isinstance(current, Mapping) or seg not in current:
            return False, None
        current = current[seg]
    return True, current


def record_from_document(default: DocRecord, document: Any) -> List[SourcedDocField]:
    """Decode a document into the fields of ``default``.

    Fields found in the document are tagged Source.FILE, the others keep
    their default value and Source.DEFAULT. Keys the record does not
    know are ignored.

    Raises:
        DocumentDecodeError: If the document is not a mapping or a value
            does not validate.
    """
    if not isinstance(document, Mapping):
        raise DocumentDecodeError(
            f"Configuration must be a mapping, got {type(document).__name__}"
        )
    fields: List[SourcedDocField] = []
    for f in default:
        found, raw = _lookup(document, f.path)
        if not found:
            fields.append(SourcedDocField(f, Source.DEFAULT))
            continue
        try:
            value = f.validate(raw)
        except ValidationError as e:
            raise DocumentDecodeError(f"Invalid value for field `{f.name}': {e}") from e
        fields.append(SourcedDocField(f.with_value(value), Source.FILE))
    return fields


def _cli_value_parser(f: DocField) -> Callable[[str], Any]:
    """argparse ``type`` for a field: a YAML literal, validated."""

    def parse(text: str) -> Any:
        candidates: List[Any] = []
        try:
            candidates.append(parse_yaml(text))
        except yaml.YAMLError:
            pass
        candidates.append(text)
        for raw in candidates:
            try:
                return f.validate(raw)
            except ValidationError:
                continue
        raise argparse.ArgumentTypeError(f"invalid value for {f.name}: {text!r}")

    parse.__name__ = getattr(f.annotation, "__name__", "value")
    return parse


class DocRecordOverridesParser(OverridesParser[List[SourcedDocField]]):
    """One flag per field of the default record.

    Fields not given on the command line stay tagged Source.DEFAULT.
    """

    def __init__(self, default: DocRecord):
        self._default = default

    def add_arguments(self, parser: argparse.ArgumentParser) -> None:
        group = parser.add_argument_group("configuration fields")
        for f in self._default:
            help_text = f.doc or f.name
            if f.value is not None:
                help_text += f" (default: {f.value})"
            group.add_argument(
                f.flag,
                dest=f.dest,
                type=_cli_value_parser(f),
                default=argparse.SUPPRESS,
                help=help_text,
            )

    def parse(self, args: argparse.Namespace) -> List[SourcedDocField]:
        fields = []
        for f in self._default:
            if hasattr(args, f.dest):
                fields.append(SourcedDocField(f.with_value(getattr(args, f.dest)), Source.CLI))
            else:
                fields.append(SourcedDocField(f, Source.DEFAULT))
        return fields


def docrec_configuration_reader(
    default: Union[DocRecord, Type[BaseModel], BaseModel],
) -> ConfigurationReader[DocRecord, List[SourcedDocField]]:
    """Reader merging a typed default record with file and CLI values.

    The merge keeps, field by field, the value of the highest-precedence
    source. It never produces warnings; the only error is a document
    that cannot be decoded.
    """
    record = default if isinstance(default, DocRecord) else DocRecord.from_model(default)

    def merge(document: Any, cli_fields: List[SourcedDocField]) -> MergeResult[DocRecord]:
        try:
            file_fields = record_from_document(record, document)
        except DocumentDecodeError as e:
            return MergeResult([], None, str(e))
        # CLI overrides file, file overrides default
        merged = [choose_highest_priority(f, c) for f, c in zip(file_fields, cli_fields)]
        return MergeResult([], rm_tags(merged))

    return ConfigurationReader(
        overrides_parser=DocRecordOverridesParser(record),
        is_null_overrides=lambda fields: all(sf.source is not Source.CLI for sf in fields),
        merge_with_file_source=merge,
    )


__all__ = [
    "Source",
    "DocumentDecodeError",
    "DocField",
    "SourcedDocField",
    "choose_highest_priority",
    "DocRecord",
    "tag_with_source",
    "rm_tags",
    "record_from_document",
    "DocRecordOverridesParser",
    "docrec_configuration_reader",
]
