from dataclasses import fields
from typing import Any, ClassVar, Self

from .errors import DecodeError

class ApiResourceBase():
    """
    Intended to be subclassed by a dataclass but isnt actually a dataclass.
    Covers the translation between the dataclass and the raw JSON dicts
    on the wire.  Subclasses describe themselves with two class vars:
        _nested: field name -> resource class for fields holding another
                 resource (or a list of them)
        _int64:  field names the API sends as int64-in-a-string
    Everything defaults to None so 'unset' and 'zero' are distinct, which
    is what lets patch requests send only what was filled in.
    """
    _nested: ClassVar[dict[str, type]] = {}
    _int64: ClassVar[tuple[str, ...]] = ()

    def __post_init__(self) -> None:
        self.fixup()

    @classmethod
    def from_base(cls, base: dict) -> Self:
        """
        Build from a decoded JSON object.  Keys we don't model are dropped,
        the server is free to add fields.
        """
        if not isinstance(base, dict):
            raise DecodeError(f"{cls.__name__} expects a JSON object, got {type(base).__name__}")
        known = {f.name for f in fields(cls)}
        try:
            return cls(**{k: v for k, v in base.items() if k in known})
        except (TypeError, ValueError) as e:
            raise DecodeError(f"cannot decode {cls.__name__}: {e}") from e

    def to_base(self) -> dict:
        """
        dict representation as needed for a JSON request body.
        Unset (None) fields are left out.  Call fixup() first to ensure all
        fields are in correct format.
        """
        self.fixup()
        b = {}
        for f in fields(self):
            v = getattr(self, f.name)
            if v is None:
                continue
            if f.name in self._int64:
                v = [str(i) for i in v] if isinstance(v, list) else str(v)
            b[f.name] = _to_base_value(v)
        return b

    def fixup(self) -> None:
        """
        Coerce raw JSON values into their python types: nested dicts into
        resources and int64 strings into ints.
        """
        for name, kind in self._nested.items():
            v = getattr(self, name)
            if v is None:
                continue
            if isinstance(v, list):
                setattr(self, name, [_coerce(kind, i) for i in v])
            else:
                setattr(self, name, _coerce(kind, v))
        for name in self._int64:
            v = getattr(self, name)
            if v is None:
                continue
            if isinstance(v, list):
                setattr(self, name, [int(i) for i in v])
            elif not isinstance(v, int):
                setattr(self, name, int(v))

    def patch(self, **changes) -> Self:
        """
        Apply changes to this resource and return a new one holding only
        the changed fields, which is the body a patch method wants.  None
        means 'unset' and so cannot clear a field on the server.
        """
        unknown = sorted(set(changes) - {f.name for f in fields(self)})
        if unknown:
            raise ValueError(f"{type(self).__name__} has no field {', '.join(unknown)}")
        for k, v in changes.items():
            setattr(self, k, v)
        self.fixup()
        return type(self)(**{k: getattr(self, k) for k in changes})


class VariantBase(ApiResourceBase):
    """
    Base for 'variant' payloads, a JSON object whose shape depends on a
    discriminator field.  The base class keeps a registry of the known
    shapes and from_base() reads the discriminator first, dispatching to
    the matching subclass.  An unknown discriminator is a decode error,
    not an empty object.
    """
    _discriminator: ClassVar[str] = "type"
    _variants: ClassVar[dict[str, type]]
    variant_name: ClassVar[str] = ""

    def __init_subclass__(cls, **kwargs) -> None:
        super().__init_subclass__(**kwargs)
        if 'variant_name' not in cls.__dict__:
            # a new union root
            cls._variants = {}
        elif cls.variant_name:
            cls._variants[cls.variant_name] = cls

    @classmethod
    def from_base(cls, base: dict) -> Self:
        if not isinstance(base, dict):
            raise DecodeError(f"{cls.__name__} expects a JSON object, got {type(base).__name__}")
        tag = base.get(cls._discriminator, None)
        variant = cls._variants.get(tag, None) if isinstance(tag, str) else None
        if variant is None or not issubclass(variant, cls):
            raise DecodeError(f"unknown {cls.__name__} {cls._discriminator}: {tag!r}")
        return super(VariantBase, variant).from_base(base)

    def to_base(self) -> dict:
        b = super().to_base()
        b[self._discriminator] = self.variant_name
        return b


def _coerce(kind: type, value: Any) -> Any:
    if isinstance(value, kind):
        return value
    if isinstance(value, dict) and issubclass(kind, ApiResourceBase):
        return kind.from_base(value)
    raise TypeError(f"expected {kind.__name__} or dict, got {type(value).__name__}")


def _to_base_value(v: Any) -> Any:
    if isinstance(v, ApiResourceBase):
        return v.to_base()
    if isinstance(v, list):
        return [_to_base_value(i) for i in v]
    if isinstance(v, dict):
        return {k: _to_base_value(i) for k, i in v.items()}
    return v
