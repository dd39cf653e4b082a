"""Schema registry: entity types, fields and field-level resolvers."""
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional, Union
import logging
import re

from bookgraph.errors import SchemaError

logger = logging.getLogger(__name__)

SCALARS = frozenset({"ID", "String", "Int", "Float", "Boolean"})

QUERY = "Query"
MUTATION = "Mutation"

Resolver = Callable[[Any, Dict[str, Any], Any], Any]

_TYPE_REF_RE = re.compile(r"^\s*(\[)?\s*(\w+)\s*(!)?\s*(\])?\s*(!)?\s*$")


@dataclass(frozen=True)
class TypeRef:
    """Reference to a named type, optionally wrapped in a list."""
    name: str
    is_list: bool = False
    non_null: bool = False

    def __str__(self):
        text = f"[{self.name}]" if self.is_list else self.name
        return text + "!" if self.non_null else text


def parse_type_ref(text: str) -> TypeRef:
    """
    Parse a type reference such as "ID!", "Book" or "[Review]".

    Non-null markers inside a list are accepted and ignored.
    """
    match = _TYPE_REF_RE.match(text or "")
    if not match:
        raise SchemaError(f"Invalid type reference: {text!r}")

    open_bracket, name, inner_bang, close_bracket, outer_bang = match.groups()
    if bool(open_bracket) != bool(close_bracket):
        raise SchemaError(f"Unbalanced brackets in type reference: {text!r}")

    if open_bracket:
        return TypeRef(name, is_list=True, non_null=bool(outer_bang))
    if outer_bang:
        raise SchemaError(f"Invalid type reference: {text!r}")
    return TypeRef(name, non_null=bool(inner_bang))


@dataclass
class FieldDef:
    """A field on an object type."""
    name: str
    type: TypeRef
    args: Dict[str, TypeRef] = field(default_factory=dict)
    resolver: Optional[Resolver] = None


@dataclass
class ObjectType:
    """An object (or input) type with its fields in declaration order."""
    name: str
    fields: Dict[str, FieldDef] = field(default_factory=dict)
    is_input: bool = False


class SchemaRegistry:
    """Explicit (type, field) -> FieldDef mapping."""

    def __init__(self):
        self.types: Dict[str, ObjectType] = {}

    def add_type(self, type_def: ObjectType):
        if type_def.name in self.types or type_def.name in SCALARS:
            raise SchemaError(f"Type {type_def.name} declared twice")
        self.types[type_def.name] = type_def

    def get_type(self, type_name: str) -> Optional[ObjectType]:
        return self.types.get(type_name)

    def get_field(self, type_name: str, field_name: str) -> Optional[FieldDef]:
        type_def = self.types.get(type_name)
        if type_def is None:
            return None
        return type_def.fields.get(field_name)

    def is_object(self, type_name: str) -> bool:
        type_def = self.types.get(type_name)
        return type_def is not None and not type_def.is_input

    def set_resolver(self, type_name: str, field_name: str, resolver: Resolver):
        field_def = self.get_field(type_name, field_name)
        if field_def is None:
            raise SchemaError(f"Resolver given for undeclared field {type_name}.{field_name}")
        if not callable(resolver):
            raise SchemaError(f"Resolver for {type_name}.{field_name} is not callable")
        field_def.resolver = resolver

    def validate(self):
        """Check that every referenced type exists and root fields can resolve."""
        for type_def in self.types.values():
            for field_def in type_def.fields.values():
                self._check_ref(type_def.name, field_def.name, field_def.type, type_def.is_input)
                for arg_name, arg_type in field_def.args.items():
                    self._check_ref(type_def.name, f"{field_def.name}({arg_name})", arg_type, True)

        for root in (QUERY, MUTATION):
            root_type = self.types.get(root)
            if root_type is None:
                continue
            for field_def in root_type.fields.values():
                if field_def.resolver is None:
                    raise SchemaError(f"Root field {root}.{field_def.name} has no resolver")

    def _check_ref(self, owner: str, where: str, ref: TypeRef, input_position: bool):
        if ref.name in SCALARS:
            return
        target = self.types.get(ref.name)
        if target is None:
            raise SchemaError(f"{owner}.{where} references unknown type {ref.name}")
        if target.is_input != input_position:
            kind = "input" if target.is_input else "object"
            raise SchemaError(f"{owner}.{where} cannot use {kind} type {ref.name} here")

    @classmethod
    def from_description(
        cls,
        description: Mapping[str, Any],
        resolvers: Optional[Mapping[str, Mapping[str, Resolver]]] = None
    ) -> "SchemaRegistry":
        """
        Build a registry from a parsed schema description and a resolver map.

        Args:
            description: Mapping with "types", "inputs", "query" and "mutation"
                sections. Fields map to a type reference string, or to a dict
                with "type" and "args" keys.
            resolvers: {type_name: {field_name: callable}}

        Returns:
            Validated SchemaRegistry
        """
        registry = cls()

        for type_name, fields in description.get("types", {}).items():
            registry.add_type(_object_type(type_name, fields))
        for type_name, fields in description.get("inputs", {}).items():
            registry.add_type(_object_type(type_name, fields, is_input=True))
        if "query" in description:
            registry.add_type(_object_type(QUERY, description["query"]))
        if "mutation" in description:
            registry.add_type(_object_type(MUTATION, description["mutation"]))

        for type_name, field_resolvers in (resolvers or {}).items():
            if type_name not in registry.types:
                raise SchemaError(f"Resolvers given for undeclared type {type_name}")
            for field_name, resolver in field_resolvers.items():
                registry.set_resolver(type_name, field_name, resolver)

        registry.validate()
        logger.debug(f"Schema registered with types: {', '.join(registry.types)}")
        return registry


def _object_type(
    type_name: str,
    fields: Mapping[str, Union[str, Mapping[str, Any]]],
    is_input: bool = False
) -> ObjectType:
    type_def = ObjectType(type_name, is_input=is_input)
    for field_name, declaration in fields.items():
        if isinstance(declaration, str):
            type_def.fields[field_name] = FieldDef(field_name, parse_type_ref(declaration))
            continue

        if is_input and declaration.get("args"):
            raise SchemaError(f"Input field {type_name}.{field_name} cannot take arguments")
        args = {
            arg_name: parse_type_ref(arg_type)
            for arg_name, arg_type in declaration.get("args", {}).items()
        }
        type_def.fields[field_name] = FieldDef(
            field_name, parse_type_ref(declaration["type"]), args=args
        )
    return type_def
