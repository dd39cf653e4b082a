"""Query and mutation executors walking the schema graph."""
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional
import logging
import re

from bookgraph.errors import SelectionError
from bookgraph.schema import MUTATION, QUERY, SCALARS, FieldDef, SchemaRegistry, TypeRef
from bookgraph.store import Store

logger = logging.getLogger(__name__)

_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")


@dataclass
class Selection:
    """One requested field with its arguments and nested selection set."""
    name: str
    args: Dict[str, Any] = field(default_factory=dict)
    children: List["Selection"] = field(default_factory=list)
    alias: Optional[str] = None

    @property
    def key(self) -> str:
        return self.alias or self.name


@dataclass
class Request:
    """A root entry point call: query or mutation."""
    operation: str
    kind: str = "query"
    args: Dict[str, Any] = field(default_factory=dict)
    fields: List[Selection] = field(default_factory=list)
    alias: Optional[str] = None

    def to_selection(self) -> Selection:
        return Selection(self.operation, dict(self.args), list(self.fields), self.alias)


def attribute_name(field_name: str) -> str:
    """Map a schema field name to an entity attribute (bookId -> book_id)."""
    return _CAMEL_RE.sub("_", field_name).lower()


def coerce_scalar(where: str, type_name: str, value: Any) -> Any:
    """
    Convert an argument value to its declared scalar type.

    IDs accept strings and integers and always come out as strings.
    """
    if type_name == "ID":
        if isinstance(value, str):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
    elif type_name == "Int":
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
    elif type_name == "Float":
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
    elif type_name == "String":
        if isinstance(value, str):
            return value
    elif type_name == "Boolean":
        if isinstance(value, bool):
            return value
    raise SelectionError(f"{where} expects {type_name}, got {value!r}")


def default_selection(schema: SchemaRegistry, type_name: str, depth: int = 1) -> List[Selection]:
    """
    Select every scalar field of a type, following object fields depth levels deep.
    """
    selections = []
    for field_def in schema.get_type(type_name).fields.values():
        if field_def.type.name in SCALARS:
            selections.append(Selection(field_def.name))
        elif depth > 0 and not field_def.args and schema.is_object(field_def.type.name):
            children = default_selection(schema, field_def.type.name, depth - 1)
            selections.append(Selection(field_def.name, children=children))
    return selections


class QueryExecutor:
    """Resolve a root field and its selection set into a result tree."""

    root_type = QUERY

    def __init__(self, schema: SchemaRegistry, store: Store):
        self.schema = schema
        self.store = store

    def execute(self, selection: Selection) -> Any:
        """
        Resolve one root entry point.

        Args:
            selection: Root field with its arguments and nested selections

        Returns:
            A dict for a single entity, a list of dicts, or None when
            the entity does not exist
        """
        selection, = self.validate(self.root_type, [selection])
        logger.debug(f"Executing {self.root_type}.{selection.name}")
        return self._resolve_field(self.root_type, None, selection)

    def validate(self, type_name: str, selections: List[Selection]) -> List[Selection]:
        """
        Check a selection set against the schema before anything resolves.

        Returns:
            A copy of the selections with arguments coerced to their
            declared types
        """
        if not selections:
            raise SelectionError(f"Empty selection set on {type_name}")

        seen_keys = set()
        validated = []
        for selection in selections:
            field_def = self.schema.get_field(type_name, selection.name)
            if field_def is None:
                raise SelectionError(f"Cannot query field {selection.name!r} on type {type_name}")
            if selection.key in seen_keys:
                raise SelectionError(f"Field {selection.key!r} selected twice on {type_name}")
            seen_keys.add(selection.key)

            args = self._coerce_args(type_name, field_def, selection.args)
            children = []

            if field_def.type.name in SCALARS:
                if selection.children:
                    raise SelectionError(
                        f"Field {type_name}.{selection.name} is a scalar and takes no selection"
                    )
            elif not selection.children:
                raise SelectionError(
                    f"Field {type_name}.{selection.name} of type {field_def.type} needs a selection"
                )
            else:
                children = self.validate(field_def.type.name, selection.children)

            validated.append(replace(selection, args=args, children=children))
        return validated

    def _coerce_args(self, type_name: str, field_def: FieldDef, args: Mapping[str, Any]) -> Dict[str, Any]:
        where = f"{type_name}.{field_def.name}"
        for arg_name in args:
            if arg_name not in field_def.args:
                raise SelectionError(f"Unknown argument {arg_name!r} on {where}")

        coerced = {}
        for arg_name, arg_type in field_def.args.items():
            value = args.get(arg_name)
            if value is None:
                if arg_type.non_null:
                    raise SelectionError(f"Missing required argument {arg_name!r} on {where}")
                continue
            coerced[arg_name] = self._coerce_value(f"{where}({arg_name})", arg_type, value)
        return coerced

    def _coerce_value(self, where: str, type_ref: TypeRef, value: Any) -> Any:
        if type_ref.is_list:
            items = value if isinstance(value, list) else [value]
            item_ref = TypeRef(type_ref.name)
            return [
                None if item is None else self._coerce_value(where, item_ref, item)
                for item in items
            ]
        if type_ref.name in SCALARS:
            return coerce_scalar(where, type_ref.name, value)
        return self._coerce_input(where, type_ref, value)

    def _coerce_input(self, where: str, type_ref: TypeRef, value: Any) -> Dict[str, Any]:
        input_type = self.schema.get_type(type_ref.name)
        if not isinstance(value, Mapping):
            raise SelectionError(f"{where} expects an object of type {type_ref.name}")
        for key in value:
            if key not in input_type.fields:
                raise SelectionError(f"Unknown field {key!r} in {type_ref.name} for {where}")

        coerced = {}
        for input_field in input_type.fields.values():
            field_value = value.get(input_field.name)
            if field_value is None:
                if input_field.type.non_null:
                    raise SelectionError(
                        f"Missing required field {input_field.name!r} in {type_ref.name} for {where}"
                    )
                continue
            coerced[input_field.name] = self._coerce_value(
                f"{where}.{input_field.name}", input_field.type, field_value
            )
        return coerced

    def _resolve_field(self, type_name: str, parent: Any, selection: Selection) -> Any:
        field_def = self.schema.get_field(type_name, selection.name)
        if field_def.resolver is not None:
            value = field_def.resolver(parent, selection.args, self.store)
        else:
            value = getattr(parent, attribute_name(selection.name), None)
        return self._complete(field_def.type, value, selection)

    def _complete(self, type_ref: TypeRef, value: Any, selection: Selection) -> Any:
        if value is None:
            return None
        if type_ref.is_list:
            return [self._complete_item(type_ref.name, item, selection) for item in value]
        return self._complete_item(type_ref.name, value, selection)

    def _complete_item(self, type_name: str, value: Any, selection: Selection) -> Any:
        if value is None or type_name in SCALARS:
            return value
        return {
            child.key: self._resolve_field(type_name, value, child)
            for child in selection.children
        }


class MutationExecutor(QueryExecutor):
    """Apply a mutation entry point and resolve the affected entity."""

    root_type = MUTATION


def execute_request(schema: SchemaRegistry, store: Store, request: Request) -> Dict[str, Any]:
    """Run a request and wrap the result under its response key."""
    if request.kind == "query":
        executor = QueryExecutor(schema, store)
    elif request.kind == "mutation":
        executor = MutationExecutor(schema, store)
    else:
        raise SelectionError(f"Unknown operation type {request.kind!r}")

    if schema.get_type(executor.root_type) is None:
        raise SelectionError(f"Schema declares no {executor.root_type} type")

    selection = request.to_selection()
    return {selection.key: executor.execute(selection)}
