"""
declkit Traversal Context

Visibility-filtered, declaration-ordered enumeration of schema children, and
overload expansion of function signatures. Every candidate entry is shown to
the visibility policy before it is yielded, so hidden nodes never reach the
renderer or any Path Id keyed lookup.
"""

import logging
from collections.abc import Mapping
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from pydantic import ValidationError

from declkit.core.errors import SchemaError
from declkit.core.schema import TypeSpec, PathId
from declkit.core.constants import DeclarationSyntax


logger = logging.getLogger(__name__)

VisibilityPolicy = Callable[[TypeSpec, PathId], bool]

# One overload: [return spec, *parameter specs]
Expansion = List[Optional[TypeSpec]]


class TraverseContext:
    """Enumerates children of namespaces, objects and functions."""

    def __init__(self, is_visible: VisibilityPolicy):
        self.is_visible = is_visible

    def entries(self, container: Any, base_id: PathId) -> Iterator[Tuple[TypeSpec, PathId]]:
        """
        Yield `(spec, path_id)` for every visible entry of a name -> node mapping.

        Entries come out in schema-declared order, never sorted.

        Raises:
            SchemaError: if the container is not a mapping or holds a malformed node
        """
        if container is None:
            return
        if not isinstance(container, Mapping):
            raise SchemaError(
                f"expected a mapping at {base_id}, got {type(container).__name__}"
            )

        for name, raw in container.items():
            child_id = base_id.child(name)
            try:
                spec = TypeSpec.coerce(raw)
            except ValidationError as e:
                raise SchemaError(f"malformed node at {child_id}: {e}") from e

            if not self.is_visible(spec, child_id):
                continue
            yield spec, child_id

    def for_each(
        self,
        container: Any,
        base_id: PathId,
        visitor: Callable[[TypeSpec, PathId], None],
    ) -> None:
        for spec, child_id in self.entries(container, base_id):
            visitor(spec, child_id)

    def properties_for(self, spec: TypeSpec, base_id: PathId) -> Dict[str, TypeSpec]:
        """Visible `properties` of a node, name -> node, declaration order kept."""
        return {
            child_id.last: child
            for child, child_id in self.entries(spec.properties, base_id)
        }

    def visible_parameters(self, spec: TypeSpec, path_id: PathId) -> List[TypeSpec]:
        """
        Visible `parameters` of a function node, in declaration order.

        Unnamed parameters are named `_<index>` after their position in the
        full list, so the name, the Path Id checked here and every later
        lookup for that parameter agree even when earlier ones are hidden.
        """
        params = []
        for i, param in enumerate(spec.parameters or []):
            if not param.name:
                param = param.model_copy(update={'name': f"_{i}"})
            if self.is_visible(param, path_id.child(param.name)):
                params.append(param)
        return params

    def expand_function_params(self, spec: TypeSpec, path_id: PathId) -> List[Expansion]:
        """
        Expand a function into its overloads, each `[returns, *params]`.

        A plain function gives one overload. A function with `returns_async`
        gives two sharing the same leading parameters: one taking a trailing
        callback and returning `returns` (void when absent), and one without
        the callback returning `Promise<T>` of the first async result.
        """
        params = self.visible_parameters(spec, path_id)

        if spec.returns_async is None:
            return [[spec.returns, *params]]

        async_spec = spec.returns_async
        callback_name = async_spec.name or DeclarationSyntax.CALLBACK_NAME

        # Hidden results are dropped from both the callback and the Promise
        async_params = self.visible_parameters(async_spec, path_id.child(callback_name))

        callback = TypeSpec(
            type='function',
            name=callback_name,
            optional=async_spec.optional,
            description=async_spec.description,
            parameters=async_params,
        )

        if async_params:
            resolved = async_params[0]
            if len(async_params) > 1:
                logger.debug(f"Promise of {path_id} resolves to its first result only")
        else:
            resolved = TypeSpec(type='void')

        promise = TypeSpec(
            ref=DeclarationSyntax.PROMISE_TYPE,
            value=['return', resolved],
            description=resolved.description,
        )

        return [
            [spec.returns, *params, callback],
            [promise, *params],
        ]
