"""
Table-driven override collaborator.

Answers the four questions the renderer asks per Path Id: is this node
visible, should it be replaced wholesale, does its object type take template
parameters, and should an `any` here be narrowed. Tables come from the
`overrides` section of declkit.config.json.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Any, Optional, Set, Union

from declkit.core.schema import TypeSpec, PathId


logger = logging.getLogger(__name__)


@dataclass
class OverrideTable:
    """Override tables keyed by rendered Path Id (`api:tabs.Tab`)."""
    hidden: Set[str] = field(default_factory=set)
    typeOverrides: Dict[str, Any] = field(default_factory=dict)
    objectTemplates: Dict[str, str] = field(default_factory=dict)
    anyReplacements: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        """Normalize hidden ids and parse replacement nodes up front."""
        self.hidden = set(self.hidden)
        self.typeOverrides = {
            key: TypeSpec.coerce(value) for key, value in self.typeOverrides.items()
        }

    def is_visible(self, spec: TypeSpec, path_id: Union[PathId, str]) -> bool:
        if spec.nodoc:
            return False
        if str(path_id) in self.hidden:
            logger.debug(f"Hidden by override: {path_id}")
            return False
        return True

    def type_override(self, spec: TypeSpec, path_id: Union[PathId, str]) -> Optional[TypeSpec]:
        return self.typeOverrides.get(str(path_id))

    def object_templates_for(self, path_id: Union[PathId, str]) -> Optional[str]:
        return self.objectTemplates.get(str(path_id))

    def replace_any_with(self, path_id: Union[PathId, str]) -> Optional[str]:
        return self.anyReplacements.get(str(path_id))
