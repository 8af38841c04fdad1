"""
Form field metadata
Classifies the nodes of an ODK form's field tree as groups, repeats or leaves
"""

import logging
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

GROUP = 'group'
REPEAT = 'repeat'

# OData structural markers and the kinds they map to
STRUCTURAL_TYPES = {
    'structure': GROUP,
    'repeat': REPEAT,
}

INSTANCE_ID = 'instanceID'


class FieldDescriptor(NamedTuple):
    """One entry of the /fields?odata=true response"""
    path: str
    name: str
    type: str
    binary: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FieldDescriptor':
        """Create a descriptor from a raw JSON object"""
        path = data.get('path') or ''
        name = data.get('name') or path.rsplit('/', 1)[-1]
        return cls(
            path=path,
            name=name,
            type=data.get('type') or '',
            binary=bool(data.get('binary', False)),
        )

    @property
    def segments(self) -> Tuple[str, ...]:
        """Path segments without the leading empty segment"""
        return split_path(self.path)

    @property
    def is_structural(self) -> bool:
        return self.type in STRUCTURAL_TYPES


def split_path(path: str) -> Tuple[str, ...]:
    """Split a slash-separated field path, dropping the leading empty segment"""
    return tuple(segment for segment in path.split('/') if segment)


def coerce_descriptors(fields: Iterable[Any]) -> List[FieldDescriptor]:
    """Accept raw dicts or FieldDescriptor objects and return descriptors"""
    descriptors = []
    for field in fields:
        if isinstance(field, FieldDescriptor):
            descriptors.append(field)
        elif isinstance(field, dict):
            descriptors.append(FieldDescriptor.from_dict(field))
        else:
            logger.warning(f"Skipping unrecognised field descriptor: {field!r}")
    return descriptors


class MetadataIndex:
    """
    Lookup from structural node to its kind (group or repeat)

    Nodes are keyed by their full path so that two groups or repeats sharing a
    name at different depths keep their own kind. Leaves are never recorded:
    a path missing from the index is a leaf or an unknown node.
    """

    def __init__(self):
        self._kinds: Dict[Tuple[str, ...], str] = {}

    @classmethod
    def build(cls, fields: Iterable[Any]) -> 'MetadataIndex':
        """
        Build a fresh index from the server's field descriptors

        Args:
            fields: Field descriptors (dicts or FieldDescriptor)

        Returns:
            New MetadataIndex
        """
        index = cls()
        for field in coerce_descriptors(fields):
            if field.name == INSTANCE_ID:
                continue
            kind = STRUCTURAL_TYPES.get(field.type)
            if kind is None:
                continue
            index._kinds[field.segments] = kind

        logger.debug(f"Indexed {len(index)} structural nodes "
                     f"({len(index.repeats())} repeats)")
        return index

    def kind(self, segments: Sequence[str]) -> Optional[str]:
        """Kind of the node at the given path, or None for leaves and unknown nodes"""
        return self._kinds.get(tuple(segments))

    def is_group(self, segments: Sequence[str]) -> bool:
        return self.kind(segments) == GROUP

    def is_repeat(self, segments: Sequence[str]) -> bool:
        return self.kind(segments) == REPEAT

    def repeats(self) -> List[Tuple[str, ...]]:
        """Paths of every repeat node, in the order they were indexed"""
        return [path for path, kind in self._kinds.items() if kind == REPEAT]

    def __contains__(self, segments) -> bool:
        return tuple(segments) in self._kinds

    def __len__(self) -> int:
        return len(self._kinds)

    def __repr__(self) -> str:
        return f"MetadataIndex({len(self)} nodes)"
