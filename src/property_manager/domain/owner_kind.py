from enum import Enum


class OwnerKind(str, Enum):
    """Kind of entity a photo can belong to. Both kinds share the same photo rules."""

    PROPERTY = "property"
    WORK_ORDER = "work_order"

    @property
    def storage_segment(self) -> str:
        """Second path segment of storage keys minted for this kind."""
        return _STORAGE_SEGMENTS[self]

    @property
    def label(self) -> str:
        return _LABELS[self]


_STORAGE_SEGMENTS = {
    OwnerKind.PROPERTY: "properties",
    OwnerKind.WORK_ORDER: "workorders",
}

_LABELS = {
    OwnerKind.PROPERTY: "Property",
    OwnerKind.WORK_ORDER: "WorkOrder",
}
