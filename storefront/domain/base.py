"""Base classes for domain layer.

Value objects shared by the catalog components. They carry no
persistence concerns and are built at the storage boundary.
"""

from abc import ABC
from dataclasses import dataclass


@dataclass(frozen=True)
class ValueObject(ABC):
    """Base class for value objects.

    Value objects are immutable and compared by their attributes,
    not by identity. They have no lifecycle and are interchangeable
    when their values are equal.

    Example:
        @dataclass(frozen=True)
        class VariationAttribute(ValueObject):
            attribute_id: int
            value: str
    """

    pass
