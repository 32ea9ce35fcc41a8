"""Value Objects for the domain layer.

Value objects are immutable objects that are defined by their attributes
rather than identity. They are interchangeable when their values are equal.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, ClassVar, Self
from uuid import UUID, uuid4

from catalog_service.domain.base import ValueObject
from catalog_service.domain.exceptions import (
    DuplicateVariantCombinationError,
    InvalidAttributeValueError,
    InvalidVariantAxisError,
)


# ============================================================================
# Typed Identifiers
# ============================================================================


@dataclass(frozen=True)
class EntityId(ValueObject):
    """Strongly-typed UUID identifier.

    Using typed IDs prevents accidentally mixing up different entity IDs:
    a CategoryId never equals an AttributeId wrapping the same UUID.
    """

    value: UUID

    @classmethod
    def generate(cls) -> Self:
        """Generate a new identifier.

        Returns:
            New identifier with random UUID.
        """
        return cls(value=uuid4())

    @classmethod
    def from_string(cls, value: str) -> Self:
        """Create identifier from string representation.

        Args:
            value: String UUID representation.

        Returns:
            Identifier instance.
        """
        return cls(value=UUID(value))

    def __str__(self) -> str:
        """Return string representation.

        Returns:
            UUID as string.
        """
        return str(self.value)


@dataclass(frozen=True)
class CategoryId(EntityId):
    """Strongly-typed category identifier."""


@dataclass(frozen=True)
class AttributeId(EntityId):
    """Strongly-typed category attribute identifier."""


@dataclass(frozen=True)
class OptionId(EntityId):
    """Strongly-typed attribute option identifier."""


@dataclass(frozen=True)
class ProductId(EntityId):
    """Strongly-typed product identifier."""


@dataclass(frozen=True)
class VariantId(EntityId):
    """Strongly-typed product variant identifier."""


@dataclass(frozen=True)
class AttributeValueId(EntityId):
    """Strongly-typed product attribute value identifier."""


# ============================================================================
# Variant Combinations
# ============================================================================


@dataclass(frozen=True)
class VariantOptionValue(ValueObject):
    """One (attribute, option) pair of a variant combination."""

    attribute_id: AttributeId
    option_id: OptionId

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary.

        Returns:
            Dictionary with string ids.
        """
        return {"attribute_id": str(self.attribute_id), "option_id": str(self.option_id)}


def build_combination_key(options: Sequence[VariantOptionValue]) -> str:
    """Build the canonical identity of a variant's option assignment.

    Pairs are ordered by the attribute id's string form and joined as
    ``attribute:option`` segments separated by ``|``, so any ordering of the
    same pairs yields the same key.

    Args:
        options: Option pairs of a single combination.

    Returns:
        Canonical combination key.

    Raises:
        InvalidVariantAxisError: If no pairs are given or a pair is incomplete.
        DuplicateVariantCombinationError: If two pairs share an attribute.
    """
    if not options:
        raise InvalidVariantAxisError("No option values provided")

    ordered = sorted(options, key=lambda ov: str(ov.attribute_id))
    seen_attributes: set[AttributeId] = set()
    parts: list[str] = []
    for pair in ordered:
        if pair.attribute_id is None or pair.option_id is None:
            raise InvalidVariantAxisError("attribute_id and option_id are required")
        if pair.attribute_id in seen_attributes:
            raise DuplicateVariantCombinationError(
                "Duplicate attribute in combination",
                details={"attribute_id": str(pair.attribute_id)},
            )
        seen_attributes.add(pair.attribute_id)
        parts.append(f"{pair.attribute_id}:{pair.option_id}")
    return "|".join(parts)


# ============================================================================
# Product Attribute Values
# ============================================================================


@dataclass(frozen=True)
class OptionValue(ValueObject):
    """Attribute value pointing at a select option."""

    kind: ClassVar[str] = "option"

    option_id: OptionId


@dataclass(frozen=True)
class TextValue(ValueObject):
    """Free-text attribute value."""

    kind: ClassVar[str] = "text"

    text: str


@dataclass(frozen=True)
class NumberValue(ValueObject):
    """Numeric attribute value."""

    kind: ClassVar[str] = "number"

    number: float


@dataclass(frozen=True)
class BooleanValue(ValueObject):
    """Boolean attribute value."""

    kind: ClassVar[str] = "bool"

    flag: bool


@dataclass(frozen=True)
class JsonValue(ValueObject):
    """Structured attribute value stored as JSON."""

    kind: ClassVar[str] = "json"

    payload: Any


AttributeValue = OptionValue | TextValue | NumberValue | BooleanValue | JsonValue

ATTRIBUTE_VALUE_TYPES = (OptionValue, TextValue, NumberValue, BooleanValue, JsonValue)


def attribute_value_from_fields(
    option_id: OptionId | None = None,
    value_text: str | None = None,
    value_number: float | None = None,
    value_boolean: bool | None = None,
    value_json: Any | None = None,
) -> AttributeValue:
    """Convert the five optional value fields into a single tagged value.

    Args:
        option_id: Select option reference.
        value_text: Free-text value.
        value_number: Numeric value.
        value_boolean: Boolean value.
        value_json: JSON-serializable value.

    Returns:
        The attribute value for whichever field is populated.

    Raises:
        InvalidAttributeValueError: Unless exactly one field is populated.
    """
    populated = [
        name
        for name, value in (
            ("option_id", option_id),
            ("value_text", value_text),
            ("value_number", value_number),
            ("value_boolean", value_boolean),
            ("value_json", value_json),
        )
        if value is not None
    ]
    if len(populated) != 1:
        raise InvalidAttributeValueError(
            "Exactly one value must be set",
            details={"populated": populated},
        )

    if option_id is not None:
        return OptionValue(option_id=option_id)
    if value_text is not None:
        return TextValue(text=value_text)
    if value_number is not None:
        return NumberValue(number=float(value_number))
    if value_boolean is not None:
        return BooleanValue(flag=bool(value_boolean))
    return JsonValue(payload=value_json)
