"""Object category and attribute vocabulary of the capture framework.

The vocabulary is owned by the room-scanning framework, not by this tool.
It is queried once when a catalog is built and never consulted for path
derivation afterwards.
"""

from __future__ import annotations

import itertools
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from roomcat.errors import CannotParseVocabulary

logger = logging.getLogger(__name__)


# Fallback value every attribute kind carries; never part of a combination
UNIDENTIFIED = "unidentified"

# Object categories in the capture framework's enumeration order
ROOMPLAN_CATEGORIES: list[str] = [
    "storage",
    "refrigerator",
    "stove",
    "bed",
    "sink",
    "washerDryer",
    "toilet",
    "bathtub",
    "oven",
    "dishwasher",
    "table",
    "sofa",
    "chair",
    "fireplace",
    "television",
    "stairs",
]

# Attribute kinds: value -> short identifier used in folder names
ROOMPLAN_ATTRIBUTE_KINDS: dict[str, dict[str, str]] = {
    "StorageType": {
        "cabinet": "cabinet",
        "shelf": "shelf",
        UNIDENTIFIED: UNIDENTIFIED,
    },
    "TableType": {
        "dining": "dining",
        "coffee": "coffee",
        UNIDENTIFIED: UNIDENTIFIED,
    },
    "TableShapeType": {
        "rectangular": "rectangular",
        "circularElliptic": "circularElliptic",
        UNIDENTIFIED: UNIDENTIFIED,
    },
    "SofaType": {
        "singleSeat": "singleSeat",
        "rectangular": "rectangular",
        "lShaped": "lShaped",
        UNIDENTIFIED: UNIDENTIFIED,
    },
    "ChairType": {
        "dining": "dining",
        "stool": "stool",
        "swivel": "swivel",
        UNIDENTIFIED: UNIDENTIFIED,
    },
    "ChairArmType": {
        "missing": "missingArms",
        "existing": "existingArms",
        UNIDENTIFIED: UNIDENTIFIED,
    },
    "ChairBackType": {
        "missing": "missingBack",
        "existing": "existingBack",
        UNIDENTIFIED: UNIDENTIFIED,
    },
    "ChairLegType": {
        "four": "fourLegs",
        "star": "starLegs",
        UNIDENTIFIED: UNIDENTIFIED,
    },
}

# Attribute kinds each category supports, in combination order
ROOMPLAN_CATEGORY_ATTRIBUTES: dict[str, list[str]] = {
    "storage": ["StorageType"],
    "table": ["TableType", "TableShapeType"],
    "sofa": ["SofaType"],
    "chair": ["ChairType", "ChairBackType", "ChairArmType", "ChairLegType"],
}


@dataclass(frozen=True)
class Attribute:
    """A category-scoped attribute value, e.g. ``ChairType.dining``."""

    kind: str
    value: str
    short_identifier: str = field(default="", compare=False)

    @property
    def tag(self) -> str:
        return f"{self.kind}.{self.value}"

    def __str__(self) -> str:
        return self.tag


class Vocabulary:
    """Read-only view of the categories and attributes a framework supports.

    Usage:
        vocabulary = Vocabulary.default()

        vocabulary.categories()                   # ['storage', 'refrigerator', ...]
        vocabulary.attribute_kinds("table")       # ['TableType', 'TableShapeType']
        vocabulary.supported_combinations("storage")
        # [(Attribute('StorageType', 'cabinet'),), (Attribute('StorageType', 'shelf'),)]
    """

    def __init__(
        self,
        categories: Iterable[str],
        attribute_kinds: dict[str, dict[str, str]],
        category_attributes: dict[str, list[str]],
    ):
        self._categories = list(categories)
        self._attribute_kinds = {kind: dict(values) for kind, values in attribute_kinds.items()}
        self._category_attributes = {
            category: list(kinds) for category, kinds in category_attributes.items()
        }

        for category, kinds in self._category_attributes.items():
            if category not in self._categories:
                raise ValueError(f"Attributes declared for unknown category: {category}")
            for kind in kinds:
                if kind not in self._attribute_kinds:
                    raise ValueError(f"Unknown attribute kind {kind} for category {category}")

    @classmethod
    def default(cls) -> "Vocabulary":
        """Vocabulary mirroring the RoomPlan object categories."""
        return cls(ROOMPLAN_CATEGORIES, ROOMPLAN_ATTRIBUTE_KINDS, ROOMPLAN_CATEGORY_ATTRIBUTES)

    @classmethod
    def from_file(cls, path: str | Path) -> "Vocabulary":
        """Load a vocabulary from a JSON document.

        The document holds ``categories`` (list), ``attributeKinds``
        (kind -> {value: short identifier}) and ``categoryAttributes``
        (category -> list of kinds).

        Raises:
            CannotParseVocabulary: If the file cannot be read or describes
                an inconsistent vocabulary.
        """
        path = Path(path)
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
            vocabulary = cls(
                data["categories"],
                data.get("attributeKinds", {}),
                data.get("categoryAttributes", {}),
            )
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            raise CannotParseVocabulary(path, e) from e
        logger.info(f"Loaded vocabulary from {path}")
        return vocabulary

    def categories(self) -> list[str]:
        return list(self._categories)

    def has_category(self, category: str) -> bool:
        return category in self._categories

    def attribute_kinds(self, category: str) -> list[str]:
        """Attribute kinds supported by a category (empty if none)."""
        return list(self._category_attributes.get(category, []))

    def attribute(self, category: str, tag: str) -> Attribute:
        """Resolve a ``Kind.value`` tag within a category's vocabulary.

        Raises:
            KeyError: If the tag does not belong to the category.
        """
        kind, _, value = tag.partition(".")
        if kind not in self.attribute_kinds(category):
            raise KeyError(f"{tag} is not an attribute of {category}")
        values = self._attribute_kinds[kind]
        if value not in values:
            raise KeyError(f"{tag} is not an attribute of {category}")
        return Attribute(kind=kind, value=value, short_identifier=values[value])

    def supported_combinations(self, category: str) -> list[tuple[Attribute, ...]]:
        """Every attribute combination a category supports.

        Combinations are the cartesian product of the category's attribute
        kinds, in kind order, leaving out the unidentified fallback.
        """
        axes = []
        for kind in self.attribute_kinds(category):
            axes.append([
                Attribute(kind=kind, value=value, short_identifier=short)
                for value, short in self._attribute_kinds[kind].items()
                if value != UNIDENTIFIED
            ])
        if not axes:
            return []
        return [tuple(combination) for combination in itertools.product(*axes)]
