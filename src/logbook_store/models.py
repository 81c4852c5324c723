"""Data models for the logbook document store.

Two layers live here:

- Transport models (``Document``, ``ChildEntry``) describe what the backing
  content API hands back: raw bytes plus the version token that must be
  presented on the next conditional write.
- Document schemas (``ShopIndexDocument``, ``TemplateDocument``,
  ``EntryDocument``, ``CleaningLogDocument``) describe the JSON stored in
  those bytes. Parsing applies explicit defaults, so callers never probe
  optional keys by hand. Unknown keys are kept, so a typed rewrite never
  drops fields written by a newer client.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .constants import DEFAULT_SHOP_ID
from .errors import InvalidDocumentError


# ============= Transport =============

class Document(BaseModel):
    """Raw document as stored by the backing API."""

    model_config = ConfigDict(frozen=True)

    path: str
    content: bytes            # JSON text, UTF-8
    version: str              # Opaque version token (blob sha)


class ChildEntry(BaseModel):
    """Immediate child of a listed prefix."""

    model_config = ConfigDict(frozen=True)

    key: str                  # Child name, e.g. "2025-01-10.json"
    kind: Literal["file", "dir"]


# ============= Document schemas =============

class StoredDocument(BaseModel):
    """Base for JSON document schemas."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    @classmethod
    def from_content(cls, content: Any, path: str = "<memory>"):
        """Validate decoded JSON content.

        Raises:
            InvalidDocumentError: If the content does not match the schema
        """
        try:
            return cls.model_validate(content)
        except ValidationError as e:
            raise InvalidDocumentError(path, str(e)) from e

    def to_content(self) -> Any:
        """Convert to JSON-compatible content with wire field names."""
        return self.model_dump(mode="json", by_alias=True)


class ShopSummary(StoredDocument):
    """One shop in the shop index."""

    id: str
    name: str
    city: str = ""
    address: str = ""
    active: bool = True


class ShopIndexDocument(BaseModel):
    """The shop index: a JSON array of shop summaries at a fixed path."""

    shops: List[ShopSummary] = Field(default_factory=list)

    @classmethod
    def from_content(cls, content: Any, path: str = "<memory>") -> "ShopIndexDocument":
        if content is None:
            return cls()
        if not isinstance(content, list):
            raise InvalidDocumentError(path, "shop index must be a JSON array")
        try:
            return cls(shops=[ShopSummary.model_validate(s) for s in content])
        except ValidationError as e:
            raise InvalidDocumentError(path, str(e)) from e

    def to_content(self) -> List[Dict[str, Any]]:
        return [s.to_content() for s in self.shops]

    def get(self, shop_id: str) -> Optional[ShopSummary]:
        for shop in self.shops:
            if shop.id == shop_id:
                return shop
        return None


class CheckItem(StoredDocument):
    """A checklist rule: numeric reading with optional bounds, or yes/no."""

    id: str
    label: str
    type: Literal["number", "boolean"] = "number"
    unit: str = ""
    min: Optional[float] = None
    max: Optional[float] = None


class CleaningTask(StoredDocument):
    """A recurring cleaning task."""

    id: str
    label: str
    frequency: Literal["daily", "weekly", "monthly"] = "daily"


class TemplateDocument(StoredDocument):
    """Per-shop checklist template."""

    items: List[CheckItem] = Field(default_factory=list)
    cleaning: List[CleaningTask] = Field(default_factory=list)


class EntryDocument(StoredDocument):
    """Daily checklist submission for one shop."""

    date: str
    shop_id: str = Field(alias="shopId")
    values: Dict[str, Any] = Field(default_factory=dict)
    notes: str = ""
    issues: List[str] = Field(default_factory=list)
    saved_by: Optional[str] = Field(default=None, alias="savedBy")
    saved_at: Optional[str] = Field(default=None, alias="savedAt")


class CleaningMark(StoredDocument):
    by: Optional[str] = None
    at: Optional[str] = None


class CleaningLogDocument(StoredDocument):
    """Cleaning tasks completed by one shop on one day."""

    date: str
    shop_id: str = Field(alias="shopId")
    done: Dict[str, CleaningMark] = Field(default_factory=dict)
    notes: str = ""


# ============= Seed content =============

def default_shop() -> ShopSummary:
    return ShopSummary(
        id=DEFAULT_SHOP_ID,
        name="City",
        city="Frankfurt",
        address="Musterstraße 1, 60311 Frankfurt",
        active=True,
    )


def default_template() -> TemplateDocument:
    """Checklist seeded for the bootstrap shop."""
    return TemplateDocument(
        items=[
            CheckItem(id="fridge1", label="Kühlschrank Temperatur", unit="°C", min=-1, max=7),
            CheckItem(id="oven", label="Ofen Temperatur (Standby)", unit="°C", min=150, max=250),
            CheckItem(id="espresso_boiler", label="Espressomaschine Kessel", unit="°C", min=110, max=125),
            CheckItem(id="espresso_output", label="Espresso Ausgabetemperatur", unit="°C", min=60, max=75),
            CheckItem(id="beans_ok", label="Bohnenzustand in Ordnung", type="boolean"),
            CheckItem(id="dishwasher", label="Spülmaschine Temperatur", unit="°C", min=60, max=85),
        ],
        cleaning=[
            CleaningTask(id="counters", label="Theke und Arbeitsflächen", frequency="daily"),
            CleaningTask(id="espresso_backflush", label="Espressomaschine rückspülen", frequency="daily"),
            CleaningTask(id="fridge_clean", label="Kühlschrank auswischen", frequency="weekly"),
        ],
    )
