"""
Document model for the SAM Pro data file.

The whole application state is one ``AppData`` document.  It is stored with
camelCase keys (``dailyReports``, ``materialsUsed`` ...) and read back into the
frozen Pydantic models below.  Unknown keys are kept so that a document written
by a newer build survives a round-trip through an older one.

Collections are addressed through the closed :class:`Collection` enum, which
maps every collection name to its record type.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class DocumentModel(BaseModel):
    """Base for every persisted shape: camelCase on disk, immutable in memory.

    A stored ``null`` for a known field reads as that field's default, so a
    document edited by hand or written by an older build still loads.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        frozen=True,
        protected_namespaces=(),
    )

    @model_validator(mode="before")
    @classmethod
    def null_means_default(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        known = _field_keys(cls)
        return {k: v for k, v in data.items() if v is not None or k not in known}


def _field_keys(model: type[BaseModel]) -> set[str]:
    keys = set(model.model_fields)
    keys.update(f.alias for f in model.model_fields.values() if f.alias)
    return keys


# ---------------------------------------------------------------------------
# Master data
# ---------------------------------------------------------------------------


class MasterRecord(DocumentModel):
    id: str
    name: str = ""


class Color(MasterRecord):
    pass


class ProductModel(MasterRecord):
    description: str | None = None


class MaterialType(MasterRecord):
    pass


class Barcode(MasterRecord):
    model_id: str | None = None


class Item(MasterRecord):
    type: str = ""
    notes: str | None = None


class Size(MasterRecord):
    pass


class Category(MasterRecord):
    pass


class Season(MasterRecord):
    pass


# ---------------------------------------------------------------------------
# Daily reports
# ---------------------------------------------------------------------------


class MaterialUsage(DocumentModel):
    material_type_id: str = ""
    quantity_used: float = 0


class DailyReport(DocumentModel):
    id: str
    report_date: str = ""
    start_date: str = ""
    end_date: str = ""
    materials_used: list[MaterialUsage] = Field(default_factory=list)
    item_id: str = ""
    color_id: str = ""
    model_id: str = ""
    barcode_id: str = ""
    size_id: str = ""
    category_id: str = ""
    season_id: str = ""
    quantity_manufactured: float = 0
    quantity_sold: float = 0
    notes: str | None = None

    @property
    def balance(self) -> float:
        """Manufactured minus sold; derived, never persisted."""
        return self.quantity_manufactured - self.quantity_sold

    @property
    def total_material_used(self) -> float:
        return sum(m.quantity_used for m in self.materials_used)


# ---------------------------------------------------------------------------
# Settings and users
# ---------------------------------------------------------------------------


class UserSettings(DocumentModel):
    company_name: str = ""
    logo_url: str = ""
    contact_info: str = ""
    manager_name: str = ""


class Permissions(DocumentModel):
    can_add: bool = False
    can_edit: bool = False
    can_delete: bool = False
    can_print: bool = False
    can_export: bool = False

    @classmethod
    def full(cls) -> Permissions:
        return cls(can_add=True, can_edit=True, can_delete=True, can_print=True, can_export=True)


PERMISSION_NAMES: tuple[str, ...] = tuple(Permissions.model_fields)


class User(DocumentModel):
    id: str
    name: str = ""
    username: str
    password: str | None = None
    permissions: Permissions = Field(default_factory=Permissions)

    def without_password(self) -> User:
        return self.model_copy(update={"password": None})


# ---------------------------------------------------------------------------
# Seed document
# ---------------------------------------------------------------------------


def _seed_settings() -> UserSettings:
    return UserSettings(
        company_name="SAM Pro للمنسوجات",
        logo_url="https://picsum.photos/seed/sampro/150/50",
        contact_info="هاتف: 123-456-7890 | بريد: info@sampro.com",
        manager_name="المدير العام",
    )


def _seed_users() -> list[User]:
    return [
        User(
            id="U001",
            name="المدير",
            username="admin",
            password="admin",
            permissions=Permissions.full(),
        )
    ]


# ---------------------------------------------------------------------------
# Root document
# ---------------------------------------------------------------------------


class AppData(DocumentModel):
    """The entire persisted state."""

    colors: list[Color] = Field(default_factory=list)
    models: list[ProductModel] = Field(default_factory=list)
    material_types: list[MaterialType] = Field(default_factory=list)
    barcodes: list[Barcode] = Field(default_factory=list)
    items: list[Item] = Field(default_factory=list)
    sizes: list[Size] = Field(default_factory=list)
    categories: list[Category] = Field(default_factory=list)
    seasons: list[Season] = Field(default_factory=list)
    daily_reports: list[DailyReport] = Field(default_factory=list)
    settings: UserSettings = Field(default_factory=_seed_settings)
    users: list[User] = Field(default_factory=_seed_users)

    def records(self, collection: Collection) -> list[Any]:
        return getattr(self, collection.field_name)

    def with_records(self, collection: Collection, records: list[Any]) -> AppData:
        """Return a new document with *collection* replaced by *records*."""
        return self.model_copy(update={collection.field_name: records})

    def to_document(self) -> dict[str, Any]:
        """Plain JSON-ready dict with the on-disk camelCase keys."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def seed_document() -> AppData:
    """First-run document."""
    return AppData(
        colors=[Color(id="C001", name="أحمر"), Color(id="C002", name="أزرق")],
        models=[ProductModel(id="M001", name="موديل صيفي 2024")],
        material_types=[MaterialType(id="MT001", name="قطن")],
        barcodes=[Barcode(id="B001", name="صنف أ", model_id="M001")],
        items=[Item(id="I001", name="صنف جينز", type="دينيم")],
        sizes=[Size(id="S001", name="Medium"), Size(id="S002", name="Large")],
        categories=[Category(id="CAT001", name="رجالي"), Category(id="CAT002", name="نسائي")],
        seasons=[Season(id="SE001", name="صيف 2024"), Season(id="SE002", name="شتاء 2025")],
        daily_reports=[],
        settings=_seed_settings(),
        users=_seed_users(),
    )


# ---------------------------------------------------------------------------
# Collections
# ---------------------------------------------------------------------------


class Collection(StrEnum):
    """Every top-level array of :class:`AppData`, by its on-disk key."""

    COLORS = "colors"
    MODELS = "models"
    MATERIAL_TYPES = "materialTypes"
    BARCODES = "barcodes"
    ITEMS = "items"
    SIZES = "sizes"
    CATEGORIES = "categories"
    SEASONS = "seasons"
    DAILY_REPORTS = "dailyReports"
    USERS = "users"

    @property
    def field_name(self) -> str:
        return _FIELD_NAMES[self]

    @property
    def record_type(self) -> type[DocumentModel]:
        return _RECORD_TYPES[self]

    @property
    def is_master(self) -> bool:
        return self in MASTER_PREFIXES


_FIELD_NAMES: dict[Collection, str] = {
    Collection.COLORS: "colors",
    Collection.MODELS: "models",
    Collection.MATERIAL_TYPES: "material_types",
    Collection.BARCODES: "barcodes",
    Collection.ITEMS: "items",
    Collection.SIZES: "sizes",
    Collection.CATEGORIES: "categories",
    Collection.SEASONS: "seasons",
    Collection.DAILY_REPORTS: "daily_reports",
    Collection.USERS: "users",
}

_RECORD_TYPES: dict[Collection, type[DocumentModel]] = {
    Collection.COLORS: Color,
    Collection.MODELS: ProductModel,
    Collection.MATERIAL_TYPES: MaterialType,
    Collection.BARCODES: Barcode,
    Collection.ITEMS: Item,
    Collection.SIZES: Size,
    Collection.CATEGORIES: Category,
    Collection.SEASONS: Season,
    Collection.DAILY_REPORTS: DailyReport,
    Collection.USERS: User,
}

# Master collection → fixed id prefix
MASTER_PREFIXES: dict[Collection, str] = {
    Collection.COLORS: "C",
    Collection.MODELS: "M",
    Collection.MATERIAL_TYPES: "MT",
    Collection.BARCODES: "B",
    Collection.ITEMS: "I",
    Collection.SIZES: "S",
    Collection.CATEGORIES: "CAT",
    Collection.SEASONS: "SE",
}

# Daily-report foreign key → master collection it points into
REPORT_FOREIGN_KEYS: dict[str, Collection] = {
    "item_id": Collection.ITEMS,
    "color_id": Collection.COLORS,
    "model_id": Collection.MODELS,
    "barcode_id": Collection.BARCODES,
    "size_id": Collection.SIZES,
    "category_id": Collection.CATEGORIES,
    "season_id": Collection.SEASONS,
}
