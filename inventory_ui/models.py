"""
inventory_ui/models.py

Pydantic models for the payloads the inventory API returns, plus the plain
form drafts used by the add/edit rows.

Field names follow the API's camelCase through aliases; Python code uses the
snake_case attribute names.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Role(str, Enum):
    STAFF = "staff"
    PROPERTY_CUSTODIAN = "property_custodian"
    ADMIN = "admin"
    MASTER_ADMIN = "master_admin"
    DEVELOPER = "developer"


class Category(str, Enum):
    ANNEX_A = "Annex A"
    ANNEX_B = "Annex B"
    ANNEX_C = "Annex C"


ReviewStatus = Literal["pending", "approved", "denied"]


class ApiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class User(ApiModel):
    id: int
    name: str
    email: str
    role: Role
    department: Optional[str] = None


class Property(ApiModel):
    """
    Core property record.

    Invariant: a pending reassignment always displaces an existing holder, so
    reassignment_status == "pending" requires assigned_to.
    """
    id: int
    property_no: str = Field(alias="propertyNo")
    description: str = ""
    quantity: Optional[int] = None
    value: Optional[float] = None
    serial_no: Optional[str] = Field(default=None, alias="serialNo")
    category: Optional[Category] = None
    qr_code: Optional[str] = Field(default=None, alias="qrCode")
    assigned_to: Optional[str] = Field(default=None, alias="assignedTo")
    assigned_department: Optional[str] = Field(default=None, alias="assignedDepartment")
    location_detail: Optional[str] = None
    reassignment_status: Optional[Literal["pending"]] = Field(default=None, alias="reassignmentStatus")
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    updated_at: Optional[str] = Field(default=None, alias="updatedAt")

    @field_validator("category", mode="before")
    @classmethod
    def blank_category(cls, v):
        if v == "":
            return None
        return v

    @field_validator("reassignment_status", mode="before")
    @classmethod
    def only_pending_matters(cls, v):
        # resolved requests come back as "approved"/"denied" or null
        return v if v == "pending" else None

    @model_validator(mode="after")
    def pending_requires_holder(self):
        if self.reassignment_status == "pending" and not self.assigned_to:
            raise ValueError("a pending reassignment requires an assigned holder")
        return self

    @property
    def is_assigned(self) -> bool:
        return bool(self.assigned_to)

    @property
    def has_pending_reassignment(self) -> bool:
        return self.reassignment_status == "pending"


class PropertyDetails(ApiModel):
    article: Optional[str] = None
    old_property_no: Optional[str] = Field(default=None, alias="oldPropertyNo")
    unit_of_measure: Optional[str] = Field(default=None, alias="unitOfMeasure")
    acquisition_date: Optional[str] = Field(default=None, alias="acquisitionDate")
    condition: Optional[str] = None
    remarks: Optional[str] = None
    pup_branch: Optional[str] = Field(default=None, alias="pupBranch")
    asset_type: Optional[str] = Field(default=None, alias="assetType")
    fund_cluster: Optional[str] = Field(default=None, alias="fundCluster")
    po_no: Optional[str] = Field(default=None, alias="poNo")
    invoice_date: Optional[str] = Field(default=None, alias="invoiceDate")
    invoice_no: Optional[str] = Field(default=None, alias="invoiceNo")


class PropertyWithDetails(Property):
    details: PropertyDetails = Field(default_factory=PropertyDetails)

    @field_validator("details", mode="before")
    @classmethod
    def null_details(cls, v):
        return v if v is not None else {}


class PageMeta(ApiModel):
    page: int = 1
    page_size: int = Field(default=0, alias="pageSize")
    page_count: int = Field(default=1, alias="pageCount")
    total_count: int = Field(default=0, alias="totalCount")


class ReassignmentRequest(ApiModel):
    request_id: int = Field(alias="requestId")
    property: Property
    from_staff: User = Field(alias="fromStaff")
    to_staff: User = Field(alias="toStaff")
    requested_by: User = Field(alias="requestedBy")
    status: ReviewStatus = "pending"
    created_at: Optional[str] = Field(default=None, alias="createdAt")


# ----------------------------------------------------------------------
# Dashboard payloads
# ----------------------------------------------------------------------

class RecentActivity(ApiModel):
    type: str
    description: str
    user_name: Optional[str] = Field(default=None, alias="userName")
    timestamp: Optional[str] = None


class DepartmentCount(ApiModel):
    department: Optional[str] = None
    count: int = 0


class CategoryCount(ApiModel):
    category: Optional[str] = None
    count: int = 0


class AdminStats(ApiModel):
    total_properties: int = Field(default=0, alias="totalProperties")
    total_asset_value: float = Field(default=0.0, alias="totalAssetValue")
    total_users: int = Field(default=0, alias="totalUsers")
    pending_approvals: int = Field(default=0, alias="pendingApprovals")
    properties_by_department: List[DepartmentCount] = Field(default_factory=list, alias="propertiesByDepartment")
    assets_by_category: List[CategoryCount] = Field(default_factory=list, alias="assetsByCategory")
    recent_activity: List[RecentActivity] = Field(default_factory=list, alias="recentActivity")


class RecentProperty(ApiModel):
    id: int
    property_no: str = Field(alias="propertyNo")
    description: str = ""
    delegated_to: Optional[str] = Field(default=None, alias="delegatedTo")
    last_updated: Optional[str] = Field(default=None, alias="lastUpdated")


class CustodianStats(ApiModel):
    properties_in_department: int = Field(default=0, alias="propertiesInDepartment")
    value_of_assets: float = Field(default=0.0, alias="valueOfAssets")
    staff_in_department: int = Field(default=0, alias="staffInDepartment")
    recent_properties: List[RecentProperty] = Field(default_factory=list, alias="recentProperties")


class AssignedItem(ApiModel):
    id: int
    property_no: str = Field(alias="propertyNo")
    description: str = ""
    condition: Optional[str] = None
    date_assigned: Optional[str] = Field(default=None, alias="dateAssigned")


class StaffStats(ApiModel):
    assigned_items_count: int = Field(default=0, alias="assignedItemsCount")
    assigned_items: List[AssignedItem] = Field(default_factory=list, alias="assignedItems")


# ----------------------------------------------------------------------
# Form drafts
# ----------------------------------------------------------------------

DRAFT_LABELS = {
    "property_no": "Property No.",
    "description": "Description",
    "quantity": "Quantity",
    "value": "Value",
    "serial_no": "Serial No.",
}


@dataclass(frozen=True)
class PropertyDraft:
    """Raw text values typed into the add/edit row."""
    property_no: str = ""
    description: str = ""
    quantity: str = ""
    value: str = ""
    serial_no: str = ""
    category: str = ""

    @classmethod
    def from_property(cls, prop: Property) -> "PropertyDraft":
        return cls(
            property_no=prop.property_no,
            description=prop.description or "",
            quantity="" if prop.quantity is None else str(prop.quantity),
            value="" if prop.value is None else _format_number(prop.value),
            serial_no=prop.serial_no or "",
            category=prop.category.value if prop.category else "",
        )

    def with_field(self, name: str, value: str) -> "PropertyDraft":
        if name not in {f.name for f in fields(self)}:
            raise KeyError(f"Unknown draft field: {name}")
        return replace(self, **{name: value})

    def missing_fields(self) -> List[str]:
        """Labels of required fields left blank."""
        return [label for name, label in DRAFT_LABELS.items() if not getattr(self, name).strip()]

    def to_payload(self) -> Dict[str, Any]:
        """
        Convert to the API's `property` body.

        Raises:
            ValueError: If quantity/value are not numbers or category is unknown
        """
        try:
            quantity = int(self.quantity.strip())
        except ValueError:
            raise ValueError("Quantity must be a whole number.")
        try:
            value = float(self.value.strip().replace(",", ""))
        except ValueError:
            raise ValueError("Value must be a number.")
        if quantity < 0 or value < 0:
            raise ValueError("Quantity and value cannot be negative.")

        payload: Dict[str, Any] = {
            "propertyNo": self.property_no.strip(),
            "description": self.description.strip(),
            "quantity": quantity,
            "value": value,
            "serialNo": self.serial_no.strip(),
        }
        if self.category:
            payload["category"] = Category(self.category).value
        return payload


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)
