"""
inventory_ui/details.py

Property detail page: the core Property record and its PropertyDetails
extension are one logical entity joined by property id, but the API stores and
patches them separately. Saving therefore sends two PATCH requests in parallel
and only reports success when both succeed.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Optional

try:
    from inventory_ui.api_client import ApiClient, ApiError, validate_payload
    from inventory_ui.config import IS_DEV
    from inventory_ui.models import PropertyWithDetails
    from inventory_ui.notices import NoticeBoard
    from inventory_ui.table_controller import conflict_or
except ModuleNotFoundError:
    from api_client import ApiClient, ApiError, validate_payload
    from config import IS_DEV
    from models import PropertyWithDetails
    from notices import NoticeBoard
    from table_controller import conflict_or


# (attribute, API key, label) in display order
CORE_FIELDS = [
    ("property_no", "propertyNo", "Property No."),
    ("description", "description", "Description"),
    ("quantity", "quantity", "Quantity"),
    ("value", "value", "Value"),
    ("serial_no", "serialNo", "Serial No."),
    ("location_detail", "location_detail", "Location"),
]

DETAIL_FIELDS = [
    ("article", "article", "Article"),
    ("old_property_no", "oldPropertyNo", "Old Property No."),
    ("unit_of_measure", "unitOfMeasure", "Unit of Measure"),
    ("acquisition_date", "acquisitionDate", "Acquisition Date"),
    ("condition", "condition", "Condition"),
    ("remarks", "remarks", "Remarks"),
    ("pup_branch", "pupBranch", "Branch"),
    ("asset_type", "assetType", "Asset Type"),
    ("fund_cluster", "fundCluster", "Fund Cluster"),
    ("po_no", "poNo", "PO No."),
    ("invoice_date", "invoiceDate", "Invoice Date"),
    ("invoice_no", "invoiceNo", "Invoice No."),
]

CONDITION_OPTIONS = ("Excellent", "Good", "Fair", "Poor", "Unserviceable")

SAVE_KEY = "details-save"


class PropertyDetailsEditor:
    def __init__(self, client: ApiClient, property_id: int, notices: Optional[NoticeBoard] = None):
        self.client = client
        self.property_id = property_id
        self.notices = notices if notices is not None else NoticeBoard()
        self.record: Optional[PropertyWithDetails] = None
        self.draft: Optional[Dict[str, Any]] = None
        self.error: Optional[str] = None
        self.saving = False

    @property
    def is_editing(self) -> bool:
        return self.draft is not None

    def load(self) -> bool:
        """
        Fetch the joined record. On failure the caller should send the user back
        to the listing with `self.error` as the notice.
        """
        try:
            body = self.client.request(f"/properties/{self.property_id}/details")
            raw = body.get("data") if isinstance(body, dict) else None
            if not isinstance(raw, dict):
                raise ApiError("Property not found.", status=404)
            self.record = validate_payload(PropertyWithDetails, raw)
        except ApiError as e:
            self.record = None
            self.error = "Failed to fetch property details. Please try again."
            if IS_DEV:
                print(f"[DETAILS] Load failed for property {self.property_id}: {type(e).__name__}")
            return False
        self.error = None
        return True

    def begin_edit(self) -> bool:
        if self.record is None:
            return False
        core = {attr: getattr(self.record, attr) for attr, _, _ in CORE_FIELDS}
        details = {attr: getattr(self.record.details, attr) for attr, _, _ in DETAIL_FIELDS}
        self.draft = {"core": core, "details": details}
        return True

    def set_field(self, name: str, value: Any, detail: bool = False) -> None:
        if self.draft is None:
            raise RuntimeError("Not editing")
        section = self.draft["details" if detail else "core"]
        if name not in section:
            raise KeyError(f"Unknown field: {name}")
        section[name] = value

    def cancel(self) -> None:
        self.draft = None

    def payloads(self) -> tuple[Dict[str, Any], Dict[str, Any]]:
        if self.draft is None:
            raise RuntimeError("Not editing")
        core = {key: self.draft["core"][attr] for attr, key, _ in CORE_FIELDS}
        details = {key: self.draft["details"][attr] for attr, key, _ in DETAIL_FIELDS}
        return core, details

    def save(self) -> bool:
        if self.draft is None or self.saving:
            return False
        core, details = self.payloads()
        if not str(core.get("propertyNo") or "").strip():
            self.notices.warning("Property No. is required.")
            return False

        self.saving = True
        try:
            with self.notices.track(SAVE_KEY, "Saving changes...", "Failed to save changes."):
                with ThreadPoolExecutor(max_workers=2) as pool:
                    core_future = pool.submit(
                        self.client.request, f"/properties/update/{self.property_id}", "PATCH", {"property": core}
                    )
                    details_future = pool.submit(
                        self.client.request, f"/properties/{self.property_id}/details", "PATCH", {"details": details}
                    )
                    errors = []
                    for future in (core_future, details_future):
                        try:
                            future.result()
                        except ApiError as e:
                            errors.append(e)
                if errors:
                    self.notices.error(SAVE_KEY, conflict_or(errors[0], "Failed to save changes."))
                    return False

                self.draft = None
                self.load()
                self.notices.success(SAVE_KEY, "Property details updated successfully!")
                return True
        finally:
            self.saving = False
