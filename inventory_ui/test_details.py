# inventory_ui/test_details.py
# Unit tests for the property details editor

import sys
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from inventory_ui.details import SAVE_KEY, PropertyDetailsEditor
from inventory_ui.notices import NoticeBoard
from inventory_ui.table_controller import DUPLICATE_PROPERTY_NO_MESSAGE
from conftest import fail, ok, property_json


def details_body(description="Laptop", condition="Good"):
    return ok({
        "success": True,
        "data": {
            **property_json(3, description=description, location_detail="Room 4"),
            "details": {"article": "Computer", "condition": condition, "unitOfMeasure": "unit"},
        },
    })


@pytest.fixture
def editor(http, client):
    http.on("GET", "/properties/3/details", details_body())
    ed = PropertyDetailsEditor(client, 3, NoticeBoard())
    assert ed.load()
    return ed


def test_load_joins_core_and_details(editor):
    assert editor.record.property_no == "PN-003"
    assert editor.record.details.article == "Computer"
    assert editor.record.details.unit_of_measure == "unit"
    assert not editor.is_editing


def test_load_failure_sets_redirect_message(http, client):
    http.on("GET", "/properties/9/details", fail(404, "Property not found"))
    ed = PropertyDetailsEditor(client, 9)

    assert not ed.load()
    assert ed.record is None
    assert ed.error == "Failed to fetch property details. Please try again."


def test_load_without_data_is_a_failure(http, client):
    http.on("GET", "/properties/9/details", ok({"success": True, "data": None}))
    ed = PropertyDetailsEditor(client, 9)

    assert not ed.load()


def test_malformed_record_is_a_failure(http, client):
    http.on("GET", "/properties/9/details", ok({"data": property_json(9, category="Annex D")}))
    ed = PropertyDetailsEditor(client, 9)

    assert not ed.load()
    assert ed.record is None


def test_save_sends_both_patches(http, client, editor):
    http.on("PATCH", "/properties/update/3", ok({"success": True}))
    http.on("PATCH", "/properties/3/details", ok({"success": True}))
    http.routes[("GET", "/properties/3/details")] = [details_body(description="Gaming laptop", condition="Fair")]
    editor.begin_edit()
    editor.set_field("description", "Gaming laptop")
    editor.set_field("condition", "Fair", detail=True)

    assert editor.save()

    core = http.calls_to("PATCH", "/properties/update/3")[0].json["property"]
    details = http.calls_to("PATCH", "/properties/3/details")[0].json["details"]
    assert core["description"] == "Gaming laptop"
    assert core["propertyNo"] == "PN-003"
    assert core["location_detail"] == "Room 4"
    assert details["condition"] == "Fair"
    assert details["unitOfMeasure"] == "unit"
    assert editor.record.details.condition == "Fair"
    assert not editor.is_editing
    assert editor.notices.get(SAVE_KEY).message == "Property details updated successfully!"


def test_one_failed_patch_fails_the_save(http, client, editor):
    http.on("PATCH", "/properties/update/3", ok({"success": True}))
    http.on("PATCH", "/properties/3/details", fail(400, "Invalid acquisition date"))
    editor.begin_edit()

    assert not editor.save()

    assert editor.is_editing
    assert editor.notices.get(SAVE_KEY).kind == "error"
    assert editor.notices.get(SAVE_KEY).message == "Invalid acquisition date"
    assert not editor.saving


def test_duplicate_property_number_uses_conflict_message(http, client, editor):
    http.on("PATCH", "/properties/update/3", fail(409))
    http.on("PATCH", "/properties/3/details", ok({"success": True}))
    editor.begin_edit()
    editor.set_field("property_no", "PN-001")

    assert not editor.save()

    assert editor.is_editing
    assert editor.notices.get(SAVE_KEY).message == DUPLICATE_PROPERTY_NO_MESSAGE


def test_property_number_required(http, client, editor):
    editor.begin_edit()
    editor.set_field("property_no", "  ")

    assert not editor.save()
    assert http.calls_to("PATCH", "/properties/update/3") == []


def test_cancel_discards_draft(editor):
    editor.begin_edit()
    editor.set_field("remarks", "scratched", detail=True)

    editor.cancel()

    assert not editor.is_editing
    assert editor.record.details.remarks is None


def test_unknown_field_rejected(editor):
    editor.begin_edit()
    with pytest.raises(KeyError):
        editor.set_field("colour", "red")


def test_set_field_requires_edit_mode(editor):
    with pytest.raises(RuntimeError):
        editor.set_field("description", "x")
