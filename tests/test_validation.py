from __future__ import annotations

import pytest
from pydantic import ValidationError

from pyktc.models.washing_bay import WashingBayEntryForm
from pyktc.notify import RecordingNotificationSink
from pyktc.validation import errors_from_pydantic, missing_fields, password_feedback


def test_strong_password_has_no_feedback() -> None:
    assert password_feedback("Str0ng!Pass") == []


@pytest.mark.parametrize(
    ("password", "fragment"),
    [
        ("Sh0rt!", "at least 8"),
        ("ALLUPPER1!", "lowercase"),
        ("alllower1!", "uppercase"),
        ("NoDigits!!", "numbers"),
        ("NoSpecial1", "special"),
    ],
)
def test_password_feedback_names_unmet_rule(password: str, fragment: str) -> None:
    feedback = password_feedback(password)

    assert len(feedback) == 1
    assert fragment in feedback[0]


def test_missing_fields_treats_blank_strings_as_missing() -> None:
    form = WashingBayEntryForm(date="  ")

    assert missing_fields(form, "date", "notes") == {
        "date": "Date is required",
        "notes": "Notes is required",
    }


def test_errors_from_pydantic_flattens_locations() -> None:
    with pytest.raises(ValidationError) as excinfo:
        WashingBayEntryForm.model_validate({"noOfVehicles": "lots"})

    assert list(errors_from_pydantic(excinfo.value)) == ["noOfVehicles"]


def test_recording_sink_filters_by_level() -> None:
    sink = RecordingNotificationSink()
    sink.success("Station created successfully!")
    sink.error("Failed to fetch stations data", "Using offline data. Please check your connection.")

    assert sink.titles() == ["Station created successfully!", "Failed to fetch stations data"]
    assert sink.titles("error") == ["Failed to fetch stations data"]
    sink.clear()
    assert sink.notifications == []
