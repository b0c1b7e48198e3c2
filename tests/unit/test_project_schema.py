"""Tests for project schema icon rules."""

import pytest
from pydantic import ValidationError

from blogdesk.schemas.project_schema import PRESET_ICONS, Project, ProjectUpsertRequest


class TestProjectIconRules:
    """Only the icon field matching icon_type survives."""

    def test_preset_drops_other_icons(self) -> None:
        project = Project(
            id="1",
            title="P",
            icon_type="preset",
            preset_icon="Globe",
            image_base64="data",
            custom_svg="<svg/>",
        )
        assert project.preset_icon == "Globe"
        assert project.image_base64 is None
        assert project.custom_svg is None

    def test_generated_keeps_svg(self) -> None:
        project = Project(
            id="1", title="P", icon_type="generated", custom_svg="<svg/>", preset_icon="Globe"
        )
        assert project.custom_svg == "<svg/>"
        assert project.preset_icon is None

    def test_auto_keeps_favicon(self) -> None:
        project = Project(
            id="1", title="P", image_base64="data", preset_icon="Globe", custom_svg="<svg/>"
        )
        assert project.image_base64 == "data"
        assert project.preset_icon is None
        assert project.custom_svg is None

    def test_preset_requires_name(self) -> None:
        with pytest.raises(ValidationError):
            Project(id="1", title="P", icon_type="preset")


class TestProjectUpsertRequest:
    def test_requires_url(self) -> None:
        with pytest.raises(ValidationError):
            ProjectUpsertRequest(title="P", url="")

    def test_generated_requires_svg(self) -> None:
        with pytest.raises(ValidationError):
            ProjectUpsertRequest(title="P", url="https://p.example", icon_type="generated")

    def test_valid_preset(self) -> None:
        request = ProjectUpsertRequest(
            title="P", url="https://p.example", icon_type="preset", preset_icon="Code"
        )
        assert request.preset_icon == "Code"


def test_preset_icons_are_unique() -> None:
    assert len(PRESET_ICONS) == len(set(PRESET_ICONS)) == 30
