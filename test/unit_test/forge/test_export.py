"""Unit tests for the Markdown PRD export."""

from datetime import date

import pytest

from jalanea_forge.core.models.domain import ProjectState
from jalanea_forge.forge.export import export_filename, prd_markdown


@pytest.mark.parametrize(
    "title,expected",
    [
        ("My App!", "My-App-PRD.md"),
        ("  habit_tracker v2 ", "habit_tracker-v2-PRD.md"),
        ("???", "Untitled-Project-PRD.md"),
    ],
)
def test_export_filename(title, expected):
    assert export_filename(title) == expected


def test_prd_markdown_with_vision():
    state = ProjectState(title="Habit", synthesized_idea="Build habits.\n", prd_output="## Summary\nText\n")

    markdown = prd_markdown(state, today=date(2026, 1, 2))

    assert markdown.startswith("# Habit\n\n_Product Requirements Document, exported 2026-01-02_")
    assert "## Vision\n\nBuild habits.\n" in markdown
    assert markdown.endswith("## Summary\nText\n")


def test_prd_markdown_without_vision():
    markdown = prd_markdown(ProjectState(title="Habit", prd_output="Body"), today=date(2026, 1, 2))

    assert "## Vision" not in markdown
    assert "Body" in markdown
