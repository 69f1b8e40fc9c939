"""Pytest configuration and fixtures."""

import json
import os
from pathlib import Path

import pytest

from storymeta.config import reset_settings
from storymeta.extraction import Capabilities
from storymeta.models import Catalog, Provenance, StoryDocs, StoryRecord

BUTTON_STORIES = """\
import { Button } from './Button';

export default {
  title: "Components/Button",
  component: Button,
  argTypes: { variant: { control: { type: "select" } } },
};

export const Primary = {};
Primary.args = { variant: "primary", disabled: false };

export const Clickable = {};
Clickable.args = { label: "Click me", onClick: () => {} };
"""

CARD_STORIES_CSF3 = """\
import type { Meta, StoryObj } from '@storybook/react';
import { Card } from './Card';

const meta = {
  title: 'Layout/Card',
  component: Card,
  tags: ['autodocs'],
  parameters: { docs: { description: { component: 'A content card.' } } },
} satisfies Meta<typeof Card>;

export default meta;
type Story = StoryObj<typeof meta>;

export const Elevated: Story = {
  name: 'With shadow',
  args: { elevation: 2, title: 'Hello' },
};
"""

BROKEN_STORIES = """\
export default { title: "Broken/Thing" ;
export const Nope = {
"""


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Isolate tests from STORYBOOK_* variables and the settings singleton."""
    for name in list(os.environ):
        if name.startswith("STORYBOOK_"):
            monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def temp_dir(tmp_path):
    """Provide a temporary directory for test files."""
    return tmp_path


def write_file(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def story_project(tmp_path):
    """A project root with a src/ tree holding story files."""
    write_file(tmp_path / "src" / "components" / "Button.stories.tsx", BUTTON_STORIES)
    write_file(tmp_path / "src" / "layout" / "Card.stories.tsx", CARD_STORIES_CSF3)
    return tmp_path


@pytest.fixture
def built_index(tmp_path):
    """A built Storybook directory with an index.json."""
    index = {
        "v": 5,
        "entries": {
            "components-button--primary": {
                "id": "components-button--primary",
                "title": "Components/Button",
                "name": "Primary",
                "importPath": "./src/components/Button.stories.tsx",
                "type": "story",
                "tags": ["dev", "test"],
            },
            "components-button--docs": {
                "id": "components-button--docs",
                "title": "Components/Button",
                "name": "Docs",
                "importPath": "./src/components/Button.stories.tsx",
                "type": "docs",
                "tags": ["autodocs"],
            },
        },
    }
    write_file(tmp_path / "storybook-static" / "index.json", json.dumps(index))
    return tmp_path


@pytest.fixture
def no_capabilities():
    return Capabilities(source_parser=False, browser=False)


@pytest.fixture
def parser_only():
    return Capabilities(source_parser=True, browser=False)


@pytest.fixture
def sample_catalog():
    """A small catalog covering two components."""
    catalog = Catalog(extracted_from=Provenance.SOURCE_FILES)
    catalog.add(
        StoryRecord(
            id="components-button--primary",
            title="Components/Button",
            name="Primary",
            import_path="./src/components/Button.stories.tsx",
            tags=["autodocs", "stable"],
            args={"variant": "primary", "disabled": False, "size": 2},
            arg_types={"variant": {"control": {"type": "select"}}},
            parameters={"fileName": "./src/components/Button.stories.tsx"},
            docs=StoryDocs(description="Primary button", source_code="export const Primary"),
            source="export const Primary",
            component="Button",
        )
    )
    catalog.add(
        StoryRecord(
            id="components-button--secondary",
            title="Components/Button",
            name="Secondary",
            import_path="./src/components/Button.stories.tsx",
            tags=["autodocs", "beta"],
            args={"variant": "secondary", "onClick": "[Function]"},
            arg_types={"onClick": {"action": "clicked"}},
            component="Button",
        )
    )
    catalog.add(
        StoryRecord(
            id="layout-card--elevated",
            title="Layout/Card",
            name="With shadow",
            import_path="./src/layout/Card.stories.tsx",
            tags=["autodocs"],
            args={"elevation": 2},
        )
    )
    return catalog


@pytest.fixture
def button_source():
    """CSF2 Button story file text."""
    return BUTTON_STORIES


@pytest.fixture
def card_source():
    """CSF3 Card story file text."""
    return CARD_STORIES_CSF3


@pytest.fixture
def broken_source():
    """Story file text with a syntax error."""
    return BROKEN_STORIES
