from pathlib import Path

import pytest

from sendgrid_tv.adapters.memory_store import InMemoryTemplateStore
from sendgrid_tv.components.template_version import TemplateVersionDeclaration


@pytest.fixture
def store() -> InMemoryTemplateStore:
    return InMemoryTemplateStore()


@pytest.fixture
def html_file(tmp_path: Path) -> Path:
    path = tmp_path / "html.txt"
    path.write_text("Hello")
    return path


@pytest.fixture
def plain_file(tmp_path: Path) -> Path:
    path = tmp_path / "plain.txt"
    path.write_text("Hello")
    return path


@pytest.fixture
def declaration(html_file: Path, plain_file: Path) -> TemplateVersionDeclaration:
    return TemplateVersionDeclaration(
        template_id="d-template-1",
        name="Welcome",
        subject="Hello there",
        html_content_file=str(html_file),
        plain_content_file=str(plain_file),
    )
