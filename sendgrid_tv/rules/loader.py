import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from sendgrid_tv.rules.models import Declarations

API_KEY_ENV = "SENDGRID_API_KEY"


def load_declarations(path: Path) -> Declarations:
    """
    Load and validate a declarations file.
    Raises FileNotFoundError if file missing.
    Raises ValueError if YAML or schema invalid.
    """
    if not path.exists():
        raise FileNotFoundError(f"Declarations file not found at: {path}")

    with open(path) as f:
        content = f.read()

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML syntax in declarations file: {e}") from e

    # An empty file declares nothing
    if data is None:
        data = {}

    try:
        return Declarations.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Declarations validation failed:\n{e}") from e


def resolve_api_key(declarations: Declarations) -> str:
    """API key from the file, else the environment. Raises ValueError if neither."""
    api_key = declarations.provider.api_key or os.environ.get(API_KEY_ENV, "")
    if not api_key:
        raise ValueError(f"No SendGrid API key: set provider.api_key or {API_KEY_ENV}")
    return api_key
