from pydantic import BaseModel, ConfigDict, Field

from sendgrid_tv.components.template_version import TemplateVersionDeclaration


class ProviderSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    api_key: str | None = None  # falls back to SENDGRID_API_KEY
    base_url: str = "https://api.sendgrid.com"
    timeout_seconds: float = Field(default=30.0, gt=0)


class TemplateVersionResource(BaseModel):
    # Content hashes are state-only; the declaration keeps its sentinel defaults
    model_config = ConfigDict(extra="forbid")

    template_id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    subject: str = Field(min_length=1)
    html_content_file: str = Field(min_length=1)
    plain_content_file: str = Field(min_length=1)
    active: bool = True

    def to_declaration(self) -> TemplateVersionDeclaration:
        return TemplateVersionDeclaration(**self.model_dump())


class Declarations(BaseModel):
    model_config = ConfigDict(extra="forbid")

    provider: ProviderSettings = Field(default_factory=ProviderSettings)
    resources: dict[str, TemplateVersionResource] = Field(default_factory=dict)

    def declarations(self) -> dict[str, TemplateVersionDeclaration]:
        return {name: res.to_declaration() for name, res in self.resources.items()}
