"""Page-related schemas."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

DEFAULT_TEMPLATE = "index.html"

# dirname() results that mean "template lives at the project root"
IGNORED_DIRS: frozenset[str] = frozenset({"", ".", "/"})


class TagDescriptor(BaseModel):
    """An extra markup tag handed back to the host for head/body injection."""

    model_config = ConfigDict(frozen=True)

    tag: str
    attrs: dict[str, str | bool] = Field(default_factory=dict)
    children: str | list[TagDescriptor] | None = None
    inject_to: Literal["head", "body", "head-prepend", "body-prepend"] = Field(
        default="head-prepend",
        validation_alias=AliasChoices("inject_to", "injectTo"),
    )


class InjectOptions(BaseModel):
    """Template variables, renderer options and extra tags for one page."""

    model_config = ConfigDict(frozen=True)

    data: dict[str, Any] = Field(default_factory=dict)
    render_options: dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("render_options", "ejs_options", "ejsOptions"),
    )
    tags: tuple[TagDescriptor, ...] = ()


class PageDescriptor(BaseModel):
    """One HTML page: where its template lives and what gets injected into it."""

    model_config = ConfigDict(frozen=True)

    filename: str = DEFAULT_TEMPLATE
    template: str = DEFAULT_TEMPLATE
    entry: str | None = None
    inject_options: InjectOptions = Field(
        default_factory=InjectOptions,
        validation_alias=AliasChoices("inject_options", "injectOptions"),
    )

    @field_validator("filename", "template", mode="before")
    @classmethod
    def _default_when_blank(cls, value: Any) -> Any:
        # Page records with an empty filename/template fall back to the default page.
        if value is None or value == "":
            return DEFAULT_TEMPLATE
        return value


class PluginOptions(BaseModel):
    """User-facing plugin options."""

    model_config = ConfigDict(frozen=True)

    entry: str | None = None
    template: str = DEFAULT_TEMPLATE
    pages: tuple[PageDescriptor, ...] = ()
    inject: InjectOptions = Field(default_factory=InjectOptions)
    verbose: bool = False

    @field_validator("pages")
    @classmethod
    def _unique_filenames(cls, pages: tuple[PageDescriptor, ...]) -> tuple[PageDescriptor, ...]:
        seen: set[str] = set()
        for page in pages:
            if page.filename in seen:
                msg = f"Duplicate page filename: {page.filename}"
                raise ValueError(msg)
            seen.add(page.filename)
        return pages


class TransformResult(BaseModel):
    """Transformed HTML plus the tags the host should merge into the document."""

    html: str
    tags: tuple[TagDescriptor, ...] = ()
