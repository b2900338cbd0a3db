"""Workflow, project and form-schema Pydantic schemas."""
from enum import Enum
from typing import Any, Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator


class FieldType(str, Enum):
    """Input kinds a form-schema field descriptor can declare"""
    TEXT = "text"
    TEXTAREA = "textarea"
    SELECT = "select"
    URL = "url"


class WorkflowSummary(BaseModel):
    """Schema for an entry in the workflow list."""
    workflow_id: int = Field(validation_alias=AliasChoices("workflowId", "WorkflowId", "id", "Id"))
    name: str = Field(default="", validation_alias=AliasChoices("name", "Name"))
    description: Optional[str] = Field(default=None, validation_alias=AliasChoices("description", "Description"))

    model_config = ConfigDict(populate_by_name=True)


class ProjectSummary(BaseModel):
    """Schema for a project assigned to the current user."""
    project_id: int = Field(validation_alias=AliasChoices("projectId", "ProjectId", "id", "Id"))
    project_name: str = Field(default="", validation_alias=AliasChoices("projectName", "ProjectName", "name", "Name"))

    model_config = ConfigDict(populate_by_name=True)


class FieldOption(BaseModel):
    """Schema for one choice of a select field."""
    value: str
    label: str

    @field_validator("value", "label", mode="before")
    @classmethod
    def _stringify(cls, v: Any) -> str:
        return "" if v is None else str(v)


class FieldDescriptor(BaseModel):
    """Schema for a single dynamic form field."""
    key: str = Field(validation_alias=AliasChoices("key", "Key"))
    label: str = Field(default="", validation_alias=AliasChoices("label", "Label"))
    type: FieldType = Field(default=FieldType.TEXT, validation_alias=AliasChoices("type", "Type"))
    required: bool = Field(default=False, validation_alias=AliasChoices("required", "Required"))
    options: Optional[list[FieldOption]] = Field(default=None, validation_alias=AliasChoices("options", "Options"))

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @field_validator("type", mode="before")
    @classmethod
    def _default_type(cls, v: Any) -> str:
        if isinstance(v, FieldType):
            return v.value
        # Unknown kinds render as plain text
        value = str(v or "").lower()
        return value if value in {t.value for t in FieldType} else FieldType.TEXT.value

    @field_validator("required", mode="before")
    @classmethod
    def _truthy(cls, v: Any) -> bool:
        return bool(v)

    @model_validator(mode="before")
    @classmethod
    def _label_from_key(cls, data: Any) -> Any:
        if isinstance(data, dict) and not (data.get("label") or data.get("Label")):
            data = {**data, "label": data.get("key", data.get("Key", ""))}
        return data


class FormSchema(BaseModel):
    """Ordered field descriptors attached to a workflow."""
    fields: list[FieldDescriptor] = Field(default_factory=list, validation_alias=AliasChoices("fields", "Fields"))

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_payload(cls, data: Any) -> "FormSchema":
        """Unwrap `{schema: {fields: [...]}}` responses; anything malformed yields an empty schema."""
        if not isinstance(data, dict):
            return cls()
        inner = data.get("schema", data.get("Schema", data))
        if not isinstance(inner, dict):
            return cls()
        return cls.model_validate(inner)

    def field(self, key: str) -> Optional[FieldDescriptor]:
        for f in self.fields:
            if f.key == key:
                return f
        return None

    def is_required(self, key: str) -> bool:
        f = self.field(key)
        return f is not None and f.required

    def keys(self) -> list[str]:
        return [f.key for f in self.fields]
