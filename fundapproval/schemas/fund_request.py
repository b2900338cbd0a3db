"""Fund request Pydantic schemas.

Inbound models accept both camelCase and PascalCase keys so the rest of the
package only ever sees one shape. Outbound models dump camelCase.
"""
from typing import Any, Optional, Union
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


FieldValue = Union[str, list[str]]


class FieldEntry(BaseModel):
    """Schema for a single serialized dynamic field."""
    field_name: str = Field(validation_alias=AliasChoices("fieldName", "FieldName", "field_name"))
    field_value: Optional[FieldValue] = Field(
        default=None, validation_alias=AliasChoices("fieldValue", "FieldValue", "field_value")
    )

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    @field_validator("field_value", mode="before")
    @classmethod
    def _coerce_value(cls, v: Any) -> Any:
        if v is None or isinstance(v, (str, list)):
            return [str(x) for x in v] if isinstance(v, list) else v
        return str(v)


class AttachmentInfo(BaseModel):
    """Schema for an attachment already stored against a fund request."""
    id: int = Field(validation_alias=AliasChoices("id", "Id", "attachmentId", "AttachmentId"))
    file_name: str = Field(default="", validation_alias=AliasChoices("fileName", "FileName", "name", "Name"))
    url: Optional[str] = Field(default=None, validation_alias=AliasChoices("url", "Url", "downloadUrl", "DownloadUrl"))

    model_config = ConfigDict(populate_by_name=True)


class FundRequestRecord(BaseModel):
    """Canonical shape of a fund request as read back from the backend."""
    id: Optional[int] = Field(default=None, validation_alias=AliasChoices("id", "Id", "fundRequestId", "FundRequestId"))
    title: str = Field(default="", validation_alias=AliasChoices("requestTitle", "RequestTitle", "title", "Title"))
    description: str = Field(default="", validation_alias=AliasChoices("description", "Description"))
    amount: Optional[float] = Field(default=None, validation_alias=AliasChoices("amount", "Amount"))
    fields: list[FieldEntry] = Field(default_factory=list, validation_alias=AliasChoices("fields", "Fields"))
    workflow_id: Optional[int] = Field(default=None, validation_alias=AliasChoices("workflowId", "WorkflowId"))
    project_id: Optional[int] = Field(default=None, validation_alias=AliasChoices("projectId", "ProjectId"))
    attachments: Optional[list[AttachmentInfo]] = Field(
        default=None, validation_alias=AliasChoices("attachments", "Attachments")
    )

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("title", "description", mode="before")
    @classmethod
    def _none_to_blank(cls, v: Any) -> str:
        return "" if v is None else str(v)

    def field_value(self, name: str) -> Optional[FieldValue]:
        for entry in self.fields:
            if entry.field_name == name:
                return entry.field_value
        return None


class FundRequestResubmit(BaseModel):
    """Request body for updating/resubmitting an existing fund request."""
    title: str
    description: str = ""
    amount: Optional[float] = None
    fields: list[FieldEntry] = Field(default_factory=list)
    project_id: Optional[int] = None

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)


class FundRequestCreate(FundRequestResubmit):
    """Request body for creating a new fund request."""
    workflow_id: Optional[int] = None


class FundRequestCreated(BaseModel):
    """Response after creating a fund request."""
    id: Optional[int] = Field(default=None, validation_alias=AliasChoices("id", "Id", "fundRequestId", "FundRequestId"))

    model_config = ConfigDict(populate_by_name=True)
