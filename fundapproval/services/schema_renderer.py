"""
Dynamic schema renderer.

Turns a FormSchema plus current values into an ordered list of bound control
descriptors. Reserved keys are drawn by fixed slots elsewhere and are skipped.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional

from fundapproval.schemas.catalog import FieldDescriptor, FieldOption, FieldType, FormSchema


# Keys rendered by fixed slots, never by the dynamic list
RESERVED_KEYS = ("projectId", "urgency", "additionalInfo")

HYPERLINK_URL = "hyperlinkUrl"
HYPERLINK_TITLE = "hyperlinkTitle"
LEGAL_ENTITY = "legalEntity"

LEGAL_ENTITY_FALLBACK = [
    FieldOption(value="entity1", label="Entity 1"),
    FieldOption(value="entity2", label="Entity 2"),
    FieldOption(value="entity3", label="Entity 3"),
]

TEXTAREA_ROWS = 3

# Helper text shown when there is nothing to report; keeps row heights stable
RESERVED_HELPER_TEXT = " "


class ControlKind(str, Enum):
    TEXT = "text"
    TEXTAREA = "textarea"
    SELECT = "select"
    URL = "url"
    URL_LIST = "url_list"


@dataclass
class UrlRow:
    index: int
    value: str
    helper_text: str = RESERVED_HELPER_TEXT
    error: bool = False
    can_remove: bool = False


@dataclass
class Control:
    """One rendered input bound to FormValues[key]."""
    key: str
    label: str
    kind: ControlKind
    value: Any = ""
    options: list[FieldOption] = field(default_factory=list)
    helper_text: str = RESERVED_HELPER_TEXT
    error: bool = False
    disabled: bool = False
    max_rows: Optional[int] = None
    rows: list[UrlRow] = field(default_factory=list)
    can_add: bool = False


# ----------------------------------------------------------------------
# Repeatable URL field
# ----------------------------------------------------------------------

def coerce_url_list(value: Any) -> list[str]:
    """Always at least one row: lists are copied, a bare string is wrapped, anything else is one empty row."""
    if isinstance(value, (list, tuple)):
        urls = ["" if v is None else str(v) for v in value]
        return urls or [""]
    if value:
        return [str(value)]
    return [""]


def add_url_row(value: Any) -> list[str]:
    return coerce_url_list(value) + [""]


def remove_url_row(value: Any, index: int) -> list[str]:
    """Drop one row. The last remaining row cannot be removed."""
    urls = coerce_url_list(value)
    if len(urls) <= 1 or not 0 <= index < len(urls):
        return urls
    return [u for i, u in enumerate(urls) if i != index]


def update_url_row(value: Any, index: int, text: str) -> list[str]:
    urls = coerce_url_list(value)
    if 0 <= index < len(urls):
        urls[index] = text
    return urls


# ----------------------------------------------------------------------
# Rendering
# ----------------------------------------------------------------------

def display_label(descriptor: FieldDescriptor) -> str:
    return f"{descriptor.label} *" if descriptor.required else descriptor.label


def helper_text(key: str, errors: Mapping[str, str], touched: Any) -> tuple[str, bool]:
    """Error text is shown only for touched fields; otherwise the slot stays reserved."""
    if key in touched and errors.get(key):
        return errors[key], True
    return RESERVED_HELPER_TEXT, False


def render_control(
    descriptor: FieldDescriptor,
    values: Mapping[str, Any],
    errors: Mapping[str, str],
    touched: Any,
    disabled: bool = False,
) -> Control:
    key = descriptor.key
    text, has_error = helper_text(key, errors, touched)

    if key == HYPERLINK_URL:
        urls = coerce_url_list(values.get(key))
        rows = [
            UrlRow(
                index=i,
                value=url,
                # Error is reported once, on the first row
                helper_text=text if i == 0 else RESERVED_HELPER_TEXT,
                error=has_error,
                can_remove=not disabled and len(urls) > 1,
            )
            for i, url in enumerate(urls)
        ]
        return Control(
            key=key,
            label=display_label(descriptor),
            kind=ControlKind.URL_LIST,
            value=urls,
            error=has_error,
            disabled=disabled,
            rows=rows,
            can_add=not disabled,
        )

    control = Control(
        key=key,
        label=display_label(descriptor),
        kind=ControlKind.TEXT,
        value=values.get(key) if values.get(key) is not None else "",
        helper_text=text,
        error=has_error,
        disabled=disabled,
    )

    if key == HYPERLINK_TITLE:
        return control

    if key == LEGAL_ENTITY:
        control.kind = ControlKind.SELECT
        control.options = list(descriptor.options or LEGAL_ENTITY_FALLBACK)
    elif descriptor.type == FieldType.SELECT:
        control.kind = ControlKind.SELECT
        control.options = list(descriptor.options or [])
    elif descriptor.type == FieldType.TEXTAREA:
        control.kind = ControlKind.TEXTAREA
        control.max_rows = TEXTAREA_ROWS
    elif descriptor.type == FieldType.URL:
        control.kind = ControlKind.URL
    return control


def render_controls(
    schema: Optional[FormSchema],
    values: Mapping[str, Any],
    errors: Optional[Mapping[str, str]] = None,
    touched: Any = (),
    disabled: bool = False,
) -> list[Control]:
    """One control per non-reserved descriptor, in schema order."""
    if schema is None:
        return []
    errors = errors or {}
    return [
        render_control(f, values, errors, touched, disabled)
        for f in schema.fields
        if f.key not in RESERVED_KEYS
    ]
