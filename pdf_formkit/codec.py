from __future__ import annotations
"""Conversion between descriptor text and the on-disk value of each field kind.

decode_value(graph, node, kind) -> str
write_value(graph, node, kind, value) -> str   (stored text; raises on failure)
"""
from typing import Any, List, Optional
import logging

from pypdf.generic import ArrayObject, DictionaryObject, NameObject, NumberObject, TextStringObject

from config import (
    CHECKBOX_TRUE_TOKENS,
    CHECKBOX_ON_TOKEN,
    CHECKBOX_OFF_TOKEN,
    CHECKBOX_READ_CHECKED,
    CHECKBOX_READ_UNCHECKED,
    READ_ONLY_FLAG,
)
from .classify import choice_options, field_flags
from .graph import FormGraph, UnresolvedReferenceError, as_text
from .schema import FieldDescriptor, FieldKind

logger = logging.getLogger(__name__)

_V = NameObject("/V")
_DV = NameObject("/DV")
_I = NameObject("/I")
_AS = NameObject("/AS")
_AP = NameObject("/AP")


# -- read ------------------------------------------------------------------

def _raw_value(graph: FormGraph, node: Any) -> Any:
    v = graph.get(node, "/V")
    if isinstance(v, ArrayObject):
        if not v:
            return None
        try:
            return graph.resolve(v[0])
        except UnresolvedReferenceError:
            return None
    return v


def decode_value(graph: FormGraph, node: Any, kind: FieldKind) -> str:
    v = _raw_value(graph, node)
    if v is None:
        return ""
    text = as_text(v)
    if text is None:
        text = str(v)
    if kind is FieldKind.CHECKBOX:
        if not text:
            return ""
        return CHECKBOX_READ_UNCHECKED if text.lstrip("/") == "Off" else CHECKBOX_READ_CHECKED
    if kind is FieldKind.RADIO_BUTTON:
        return text.lstrip("/")
    return text


# -- appearance ------------------------------------------------------------

def _holders(graph: FormGraph, node: DictionaryObject) -> List[DictionaryObject]:
    return [node] + graph.widgets(node)


def clear_appearance(graph: FormGraph, node: DictionaryObject):
    """Drop /AP from the field and its widgets so viewers regenerate them."""
    try:
        for holder in _holders(graph, node):
            if _AP in holder:
                del holder[_AP]
    except Exception as e:
        logger.warning("Error clearing appearance: %s", e)


def on_state(graph: FormGraph, holder: DictionaryObject) -> Optional[str]:
    """First non-/Off appearance state name of a button widget."""
    normal = graph.get(graph.get(holder, "/AP"), "/N")
    if isinstance(normal, DictionaryObject):
        for key in normal.keys():
            if key != CHECKBOX_OFF_TOKEN:
                return str(key)
    return None


def _is_widget(holder: DictionaryObject) -> bool:
    return _AS in holder or holder.get("/Subtype") == "/Widget"


# -- write -----------------------------------------------------------------

def _set_text(graph: FormGraph, node: DictionaryObject, value: str) -> str:
    node[_V] = TextStringObject(value)
    if "/Ff" in node:
        flags = field_flags(graph, node)
        if flags & READ_ONLY_FLAG:
            node[NameObject("/Ff")] = NumberObject(flags & ~READ_ONLY_FLAG)
    return value


def _set_checkbox(graph: FormGraph, node: DictionaryObject, value: str) -> str:
    checked = value.strip().lower() in CHECKBOX_TRUE_TOKENS
    holders = _holders(graph, node)
    token = CHECKBOX_OFF_TOKEN
    if checked:
        token = next((s for s in (on_state(graph, h) for h in holders) if s), CHECKBOX_ON_TOKEN)
    node[_V] = NameObject(token)
    for holder in holders:
        if holder is not node or _is_widget(holder):
            holder[_AS] = NameObject(token)
    return CHECKBOX_READ_CHECKED if checked else CHECKBOX_READ_UNCHECKED


def _set_choice(graph: FormGraph, node: DictionaryObject, value: str) -> str:
    text = (value or "").strip()
    if not text:
        for key in (_V, _DV, _I):
            if key in node:
                del node[key]
        return ""

    wanted = text.casefold()
    for index, (export, display) in enumerate(choice_options(graph, node)):
        if (export and export.casefold() == wanted) or (display and display.casefold() == wanted):
            selected = export or display or text
            node[_V] = TextStringObject(selected)
            node[_DV] = TextStringObject(selected)
            node[_I] = ArrayObject([NumberObject(index)])
            return selected

    node[_V] = TextStringObject(text)
    node[_DV] = TextStringObject(text)
    if _I in node:
        del node[_I]
    return text


def _set_radio(graph: FormGraph, node: DictionaryObject, value: str) -> str:
    text = value.strip()
    widgets = graph.widgets(node) or ([node] if _is_widget(node) else [])
    if not text:
        off = NameObject(CHECKBOX_OFF_TOKEN)
        node[_V] = off
        for widget in widgets:
            widget[_AS] = off
        return CHECKBOX_READ_UNCHECKED
    try:
        index: Optional[int] = int(text)
    except ValueError:
        index = None

    if index is None:
        token = NameObject(text if text.startswith("/") else "/" + text)
        for widget in widgets:
            widget[_AS] = token if on_state(graph, widget) == token else NameObject(CHECKBOX_OFF_TOKEN)
        node[_V] = token
        return str(token).lstrip("/")

    options = choice_options(graph, node)
    if index < 0 or index >= max(len(widgets), len(options)):
        raise ValueError(f"Radio index {index} out of range")
    kid_state = on_state(graph, widgets[index]) if index < len(widgets) else None
    if index < len(options) and options[index][0]:
        token = NameObject("/" + options[index][0].lstrip("/"))
    else:
        token = NameObject(kid_state or "/" + str(index))

    node[_V] = token
    for i, widget in enumerate(widgets):
        widget[_AS] = NameObject(kid_state or token) if i == index else NameObject(CHECKBOX_OFF_TOKEN)
    return str(token).lstrip("/")


_WRITERS = {
    FieldKind.TEXT: _set_text,
    FieldKind.MULTILINE_TEXT: _set_text,
    FieldKind.CHECKBOX: _set_checkbox,
    FieldKind.COMBOBOX: _set_choice,
    FieldKind.RADIO_BUTTON: _set_radio,
}


def write_value(graph: FormGraph, node: DictionaryObject, kind: FieldKind, value: str) -> str:
    writer = _WRITERS.get(kind, _set_text)
    stored = writer(graph, node, value)
    clear_appearance(graph, node)
    return stored


# -- binding ---------------------------------------------------------------

def to_field_text(kind: FieldKind, raw: Any) -> str:
    """Text form of a value handed over by the binding layer."""
    if raw is None:
        return ""
    if isinstance(raw, bool):
        if kind is FieldKind.CHECKBOX:
            return CHECKBOX_READ_CHECKED if raw else CHECKBOX_READ_UNCHECKED
        return str(raw)
    return str(raw)


def bind_value(descriptor: FieldDescriptor, raw: Any) -> str:
    descriptor.value = to_field_text(descriptor.kind, raw)
    if descriptor.on_change is not None:
        descriptor.on_change(descriptor.value)
    return descriptor.value
