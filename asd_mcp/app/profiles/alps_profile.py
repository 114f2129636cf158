"""ALPS 프로파일(JSON/XML)을 읽어 디스크립터 색인과 상태 전이 링크를 만들어요.

상태(state)는 전이 디스크립터(safe/unsafe/idempotent)를 직접 품거나
로컬 href(`#id`)로 참조하는 디스크립터예요. 링크는 그 상태에서 전이의
`rt`가 가리키는 상태로 가는 간선이에요.
"""

from __future__ import annotations

import json
import xml.etree.ElementTree as ElementTree
from dataclasses import dataclass, field
from typing import Any

from asd_mcp.app.profiles.base import ProfileError

SEMANTIC = "semantic"
SAFE = "safe"
UNSAFE = "unsafe"
IDEMPOTENT = "idempotent"

DESCRIPTOR_TYPES = frozenset({SEMANTIC, SAFE, UNSAFE, IDEMPOTENT})
TRANSITION_TYPES = frozenset({SAFE, UNSAFE, IDEMPOTENT})


@dataclass(slots=True)
class Descriptor:
    id: str | None
    href: str | None = None
    type: str = SEMANTIC
    rt: str | None = None
    title: str = ""
    doc: str = ""
    tags: tuple[str, ...] = ()
    children: list[Descriptor] = field(default_factory=list)

    @property
    def is_transition(self) -> bool:
        return self.type in TRANSITION_TYPES

    def label(self, *, use_title: bool) -> str:
        if use_title and self.title:
            return self.title
        return self.id or self.href or ""


@dataclass(slots=True)
class Link:
    source: str
    target: str
    transition: Descriptor


@dataclass(slots=True)
class AlpsProfile:
    title: str
    doc: str
    descriptors: dict[str, Descriptor]
    links: list[Link]
    states: list[str]


def load_profile(content: str) -> AlpsProfile:
    """프로파일 문자열을 해석하고 검증해요. 문제가 있으면 `ProfileError`를 던져요."""
    stripped = content.strip()
    if not stripped:
        raise ProfileError("ALPS profile is empty")

    if stripped.startswith("{"):
        title, doc, roots = _parse_json(stripped)
    else:
        title, doc, roots = _parse_xml(stripped)

    descriptors: dict[str, Descriptor] = {}
    for descriptor in roots:
        _index(descriptor, descriptors)
    for descriptor in descriptors.values():
        _check_references(descriptor, descriptors)
    for descriptor in roots:
        _check_href_children(descriptor, descriptors)

    links = _collect_links(descriptors)
    states: list[str] = []
    for link in links:
        for name in (link.source, link.target):
            if name not in states:
                states.append(name)

    return AlpsProfile(title=title, doc=doc, descriptors=descriptors, links=links, states=states)


# ── JSON ─────────────────────────────────────────────────────────────────────


def _parse_json(text: str) -> tuple[str, str, list[Descriptor]]:
    try:
        document = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ProfileError(f"Invalid JSON: {exc.msg} (line {exc.lineno}, column {exc.colno})") from exc

    if not isinstance(document, dict) or not isinstance(document.get("alps"), dict):
        raise ProfileError("ALPS root element 'alps' not found")

    alps = document["alps"]
    title_value = alps.get("title")
    return (
        title_value if isinstance(title_value, str) else "",
        _json_doc(alps.get("doc")),
        [_json_descriptor(item) for item in _as_list(alps.get("descriptor"))],
    )


def _json_descriptor(item: Any) -> Descriptor:
    if not isinstance(item, dict):
        raise ProfileError("Descriptor must be an object")

    tag_value = item.get("tag")
    return Descriptor(
        id=_optional_str(item, "id"),
        href=_optional_str(item, "href"),
        type=_optional_str(item, "type") or SEMANTIC,
        rt=_optional_str(item, "rt"),
        title=_optional_str(item, "title") or "",
        doc=_json_doc(item.get("doc")),
        tags=tuple(tag_value.split()) if isinstance(tag_value, str) else (),
        children=[_json_descriptor(child) for child in _as_list(item.get("descriptor"))],
    )


def _json_doc(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, dict) and isinstance(value.get("value"), str):
        return value["value"]
    return ""


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _optional_str(item: dict[str, Any], key: str) -> str | None:
    value = item.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ProfileError(f"Descriptor attribute '{key}' must be a string")
    return value


# ── XML ──────────────────────────────────────────────────────────────────────


def _parse_xml(text: str) -> tuple[str, str, list[Descriptor]]:
    try:
        root = ElementTree.fromstring(text)
    except ElementTree.ParseError as exc:
        raise ProfileError(f"Invalid XML: {exc}") from exc

    if _local_name(root.tag) != "alps":
        raise ProfileError("ALPS root element 'alps' not found")

    title = ""
    doc = ""
    roots: list[Descriptor] = []
    for child in root:
        name = _local_name(child.tag)
        if name == "title":
            title = (child.text or "").strip()
        elif name == "doc":
            doc = (child.text or "").strip()
        elif name == "descriptor":
            roots.append(_xml_descriptor(child))
    return title, doc, roots


def _xml_descriptor(element: ElementTree.Element) -> Descriptor:
    doc = ""
    children: list[Descriptor] = []
    for child in element:
        name = _local_name(child.tag)
        if name == "doc":
            doc = (child.text or "").strip()
        elif name == "descriptor":
            children.append(_xml_descriptor(child))

    tag_value = element.get("tag")
    return Descriptor(
        id=element.get("id"),
        href=element.get("href"),
        type=element.get("type") or SEMANTIC,
        rt=element.get("rt"),
        title=element.get("title") or "",
        doc=doc,
        tags=tuple(tag_value.split()) if tag_value else (),
        children=children,
    )


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


# ── 검증 ─────────────────────────────────────────────────────────────────────


def _index(descriptor: Descriptor, descriptors: dict[str, Descriptor]) -> None:
    if not descriptor.id and not descriptor.href:
        raise ProfileError("Descriptor must have either 'id' or 'href'")

    if descriptor.type not in DESCRIPTOR_TYPES:
        name = descriptor.id or descriptor.href
        raise ProfileError(f"Invalid descriptor type '{descriptor.type}' in '{name}'")

    if descriptor.id:
        if descriptor.id in descriptors:
            raise ProfileError(f"Duplicate descriptor id: {descriptor.id}")
        descriptors[descriptor.id] = descriptor

    for child in descriptor.children:
        _index(child, descriptors)


def _check_references(descriptor: Descriptor, descriptors: dict[str, Descriptor]) -> None:
    if not descriptor.is_transition:
        return
    if not descriptor.rt:
        raise ProfileError(f"Transition '{descriptor.id}' has no rt")
    if descriptor.rt.startswith("#") and descriptor.rt[1:] not in descriptors:
        raise ProfileError(f"rt target not found: {descriptor.rt} (in '{descriptor.id}')")


def _check_href_children(descriptor: Descriptor, descriptors: dict[str, Descriptor]) -> None:
    if descriptor.href and descriptor.href.startswith("#") and descriptor.href[1:] not in descriptors:
        raise ProfileError(f"Descriptor not found: {descriptor.href}")
    for child in descriptor.children:
        _check_href_children(child, descriptors)


def _resolve(descriptor: Descriptor, descriptors: dict[str, Descriptor]) -> Descriptor:
    if descriptor.id is None and descriptor.href and descriptor.href.startswith("#"):
        return descriptors[descriptor.href[1:]]
    return descriptor


def _state_name(rt: str) -> str:
    # 외부 URL의 rt(`other.json#Foo`)도 fragment를 상태 이름으로 써요.
    return rt.rsplit("#", 1)[-1] if "#" in rt else rt


def _collect_links(descriptors: dict[str, Descriptor]) -> list[Link]:
    links: list[Link] = []
    for state_id, state in descriptors.items():
        if state.is_transition:
            continue
        for child in state.children:
            transition = _resolve(child, descriptors)
            if not transition.is_transition or not transition.rt:
                continue
            links.append(Link(source=state_id, target=_state_name(transition.rt), transition=transition))
    return links
