from __future__ import annotations

from asd_mcp.app.profiles.alps_profile import IDEMPOTENT, SAFE, UNSAFE, AlpsProfile, Link

EDGE_COLORS = {
    SAFE: "#00A86B",
    UNSAFE: "#FF4136",
    IDEMPOTENT: "#D4A000",
}


def render_dot(profile: AlpsProfile, *, use_title: bool = False) -> str:
    """상태 전이 그래프를 Graphviz DOT 문서로 그려요."""
    lines = [
        "digraph application_state_diagram {",
        "  graph [",
        '    labelloc="t";',
        '    fontname="Helvetica"',
        f"    label={_quote(profile.title)};",
        "  ];",
        '  node [shape = box, style = "bold,filled" fillcolor="lightgray"];',
        "",
    ]

    for state in profile.states:
        lines.append(f"  {_quote(state)} [label={_quote(_state_label(profile, state, use_title))} {_url(state)}];")

    if profile.links:
        lines.append("")
    for link in profile.links:
        lines.append(f"  {_quote(link.source)} -> {_quote(link.target)} [{_edge_attributes(link, use_title)}];")

    lines.append("}")
    return "\n".join(lines) + "\n"


def _state_label(profile: AlpsProfile, state: str, use_title: bool) -> str:
    descriptor = profile.descriptors.get(state)
    if descriptor is None:
        return state
    return descriptor.label(use_title=use_title)


def _edge_attributes(link: Link, use_title: bool) -> str:
    transition = link.transition
    name = transition.id or ""
    label = f"{transition.label(use_title=use_title)} ({transition.type})"
    return " ".join(
        [
            f"label={_quote(label)}",
            _url(name),
            "fontsize=13",
            f"class={_quote(name)}",
            f"color={_quote(EDGE_COLORS.get(transition.type, 'black'))}",
            "penwidth=1.5",
        ]
    )


def _url(name: str) -> str:
    return f'URL={_quote("#" + name)} target="_parent"'


def _quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
    return f'"{escaped}"'
