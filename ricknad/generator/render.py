"""Turn assembled contract parts into Solidity source text."""

import re
import textwrap

from ricknad.generator.rules import ContractParts

LICENSE = "MIT"
PRAGMA = "^0.8.20"
INDENT = "    "


def sanitize_comment(text: str) -> str:
    """Collapse to one line and keep `*/` from closing the NatSpec block."""
    text = re.sub(r"\s+", " ", text or "").strip()
    return text.replace("*/", "* /")


def block(fragment: str, level: int = 1) -> str:
    """Dedent a fragment and indent it `level` steps."""
    body = textwrap.dedent(fragment).strip("\n")
    return textwrap.indent(body, INDENT * level, lambda line: bool(line.strip()))


def _render_constructor(parts: ContractParts) -> str | None:
    calls = [
        f"{parent}({args})"
        for parent, args in parts.constructor_calls.items()
        if parts.keeps_parent(parent)
    ]
    if not (parts.constructor_params or calls or parts.constructor_body):
        return None

    params = ", ".join(parts.constructor_params)
    lines = list(parts.constructor_annotations)
    lines.append(f"constructor({params})")
    if len(calls) > 1:
        lines.extend(f"{INDENT}{call}" for call in calls)
        lines.append("{")
    else:
        lines[-1] += f" {calls[0]} {{" if calls else " {"
    lines.extend(f"{INDENT}{stmt}" for stmt in parts.constructor_body)
    lines.append("}")
    return "\n".join(lines)


def _render_initializer(parts: ContractParts) -> str | None:
    calls = [
        stmt for parent, stmt in parts.initializer_calls.items()
        if parts.keeps_parent(parent)
    ]
    if not (calls or parts.initializer_body):
        return None

    lines = ["function initialize() public initializer {"]
    lines.extend(f"{INDENT}{stmt}" for stmt in calls + parts.initializer_body)
    lines.append("}")
    return "\n".join(lines)


def render_contract(
    name: str,
    parts: ContractParts,
    description: str,
    prompt: str,
    seed: int,
    timestamp: str,
    notes: list[str] | None = None,
) -> str:
    """Render a complete Solidity file for a single contract."""
    header = [
        f"// SPDX-License-Identifier: {LICENSE}",
        f"pragma solidity {PRAGMA};",
        "",
    ]
    if parts.imports:
        header.extend(f'import "{path}";' for path in parts.imports)
        header.append("")

    doc = [
        "/**",
        f" * @title {name}",
        f' * @dev {description} auto-generated from: "{sanitize_comment(prompt)}"',
    ]
    for note in notes or []:
        doc.append(f" * @notice {sanitize_comment(note)}")
    doc.extend([
        f" * @custom:generated-at {timestamp}",
        f" * @custom:seed {seed}",
        " */",
    ])

    inherits = f" is {', '.join(parts.inheritance)}" if parts.inheritance else ""
    sections: list[str] = []

    if parts.using:
        sections.append("\n".join(parts.using))
    if parts.variables:
        sections.append("\n".join(textwrap.dedent(v).strip("\n") for v in parts.variables))
    if parts.events:
        sections.append("\n".join(parts.events))

    constructor = _render_constructor(parts)
    if constructor:
        sections.append(constructor)
    initializer = _render_initializer(parts)
    if initializer:
        sections.append(initializer)

    for fragment in parts.modifiers + parts.functions:
        sections.append(textwrap.dedent(fragment).strip("\n"))

    body = "\n\n".join(block(section) for section in sections)

    lines = header + doc + [f"contract {name}{inherits} {{"]
    if body:
        lines.append(body)
    lines.append("}")
    return "\n".join(lines) + "\n"
