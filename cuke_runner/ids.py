"""Catalog node ids.

A node id encodes (file identity, structural path) and stays stable across
re-parses of an unchanged file:

    <file>
    <file>:rule:<line>
    <file>:scenario:<line>
    <file>:scenario:<line>:example:<line>
"""
from __future__ import annotations

import os
from dataclasses import dataclass

_RULE = ":rule:"
_SCENARIO = ":scenario:"
_EXAMPLE = ":example:"


@dataclass(frozen=True)
class NodeRef:
    file_id: str
    rule_line: int | None = None
    scenario_line: int | None = None
    example_line: int | None = None

    @property
    def kind(self) -> str:
        if self.example_line is not None:
            return "example"
        if self.scenario_line is not None:
            return "scenario"
        if self.rule_line is not None:
            return "rule"
        return "feature"


def file_id(path: str | os.PathLike) -> str:
    return os.path.normpath(os.path.abspath(os.fspath(path)))


def rule_id(fid: str, line: int) -> str:
    return f"{fid}{_RULE}{line}"


def scenario_id(fid: str, line: int) -> str:
    return f"{fid}{_SCENARIO}{line}"


def example_id(fid: str, scenario_line: int, example_line: int) -> str:
    return f"{scenario_id(fid, scenario_line)}{_EXAMPLE}{example_line}"


def parse_node_id(node_id: str) -> NodeRef:
    if _RULE in node_id:
        fid, _, line = node_id.rpartition(_RULE)
        return NodeRef(fid, rule_line=int(line))
    if _SCENARIO in node_id:
        fid, _, rest = node_id.rpartition(_SCENARIO)
        if _EXAMPLE in rest:
            sline, _, eline = rest.partition(_EXAMPLE)
            return NodeRef(fid, scenario_line=int(sline), example_line=int(eline))
        return NodeRef(fid, scenario_line=int(rest))
    return NodeRef(node_id)
