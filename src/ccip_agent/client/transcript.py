"""Role-tagged conversation transcript."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Role(str, Enum):
    SYSTEM = "SYSTEM"
    USER = "User"
    ASSISTANT = "Assistant"
    TOOL = "Tool result"


@dataclass(frozen=True)
class Utterance:
    role: Role
    content: str
    tool_name: str | None = None

    def render(self) -> str:
        if self.role is Role.TOOL:
            return f"Tool result for {self.tool_name}: {self.content}"
        return f"{self.role.value}: {self.content}"


@dataclass
class Transcript:
    """Append-only, in-memory history of one console conversation."""

    utterances: list[Utterance] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.utterances)

    def append(self, role: Role, content: str) -> Utterance:
        utterance = Utterance(role=role, content=content)
        self.utterances.append(utterance)
        return utterance

    def append_tool_result(self, tool_name: str, content: str) -> Utterance:
        utterance = Utterance(role=Role.TOOL, content=content, tool_name=tool_name)
        self.utterances.append(utterance)
        return utterance

    def render(self) -> str:
        return "\n".join(utterance.render() for utterance in self.utterances)
