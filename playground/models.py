from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Iterable

from pydantic import BaseModel, ConfigDict, Field, computed_field

DEFAULT_TIMEOUT_MS = 4000


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class FakeFile(_Frozen):
    path: str = Field(min_length=1)
    contents: str


class Submission(_Frozen):
    image: str = Field(min_length=1)
    filesystem: tuple[FakeFile, ...] = ()
    timeout: int = Field(default=DEFAULT_TIMEOUT_MS, gt=0, description="Timeout in milliseconds")
    command: tuple[str, ...] | None = Field(default=None, description="Overrides the image's default command")


class Console(str, Enum):
    STDOUT = "STDOUT"
    STDERR = "STDERR"

    @property
    def fd(self) -> int:
        return 1 if self is Console.STDOUT else 2


class OutputLine(_Frozen):
    console: Console
    timestamp: datetime
    line: str


def join_output(lines: Iterable[OutputLine]) -> str:
    return "\n".join(output_line.line for output_line in lines)


class Result(_Frozen):
    started: datetime
    ended: datetime
    output_lines: tuple[OutputLine, ...] = Field(default=(), alias="outputLines")
    timed_out: bool = Field(alias="timedOut")
    exit_value: int = Field(alias="exitValue")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def output(self) -> str:
        return join_output(self.output_lines)
