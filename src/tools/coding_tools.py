"""Coding tools: shell commands and file access for both agents.

Relative paths resolve against ``settings.workspace`` and commands run
there. Nothing is sandboxed: the bot has whatever access its process has.
"""

import asyncio
import logging
from pathlib import Path

from pydantic import Field

from src.config import settings
from src.tools.base import ToolParams, ToolResult
from src.tools.registry import registry

logger = logging.getLogger(__name__)

# Longest output handed back to the model from a single call.
MAX_OUTPUT_CHARS = 30_000


def _resolve(path: str) -> Path:
    candidate = Path(path).expanduser()
    if not candidate.is_absolute():
        candidate = settings.workspace / candidate
    return candidate


def _truncate(text: str, *, keep_tail: bool = False) -> str:
    if len(text) <= MAX_OUTPUT_CHARS:
        return text
    dropped = len(text) - MAX_OUTPUT_CHARS
    if keep_tail:
        return f"[... {dropped} characters truncated ...]\n" + text[-MAX_OUTPUT_CHARS:]
    return text[:MAX_OUTPUT_CHARS] + f"\n[... {dropped} characters truncated ...]"


# ---------------------------------------------------------------------------
# bash
# ---------------------------------------------------------------------------


class BashParams(ToolParams):
    command: str = Field(min_length=1, description="Shell command to run")
    timeout: float | None = Field(
        default=None,
        gt=0,
        description="Seconds before the command is killed (default from settings)",
    )


@registry.tool(
    name="bash",
    description=(
        "Run a shell command in the workspace directory and return its combined "
        "stdout and stderr. Use curl for web lookups."
    ),
    category="coding",
    params_model=BashParams,
)
async def bash(command: str, timeout: float | None = None) -> ToolResult:
    limit = timeout or settings.bash_timeout
    workspace = settings.workspace
    workspace.mkdir(parents=True, exist_ok=True)

    proc = await asyncio.create_subprocess_shell(
        command,
        cwd=workspace,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.STDOUT,
    )
    try:
        stdout, _ = await asyncio.wait_for(proc.communicate(), timeout=limit)
    except TimeoutError:
        proc.kill()
        await proc.wait()
        logger.warning("bash command timed out after %.0fs: %s", limit, command[:80])
        return ToolResult(error=f"Command timed out after {limit:g}s")

    output = _truncate(stdout.decode("utf-8", errors="replace"), keep_tail=True)
    if proc.returncode != 0:
        return ToolResult(error=f"Exit code {proc.returncode}\n{output}".rstrip())
    return ToolResult(text=output or "(no output)")


# ---------------------------------------------------------------------------
# read_file / write_file / edit_file
# ---------------------------------------------------------------------------


class ReadFileParams(ToolParams):
    path: str = Field(min_length=1, description="File path, absolute or relative to the workspace")
    offset: int = Field(default=1, ge=1, description="First line to return (1-based)")
    limit: int | None = Field(default=None, ge=1, description="Maximum number of lines")


@registry.tool(
    name="read_file",
    description="Read a text file, optionally a range of lines.",
    category="coding",
    params_model=ReadFileParams,
)
async def read_file(path: str, offset: int = 1, limit: int | None = None) -> ToolResult:
    target = _resolve(path)
    if not target.is_file():
        return ToolResult(error=f"File not found: {path}")

    lines = target.read_text(encoding="utf-8", errors="replace").splitlines(keepends=True)
    end = None if limit is None else offset - 1 + limit
    selected = "".join(lines[offset - 1 : end])
    if not selected:
        return ToolResult(text=f"(no content at line {offset}; file has {len(lines)} lines)")
    return ToolResult(text=_truncate(selected))


class WriteFileParams(ToolParams):
    path: str = Field(min_length=1, description="File path, absolute or relative to the workspace")
    content: str = Field(description="Full file content")


@registry.tool(
    name="write_file",
    description="Create or overwrite a text file. Parent directories are created.",
    category="coding",
    params_model=WriteFileParams,
)
async def write_file(path: str, content: str) -> ToolResult:
    target = _resolve(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content, encoding="utf-8")
    logger.info("Wrote %d characters to %s", len(content), target)
    return ToolResult(text=f"Wrote {len(content)} characters to {path}.")


class EditFileParams(ToolParams):
    path: str = Field(min_length=1, description="File path, absolute or relative to the workspace")
    old_text: str = Field(min_length=1, description="Exact text to replace; must appear once")
    new_text: str = Field(description="Replacement text")


@registry.tool(
    name="edit_file",
    description=(
        "Replace one exact occurrence of old_text with new_text in a file. "
        "Include enough surrounding text to make old_text unique."
    ),
    category="coding",
    params_model=EditFileParams,
)
async def edit_file(path: str, old_text: str, new_text: str) -> ToolResult:
    target = _resolve(path)
    if not target.is_file():
        return ToolResult(error=f"File not found: {path}")

    content = target.read_text(encoding="utf-8")
    count = content.count(old_text)
    if count == 0:
        return ToolResult(error=f"old_text not found in {path}")
    if count > 1:
        return ToolResult(error=f"old_text matches {count} times in {path}; add more context")

    target.write_text(content.replace(old_text, new_text, 1), encoding="utf-8")
    logger.info("Edited %s", target)
    return ToolResult(text=f"Edited {path}.")
