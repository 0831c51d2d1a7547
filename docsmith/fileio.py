"""Asynchronous file helpers; the blocking calls run on the default executor."""

from __future__ import annotations

import asyncio
import shutil
from functools import partial
from pathlib import Path
from typing import Any, Callable, TypeVar

T = TypeVar("T")


async def run_blocking(func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, partial(func, *args, **kwargs))


async def read_text(path: Path) -> str:
    return await run_blocking(path.read_text, encoding="utf-8")


async def output_file(path: Path, data: str) -> None:
    """Write ``data`` to ``path``, creating parent directories as needed."""

    def _write() -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(data, encoding="utf-8")

    await run_blocking(_write)


async def copy_tree(source: Path, destination: Path) -> None:
    await run_blocking(shutil.copytree, source, destination, dirs_exist_ok=True)


async def copy_file(source: Path, destination: Path) -> None:
    def _copy() -> None:
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, destination)

    await run_blocking(_copy)


__all__ = ["copy_file", "copy_tree", "output_file", "read_text", "run_blocking"]
