"""
Persisted error records for unhandled request failures.

Each record is appended to a per-day text file so operators can look up the
correlation id returned to the caller.
"""

import traceback
from datetime import datetime
from pathlib import Path

import aiofiles


async def persist_error_record(
    directory: Path, exc: BaseException, method: str, path: str, trace_id: str
) -> Path:
    now = datetime.utcnow()
    directory.mkdir(parents=True, exist_ok=True)
    file_path = directory / f"error-{now:%Y-%m-%d}.txt"

    stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    record = (
        f"Timestamp (UTC): {now.isoformat()}\n"
        f"TraceId: {trace_id}\n"
        f"Request: {method} {path}\n"
        f"Message: {exc}\n"
        f"StackTrace:\n{stack or 'No stack trace available.'}\n"
        f"{'-' * 80}\n"
    )
    async with aiofiles.open(file_path, "a", encoding="utf-8") as fh:
        await fh.write(record)
    return file_path
