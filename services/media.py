# Opens the files a user selected for a message.
#
# Usage:
#   from services.media import open_file
#   handle = await open_file(FileSource("report.pdf"), max_bytes=10_000_000)
#
# A source may be an already-read FileHandle, a local path or an http(s) URL.
# Anything that prevents reading the bytes raises FileReadError; the envelope
# encoder turns that into an "Error reading file: ..." envelope.

import asyncio
from pathlib import Path

import aiohttp

import services.logger as log
from services.error import FileReadError
from services.message import FileHandle, FileSource

l = log.get_logger()

DEFAULT_MAX = 10 * 1024 * 1024  # 10 MB


async def fetch(url: str, max_bytes: int = DEFAULT_MAX,
                session: aiohttp.ClientSession | None = None) -> bytes:
    """
    Download *url* up to *max_bytes*.

    Sends a HEAD request first to check Content-Length before committing to a
    full download.  Falls back to streaming if the server doesn't support HEAD.

    Raises ``FileReadError`` if the file is oversized or the download fails.
    """
    if not url:
        raise FileReadError("empty URL")

    own_session = session is None
    if own_session:
        session = aiohttp.ClientSession()

    try:
        # Pre-flight HEAD to skip obviously oversized files without downloading
        try:
            async with session.head(
                url,
                allow_redirects=True,
                timeout=aiohttp.ClientTimeout(total=10),
            ) as resp:
                cl = resp.headers.get("Content-Length")
                if cl and cl.isdigit() and int(cl) > max_bytes:
                    raise FileReadError(f"file is {cl} bytes, limit is {max_bytes}")
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            l.debug(f"media.fetch: HEAD {url!r} failed ({e}), trying GET")

        async with session.get(
            url, timeout=aiohttp.ClientTimeout(total=60)
        ) as resp:
            resp.raise_for_status()
            chunks: list[bytes] = []
            total = 0
            async for chunk in resp.content.iter_chunked(65536):
                total += len(chunk)
                if total > max_bytes:
                    raise FileReadError(f"file exceeds limit of {max_bytes} bytes")
                chunks.append(chunk)
            return b"".join(chunks)

    except FileReadError:
        raise
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        l.error(f"media.fetch failed for {url!r}: {e}")
        raise FileReadError(f"download failed: {e or type(e).__name__}") from e
    finally:
        if own_session:
            await session.close()


def read_local(path: str | Path, max_bytes: int = DEFAULT_MAX) -> bytes:
    path = Path(path)
    try:
        size = path.stat().st_size
        if size > max_bytes:
            raise FileReadError(f"file is {size} bytes, limit is {max_bytes}")
        return path.read_bytes()
    except OSError as e:
        raise FileReadError(e.strerror or str(e)) from e


async def open_file(source: FileHandle | FileSource, max_bytes: int = DEFAULT_MAX,
                    session: aiohttp.ClientSession | None = None) -> FileHandle:
    """Return the ``FileHandle`` for a selected file, reading it if needed."""
    if isinstance(source, FileHandle):
        if source.size > max_bytes:
            raise FileReadError(f"file is {source.size} bytes, limit is {max_bytes}")
        return source

    name = source.display_name
    if source.is_remote:
        data = await fetch(source.location, max_bytes, session)
    else:
        data = await asyncio.to_thread(read_local, source.location, max_bytes)
    l.debug(f"media.open_file: read {len(data)} bytes for {name!r}")
    return FileHandle(name=name, data=data)


def display_name(source: FileHandle | FileSource) -> str:
    if isinstance(source, FileHandle):
        return source.name
    return source.display_name
