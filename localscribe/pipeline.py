"""
localscribe.pipeline - Transcription pipeline.

Path in, text out: read and validate the WAV, run inference under the
Model Host's exclusive access, then join the produced segments in order.
File reading runs freely in parallel; only inference is serialized.
"""

from __future__ import annotations

import asyncio
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any

from localscribe.audio import read_wav
from localscribe.engine import InferenceSession
from localscribe.exceptions import InferenceError, LocalscribeError, TranscriptionError
from localscribe.host import ModelHost
from localscribe.logging import get_logger

log = get_logger("pipeline")


def collect_segments(session: InferenceSession) -> str:
    """Concatenate segment texts in index order with no separator.

    Unavailable segments are skipped rather than failing the request.
    """
    count = session.segment_count()
    log.debug("Transcription produced %d segments.", count)

    parts = []
    for i in range(count):
        text = session.segment_text(i)
        if text is None:
            log.debug("Segment %d unavailable, skipping", i)
            continue
        parts.append(text)
    return "".join(parts)


def transcribe(host: ModelHost, audio_path: Path | str) -> str:
    """Transcribe a 16kHz mono 16-bit WAV file.

    Args:
        host: The process-wide Model Host
        audio_path: Path to the WAV file

    Returns:
        Joined transcription text (empty when no speech is found)

    Raises:
        AudioOpenError: If the file cannot be opened or parsed
        UnsupportedAudioFormatError: If the audio is not 16kHz mono 16-bit
        AudioDecodeError: If the sample stream is truncated
        InferenceError: If the engine fails
    """
    audio_path = Path(audio_path)
    clip = read_wav(audio_path)

    def _infer(session: InferenceSession) -> str:
        try:
            session.run(clip.samples)
            return collect_segments(session)
        except LocalscribeError:
            raise
        except Exception as e:
            raise InferenceError(audio_path, str(e) or type(e).__name__) from e

    text = host.with_exclusive_access(_infer, audio_path=audio_path)
    log.debug("Transcription result (%d chars): %s", len(text), text)
    return text


async def transcribe_async(host: ModelHost, audio_path: Path | str) -> str:
    """Awaitable form of transcribe(); the blocking work runs in a worker thread.

    Cancelling the awaiting task does not stop the underlying work.
    """
    return await asyncio.to_thread(transcribe, host, audio_path)


def transcribe_files(
    host: ModelHost,
    audio_paths: list[Path],
    max_workers: int = 2,
    console=None,
) -> dict[str, Any]:
    """Transcribe several files concurrently.

    Args:
        host: The process-wide Model Host
        audio_paths: WAV files to transcribe
        max_workers: Concurrent requests; inference is still one at a time
        console: Optional rich console for output

    Returns:
        Dict with counts, per-file ``results`` and per-file ``errors``
    """
    from rich.table import Table

    results: dict[str, Any] = {
        "transcribed": 0,
        "failed": 0,
        "results": [],
        "errors": [],
    }

    table = Table(title="Transcription")
    table.add_column("File", style="cyan")
    table.add_column("Characters", style="green")
    table.add_column("Status", style="yellow")

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = [(path, pool.submit(transcribe, host, path)) for path in audio_paths]

        for path, future in futures:
            try:
                text = future.result()
            except TranscriptionError as e:
                table.add_row(path.name, "-", f"[red]{type(e).__name__}: {e}[/red]")
                results["failed"] += 1
                results["errors"].append(
                    {
                        "path": str(path),
                        "kind": type(e).__name__,
                        "error": str(e),
                    }
                )
                continue

            table.add_row(path.name, str(len(text)), "[green]✓ Transcribed[/green]")
            results["transcribed"] += 1
            results["results"].append({"path": str(path), "text": text})

    if console:
        console.print(table)

    return results
