"""Codec normalisation via an external ``ffmpeg`` binary.

Channels play audio reliably only as OPUS-in-OGG voice notes and video only
as H.264/AAC MP4.  Conversion is best-effort: when the tool is missing, or
exits non-zero, callers get ``None`` and send the original file instead.
Callers never branch on tool presence themselves; :func:`select_transcoder`
returns either the ffmpeg-backed provider or a passthrough one.
"""

from __future__ import annotations

import asyncio
import logging
import tempfile
import time
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, Protocol

from ..config.settings import DEFAULT_VIDEO_MAX_WIDTH, Settings
from ..util.singletons import register_singleton

logger = logging.getLogger(__name__)

TargetKind = Literal["audio", "video"]

_TARGET_SUFFIX: dict[str, str] = {"audio": ".ogg", "video": ".mp4"}
_NATIVE_AUDIO_SUFFIXES = frozenset({".ogg", ".opus"})
_STDERR_TAIL = 500


@dataclass(frozen=True)
class TranscodeJob:
    """One conversion: consumed once, output owned by the caller."""

    source_path: Path
    target_kind: TargetKind
    output_path: Path

    @classmethod
    def create(cls, source_path: Path, target_kind: TargetKind, scratch_dir: Path) -> TranscodeJob:
        stamp = int(time.time() * 1000)
        name = f"chanrelay_{target_kind}_{stamp}_{uuid.uuid4().hex[:6]}{_TARGET_SUFFIX[target_kind]}"
        return cls(source_path=source_path, target_kind=target_kind, output_path=scratch_dir / name)


class TranscodeProvider(Protocol):
    name: str

    async def convert_audio(self, source_path: Path) -> Path | None: ...

    async def convert_video(self, source_path: Path) -> Path | None: ...


class PassthroughTranscoder:
    """Used when no codec tool is available; never converts anything."""

    name = "passthrough"

    async def convert_audio(self, source_path: Path) -> Path | None:
        return None

    async def convert_video(self, source_path: Path) -> Path | None:
        return None


async def _run(argv: list[str]) -> tuple[int, str]:
    """Run *argv* and return ``(returncode, stderr)``.

    A missing executable yields return code 127.
    """
    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError:
        return 127, f"{argv[0]} not found"
    except OSError as exc:
        return 126, str(exc)
    _, stderr = await proc.communicate()
    return proc.returncode or 0, stderr.decode("utf-8", errors="replace")


@dataclass
class FfmpegTranscoder:
    binary: str = "ffmpeg"
    scratch_dir: Path = field(default_factory=lambda: Path(tempfile.gettempdir()))
    max_width: int = DEFAULT_VIDEO_MAX_WIDTH
    name: str = "ffmpeg"

    def audio_args(self, job: TranscodeJob) -> list[str]:
        return [
            self.binary, "-y", "-i", str(job.source_path),
            "-c:a", "libopus", "-b:a", "64k", "-vbr", "on",
            "-compression_level", "10", "-frame_duration", "60",
            "-application", "voip",
            str(job.output_path),
        ]

    def video_args(self, job: TranscodeJob) -> list[str]:
        # yuv420p is the only pixel format every mobile decoder handles;
        # -2 keeps the height even as libx264 requires.
        scale = f"scale='min({self.max_width},iw)':-2,format=yuv420p"
        return [
            self.binary, "-y", "-i", str(job.source_path),
            "-c:v", "libx264", "-preset", "fast", "-crf", "26",
            "-vf", scale,
            "-c:a", "aac", "-b:a", "128k",
            "-movflags", "+faststart",
            str(job.output_path),
        ]

    async def convert_audio(self, source_path: Path) -> Path | None:
        job = TranscodeJob.create(source_path, "audio", self.scratch_dir)
        logger.info("[transcode] audio %s -> OGG/Opus", source_path.name)
        return await self._execute(job, self.audio_args(job))

    async def convert_video(self, source_path: Path) -> Path | None:
        job = TranscodeJob.create(source_path, "video", self.scratch_dir)
        logger.info("[transcode] video %s -> H.264/AAC MP4", source_path.name)
        return await self._execute(job, self.video_args(job))

    async def _execute(self, job: TranscodeJob, argv: list[str]) -> Path | None:
        self.scratch_dir.mkdir(parents=True, exist_ok=True)
        code, stderr = await _run(argv)
        if code == 0 and job.output_path.is_file():
            logger.info("[transcode] %s conversion ok: %s", job.target_kind, job.output_path)
            return job.output_path
        job.output_path.unlink(missing_ok=True)
        detail = stderr.strip()[-_STDERR_TAIL:] or "no output produced"
        logger.warning(
            "[transcode] %s conversion failed (exit=%d), sending original: %s",
            job.target_kind, code, detail,
        )
        return None


_availability: dict[str, bool] = {}


async def probe_available(binary: str) -> bool:
    """Return True if ``<binary> -version`` exits zero; cached per binary."""
    cached = _availability.get(binary)
    if cached is not None:
        return cached
    code, _ = await _run([binary, "-version"])
    available = code == 0
    _availability[binary] = available
    if not available:
        logger.info("[transcode] %s not available -- conversions will be skipped", binary)
    return available


def _reset_availability() -> None:
    _availability.clear()


async def select_transcoder(settings: Settings) -> TranscodeProvider:
    if await probe_available(settings.ffmpeg_path):
        return FfmpegTranscoder(
            binary=settings.ffmpeg_path,
            scratch_dir=settings.transcode_dir,
            max_width=settings.video_max_width,
        )
    return PassthroughTranscoder()


async def transcode_for_kind(
    provider: TranscodeProvider,
    source_path: Path,
    kind: str,
) -> tuple[Path, Path | None]:
    """Pick the file to send for *kind*.

    Returns ``(path_to_send, owned_output)``.  ``owned_output`` is the new
    file the caller must delete after sending, or ``None`` when the original
    is sent unmodified.
    """
    converted: Path | None = None
    if kind == "audio" and source_path.suffix.lower() not in _NATIVE_AUDIO_SUFFIXES:
        converted = await provider.convert_audio(source_path)
    elif kind == "video":
        converted = await provider.convert_video(source_path)
    if converted is None:
        return source_path, None
    return converted, converted


register_singleton(_reset_availability)
