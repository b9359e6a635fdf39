"""Media handling -- MIME resolution, staging, and codec normalisation."""

from .classify import EXTENSION_TO_MIME, MEDIA_KINDS, resolve_mime
from .staging import MediaHandle, PayloadDecodeError, StagingStore, decode_payload
from .transcode import (
    FfmpegTranscoder,
    PassthroughTranscoder,
    TranscodeJob,
    TranscodeProvider,
    probe_available,
    select_transcoder,
    transcode_for_kind,
)

__all__ = [
    "EXTENSION_TO_MIME",
    "MEDIA_KINDS",
    "FfmpegTranscoder",
    "MediaHandle",
    "PassthroughTranscoder",
    "PayloadDecodeError",
    "StagingStore",
    "TranscodeJob",
    "TranscodeProvider",
    "decode_payload",
    "probe_available",
    "resolve_mime",
    "select_transcoder",
    "transcode_for_kind",
]
