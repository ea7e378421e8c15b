import asyncio
import json
import re
from typing import Any

import yt_dlp

from linkvault.core.logging import get_logger
from linkvault.models.contracts import ImageProvenance, PlatformKind
from linkvault.models.extraction import ExtractedContent
from linkvault.models.upstream import OEmbedResponse
from linkvault.processing_strategies.base_strategy import MediaResolverStrategy
from linkvault.services.fallbacks import first_success_or_none
from linkvault.services.metadata_sources import fetch_oembed

logger = get_logger(__name__)

_VIDEO_ID_PATTERNS = (
    re.compile(r"[?&]v=([A-Za-z0-9_-]{6,})"),
    re.compile(r"youtu\.be/([A-Za-z0-9_-]{6,})"),
    re.compile(r"/(?:shorts|embed|live)/([A-Za-z0-9_-]{6,})"),
)


def extract_video_id(url: str) -> str | None:
    for pattern in _VIDEO_ID_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1)
    return None


def thumbnail_url(video_id: str) -> str:
    return f"https://img.youtube.com/vi/{video_id}/hqdefault.jpg"


class _YtDlpLogger:
    def __init__(self, base_logger):
        self._logger = base_logger

    def debug(self, msg: str) -> None:
        self._logger.debug(msg)

    def warning(self, msg: str) -> None:
        self._logger.debug(msg)

    def error(self, msg: str) -> None:
        self._logger.warning(msg)


class YouTubeResolverStrategy(MediaResolverStrategy):
    """Resolve YouTube videos: oEmbed metadata plus a best-effort transcript via yt-dlp."""

    platform = PlatformKind.YOUTUBE

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.ydl_opts: dict[str, Any] = {
            "quiet": True,
            "no_warnings": True,
            "extract_flat": False,
            "logger": _YtDlpLogger(logger),
            # Subtitle options
            "writesubtitles": True,
            "writeautomaticsub": True,
            "subtitleslangs": ["en"],
            "skip_download": True,
            "user_agent": self.settings.http_user_agent,
        }

    async def _fetch_oembed(self, url: str) -> OEmbedResponse | None:
        oembed = await fetch_oembed(
            self.http, self.settings.youtube_oembed_url, url, extra_params={"format": "json"}
        )
        return oembed if (oembed.title or oembed.author_name) else None

    def _extract_info(self, url: str) -> dict[str, Any]:
        with yt_dlp.YoutubeDL(self.ydl_opts) as ydl:
            return ydl.extract_info(url, download=False) or {}

    async def _fetch_transcript(self, url: str) -> str | None:
        info = await asyncio.to_thread(self._extract_info, url)
        return await self._extract_transcript(info)

    async def _extract_transcript(self, video_info: dict[str, Any]) -> str | None:
        """Download the first English subtitle track in a parseable format."""
        subtitles = video_info.get("subtitles") or {}
        automatic_captions = video_info.get("automatic_captions") or {}

        # Prefer manual subtitles over automatic
        subtitle_tracks = subtitles.get("en") or automatic_captions.get("en") or []
        if not subtitle_tracks:
            logger.info("No English subtitles found for video %s", video_info.get("id"))
            return None

        for track in subtitle_tracks:
            ext = track.get("ext")
            subtitle_url = track.get("url")
            if ext not in {"vtt", "srv3", "json3"} or not subtitle_url:
                continue
            content = await self.http.fetch_text(
                subtitle_url, timeout=self.settings.transcript_timeout_seconds
            )
            if ext == "vtt":
                transcript = self._parse_vtt(content)
            else:
                transcript = self._parse_json_subtitle(content)
            if transcript.strip():
                return transcript
        return None

    @staticmethod
    def _parse_vtt(vtt_content: str) -> str:
        """Parse VTT subtitle format to plain text."""
        transcript_lines: list[str] = []
        for raw_line in vtt_content.splitlines():
            line = raw_line.strip()
            # Skip header, cue timings and blank lines
            if not line or "-->" in line or line.startswith(("WEBVTT", "Kind:", "Language:")):
                continue
            line = re.sub(r"<[^>]+>", "", line)
            # Auto captions repeat the previous cue line
            if line and (not transcript_lines or transcript_lines[-1] != line):
                transcript_lines.append(line)
        return " ".join(transcript_lines)

    @staticmethod
    def _parse_json_subtitle(json_content: str) -> str:
        """Parse srv3/json3 subtitle events to plain text."""
        try:
            data = json.loads(json_content)
        except json.JSONDecodeError:
            logger.warning("Failed to parse JSON subtitle")
            return ""

        if isinstance(data, dict):
            parts = [
                seg.get("utf8", "").strip()
                for event in data.get("events", [])
                for seg in event.get("segs") or []
            ]
            return " ".join(part for part in parts if part)
        if isinstance(data, list):
            return " ".join(item.get("text", "") for item in data if isinstance(item, dict))
        return ""

    async def resolve(self, url: str) -> ExtractedContent:
        video_id = extract_video_id(url)

        oembed = await first_success_or_none(
            "youtube.oembed",
            [
                self.attempt(
                    "oembed", lambda: self._fetch_oembed(url), self.settings.oembed_timeout_seconds
                )
            ],
        )
        transcript = await first_success_or_none(
            "youtube.transcript",
            [
                self.attempt(
                    "yt_dlp_subtitles",
                    lambda: self._fetch_transcript(url),
                    self.settings.transcript_timeout_seconds,
                )
            ],
        )

        title = (oembed.title if oembed else None) or "YouTube video"
        author = oembed.author_name if oembed else None

        if transcript:
            content = transcript
        else:
            by = f" by {author}" if author else ""
            content = f"{title}{by}. Transcript unavailable."

        image_url = None
        provenance = ImageProvenance.NONE
        if oembed and oembed.thumbnail_url:
            image_url, provenance = oembed.thumbnail_url, ImageProvenance.OEMBED
        elif video_id:
            image_url, provenance = thumbnail_url(video_id), ImageProvenance.THUMBNAIL

        return ExtractedContent(
            title=title,
            content=content,
            source=self.source_for(url),
            author=author,
            image_url=image_url,
            image_provenance=provenance,
        )
