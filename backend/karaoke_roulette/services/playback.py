import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import parse_qs, urlparse


# watch?v=ID, youtu.be/ID, /embed/ID, /shorts/ID, /live/ID, /v/ID
_VIDEO_ID_PATTERN = re.compile(
    r'(?:youtu\.be/|youtube(?:-nocookie)?\.com/(?:watch\?(?:.*&)?v=|embed/|shorts/|live/|v/))'
    r'([A-Za-z0-9_-]{11})(?![A-Za-z0-9_-])'
)
_OFFSET_PATTERN = re.compile(r'^(?:(\d+)h)?(?:(\d+)m)?(?:(\d+)s?)?$')


@dataclass(frozen=True)
class PlaybackRequest:
    media_url: str
    video_id: str
    start_seconds: Optional[int] = None

    def to_dict(self):
        return {
            'media_url': self.media_url,
            'video_id': self.video_id,
            'start_seconds': self.start_seconds,
        }


def parse_start_offset(value) -> Optional[int]:
    """Turn ``90``, ``90s`` or ``1m30s`` into seconds."""
    if not value:
        return None
    match = _OFFSET_PATTERN.match(value.strip().lower())
    if not match or not any(match.groups()):
        return None
    hours, minutes, seconds = (int(g) if g else 0 for g in match.groups())
    return hours * 3600 + minutes * 60 + seconds


def parse_media_url(url) -> Optional[PlaybackRequest]:
    """Extract the embeddable video id and optional ``t=`` start offset.

    Returns None when no id can be found; callers must not attempt playback
    in that case.
    """
    if not url:
        return None
    url = str(url).strip()
    match = _VIDEO_ID_PATTERN.search(url)
    if not match:
        return None
    parsed = urlparse(url if '://' in url else f'https://{url}')
    params = parse_qs(parsed.query)
    if 't' not in params and parsed.fragment:
        params = parse_qs(parsed.fragment)
    start = parse_start_offset(params.get('t', [None])[0])
    return PlaybackRequest(media_url=url, video_id=match.group(1), start_seconds=start)
