"""Streamline artist exports: drop artists without music videos and slim the rest."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List

from .values import ARRAY, OBJECT, coerce_records, json_type

logger = logging.getLogger(__name__)

KEPT_ARTIST_FIELDS = ('artistName', 'musicBrainzArtistID')
VIDEO_FIELDS = 'mvids'
STRIPPED_VIDEO_FIELDS = (
    'strMusicBrainzArtistID',
    'strMusicBrainzAlbumID',
    'idArtist',
    'idAlbum',
    'idTrack',
)


@dataclass
class PostProcessingOutcome:
    processed_data: List[Any] = field(default_factory=list)
    total: int = 0
    with_videos: int = 0
    without_videos: int = 0

    def summary(self) -> str:
        return (
            f"Artists: {self.total} | With videos: {self.with_videos} | "
            f"Without videos: {self.without_videos} | Kept: {len(self.processed_data)}"
        )


def has_videos(artist: Any) -> bool:
    if json_type(artist) != OBJECT:
        return False
    videos = artist.get(VIDEO_FIELDS)
    return json_type(videos) == ARRAY and len(videos) > 0


def clean_video(video: Any) -> Any:
    if json_type(video) != OBJECT:
        return video
    return {k: v for k, v in video.items() if k not in STRIPPED_VIDEO_FIELDS}


def clean_artist(artist: dict) -> dict:
    cleaned = {name: artist[name] for name in KEPT_ARTIST_FIELDS if name in artist}
    cleaned[VIDEO_FIELDS] = [clean_video(video) for video in artist[VIDEO_FIELDS]]
    return cleaned


def postprocess_records(data: Any) -> PostProcessingOutcome:
    """Keep artists that have music videos, reduced to name, MusicBrainz ID and videos.

    Each video loses its MusicBrainz and TheAudioDB cross-reference IDs. The
    input is not modified.
    """
    records = coerce_records(data)
    processed = [clean_artist(artist) for artist in records if has_videos(artist)]

    outcome = PostProcessingOutcome(
        processed_data=processed,
        total=len(records),
        with_videos=len(processed),
        without_videos=len(records) - len(processed),
    )
    logger.info("Post-processing: %s", outcome.summary())
    return outcome
