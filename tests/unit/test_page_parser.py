"""Tests for watch-page player response parsing."""

import json

import pytest

from services.page_parser import (
    extract_player_response,
    parse_watch_page,
    thumbnail_quality,
)

PLAYER_RESPONSE = {
    "playabilityStatus": {"status": "OK"},
    "videoDetails": {
        "videoId": "dQw4w9WgXcQ",
        "title": "Never Gonna Give You Up",
        "lengthSeconds": "213",
        "viewCount": "1500000000",
        "isLiveContent": False,
        "thumbnail": {
            "thumbnails": [
                {"url": "https://i.ytimg.com/vi/dQw4w9WgXcQ/default.jpg", "width": 120, "height": 90},
                {"url": "https://i.ytimg.com/vi/dQw4w9WgXcQ/sddefault.jpg", "width": 640, "height": 480},
            ]
        },
    },
    "microformat": {"playerMicroformatRenderer": {"uploadDate": "2009-10-24T23:57:33-07:00"}},
    "streamingData": {
        "formats": [
            {
                "itag": 18,
                "url": "https://rr1.googlevideo.com/videoplayback?itag=18",
                "mimeType": 'video/mp4; codecs="avc1.42001E, mp4a.40.2"',
                "bitrate": 503000,
                "height": 360,
                "fps": 25,
                "qualityLabel": "360p",
                "audioQuality": "AUDIO_QUALITY_LOW",
                "contentLength": "11870000",
            }
        ],
        "adaptiveFormats": [
            {
                "itag": 140,
                "url": "https://rr1.googlevideo.com/videoplayback?itag=140",
                "mimeType": 'audio/mp4; codecs="mp4a.40.2"',
                "bitrate": 130000,
                "averageBitrate": 129000,
                "audioQuality": "AUDIO_QUALITY_MEDIUM",
                "contentLength": "3433514",
            },
            {
                "itag": 251,
                "signatureCipher": "s=abc&sp=sig&url=https%3A%2F%2Frr1.googlevideo.com",
                "mimeType": 'audio/webm; codecs="opus"',
                "bitrate": 160000,
            },
        ],
    },
}


def watch_page(data: dict) -> str:
    return (
        "<html><script>var foo = {};</script>"
        f"<script>var ytInitialPlayerResponse = {json.dumps(data)};var meta = 1;</script></html>"
    )


def test_extract_player_response():
    assert extract_player_response(watch_page(PLAYER_RESPONSE)) == PLAYER_RESPONSE


def test_extract_handles_braces_inside_strings():
    data = {"videoDetails": {"title": "a };{ b"}}
    assert extract_player_response(watch_page(data)) == data


def test_extract_missing_raises():
    with pytest.raises(ValueError):
        extract_player_response("<html>nothing here</html>")


def test_parse_watch_page():
    metadata = parse_watch_page(watch_page(PLAYER_RESPONSE))

    assert metadata.video_id == "dQw4w9WgXcQ"
    assert metadata.title == "Never Gonna Give You Up"
    assert metadata.duration == 213
    assert metadata.view_count == 1_500_000_000
    assert metadata.upload_date == "2009-10-24"
    assert metadata.source == "relay"
    assert [t.quality for t in metadata.thumbnails] == ["default", "standard"]

    # ciphered format is skipped, order preserved
    assert [v.format_id for v in metadata.variants] == ["18", "140"]
    muxed, audio = metadata.variants
    assert muxed.is_combined
    assert muxed.audio_bitrate == 48
    assert muxed.content_length == 11_870_000
    assert audio.is_audio_only
    assert audio.audio_bitrate == 129


def test_unplayable_video_raises():
    data = {"playabilityStatus": {"status": "ERROR", "reason": "Video unavailable"}}
    with pytest.raises(ValueError, match="Video unavailable"):
        parse_watch_page(watch_page(data))


@pytest.mark.parametrize(
    "url,expected",
    [
        ("https://i.ytimg.com/vi/x/maxresdefault.jpg", "maxres"),
        ("https://i.ytimg.com/vi_webp/x/sddefault.webp", "standard"),
        ("https://i.ytimg.com/vi/x/hqdefault.jpg?sqp=abc", "high"),
        ("https://i.ytimg.com/vi/x/mqdefault.jpg", "medium"),
        ("https://i.ytimg.com/vi/x/default.jpg", "default"),
        ("https://i.ytimg.com/vi/x/hqdefault_live.jpg", "high"),
        ("https://i.ytimg.com/vi/x/frame0.jpg", None),
    ],
)
def test_thumbnail_quality(url, expected):
    assert thumbnail_quality(url) == expected


def test_past_livestream_is_not_live():
    details = {**PLAYER_RESPONSE["videoDetails"], "isLiveContent": True}
    metadata = parse_watch_page(watch_page({**PLAYER_RESPONSE, "videoDetails": details}))
    assert metadata.is_live is False


def test_current_livestream_is_live():
    details = {**PLAYER_RESPONSE["videoDetails"], "isLiveContent": True, "isLive": True}
    metadata = parse_watch_page(watch_page({**PLAYER_RESPONSE, "videoDetails": details}))
    assert metadata.is_live is True
