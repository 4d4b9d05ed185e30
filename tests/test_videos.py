import asyncio

import httpx
import pytest

from lumos.main import app
from lumos.modules.videos.routes import get_video_service
from lumos.modules.videos.service import VideoService, to_video_summary
from lumos.modules.videos.youtube_client import (
    YouTubeClient, extract_video_id, parse_duration, thumbnail_url, embed_url
)

YOUTUBE_ITEM = {
    "items": [{
        "snippet": {
            "title": "Essence of calculus",
            "description": "The goal here is to make calculus feel like something you could have discovered.",
            "channelTitle": "3Blue1Brown",
            "publishedAt": "2017-04-28T15:00:00Z",
            "thumbnails": {"high": {"url": "https://i.ytimg.com/vi/WUvTyaaNkzM/hqdefault.jpg"}},
        },
        "contentDetails": {"duration": "PT17M5S"},
        "statistics": {"viewCount": "9000000", "likeCount": "200000"},
    }]
}


def youtube(status_code=200, payload=None):
    def handler(request):
        return httpx.Response(status_code, json=payload if payload is not None else YOUTUBE_ITEM)

    return YouTubeClient(api_key="yt-key", transport=httpx.MockTransport(handler))


@pytest.mark.parametrize("url,video_id", [
    ("https://www.youtube.com/watch?v=WUvTyaaNkzM", "WUvTyaaNkzM"),
    ("https://youtu.be/WUvTyaaNkzM?t=42", "WUvTyaaNkzM"),
    ("https://www.youtube.com/embed/WUvTyaaNkzM", "WUvTyaaNkzM"),
    ("https://www.youtube.com/watch?feature=share&v=WUvTyaaNkzM", "WUvTyaaNkzM"),
    ("https://vimeo.com/123", None),
])
def test_extract_video_id(url, video_id):
    assert extract_video_id(url) == video_id


@pytest.mark.parametrize("iso,label", [
    ("PT17M5S", "17:05"),
    ("PT1H2M3S", "1:02:03"),
    ("PT45S", "0:45"),
    ("", "0:00"),
    (None, "0:00"),
])
def test_parse_duration(iso, label):
    assert parse_duration(iso) == label


def test_urls():
    assert thumbnail_url("abc") == "https://img.youtube.com/vi/abc/maxresdefault.jpg"
    assert thumbnail_url("abc", quality="hq") == "https://img.youtube.com/vi/abc/hqdefault.jpg"
    assert embed_url("abc") == "https://www.youtube.com/embed/abc"


def test_video_data_from_api():
    video = asyncio.run(youtube().get_video_data("WUvTyaaNkzM"))
    assert video.title == "Essence of calculus"
    assert video.duration == "17:05"
    assert video.thumbnail.endswith("hqdefault.jpg")
    assert video.view_count == "9000000"


def test_video_data_failures():
    assert asyncio.run(youtube(status_code=403).get_video_data("x")) is None
    assert asyncio.run(youtube(payload={"items": []}).get_video_data("x")) is None

    placeholder = asyncio.run(YouTubeClient(api_key="").get_video_data("abc"))
    assert placeholder.title == "YouTube Video"
    assert placeholder.channel_title == "Unknown Channel"


def test_summary_accepts_camel_case_and_fixes_difficulty():
    summary = to_video_summary({
        "keyPoints": ["Derivatives as rates"],
        "learningObjectives": ["Read a derivative graph"],
        "difficulty": "expert",
        "summary": "Calculus intuition.",
        "basis": "description",
        "confidence": 0.9,
    }, duration="17:05")
    assert summary.key_points == ["Derivatives as rates"]
    assert summary.difficulty == "beginner"
    assert summary.estimated_duration == "17:05"

    fallback = to_video_summary(None, duration="5:00")
    assert fallback.key_points == ["Content analysis not available"]
    assert to_video_summary({"confidence": 7}).summary == fallback.summary


@pytest.fixture
def video_client(client, openrouter):
    app.dependency_overrides[get_video_service] = lambda: VideoService(openrouter.client(), youtube())
    return client


def test_lookup_route(video_client, openrouter):
    openrouter.reply = '{"key_points": ["Limits"], "learning_objectives": ["Explain a derivative"], ' \
                       '"difficulty": "beginner", "estimated_duration": "30-45 minutes", "prerequisites": [], ' \
                       '"summary": "Intro to calculus.", "basis": "description", "confidence": 0.8}'
    response = video_client.post("/api/videos/lookup", json={"url": "https://youtu.be/WUvTyaaNkzM"})
    assert response.status_code == 200
    body = response.json()
    assert body["video"]["channel_title"] == "3Blue1Brown"
    assert body["summary"]["key_points"] == ["Limits"]
    assert "Essence of calculus" in openrouter.requests[0]["messages"][1]["content"]


def test_lookup_rejects_other_urls(video_client):
    response = video_client.post("/api/videos/lookup", json={"url": "https://example.com/watch"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid YouTube URL"


def test_lookup_survives_summary_failure(video_client, openrouter):
    openrouter.status_code = 500
    body = video_client.post("/api/videos/lookup", json={"url": "https://youtu.be/WUvTyaaNkzM"}).json()
    assert body["summary"] is None


def test_get_video_route(video_client):
    assert video_client.get("/api/videos/WUvTyaaNkzM").json()["duration"] == "17:05"


def test_generate_summary_route(video_client, openrouter):
    openrouter.reply = "not json at all"
    response = video_client.post("/api/generate-video-summary", json={
        "title": "Essence of calculus", "description": "Calculus", "channelTitle": "3Blue1Brown",
    })
    assert response.status_code == 200
    assert response.json()["summary"] == "This video covers various topics. Watch to learn more."

    missing = video_client.post("/api/generate-video-summary", json={"title": "Only title"})
    assert missing.status_code == 400
    assert missing.json()["detail"] == "Title and description are required"

    openrouter.status_code = 401
    failed = video_client.post("/api/generate-video-summary", json={"title": "t", "description": "d"})
    assert failed.status_code == 500
    assert failed.json()["detail"] == "Failed to generate video summary"


def test_generate_summary_needs_api_key(client, openrouter):
    app.dependency_overrides[get_video_service] = lambda: VideoService(openrouter.client(api_key=""), youtube())
    response = client.post("/api/generate-video-summary", json={"title": "t", "description": "d"})
    assert response.status_code == 500
    assert response.json()["detail"] == "OpenRouter API key not configured"
    assert openrouter.requests == []
