import logging
from typing import Any, Optional

from pydantic import ValidationError

from lumos.core.json_utils import extract_json
from lumos.modules.llm.openrouter_client import OpenRouterClient
from lumos.modules.videos.schemas import VideoData, VideoSummary
from lumos.modules.videos.youtube_client import YouTubeClient

logger = logging.getLogger(__name__)

DESCRIPTION_LIMIT = 2000

SUMMARY_SYSTEM_PROMPT = (
    "You are an expert educational content analyzer. Summarize what the given YouTube video "
    "actually teaches, using its title and description rather than generic study advice. "
    "Respond only with valid JSON."
)

SUMMARY_PROMPT = """Summarize what this YouTube video teaches a student.

Title: "{title}"
Channel: "{channel}"
Duration: "{duration}"
Description:
\"\"\"
{description}
\"\"\"

If the description has content-specific detail, ground the summary in it and set "basis" to "description".
Otherwise give a topic-level summary from the title, set "basis" to "title_only", confidence 0.3-0.6,
and begin the summary with "Based on the title". Do not invent names or numbers.

Difficulty: beginner (foundations), intermediate (applies concepts), advanced (technical or proof heavy).
Estimated duration: realistic time to grasp the content including pauses and notes, e.g. "30-45 minutes".

Return ONLY this JSON:
{{
  "key_points": ["3-6 concepts covered"],
  "learning_objectives": ["3-6 learner outcomes"],
  "difficulty": "beginner" | "intermediate" | "advanced",
  "estimated_duration": "30-45 minutes",
  "prerequisites": [],
  "summary": "2-3 sentences",
  "basis": "description" | "title_only",
  "confidence": 0.0
}}"""


def fallback_summary(duration: Optional[str] = None) -> VideoSummary:
    return VideoSummary(
        key_points=["Content analysis not available"],
        learning_objectives=["Watch the video to learn"],
        difficulty="beginner",
        estimated_duration=duration,
        prerequisites=[],
        summary="This video covers various topics. Watch to learn more.",
    )


def to_video_summary(parsed: Any, duration: Optional[str] = None) -> VideoSummary:
    """Validate model output; camelCase keys are accepted too"""
    if not isinstance(parsed, dict):
        return fallback_summary(duration)
    renames = {
        "keyPoints": "key_points",
        "learningObjectives": "learning_objectives",
        "estimatedDuration": "estimated_duration",
    }
    data = {renames.get(k, k): v for k, v in parsed.items()}
    data.setdefault("estimated_duration", duration)
    if data.get("difficulty") not in ("beginner", "intermediate", "advanced"):
        data["difficulty"] = "beginner"
    try:
        return VideoSummary(**data)
    except ValidationError as e:
        logger.warning(f"Video summary did not validate: {e.error_count()} error(s)")
        return fallback_summary(duration)


class VideoService:
    def __init__(self, client: Optional[OpenRouterClient] = None, youtube: Optional[YouTubeClient] = None):
        self.client = client or OpenRouterClient()
        self.youtube = youtube or YouTubeClient()

    async def get_video(self, video_id: str) -> Optional[VideoData]:
        return await self.youtube.get_video_data(video_id)

    async def summarize(
        self,
        title: str,
        description: str,
        duration: Optional[str] = None,
        channel_title: Optional[str] = None,
    ) -> VideoSummary:
        """Learning summary from the model; OpenRouterError propagates, bad output falls back"""
        prompt = SUMMARY_PROMPT.format(
            title=title,
            channel=channel_title or "Unknown Channel",
            duration=duration or "unknown",
            description=description[:DESCRIPTION_LIMIT],
        )
        text = await self.client.complete(
            [{"role": "system", "content": SUMMARY_SYSTEM_PROMPT}, {"role": "user", "content": prompt}],
            temperature=0.7,
            max_tokens=1000,
        )
        if not text:
            logger.warning("Empty video summary from model, using fallback")
            return fallback_summary(duration)
        return to_video_summary(extract_json(text), duration)

    async def summarize_video(self, video: VideoData) -> Optional[VideoSummary]:
        try:
            return await self.summarize(video.title, video.description, video.duration, video.channel_title)
        except Exception as e:
            logger.error(f"Error generating video summary for {video.id}: {e}")
            return None
