"""
Seed Learning Catalog Script
This script loads subjects, topics and videos from lumos/data/catalog.json.
Existing rows are matched by name (subjects, topics) or YouTube id (videos) and updated.
"""

import json
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from lumos.database.supabase_client import get_service_supabase
from lumos.modules.resources.service import parse_clock
from lumos.modules.videos.youtube_client import extract_video_id
from supabase import Client
import logging

logger = logging.getLogger(__name__)

CATALOG_PATH = Path(__file__).resolve().parent.parent / "data" / "catalog.json"


def load_catalog(path: Path = CATALOG_PATH) -> Dict[str, Any]:
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def _upsert(supabase: Client, table: str, match: Dict[str, Any], values: Dict[str, Any]) -> Optional[str]:
    """Update the row matching `match` or insert a new one; returns the row id"""
    query = supabase.table(table).select("id")
    for column, value in match.items():
        query = query.eq(column, value)
    existing = query.limit(1).execute()
    if existing.data:
        row_id = existing.data[0]["id"]
        supabase.table(table).update(values).eq("id", row_id).execute()
        return row_id
    result = supabase.table(table).insert({**match, **values}).execute()
    return result.data[0]["id"] if result.data else None


def seed_catalog(supabase: Client, catalog: Dict[str, Any]) -> Dict[str, int]:
    """Write the catalog; returns counts per table"""
    counts = {"subjects": 0, "topics": 0, "videos": 0}
    for slug, subject in (catalog.get("subjects") or {}).items():
        try:
            subject_id = _upsert(supabase, "subjects", {"name": subject["name"]}, {
                "icon": subject.get("icon"),
                "color": subject.get("color"),
                "description": subject.get("description"),
            })
        except Exception as e:
            logger.error(f"Error seeding subject {slug}: {e}")
            continue
        counts["subjects"] += 1

        for topic_slug, topic in (subject.get("topics") or {}).items():
            try:
                topic_id = _upsert(supabase, "topics", {"subject_id": subject_id, "name": topic["name"]}, {
                    "description": topic.get("description"),
                    "difficulty_level": topic.get("difficulty_level", "beginner"),
                })
            except Exception as e:
                logger.error(f"Error seeding topic {slug}/{topic_slug}: {e}")
                continue
            counts["topics"] += 1

            for video in topic.get("videos") or []:
                youtube_id = video.get("youtube_id") or extract_video_id(video.get("url", ""))
                if not youtube_id:
                    logger.warning(f"Skipping video without a YouTube id: {video.get('title')}")
                    continue
                try:
                    _upsert(supabase, "videos", {"topic_id": topic_id, "youtube_id": youtube_id}, {
                        "title": video["title"],
                        "description": video.get("description"),
                        "duration": parse_clock(video.get("duration")),
                        "difficulty": video.get("difficulty", "beginner"),
                        "source": video.get("source"),
                    })
                    counts["videos"] += 1
                except Exception as e:
                    logger.error(f"Error seeding video {youtube_id}: {e}")

    logger.info(f"Catalog seeded: {counts['subjects']} subjects, {counts['topics']} topics, {counts['videos']} videos")
    return counts


def main():
    logging.basicConfig(level=logging.INFO)
    try:
        seed_catalog(get_service_supabase(), load_catalog())
    except Exception as e:
        logger.error(f"Error during seeding: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
