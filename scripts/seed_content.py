#!/usr/bin/env python3
"""
Seed the content store with sample articles and videos.

Usage:
    python scripts/seed_content.py [--clear] [--data-dir DATA_DIR]
"""

import argparse
import json
import logging
import re
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List

# Allow running from a checkout without installing
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from config_manager import ConfigManager
from membership_service.document_store import JsonDocumentStore
from portal.content.models import Article, Video
from portal.content.repository import ContentRepository

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")

SAMPLE_ARTICLES: List[Dict[str, Any]] = [
    {
        "title": "Getting Started with Type Hints",
        "slug": "getting-started-type-hints",
        "preview": "How optional static typing makes Python code easier to read and refactor.",
        "content": (
            "# Getting Started with Type Hints\n\n"
            "Type hints document what a function expects and returns.\n\n"
            "## A first example\n\n"
            "```python\n"
            "def greet(name: str) -> str:\n"
            "    return f\"Hello, {name}!\"\n"
            "```\n\n"
            "Run a checker such as mypy to catch mismatches before they reach production.\n"
        ),
        "coverImage": "https://images.unsplash.com/photo-1516116216624-53e697fedbea?w=800",
        "author": "Sarah Chen",
    },
    {
        "title": "Building JSON APIs with Flask",
        "slug": "building-json-apis-flask",
        "preview": "Blueprints, error handlers and application factories for small, testable APIs.",
        "content": (
            "# Building JSON APIs with Flask\n\n"
            "Group related endpoints in a blueprint and register it from an application factory.\n\n"
            "| Concern | Flask feature |\n"
            "|---|---|\n"
            "| Routing | `Blueprint.route` |\n"
            "| Errors | `app.errorhandler` |\n"
            "| Config | `app.config` |\n\n"
            "Return `jsonify(...)` with an explicit status code for anything but 200.\n"
        ),
        "coverImage": "https://images.unsplash.com/photo-1555066931-4365d14bab8c?w=800",
        "author": "Michael Roberts",
    },
    {
        "title": "Understanding Python Generators",
        "slug": "understanding-python-generators",
        "preview": "Lazy iteration with yield, and when it beats building a list.",
        "content": (
            "# Understanding Python Generators\n\n"
            "A generator function returns an iterator that produces values on demand.\n\n"
            "```python\n"
            "def countdown(n):\n"
            "    while n > 0:\n"
            "        yield n\n"
            "        n -= 1\n"
            "```\n\n"
            "Generators keep memory flat when processing large files line by line.\n"
        ),
        "coverImage": "https://images.unsplash.com/photo-1633356122544-f134324a6cee?w=800",
        "author": "Emily Johnson",
    },
    {
        "title": "Data Modelling with Pydantic",
        "slug": "data-modelling-pydantic",
        "preview": "Validate untrusted input at the edges of your application.",
        "content": (
            "# Data Modelling with Pydantic\n\n"
            "Declare fields with types and let the model validate incoming data.\n\n"
            "```python\n"
            "class User(BaseModel):\n"
            "    email: str\n"
            "    display_name: str\n"
            "```\n\n"
            "Use `model_validate` for dictionaries and `model_dump` to serialize.\n"
        ),
        "coverImage": "https://images.unsplash.com/photo-1544383835-bda2bc66a55d?w=800",
        "author": "David Kim",
    },
    {
        "title": "Testing with pytest",
        "slug": "testing-with-pytest",
        "preview": "Fixtures, parametrization and temporary directories for reliable tests.",
        "content": (
            "# Testing with pytest\n\n"
            "Plain `assert` statements give detailed failure output.\n\n"
            "- Use `tmp_path` for filesystem tests\n"
            "- Use `pytest.raises` for expected exceptions\n"
            "- Use `unittest.mock.patch` to isolate network calls\n"
        ),
        "coverImage": "https://images.unsplash.com/photo-1461749280684-dccba630e2f6?w=800",
        "author": "Lisa Wang",
    },
    {
        "title": "Password Storage Done Right",
        "slug": "password-storage-done-right",
        "preview": "Why slow, salted hashes such as bcrypt are the baseline for storing credentials.",
        "content": (
            "# Password Storage Done Right\n\n"
            "Never store plain-text passwords. Hash them with a deliberately slow algorithm.\n\n"
            "```python\n"
            "hashed = bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=12))\n"
            "```\n\n"
            "Raise the cost factor as hardware gets faster.\n"
        ),
        "coverImage": "https://images.unsplash.com/photo-1563986768609-322da13575f3?w=800",
        "author": "Alex Thompson",
    },
]

SAMPLE_VIDEOS: List[Dict[str, Any]] = [
    {
        "title": "Python Crash Course",
        "slug": "python-crash-course",
        "description": "The core language in one sitting: types, functions, classes and modules.",
        "thumbnail": "https://images.unsplash.com/photo-1526379095098-d400fd0bf935?w=800",
        "videoUrl": "https://www.youtube.com/embed/rfscVS0vtbw",
        "duration": 2640,
        "author": "Sarah Chen",
    },
    {
        "title": "Flask in 30 Minutes",
        "slug": "flask-in-30-minutes",
        "description": "From an empty folder to a JSON API with routes, errors and tests.",
        "thumbnail": "https://images.unsplash.com/photo-1555066931-4365d14bab8c?w=800",
        "videoUrl": "https://www.youtube.com/embed/Z1RJmh_OqeA",
        "duration": 1800,
        "author": "Michael Roberts",
    },
    {
        "title": "Async IO Explained",
        "slug": "async-io-explained",
        "description": "Event loops, coroutines and tasks, with practical examples.",
        "thumbnail": "https://images.unsplash.com/photo-1504639725590-34d0984388bd?w=800",
        "videoUrl": "https://www.youtube.com/embed/t5Bo1Je9EmE",
        "duration": 1320,
        "author": "Emily Johnson",
    },
    {
        "title": "Packaging Python Projects",
        "slug": "packaging-python-projects",
        "description": "pyproject.toml, build backends and publishing to an index.",
        "thumbnail": "https://images.unsplash.com/photo-1515879218367-8466d910aaa4?w=800",
        "videoUrl": "https://www.youtube.com/embed/v6tALyc4C10",
        "duration": 960,
        "author": "David Kim",
    },
]


def _non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and len(value.strip()) > 0


def validate_article(article: Dict[str, Any]) -> bool:
    """True if a sample article has every required field."""
    return (
        all(_non_empty_str(article.get(k)) for k in ("title", "slug", "preview", "content", "author"))
        and bool(SLUG_PATTERN.match(article["slug"]))
    )


def validate_video(video: Dict[str, Any]) -> bool:
    """True if a sample video has every required field and a positive duration."""
    duration = video.get("duration")
    return (
        all(_non_empty_str(video.get(k)) for k in ("title", "slug", "description", "thumbnail", "videoUrl", "author"))
        and bool(SLUG_PATTERN.match(video["slug"]))
        and isinstance(duration, int) and not isinstance(duration, bool) and duration > 0
    )


def seed_content(repository: ContentRepository, clear: bool = False,
                 articles: List[Dict[str, Any]] = None,
                 videos: List[Dict[str, Any]] = None,
                 now: datetime = None) -> Dict[str, Any]:
    """
    Write sample content. Invalid samples are skipped and reported.

    Items are published one day apart, newest first, so list ordering is
    stable. Ids are the slugs, so reseeding overwrites rather than duplicates.
    """
    articles = SAMPLE_ARTICLES if articles is None else articles
    videos = SAMPLE_VIDEOS if videos is None else videos
    now = now or datetime.now(timezone.utc)

    result = {"cleared": None, "articles": 0, "videos": 0, "skipped": []}
    if clear:
        result["cleared"] = repository.clear()

    for index, sample in enumerate(articles):
        if not validate_article(sample):
            logger.warning(f"Skipping invalid article: {sample.get('slug') or sample.get('title')!r}")
            result["skipped"].append(sample.get("slug"))
            continue
        published_at = now - timedelta(days=index)
        repository.save_article(Article.model_validate({
            **sample,
            "id": sample["slug"],
            "publishedAt": published_at,
            "createdAt": now,
            "updatedAt": now,
        }))
        result["articles"] += 1

    for index, sample in enumerate(videos):
        if not validate_video(sample):
            logger.warning(f"Skipping invalid video: {sample.get('slug') or sample.get('title')!r}")
            result["skipped"].append(sample.get("slug"))
            continue
        published_at = now - timedelta(days=index)
        repository.save_video(Video.model_validate({
            **sample,
            "id": sample["slug"],
            "publishedAt": published_at,
            "createdAt": now,
            "updatedAt": now,
        }))
        result["videos"] += 1

    logger.info(f"Seeded {result['articles']} articles and {result['videos']} videos")
    return result


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Seed sample articles and videos")
    parser.add_argument("--config", default="web_app_config.json",
                        help="Path to the JSON config file")
    parser.add_argument("--data-dir", type=Path,
                        help="Data directory (defaults to the configured one)")
    parser.add_argument("--clear", action="store_true",
                        help="Remove existing articles and videos first")
    args = parser.parse_args(argv)

    data_dir = args.data_dir or Path(ConfigManager(args.config).get_paths_config().data_dir)
    repository = ContentRepository(JsonDocumentStore(data_dir))

    result = seed_content(repository, clear=args.clear)
    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0 if not result["skipped"] else 1


if __name__ == "__main__":
    sys.exit(main())
