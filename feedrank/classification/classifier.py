"""
Clip Classifier.

Maps a clip to a single category tag. The category feed filter depends only
on the `ClipClassifier` contract, so implementations can be swapped without
touching the ranking engines.
"""

import json
import logging
from typing import Dict, Iterable, List, Optional, Protocol, Tuple

import google.generativeai as genai

import config.settings as settings
from feedrank.models.clip import Clip

logger = logging.getLogger(__name__)


class ClipClassifier(Protocol):
    """Anything that can assign a category tag to a clip."""

    def classify(self, clip: Clip) -> Optional[str]:
        ...


DEFAULT_CATEGORY_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "comedy": ("funny", "joke", "laugh", "comedy", "lol", "prank"),
    "music": ("music", "song", "sing", "beat", "melody", "guitar", "rap"),
    "news": ("news", "breaking", "update", "politics", "election", "report"),
    "sports": ("sport", "football", "soccer", "basketball", "match", "game day"),
    "tech": ("tech", "code", "software", "startup", "gadget", "artificial intelligence"),
    "stories": ("story", "storytime", "happened", "remember when", "confession"),
}


def _clip_text(clip: Clip) -> str:
    parts = [clip.title, clip.captions, clip.summary, " ".join(clip.tags)]
    return " ".join(part for part in parts if part).lower()


class KeywordClassifier:
    """
    Keyword substring classifier.

    Categories are checked in insertion order; the first category with any
    keyword present in the clip's title, captions, summary or tags wins.
    """

    def __init__(self, category_keywords: Optional[Dict[str, Iterable[str]]] = None):
        keywords = category_keywords if category_keywords is not None else DEFAULT_CATEGORY_KEYWORDS
        self.category_keywords: Dict[str, Tuple[str, ...]] = {
            category: tuple(k.lower() for k in words)
            for category, words in keywords.items()
        }

    @property
    def categories(self) -> List[str]:
        return list(self.category_keywords)

    def classify(self, clip: Clip) -> Optional[str]:
        text = _clip_text(clip)
        if not text:
            return None

        for category, keywords in self.category_keywords.items():
            if any(keyword in text for keyword in keywords):
                return category
        return None


SYSTEM_PROMPT = """You are a content assistant that files short audio clips into categories.

Your task:
1. Read the clip's title, captions, summary and tags
2. Pick the single best category from the allowed list
3. If no category fits, answer null

Output valid JSON only."""


def _construct_user_prompt(clip: Clip, categories: List[str]) -> str:
    """Construct user prompt from clip text."""
    return f"""Title: "{clip.title or ''}"
Captions: "{clip.captions or ''}"
Summary: "{clip.summary or ''}"
Tags: {", ".join(clip.tags) or "none"}
Allowed categories: {", ".join(categories)}

Answer as JSON:
{{
  "category": "<one of the allowed categories or null>"
}}"""


class GeminiClipClassifier:
    """
    LLM-backed classifier using Gemini.

    Performs network I/O, so callers run it ahead of ranking (for example
    while ingesting clips) and pass the cached result through a classifier
    of their own, or pass this instance for small offline batches.
    """

    def __init__(
        self,
        api_key: str,
        categories: Optional[List[str]] = None,
        model_name: str = settings.CLASSIFIER_MODEL,
        temperature: float = settings.CLASSIFIER_TEMPERATURE,
        max_retries: int = settings.CLASSIFIER_MAX_RETRIES
    ):
        """
        Initialize classifier.

        Args:
            api_key: Gemini API key
            categories: Allowed category tags (default: keyword classifier categories)
            model_name: Gemini model to use
            temperature: LLM temperature (0.0 for deterministic)
            max_retries: Number of attempts per clip
        """
        self.categories = list(categories or DEFAULT_CATEGORY_KEYWORDS)
        self.model_name = model_name
        self.max_retries = max_retries

        genai.configure(api_key=api_key)
        self.model = genai.GenerativeModel(
            model_name=model_name,
            generation_config={
                "temperature": temperature,
                "response_mime_type": "application/json"
            },
            system_instruction=SYSTEM_PROMPT
        )

        logger.info(f"Initialized GeminiClipClassifier with model={model_name}, categories={len(self.categories)}")

    def classify(self, clip: Clip) -> Optional[str]:
        """
        Classify a clip, returning None when the text is empty or every attempt fails.
        """
        if not _clip_text(clip):
            logger.debug(f"No text to classify for clip {clip.clip_id}")
            return None

        user_prompt = _construct_user_prompt(clip, self.categories)

        for attempt in range(self.max_retries):
            try:
                response = self.model.generate_content(user_prompt)
                return self._parse_llm_response(response.text, clip.clip_id)

            except json.JSONDecodeError as e:
                logger.error(f"Failed to parse classifier JSON (attempt {attempt + 1}): {e}")
            except Exception as e:
                logger.error(f"Classifier API error (attempt {attempt + 1}): {e}")

        logger.warning(f"Max retries reached for clip {clip.clip_id}, leaving it unclassified")
        return None

    def _parse_llm_response(self, response_text: str, clip_id: str) -> Optional[str]:
        """
        Parse the JSON answer into an allowed category.

        Raises:
            json.JSONDecodeError: If response is not valid JSON
        """
        data = json.loads(response_text)
        category = data.get("category") if isinstance(data, dict) else None

        if category is None:
            return None

        category = str(category).strip().lower()
        if category not in self.categories:
            logger.warning(f"Classifier returned unknown category '{category}' for {clip_id}")
            return None
        return category
