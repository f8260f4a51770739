"""
Aggregation Insights - Entity, country, word and topic extraction.

Static lookup tables and the helpers that turn one record into the
dimension values it contributes to.
"""

import re
from collections import defaultdict
from typing import Iterable

from sentiment.thresholds import SentimentCategory, categorize

from .models import DEFAULT_COUNTRY, ArticleRecord, TopicStat, WordStat


# ============================================================
# LOOKUP TABLES
# ============================================================

# Matched case-sensitively as whole words in headline + summary when an item has
# no entity tags of its own.
COMMON_ENTITIES = (
    "Intel", "Nvidia", "AMD", "Apple", "Microsoft", "Google", "Tesla",
    "Amazon", "Meta", "OpenAI", "Bitcoin", "Ethereum", "Crypto", "AI",
    "Fed", "China", "US", "UK", "EU", "Samsung", "TSMC", "Qualcomm",
    "Arm", "SoftBank", "Binance", "Coinbase", "Ripple", "Solana",
    "Cardano", "Polkadot",
)

SOURCE_COUNTRY_OVERRIDES = {
    "bbc news": "United Kingdom",
    "cnn": "United States",
    "reuters": "Global",
    "bloomberg": "United States",
    "techcrunch": "United States",
    "guardian": "United Kingdom",
    "cnbc": "United States",
    "the wall street journal": "United States",
}

TOPIC_KEYWORD_MAP = {
    "AI & Tech": (
        "ai", "artificial intelligence", "machine learning", "automation",
        "cloud", "semiconductor", "chip", "deep learning", "software",
        "hardware",
    ),
    "Climate & Energy": (
        "climate", "emissions", "energy", "green", "renewable", "carbon",
        "solar", "wind", "sustainability",
    ),
    "Economy & Markets": (
        "economy", "markets", "finance", "recession", "bank", "stocks",
        "investor", "inflation", "trade",
    ),
    "Policy & Politics": (
        "policy", "government", "election", "regulation", "law", "senate",
        "congress", "bill", "legislation",
    ),
    "Health & Science": (
        "health", "vaccine", "medical", "research", "science", "clinical",
        "hospital",
    ),
    "Geopolitics": (
        "geopolitic", "border", "war", "military", "defense", "sanction",
        "diplomatic",
    ),
}

STOP_WORDS = frozenset({
    "the", "and", "for", "are", "but", "not", "you", "all", "can", "her",
    "was", "one", "our", "out", "has", "had", "his", "how", "its", "may",
    "new", "now", "old", "see", "two", "who", "did", "get", "let", "put",
    "say", "she", "too", "use", "that", "with", "have", "this", "will",
    "your", "from", "they", "know", "want", "been", "good", "much", "some",
    "time", "very", "when", "come", "here", "just", "like", "long", "make",
    "many", "more", "only", "over", "such", "take", "than", "them", "well",
    "were", "what", "which", "while", "would", "there", "their", "about",
    "after", "could", "other", "these", "those", "into", "also", "said",
    "says", "year", "years", "news", "amp", "quot",
})

_WORD = re.compile(r"\b[a-zA-Z0-9]{3,}\b")

DEFAULT_WORD_LIMIT = 50


# ============================================================
# PER-RECORD EXTRACTION
# ============================================================

def _display_name(name: str) -> str:
    return name[:1].upper() + name[1:]


def _contains_entity(text: str, entity: str) -> bool:
    return re.search(rf"(?<![A-Za-z0-9]){re.escape(entity)}(?![A-Za-z0-9])", text) is not None


def record_entities(record: ArticleRecord, use_fallback: bool = True) -> list[tuple[str, str]]:
    """
    (key, display name) pairs for every distinct entity on a record.

    Keys are case-insensitive; the first spelling seen wins.
    """
    names = [e.strip() for e in record.entities if e and e.strip()]
    if not names and use_fallback:
        text = f"{record.headline} {record.summary}"
        names = [e for e in COMMON_ENTITIES if _contains_entity(text, e)]

    seen: dict[str, str] = {}
    for name in names:
        key = name.casefold()
        if key not in seen:
            seen[key] = _display_name(name)
    return list(seen.items())


def record_country(record: ArticleRecord) -> str:
    """Item country, else a known source country, else Global."""
    if record.country and record.country.strip():
        return record.country.strip()
    override = SOURCE_COUNTRY_OVERRIDES.get(record.source_name.strip().lower())
    return override or DEFAULT_COUNTRY


def record_words(record: ArticleRecord) -> set[str]:
    """Distinct non-stop words (>= 3 chars) in headline + summary."""
    text = f"{record.headline} {record.summary}".lower()
    return {w for w in _WORD.findall(text) if w not in STOP_WORDS}


def _starts_word(text: str, keyword: str) -> bool:
    return re.search(rf"(?<![a-z0-9]){re.escape(keyword)}", text) is not None


def record_topics(record: ArticleRecord) -> list[str]:
    """Topics whose keywords start a word in the record text."""
    text = f"{record.headline} {record.summary} {record.content}".lower()
    return [
        topic for topic, keywords in TOPIC_KEYWORD_MAP.items()
        if any(_starts_word(text, keyword) for keyword in keywords)
    ]


# ============================================================
# CROSS-RECORD STATS
# ============================================================

def compute_word_stats(
    records: Iterable[ArticleRecord],
    limit: int = DEFAULT_WORD_LIMIT,
) -> list[WordStat]:
    """Most frequent words, each counted once per record."""
    counts: dict[str, list] = defaultdict(lambda: [0, 0.0, 0, 0, 0])

    for record in records:
        if record.final_score is None:
            continue
        category = categorize(record.final_score)
        for word in record_words(record):
            entry = counts[word]
            entry[0] += 1
            entry[1] += record.final_score
            if category == SentimentCategory.POSITIVE:
                entry[2] += 1
            elif category == SentimentCategory.NEGATIVE:
                entry[3] += 1
            else:
                entry[4] += 1

    stats = [
        WordStat(word, c[0], c[1], c[2], c[3], c[4])
        for word, c in counts.items()
    ]
    stats.sort(key=lambda s: (-s.count, s.word))
    return stats[:max(0, limit)]


def compute_topic_stats(records: Iterable[ArticleRecord]) -> list[TopicStat]:
    """Mean sentiment per keyword topic, skipping topics with no hits."""
    totals: dict[str, list] = {topic: [0, 0.0] for topic in TOPIC_KEYWORD_MAP}

    for record in records:
        if record.final_score is None:
            continue
        for topic in record_topics(record):
            totals[topic][0] += 1
            totals[topic][1] += record.final_score

    stats = [
        TopicStat(topic, count, total / count)
        for topic, (count, total) in totals.items()
        if count
    ]
    stats.sort(key=lambda s: (-s.count, s.name))
    return stats
