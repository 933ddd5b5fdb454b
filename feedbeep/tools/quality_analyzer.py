"""
Deterministic content quality scoring for rewritten articles.

The composite score is built from five parts:
- word count (20 points)
- Flesch Reading Ease readability (25 points)
- content features: quotes, numbers, links (5 points each)
- title quality (20 points, scaled from its own 0-100 score)
- summary quality (20 points, scaled from its own 0-100 score)
"""
import math
import re
from typing import List

from feedbeep.models.items import FieldQuality, QualityAnalysis, QualityLevel, RewrittenArticle

CLICKBAIT_MARKERS = ("clickbait", "shocking", "amazing", "you won't believe")

_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")
_SENTENCE_TERMINATED_RE = re.compile(r"[^.!?]+[.!?]+")
_NON_LETTER_RE = re.compile(r"[^a-z]")
_VOWEL_GROUP_RE = re.compile(r"[aeiouy]+")
_QUOTE_RE = re.compile(r"[\"'“”].*[\"'“”]")
_DIGIT_RE = re.compile(r"\d")
_LINK_RE = re.compile(r"https?://\S+")
_UPPER_RE = re.compile(r"[A-Z]")


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class ContentQualityAnalyzer:
    def __init__(self, min_word_count: int = 100, max_word_count: int = 5000,
                 min_readability_score: float = 30, min_overall_score: int = 50):
        self.min_word_count = min_word_count
        self.max_word_count = max_word_count
        self.min_readability_score = min_readability_score
        self.min_overall_score = min_overall_score

    def analyze(self, article: RewrittenArticle) -> QualityAnalysis:
        body = article.body or ""
        word_count = self.word_count(body)
        readability = self.readability(body)
        has_quotes = self.has_quotes(body)
        has_numbers = self.has_numbers(body)
        has_links = self.has_links(body)
        title_quality = self.analyze_title(article.title)
        summary_quality = self.analyze_summary(article.summary)

        overall = self.overall_score(
            word_count, readability, has_quotes, has_numbers, has_links,
            title_quality, summary_quality,
        )

        return QualityAnalysis(
            word_count=word_count,
            readability_score=readability,
            has_quotes=has_quotes,
            has_numbers=has_numbers,
            has_links=has_links,
            title_quality=title_quality,
            summary_quality=summary_quality,
            overall_score=overall,
            quality_level=self.quality_level(overall),
            issues=self.identify_issues(
                word_count, readability, has_quotes, has_numbers,
                title_quality, summary_quality,
            ),
        )

    # --- text features ---

    @staticmethod
    def word_count(text: str) -> int:
        if not text:
            return 0
        return len(text.split())

    @staticmethod
    def count_syllables(text: str) -> int:
        """Approximate: short words are one syllable, longer ones count vowel groups."""
        if not text:
            return 0
        total = 0
        for word in text.lower().split():
            word = _NON_LETTER_RE.sub("", word)
            if len(word) <= 3:
                total += 1
            else:
                total += len(_VOWEL_GROUP_RE.findall(word))
        return total

    def readability(self, text: str) -> float:
        """Flesch Reading Ease clamped to [0, 100]; 0 for text without words or sentences."""
        if not text:
            return 0.0
        sentences = [s for s in _SENTENCE_SPLIT_RE.split(text) if s.strip()]
        words = text.split()
        if not sentences or not words:
            return 0.0

        avg_sentence_length = len(words) / len(sentences)
        avg_syllables_per_word = self.count_syllables(text) / len(words)
        score = 206.835 - (1.015 * avg_sentence_length) - (84.6 * avg_syllables_per_word)
        return max(0.0, min(100.0, score))

    @staticmethod
    def has_quotes(text: str) -> bool:
        return bool(text and _QUOTE_RE.search(text))

    @staticmethod
    def has_numbers(text: str) -> bool:
        return bool(text and _DIGIT_RE.search(text))

    @staticmethod
    def has_links(text: str) -> bool:
        return bool(text and _LINK_RE.search(text))

    # --- field quality ---

    @staticmethod
    def analyze_title(title: str) -> FieldQuality:
        if not title:
            return FieldQuality(score=0, issues=["Missing title"])

        issues: List[str] = []
        score = 100
        if len(title) < 10:
            issues.append("Title too short")
            score -= 30
        if len(title) > 100:
            issues.append("Title too long")
            score -= 20
        if not _UPPER_RE.search(title):
            issues.append("Title lacks proper capitalization")
            score -= 15
        lowered = title.lower()
        if any(marker in lowered for marker in CLICKBAIT_MARKERS):
            issues.append("Title may be clickbait")
            score -= 25

        return FieldQuality(score=max(0, score), issues=issues)

    @staticmethod
    def analyze_summary(summary: str) -> FieldQuality:
        if not summary:
            return FieldQuality(score=0, issues=["Missing summary"])

        issues: List[str] = []
        score = 100
        if len(summary) < 50:
            issues.append("Summary too short")
            score -= 30
        if len(summary) > 300:
            issues.append("Summary too long")
            score -= 20
        sentences = [s for s in _SENTENCE_TERMINATED_RE.findall(summary) if s.strip(" \t\n.!?")]
        if len(sentences) < 2:
            issues.append("Summary should have multiple sentences")
            score -= 15

        return FieldQuality(score=max(0, score), issues=issues)

    # --- aggregation ---

    def overall_score(self, word_count: int, readability: float, has_quotes: bool,
                      has_numbers: bool, has_links: bool,
                      title_quality: FieldQuality, summary_quality: FieldQuality) -> int:
        score = 0.0

        if self.min_word_count <= word_count <= self.max_word_count:
            score += 20
        elif word_count > self.min_word_count:
            score += 10

        if readability >= self.min_readability_score:
            score += 25
        elif readability >= 20:
            score += 15

        score += 5 * sum((has_quotes, has_numbers, has_links))
        score += (title_quality.score / 100) * 20
        score += (summary_quality.score / 100) * 20

        return _round_half_up(score)

    @staticmethod
    def quality_level(score: int) -> QualityLevel:
        if score >= 80:
            return QualityLevel.EXCELLENT
        if score >= 60:
            return QualityLevel.GOOD
        if score >= 40:
            return QualityLevel.FAIR
        return QualityLevel.POOR

    def identify_issues(self, word_count: int, readability: float, has_quotes: bool,
                        has_numbers: bool, title_quality: FieldQuality,
                        summary_quality: FieldQuality) -> List[str]:
        issues = []
        if word_count < self.min_word_count:
            issues.append(f"Content too short ({word_count} words, minimum {self.min_word_count})")
        if word_count > self.max_word_count:
            issues.append(f"Content too long ({word_count} words, maximum {self.max_word_count})")
        if readability < self.min_readability_score:
            issues.append(f"Low readability score ({readability:.1f}, minimum {self.min_readability_score})")
        if not has_quotes:
            issues.append("No quotes found in content")
        if not has_numbers:
            issues.append("No specific numbers or data found")
        issues.extend(title_quality.issues)
        issues.extend(summary_quality.issues)
        return issues

    def meets_quality_standards(self, analysis: QualityAnalysis) -> bool:
        return analysis.overall_score >= self.min_overall_score and analysis.word_count >= self.min_word_count
