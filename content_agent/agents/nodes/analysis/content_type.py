"""
Keyword and pattern scoring to classify what kind of content a prompt asks for.

Each keyword found adds 1 to its type's score, each matching pattern adds 2.
The highest-scoring type wins; no match at all means ``general``.
"""

from typing import List, TypedDict
import re

from content_agent.constants import DEFAULT_CONTENT_TYPE

MAX_INDICATORS = 5


class ContentTypeDetection(TypedDict):
    type: str
    confidence: float               # 0-1
    indicators: List[str]


CONTENT_TYPE_PATTERNS = {
    "technical": {
        "keywords": [
            "api", "code", "function", "algorithm", "implementation", "technical",
            "documentation", "sdk", "library", "framework", "database", "server",
            "architecture", "system", "protocol", "interface", "class", "method",
            "debug", "compile", "deploy", "configuration", "integration", "endpoint",
            "authentication", "authorization", "encryption", "performance", "optimization",
            "tutorial", "guide", "how to", "setup", "install", "configure",
        ],
        "patterns": [
            r"\b(function|class|interface|type|const|let|var)\s+\w+",
            r"\b(import|export|require)\s+",
            r"\b(get|post|put|delete|patch)\s+",
            r"\b(http|https|ftp)://",
            r"\b\w+\(\)",
            r"```[\s\S]*?```",
        ],
    },
    "report": {
        "keywords": [
            "report", "analysis", "findings", "results", "data", "statistics",
            "metrics", "performance", "quarterly", "annual", "summary", "executive",
            "overview", "conclusion", "recommendation", "assessment", "evaluation",
            "survey", "study", "research", "investigation", "audit", "review",
            "forecast", "projection", "trend", "comparison", "benchmark", "kpi",
            "revenue", "profit", "loss", "growth", "decline", "increase", "decrease",
        ],
        "patterns": [
            r"\b(q[1-4]|quarter|fiscal year|fy)\s+\d{4}",
            r"\b\d+(\.\d+)?%",
            r"\$\d+",
            r"\b(increased|decreased|grew|declined)\s+by\s+\d+",
        ],
    },
    "blog": {
        "keywords": [
            "blog", "post", "article", "share", "thoughts", "opinion", "perspective",
            "experience", "journey", "story", "tips", "tricks", "advice", "guide",
            "beginner", "learn", "discover", "explore", "understand", "master",
            "today", "recently", "lately", "personal", "lifestyle", "travel",
            "food", "fashion", "health", "fitness", "productivity", "motivation",
            "inspiration", "review", "comparison", "best", "top", "ultimate",
        ],
        "patterns": [
            r"\b(hey|hi|hello)\s+(everyone|folks|friends|readers)",
            r"\b(i|we|you)\s+(think|believe|feel|want|need)",
            r"\b(check out|take a look|have a look)",
            r"\b\d+\s+(tips|ways|reasons|things|steps)",
        ],
    },
    "story": {
        "keywords": [
            "story", "tale", "narrative", "character", "plot", "scene", "chapter",
            "protagonist", "antagonist", "hero", "villain", "adventure", "journey",
            "once upon", "long ago", "in a", "there was", "there were",
            "suddenly", "meanwhile", "later", "finally", "eventually",
            "said", "asked", "replied", "whispered", "shouted", "thought",
            "felt", "saw", "heard", "smelled", "touched", "tasted",
            "fiction", "fantasy", "mystery", "thriller", "romance", "drama",
        ],
        "patterns": [
            r"\b(once upon a time|long ago|in a land)",
            r"\b(he|she|they)\s+(said|asked|replied|whispered|shouted)",
            r"\b(suddenly|meanwhile|later|finally|eventually)",
            r"[\"'].*?[\"']",
        ],
    },
    "academic": {
        "keywords": [
            "research", "study", "paper", "thesis", "dissertation", "journal",
            "abstract", "introduction", "methodology", "results", "discussion",
            "conclusion", "references", "bibliography", "citation", "hypothesis",
            "theory", "analysis", "experiment", "data", "findings", "evidence",
            "literature review", "peer review", "scholarly", "academic",
            "university", "professor", "phd", "doctorate", "undergraduate",
            "graduate", "publication", "conference", "symposium", "proceedings",
        ],
        "patterns": [
            r"\b(et al\.|ibid\.|op\. cit\.)",
            r"\b\d{4}\s*[,;]\s*p+\.\s*\d+",
            r"\[\d+\]",
            r"\b(according to|as stated by|research shows|studies indicate)",
        ],
    },
    "business": {
        "keywords": [
            "business", "company", "corporation", "enterprise", "organization",
            "strategy", "plan", "proposal", "pitch", "presentation", "meeting",
            "client", "customer", "stakeholder", "partner", "vendor", "supplier",
            "market", "industry", "sector", "competition", "competitive",
            "revenue", "profit", "cost", "budget", "investment", "roi",
            "sales", "marketing", "branding", "product", "service", "solution",
            "contract", "agreement", "terms", "conditions", "policy", "procedure",
        ],
        "patterns": [
            r"\b(dear|to|from|subject|re:)",
            r"\b(llc|inc|corp|ltd|co\.)",
            r"\b(q[1-4]|quarter)\s+\d{4}",
            r"\b(please|kindly|thank you|regards|sincerely)",
        ],
    },
}

_COMPILED_PATTERNS = {
    content_type: [re.compile(p, re.IGNORECASE) for p in config["patterns"]]
    for content_type, config in CONTENT_TYPE_PATTERNS.items()
}


def detect_content_type(prompt: str, initial_content: str = "") -> ContentTypeDetection:
    """Classify ``prompt`` (plus any existing content) into a content type."""
    text = f"{prompt} {initial_content}".lower()

    best_type = DEFAULT_CONTENT_TYPE
    best_score = 0
    best_indicators: List[str] = []

    for content_type, config in CONTENT_TYPE_PATTERNS.items():
        score = 0
        indicators = []
        for keyword in config["keywords"]:
            if keyword in text:
                score += 1
                indicators.append(keyword)
        for pattern in _COMPILED_PATTERNS[content_type]:
            if pattern.search(text):
                score += 2
                indicators.append(f"pattern: {pattern.pattern}")

        # Ties keep the earlier type
        if score > best_score:
            best_type, best_score, best_indicators = content_type, score, indicators

    if best_score == 0:
        return {
            "type": DEFAULT_CONTENT_TYPE,
            "confidence": 0.5,
            "indicators": ["no specific indicators found"],
        }

    return {
        "type": best_type,
        "confidence": min(0.5 + best_score * 0.05, 0.95),
        "indicators": best_indicators[:MAX_INDICATORS],
    }
