# bids/schemas.py
"""
Plain records passed between views, the prompt builder and the generator.

Profile and AI settings are copied out of the ORM into frozen snapshots at the
start of each request, so generation code never touches the database.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Tuple


DEFAULT_MODEL = "gpt-4o"
DEFAULT_ANTHROPIC_MODEL = "claude-3-5-sonnet-latest"
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 1000


@dataclass(frozen=True)
class ProfileSnapshot:
    name: str = ""
    skills: Tuple[str, ...] = ()
    experience: str = ""
    bio: str = ""
    hourly_rate: float = 50
    portfolio: Tuple[str, ...] = ()


@dataclass(frozen=True)
class AIConfig:
    provider: str = "openai"
    api_key: str = ""
    model: str = DEFAULT_MODEL
    temperature: Optional[float] = DEFAULT_TEMPERATURE
    max_tokens: Optional[int] = DEFAULT_MAX_TOKENS
    system_prompt: str = ""
    base_url: str = ""


@dataclass
class ScreeningQuestion:
    id: str
    question: str
    is_required: bool = True
    answer: Optional[str] = None

    @classmethod
    def from_dict(cls, data):
        required = data.get("isRequired", data.get("is_required", True))
        return cls(
            id=str(data.get("id") or ""),
            question=data.get("question") or "",
            is_required=bool(required),
            answer=data.get("answer"),
        )


@dataclass
class Budget:
    minimum: float = 0
    maximum: float = 0
    currency: str = "USD"

    @classmethod
    def from_dict(cls, data):
        data = data or {}
        return cls(
            minimum=data.get("min", data.get("minimum")) or 0,
            maximum=data.get("max", data.get("maximum")) or 0,
            currency=data.get("currency") or "USD",
        )


@dataclass
class MarketplaceProject:
    """A listing normalized from the marketplace API (or posted back by the dashboard)."""

    id: str
    title: str
    description: str = ""
    budget: Budget = field(default_factory=Budget)
    skills: List[str] = field(default_factory=list)
    type: str = "hourly"
    status: str = "open"
    bid_count: int = 0
    average_bid: Optional[float] = None
    deadline: Optional[str] = None
    questions: List[ScreeningQuestion] = field(default_factory=list)
    posted_at: Optional[str] = None
    client_country: Optional[str] = None
    client_rating: Optional[float] = None
    client_reviews: Optional[int] = None
    url: Optional[str] = None

    @classmethod
    def from_dict(cls, data):
        def pick(camel, snake, default=None):
            value = data.get(camel, data.get(snake))
            return default if value is None else value

        return cls(
            id=str(data.get("id") or ""),
            title=data.get("title") or "",
            description=data.get("description") or "",
            budget=Budget.from_dict(data.get("budget")),
            skills=[str(s) for s in data.get("skills") or []],
            type="fixed" if data.get("type") == "fixed" else "hourly",
            status=data.get("status") or "open",
            bid_count=pick("bidCount", "bid_count", 0),
            average_bid=pick("averageBid", "average_bid"),
            deadline=data.get("deadline"),
            questions=[ScreeningQuestion.from_dict(q) for q in data.get("questions") or []],
            posted_at=pick("postedAt", "posted_at"),
            client_country=pick("clientCountry", "client_country"),
            client_rating=pick("clientRating", "client_rating"),
            client_reviews=pick("clientReviews", "client_reviews"),
            url=data.get("url"),
        )

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "budget": {
                "min": self.budget.minimum,
                "max": self.budget.maximum,
                "currency": self.budget.currency,
            },
            "skills": list(self.skills),
            "type": self.type,
            "status": self.status,
            "bidCount": self.bid_count,
            "averageBid": self.average_bid,
            "deadline": self.deadline,
            "questions": [
                {"id": q.id, "question": q.question, "isRequired": q.is_required, "answer": q.answer}
                for q in self.questions
            ],
            "postedAt": self.posted_at,
            "clientCountry": self.client_country,
            "clientRating": self.client_rating,
            "clientReviews": self.client_reviews,
            "url": self.url,
        }


@dataclass
class GeneratedAnswer:
    question_id: str
    question: str
    answer: str
    confidence: float
    suggestions: List[str] = field(default_factory=list)

    def to_dict(self):
        return {
            "questionId": self.question_id,
            "question": self.question,
            "answer": self.answer,
            "confidence": self.confidence,
            "suggestions": list(self.suggestions),
        }


@dataclass
class BidSubmission:
    project_id: str
    amount: float
    period: int
    cover_letter: str = ""
    answers: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data):
        answers = []
        for item in data.get("answers") or []:
            answers.append(item.get("answer", "") if isinstance(item, dict) else str(item))
        return cls(
            project_id=str(data.get("projectId", data.get("project_id")) or ""),
            amount=data.get("amount") or 0,
            period=data.get("period") or 0,
            cover_letter=data.get("coverLetter", data.get("cover_letter")) or "",
            answers=answers,
        )


@dataclass(frozen=True)
class HistoryEntry:
    """One client/me turn of a conversation, as fed to the reply prompt."""

    type: str
    content: str
