from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

DEFAULT_AUTHOR = "Anonymous"
DEFAULT_EMAIL = "anonymous@example.com"


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _int_field(data: Dict[str, Any], key: str, default: Optional[int] = None) -> int:
    value = data.get(key)
    if value is None and default is not None:
        return default
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{key} must be an integer, got {value!r}")
    return value


class QuestionStatus(str, Enum):
    PENDING = "pending"
    ANSWERED = "answered"


@dataclass
class Answer:
    """A reply to a question. Nested `answers` are kept but never written."""
    id: int
    content: str
    author: str = DEFAULT_AUTHOR
    is_owner: bool = False
    date: str = field(default_factory=utc_now_iso)
    answers: List["Answer"] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        d = dict(self.extra)
        d.update({
            "id": self.id,
            "content": self.content,
            "author": self.author,
            "isOwner": self.is_owner,
            "date": self.date,
            "answers": [a.to_dict() for a in self.answers],
        })
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Answer":
        known = {"id", "content", "author", "isOwner", "date", "answers"}
        return cls(
            id=_int_field(data, "id"),
            content=data.get("content") or "",
            author=data.get("author") or DEFAULT_AUTHOR,
            is_owner=bool(data.get("isOwner", False)),
            date=data.get("date") or "",
            answers=[cls.from_dict(a) for a in data.get("answers") or []],
            extra={k: v for k, v in data.items() if k not in known},
        )


@dataclass
class Question:
    """A visitor question with its answers and like counter."""
    id: int
    question: str
    name: str = DEFAULT_AUTHOR
    email: str = DEFAULT_EMAIL
    timestamp: str = field(default_factory=utc_now_iso)
    ip: Optional[str] = None
    user_agent: Optional[str] = None
    status: QuestionStatus = QuestionStatus.PENDING
    response: Optional[str] = None
    responded_at: Optional[str] = None
    likes: int = 0
    answers: List[Answer] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict, repr=False)

    def add_answer(self, answer: Answer) -> None:
        self.answers.append(answer)
        if answer.is_owner:
            # last owner answer wins
            self.status = QuestionStatus.ANSWERED
            self.response = answer.content
            self.responded_at = answer.date

    def all_ids(self) -> List[int]:
        ids = [self.id]
        stack = list(self.answers)
        while stack:
            a = stack.pop()
            ids.append(a.id)
            stack.extend(a.answers)
        return ids

    def to_dict(self) -> Dict[str, Any]:
        d = dict(self.extra)
        d.update({
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "question": self.question,
            "timestamp": self.timestamp,
            "ip": self.ip,
            "userAgent": self.user_agent,
            "status": self.status.value,
            "response": self.response,
            "respondedAt": self.responded_at,
            "likes": self.likes,
            "answers": [a.to_dict() for a in self.answers],
        })
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Question":
        known = {"id", "name", "email", "question", "timestamp", "ip", "userAgent",
                 "status", "response", "respondedAt", "likes", "answers"}
        try:
            status = QuestionStatus(data.get("status") or QuestionStatus.PENDING.value)
        except ValueError:
            status = QuestionStatus.PENDING
        return cls(
            id=_int_field(data, "id"),
            question=data.get("question") or "",
            name=data.get("name") or DEFAULT_AUTHOR,
            email=data.get("email") or DEFAULT_EMAIL,
            timestamp=data.get("timestamp") or "",
            ip=data.get("ip"),
            user_agent=data.get("userAgent"),
            status=status,
            response=data.get("response"),
            responded_at=data.get("respondedAt"),
            likes=_int_field(data, "likes", default=0),
            answers=[Answer.from_dict(a) for a in data.get("answers") or []],
            extra={k: v for k, v in data.items() if k not in known},
        )


@dataclass
class Collection:
    """The whole persisted document, questions in submission order."""
    questions: List[Question] = field(default_factory=list)

    def find(self, question_id: int) -> Optional[Question]:
        for q in self.questions:
            if q.id == question_id:
                return q
        return None

    def max_id(self) -> int:
        return max((i for q in self.questions for i in q.all_ids()), default=0)

    def to_dict(self) -> Dict[str, Any]:
        return {"questions": [q.to_dict() for q in self.questions]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Collection":
        return cls(questions=[Question.from_dict(q) for q in data.get("questions") or []])
