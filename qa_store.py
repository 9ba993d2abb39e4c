import json
import logging
import os
import threading
import time
from dataclasses import dataclass
from enum import Enum
from tempfile import NamedTemporaryFile
from typing import Any, Dict, List, Optional, Union

from qa_errors import InvalidInput, NotFound, StorageWriteFailure
from qa_models import (
    DEFAULT_AUTHOR,
    DEFAULT_EMAIL,
    Answer,
    Collection,
    Question,
    utc_now_iso,
)

logger = logging.getLogger(__name__)

# File-backed question store.
# JSON layout:
# {
#   "questions": [
#     {"id": 1718000000000, "question": "...", "status": "pending", "likes": 0,
#      "answers": [{"id": ..., "content": "...", "isOwner": false, ...}], ...},
#     ...
#   ]
# }


class ReadState(Enum):
    OK = "ok"
    ABSENT = "absent"
    CORRUPT = "corrupt"


@dataclass
class ReadResult:
    state: ReadState
    collection: Optional[Collection] = None
    error: Optional[str] = None


class JsonFileBackend:
    """One JSON document on disk, replaced atomically on every write."""

    def __init__(self, path: Union[str, os.PathLike]):
        self.path = os.fspath(path)

    def exists(self) -> bool:
        return os.path.exists(self.path)

    def read(self) -> ReadResult:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                text = f.read()
        except FileNotFoundError:
            return ReadResult(ReadState.ABSENT)
        except (OSError, UnicodeDecodeError) as e:
            return ReadResult(ReadState.CORRUPT, error=str(e))

        if not text.strip():
            return ReadResult(ReadState.ABSENT)

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            return ReadResult(ReadState.CORRUPT, error=str(e))
        if not isinstance(data, dict) or not isinstance(data.get("questions", []), list):
            return ReadResult(ReadState.CORRUPT, error="top-level value is not a questions document")
        try:
            collection = Collection.from_dict(data)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            return ReadResult(ReadState.CORRUPT, error=f"malformed record: {e!r}")
        return ReadResult(ReadState.OK, collection=collection)

    def replace(self, payload: bytes) -> None:
        # atomic write: temp file in the same directory, then rename over the target
        dirpath = os.path.dirname(os.path.abspath(self.path)) or "."
        tmpname = None
        try:
            os.makedirs(dirpath, exist_ok=True)
            with NamedTemporaryFile("wb", dir=dirpath, prefix=".questions-", suffix=".tmp", delete=False) as tf:
                tmpname = tf.name
                tf.write(payload)
                tf.flush()
                os.fsync(tf.fileno())
            os.replace(tmpname, self.path)
            _fsync_dir(dirpath)
        except OSError as e:
            if tmpname and os.path.exists(tmpname):
                os.unlink(tmpname)
            raise StorageWriteFailure(f"could not write {self.path}: {e}") from e


class QuestionStore:
    """
    Canonical question collection backed by a JsonFileBackend.

    Every mutation runs load -> modify -> save while holding a process-wide
    lock, so concurrent requests never lose each other's updates. Reads skip
    the lock and rely on the backend's atomic replace.
    """

    def __init__(self, path: Union[str, os.PathLike] = "data/questions.json",
                 backend: Optional[JsonFileBackend] = None):
        self.backend = backend or JsonFileBackend(path)
        self.path = self.backend.path
        self._lock = threading.Lock()
        self._last_id = 0

    # ----------------------------- persistence -----------------------------

    def ensure_initialized(self) -> bool:
        """Create an empty document if none exists. Returns True when one was written."""
        with self._lock:
            if self.backend.exists():
                return False
            self.save(Collection())
            logger.info("Created %s", self.path)
            return True

    def load(self) -> Collection:
        result = self.backend.read()
        if result.state is ReadState.OK:
            return result.collection
        if result.state is ReadState.CORRUPT:
            # fail-open: the next successful save replaces the unreadable document
            logger.warning("Question file %s is unreadable, treating it as empty: %s",
                           self.path, result.error)
        return Collection()

    def save(self, collection: Collection) -> None:
        payload = json.dumps(collection.to_dict(), ensure_ascii=False, indent=2)
        self.backend.replace(payload.encode("utf-8"))

    def _next_id(self, collection: Collection) -> int:
        # caller holds the lock; the floor keeps ids unique within one clock tick
        floor = max(self._last_id, collection.max_id()) + 1
        new_id = max(int(time.time() * 1000), floor)
        self._last_id = new_id
        return new_id

    # ----------------------------- operations ------------------------------

    def submit_question(self, question: Any, name: Optional[str] = None, email: Optional[str] = None,
                        timestamp: Optional[str] = None, ip: Optional[str] = None,
                        user_agent: Optional[str] = None) -> int:
        if not _has_text(question):
            raise InvalidInput("Question is required")
        with self._lock:
            collection = self.load()
            q = Question(
                id=self._next_id(collection),
                question=question,
                name=name or DEFAULT_AUTHOR,
                email=email or DEFAULT_EMAIL,
                timestamp=timestamp or utc_now_iso(),
                ip=ip,
                user_agent=user_agent,
            )
            collection.questions.append(q)
            self.save(collection)
        logger.debug("Question %s submitted by %s", q.id, q.name)
        return q.id

    def list_questions(self) -> List[Dict[str, Any]]:
        return [q.to_dict() for q in self.load().questions]

    def get_question(self, question_id: Union[int, str]) -> Dict[str, Any]:
        qid = _coerce_id(question_id)
        q = self.load().find(qid)
        if q is None:
            raise NotFound("Question not found")
        return q.to_dict()

    def add_answer(self, question_id: Union[int, str], content: Any, author: Optional[str] = None,
                   is_owner: bool = False) -> Answer:
        if not _has_text(content):
            raise InvalidInput("Answer is required")
        qid = _coerce_id(question_id)
        with self._lock:
            collection = self.load()
            q = collection.find(qid)
            if q is None:
                raise NotFound("Question not found")
            answer = Answer(
                id=self._next_id(collection),
                content=content,
                author=author or DEFAULT_AUTHOR,
                is_owner=bool(is_owner),
            )
            q.add_answer(answer)
            self.save(collection)
        logger.debug("Answer %s added to question %s (owner=%s)", answer.id, qid, answer.is_owner)
        return answer

    def like_question(self, question_id: Union[int, str]) -> int:
        qid = _coerce_id(question_id)
        with self._lock:
            collection = self.load()
            q = collection.find(qid)
            if q is None:
                raise NotFound("Question not found")
            q.likes = max(q.likes, 0) + 1
            self.save(collection)
            likes = q.likes
        logger.debug("Question %s now has %d likes", qid, likes)
        return likes


def _has_text(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _coerce_id(question_id: Union[int, str]) -> int:
    if isinstance(question_id, bool) or (isinstance(question_id, float) and not question_id.is_integer()):
        raise NotFound("Question not found")
    try:
        return int(question_id)
    except (TypeError, ValueError):
        raise NotFound("Question not found") from None


def _fsync_dir(dirpath: str) -> None:
    # persist the rename itself; directories cannot be opened this way on Windows
    if not hasattr(os, "O_DIRECTORY"):
        return
    fd = os.open(dirpath, os.O_RDONLY | os.O_DIRECTORY)
    try:
        os.fsync(fd)
    finally:
        os.close(fd)
