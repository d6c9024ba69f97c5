import logging
import random
import time
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field
from ulid import ULID

from unibrain.application.learn import LearnSession, MasteryScheduler
from unibrain.application.write import WriteSession, grade_answer
from unibrain.consts import VERSION
from unibrain.domain.exceptions import DeckLoadError, UnibrainError
from unibrain.domain.models import CardState, Flashcard, GradeResult
from unibrain.infrastructure.deck_loader import parse_flashcards

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("unibrain.server")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"UniBrain Server v{VERSION} starting up...")
    yield
    # Shutdown
    learn_sessions.clear()
    write_sessions.clear()
    logger.info("UniBrain Server shutting down...")


app = FastAPI(
    title="UniBrain Server",
    description="Learn Mode scheduling and Write Mode grading over in-memory study sessions.",
    version=VERSION,
    lifespan=lifespan,
)

# Sessions live only in this process; nothing is persisted.
learn_sessions: dict[str, LearnSession] = {}
write_sessions: dict[str, WriteSession] = {}

start_time = time.time()


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: float


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Simple health check to verify server is reachable.
    """
    return HealthResponse(status="ok", version=VERSION, uptime_seconds=time.time() - start_time)


@app.get("/version")
async def get_version():
    return {"version": VERSION}


# ---------------------------------------------------------------------------
# Shared models
# ---------------------------------------------------------------------------


def _to_flashcards(raw: list[dict[str, Any]]) -> list[Flashcard]:
    # Same card shapes as deck files: q/a or question/answer
    try:
        return parse_flashcards(raw)
    except DeckLoadError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e


class CardOut(BaseModel):
    card_id: int
    question: str
    answer: str
    mastery: int
    times_correct: int
    times_incorrect: int
    last_seen_at: datetime | None


class StatsOut(BaseModel):
    cards_studied: int
    correct_count: int
    current_streak: int
    best_streak: int
    accuracy: int


class GradeOut(BaseModel):
    normalized_user: str
    normalized_reference: str
    similarity: float
    is_correct: bool
    overridden: bool


def _card_out(state: CardState) -> CardOut:
    return CardOut(
        card_id=state.card_id,
        question=state.card.question,
        answer=state.card.answer,
        mastery=state.mastery,
        times_correct=state.times_correct,
        times_incorrect=state.times_incorrect,
        last_seen_at=state.last_seen_at,
    )


def _grade_out(result: GradeResult) -> GradeOut:
    return GradeOut(
        normalized_user=result.normalized_user,
        normalized_reference=result.normalized_reference,
        similarity=result.similarity,
        is_correct=result.is_correct,
        overridden=result.overridden,
    )


# ---------------------------------------------------------------------------
# Grading
# ---------------------------------------------------------------------------


class GradeRequest(BaseModel):
    user_answer: str
    reference_answer: str


@app.post("/grade", response_model=GradeOut)
async def grade_endpoint(req: GradeRequest):
    """Grade a single typed answer without a session."""
    return _grade_out(grade_answer(req.user_answer, req.reference_answer))


# ---------------------------------------------------------------------------
# Learn Mode
# ---------------------------------------------------------------------------


class LearnCreateRequest(BaseModel):
    flashcards: list[dict[str, Any]]
    seed: int | None = None


class LearnResponseRequest(BaseModel):
    card_id: int
    knew_it: bool


class LearnSessionOut(BaseModel):
    session_id: str
    empty: bool
    complete: bool
    avg_mastery: float
    current: CardOut | None
    stats: StatsOut
    cards: list[CardOut] = Field(default_factory=list)


def _learn_out(session_id: str, session: LearnSession) -> LearnSessionOut:
    stats = session.stats
    return LearnSessionOut(
        session_id=session_id,
        empty=session.is_empty,
        complete=session.complete,
        avg_mastery=session.state.avg_mastery,
        current=_card_out(session.current) if session.current else None,
        stats=StatsOut(
            cards_studied=stats.cards_studied,
            correct_count=stats.correct_count,
            current_streak=stats.current_streak,
            best_streak=stats.best_streak,
            accuracy=stats.accuracy,
        ),
        cards=[_card_out(s) for s in session.state.cards.values()],
    )


def _get_learn(session_id: str) -> LearnSession:
    session = learn_sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Unknown learn session {session_id}")
    return session


@app.post("/learn/sessions", response_model=LearnSessionOut)
async def create_learn_session(req: LearnCreateRequest):
    scheduler = MasteryScheduler(rng=random.Random(req.seed) if req.seed is not None else None)
    session = LearnSession(_to_flashcards(req.flashcards), scheduler=scheduler)
    session_id = str(ULID())
    learn_sessions[session_id] = session
    logger.info(f"Learn session {session_id} started with {len(req.flashcards)} cards")
    return _learn_out(session_id, session)


@app.get("/learn/sessions/{session_id}", response_model=LearnSessionOut)
async def get_learn_session(session_id: str):
    return _learn_out(session_id, _get_learn(session_id))


@app.post("/learn/sessions/{session_id}/responses", response_model=LearnSessionOut)
async def record_learn_response(session_id: str, req: LearnResponseRequest):
    """
    Record a self-rated response for a presented card and select the next one.
    """
    session = _get_learn(session_id)
    try:
        session.respond(req.card_id, req.knew_it)
    except UnibrainError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return _learn_out(session_id, session)


@app.post("/learn/sessions/{session_id}/reset", response_model=LearnSessionOut)
async def reset_learn_session(session_id: str):
    session = _get_learn(session_id)
    session.restart()
    return _learn_out(session_id, session)


@app.delete("/learn/sessions/{session_id}")
async def end_learn_session(session_id: str):
    _get_learn(session_id)
    del learn_sessions[session_id]
    return {"ok": True}


# ---------------------------------------------------------------------------
# Write Mode
# ---------------------------------------------------------------------------


class WriteCreateRequest(BaseModel):
    flashcards: list[dict[str, Any]]


class WriteAnswerRequest(BaseModel):
    answer: str


class WriteSessionOut(BaseModel):
    session_id: str
    empty: bool
    complete: bool
    index: int
    total: int
    question: str | None
    last_grade: GradeOut | None
    correct_count: int
    accuracy: int
    feedback: str | None


def _write_out(session_id: str, session: WriteSession) -> WriteSessionOut:
    current = session.current
    return WriteSessionOut(
        session_id=session_id,
        empty=session.is_empty,
        complete=session.complete,
        index=session.index,
        total=len(session.flashcards),
        question=current.question if current else None,
        last_grade=_grade_out(session.results[-1].grade) if session.results else None,
        correct_count=session.correct_count,
        accuracy=session.accuracy,
        feedback=session.feedback() if session.complete and session.results else None,
    )


def _get_write(session_id: str) -> WriteSession:
    session = write_sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Unknown write session {session_id}")
    return session


@app.post("/write/sessions", response_model=WriteSessionOut)
async def create_write_session(req: WriteCreateRequest):
    session = WriteSession(_to_flashcards(req.flashcards))
    session_id = str(ULID())
    write_sessions[session_id] = session
    logger.info(f"Write session {session_id} started with {len(req.flashcards)} cards")
    return _write_out(session_id, session)


@app.post("/write/sessions/{session_id}/answers", response_model=WriteSessionOut)
async def submit_write_answer(session_id: str, req: WriteAnswerRequest):
    session = _get_write(session_id)
    try:
        session.submit(req.answer)
    except UnibrainError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return _write_out(session_id, session)


@app.post("/write/sessions/{session_id}/override", response_model=WriteSessionOut)
async def override_write_answer(session_id: str):
    """Accept the latest answer as correct (learner override)."""
    session = _get_write(session_id)
    try:
        session.override_last()
    except UnibrainError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return _write_out(session_id, session)


@app.post("/write/sessions/{session_id}/next", response_model=WriteSessionOut)
async def advance_write_session(session_id: str):
    session = _get_write(session_id)
    try:
        session.advance()
    except UnibrainError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return _write_out(session_id, session)


@app.post("/write/sessions/{session_id}/restart", response_model=WriteSessionOut)
async def restart_write_session(session_id: str):
    session = _get_write(session_id)
    session.restart()
    return _write_out(session_id, session)
