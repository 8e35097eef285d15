import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ADMIN_TOKEN", "test-admin-token")

from datetime import datetime, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from skillcheck.infrastructure.assessment_system.choices import (
    MCQChoice,
    build_coding_choices,
    dump_choices,
    new_choice_id,
)
from skillcheck.infrastructure.assessment_system.sampler import QuestionSampler
from skillcheck.infrastructure.db.base import Base
from skillcheck.infrastructure.db.models import (
    Assessment,
    Candidate,
    CandidateSession,
    Question,
)

WINDOW_START = datetime(2026, 3, 2, 9, 0, 0)
WINDOW_END = datetime(2026, 3, 2, 12, 0, 0)


class FixedClock:
    def __init__(self, current: datetime):
        self.current = current

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current = self.current + timedelta(**kwargs)
        return self.current


class ScriptedRandom:
    """Always answers ``low`` unless a script is given; records every range asked for."""

    def __init__(self, script=None):
        self.script = list(script or [])
        self.calls = []

    def randint(self, low: int, high: int) -> int:
        self.calls.append((low, high))
        if self.script:
            return self.script.pop(0)
        return low


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    return FixedClock(WINDOW_START + timedelta(minutes=30))


@pytest.fixture
def rand():
    return ScriptedRandom()


@pytest.fixture
def sampler(rand):
    return QuestionSampler(rand)


@pytest.fixture
def make_candidate_session(db, clock):
    counter = {"n": 0}

    def _make(expires_at=None):
        counter["n"] += 1
        n = counter["n"]
        candidate = Candidate(first_name=f"Candidate{n}", email=f"candidate{n}@example.com")
        db.add(candidate)
        db.flush()
        session = CandidateSession(
            token=f"token-{n}",
            candidate_id=candidate.id,
            logged_in_at=clock.now(),
            expires_at=expires_at or clock.now() + timedelta(days=1),
        )
        db.add(session)
        db.commit()
        return session

    return _make


@pytest.fixture
def make_question(db):
    def _make(question_type="mcq", score=None, assessment_id=None):
        if question_type == "mcq":
            choices = [MCQChoice(id=new_choice_id(), text=f"Option {i}") for i in range(4)]
            answer_id = choices[1].id
            default_score = 2
        else:
            choices = build_coding_choices()
            answer_id = choices[0].id
            default_score = 12
        question = Question(
            description=f"A {question_type} question",
            type=question_type,
            choices=dump_choices(choices),
            answer_id=answer_id,
            score=default_score if score is None else score,
            assessment_id=assessment_id,
        )
        db.add(question)
        db.commit()
        return question

    return _make


@pytest.fixture
def make_assessment(db):
    counter = {"n": 0}

    def _make(distribution=None, max_attempts=1, start=WINDOW_START, end=WINDOW_END):
        counter["n"] += 1
        distribution = distribution if distribution is not None else {"mcq": 3, "coding": 1}
        assessment = Assessment(
            name=f"Assessment {counter['n']}",
            start_date=start,
            end_date=end,
            max_attempts=max_attempts,
            total_questions=sum(distribution.values()),
            question_distribution=distribution,
        )
        db.add(assessment)
        db.commit()
        return assessment

    return _make


@pytest.fixture
def question_bank(make_question):
    """Five mcq and two coding questions, interleaved."""
    return [
        make_question("mcq"),
        make_question("coding"),
        make_question("mcq"),
        make_question("mcq"),
        make_question("coding"),
        make_question("mcq"),
        make_question("mcq"),
    ]
