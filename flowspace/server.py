"""
FlowSpace - Backend API
Start with: flowspace-api  (or: uvicorn flowspace.server:app --reload --port 3000)

Thin JSON-over-HTTP layer: validate the request, hand it to an agent,
relay the agent's JSON. Every error body is {"error": "..."}.
"""

import logging
from typing import List, Literal, Optional

import uvicorn
from fastapi import FastAPI, File, Form, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from pydantic import BaseModel, ConfigDict, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .agents import (
    CheckInCompanion,
    QuizGenerator,
    TimeCoach,
    UpstreamResponseError,
)
from .config import config, token_tracker
from .utils.document_loader import extract_pdf_text
from .utils.persistence import FlowSpaceStore

logger = logging.getLogger("flowspace.server")

HEALTH_MESSAGE = "FlowSpace API running ✨"

Difficulty = Literal["chill", "normal", "spicy"]
QuizType = Literal["short_answer", "multiple_choice", "mixed"]


# --- Request bodies ---

class QuizRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: Optional[str] = None
    difficulty: Optional[Difficulty] = None
    quiz_type: Optional[QuizType] = Field(None, alias="quizType")


class CheckInRequest(BaseModel):
    mood: Optional[str] = None
    text: Optional[str] = None


class TaskPayload(BaseModel):
    title: Optional[str] = None
    minutes: Optional[float] = None


class PlanRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    tasks: Optional[List[TaskPayload]] = None
    total_minutes: Optional[float] = Field(None, alias="totalMinutes")


class ProfileRequest(BaseModel):
    name: Optional[str] = None


class QuestionPayload(BaseModel):
    q: str
    a: str


class QuizSetRequest(BaseModel):
    title: str = ""
    difficulty: Difficulty = "normal"
    questions: List[QuestionPayload]


class ThemeRequest(BaseModel):
    theme: Literal["light", "dark"]


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


class FlowSpaceServices:
    """
    Agents and store used by the routes.

    Anything not injected is built on first use, so importing the app
    never needs an API key or touches the data directory.
    """

    def __init__(
        self,
        quiz_generator: Optional[QuizGenerator] = None,
        checkin_companion: Optional[CheckInCompanion] = None,
        time_coach: Optional[TimeCoach] = None,
        store: Optional[FlowSpaceStore] = None,
    ):
        self._quiz_generator = quiz_generator
        self._checkin_companion = checkin_companion
        self._time_coach = time_coach
        self._store = store

    @property
    def quiz_generator(self) -> QuizGenerator:
        if self._quiz_generator is None:
            self._quiz_generator = QuizGenerator()
        return self._quiz_generator

    @property
    def checkin_companion(self) -> CheckInCompanion:
        if self._checkin_companion is None:
            self._checkin_companion = CheckInCompanion()
        return self._checkin_companion

    @property
    def time_coach(self) -> TimeCoach:
        if self._time_coach is None:
            self._time_coach = TimeCoach()
        return self._time_coach

    @property
    def store(self) -> FlowSpaceStore:
        if self._store is None:
            self._store = FlowSpaceStore()
        return self._store


def create_app(
    quiz_generator: Optional[QuizGenerator] = None,
    checkin_companion: Optional[CheckInCompanion] = None,
    time_coach: Optional[TimeCoach] = None,
    store: Optional[FlowSpaceStore] = None,
) -> FastAPI:
    """Build the FastAPI application; pass agents/store to override the defaults."""
    services = FlowSpaceServices(
        quiz_generator=quiz_generator,
        checkin_companion=checkin_companion,
        time_coach=time_coach,
        store=store,
    )

    app = FastAPI(
        title="FlowSpace API",
        description="No-shame study companion: quizzes, check-ins and gentle plans",
        version=__version__,
    )
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        first = exc.errors()[0] if exc.errors() else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = first.get("msg", "Invalid request")
        return error_response(400, f"{location}: {message}" if location else message)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error(
            "Unhandled error in %s %s", request.method, request.url.path, exc_info=exc
        )
        return error_response(500, str(exc) or "Internal server error")

    # --- Health ---

    @app.get("/", response_class=PlainTextResponse)
    def root():
        return HEALTH_MESSAGE

    @app.get("/health")
    def health():
        return {
            "status": "ok",
            "version": __version__,
            "model": config.model.model_name,
            "usage": token_tracker.get_stats(),
        }

    # --- Quick Quiz ---

    @app.post("/api/quiz")
    def generate_quiz(req: Optional[QuizRequest] = None):
        req = req or QuizRequest()
        if not req.text or not req.text.strip():
            return error_response(400, "Text is required")

        try:
            questions = services.quiz_generator.generate_quiz(
                req.text,
                difficulty=req.difficulty,
                quiz_type=req.quiz_type,
            )
        except Exception as e:
            logger.exception("Error in /api/quiz")
            return error_response(500, str(e) or "Failed to generate quiz")

        return [q.to_dict() for q in questions]

    @app.post("/api/quiz-from-pdf")
    def generate_quiz_from_pdf(
        file: Optional[UploadFile] = File(None),
        difficulty: Optional[str] = Form(None),
        quizType: Optional[str] = Form(None),
    ):
        if file is None:
            return error_response(400, "No PDF file uploaded.")
        if not difficulty:
            return error_response(400, "Missing difficulty.")

        try:
            document = extract_pdf_text(file.file.read(), source=file.filename or "upload.pdf")
        except ValueError as e:
            logger.warning("Unreadable PDF upload: %s", e)
            return error_response(400, "Could not extract text from the PDF.")
        except Exception as e:
            logger.exception("Error reading upload in /api/quiz-from-pdf")
            return error_response(500, str(e) or "Failed to generate quiz from PDF")

        if not document.content.strip():
            return error_response(400, "Could not extract text from the PDF.")

        try:
            questions = services.quiz_generator.generate_quiz(
                document.content,
                difficulty=difficulty,
                quiz_type=quizType,
            )
        except UpstreamResponseError as e:
            logger.error("Error in /api/quiz-from-pdf: %s", e)
            return error_response(500, str(e))
        except ValueError as e:
            return error_response(400, str(e))
        except Exception as e:
            logger.exception("Error in /api/quiz-from-pdf")
            return error_response(500, str(e) or "Failed to generate quiz from PDF")

        return [q.to_dict() for q in questions]

    # --- Safe Space ---

    @app.post("/api/checkin")
    def check_in(req: Optional[CheckInRequest] = None):
        req = req or CheckInRequest()
        try:
            response = services.checkin_companion.check_in(mood=req.mood, text=req.text)
        except UpstreamResponseError as e:
            logger.error("Error in /api/checkin: %s", e)
            return error_response(500, str(e))
        except Exception:
            logger.exception("Error in /api/checkin")
            return error_response(500, "Failed to handle check-in")

        return response.to_dict()

    # --- Time & Priority Coach ---

    @app.post("/api/plan")
    def plan(req: Optional[PlanRequest] = None):
        req = req or PlanRequest()
        tasks = [task.model_dump() for task in req.tasks or []]

        try:
            coach_plan = services.time_coach.plan(tasks, total_minutes=req.total_minutes)
        except UpstreamResponseError as e:
            logger.error("Error in /api/plan: %s", e)
            return error_response(500, str(e))
        except ValueError as e:
            return error_response(400, str(e))
        except Exception:
            logger.exception("Error in /api/plan")
            return error_response(500, "Failed to generate plan")

        return coach_plan.to_dict()

    # --- Profile & saved quiz sets ---

    @app.get("/api/profile")
    def get_profile():
        profile = services.store.load_profile()
        return profile.to_dict() if profile else None

    @app.put("/api/profile")
    def update_profile(req: ProfileRequest):
        profile = services.store.update_profile(req.name)
        return profile.to_dict() if profile else None

    @app.delete("/api/profile", status_code=204)
    def clear_profile():
        services.store.update_profile(None)
        return Response(status_code=204)

    @app.get("/api/quiz-sets")
    def list_quiz_sets():
        return [s.to_dict() for s in services.store.list_quiz_sets()]

    @app.post("/api/quiz-sets", status_code=201)
    def save_quiz_set(req: QuizSetRequest):
        try:
            saved = services.store.save_quiz_set(
                title=req.title,
                difficulty=req.difficulty,
                questions=[q.model_dump() for q in req.questions],
            )
        except ValueError as e:
            return error_response(400, str(e))
        return saved.to_dict()

    @app.get("/api/quiz-sets/{quiz_set_id}")
    def get_quiz_set(quiz_set_id: str):
        quiz_set = services.store.get_quiz_set(quiz_set_id)
        if quiz_set is None:
            return error_response(404, "Quiz set not found")
        return quiz_set.to_dict()

    @app.delete("/api/quiz-sets/{quiz_set_id}", status_code=204)
    def delete_quiz_set(quiz_set_id: str):
        if not services.store.delete_quiz_set(quiz_set_id):
            return error_response(404, "Quiz set not found")
        return Response(status_code=204)

    @app.get("/api/theme")
    def get_theme():
        return {"theme": services.store.load_theme()}

    @app.put("/api/theme")
    def set_theme(req: ThemeRequest):
        return {"theme": services.store.save_theme(req.theme)}

    return app


app = create_app()


def main():
    """Run the API with uvicorn using config.server settings."""
    logging.basicConfig(level=config.logging.log_level, format=config.logging.log_format)
    config.prepare_fs()

    for problem in config.validate():
        logger.warning("Config: %s", problem)

    logger.info(
        "FlowSpace API listening on http://%s:%d", config.server.host, config.server.port
    )
    uvicorn.run(app, host=config.server.host, port=config.server.port)


if __name__ == "__main__":
    main()
