"""Main entry point for the Training-aware Chat Relay API."""
import logging
from datetime import datetime, timezone

import tiktoken
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import PORT, LOG_LEVEL, CORS_ORIGINS, TRAINING_DATA_PATH
from logger import setup_logging
from models.api import (
    ChatRequest,
    ChatResponse,
    TrainRequest,
    TrainResponse,
    TrainingListResponse,
    TrainingExampleOut,
    ClearResponse,
    HealthResponse,
)
from models.conversation import USER, ASSISTANT
from services.errors import ValidationError, PersistenceError
from services.llm_client import LLMClient, LLMClientError
from services.prompt_assembler import PromptAssembler
from services.session_store import SessionStore
from services.training_corpus import TrainingCorpus

# Initialize logging
setup_logging(LOG_LEVEL)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Training-aware Chat Relay",
    description="Chat relay to an LLM completion API with few-shot training examples",
    version="1.0.0"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize services (will be done on startup)
session_store: SessionStore = None
training_corpus: TrainingCorpus = None
prompt_assembler: PromptAssembler = None
llm_client: LLMClient = None
tiktoken_encoder = None


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@app.on_event("startup")
async def startup_event():
    """Initialize services on startup."""
    global session_store, training_corpus, prompt_assembler, llm_client, tiktoken_encoder

    logger.info("Initializing chat relay services...")

    try:
        tiktoken_encoder = tiktoken.get_encoding("o200k_base")
        logger.info("Initialized tiktoken encoder (o200k_base)")

        session_store = SessionStore()

        training_corpus = TrainingCorpus(TRAINING_DATA_PATH)
        training_corpus.load()

        prompt_assembler = PromptAssembler(session_store, training_corpus)

        llm_client = LLMClient()

        logger.info(f"All services initialized; {training_corpus.count} training examples loaded")
    except Exception as e:
        logger.error(f"Failed to initialize services: {e}", exc_info=True)
        raise


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    logger.info(f"Rejected malformed request to {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


@app.exception_handler(PersistenceError)
async def persistence_error_handler(request: Request, exc: PersistenceError):
    return JSONResponse(status_code=500, content={"error": "Failed to add training data"})


@app.post("/api/chat", response_model=ChatResponse)
def chat_endpoint(request: ChatRequest):
    """
    Relay one user message to the completion API.

    The user turn is recorded before the call and the assistant turn after
    it; both happen under the session's lock so concurrent requests sharing
    a session id cannot interleave their turns.

    Args:
        request: ChatRequest with message and optional sessionId/userId

    Returns:
        ChatResponse with the assistant text, session id, and timestamp

    Raises:
        ValidationError: If the message is missing or blank
    """
    if not request.message or not request.message.strip():
        raise ValidationError("Message is required")

    session_id = request.sessionId
    logger.info(f"Chat message from user={request.userId} session={session_id}")

    try:
        with session_store.locked(session_id):
            session_store.append(session_id, USER, request.message)

            assembled = prompt_assembler.build_request(session_id)
            messages = assembled.to_messages()

            if tiktoken_encoder is not None:
                prompt_tokens = sum(len(tiktoken_encoder.encode(m["content"])) for m in messages)
                logger.info(
                    f"Prompt for session {session_id}: {len(assembled.context_turns)} turns, "
                    f"~{prompt_tokens} tokens"
                )

            llm_response = llm_client.generate(messages)

            session_store.append(session_id, ASSISTANT, llm_response.text)

        return ChatResponse(
            response=llm_response.text,
            sessionId=session_id,
            timestamp=_now_iso()
        )

    except LLMClientError as e:
        logger.error(f"LLM client error for session {session_id}: {e.error.code} {e.error.message}")
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to process chat message", "details": e.error.message}
        )
    except Exception as e:
        logger.error(f"Unexpected chat error for session {session_id}: {e}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to process chat message", "details": str(e)}
        )


@app.post("/api/train", response_model=TrainResponse)
def train_endpoint(request: TrainRequest):
    """Append one training example and persist the corpus."""
    if not request.input or not request.output:
        raise ValidationError("Both input and output are required")

    total = training_corpus.add(request.input, request.output, request.category)
    return TrainResponse(message="Training data added successfully", totalExamples=total)


@app.get("/api/training", response_model=TrainingListResponse)
def training_list_endpoint():
    """List every training example in insertion order."""
    examples, count = training_corpus.list_examples()
    return TrainingListResponse(
        data=[TrainingExampleOut(**ex.to_dict()) for ex in examples],
        count=count
    )


@app.delete("/api/conversation/{session_id}", response_model=ClearResponse)
def clear_conversation_endpoint(session_id: str):
    """Drop a session's history. Unknown sessions are not an error."""
    session_store.clear(session_id)
    return ClearResponse(message="Conversation cleared")


@app.get("/api/health", response_model=HealthResponse)
def health():
    """Liveness check with the current corpus size."""
    return HealthResponse(
        status="OK",
        timestamp=_now_iso(),
        trainingExamples=training_corpus.count
    )


if __name__ == "__main__":
    import uvicorn
    logger.info(f"Starting chat relay API on port {PORT}")
    uvicorn.run(app, host="0.0.0.0", port=PORT)
