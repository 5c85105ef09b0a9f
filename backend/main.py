from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn
import logging
from contextlib import asynccontextmanager

from backend.config import Config
from backend.core.llm import GeminiLLMWrapper
from backend.core.store import KeyValueStore, InMemoryStore, RedisStore
from backend.core.mongodb_client import MongoStore
from backend.core.rate_limiter import RateLimiter
from backend.core.result_cache import ResultCache
from backend.core.dicoding_client import DicodingClient
from backend.core.quiz_agent import QuestionGenerator
from backend.core.assessment_orchestrator import AssessmentOrchestrator
from backend.api import assessment


logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def build_store() -> KeyValueStore:
    if Config.STORE_BACKEND == "mongodb":
        return MongoStore(Config.MONGODB_URI, Config.DATABASE_NAME, Config.CACHE_COLLECTION)
    if Config.STORE_BACKEND == "memory":
        logger.warning("Using in-memory store; rate limits and cache are per-process")
        return InMemoryStore()
    return RedisStore(Config.REDIS_URL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize components on startup"""
    store = None
    dicoding_client = None
    orchestrator = None

    try:
        # Validate configuration
        Config.validate_config()

        # Initialize components
        store = build_store()
        dicoding_client = DicodingClient(Config.DICODING_BASE_URL, timeout=Config.REQUEST_TIMEOUT)
        llm_wrapper = GeminiLLMWrapper(api_key=Config.GEMINI_API_KEY, model=Config.GEMINI_MODEL)
        orchestrator = AssessmentOrchestrator(
            rate_limiter=RateLimiter(
                store,
                max_requests=Config.RATE_LIMIT_MAX_REQUESTS,
                window_seconds=Config.RATE_LIMIT_WINDOW,
                namespace=Config.CACHE_NAMESPACE,
            ),
            cache=ResultCache(store, ttl_seconds=Config.QUIZ_CACHE_TTL, namespace=Config.CACHE_NAMESPACE),
            content_provider=dicoding_client,
            preferences_provider=dicoding_client,
            generator=QuestionGenerator(llm_wrapper, language=Config.QUIZ_LANGUAGE),
            error_logger=logging.getLogger("backend.cache_writes"),
        )

        # Set dependencies for routers
        assessment.set_dependencies(orchestrator)

        logger.info(f"Application initialized successfully (store={Config.STORE_BACKEND})")

    except Exception as e:
        logger.error(f"Initialization failed: {e}")
        raise e

    yield

    # Cleanup on shutdown
    await orchestrator.drain()
    await dicoding_client.close()
    await store.close()
    logger.info("Application shutting down")

# Create FastAPI app
app = FastAPI(
    title="LearnCheck Assessment API",
    description="AI-generated comprehension quizzes for tutorials",
    version="1.0.0",
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(assessment.router, prefix="/api/v1", tags=["assessment"])

@app.get("/")
async def root():
    return {"message": "LearnCheck Assessment API is running"}

@app.get("/health")
async def health_check():
    return {"status": "healthy", "version": "1.0.0"}

if __name__ == "__main__":
    uvicorn.run(
        "backend.main:app",
        host=Config.HOST,
        port=Config.PORT,
        reload=True
    )
