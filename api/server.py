"""
ELLM FastAPI Server Implementation
RESTful API interface for an ELLM session

This module implements the FastAPI server with:
- Learning and query endpoints
- Knowledge base listing and reset
- Health and performance monitoring
- Error handling and validation
"""

import logging
import os
import threading
import time
import traceback
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

import psutil
import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, field_validator

from ellm import __version__
from reasoning.session import ELLMSession, create_session

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "ELLM_CONFIG"


# Global state
class ServerState:
    """Global server state management."""
    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path
        self.session: ELLMSession = create_session(config_path)
        self.request_count: int = 0
        self.error_count: int = 0
        self.total_response_time: float = 0.0
        self.start_time: float = time.time()
        self.lock = threading.RLock()

    def record_request(self, elapsed: float, failed: bool = False) -> None:
        with self.lock:
            self.request_count += 1
            self.total_response_time += elapsed
            if failed:
                self.error_count += 1


# Global server state
server_state = ServerState(os.environ.get(CONFIG_ENV_VAR))


# Pydantic models for API requests/responses
class LearnRequest(BaseModel):
    """Learning request model."""
    text: str = Field(..., description="Sentences to learn", min_length=1, max_length=100000)

    @field_validator('text')
    @classmethod
    def validate_text(cls, v):
        if not v.strip():
            raise ValueError('Text cannot be empty')
        return v.strip()

class LearnResponse(BaseModel):
    """Learning response model."""
    results: List[str] = Field(..., description="One result line per sentence")
    facts_count: int = Field(..., description="Facts stored after learning")
    rules_count: int = Field(..., description="Rules stored after learning")

class QueryRequest(BaseModel):
    """Query request model."""
    question: str = Field(..., description="Yes/no question", min_length=1, max_length=10000)

    @field_validator('question')
    @classmethod
    def validate_question(cls, v):
        if not v.strip():
            raise ValueError('Question cannot be empty')
        return v.strip()

class QueryResponse(BaseModel):
    """Query response model."""
    query: str = Field(..., description="Question as asked")
    parsed_query: Optional[str] = Field(None, description="Fact the question was parsed into")
    answer: str = Field(..., description="Yes, No or Unknown")
    explanation: str = Field(..., description="Justification trail")
    reasoning_time: float = Field(..., description="Reasoning time in seconds")

class KnowledgeResponse(BaseModel):
    """Knowledge base listing model."""
    facts: List[str] = Field(..., description="Stored facts")
    rules: List[str] = Field(..., description="Stored rules")

class HealthCheckResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="Server status")
    version: str = Field(..., description="ELLM version")
    uptime: float = Field(..., description="Server uptime in seconds")
    facts_count: int = Field(..., description="Stored facts")
    rules_count: int = Field(..., description="Stored rules")
    memory_usage: Dict[str, float] = Field(..., description="Memory usage statistics")

class PerformanceStatsResponse(BaseModel):
    """Performance statistics response model."""
    request_count: int = Field(..., description="Total number of requests")
    error_count: int = Field(..., description="Total number of errors")
    average_response_time: float = Field(..., description="Average response time")
    session_stats: Dict[str, Any] = Field(..., description="Session statistics")

class ErrorResponse(BaseModel):
    """Error response model."""
    error: str = Field(..., description="Error message")
    error_code: str = Field(..., description="Error code")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error details")
    timestamp: float = Field(..., description="Error timestamp")


# Custom exceptions
class ELLMAPIError(Exception):
    """Base exception for ELLM API errors."""
    def __init__(self, message: str, error_code: str = "INTERNAL_ERROR", details: Optional[Dict] = None):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(message)

class InvalidRequestError(ELLMAPIError):
    """Exception raised for invalid requests."""
    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message, "INVALID_REQUEST", details)


# Dependency functions
async def get_server_state() -> ServerState:
    """Get the global server state."""
    return server_state


def _memory_usage() -> Dict[str, float]:
    process = psutil.Process()
    return {
        "rss_mb": process.memory_info().rss / (1024**2),
        "system_percent": psutil.virtual_memory().percent
    }


# Application lifespan
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting ELLM API Server...")
    yield
    logger.info("Shutting down ELLM API Server...")


# Create FastAPI application
app = FastAPI(
    title="ELLM API",
    description="Efficient Language and Logic Model - prime-encoded symbolic inference",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Root endpoint
@app.get("/", response_model=Dict[str, str])
async def root():
    """Root endpoint with API information."""
    return {
        "name": "ELLM API",
        "version": __version__,
        "description": "Efficient Language and Logic Model",
        "docs": "/docs",
        "health": "/health"
    }

# Health check endpoint
@app.get("/health", response_model=HealthCheckResponse)
async def health_check(state: ServerState = Depends(get_server_state)):
    """Health check endpoint."""
    summary = state.session.knowledge_summary()
    return HealthCheckResponse(
        status="healthy",
        version=__version__,
        uptime=time.time() - state.start_time,
        facts_count=len(summary['facts']),
        rules_count=len(summary['rules']),
        memory_usage=_memory_usage()
    )

@app.post("/learn", response_model=LearnResponse)
async def learn(request: LearnRequest, state: ServerState = Depends(get_server_state)):
    """Learn facts and rules from text."""
    start_time = time.time()

    results = state.session.learn(request.text)
    if not results:
        state.record_request(time.time() - start_time, failed=True)
        raise InvalidRequestError("No sentences found in text")

    summary = state.session.knowledge_summary()
    state.record_request(time.time() - start_time)

    return LearnResponse(
        results=results,
        facts_count=len(summary['facts']),
        rules_count=len(summary['rules'])
    )

@app.post("/query", response_model=QueryResponse)
async def query(request: QueryRequest, state: ServerState = Depends(get_server_state)):
    """Answer a yes/no question."""
    start_time = time.time()

    result = state.session.query(request.question)
    elapsed = time.time() - start_time
    state.record_request(elapsed)

    return QueryResponse(reasoning_time=elapsed, **result.to_dict())

@app.get("/knowledge", response_model=KnowledgeResponse)
async def knowledge(state: ServerState = Depends(get_server_state)):
    """List stored facts and rules."""
    return KnowledgeResponse(**state.session.knowledge_summary())

@app.post("/reset", response_model=KnowledgeResponse)
async def reset(state: ServerState = Depends(get_server_state)):
    """Discard everything learned so far."""
    with state.lock:
        state.session = state.session.reset()
    return KnowledgeResponse(**state.session.knowledge_summary())

@app.get("/performance/stats", response_model=PerformanceStatsResponse)
async def get_performance_stats(state: ServerState = Depends(get_server_state)):
    """Request counters and session statistics."""
    with state.lock:
        request_count = state.request_count
        error_count = state.error_count
        total_time = state.total_response_time

    return PerformanceStatsResponse(
        request_count=request_count,
        error_count=error_count,
        average_response_time=total_time / request_count if request_count else 0.0,
        session_stats=state.session.get_performance_stats()
    )


# Error handling
@app.exception_handler(ELLMAPIError)
async def ellm_api_exception_handler(request: Request, exc: ELLMAPIError):
    """Handle ELLM API exceptions."""
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(
            error=exc.message,
            error_code=exc.error_code,
            details=exc.details,
            timestamp=time.time()
        ).model_dump()
    )

@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions."""
    logger.error(f"Unhandled exception: {exc}")
    logger.error(traceback.format_exc())

    with server_state.lock:
        server_state.error_count += 1

    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="Internal server error",
            error_code="INTERNAL_ERROR",
            details={"exception_type": type(exc).__name__},
            timestamp=time.time()
        ).model_dump()
    )


# Main function for running the server
def run_server(
    host: str = "0.0.0.0",
    port: int = 8000,
    reload: bool = False,
    workers: int = 1,
    config_path: Optional[str] = None,
    log_level: str = "info"
):
    """Run the ELLM API server."""
    if config_path:
        os.environ[CONFIG_ENV_VAR] = config_path
        # The module may already be imported, so uvicorn reuses this state
        with server_state.lock:
            server_state.config_path = config_path
            server_state.session = create_session(config_path)

    logger.info(f"Starting ELLM API server on {host}:{port}")

    uvicorn.run(
        "api.server:app",
        host=host,
        port=port,
        reload=reload,
        workers=workers,
        log_level=log_level
    )
