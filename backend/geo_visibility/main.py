import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .config import get_providers, is_debug
from .http_client import close_client
from .routes.analysis import router as analysis_router
from .routes.competitors import router as competitors_router
from .services.responder import close_openai_client


# Load environment variables from .env file
load_dotenv()

@asynccontextmanager
async def lifespan(app: FastAPI):

    # Startup
    print("Starting GEO Visibility service")
    print(f"   OpenAI Key:  {' Configured' if os.getenv('OPENAI_API_KEY') else ' Not set (analysis calls will fail)'}")
    print(f"   Gemini Key:  {' Configured' if os.getenv('GEMINI_API_KEY') else ' Not set (openai only)'}")
    print(f"   Providers:   {', '.join(get_providers())}")
    print("   Ready to measure AI visibility!")

    yield

    await close_client()
    await close_openai_client()
    print("Shutting down GEO Visibility service")


app = FastAPI(
    title="GEO Visibility - AI Answer Engine Visibility & Competitor Resolution",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",      # Frontend dev server
        "http://127.0.0.1:3000",
        "http://localhost:5173",      # Vite dev server
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(analysis_router)
app.include_router(competitors_router)

@app.get(
    "/",
    summary="API Root",
    description="Welcome endpoint with API information",
    tags=["General"]
)
async def root():
    """Root endpoint with API information."""
    return {
        "name": "GEO Visibility",
        "version": __version__,
        "description": "Measures how AI answer engines surface a business and resolves its competitors",
        "docs": "/docs",
        "endpoints": {
            "analyze": "POST /analyze - Run prompts against AI providers and score visibility",
            "score": "POST /score - Recompute score and coverage from judged results",
            "competitors": "POST /competitors/resolve - Ranked, validated competitor list",
            "health": "GET /health - Service health check"
        }
    }


@app.get(
    "/health",
    summary="Global Health Check",
    description="Check if the API server is running",
    tags=["General"]
)
async def health():
    """Global health check endpoint."""
    return {
        "status": "healthy",
        "service": "geo-visibility",
        "version": __version__
    }

@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler for unhandled errors."""
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal server error",
            "detail": str(exc) if is_debug() else "An unexpected error occurred"
        }
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "geo_visibility.main:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
        reload=is_debug(),
    )
