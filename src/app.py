import argparse
import logging
from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn

from api import router
from scraper import __version__, config

logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Page Scraper API",
    description="Headless-browser scraping of business sites, YC, Product Hunt and pharmacy formularies",
    version=__version__
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())})


@app.exception_handler(HTTPException)
async def http_error_handler(request: Request, exc: HTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail, "details": None})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.url.path}: {str(exc)}")
    return JSONResponse(status_code=500, content={"error": "Internal error", "details": str(exc)})


@app.get("/")
async def root():
    """Root endpoint with API info"""
    return {
        "name": "Page Scraper API",
        "version": __version__,
        "endpoints": {
            "GET|POST /api/scrape": "Analyze a business website",
            "GET /api/yc/companies": "Scrape recently launched YC companies",
            "GET /api/producthunt/products": "Scrape the Product Hunt homepage",
            "GET /api/producthunt/posts": "Query the Product Hunt GraphQL API",
            "GET /api/formulary": "Search a pharmacy formulary",
            "GET /api/results": "List persisted result files",
        }
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "ok"}


def main():
    parser = argparse.ArgumentParser(description='Start the scraper API server')
    parser.add_argument('--host', type=str, default='0.0.0.0', help='Host to bind to')
    parser.add_argument('--port', type=int, default=config.PORT, help='Port to bind to')
    parser.add_argument('--reload', action='store_true', help='Reload on code changes')
    args = parser.parse_args()

    logger.info(f"Server running on port {args.port}")
    uvicorn.run("app:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
