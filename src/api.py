import os
import logging
from typing import Annotated, Any, Dict, Optional
from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import FileResponse, JSONResponse
from pydantic import BaseModel, field_validator

from scraper import config
from scraper.aggregator import persist_results
from scraper.browser import ScrapeError
from scraper.formulary import search_formulary
from scraper.producthunt import POST_ORDERS, ProductHuntAPIError, ProductHuntClient, scrape_product_hunt
from scraper.website import scrape_website
from scraper.ycombinator import scrape_yc_companies

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["scraper"]
)

YC_RESULTS_PREFIX = "yc-startups-detailed"
MAX_ITEMS = 50


# Models for API requests
class ScrapeRequest(BaseModel):
    url: Optional[str] = None


class YCCompaniesQuery(BaseModel):
    limit: int = 10
    persist: bool = False

    @field_validator('limit')
    @classmethod
    def validate_limit(cls, v):
        if v <= 0 or v > MAX_ITEMS:
            raise ValueError(f'limit must be between 1 and {MAX_ITEMS}')
        return v


class ProductsQuery(BaseModel):
    limit: int = 10
    details: bool = False

    @field_validator('limit')
    @classmethod
    def validate_limit(cls, v):
        if v <= 0 or v > MAX_ITEMS:
            raise ValueError(f'limit must be between 1 and {MAX_ITEMS}')
        return v


class PostsQuery(BaseModel):
    count: int = 10
    order: str = "VOTES"

    @field_validator('count')
    @classmethod
    def validate_count(cls, v):
        if v <= 0 or v > MAX_ITEMS:
            raise ValueError(f'count must be between 1 and {MAX_ITEMS}')
        return v

    @field_validator('order')
    @classmethod
    def validate_order(cls, v):
        if v not in POST_ORDERS:
            raise ValueError(f"order must be one of {', '.join(POST_ORDERS)}")
        return v


class FormularyQuery(BaseModel):
    drug: str
    url: Optional[str] = None

    @field_validator('drug')
    @classmethod
    def validate_drug(cls, v):
        if not v.strip():
            raise ValueError('drug must not be empty')
        return v.strip()


def success(data: Any) -> Dict[str, Any]:
    return {"status": "success", "data": data}


def failure(status_code: int, error: str, details: Any = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, "details": details})


async def _scrape(url: Optional[str]):
    if not url:
        return failure(400, "URL is required", "Pass ?url=... or a JSON body with a url field")
    if not url.startswith(("http://", "https://")):
        return failure(400, "Invalid URL", f"Expected an http(s) URL, got: {url}")
    try:
        data = await scrape_website(url)
    except ScrapeError as e:
        logger.error(f"Scraping error for {url}: {str(e)}")
        return failure(500, "Scraping failed", str(e))
    return success(data)


@router.get("/scrape")
async def scrape_get(url: Optional[str] = Query(None, description="Page to analyze")):
    """Analyze a business website"""
    return await _scrape(url)


@router.post("/scrape")
async def scrape_post(request: Optional[ScrapeRequest] = None, url: Optional[str] = Query(None)):
    """Analyze a business website (URL in the body or query string)"""
    return await _scrape(url or (request.url if request else None))


@router.get("/yc/companies")
async def yc_companies(query: Annotated[YCCompaniesQuery, Query()]):
    """Recently launched YC companies with detail-page data"""
    try:
        companies = await scrape_yc_companies(limit=query.limit)
    except ScrapeError as e:
        logger.error(f"YC scrape failed: {str(e)}")
        return failure(500, "Scraping failed", str(e))
    if query.persist:
        filepath = persist_results(companies, YC_RESULTS_PREFIX)
        return success({"result_file": os.path.basename(filepath), "count": len(companies)})
    return success(companies)


@router.get("/producthunt/products")
async def producthunt_products(query: Annotated[ProductsQuery, Query()]):
    """Products currently listed on the Product Hunt homepage"""
    try:
        products = await scrape_product_hunt(limit=query.limit, with_details=query.details)
    except ScrapeError as e:
        logger.error(f"Product Hunt scrape failed: {str(e)}")
        return failure(500, "Scraping failed", str(e))
    return success(products)


@router.get("/producthunt/posts")
async def producthunt_posts(query: Annotated[PostsQuery, Query()]):
    """Posts from the Product Hunt GraphQL API"""
    try:
        client = ProductHuntClient()
    except ValueError as e:
        return failure(500, "Product Hunt API is not configured", str(e))
    try:
        posts = await client.fetch_posts(count=query.count, order=query.order)
    except ProductHuntAPIError as e:
        logger.error(f"Product Hunt API error: {e.message} ({e.status})")
        return failure(502, e.message, e.details)
    return success(posts)


@router.get("/formulary")
async def formulary(query: Annotated[FormularyQuery, Query()]):
    """Coverage rows for a drug from a pharmacy formulary search page"""
    try:
        rows = await search_formulary(query.drug, search_url_template=query.url)
    except ValueError as e:
        return failure(400, "Invalid formulary request", str(e))
    except ScrapeError as e:
        logger.error(f"Formulary scrape failed: {str(e)}")
        return failure(500, "Scraping failed", str(e))
    return success(rows)


@router.get("/results")
async def list_results():
    """List persisted result files"""
    if not os.path.isdir(config.RESULTS_DIR):
        return success([])
    files = [f for f in os.listdir(config.RESULTS_DIR) if f.endswith(".json")]
    return success(sorted(files))


@router.get("/results/{filename}")
async def get_result_file(filename: str):
    """Download a persisted result file"""
    if "/" in filename or "\\" in filename or ".." in filename:
        raise HTTPException(status_code=400, detail="Invalid filename.")
    file_path = os.path.join(config.RESULTS_DIR, filename)
    if not os.path.isfile(file_path):
        raise HTTPException(status_code=404, detail=f"Result file not found: {filename}")
    return FileResponse(path=file_path, filename=filename, media_type="application/json")
