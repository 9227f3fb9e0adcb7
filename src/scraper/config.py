import os
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# --- Browser ---
HEADLESS = _env_bool("HEADLESS", True)
# Blocking images/fonts/media speeds up listing pages; text content is unaffected.
BLOCK_RESOURCES = _env_bool("BLOCK_RESOURCES", True)
CHROMIUM_EXECUTABLE_PATH = os.getenv("CHROMIUM_EXECUTABLE_PATH") or None
LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-web-security",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--disable-features=IsolateOrigins,site-per-process",
]
USER_AGENT = os.getenv(
    "USER_AGENT",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36",
)
VIEWPORT = {"width": 1920, "height": 1080}

# --- Timeouts (fixed, never adaptive) ---
PAGE_LOAD_TIMEOUT_MS = 30000
LISTING_LOAD_TIMEOUT_MS = 60000
SELECTOR_TIMEOUT_MS = 5000
WAIT_POLL_INTERVAL_SECONDS = 0.25
POLITE_DELAY_SECONDS = float(os.getenv("POLITE_DELAY_SECONDS", "2"))

# --- Targets ---
YC_COMPANIES_URL = "https://www.ycombinator.com/companies"
YC_SORT_VALUE = "YCCompany_By_Launch_Date_production"
PRODUCT_HUNT_URL = os.getenv("PRODUCT_HUNT_URL", "https://www.producthunt.com/")
PRODUCT_HUNT_API_URL = os.getenv("PRODUCT_HUNT_API_URL", "https://api.producthunt.com/v2/api/graphql")
PRODUCT_HUNT_TOKEN = os.getenv("PRODUCT_HUNT_TOKEN")
# Search page of the formulary site; "{query}" is replaced by the url-encoded drug name.
FORMULARY_SEARCH_URL = os.getenv("FORMULARY_SEARCH_URL")

# --- Output / server ---
RESULTS_DIR = os.getenv("RESULTS_DIR", os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))), "results"))
os.makedirs(RESULTS_DIR, exist_ok=True)
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
PORT = int(os.getenv("PORT", "4000"))
