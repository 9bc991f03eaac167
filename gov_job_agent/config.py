"""Configuration loaded from environment variables."""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env: try package dir then project root
_base = Path(__file__).resolve().parent
for _env_path in (_base / ".env", _base.parent / ".env"):
    if load_dotenv(_env_path):
        break
load_dotenv()  # also allow process env


def _float_env(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


# API keys – never hardcode
SERPAPI_KEY: str = os.getenv("SERPAPI_KEY", "")
OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
OPENAI_BASE_URL: str = os.getenv("OPENAI_BASE_URL", "")
MODEL_NAME: str = os.getenv("MODEL_NAME", "gpt-4o-mini")

# Storage
JOB_DB_PATH: str = os.getenv("JOB_DB_PATH", "jobs.db")
SCHEMA_VERSION: int = 2
RECENT_RECORDS_WINDOW: int = 200

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

# HTTP / fetch settings
HTTP_TIMEOUT_SECONDS: float = 30.0
PAGE_FETCH_TIMEOUT_SECONDS: float = 12.0
MAX_FETCH_BYTES: int = 5 * 1024 * 1024
USER_AGENT: str = "Mozilla/5.0 (compatible; GovJobAgent/1.0)"

# Search
SERPAPI_BASE: str = "https://serpapi.com/search"
SEARCH_FRESHNESS: str = os.getenv("SEARCH_FRESHNESS", "d2")
SEARCH_REGION: str = os.getenv("SEARCH_REGION", "in")
RESULTS_PER_QUERY: int = 10

# Topic queries for one sweep; {year} is substituted at sweep time
SWEEP_QUERIES: list = [
    'site:gov.in OR site:nic.in "recruitment" "notification" "{year}" apply online',
    'site:ssc.gov.in OR site:upsc.gov.in "notification" "{year}"',
    '"railway recruitment board" "notification" "{year}" site:gov.in',
    'site:ibps.in OR site:rbi.org.in OR site:sbi.co.in "recruitment" "{year}"',
    '"public service commission" "advertisement" "{year}" site:nic.in OR site:gov.in',
]

# Sweep budgets
MAX_CANDIDATES_PER_SWEEP: int = _int_env("MAX_CANDIDATES_PER_SWEEP", 8)
PRIMARY_TEXT_MAX_CHARS: int = 12000
LINKED_TEXT_MAX_CHARS: int = 6000
DOCUMENT_TEXT_MAX_CHARS: int = 8000
CONTEXT_MAX_CHARS: int = 16000
MAX_LINKED_FETCHES: int = 2
MAX_RANKED_LINKS: int = 10
MAX_IMPORTANT_DATES: int = 12
MAX_IMPORTANT_LINKS: int = 12

# Merge
SIMILARITY_THRESHOLD: float = _float_env("SIMILARITY_THRESHOLD", 0.7)

CREATED_BY_AGENT: str = "agent"

# Stands in for a section the source does not state
UNKNOWN_PLACEHOLDER: str = "Unknown"

# Curated allow-list of trusted recruitment sites
TRUSTED_SITES: list = [
    "ssc.gov.in",
    "upsc.gov.in",
    "indianrailways.gov.in",
    "ibps.in",
    "rbi.org.in",
    "drdo.gov.in",
    "isro.gov.in",
    "joinindianarmy.nic.in",
    "joinindiannavy.gov.in",
    "agnipathvayu.cdac.in",
]

# Recruitment boards admitted by the content policy regardless of path
KNOWN_BOARDS: list = [
    "ssc.gov.in",
    "upsc.gov.in",
    "indianrailways.gov.in",
    "ibps.in",
    "sbi.co.in",
    "opportunities.rbi.org.in",
    "rbi.org.in",
    "licindia.in",
    "afcat.cdac.in",
    "agnipathvayu.cdac.in",
    "joinindianarmy.nic.in",
    "joinindiannavy.gov.in",
    "csbc.bih.nic.in",
    "uppbpb.gov.in",
    "upsssc.gov.in",
    "uppsc.up.nic.in",
]

GOV_DOMAIN_SUFFIXES: tuple = (".gov.in", ".nic.in")

# Topic keywords used by the content policy (title + snippet)
POLICY_KEYWORDS: list = [
    "ssc", "upsc", "railway", "rrb", "ntpc", "alp", "group d", "ibps", "sbi", "rbi",
    "lic", "afcat", "agniveer", "uppsc", "upsssc", "rpsc", "rsmssb", "bpsc", "mppsc",
    "wbpsc", "dsssb", "psssb", "uksssc", "cgpsc", "mpesb", "csbc",
]

# Keywords that make a record recognisably about recruitment
RECRUITMENT_KEYWORDS: list = [
    "ssc", "upsc", "railway", "rrb", "nhm", "police", "constable", "group d", "bank", "ibps",
    "sbi", "rbi", "teacher", "engineer", "clerk", "apprentice", "uppsc", "upsssc", "rpsc",
    "rsmssb", "mppsc", "bpsc", "wbpsc", "jkpsc", "jpsc", "mpsc", "kpsc", "gpsc", "hpsc",
    "hppsc", "opsc", "tnpsc", "tspsc", "appsc", "ossc", "hssc", "uksssc", "bssc", "dsssb",
    "psssb", "jssc", "cgpsc", "mpesb",
]

# Qualification vocabulary for the deterministic extractor
QUALIFICATION_TERMS: list = [
    "10th", "12th", "matric", "intermediate", "diploma", "iti", "graduate", "graduation",
    "post graduate", "b.tech", "b.e", "m.tech", "mba", "mca", "b.sc", "m.sc", "b.com",
    "b.ed", "llb", "mbbs", "phd",
]

# Post titles recognised by the deterministic extractor
POST_KEYWORDS: list = [
    "review officer", "assistant review officer", "constable", "sub inspector", "clerk",
    "stenographer", "assistant", "officer", "engineer", "teacher", "lecturer", "apprentice",
    "technician", "driver", "nurse", "pharmacist", "manager", "inspector", "agniveer",
    "multi tasking staff", "group d",
]

# Trust tiers: first matching tier wins, anything unmatched is tier 3
TIER_RULES: list = [
    {
        "tier": 0,
        "host_patterns": [r"(^|\.)ssc\.gov\.in$", r"(^|\.)upsc\.gov\.in$", r"(^|\.)indianrailways\.gov\.in$",
                          r"(^|\.)rrb[a-z]*\.gov\.in$", r"(^|\.)ibps\.in$", r"(^|\.)rbi\.org\.in$",
                          r"(^|\.)drdo\.gov\.in$", r"(^|\.)isro\.gov\.in$"],
        "text_patterns": [r"\bssc\b", r"\bupsc\b", r"\brrb\b", r"railway recruitment", r"\bibps\b"],
    },
    {
        "tier": 1,
        "host_patterns": [r"psc\.[a-z.]*(gov|nic)\.in$", r"\.up\.nic\.in$", r"\.bih\.nic\.in$"],
        "text_patterns": [r"\b[a-z]{1,4}psc\b", r"public service commission"],
    },
    {
        "tier": 2,
        "host_patterns": [r"s{2,3}[bc]\.[a-z.]*(gov|nic)\.in$", r"police", r"esb\.[a-z.]*gov\.in$"],
        "text_patterns": [r"\b[a-z]{1,3}sssc?b?\b", r"selection board", r"police recruitment"],
    },
]
