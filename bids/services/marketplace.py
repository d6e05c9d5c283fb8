# bids/services/marketplace.py
"""
Thin client for the Freelancer.com projects API.

Only listing, single-project lookup and bid submission/listing are used; the
responses are normalized into MarketplaceProject records before they reach the
rest of the app.
"""
import logging
import re
from datetime import datetime, timezone

import requests
from django.conf import settings

from bids.errors import MarketplaceError
from bids.schemas import Budget, MarketplaceProject, ScreeningQuestion

logger = logging.getLogger(__name__)

FREELANCER_API_BASE = "https://www.freelancer.com/api"
FREELANCER_SANDBOX_BASE = "https://www.freelancer-sandbox.com/api"

PROJECT_URL_RE = re.compile(r"projects/[^/]+/(\d+)")

BID_STRATEGY_FACTORS = {
    "competitive": 0.4,
    "premium": 0.75,
    "budget": 0.15,
}


def _base_url(sandbox):
    return FREELANCER_SANDBOX_BASE if sandbox else FREELANCER_API_BASE


def _headers(access_token):
    if not access_token:
        raise MarketplaceError("Access token is required", status=401)
    return {
        "Freelancer-OAuth-V1": access_token,
        "Content-Type": "application/json",
    }


def _iso(timestamp):
    if not timestamp:
        return None
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()


def _request(method, url, access_token, fallback_error, **kwargs):
    headers = _headers(access_token)
    try:
        resp = requests.request(
            method, url, headers=headers, timeout=settings.MARKETPLACE_TIMEOUT, **kwargs
        )
    except requests.RequestException as e:
        logger.warning("Marketplace request to %s failed: %s", url, e)
        raise MarketplaceError(fallback_error, status=502) from e

    if not resp.ok:
        try:
            error_data = resp.json()
        except ValueError:
            error_data = {}
        message = error_data.get("message") if isinstance(error_data, dict) else None
        logger.warning("Marketplace %s %s -> %s", method, url, resp.status_code)
        raise MarketplaceError(message or fallback_error, status=resp.status_code, details=error_data)

    return resp.json()


def extract_project_id(project_url):
    """https://www.freelancer.com/projects/<slug>/<id> -> "<id>"."""
    match = PROJECT_URL_RE.search(project_url or "")
    return match.group(1) if match else None


def transform_project(raw):
    raw = raw or {}
    budget = raw.get("budget") or {}
    bid_stats = raw.get("bid_stats") or {}
    owner = raw.get("owner") or {}
    reputation = owner.get("reputation") or {}

    questions = []
    for idx, q in enumerate(raw.get("hireme_initial_questions") or []):
        text = q if isinstance(q, str) else (q.get("question") or "")
        questions.append(ScreeningQuestion(id=f"q{idx + 1}", question=text, is_required=True))

    posted = _iso(raw.get("time_submitted"))
    return MarketplaceProject(
        id=str(raw.get("id") or ""),
        title=raw.get("title") or "",
        description=raw.get("description") or raw.get("preview_description") or "",
        budget=Budget(
            minimum=budget.get("minimum") or 0,
            maximum=budget.get("maximum") or 0,
            currency=(raw.get("currency") or {}).get("code") or "USD",
        ),
        skills=[job.get("name") if isinstance(job, dict) else str(job) for job in raw.get("jobs") or []],
        type="fixed" if raw.get("type") == "fixed" else "hourly",
        status="open" if raw.get("status") == "active" else "closed",
        bid_count=bid_stats.get("bid_count") or 0,
        average_bid=bid_stats.get("bid_avg") or None,
        deadline=posted,
        questions=questions,
        posted_at=posted or datetime.now(timezone.utc).isoformat(),
        client_country=((owner.get("location") or {}).get("country") or {}).get("name"),
        client_rating=reputation.get("overall"),
        client_reviews=(reputation.get("entire_history") or {}).get("all"),
        url=f"https://www.freelancer.com/projects/{raw.get('seo_url')}/{raw.get('id')}",
    )


def list_active_projects(access_token, skills=(), limit=20, offset=0, sandbox=False):
    params = {
        "limit": limit,
        "offset": offset,
        "project_types": "fixed,hourly",
        "full_description": "true",
        "job_details": "true",
        "user_details": "true",
        "user_status": "true",
    }
    if skills:
        params["jobs[]"] = ",".join(skills)

    data = _request(
        "GET",
        f"{_base_url(sandbox)}/projects/0.1/projects/active",
        access_token,
        "Failed to fetch projects",
        params=params,
    )
    result = data.get("result") or {}
    projects = [transform_project(p) for p in result.get("projects") or []]
    return projects, result.get("total_count") or len(projects)


def fetch_project(access_token, project_id=None, project_url=None, sandbox=False):
    project_id = project_id or extract_project_id(project_url)
    if not project_id:
        raise MarketplaceError("Project ID or URL is required", status=400)
    _headers(access_token)

    data = _request(
        "GET",
        f"{_base_url(sandbox)}/projects/0.1/projects/{project_id}",
        access_token,
        "Failed to fetch project",
        params={"full_description": "true", "job_details": "true", "user_details": "true"},
    )
    return transform_project(data.get("result"))


def submit_bid(access_token, bid, sandbox=False):
    """Posts a bid. Returns the marketplace bid id. Not retried."""
    _headers(access_token)
    if not bid.project_id or not bid.amount or not bid.period:
        raise MarketplaceError("Project ID, amount, and period are required", status=400)

    payload = {
        "project_id": int(bid.project_id),
        "bidder_id": 0,
        "amount": bid.amount,
        "period": bid.period,
        "milestone_percentage": 100,
        "description": bid.cover_letter,
    }
    if bid.answers:
        payload["hireme_initial_answers"] = list(bid.answers)

    data = _request(
        "POST",
        f"{_base_url(sandbox)}/projects/0.1/bids/",
        access_token,
        "Failed to submit bid",
        json=payload,
    )
    bid_id = (data.get("result") or {}).get("id")
    logger.info("Submitted bid %s on project %s", bid_id, bid.project_id)
    return bid_id


def map_bid_status(award_status):
    if award_status == "awarded":
        return "accepted"
    if award_status == "rejected":
        return "rejected"
    return "submitted"


def list_bids(access_token, project_id=None, limit=20, offset=0, sandbox=False):
    params = {
        "limit": limit,
        "offset": offset,
        "bidders": "true",
        "project_details": "true",
    }
    if project_id:
        params["project_ids[]"] = project_id

    data = _request(
        "GET",
        f"{_base_url(sandbox)}/projects/0.1/bids",
        access_token,
        "Failed to fetch bids",
        params=params,
    )
    result = data.get("result") or {}
    bids = []
    for raw in result.get("bids") or []:
        submitted = _iso(raw.get("time_submitted"))
        bids.append({
            "id": str(raw.get("id")) if raw.get("id") is not None else None,
            "projectId": str(raw.get("project_id")) if raw.get("project_id") is not None else None,
            "amount": raw.get("amount"),
            "period": raw.get("period"),
            "coverLetter": raw.get("description"),
            "status": map_bid_status(raw.get("award_status")),
            "createdAt": submitted or datetime.now(timezone.utc).isoformat(),
            "submittedAt": submitted,
        })
    return bids, result.get("total_count") or len(bids)


def suggest_bid_amount(budget, strategy):
    """Picks a point inside the client's budget range for the given strategy."""
    spread = budget.maximum - budget.minimum
    factor = BID_STRATEGY_FACTORS.get(strategy, 0.5)
    return round(budget.minimum + spread * factor)
