"""
LeetCode GraphQL client.

All card data comes from the public endpoint at https://leetcode.com/graphql,
queried with a fixed set of documents (one per card section). Each query is
independent, so they can be fired concurrently; a failed query never fails
the whole fetch, it just yields None for that section.
"""

from __future__ import annotations

import datetime as dt
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger(__name__)

LEETCODE_API_URL = "https://leetcode.com/graphql"
RECENT_SUBMISSIONS_LIMIT = 5


class LeetCodeAPIError(RuntimeError):
    pass


# -----------------------------
# GraphQL queries
# -----------------------------
PROBLEMS_QUERY = """
query userProblemsSolved($username: String!) {
  allQuestionsCount {
    difficulty
    count
  }
  matchedUser(username: $username) {
    submitStatsGlobal {
      acSubmissionNum {
        difficulty
        count
        submissions
      }
      totalSubmissionNum {
        difficulty
        count
        submissions
      }
    }
    problemsSolvedBeatsStats {
      difficulty
      percentage
    }
  }
}
"""

ACTIVITY_QUERY = """
query userProfileCalendar($username: String!, $year: Int) {
  matchedUser(username: $username) {
    userCalendar(year: $year) {
      activeYears
      streak
      totalActiveDays
      dccBadges {
        timestamp
        badge {
          name
          icon
        }
      }
      submissionCalendar
    }
  }
}
"""

SKILLS_QUERY = """
query skillAndLanguageStats($username: String!) {
  matchedUser(username: $username) {
    languageProblemCount {
      languageName
      problemsSolved
    }
    tagProblemCounts {
      advanced { tagName tagSlug problemsSolved }
      intermediate { tagName tagSlug problemsSolved }
      fundamental { tagName tagSlug problemsSolved }
    }
  }
}
"""

PROFILE_QUERY = """
query getUserProfile($username: String!) {
  matchedUser(username: $username) {
    username
    profile {
      realName
      userAvatar
      ranking
    }
    badges {
      id
      displayName
      icon
      creationDate
    }
    activeBadge {
      id
      displayName
      icon
    }
  }
}
"""

SUBMISSIONS_QUERY = """
query recentAcSubmissions($username: String!, $limit: Int!) {
  recentAcSubmissionList(username: $username, limit: $limit) {
    id
    title
    titleSlug
    timestamp
  }
}
"""

QUERIES: Dict[str, str] = {
    "problems": PROBLEMS_QUERY,
    "activity": ACTIVITY_QUERY,
    "skills": SKILLS_QUERY,
    "profile": PROFILE_QUERY,
    "submissions": SUBMISSIONS_QUERY,
}


def _variables(name: str, username: str) -> Dict[str, Any]:
    variables: Dict[str, Any] = {"username": username}
    if name == "activity":
        variables["year"] = dt.datetime.now(dt.timezone.utc).year
    elif name == "submissions":
        variables["limit"] = RECENT_SUBMISSIONS_LIMIT
    return variables


# -----------------------------
# HTTP
# -----------------------------
def run_query(name: str, username: str, timeout: float = 20) -> Optional[Dict[str, Any]]:
    """
    POST one named query and return its "data" object.

    Raises LeetCodeAPIError on HTTP errors, undecodable bodies, or a GraphQL
    error response that carries no data at all. Partial data with errors is
    returned as-is.
    """
    payload = {"query": QUERIES[name], "variables": _variables(name, username)}
    resp = requests.post(
        LEETCODE_API_URL,
        json=payload,
        headers={"Content-Type": "application/json", "Referer": "https://leetcode.com"},
        timeout=timeout,
    )
    if resp.status_code >= 400:
        raise LeetCodeAPIError(f"LeetCode GraphQL error {resp.status_code}: {(resp.text or '')[:300]}")
    try:
        body = resp.json()
    except ValueError as e:
        raise LeetCodeAPIError(f"LeetCode returned a non-JSON body for '{name}'") from e

    if not isinstance(body, dict):
        raise LeetCodeAPIError(f"LeetCode returned a {type(body).__name__} body for '{name}'")

    data = body.get("data")
    errors = body.get("errors")
    if data is not None and not isinstance(data, dict):
        raise LeetCodeAPIError(f"LeetCode returned non-object data for '{name}'")
    if errors:
        shown = list(errors)[:3] if isinstance(errors, list) else errors
        if data is None:
            raise LeetCodeAPIError(f"LeetCode GraphQL errors for '{name}': {shown}")
        logger.debug("Partial data for %s (%s): %s", name, username, shown)
    return data


def _safe_query(name: str, username: str, timeout: float) -> Optional[Dict[str, Any]]:
    try:
        return run_query(name, username, timeout=timeout)
    except (requests.RequestException, LeetCodeAPIError) as e:
        logger.warning("Query '%s' failed for %s: %s", name, username, e)
        return None


# -----------------------------
# Fetchers
# -----------------------------
def fetch_all(username: str, *, parallel: bool = True, timeout: float = 20) -> Dict[str, Optional[Dict[str, Any]]]:
    """Run every card query; failed ones come back as None."""
    names = list(QUERIES)
    if parallel:
        with ThreadPoolExecutor(max_workers=len(names)) as executor:
            futures = {name: executor.submit(_safe_query, name, username, timeout) for name in names}
            return {name: futures[name].result() for name in names}
    return {name: _safe_query(name, username, timeout) for name in names}


def fetch_problem_counts(username: str, *, timeout: float = 20) -> Dict[str, Optional[Dict[str, Any]]]:
    """Only the solved-count query, for the compact card."""
    return {"problems": _safe_query("problems", username, timeout)}


def user_exists(data: Dict[str, Any]) -> bool:
    for result in data.values():
        if isinstance(result, dict) and result.get("matchedUser"):
            return True
    return False
