"""
Shared fixtures: canned LeetCode GraphQL payloads and a fake requests.post
that routes on the query text, so nothing touches the network.
"""

import copy
import json
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

PROBLEMS_DATA = {
    "allQuestionsCount": [
        {"difficulty": "All", "count": 3300},
        {"difficulty": "Easy", "count": 830},
        {"difficulty": "Medium", "count": 1730},
        {"difficulty": "Hard", "count": 740},
    ],
    "matchedUser": {
        "submitStatsGlobal": {
            "acSubmissionNum": [
                {"difficulty": "All", "count": 215, "submissions": 400},
                {"difficulty": "Easy", "count": 120, "submissions": 180},
                {"difficulty": "Medium", "count": 80, "submissions": 190},
                {"difficulty": "Hard", "count": 15, "submissions": 30},
            ],
            "totalSubmissionNum": [],
        },
        "problemsSolvedBeatsStats": [
            {"difficulty": "Easy", "percentage": 87.34},
            {"difficulty": "Medium", "percentage": 75.0},
            {"difficulty": "Hard", "percentage": None},
        ],
    },
}

ACTIVITY_DATA = {
    "matchedUser": {
        "userCalendar": {
            "activeYears": [2025, 2026],
            "streak": 14,
            "totalActiveDays": 96,
            "dccBadges": [
                {"timestamp": "1", "badge": {"name": "Jan LeetCoding Challenge", "icon": ""}},
                {"timestamp": "2", "badge": {"name": "Feb", "icon": ""}},
                {"timestamp": "3", "badge": {"name": "Mar", "icon": ""}},
                {"timestamp": "4", "badge": {"name": "Apr", "icon": ""}},
                {"timestamp": "5", "badge": {"name": "May", "icon": ""}},
                {"timestamp": "6", "badge": {"name": "Jun", "icon": ""}},
            ],
            # 2026-10-18 00:00 UTC -> 7, 2026-10-17 -> 1, 2026-07-27 -> 30
            "submissionCalendar": json.dumps({"1792281600": 7, "1792195200": 1, "1785110400": 30}),
        }
    }
}

SKILLS_DATA = {
    "matchedUser": {
        "languageProblemCount": [{"languageName": "Python3", "problemsSolved": 200}],
        "tagProblemCounts": {
            "advanced": [
                {"tagName": "Dynamic Programming", "tagSlug": "dynamic-programming", "problemsSolved": 40},
                {"tagName": "Backtracking", "tagSlug": "backtracking", "problemsSolved": 9},
            ],
            "intermediate": [
                {"tagName": "Hash Table", "tagSlug": "hash-table", "problemsSolved": 55},
                {"tagName": "Math", "tagSlug": "math", "problemsSolved": 30},
            ],
            "fundamental": [
                {"tagName": "Array", "tagSlug": "array", "problemsSolved": 110},
                {"tagName": "String", "tagSlug": "string", "problemsSolved": 50},
                {"tagName": "Sorting", "tagSlug": "sorting", "problemsSolved": 20},
            ],
        },
    }
}

PROFILE_DATA = {
    "matchedUser": {
        "username": "alice",
        "profile": {"realName": "Alice Liddell", "userAvatar": "", "ranking": 123456},
        "badges": [],
        "activeBadge": None,
    }
}

SUBMISSIONS_DATA = {
    "recentAcSubmissionList": [
        {"id": "1", "title": "Two Sum", "titleSlug": "two-sum", "timestamp": "1792281600"},
        {"id": "2", "title": "Valid <Parentheses>", "titleSlug": "valid-parentheses", "timestamp": "1792195200"},
    ]
}

ALL_DATA = {
    "problems": PROBLEMS_DATA,
    "activity": ACTIVITY_DATA,
    "skills": SKILLS_DATA,
    "profile": PROFILE_DATA,
    "submissions": SUBMISSIONS_DATA,
}

ROUTES = [
    ("userProblemsSolved", "problems"),
    ("userProfileCalendar", "activity"),
    ("skillAndLanguageStats", "skills"),
    ("getUserProfile", "profile"),
    ("recentAcSubmissions", "submissions"),
]


class FakeResp:
    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code
        self.text = json.dumps(payload)

    def json(self):
        return self.payload


class HTMLResp:
    """A 200 whose body is an HTML page instead of JSON."""

    status_code = 200
    text = "<html><body>Just a moment...</body></html>"

    def json(self):
        raise ValueError("Expecting value: line 1 column 1 (char 0)")


def make_fake_post(data=None, missing_user=False, fail=(), replies=None):
    """
    Build a requests.post replacement answering from `data`, keyed by query name.
    `replies` maps a query name to a canned response object returned as-is.
    """
    replies = replies or {}
    data = copy.deepcopy(ALL_DATA if data is None else data)
    calls = []

    def fake_post(url, json=None, headers=None, timeout=None):
        q = (json or {}).get("query", "")
        calls.append(json)
        for marker, name in ROUTES:
            if marker in q:
                if name in replies:
                    return replies[name]
                if name in fail:
                    return FakeResp({"errors": [{"message": "boom"}]}, status_code=500)
                if missing_user:
                    return FakeResp({"data": {"matchedUser": None}})
                return FakeResp({"data": data.get(name)})
        return FakeResp({"data": {}})

    fake_post.calls = calls
    return fake_post


@pytest.fixture
def all_data():
    return copy.deepcopy(ALL_DATA)
