from unittest.mock import patch

import pytest
import requests

import leetcode_api
from conftest import FakeResp, HTMLResp, PROBLEMS_DATA, make_fake_post


@patch("requests.post")
def test_run_query_posts_fixed_document(mock_post):
    mock_post.return_value = FakeResp({"data": PROBLEMS_DATA})
    data = leetcode_api.run_query("problems", "alice", timeout=5)

    assert data == PROBLEMS_DATA
    args, kwargs = mock_post.call_args
    assert args[0] == leetcode_api.LEETCODE_API_URL
    assert kwargs["json"]["query"] == leetcode_api.PROBLEMS_QUERY
    assert kwargs["json"]["variables"] == {"username": "alice"}
    assert kwargs["headers"]["Referer"] == "https://leetcode.com"
    assert kwargs["timeout"] == 5


@patch("requests.post")
def test_query_variables(mock_post):
    mock_post.return_value = FakeResp({"data": {}})
    leetcode_api.run_query("activity", "alice")
    assert isinstance(mock_post.call_args.kwargs["json"]["variables"]["year"], int)

    leetcode_api.run_query("submissions", "alice")
    assert mock_post.call_args.kwargs["json"]["variables"] == {"username": "alice", "limit": 5}


@patch("requests.post")
def test_run_query_raises_on_http_error(mock_post):
    mock_post.return_value = FakeResp({"message": "nope"}, status_code=502)
    with pytest.raises(leetcode_api.LeetCodeAPIError):
        leetcode_api.run_query("profile", "alice")


@patch("requests.post")
def test_run_query_raises_on_errors_without_data(mock_post):
    mock_post.return_value = FakeResp({"errors": [{"message": "rate limited"}], "data": None})
    with pytest.raises(leetcode_api.LeetCodeAPIError):
        leetcode_api.run_query("profile", "alice")


@patch("requests.post")
def test_run_query_keeps_partial_data(mock_post):
    mock_post.return_value = FakeResp({"errors": [{"message": "user not found"}], "data": {"matchedUser": None}})
    assert leetcode_api.run_query("profile", "nobody") == {"matchedUser": None}


@pytest.mark.parametrize("parallel", [True, False])
def test_fetch_all_returns_every_section(parallel):
    fake = make_fake_post()
    with patch("requests.post", side_effect=fake):
        data = leetcode_api.fetch_all("alice", parallel=parallel)

    assert set(data) == {"problems", "activity", "skills", "profile", "submissions"}
    assert data["problems"] == PROBLEMS_DATA
    assert data["submissions"]["recentAcSubmissionList"][0]["title"] == "Two Sum"
    assert len(fake.calls) == 5


def test_fetch_all_substitutes_none_for_failures():
    fake = make_fake_post(fail=("skills", "profile"))
    with patch("requests.post", side_effect=fake):
        data = leetcode_api.fetch_all("alice")
    assert data["skills"] is None
    assert data["profile"] is None
    assert data["problems"] is not None


@patch("requests.post", side_effect=requests.ConnectionError("offline"))
def test_fetch_all_survives_network_errors(mock_post):
    data = leetcode_api.fetch_all("alice", parallel=False)
    assert all(v is None for v in data.values())
    assert mock_post.call_count == 5


def test_fetch_problem_counts_only_runs_one_query():
    fake = make_fake_post()
    with patch("requests.post", side_effect=fake):
        data = leetcode_api.fetch_problem_counts("alice")
    assert list(data) == ["problems"]
    assert len(fake.calls) == 1


def test_user_exists():
    assert leetcode_api.user_exists({"problems": None, "profile": {"matchedUser": {"username": "a"}}})
    assert not leetcode_api.user_exists({"problems": {"matchedUser": None}, "submissions": {"recentAcSubmissionList": []}})
    assert not leetcode_api.user_exists({"problems": None})


@patch("requests.post", return_value=HTMLResp())
def test_run_query_raises_on_non_json_body(mock_post):
    with pytest.raises(leetcode_api.LeetCodeAPIError):
        leetcode_api.run_query("skills", "alice")


@pytest.mark.parametrize(
    "payload",
    [
        ["unexpected"],
        "unexpected",
        {"data": None, "errors": {"message": "x"}},
        {"data": ["not", "an", "object"]},
    ],
)
def test_run_query_rejects_odd_shapes(payload):
    with patch("requests.post", return_value=FakeResp(payload)):
        with pytest.raises(leetcode_api.LeetCodeAPIError):
            leetcode_api.run_query("skills", "alice")


@patch("requests.post")
def test_run_query_partial_data_with_dict_errors(mock_post):
    mock_post.return_value = FakeResp({"data": {"matchedUser": None}, "errors": {"message": "x"}})
    assert leetcode_api.run_query("skills", "alice") == {"matchedUser": None}


@pytest.mark.parametrize("parallel", [True, False])
@pytest.mark.parametrize(
    "reply",
    [HTMLResp(), FakeResp(["unexpected"]), FakeResp({"data": None, "errors": {"message": "x"}})],
)
def test_fetch_all_odd_reply_becomes_none(reply, parallel):
    fake = make_fake_post(replies={"skills": reply})
    with patch("requests.post", side_effect=fake):
        data = leetcode_api.fetch_all("alice", parallel=parallel)
    assert data["skills"] is None
    assert data["problems"] == PROBLEMS_DATA
    assert leetcode_api.user_exists(data)
