"""
SVG rendering for the stats card.

Everything here is a pure function of the fetched data (and, for the heatmap,
of "now"), so the same inputs always produce the same document.
"""

from __future__ import annotations

import datetime as dt
import html
import json
import logging
from dataclasses import dataclass, fields
from typing import Any, Dict, List, Mapping, Optional, Union

logger = logging.getLogger(__name__)

CARD_WIDTH = 800
HEADER_HEIGHT = 88
ROW1_HEIGHT = 80
BEATS_EXTRA_HEIGHT = 25
ROW_HEIGHT = 60
ROW_GAP = 20
SUBMISSION_LINE_HEIGHT = 20
SUBMISSIONS_TITLE_HEIGHT = 35
MIN_CARD_HEIGHT = 150

HEATMAP_WEEKS = 12
HEATMAP_CELL = 9
HEATMAP_PITCH = 12
EMPTY_CELL_COLOR = "#1a1a2e"

FONT = "'Segoe UI', sans-serif"

LEETCODE_LOGO_PATH = (
    "M13.483 11.954l-1.798 1.738c-.31.31-.74.44-1.215.44s-.905-.13-1.215-.44l-2.888-2.908c-.31-.31-.468-.766"
    "-.468-1.242s.157-.905.468-1.216l2.88-2.92c.31-.31.75-.43 1.224-.43s.905.13 1.215.44l1.798 1.738c.343.343"
    ".91.33 1.267-.025.357-.358.369-.925.026-1.267l-1.74-1.757a3.37 3.37 0 0 0-1.63-.892l1.645-1.668c.344-.343"
    ".332-.91-.025-1.267-.357-.357-.924-.368-1.267-.025l-6.733 6.733c-.654.655-.996 1.558-.996 2.557 0 .999.342"
    " 1.93.996 2.583l2.898 2.907c.654.653 1.558.968 2.556.968s1.902-.341 2.556-.996l1.74-1.758c.342-.343.33-.91"
    "-.026-1.267s-.924-.369-1.267-.026zM13.874 8.673H7.11c-.468 0-.847.403-.847.898s.379.897.847.897h6.764c.468"
    " 0 .847-.402.847-.897s-.379-.898-.847-.898z"
)


@dataclass(frozen=True)
class CardOptions:
    difficulty: bool = True
    activity: bool = True
    skills: bool = True
    badges: bool = True
    submissions: bool = True
    beats: bool = True
    rank: bool = True

    @classmethod
    def from_args(cls, args: Mapping[str, str]) -> "CardOptions":
        """Every section is on unless its parameter is exactly "false"."""
        return cls(**{name: args.get(name) != "false" for name in (f.name for f in fields(cls))})


# -----------------------------
# Helpers
# -----------------------------
def _esc(value: Any) -> str:
    return html.escape(str(value), quote=True)


def _truncate(text: str, limit: int) -> str:
    return text[: limit - 1] + "…" if len(text) > limit else text


def _int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def _float(value: Any) -> float:
    try:
        return float(value or 0.0)
    except (TypeError, ValueError):
        return 0.0


def _obj(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _dicts(value: Any) -> List[Dict[str, Any]]:
    """Only the mapping entries of a list; anything else is an empty list."""
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _count_for(rows: List[Dict[str, Any]], difficulty: str, key: str = "count") -> Any:
    for row in rows:
        if row.get("difficulty") == difficulty:
            return row.get(key)
    return None


def _matched_user(result: Any) -> Dict[str, Any]:
    return _obj(_obj(result).get("matchedUser"))


def _day_timestamp(day: dt.date) -> int:
    return int(dt.datetime(day.year, day.month, day.day, tzinfo=dt.timezone.utc).timestamp())


def _format_date(timestamp: Any) -> str:
    try:
        d = dt.datetime.fromtimestamp(int(timestamp), tz=dt.timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        return ""
    return f"{d.month}/{d.day}/{d.year}"


# -----------------------------
# Extraction
# -----------------------------
def extract_stats(data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Flatten the per-query responses into the numbers the card shows.
    Missing sections and fields default to zero / empty.
    """
    problems = _obj(data.get("problems"))
    problems_user = _matched_user(problems)
    all_questions = _dicts(problems.get("allQuestionsCount"))
    ac = _dicts(_obj(problems_user.get("submitStatsGlobal")).get("acSubmissionNum"))
    beats = _dicts(problems_user.get("problemsSolvedBeatsStats"))

    stats: Dict[str, Any] = {}
    for level in ("Easy", "Medium", "Hard"):
        key = level.lower()
        stats[f"total_{key}"] = _int(_count_for(all_questions, level))
        stats[f"solved_{key}"] = _int(_count_for(ac, level))
        stats[f"beats_{key}"] = _float(_count_for(beats, level, "percentage"))
    stats["total_solved"] = stats["solved_easy"] + stats["solved_medium"] + stats["solved_hard"]

    skills = data.get("skills")
    tags: List[Dict[str, Any]] = []
    if skills:
        tag_counts = _obj(_matched_user(skills).get("tagProblemCounts"))
        for group in ("fundamental", "intermediate", "advanced"):
            tags.extend(_dicts(tag_counts.get(group)))
        tags = sorted(tags, key=lambda t: _int(t.get("problemsSolved")), reverse=True)[:5]
    stats["top_tags"] = tags

    calendar = _obj(_matched_user(data.get("activity")).get("userCalendar"))
    stats["streak"] = _int(calendar.get("streak"))
    stats["total_active_days"] = _int(calendar.get("totalActiveDays"))
    stats["submission_calendar"] = calendar.get("submissionCalendar") or None
    stats["recent_badges"] = list(reversed(_dicts(calendar.get("dccBadges"))[-5:]))

    stats["recent_submissions"] = _dicts(_obj(data.get("submissions")).get("recentAcSubmissionList"))[:5]

    profile = _obj(_matched_user(data.get("profile")).get("profile"))
    stats["real_name"] = str(profile.get("realName") or "")
    stats["ranking"] = _int(profile.get("ranking"))
    return stats


def solved_total(data: Mapping[str, Any]) -> int:
    """The upstream "All" row when present, else the sum of the three difficulties."""
    ac = _dicts(_obj(_matched_user(data.get("problems")).get("submitStatsGlobal")).get("acSubmissionNum"))
    all_count = _count_for(ac, "All")
    if all_count is not None:
        return _int(all_count)
    return extract_stats(data)["total_solved"]


# -----------------------------
# Heatmap
# -----------------------------
def heatmap_color(count: int) -> str:
    if count > 10:
        return "#39d353"
    if count > 5:
        return "#26a641"
    if count > 2:
        return "#006d32"
    if count > 0:
        return "#0e4429"
    return EMPTY_CELL_COLOR


def _parse_calendar(calendar: Union[str, Mapping[str, Any], None]) -> Dict[str, int]:
    if not calendar:
        return {}
    if isinstance(calendar, str):
        try:
            calendar = json.loads(calendar)
        except ValueError:
            logger.warning("Ignoring unparsable submission calendar")
            return {}
    if not isinstance(calendar, Mapping):
        return {}
    out: Dict[str, int] = {}
    for key, value in calendar.items():
        try:
            out[str(key)] = int(value or 0)
        except (TypeError, ValueError):
            continue
    return out


def _cell(x: int, y: int, color: str) -> str:
    return f'<rect x="{x}" y="{y}" width="{HEATMAP_CELL}" height="{HEATMAP_CELL}" rx="2" fill="{color}"/>'


def generate_heatmap(
    calendar: Union[str, Mapping[str, Any], None],
    start_x: int = 0,
    start_y: int = 0,
    now: Optional[dt.datetime] = None,
) -> str:
    """
    Last 12 weeks as a 12x7 grid, oldest column first; the bottom-right cell
    is today (UTC). Calendar keys are UTC-midnight Unix timestamps as strings.
    """
    counts = _parse_calendar(calendar)
    today = (now or dt.datetime.now(dt.timezone.utc)).astimezone(dt.timezone.utc).date()

    squares: List[str] = []
    for col in range(HEATMAP_WEEKS):
        weeks_back = HEATMAP_WEEKS - 1 - col
        for day in range(7):
            color = EMPTY_CELL_COLOR
            if counts:
                date = today - dt.timedelta(days=weeks_back * 7 + (6 - day))
                color = heatmap_color(counts.get(str(_day_timestamp(date)), 0))
            squares.append(_cell(start_x + col * HEATMAP_PITCH, start_y + day * HEATMAP_PITCH, color))
    return "".join(squares)


# -----------------------------
# Layout
# -----------------------------
def compute_layout(options: CardOptions, recent_count: int) -> Dict[str, int]:
    """Stack the enabled rows under the header and return each row's y plus the card height."""
    y = HEADER_HEIGHT
    layout: Dict[str, int] = {}

    layout["row1_y"] = y
    if options.difficulty or options.activity:
        height = ROW1_HEIGHT + (BEATS_EXTRA_HEIGHT if options.difficulty and options.beats else 0)
        y += height + ROW_GAP

    layout["row2_y"] = y
    if options.skills:
        y += ROW_HEIGHT + ROW_GAP

    layout["row3_y"] = y
    if options.badges:
        y += ROW_HEIGHT + ROW_GAP

    layout["row4_y"] = y
    if options.submissions:
        y += recent_count * SUBMISSION_LINE_HEIGHT + SUBMISSIONS_TITLE_HEIGHT + ROW_GAP

    layout["card_height"] = max(MIN_CARD_HEIGHT, y)
    return layout


# -----------------------------
# Sections
# -----------------------------
def _section_title(text: str) -> str:
    return f'<text x="0" y="0" font-family="{FONT}" font-size="13" font-weight="600" fill="#ffa116">{text}</text>'


def _difficulty_box(x: int, label: str, color: str, solved: int, total: int, highlight: bool = False) -> str:
    stroke = f' stroke="{color}" stroke-width="1.5"' if highlight else ""
    cx = x + 55
    return (
        f'<rect x="{x}" y="0" width="110" height="60" rx="8" fill="#21262d"{stroke}/>'
        f'<text x="{cx}" y="20" font-family="{FONT}" font-size="10" fill="{color}" text-anchor="middle" font-weight="600">{label}</text>'
        f'<text x="{cx}" y="42" font-family="{FONT}" font-size="18" font-weight="700" fill="{color}" text-anchor="middle">'
        f'{solved}<tspan font-size="11" fill="#6e7681">/{total}</tspan></text>'
    )


def _difficulty_section(stats: Dict[str, Any], show_beats: bool) -> str:
    parts = [
        _section_title("📊 DIFFICULTY"),
        '<g transform="translate(0, 18)">',
        _difficulty_box(0, "EASY", "#00b8a3", stats["solved_easy"], stats["total_easy"]),
        _difficulty_box(120, "MEDIUM", "#ffc01e", stats["solved_medium"], stats["total_medium"], highlight=True),
        _difficulty_box(240, "HARD", "#ff375f", stats["solved_hard"], stats["total_hard"]),
    ]
    if show_beats:
        for cx, key in ((55, "beats_easy"), (175, "beats_medium"), (295, "beats_hard")):
            parts.append(
                f'<text x="{cx}" y="75" font-family="{FONT}" font-size="10" fill="#8b949e" '
                f'text-anchor="middle">Beats {stats[key]:.1f}%</text>'
            )
    parts.append("</g>")
    return "".join(parts)


def _activity_section(stats: Dict[str, Any], offset_x: int, now: Optional[dt.datetime]) -> str:
    return (
        f'<g transform="translate({offset_x}, 0)">'
        + _section_title("🔥 ACTIVITY")
        + '<g transform="translate(0, 18)">'
        f'<rect x="0" y="0" width="85" height="35" rx="6" fill="#21262d"/>'
        f'<text x="42" y="14" font-family="{FONT}" font-size="9" fill="#8b949e" text-anchor="middle">🔥 Streak</text>'
        f'<text x="42" y="28" font-family="{FONT}" font-size="13" font-weight="700" fill="#ff6b35" text-anchor="middle">{stats["streak"]}</text>'
        f'<rect x="95" y="0" width="85" height="35" rx="6" fill="#21262d"/>'
        f'<text x="137" y="14" font-family="{FONT}" font-size="9" fill="#8b949e" text-anchor="middle">📆 Active</text>'
        f'<text x="137" y="28" font-family="{FONT}" font-size="13" font-weight="700" fill="#00b8a3" text-anchor="middle">{stats["total_active_days"]}</text>'
        '<g transform="translate(190, -8)">'
        + generate_heatmap(stats["submission_calendar"], 0, 0, now=now)
        + "</g></g></g>"
    )


def _empty_box(width: int, height: int, text_y: int, text: str) -> str:
    return (
        f'<rect x="0" y="0" width="{width}" height="{height}" rx="8" fill="#21262d"/>'
        f'<text x="{width // 2}" y="{text_y}" font-family="{FONT}" font-size="11" fill="#6e7681" text-anchor="middle">{text}</text>'
    )


def _skills_section(tags: List[Dict[str, Any]]) -> str:
    if not tags:
        body = _empty_box(200, 45, 28, "No skills data available")
    else:
        body = "".join(
            f'<g transform="translate({i * 152}, 0)">'
            f'<rect x="0" y="0" width="145" height="45" rx="8" fill="#21262d"/>'
            f'<text x="72" y="18" font-family="{FONT}" font-size="11" fill="#c9d1d9" text-anchor="middle" font-weight="500">'
            f'{_esc(_truncate(str(tag.get("tagName") or ""), 14))}</text>'
            f'<text x="72" y="35" font-family="{FONT}" font-size="10" fill="#ffa116" text-anchor="middle">'
            f'{_int(tag.get("problemsSolved"))} solved</text>'
            "</g>"
            for i, tag in enumerate(tags)
        )
    return _section_title("🏷️ TOP SKILLS") + f'<g transform="translate(0, 18)">{body}</g>'


def _badge_name(entry: Dict[str, Any]) -> str:
    return str(_obj(entry.get("badge")).get("name") or "")


def _badges_section(badges: List[Dict[str, Any]]) -> str:
    if not badges:
        body = _empty_box(300, 40, 25, "Complete monthly challenges to earn badges")
    else:
        body = "".join(
            f'<g transform="translate({i * 152}, 0)">'
            f'<rect x="0" y="0" width="145" height="40" rx="8" fill="#21262d"/>'
            f'<text x="72" y="25" font-family="{FONT}" font-size="10" fill="#c9d1d9" text-anchor="middle">'
            f'🏅 {_esc(_truncate(_badge_name(b), 12))}</text>'
            "</g>"
            for i, b in enumerate(badges)
        )
    return _section_title("🏅 MONTHLY BADGES") + f'<g transform="translate(0, 18)">{body}</g>'


def _submissions_section(subs: List[Dict[str, Any]]) -> str:
    if not subs:
        body = f'<text x="0" y="10" font-family="{FONT}" font-size="11" fill="#6e7681">No recent submissions found</text>'
    else:
        body = "".join(
            f'<g transform="translate(0, {i * 24})">'
            f'<text x="0" y="10" font-family="{FONT}" font-size="11" fill="#c9d1d9">• {_esc(s.get("title") or "")}</text>'
            f'<text x="750" y="10" font-family="{FONT}" font-size="10" fill="#8b949e" text-anchor="end">'
            f'{_format_date(s.get("timestamp"))}</text>'
            "</g>"
            for i, s in enumerate(subs)
        )
    return _section_title("⚡ RECENT SUBMISSIONS") + f'<g transform="translate(0, 18)">{body}</g>'


def _defs(height: int) -> str:
    return f"""<defs>
        <linearGradient id="bgGradient" x1="0%" y1="0%" x2="100%" y2="100%">
            <stop offset="0%" style="stop-color:#0d1117"/>
            <stop offset="50%" style="stop-color:#161b22"/>
            <stop offset="100%" style="stop-color:#0d1117"/>
        </linearGradient>
        <linearGradient id="headerGradient" x1="0%" y1="0%" x2="100%" y2="0%">
            <stop offset="0%" style="stop-color:#ffa11615"/>
            <stop offset="100%" style="stop-color:#ffa11605"/>
        </linearGradient>
        <linearGradient id="accentGradient" x1="0%" y1="0%" x2="0%" y2="100%">
            <stop offset="0%" style="stop-color:#ffa116"/>
            <stop offset="100%" style="stop-color:#ff8c00"/>
        </linearGradient>
        <filter id="glow">
            <feGaussianBlur stdDeviation="3" result="coloredBlur"/>
            <feMerge>
                <feMergeNode in="coloredBlur"/>
                <feMergeNode in="SourceGraphic"/>
            </feMerge>
        </filter>
        <clipPath id="roundedCard">
            <rect width="{CARD_WIDTH}" height="{height}" rx="16"/>
        </clipPath>
    </defs>"""


def _header(username: str, stats: Dict[str, Any], show_rank: bool) -> str:
    real_name = stats["real_name"]
    show_name = bool(real_name) and real_name != username
    parts = [
        f'<rect x="0" y="0" width="{CARD_WIDTH}" height="70" fill="url(#headerGradient)" clip-path="url(#roundedCard)"/>',
        f'<line x1="0" y1="70" x2="{CARD_WIDTH}" y2="70" stroke="#30363d" stroke-width="1"/>',
        f'<g transform="translate(24, 20)"><path d="{LEETCODE_LOGO_PATH}" fill="#FFA116" transform="scale(1.8)"/></g>',
        f'<text x="80" y="{32 if show_name else 40}" font-family="\'Segoe UI\', Arial, sans-serif" font-size="20" '
        f'font-weight="700" fill="#ffffff">{_esc(username)}</text>',
    ]
    if show_name:
        parts.append(f'<text x="80" y="52" font-family="{FONT}" font-size="12" fill="#8b949e">{_esc(real_name)}</text>')
    if show_rank and stats["ranking"] > 0:
        parts.append(
            '<g transform="translate(450, 24)">'
            f'<text x="0" y="0" font-family="{FONT}" font-size="11" fill="#8b949e">GLOBAL RANKING</text>'
            f'<text x="0" y="20" font-family="{FONT}" font-size="16" font-weight="600" fill="#ffffff">#{stats["ranking"]:,}</text>'
            "</g>"
        )
    parts.append(
        '<g transform="translate(620, 12)">'
        '<rect x="0" y="0" width="160" height="46" rx="10" fill="#21262d"/>'
        f'<text x="80" y="18" font-family="{FONT}" font-size="11" fill="#8b949e" text-anchor="middle">PROBLEMS SOLVED</text>'
        f'<text x="80" y="38" font-family="{FONT}" font-size="20" font-weight="700" fill="url(#accentGradient)" '
        f'text-anchor="middle" filter="url(#glow)">{stats["total_solved"]}</text>'
        "</g>"
    )
    return "\n    ".join(parts)


# -----------------------------
# Cards
# -----------------------------
def render_card(
    username: str,
    data: Mapping[str, Any],
    options: Optional[CardOptions] = None,
    now: Optional[dt.datetime] = None,
) -> str:
    options = options or CardOptions()
    stats = extract_stats(data)
    layout = compute_layout(options, len(stats["recent_submissions"]))
    height = layout["card_height"]

    rows: List[str] = []
    if options.difficulty or options.activity:
        inner = ""
        if options.difficulty:
            inner += _difficulty_section(stats, options.beats)
        if options.activity:
            inner += _activity_section(stats, 380 if options.difficulty else 0, now)
        rows.append(f'<g transform="translate(24, {layout["row1_y"]})">{inner}</g>')
    if options.skills:
        rows.append(f'<g transform="translate(24, {layout["row2_y"]})">{_skills_section(stats["top_tags"])}</g>')
    if options.badges:
        rows.append(f'<g transform="translate(24, {layout["row3_y"]})">{_badges_section(stats["recent_badges"])}</g>')
    if options.submissions:
        rows.append(
            f'<g transform="translate(24, {layout["row4_y"]})">{_submissions_section(stats["recent_submissions"])}</g>'
        )

    return f"""<svg xmlns="http://www.w3.org/2000/svg" width="{CARD_WIDTH}" height="{height}" viewBox="0 0 {CARD_WIDTH} {height}">
    {_defs(height)}
    <rect width="{CARD_WIDTH}" height="{height}" fill="url(#bgGradient)" clip-path="url(#roundedCard)"/>
    <rect x="1" y="1" width="{CARD_WIDTH - 2}" height="{height - 2}" rx="15" fill="none" stroke="#30363d" stroke-width="1"/>
    {_header(username, stats, options.rank)}
    {chr(10).join(rows)}
    <text x="780" y="{height - 10}" font-family="{FONT}" font-size="9" fill="#30363d" text-anchor="end">leetcode-stats-card</text>
</svg>"""


def render_compact_card(username: str, total_solved: int) -> str:
    return f"""<svg xmlns="http://www.w3.org/2000/svg" width="500" height="300" viewBox="0 0 500 300">
    <rect x="1" y="1" width="498" height="298" rx="12" fill="#1a1a1a" stroke="#333333" stroke-width="2"/>
    <text x="40" y="70" font-family="{FONT}" font-size="24" fill="#ffa116">LeetCode Stats</text>
    <text x="40" y="140" font-family="{FONT}" font-size="60" font-weight="700" fill="#ffffff">{_esc(username)}</text>
    <text x="40" y="220" font-family="{FONT}" font-size="40" fill="#ffffff">Solved: {_int(total_solved)}</text>
</svg>"""


def render_error_card(message: str) -> str:
    return f"""<svg xmlns="http://www.w3.org/2000/svg" width="400" height="100" viewBox="0 0 400 100">
    <rect width="400" height="100" fill="#0d1117" rx="8"/>
    <text x="200" y="55" font-family="sans-serif" font-size="14" fill="#f85149" text-anchor="middle">{_esc(message)}</text>
</svg>"""
