from __future__ import annotations

import re
from enum import Enum


class SubwayLine(str, Enum):
    LINE_1 = "1호선"
    LINE_2 = "2호선"
    LINE_3 = "3호선"
    LINE_4 = "4호선"
    LINE_5 = "5호선"
    LINE_6 = "6호선"
    LINE_7 = "7호선"
    LINE_8 = "8호선"
    LINE_9 = "9호선"
    AIRPORT = "공항철도"
    GYEONGUI = "경의중앙선"
    GYEONGCHUN = "경춘선"
    SUIN = "수인분당선"
    SINBUNDANG = "신분당선"
    GYEONGGANG = "경강선"
    SEOHAE = "서해선"
    INCHEON_1 = "인천1호선"
    INCHEON_2 = "인천2호선"
    EVERLINE = "에버라인"
    UIJEONGBU = "의정부경전철"
    UNKNOWN = "미확인"

    @property
    def short_name(self) -> str:
        return _SHORT_NAMES[self]


_SHORT_NAMES = {
    SubwayLine.LINE_1: "1",
    SubwayLine.LINE_2: "2",
    SubwayLine.LINE_3: "3",
    SubwayLine.LINE_4: "4",
    SubwayLine.LINE_5: "5",
    SubwayLine.LINE_6: "6",
    SubwayLine.LINE_7: "7",
    SubwayLine.LINE_8: "8",
    SubwayLine.LINE_9: "9",
    SubwayLine.AIRPORT: "공항",
    SubwayLine.GYEONGUI: "경의",
    SubwayLine.GYEONGCHUN: "경춘",
    SubwayLine.SUIN: "수인",
    SubwayLine.SINBUNDANG: "신분당",
    SubwayLine.GYEONGGANG: "경강",
    SubwayLine.SEOHAE: "서해",
    SubwayLine.INCHEON_1: "인천1",
    SubwayLine.INCHEON_2: "인천2",
    SubwayLine.EVERLINE: "에버",
    SubwayLine.UIJEONGBU: "의정부",
    SubwayLine.UNKNOWN: "?",
}

_PARENTHESIZED = re.compile(r"\([^)]+\)")

# longest names first so "인천1호선" is not read as "1호선"
_MATCH_ORDER = sorted(
    (line for line in SubwayLine if line is not SubwayLine.UNKNOWN),
    key=lambda line: len(line.value),
    reverse=True,
)


def _match(text: str) -> SubwayLine | None:
    for line in _MATCH_ORDER:
        if line.value in text:
            return line
    return None


def parse_lines(station_name: str) -> list[SubwayLine]:
    """Lines served by a station named like ``강남역(2호선,신분당선)``."""
    lines: list[SubwayLine] = []
    found = _PARENTHESIZED.search(station_name)
    if found:
        for part in found.group(0).strip("()").split(","):
            line = _match(part.strip())
            if line is not None and line not in lines:
                lines.append(line)
    if not lines:
        remaining = station_name
        line = _match(remaining)
        while line is not None:
            lines.append(line)
            remaining = remaining.replace(line.value, " ")
            line = _match(remaining)
    return lines or [SubwayLine.UNKNOWN]


def extract_station_name(station_name: str) -> str:
    return _PARENTHESIZED.sub("", station_name).strip()
