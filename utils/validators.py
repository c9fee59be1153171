import re
from typing import Optional

from config.exam import MAX_SCORE, MIN_SCORE, SBD_LENGTH

# 점수 표기: "8", "8.5", "6.25" 같은 10진수만 (부호/지수/밑줄/nan 불가)
_SCORE_PATTERN = re.compile(r"[0-9]+(\.[0-9]+)?")


def sbd_error(sbd: Optional[str]) -> Optional[str]:
    """수험번호 규칙(숫자 8자리) 위반 사유. 문제없으면 None."""
    if not sbd:
        return "SBD는 비어 있을 수 없습니다"
    if len(sbd) != SBD_LENGTH:
        return f"SBD는 {SBD_LENGTH}자리여야 합니다"
    if not sbd.isascii() or not sbd.isdigit():
        return "SBD는 숫자만 포함해야 합니다"
    return None


def parse_score(raw: str) -> float:
    """점수 문자열 → float. 10진수 표기가 아니거나 0~10 범위를 벗어나면 ValueError."""
    if not _SCORE_PATTERN.fullmatch(raw):
        raise ValueError(f"점수 형식이 올바르지 않습니다: {raw!r}")
    value = float(raw)
    if not MIN_SCORE <= value <= MAX_SCORE:
        raise ValueError(f"점수 범위(0~10)를 벗어났습니다: {raw}")
    return value
