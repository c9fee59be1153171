"""
services/ingest/csv_reader.py

- 성적 CSV를 한 줄씩 읽어 ExamRow로 정규화 (파일 전체를 메모리에 올리지 않음)
- 헤더/값 앞뒤 공백 제거, 빈 과목 값은 "점수 없음"으로 취급해 scores에서 제외
- 수험번호 규칙 위반/숫자가 아닌 점수가 있는 행은 거부: 로그 + 카운트 후 다음 행으로
"""

import csv
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Union

from config.exam import SUBJECT_MAP
from utils.validators import parse_score, sbd_error

logger = logging.getLogger(__name__)

SBD_COLUMN = "sbd"
LANGUAGE_COLUMN = "ma_ngoai_ngu"


class IngestError(Exception):
    """수집 실행을 중단시키는 오류."""


class ExamFileError(IngestError):
    """파일 자체를 읽을 수 없는 경우 (없음, 헤더 누락 등)."""


class InvalidRowError(ValueError):
    def __init__(self, line_number: int, reason: str):
        super().__init__(f"line {line_number}: {reason}")
        self.line_number = line_number
        self.reason = reason


@dataclass(frozen=True)
class ExamRow:
    line_number: int
    sbd: str
    ma_ngoai_ngu: Optional[str]
    scores: Dict[str, float] = field(default_factory=dict)  # CSV 컬럼명(toan 등) → 점수


@dataclass
class ReadStats:
    rows_read: int = 0
    rows_rejected: int = 0


def _clean(value: Optional[str]) -> str:
    return value.strip() if value else ""


def parse_exam_row(raw: Dict[str, Optional[str]], line_number: int) -> ExamRow:
    sbd = _clean(raw.get(SBD_COLUMN))
    reason = sbd_error(sbd)
    if reason:
        raise InvalidRowError(line_number, reason)

    scores: Dict[str, float] = {}
    for column in SUBJECT_MAP:
        value = _clean(raw.get(column))
        if not value:
            continue
        try:
            scores[column] = parse_score(value)
        except ValueError:
            raise InvalidRowError(line_number, f"{column} 점수가 올바르지 않습니다: {value!r}") from None

    return ExamRow(
        line_number=line_number,
        sbd=sbd,
        ma_ngoai_ngu=_clean(raw.get(LANGUAGE_COLUMN)) or None,  # 빈 문자열 → NULL
        scores=scores,
    )


def _normalized_header(reader: csv.DictReader, path: Path) -> List[str]:
    if reader.fieldnames is None:
        raise ExamFileError(f"빈 CSV 파일입니다: {path}")
    header = [name.strip().lower() for name in reader.fieldnames]
    if SBD_COLUMN not in header:
        raise ExamFileError(f"'{SBD_COLUMN}' 컬럼이 없습니다: {path} (헤더: {header})")
    return header


def check_exam_file(csv_path: Union[str, Path]) -> Path:
    """파일 존재 여부와 헤더만 확인 (DB에 쓰기 전에 호출)."""
    path = Path(csv_path).expanduser()
    if not path.is_file():
        raise ExamFileError(f"CSV 파일을 찾을 수 없습니다: {path}")
    with open(path, newline="", encoding="utf-8-sig") as csvfile:
        _normalized_header(csv.DictReader(csvfile), path)
    return path


def read_exam_rows(csv_path: Union[str, Path], stats: Optional[ReadStats] = None) -> Iterator[ExamRow]:
    """유효한 행만 순서대로 내보내는 제너레이터. stats가 주어지면 읽은/거부한 행 수를 기록."""
    path = Path(csv_path).expanduser()
    if not path.is_file():
        raise ExamFileError(f"CSV 파일을 찾을 수 없습니다: {path}")
    stats = stats if stats is not None else ReadStats()

    with open(path, newline="", encoding="utf-8-sig") as csvfile:
        reader = csv.DictReader(csvfile)
        reader.fieldnames = _normalized_header(reader, path)

        for raw in reader:
            stats.rows_read += 1
            try:
                yield parse_exam_row(raw, reader.line_num)
            except InvalidRowError as exc:
                stats.rows_rejected += 1
                logger.warning(f"행 거부 {path.name}:{exc.line_number} - {exc.reason}")
