"""
config/exam.py

- 수능(THPT) 데이터셋에 고정된 상수 모음
  1) 과목 목록(코드/이름)과 CSV 컬럼 → 과목 코드 매핑
  2) 조합(A/B/C/D)별 3과목 구성
  3) 캐시 키 이름 규칙과 TTL
"""

from typing import Dict, List, Tuple

# =========================================================
# 1) 과목
# =========================================================

# (CSV 컬럼명, 과목 코드, 과목 이름)
SUBJECT_COLUMNS: List[Tuple[str, str, str]] = [
    ("toan", "TOAN", "Toán"),
    ("ngu_van", "NGU_VAN", "Ngữ văn"),
    ("ngoai_ngu", "NGOAI_NGU", "Ngoại ngữ"),
    ("vat_li", "VAT_LI", "Vật lí"),
    ("hoa_hoc", "HOA_HOC", "Hoá học"),
    ("sinh_hoc", "SINH_HOC", "Sinh học"),
    ("lich_su", "LICH_SU", "Lịch sử"),
    ("dia_li", "DIA_LI", "Địa lí"),
    ("gdcd", "GDCD", "Giáo dục Công dân"),
]

SUBJECTS: List[Dict[str, str]] = [{"code": code, "name": name} for _, code, name in SUBJECT_COLUMNS]

SUBJECT_MAP: Dict[str, str] = {column: code for column, code, _ in SUBJECT_COLUMNS}  # toan → TOAN

SBD_LENGTH = 8  # 수험번호: 숫자 8자리 고정

MIN_SCORE = 0.0
MAX_SCORE = 10.0

# =========================================================
# 2) 조합별 과목 (응답 컬럼명 = CSV 컬럼명)
# =========================================================

GROUP_SUBJECTS: Dict[str, Tuple[str, str, str]] = {
    "a": ("toan", "vat_li", "hoa_hoc"),
    "b": ("toan", "hoa_hoc", "sinh_hoc"),
    "c": ("ngu_van", "lich_su", "dia_li"),
    "d": ("toan", "ngu_van", "ngoai_ngu"),
}

TOP_LIMIT_DEFAULT = 10
TOP_LIMIT_MIN = 1
TOP_LIMIT_MAX = 100

# =========================================================
# 3) 캐시 키 / TTL(초)
# =========================================================

CACHE_KEYS = {
    "STUDENT_SCORES": "student:scores:{sbd}",
    "TOP_GROUP": "students:top-group-{group}:{limit}",
    "ALL_SUBJECTS": "subjects:all",
    "SCORE_LEVELS": "statistics:score-levels",
    "SCORE_DISTRIBUTION": "statistics:score-distribution",
}

CACHE_TTL = {
    "STUDENT_SCORES": 3600,      # 1시간
    "TOP_GROUP": 1800,           # 30분
    "ALL_SUBJECTS": 7200,        # 2시간
    "SCORE_LEVELS": 3600,        # 1시간
    "SCORE_DISTRIBUTION": 3600,  # 1시간
}
