from services.ingest.csv_reader import (
    ExamFileError,
    ExamRow,
    IngestError,
    InvalidRowError,
    check_exam_file,
    read_exam_rows,
)
from services.ingest.pipeline import ExamScoreImporter, IngestReport, ingest_exam_scores

__all__ = [
    "ExamFileError",
    "ExamRow",
    "ExamScoreImporter",
    "IngestError",
    "IngestReport",
    "InvalidRowError",
    "check_exam_file",
    "ingest_exam_scores",
    "read_exam_rows",
]
