from sqlalchemy import Column, ForeignKey, Integer, Numeric, UniqueConstraint
from database.db import Base

class Score(Base):
    __tablename__ = "scores"  # 과목별 점수 테이블 (점수가 없는 과목은 행 자체가 없음)
    __table_args__ = (
        UniqueConstraint("student_id", "subject_id", name="uq_scores_student_subject"),
    )

    id = Column(Integer, primary_key=True, index=True)                                  # 점수 고유 ID (Primary Key)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False, index=True)  # 수험생 ID
    subject_id = Column(Integer, ForeignKey("subjects.id"), nullable=False, index=True)  # 과목 ID
    score = Column(Numeric(4, 2, asdecimal=False), nullable=True)                       # 점수 (0 ~ 10)
