from sqlalchemy import CheckConstraint, Column, Integer, String
from database.db import Base

class Student(Base):
    __tablename__ = "students"  # 수험생 기본 정보 테이블
    __table_args__ = (
        CheckConstraint("length(sbd) = 8", name="ck_students_sbd_length"),
    )

    id = Column(Integer, primary_key=True, index=True)               # 고유 수험생 ID (Primary Key)
    sbd = Column(String(8), nullable=False, unique=True)            # 수험번호 (숫자 8자리)
    ma_ngoai_ngu = Column(String(10), nullable=True)                # 외국어 코드 (예: N1), 없으면 NULL
