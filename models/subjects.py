from sqlalchemy import Column, Integer, String
from database.db import Base

class Subject(Base):
    __tablename__ = "subjects"  # 과목 정보 테이블 (수집 시작 시 고정 목록으로 생성)

    id = Column(Integer, primary_key=True, index=True)         # 과목 고유 ID (Primary Key)
    code = Column(String(20), nullable=False, unique=True)    # 과목 코드 (예: TOAN, NGU_VAN)
    name = Column(String(100), nullable=False)                # 과목 이름 (예: Toán)
