# portfolio/models/tag.py
from sqlalchemy import Column, Integer, String, DateTime, Table
from sqlalchemy.sql import func
from portfolio.models.database import Base

# 项目标签关联表（多对多关系）
# 不设外键约束：删除标签或项目后关联行成为悬挂引用，读取时通过内连接过滤
project_tags = Table(
    'project_tags',
    Base.metadata,
    Column('project_id', Integer, primary_key=True, index=True),
    Column('tag_id', Integer, primary_key=True, index=True),
    Column('created_at', DateTime(timezone=True), server_default=func.now())
)

class Tag(Base):
    __tablename__ = "tags"
    # SQLite 默认会复用已删除的最大 id，悬挂的关联行会指向新标签
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, index=True)
    label = Column(String(100), nullable=False, index=True)
    hex_color = Column(String(7), nullable=False)  # 十六进制颜色值，如 #e74c3c
    created_at = Column(DateTime(timezone=True), server_default=func.now())
