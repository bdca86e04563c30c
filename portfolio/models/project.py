# portfolio/models/project.py
from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.orm import relationship, foreign
from sqlalchemy.sql import func
from portfolio.models.database import Base
from portfolio.models.tag import Tag, project_tags

class Project(Base):
    __tablename__ = "projects"
    __table_args__ = {"sqlite_autoincrement": True}  # 不复用已删除项目的 id

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    thumbnail_url = Column(String(1024), nullable=False)
    preview_video_url = Column(String(1024), nullable=True)  # 为空时前端回退到缩略图
    description = Column(JSON, nullable=False, default=list)  # 内容块列表，整体嵌入存储
    software_icons = Column(JSON, nullable=False, default=list)  # 按选择顺序保存
    order_index = Column(Integer, nullable=False, default=0, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # 只读关联：内连接只会返回仍然存在的标签
    tags = relationship(
        Tag,
        secondary=project_tags,
        primaryjoin=lambda: Project.id == foreign(project_tags.c.project_id),
        secondaryjoin=lambda: Tag.id == foreign(project_tags.c.tag_id),
        order_by=Tag.id,
        viewonly=True,
    )
