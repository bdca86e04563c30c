import os

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import QueuePool

from portfolio.config import settings


def build_engine(database_url: str):
    if database_url.startswith("sqlite"):
        # SQLite 文件库：确保目录存在，并允许跨线程使用连接
        db_path = database_url.split("///", 1)[-1]
        if db_path and db_path != ":memory:":
            os.makedirs(os.path.dirname(os.path.abspath(db_path)), exist_ok=True)
        return create_engine(database_url, connect_args={"check_same_thread": False})

    # MySQL 等服务端数据库，添加连接池配置
    return create_engine(
        database_url,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_recycle=settings.DB_POOL_RECYCLE,
        pool_pre_ping=True,  # 每次从连接池获取连接时ping一下
        poolclass=QueuePool,
    )


engine = build_engine(settings.DATABASE_URL)

# 创建会话工厂
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# 创建基础类，用于定义 ORM 模型
Base = declarative_base()


# 获取数据库会话
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
