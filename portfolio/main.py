import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from portfolio.config import settings
from portfolio.models.database import engine, Base
from portfolio.routers import project, sse, tag, wishlist
from portfolio.service.block_editor import BlockSequenceMismatch
from portfolio.service.errors import NotFound, PartialSaveError, PersistenceError, ValidationError
from portfolio.service.gallery import Wishlist

# 配置日志
logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Portfolio API",
    description="Project gallery with block-based descriptions and tag management",
    version="1.0.0",
)

# 配置CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 注册路由
app.include_router(project.router)  # 项目相关接口
app.include_router(tag.router)  # 标签相关接口
app.include_router(wishlist.router)  # 收藏夹接口
app.include_router(sse.router)  # sse相关接口


# 领域错误到 HTTP 状态码的映射
@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=422, content={"detail": str(exc), "field": exc.field})


@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(BlockSequenceMismatch)
async def block_sequence_handler(request: Request, exc: BlockSequenceMismatch):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(PersistenceError)
async def persistence_error_handler(request: Request, exc: PersistenceError):
    content = {"detail": str(exc)}
    if isinstance(exc, PartialSaveError):
        # 文档已写入，重新保存即可
        content["project_id"] = exc.project_id
    return JSONResponse(status_code=502, content=content)


@app.on_event("startup")
def init_db():
    # 初始化数据库表
    Base.metadata.create_all(bind=engine)
    app.state.wishlist = Wishlist(settings.WISHLIST_PATH).load()
    logger.info("Portfolio API started (database=%s)", engine.url.render_as_string(hide_password=True))


@app.get("/")
async def root():
    return {"message": "Welcome to Portfolio API"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
