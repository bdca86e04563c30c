# portfolio/routers/wishlist.py
from fastapi import APIRouter, Depends, Request

from portfolio.config import settings
from portfolio.service.gallery import Wishlist

router = APIRouter()


def get_wishlist(request: Request) -> Wishlist:
    # 首次使用时从本地文件加载，之后每次修改立即写回
    wishlist = getattr(request.app.state, "wishlist", None)
    if wishlist is None:
        wishlist = Wishlist(settings.WISHLIST_PATH).load()
        request.app.state.wishlist = wishlist
    return wishlist


@router.get("/wishlist")
def get_wishlist_ids(wishlist: Wishlist = Depends(get_wishlist)):
    return {"code": 200, "data": {"ids": wishlist.ids, "count": wishlist.count}, "msg": "ok"}


@router.post("/wishlist/{project_id}")
def toggle_wishlist(project_id: int, wishlist: Wishlist = Depends(get_wishlist)):
    """切换项目的收藏状态"""
    added = wishlist.toggle(project_id)
    return {"code": 200, "data": {"project_id": project_id, "in_wishlist": added, "count": wishlist.count}, "msg": "ok"}
