from fastapi import APIRouter, Request
from fastapi.responses import StreamingResponse
from portfolio.config import settings
from portfolio.sse.connection_manager import manager

router = APIRouter()

@router.get("/sse/projects")
async def sse_projects(request: Request):
    """建立 SSE 连接，接收项目与标签的变更通知（project_updated / tag_updated）"""
    queue = await manager.connect(request)

    return StreamingResponse(
        manager.send_event(queue, request, heartbeat=settings.SSE_HEARTBEAT_SECONDS),
        media_type="text/event-stream",
        headers={
            'Cache-Control': 'no-cache',
            'Connection': 'keep-alive',
            'X-Accel-Buffering': 'no'  # Nginx 特殊设置
        }
    )

@router.get("/sse/status")
def sse_status():
    return {"code": 200, "data": {"connections": manager.connection_count}, "msg": "ok"}
