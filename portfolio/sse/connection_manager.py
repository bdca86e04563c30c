from fastapi import Request
from typing import Any, AsyncIterator, Dict, Optional
import asyncio
import json
import logging

logger = logging.getLogger(__name__)


class SSEConnectionManager:
    """向已打开的画廊页面推送内容变更通知，前端收到后重新拉取数据"""

    def __init__(self):
        self.connection_queues: Dict[Request, asyncio.Queue] = {}

    @property
    def connection_count(self) -> int:
        return len(self.connection_queues)

    async def connect(self, request: Request) -> asyncio.Queue:
        # 为每个连接创建一个消息队列
        queue = asyncio.Queue()
        self.connection_queues[request] = queue
        logger.debug("SSE 连接建立，当前连接数 %s", self.connection_count)
        return queue

    def disconnect(self, request: Request):
        # 断开连接时清理资源
        self.connection_queues.pop(request, None)
        logger.debug("SSE 连接断开，当前连接数 %s", self.connection_count)

    async def broadcast(self, message: Dict[str, Any]):
        # 向所有活跃连接广播消息
        payload = json.dumps(message)
        for queue in list(self.connection_queues.values()):
            await queue.put(payload)

    async def notify(self, entity: str, action: str, entity_id: Optional[int] = None):
        """entity: project / tag；action: create / update / delete"""
        message = {"type": f"{entity}_updated", "action": action}
        if entity_id is not None:
            message[f"{entity}_id"] = entity_id
        await self.broadcast(message)

    async def send_event(
        self, queue: asyncio.Queue, request: Request, heartbeat: Optional[float] = None
    ) -> AsyncIterator[str]:
        try:
            yield "data: connected\n\n"

            while True:
                # 等待有消息放入队列，空闲时发送注释行保活
                try:
                    message = await asyncio.wait_for(queue.get(), timeout=heartbeat)
                except asyncio.TimeoutError:
                    yield ": ping\n\n"
                    continue
                yield f"data: {message}\n\n"
        except asyncio.CancelledError:
            # 当请求被取消时，清理连接
            self.disconnect(request)
            raise


# 创建全局实例
manager = SSEConnectionManager()
