# portfolio/service/errors.py
from typing import Optional


class PortfolioError(Exception):
    """领域错误基类"""


class ValidationError(PortfolioError):
    """必填字段缺失或格式错误，在任何持久化调用之前抛出"""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class NotFound(PortfolioError):
    """引用的实体不存在"""

    def __init__(self, entity: str, entity_id):
        super().__init__(f"{entity} not found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class PersistenceError(PortfolioError):
    """存储层或传输层失败，不解析底层状态码"""


class PartialSaveError(PersistenceError):
    """项目文档已写入，但标签关联重写失败；文档不回滚，重新保存即可收敛"""

    def __init__(self, message: str, project_id: int):
        super().__init__(message)
        self.project_id = project_id
