"""批量获取

远程接口对单次请求的 ID 数量有上限。BatchFetcher 将任意长度的 ID 列表切分为
连续的批次，每批调用一次网关，并按批次顺序拼接结果。

    - 空输入直接返回空列表，不发起任何请求
    - 任一批次失败则整个调用失败：记录失败批次的 ID 和错误消息，抛出 DirectoryUnavailable
    - 不返回部分结果
    - max_workers > 1 时并发获取各批次，拼接顺序保持不变
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Sequence, TypeVar

from ssodir.config import DirectorySettings
from ssodir.log import get_logger
from .exceptions import DirectoryUnavailable
from .gateway import DirectoryGateway
from .schemas import Position, PersonnelNumber, Department

logger = get_logger()

T = TypeVar("T")


def chunked(ids: Sequence[str], size: int) -> List[List[str]]:
    """将 ID 列表切分为连续批次"""
    if size < 1:
        raise ValueError(f"chunk size must be positive, got {size}")
    ids = list(ids)
    return [ids[i:i + size] for i in range(0, len(ids), size)]


class BatchFetcher:
    """分批获取岗位 / 人员 / 部门

    使用示例:
        fetcher = BatchFetcher(gateway, DirectorySettings(max_workers=4))
        users = fetcher.fetch_personnel(user_ids)   # 1200 个 ID -> 2 次请求
    """

    def __init__(self, gateway: DirectoryGateway, settings: DirectorySettings = None):
        self.gateway = gateway
        self.settings = settings or DirectorySettings()

    def fetch_positions(self, ids: Sequence[str]) -> List[Position]:
        return self._fetch(
            ids, self.settings.position_chunk_size, self.gateway.get_positions_by_ids, "fetch_positions"
        )

    def fetch_personnel(self, ids: Sequence[str]) -> List[PersonnelNumber]:
        return self._fetch(
            ids, self.settings.personnel_chunk_size, self.gateway.get_personnel_by_ids, "fetch_personnel"
        )

    def fetch_departments(self, ids: Sequence[str]) -> List[Department]:
        return self._fetch(
            ids, self.settings.department_chunk_size, self.gateway.get_departments_by_ids, "fetch_departments"
        )

    def _fetch(
        self,
        ids: Sequence[str],
        chunk_size: int,
        fetch: Callable[[List[str]], List[T]],
        operation: str,
    ) -> List[T]:
        chunks = chunked(ids, chunk_size)
        if not chunks:
            return []

        def fetch_chunk(chunk: List[str]) -> List[T]:
            try:
                return list(fetch(chunk))
            except Exception as e:
                raise self._failure(operation, chunk, e) from e

        if self.settings.max_workers > 1 and len(chunks) > 1:
            workers = min(self.settings.max_workers, len(chunks))
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="ssodir-batch") as executor:
                results = list(executor.map(fetch_chunk, chunks))
        else:
            results = [fetch_chunk(chunk) for chunk in chunks]

        out: List[T] = []
        for result in results:
            out.extend(result)
        return out

    @staticmethod
    def _failure(operation: str, chunk: List[str], error: Exception) -> DirectoryUnavailable:
        logger.error(f"{operation} failed: {error}; ids={chunk}")
        return DirectoryUnavailable(operation=operation, ids=chunk)


__all__ = [
    "chunked",
    "BatchFetcher",
]
