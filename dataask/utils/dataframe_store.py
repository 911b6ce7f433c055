"""
인메모리 테이블 저장소

등록된 테이블을 ID로 보관하는 프로세스 로컬 레지스트리입니다.
맵 접근은 threading.Lock으로 보호되며, 등록된 테이블은 수정되지 않습니다.
"""

import logging
import threading
import uuid
from typing import Dict, List

from ..exceptions import TableNotFoundException
from ..models.table import Table

logger = logging.getLogger(__name__)


class DataFrameStore:
    """스레드 안전 테이블 레지스트리"""

    def __init__(self):
        self._tables: Dict[str, Table] = {}
        self._lock = threading.Lock()

    def add(self, table: Table) -> str:
        """테이블을 등록하고 새 ID를 반환합니다."""
        table_id = uuid.uuid4().hex
        with self._lock:
            self._tables[table_id] = table
        logger.info(f"테이블 등록: id={table_id}, name={table.name}, shape={table.shape}")
        return table_id

    def get(self, table_id: str) -> Table:
        with self._lock:
            table = self._tables.get(table_id)
        if table is None:
            raise TableNotFoundException(table_id)
        return table

    def remove(self, table_id: str) -> None:
        with self._lock:
            removed = self._tables.pop(table_id, None)
        if removed is None:
            raise TableNotFoundException(table_id)
        logger.info(f"테이블 삭제: id={table_id}")

    def items(self) -> List[tuple]:
        """(id, table) 목록 스냅샷 (등록 순서)"""
        with self._lock:
            return list(self._tables.items())

    def clear(self) -> None:
        with self._lock:
            self._tables.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._tables)


# 애플리케이션 전역 저장소
store = DataFrameStore()
