"""任务依赖图

Task.dependencies 表示有向无环图：边 dep -> task 表示 dep 应先于 task 完成。
未知的依赖 ID（例如前置任务已被删除）不阻塞任务。
"""

from collections.abc import Iterable

from .models.enums import TaskStatus
from .models.task import Task


class DependencyGraph:
    """基于任务集合快照构建的依赖图（只读）"""

    def __init__(self, edges: dict[str, list[str]], statuses: dict[str, TaskStatus]) -> None:
        """
        Args:
            edges: task_id -> 前置任务 ID 列表
            statuses: task_id -> 当前状态
        """
        self._edges = edges
        self._statuses = statuses

    @classmethod
    def from_tasks(cls, tasks: Iterable[Task]) -> "DependencyGraph":
        edges: dict[str, list[str]] = {}
        statuses: dict[str, TaskStatus] = {}
        for task in tasks:
            edges[task.task_id] = list(task.dependencies)
            statuses[task.task_id] = task.status
        return cls(edges, statuses)

    def dependencies_of(self, task_id: str) -> list[str]:
        return list(self._edges.get(task_id, []))

    def dependents_of(self, task_id: str) -> list[str]:
        """直接依赖 task_id 的任务"""
        return [tid for tid, deps in self._edges.items() if task_id in deps]

    def unfinished(self, dependency_ids: Iterable[str]) -> list[str]:
        """dependency_ids 中已知且未完成的任务（保持输入顺序）"""
        return [
            dep
            for dep in dependency_ids
            if dep in self._statuses and self._statuses[dep] != TaskStatus.COMPLETED
        ]

    def blocking_dependencies(self, task_id: str) -> list[str]:
        """尚未完成的已知前置任务（保持声明顺序）"""
        return self.unfinished(self._edges.get(task_id, []))

    def can_start(self, task_id: str) -> bool:
        """所有已知前置任务都已完成"""
        return not self.blocking_dependencies(task_id)

    def would_create_cycle(self, task_id: str, dependencies: Iterable[str]) -> bool:
        """把 task_id 的依赖替换为 dependencies 后是否成环（含自依赖）"""
        dependencies = list(dependencies)
        if task_id in dependencies:
            return True
        edges = dict(self._edges)
        edges[task_id] = dependencies
        # 从每个新依赖出发沿依赖边搜索，能回到 task_id 即成环
        stack = list(dependencies)
        seen: set[str] = set()
        while stack:
            current = stack.pop()
            if current == task_id:
                return True
            if current in seen:
                continue
            seen.add(current)
            stack.extend(edges.get(current, []))
        return False

    def topological_order(self) -> list[str]:
        """前置任务在前的拓扑序；同层按插入顺序，保证结果确定

        Raises:
            ValueError: 图中存在环
        """
        known = list(self._edges)
        indegree = {tid: 0 for tid in known}
        for tid in known:
            for dep in self._edges[tid]:
                if dep in indegree:
                    indegree[tid] += 1

        order: list[str] = []
        ready = [tid for tid in known if indegree[tid] == 0]
        while ready:
            current = ready.pop(0)
            order.append(current)
            for tid in known:
                if current in self._edges[tid] and tid in indegree:
                    indegree[tid] -= 1
                    if indegree[tid] == 0:
                        ready.append(tid)

        if len(order) != len(known):
            raise ValueError("dependency graph contains a cycle")
        return order
