from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable


StageFn = Callable[[dict[str, Any]], dict[str, Any]]


@dataclass(frozen=True)
class Stage:
    name: str
    fn: StageFn
    requires: tuple[str, ...] = ()


class StageGraph:
    """Dependency-ordered analysis stages.

    Each stage sees the seed values plus the outputs of the stages it
    requires, keyed by stage name. Stages that do not depend on each other
    keep their declaration order.
    """

    def __init__(self, stages: list[Stage]) -> None:
        self._stages: dict[str, Stage] = {}
        for stage in stages:
            if stage.name in self._stages:
                raise ValueError(f"Duplicate stage '{stage.name}'")
            self._stages[stage.name] = stage
        self._order = self._resolve_order()

    @property
    def order(self) -> list[str]:
        return list(self._order)

    def run(self, seed: dict[str, Any]) -> dict[str, Any]:
        context = dict(seed)
        durations: dict[str, float] = {}

        for name in self._order:
            stage = self._stages[name]
            view = dict(seed)
            view.update({dep: context[dep] for dep in stage.requires})

            started = time.perf_counter()
            context[name] = stage.fn(view)
            durations[name] = round((time.perf_counter() - started) * 1000, 3)

        context["stage_durations_ms"] = durations
        return context

    def _resolve_order(self) -> list[str]:
        order: list[str] = []
        state: dict[str, str] = {}

        def visit(name: str, path: tuple[str, ...]) -> None:
            if state.get(name) == "done":
                return
            if state.get(name) == "visiting":
                raise ValueError(f"Stage graph has a cycle: {' -> '.join(path + (name,))}")
            state[name] = "visiting"
            for dep in self._stages[name].requires:
                if dep not in self._stages:
                    raise ValueError(f"Stage '{name}' requires unknown stage '{dep}'")
                visit(dep, path + (name,))
            state[name] = "done"
            order.append(name)

        for name in self._stages:
            visit(name, ())
        return order
