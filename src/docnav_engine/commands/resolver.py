"""Trie-based resolution of key tokens to bindings."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Literal, Mapping, Optional, Sequence, Tuple

from docnav_engine.runtime.telemetry import span

from .models import Binding, CommandRef
from .registry import CommandRegistry


@dataclass(slots=True)
class TrieNode:
    bindings: List[str] = field(default_factory=list)
    children: Dict[str, "TrieNode"] = field(default_factory=dict)

    def next_tokens(self) -> tuple[str, ...]:
        return tuple(sorted(self.children))


def _build_trie(bindings: Sequence[Binding]) -> TrieNode:
    root = TrieNode()
    for binding in bindings:
        node = root
        for token in binding.sequence.tokens:
            node = node.children.setdefault(token, TrieNode())
        node.bindings.append(binding.id)
    return root


@dataclass(frozen=True, slots=True)
class ResolutionMatch:
    binding: Binding
    command: CommandRef


@dataclass(frozen=True, slots=True)
class ResolutionResult:
    """``match`` runs a command; ``pending`` waits for more keys; ``miss`` gives up."""

    status: Literal["match", "pending", "miss"]
    match: Optional[ResolutionMatch] = None
    consumed: int = 0
    next_expected: tuple[str, ...] = ()
    timeout_ms: Optional[int] = None


class KeymapResolver:
    """Resolves token sequences against per-mode tries, rebuilt on registry change."""

    def __init__(self, registry: CommandRegistry, *, logger_name: str | None = None) -> None:
        self._registry = registry
        self._logger_name = logger_name
        self._tries: Dict[str, Tuple[int, TrieNode]] = {}

    def resolve(
        self,
        mode: str,
        tokens: Sequence[str],
        *,
        flags: Optional[Mapping[str, bool]] = None,
    ) -> ResolutionResult:
        with span(
            "commands::resolve",
            logger_name=self._logger_name,
            component="commands",
            metadata={"mode": mode, "length": len(tokens)},
        ) as handle:
            node: Optional[TrieNode] = self._trie(mode)
            consumed = 0
            for token in tokens:
                node = node.children.get(token) if node is not None else None
                if node is None:
                    handle.add_metadata("status", "miss")
                    return ResolutionResult(status="miss", consumed=consumed)
                consumed += 1
            assert node is not None

            match = self._select(node, flags or {})
            if match is not None:
                handle.add_metadata("status", "match")
                handle.add_metadata("binding_id", match.binding.id)
                return ResolutionResult(status="match", match=match, consumed=consumed)

            if node.children:
                timeout_ms = self._shortest_timeout(node)
                handle.add_metadata("status", "pending")
                return ResolutionResult(
                    status="pending",
                    consumed=consumed,
                    next_expected=node.next_tokens(),
                    timeout_ms=timeout_ms,
                )
            handle.add_metadata("status", "miss")
            return ResolutionResult(status="miss", consumed=consumed)

    def reset(self, mode: Optional[str] = None) -> None:
        if mode is None:
            self._tries.clear()
        else:
            self._tries.pop(mode, None)

    def _trie(self, mode: str) -> TrieNode:
        revision = self._registry.revision()
        cached = self._tries.get(mode)
        if cached is None or cached[0] != revision:
            cached = (revision, _build_trie(list(self._registry.iter_bindings(mode))))
            self._tries[mode] = cached
        return cached[1]

    def _select(
        self, node: TrieNode, flags: Mapping[str, bool]
    ) -> Optional[ResolutionMatch]:
        candidates = [self._registry.get_binding(b) for b in node.bindings]
        allowed = [binding for binding in candidates if binding.allows(flags)]
        if not allowed:
            return None
        best = min(allowed, key=lambda binding: (-binding.priority, binding.id))
        return ResolutionMatch(best, self._registry.get_command(best.command_id))

    def _shortest_timeout(self, node: TrieNode) -> Optional[int]:
        timeouts: List[int] = []
        pending = list(node.children.values())
        while pending:
            current = pending.pop()
            timeouts.extend(
                self._registry.get_binding(b).sequence.timeout_ms for b in current.bindings
            )
            pending.extend(current.children.values())
        return min(timeouts) if timeouts else None


__all__ = ["KeymapResolver", "ResolutionMatch", "ResolutionResult", "TrieNode"]
