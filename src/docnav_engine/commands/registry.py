"""Registry of user commands and the key bindings that trigger them."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Iterable, Iterator, List, Optional, Set

from docnav_engine.runtime.telemetry import span

from .models import Binding, CommandRef, KeySequence


@dataclass(slots=True)
class RegistryStats:
    command_count: int
    binding_count: int
    modes: tuple[str, ...]


class BindingConflictError(RuntimeError):
    """A binding would shadow another one reachable under the same flags."""

    def __init__(self, binding: Binding, conflicts: Iterable[Binding]):
        self.binding = binding
        self.conflicts = tuple(conflicts)
        super().__init__(
            f"Binding '{binding.id}' conflicts with {[b.id for b in self.conflicts]}"
        )


class CommandRegistry:
    """Owns command references and binding metadata.

    ``revision()`` increases on every binding change so resolvers can cache
    their tries.
    """

    def __init__(self, *, logger_name: str | None = None) -> None:
        self._commands: Dict[str, CommandRef] = {}
        self._bindings: Dict[str, Binding] = {}
        # mode -> key signature -> binding ids
        self._index: Dict[str, Dict[str, Set[str]]] = {}
        self._logger_name = logger_name
        self._revision = 0

    def revision(self) -> int:
        return self._revision

    def get_command(self, command_id: str) -> CommandRef:
        try:
            return self._commands[command_id]
        except KeyError:
            raise KeyError(f"Command '{command_id}' is not registered") from None

    def has_command(self, command_id: str) -> bool:
        return command_id in self._commands

    def get_binding(self, binding_id: str) -> Binding:
        try:
            return self._bindings[binding_id]
        except KeyError:
            raise KeyError(f"Binding '{binding_id}' is not registered") from None

    def register_command(self, command: CommandRef, *, replace: bool = False) -> CommandRef:
        if not replace and command.id in self._commands:
            raise ValueError(f"Command '{command.id}' already registered")
        self._commands[command.id] = command
        return command

    def register_binding(self, binding: Binding, *, replace: bool = False) -> Binding:
        with span(
            "commands::register_binding",
            logger_name=self._logger_name,
            component="commands",
            metadata={"binding_id": binding.id, "mode": binding.mode},
        ) as handle:
            if binding.command_id not in self._commands:
                handle.add_metadata("missing_command", binding.command_id)
                raise KeyError(
                    f"Binding '{binding.id}' references unknown command '{binding.command_id}'"
                )
            conflicts = [c for c in self.detect_conflicts(binding) if c.id != binding.id]
            if conflicts and not replace:
                handle.add_metadata("conflicts", ",".join(c.id for c in conflicts))
                raise BindingConflictError(binding, conflicts)
            if binding.id in self._bindings:
                if not replace:
                    raise ValueError(f"Binding id '{binding.id}' already registered")
                self._unindex(self._bindings.pop(binding.id))
            for conflict in conflicts:
                self._unindex(self._bindings.pop(conflict.id))
            self._bindings[binding.id] = binding
            self._index_binding(binding)
            self._revision += 1
            return binding

    def unregister_binding(self, binding_id: str) -> Optional[Binding]:
        binding = self._bindings.pop(binding_id, None)
        if binding is not None:
            self._unindex(binding)
            self._revision += 1
        return binding

    def iter_bindings(self, mode: Optional[str] = None) -> Iterator[Binding]:
        if mode is None:
            yield from self._bindings.values()
            return
        for bucket in self._index.get(mode, {}).values():
            for binding_id in sorted(bucket):
                yield self._bindings[binding_id]

    def bindings_for_command(self, command_id: str) -> List[Binding]:
        return [b for b in self._bindings.values() if b.command_id == command_id]

    def override_sequence_timeouts(self, timeout_ms: int, *, mode: Optional[str] = None) -> None:
        if timeout_ms <= 0:
            raise ValueError("timeout_ms must be positive")
        for binding in list(self.iter_bindings(mode)):
            updated = replace(
                binding, sequence=KeySequence(binding.sequence.strokes, timeout_ms)
            )
            self._bindings[binding.id] = updated
        self._revision += 1

    def stats(self) -> RegistryStats:
        return RegistryStats(
            command_count=len(self._commands),
            binding_count=len(self._bindings),
            modes=tuple(sorted(self._index)),
        )

    def detect_conflicts(self, binding: Binding) -> List[Binding]:
        bucket = self._index.get(binding.mode, {}).get(binding.key_signature, set())
        return [
            self._bindings[other]
            for other in sorted(bucket)
            if _flags_overlap(binding, self._bindings[other])
        ]

    def _index_binding(self, binding: Binding) -> None:
        by_signature = self._index.setdefault(binding.mode, {})
        by_signature.setdefault(binding.key_signature, set()).add(binding.id)

    def _unindex(self, binding: Binding) -> None:
        by_signature = self._index.get(binding.mode, {})
        bucket = by_signature.get(binding.key_signature)
        if bucket is None:
            return
        bucket.discard(binding.id)
        if not bucket:
            del by_signature[binding.key_signature]
        if not by_signature:
            self._index.pop(binding.mode, None)


def _flags_overlap(left: Binding, right: Binding) -> bool:
    """Whether some flag assignment enables both bindings at once."""

    left_map, right_map = left.when_map, right.when_map
    for flag, expected in left_map.items():
        if flag in right_map and right_map[flag] != expected:
            return False
    if not left.when and not right.when:
        return True
    if not left.when or not right.when:
        return False
    return dict(left_map) == dict(right_map)


__all__ = ["BindingConflictError", "CommandRegistry", "RegistryStats"]
