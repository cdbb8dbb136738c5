from __future__ import annotations

from docnav_engine.commands import (
    Binding,
    CommandRef,
    CommandRegistry,
    KeymapResolver,
    KeySequence,
    WhenClause,
)


def make_command(command_id: str) -> CommandRef:
    return CommandRef(id=command_id, handler=lambda *args, **kwargs: None)


def make_binding(
    binding_id: str,
    *,
    mode: str = "browse",
    keys: tuple[str, ...] = ("ctrl+n", "h"),
    command_id: str = "next_heading",
    when: tuple[WhenClause, ...] = (),
    priority: int = 0,
    timeout_ms: int = 1000,
) -> Binding:
    return Binding(
        id=binding_id,
        mode=mode,
        sequence=KeySequence.parse(*keys, timeout_ms=timeout_ms),
        command_id=command_id,
        when=when,
        priority=priority,
    )


def build_registry(bindings: list[Binding]) -> CommandRegistry:
    registry = CommandRegistry()
    command_ids = {binding.command_id for binding in bindings}
    for command_id in command_ids:
        registry.register_command(make_command(command_id))
    for binding in bindings:
        registry.register_binding(binding)
    return registry


def test_resolver_matches_exact_sequence() -> None:
    binding = make_binding("browse.next_heading")
    resolver = KeymapResolver(build_registry([binding]))

    result = resolver.resolve("browse", ("ctrl+n", "h"))

    assert result.status == "match"
    assert result.match is not None
    assert result.match.binding.id == binding.id
    assert result.match.command.id == "next_heading"
    assert result.consumed == 2


def test_resolver_reports_pending_for_prefix() -> None:
    registry = build_registry(
        [
            make_binding("browse.next_heading"),
            make_binding("browse.next_link", keys=("ctrl+n", "l"), command_id="next_link"),
        ]
    )
    resolver = KeymapResolver(registry)

    result = resolver.resolve("browse", ("ctrl+n",))

    assert result.status == "pending"
    assert result.next_expected == ("h", "l")


def test_resolver_misses_unknown_tokens() -> None:
    resolver = KeymapResolver(build_registry([make_binding("browse.next_heading")]))

    assert resolver.resolve("browse", ("ctrl+n", "z")).status == "miss"
    assert resolver.resolve("table", ("ctrl+n",)).status == "miss"


def test_resolver_honors_when_clauses() -> None:
    gating = make_binding(
        "browse.next_row",
        keys=("ctrl+shift+down",),
        when=(WhenClause("table_mode"),),
        command_id="next_row",
    )
    resolver = KeymapResolver(build_registry([gating]))

    miss = resolver.resolve("browse", ("ctrl+shift+down",), flags={})
    assert miss.status == "miss"

    hit = resolver.resolve("browse", ("ctrl+shift+down",), flags={"table_mode": True})
    assert hit.status == "match"
    assert hit.match is not None
    assert hit.match.binding.id == gating.id


def test_resolver_picks_the_flag_specific_binding() -> None:
    enter = make_binding(
        "browse.enter_table",
        keys=("ctrl+t",),
        command_id="enter_table",
        when=(WhenClause.parse("!table_mode"),),
    )
    leave = make_binding(
        "browse.exit_table",
        keys=("ctrl+t",),
        command_id="exit_table",
        when=(WhenClause("table_mode"),),
    )
    resolver = KeymapResolver(build_registry([enter, leave]))

    outside = resolver.resolve("browse", ("ctrl+t",), flags={"table_mode": False})
    inside = resolver.resolve("browse", ("ctrl+t",), flags={"table_mode": True})

    assert outside.match is not None and outside.match.command.id == "enter_table"
    assert inside.match is not None and inside.match.command.id == "exit_table"


def test_resolver_prefers_higher_priority() -> None:
    low = make_binding("browse.a", keys=("ctrl+x",), command_id="low")
    high = make_binding(
        "browse.b",
        keys=("ctrl+x",),
        command_id="high",
        priority=5,
        when=(WhenClause("table_mode"),),
    )
    resolver = KeymapResolver(build_registry([low, high]))

    result = resolver.resolve("browse", ("ctrl+x",), flags={"table_mode": True})

    assert result.match is not None
    assert result.match.command.id == "high"


def test_resolver_pending_returns_timeout_hint() -> None:
    binding = make_binding("browse.next_heading", timeout_ms=1500)
    resolver = KeymapResolver(build_registry([binding]))

    result = resolver.resolve("browse", ("ctrl+n",))

    assert result.status == "pending"
    assert result.timeout_ms == 1500


def test_resolver_cache_refreshes_on_revision() -> None:
    registry = build_registry([])
    resolver = KeymapResolver(registry)

    miss = resolver.resolve("browse", ("ctrl+s",))
    assert miss.status == "miss"

    new_binding = make_binding("browse.force_sync", keys=("ctrl+s",), command_id="force_sync")
    registry.register_command(make_command("force_sync"))
    registry.register_binding(new_binding)

    match = resolver.resolve("browse", ("ctrl+s",))
    assert match.status == "match"
    assert match.match is not None
    assert match.match.binding.id == new_binding.id
