"""Tests for the callback chain."""

import logging

import pytest

from dotcli.callbacks import FORMAT_OUTPUT, CallbackRegistry, Continue, Halt, for_context, for_text
from dotcli.context import OutputContext, OutputItem


@pytest.fixture
def registry():
    return CallbackRegistry()


class TestChain:
    """Ordering, halting and fault isolation."""

    def test_registration_order(self, registry):
        registry.register(FORMAT_OUTPUT, lambda v: v + "a")
        registry.register(FORMAT_OUTPUT, lambda v: v + "b")
        assert registry.execute(FORMAT_OUTPUT, "x") == "xab"

    def test_halt_skips_remaining(self, registry):
        later = []
        registry.register(FORMAT_OUTPUT, lambda v: v + "1")
        registry.register(FORMAT_OUTPUT, lambda v: Halt("stopped"))
        registry.register(FORMAT_OUTPUT, lambda v: later.append(v) or v)
        assert registry.execute(FORMAT_OUTPUT, "x") == "stopped"
        assert later == []

    def test_continue_wrapper(self, registry):
        registry.register(FORMAT_OUTPUT, lambda v: Continue(v * 2))
        registry.register(FORMAT_OUTPUT, lambda v: v + 1)
        assert registry.execute(FORMAT_OUTPUT, 2) == 5

    def test_fault_is_isolated(self, registry, caplog):
        caplog.set_level(logging.WARNING, logger="dotcli.callbacks")
        seen = []

        def broken(value):
            raise RuntimeError("boom")

        registry.register(FORMAT_OUTPUT, broken)
        registry.register(FORMAT_OUTPUT, lambda v: seen.append(v) or v + "!")
        assert registry.execute(FORMAT_OUTPUT, "x") == "x!"
        assert seen == ["x"]
        assert any("broken" in r.getMessage() for r in caplog.records)

    def test_no_callbacks_returns_input(self, registry):
        value = object()
        assert registry.execute(FORMAT_OUTPUT, value) is value

    def test_decorator_registration(self, registry):
        @registry.on(FORMAT_OUTPUT)
        def exclaim(value):
            return value + "!"

        assert registry.has_callbacks(FORMAT_OUTPUT)
        assert registry.execute(FORMAT_OUTPUT, "hi") == "hi!"

    def test_unregister_and_clear(self, registry):
        cb = registry.register(FORMAT_OUTPUT, lambda v: v)
        registry.register("other", lambda v: v)
        assert registry.unregister(FORMAT_OUTPUT, cb)
        assert not registry.unregister(FORMAT_OUTPUT, cb)
        assert not registry.has_callbacks(FORMAT_OUTPUT)
        registry.clear()
        assert not registry.has_callbacks("other")

    def test_rejects_non_callable(self, registry):
        with pytest.raises(TypeError):
            registry.register(FORMAT_OUTPUT, "not callable")


class TestShapes:
    """Text and context callbacks coexist in one chain."""

    def test_text_callback_ignores_context(self, registry):
        ctx = OutputContext.new(command="x").add_output(OutputItem.text("body"))
        registry.register(FORMAT_OUTPUT, for_text(lambda s: s.upper()))
        result = registry.execute(FORMAT_OUTPUT, ctx)
        assert result is ctx

    def test_context_callback_ignores_text(self, registry):
        registry.register(FORMAT_OUTPUT, for_context(lambda c: c.add_output(OutputItem.info("x"))))
        assert registry.execute(FORMAT_OUTPUT, "plain") == "plain"

    def test_mixed_chain(self, registry):
        registry.register(FORMAT_OUTPUT, for_text(lambda s: s.upper()))
        registry.register(FORMAT_OUTPUT, for_context(lambda c: c.update_cargo({"seen": True})))

        assert registry.execute(FORMAT_OUTPUT, "hi") == "HI"
        ctx = registry.execute(FORMAT_OUTPUT, OutputContext.new())
        assert ctx.cargo == {"seen": True}

    def test_shape_tag(self):
        assert for_text(lambda s: s).accepts == "text"
        assert for_context(lambda c: c).accepts == "context"
