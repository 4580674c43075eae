# -*- coding: utf-8 -*-

import pytest

from ..conditions import condition
from ..dispatch import signal, error, ConditionError, handlers, try_catch
from ..restarts import (Restart, restarts, with_restarts,
                        find_restart, invoke_restart, available_restarts,
                        invoker, use_value)
from ..collections import unbox

def odd(k):
    return condition(["odd_number", "error"], f"{k} is odd", value=k)

def test_basic_usage():
    # Low-level logic - define here what actions are available when stuff
    # goes wrong. When the block aborts due to a signaled condition, the
    # return value of the restart chosen (by a handler defined in
    # higher-level code) becomes the result of the block.
    _drop = object()
    def lowlevel():
        out = []
        for k in range(10):
            with restarts(use_value=(lambda x: x),
                          double=(lambda x: 2 * x),
                          drop=(lambda x: _drop)) as result:
                if k % 2 == 1:
                    error(odd(k))
                result << k
            r = unbox(result)
            if r is not _drop:
                out.append(r)
        return out

    # High-level logic. Choose here which action the low-level logic should take.
    with pytest.raises(ConditionError):
        lowlevel()
    with handlers(odd_number=lambda c: use_value(c.value)):
        assert lowlevel() == list(range(10))
    with handlers(odd_number=lambda c: invoke_restart("double", c.value)):
        assert lowlevel() == [0, 2, 2, 6, 4, 10, 6, 14, 8, 18]
    with handlers(odd_number=lambda c: invoke_restart("drop", c.value)):
        assert lowlevel() == [0, 2, 4, 6, 8]

def test_three_levels():
    # Restarts can live at any level. The handler picks the level to resume at;
    # the mid and low levels stay as-is.
    def lowlevel():
        with restarts(resume_low=(lambda x: x)) as result:
            signal(condition("tell_me", "how to recover?"))
            result << "low level ran to completion"
        return unbox(result) + " > normal exit from low level"

    def midlevel():
        with restarts(resume_mid=(lambda x: x)) as result:
            result << lowlevel()
        return unbox(result) + " > normal exit from mid level"

    assert midlevel() == "low level ran to completion > normal exit from low level > normal exit from mid level"
    with handlers(tell_me=lambda c: invoke_restart("resume_low", "resumed at low level")):
        assert midlevel() == "resumed at low level > normal exit from low level > normal exit from mid level"
    with handlers(tell_me=lambda c: invoke_restart("resume_mid", "resumed at mid level")):
        assert midlevel() == "resumed at mid level > normal exit from mid level"

def test_with_restarts():
    with handlers(odd_number=lambda c: use_value(42)):
        assert with_restarts(lambda: error(odd(1)), use_value=(lambda x: x)) == 42
    assert with_restarts(lambda: 21, use_value=(lambda x: x)) == 21
    # A restart may be called `body`.
    assert with_restarts(lambda: invoke_restart("body"), body=(lambda: "ok")) == "ok"

def test_restart_runs_after_unwinding():
    # The recovery function runs at the establishment point: the restarts of
    # its own block, and everything deeper, are gone by then.
    seen = []
    def recover():
        seen.append(find_restart("outer_restart"))
        seen.append(find_restart("inner_restart"))
        return "recovered"
    def body():
        with restarts(inner_restart=(lambda: None)):
            invoke_restart("outer_restart")
    assert with_restarts(body, outer_restart=recover) == "recovered"
    assert seen == [None, None]

def test_cleanup_runs_innermost_first():
    log = []
    def body():
        try:
            try:
                invoke_restart("out")
            finally:
                log.append("inner")
        finally:
            log.append("outer")
    with_restarts(body, out=(lambda: log.append("restart")))
    assert log == ["inner", "outer", "restart"]

def test_find_restart():
    assert find_restart("myrestart") is None
    with restarts(myrestart=(lambda: 42)):
        r = find_restart("myrestart")
        assert isinstance(r, Restart)
        assert r.name == "myrestart"
        assert r.active
        # No side effects; repeated lookups return the same binding.
        assert find_restart("myrestart") is r
        assert available_restarts() == [("myrestart", r.function)]
    assert not r.active
    assert find_restart("myrestart") is None

    # Look before you leap.
    def invoke_if_exists(name):
        r = find_restart(name)
        if r:
            invoke_restart(r)
        return "no such restart"
    with handlers(just_a_condition=lambda: invoke_if_exists("myrestart")):
        with restarts(myrestart=(lambda: 42)) as result:
            signal(condition("just_a_condition", "x"))
            result << 21
        assert unbox(result) == 42
        assert invoke_if_exists("myrestart") == "no such restart"

def test_name_shadowing():
    # Dynamically the most recent binding of the same name wins.
    def lowlevel():
        with restarts(r=(lambda x: x)) as a:
            signal(condition("help_me", "help", value=21))
            a << False
        with restarts(r=(lambda x: x)):
            with restarts(r=(lambda x: 2 * x)) as b:
                signal(condition("help_me", "help", value=21))
                b << False
        return unbox(a), unbox(b)
    with handlers(help_me=lambda c: invoke_restart("r", c.value)):
        assert lowlevel() == (21, 42)

    with restarts(r=(lambda: "outer")):
        outer = find_restart("r")
        with restarts(r=(lambda: "inner")):
            inner = find_restart("r")
            assert inner is not outer
            assert [name for name, _ in available_restarts()] == ["r"]
            assert available_restarts()[0][1] is inner.function
        assert find_restart("r") is outer

    # An explicit reference reaches past a shadowing binding.
    def body():
        with restarts(r=(lambda: "inner")):
            invoke_restart(outer_ref[0])
    with restarts(r=(lambda: "outer")) as result:
        outer_ref = [find_restart("r")]
        body()
    assert unbox(result) == "outer"

def test_nonexistent_restart():
    # Invoking outside any `with restarts` *signals* a control error...
    seen = []
    with handlers(control_error=lambda c: seen.append(c)):
        with pytest.raises(ConditionError):
            invoke_restart("woo")
    assert seen[0].has_tag("error")
    assert seen[0].name == "woo"

    # ...which, if nobody takes control, escalates.
    with restarts(foo=(lambda x: x)):
        with pytest.raises(ConditionError) as excinfo:
            invoke_restart("bar")
    assert "No such restart: 'bar'" in str(excinfo.value)
    assert excinfo.value.condition.available == ["foo"]

    # It is a condition like any other, so a handler can recover from it.
    def fallback(c):
        invoke_restart("use_value", f"no {c.name}")
    with handlers(control_error=fallback):
        with restarts(use_value=(lambda x: x)) as result:
            invoke_restart("woo")
    assert unbox(result) == "no woo"

def test_stale_restart():
    with restarts(gone=(lambda: None)):
        stale = find_restart("gone")
    seen = []
    with handlers(restart_not_active_error=lambda c: seen.append(c.name)):
        with pytest.raises(ConditionError) as excinfo:
            invoke_restart(stale)
    assert seen == ["gone"]
    assert excinfo.value.condition.has_tag("control_error")

def test_invoke_type_check():
    with pytest.raises(ConditionError) as excinfo:
        invoke_restart(42)
    assert excinfo.value.condition.has_tag("type_error")

def test_argument_mismatch_is_local():
    # A mismatch against the restart's signature is an ordinary TypeError at
    # the call site. Nothing is unwound, and no condition is signaled.
    seen = []
    with handlers(error=lambda c: seen.append(c)):
        with restarts(use_value=(lambda x: x)) as result:
            with pytest.raises(TypeError):
                invoke_restart("use_value")
            with pytest.raises(TypeError):
                invoke_restart("use_value", 1, 2)
            with pytest.raises(TypeError):
                invoke_restart("use_value", y=1)
            result << "still here"
    assert unbox(result) == "still here"
    assert seen == []

def test_kwargs():
    with restarts(configure=(lambda *, level=0: level)) as result:
        invoke_restart("configure", level=3)
    assert unbox(result) == 3

def test_invoker():
    with handlers(just_testing=invoker("hello")):
        with restarts(hello=(lambda: "hello")) as result:
            signal(condition("just_testing", "x"))
            result << 21
    assert unbox(result) == "hello"

    # Frozen args are passed to the restart.
    with handlers(just_testing=invoker("use_value", 42)):
        with restarts(use_value=(lambda x: x)) as result:
            signal(condition("just_testing", "x"))
            result << 21
    assert unbox(result) == 42
    assert invoker("use_value").__name__ == "use_value"

def test_restart_from_catching_handler_is_stale():
    # A catching handler runs after unwinding, so restarts established
    # inside the protected body can no longer be invoked from it.
    def body():
        with restarts(inside=(lambda: "nope")):
            error(condition("oops", "oops"))
    def clause(c):
        return find_restart("inside")
    assert try_catch(body, oops=clause) is None

def test_malformed_restart_binding():
    with pytest.raises(ConditionError):
        with restarts(broken=42):
            pass

def test_ordinary_exception_handlers_do_not_intercept():
    # The non-local exit is not an `Exception`; application code that
    # catches `Exception` does not swallow it.
    def body():
        try:
            invoke_restart("out")
        except Exception:  # noqa: BLE001
            return "swallowed"
    assert with_restarts(body, out=(lambda: "reached")) == "reached"
