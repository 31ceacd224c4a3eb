"""
StructLogger: leveled output, scoping and caller tagging.
"""

from __future__ import annotations

import inspect
import json

import pytest

from logfacade import LogPanic
from logfacade.logger import StructLogger
from logfacade.types import Level


def records(sink) -> list[dict]:
    return [json.loads(line) for line in sink.lines]


class TestEmit:
    def test_info_record_shape(self, make_logger, memory_sink) -> None:
        make_logger().info("hello", "world", 42)

        (record,) = records(memory_sink)
        assert record["message"] == "hello world 42"
        assert record["level"] == "info"
        assert record["logger"] == "root"
        assert record["caller"].startswith("test_logger.py:")
        assert "timestamp" in record

    def test_formatted_variants_substitute(self, make_logger, memory_sink) -> None:
        logger = make_logger(Level.DEBUG)

        logger.debugf("took %d ms", 12)
        logger.infof("user %s", "bob")
        logger.warnf("%.1f%% full", 91.34)
        logger.errorf("plain template")
        logger.printf("%s=%s", "a", 1)

        assert [r["message"] for r in records(memory_sink)] == [
            "took 12 ms",
            "user bob",
            "91.3% full",
            "plain template",
            "a=1",
        ]

    def test_template_without_args_is_verbatim(self, make_logger, memory_sink) -> None:
        make_logger().infof("100% done")

        assert records(memory_sink)[0]["message"] == "100% done"

    def test_print_and_println_emit_at_info(self, make_logger, memory_sink) -> None:
        logger = make_logger(Level.WARN)
        logger.print("hidden")

        logger = make_logger()
        logger.print("a", "b")
        logger.println("c")

        assert [(r["level"], r["message"]) for r in records(memory_sink)] == [("info", "a b"), ("info", "c")]

    def test_warn_level_suppresses_info(self, make_logger, memory_sink) -> None:
        logger = make_logger(Level.WARN)

        logger.debug("no")
        logger.info("no")
        logger.warn("yes")
        logger.error("yes too")

        assert [(r["level"], r["message"]) for r in records(memory_sink)] == [
            ("warn", "yes"),
            ("error", "yes too"),
        ]

    def test_trace_only_at_trace_level(self, make_logger, memory_sink) -> None:
        make_logger(Level.DEBUG).trace("dropped")
        make_logger(Level.DEBUG).tracef("dropped %d", 1)
        make_logger(Level.TRACE).trace("kept")
        make_logger(Level.TRACE).tracef("kept %d", 2)

        assert [(r["level"], r["message"]) for r in records(memory_sink)] == [
            ("trace", "kept"),
            ("trace", "kept 2"),
        ]

    def test_trace_level_also_emits_debug(self, make_logger, memory_sink) -> None:
        make_logger(Level.TRACE).debug("debug")

        assert records(memory_sink)[0]["level"] == "debug"

    def test_fatal_exits_after_writing(self, make_logger, memory_sink) -> None:
        with pytest.raises(SystemExit) as excinfo:
            make_logger(Level.ERROR).fatalf("cannot bind %s", ":8080")

        assert excinfo.value.code == 1
        record = records(memory_sink)[0]
        assert record["level"] == "fatal"
        assert record["message"] == "cannot bind :8080"

    def test_panic_raises_with_message_and_stack(self, make_logger, memory_sink) -> None:
        with pytest.raises(LogPanic) as excinfo:
            make_logger(Level.ERROR).panic("state", "corrupt")

        assert excinfo.value.message == "state corrupt"
        record = records(memory_sink)[0]
        assert record["level"] == "panic"
        assert "test_panic_raises_with_message_and_stack" in record["stack"]

    def test_panicf(self, make_logger, memory_sink) -> None:
        with pytest.raises(LogPanic, match="bad shard 7"):
            make_logger().panicf("bad shard %d", 7)


class TestScoping:
    def test_prefix_chain(self, make_logger, memory_sink) -> None:
        root = make_logger()
        child = root.with_prefix("a").with_prefix("b")

        child.info("x")

        assert child.prefix() == "a.b"
        assert root.prefix() == ""
        assert records(memory_sink)[0]["logger"] == "a.b"

    def test_with_fields_overwrites(self, make_logger) -> None:
        logger = make_logger().with_fields({"k": "1"}).with_fields({"k": "2"})

        assert logger.fields()["k"] == "2"
        assert logger.with_fields({"k": "2"}).fields() == logger.fields()

    def test_fields_are_bound_on_records(self, make_logger, memory_sink) -> None:
        make_logger().with_fields({"user": "bob", "attempt": 3}).info("login")

        record = records(memory_sink)[0]
        assert record["user"] == "bob"
        assert record["attempt"] == 3

    def test_reserved_field_keys_are_namespaced(self, make_logger, memory_sink) -> None:
        logger = make_logger().with_fields({"self": "me", "message": "m", "level": "x"})

        logger.info("hi")

        record = records(memory_sink)[0]
        assert record["message"] == "hi"
        assert record["level"] == "info"
        assert record["field.self"] == "me"
        assert record["field.message"] == "m"
        assert record["field.level"] == "x"
        assert logger.fields() == {"self": "me", "message": "m", "level": "x"}

    def test_non_string_keys_and_wide_integers_encode(self, make_logger, memory_sink) -> None:
        wide = 2**70

        make_logger().with_fields({"counts": {1: 2}}).info("counted")
        make_logger().with_fields({"big": wide}).info("n", wide)

        counted, big = records(memory_sink)
        assert counted["counts"] == {"1": 2}
        assert big["big"] == repr(wide)
        assert big["message"] == f"n {wide}"

    def test_children_do_not_touch_parent(self, make_logger, memory_sink) -> None:
        root = make_logger()
        root.with_fields({"user": "bob"}).with_prefix("auth")

        root.info("plain")

        assert root.fields() == {}
        record = records(memory_sink)[0]
        assert "user" not in record
        assert record["logger"] == "root"

    def test_fields_returns_a_copy(self, make_logger) -> None:
        logger = make_logger().with_fields({"k": 1})

        logger.fields()["k"] = 2

        assert logger.fields() == {"k": 1}

    def test_section_is_a_field_and_accessor_stays_empty(self, make_logger, memory_sink) -> None:
        logger = make_logger().with_section("startup").with_section("serve")

        logger.info("ready")

        assert logger.fields() == {"section": "serve"}
        assert logger.section() == ""
        assert records(memory_sink)[0]["section"] == "serve"

    def test_set_level_has_no_effect(self, make_logger, memory_sink) -> None:
        logger = make_logger(Level.WARN)

        logger.set_level(Level.DEBUG)
        logger.info("still hidden")

        assert logger.get_level() is Level.WARN
        assert memory_sink.lines == []

    def test_with_returns_new_instances(self, make_logger) -> None:
        root = make_logger()

        assert isinstance(root.with_prefix("a"), StructLogger)
        assert root.with_prefix("a") is not root
        assert root.with_fields({}) is not root


class TestCallerMarker:
    def test_marker_names_the_calling_line(self, make_logger, memory_sink) -> None:
        logger = make_logger(include_caller=True)

        line = inspect.currentframe().f_lineno + 1
        logger.info("hello")

        assert records(memory_sink)[0]["message"] == f"[test_logger.py:{line}] hello"

    def test_marker_on_formatted_calls(self, make_logger, memory_sink) -> None:
        logger = make_logger(include_caller=True)

        line = inspect.currentframe().f_lineno + 1
        logger.infof("n=%d", 3)

        assert records(memory_sink)[0]["message"] == f"[test_logger.py:{line}] n=3"

    def test_no_marker_when_disabled(self, make_logger, memory_sink) -> None:
        make_logger().info("hello")

        assert records(memory_sink)[0]["message"] == "hello"

    def test_injected_resolver(self, make_logger, memory_sink) -> None:
        logger = make_logger(include_caller=True, caller_resolver=lambda: ("handler.py", 7))

        logger.with_prefix("http").warn("slow")

        assert records(memory_sink)[0]["message"] == "[handler.py:7] slow"

    def test_sibling_module_with_package_prefix_is_the_caller(self, make_logger, memory_sink) -> None:
        source = "def emit(logger):\n    logger.info('from extension')\n"
        namespace = {"__name__": "logfacade_ext"}
        exec(compile(source, "logfacade_ext.py", "exec"), namespace)

        namespace["emit"](make_logger(include_caller=True))

        record = records(memory_sink)[0]
        assert record["caller"] == "logfacade_ext.py:2"
        assert record["message"] == "[logfacade_ext.py:2] from extension"

    def test_resolver_without_location(self, make_logger, memory_sink) -> None:
        make_logger(include_caller=True, caller_resolver=lambda: None).info("hello")

        assert records(memory_sink)[0]["message"] == "hello"


def test_console_format(make_logger, memory_sink) -> None:
    make_logger(fmt="console").with_prefix("db").with_fields({"shard": 3}).error("down")

    (line,) = memory_sink.lines
    columns = [c.strip() for c in line.split(" | ")]
    assert columns[1] == "ERROR"
    assert columns[2] == "db"
    assert columns[3].startswith("test_logger.py:")
    assert columns[4] == "down shard=3"
