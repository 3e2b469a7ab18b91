import logging

import numpy as np
import pytest

from venn_layout import Circle, SetDatum
from venn_layout.logging_utils import _safe_repr, apply_debug_logging, debug_log_call


def test_safe_repr_summarises_layout_values():
    assert _safe_repr(Circle("A", 1.0, 2.0, 0.5)) == "Circle('A', x=1, y=2, r=0.5)"
    assert _safe_repr(SetDatum(("A", "B"), 3.0)) == "SetDatum(A∩B=3)"
    summary = _safe_repr(np.arange(20, dtype=float))
    assert summary.startswith("ndarray(shape=(20,), dtype=float64)")
    assert "max=19" in summary


def test_safe_repr_truncates_long_containers():
    rendered = _safe_repr(list(range(10)))
    assert "... (10 items)" in rendered


def test_debug_log_call_logs_entry_and_exit(caplog):
    logger = logging.getLogger("venn_layout.tests.trace")

    @debug_log_call(logger)
    def double(value):
        return value * 2

    with caplog.at_level(logging.DEBUG, logger="venn_layout.tests.trace"):
        assert double(21) == 42

    assert "Entering" in caplog.text
    assert "Exiting" in caplog.text and "42" in caplog.text
    assert debug_log_call(logger)(double) is double


def test_debug_log_call_reraises(caplog):
    logger = logging.getLogger("venn_layout.tests.trace")

    @debug_log_call(logger)
    def broken():
        raise RuntimeError("boom")

    with caplog.at_level(logging.DEBUG, logger="venn_layout.tests.trace"):
        with pytest.raises(RuntimeError):
            broken()
    assert "Exception in" in caplog.text


def test_apply_debug_logging_wraps_public_functions_only():
    def public():
        return 1

    def _private():
        return 2

    namespace = {"__name__": __name__, "public": public, "_private": _private, "logging": logging}
    apply_debug_logging(namespace)

    assert getattr(namespace["public"], "_debug_logging_wrapped", False)
    assert namespace["_private"] is _private
    assert namespace["logging"] is logging
    assert namespace["public"]() == 1
