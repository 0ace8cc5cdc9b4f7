"""
Unit Tests — Error Normalizer
==============================
Canonical fault construction and classifier derivation.
"""
import pytest

from faultline.core.errors import ValidationError
from faultline.parser.error_normalizer import (
    MessageFault,
    describe_exception,
    is_exception_fault,
    normalize_fault,
)


class TestNormalizeFault:

    def test_exception_classifier_is_type_name(self):
        n = normalize_fault(TypeError("bad operand"))
        assert n.classifiers == ("TypeError",)
        assert n.is_exception
        assert n.name == "TypeError"
        assert n.message == "bad operand"

    def test_message_has_no_classifier(self):
        n = normalize_fault("oops")
        assert n.classifiers == ()
        assert not n.is_exception
        assert isinstance(n.error, MessageFault)
        assert n.message == "oops"

    def test_empty_message(self):
        n = normalize_fault("")
        assert n.classifiers == ()
        assert n.message == ""

    def test_custom_exception_subclass(self):
        class PaymentDeclined(RuntimeError):
            pass

        n = normalize_fault(PaymentDeclined("card"))
        assert n.classifiers == ("PaymentDeclined",)

    def test_non_fault_rejected(self):
        with pytest.raises(ValidationError):
            normalize_fault(42)

    def test_raised_exception_keeps_own_traceback(self):
        try:
            raise KeyError("missing")
        except KeyError as e:
            n = normalize_fault(e)
        assert n.captured_stack is None

    def test_unraised_exception_captures_stack(self):
        n = normalize_fault(ValueError("never raised"))
        assert n.captured_stack is not None
        assert n.captured_stack[-1].name == "test_unraised_exception_captures_stack"

    def test_message_captures_reporting_site(self):
        n = normalize_fault("oops")
        assert n.captured_stack[-1].filename == __file__

    def test_is_exception_fault(self):
        assert is_exception_fault(ValueError())
        assert not is_exception_fault("text")


class TestDescribeException:

    def test_fields(self):
        try:
            raise ValueError("boom")
        except ValueError as e:
            d = describe_exception(e)
        assert d["name"] == "ValueError"
        assert d["message"] == "boom"
        assert "raise ValueError" in d["stack"]
        assert "cause" not in d

    def test_cause_included(self):
        try:
            try:
                raise KeyError("inner")
            except KeyError as inner:
                raise RuntimeError("outer") from inner
        except RuntimeError as e:
            d = describe_exception(e)
        assert d["cause"]["name"] == "KeyError"
