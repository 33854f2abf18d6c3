"""All moonlint rules, keyed by rule id."""

from moonlint.rules import base, divide_by_zero

ALL_RULES: dict[str, type[base.Rule]] = {
    divide_by_zero.DivideByZero.rule_id: divide_by_zero.DivideByZero,
}

__all__ = ["ALL_RULES"]
