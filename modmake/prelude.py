"""Source text of the built-in ``Prelude`` module."""

PRELUDE_SOURCE = """\
-- The Prelude ships with modmake and is never written to the output tree.
module Prelude
export identity, constant, flip, compose, unit, otherwise

identity = function (x) { return x; }
constant = function (a) { return function (_) { return a; }; }
flip = function (f) {
    return function (b) { return function (a) { return f(a)(b); }; };
  }
compose = function (f) {
    return function (g) { return function (x) { return f(g(x)); }; };
  }
unit = {}
otherwise = true
"""

__all__ = ["PRELUDE_SOURCE"]
