from __future__ import annotations
import time
from .interpreter import Interpreter
from .runtime import NativeFunction


def install_stdlib(interp: Interpreter):
    """Install the native functions into the interpreter's globals."""
    g = interp.globals

    def _nf(name, arity, fn):
        g.define(name, NativeFunction(name, arity, fn))

    def _clock():
        return time.time()

    _nf("clock", 0, _clock)
