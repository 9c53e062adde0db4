"""absolute-create -- configuration resolution and code generation for AbsoluteJS projects."""

__version__ = "0.1.0"
