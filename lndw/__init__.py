"""Teaching compiler for arithmetic expressions: parser, optimisation passes, register-machine code generation and interpreter."""

__version__ = "0.1.0"