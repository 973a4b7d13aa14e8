"""Parser for the query declaration DSL.

The grammar, one compilation unit being a sequence of declarations::

    decl  := [ '#' '[' attr (',' attr)* ']' ]
             name '(' [ param (',' param)* [','] ] ')'
             [ '->' '[' '(' type (',' type)* [','] ')' ']' ]
             '{' string '}'
    attr  := IDENTIFIER [ '(' option (',' option)* ')' ]
    option:= IDENTIFIER '=' '[' [ IDENTIFIER (',' IDENTIFIER)* ] ']'
    param := IDENTIFIER ':' type
    type  := IDENTIFIER [ '[' type (',' type)* ']' ]

Parsing produces raw declaration specs first; attribute lists are then
resolved into backend kind, named mode and test dependencies by
:class:`~sqlfn.parse.attributes.AttributeResolver`.  Any error aborts the whole
unit: :meth:`QueryParser.parse` either returns every query or raises.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import ply.yacc as yacc

from sqlfn.errors import ParseError
from sqlfn.parse.attributes import AttributeResolver, AttrOptionSpec, AttrSpec
from sqlfn.parse.lexer import QueryLexer
from sqlfn.schema.query import CompilationUnit, Output, Param, Query, TypeRef


@dataclass
class ParamSpec:
    """A parameter before model construction."""

    name: str
    type_ref: TypeRef


@dataclass
class DeclSpec:
    """A query declaration before attribute resolution."""

    name: str
    params: list[ParamSpec]
    outputs: list[TypeRef]
    sql: str
    line: int
    attrs: list[AttrSpec] = field(default_factory=list)


class QueryParser:
    """Parser for query declarations."""

    tokens = QueryLexer.tokens
    start = "unit"

    def __init__(self) -> None:
        self.lexer = QueryLexer()
        self.lexer.build()
        self.parser: yacc.LRParser = None  # type: ignore
        self._resolver = AttributeResolver()

    # ------------------------------------------------------------------
    # Grammar
    # ------------------------------------------------------------------

    def p_unit(self, p: yacc.YaccProduction) -> None:
        """unit : decl_list"""
        p[0] = p[1]

    def p_unit_empty(self, p: yacc.YaccProduction) -> None:
        """unit : empty"""
        p[0] = []

    def p_decl_list_single(self, p: yacc.YaccProduction) -> None:
        """decl_list : decl"""
        p[0] = [p[1]]

    def p_decl_list_multiple(self, p: yacc.YaccProduction) -> None:
        """decl_list : decl_list decl"""
        p[0] = p[1]
        p[0].append(p[2])

    def p_decl_with_attrs(self, p: yacc.YaccProduction) -> None:
        """decl : attributes signature"""
        p[0] = p[2]
        p[0].attrs = p[1]

    def p_decl_bare(self, p: yacc.YaccProduction) -> None:
        """decl : signature"""
        p[0] = p[1]

    def p_attributes(self, p: yacc.YaccProduction) -> None:
        """attributes : HASH LBRACKET attr_list RBRACKET"""
        p[0] = p[3]

    def p_attr_list_single(self, p: yacc.YaccProduction) -> None:
        """attr_list : attr"""
        p[0] = [p[1]]

    def p_attr_list_multiple(self, p: yacc.YaccProduction) -> None:
        """attr_list : attr_list COMMA attr"""
        p[0] = p[1]
        p[0].append(p[3])

    def p_attr_bare(self, p: yacc.YaccProduction) -> None:
        """attr : IDENTIFIER"""
        p[0] = AttrSpec(name=p[1], line=p.lineno(1))

    def p_attr_options(self, p: yacc.YaccProduction) -> None:
        """attr : IDENTIFIER LPAREN option_list RPAREN"""
        p[0] = AttrSpec(name=p[1], line=p.lineno(1), options=p[3])

    def p_option_list_single(self, p: yacc.YaccProduction) -> None:
        """option_list : option"""
        p[0] = [p[1]]

    def p_option_list_multiple(self, p: yacc.YaccProduction) -> None:
        """option_list : option_list COMMA option"""
        p[0] = p[1]
        p[0].append(p[3])

    def p_option(self, p: yacc.YaccProduction) -> None:
        """option : IDENTIFIER EQUALS LBRACKET name_list RBRACKET"""
        p[0] = AttrOptionSpec(name=p[1], values=p[4], line=p.lineno(1))

    def p_option_empty(self, p: yacc.YaccProduction) -> None:
        """option : IDENTIFIER EQUALS LBRACKET RBRACKET"""
        p[0] = AttrOptionSpec(name=p[1], values=[], line=p.lineno(1))

    def p_name_list_single(self, p: yacc.YaccProduction) -> None:
        """name_list : IDENTIFIER"""
        p[0] = [p[1]]

    def p_name_list_multiple(self, p: yacc.YaccProduction) -> None:
        """name_list : name_list COMMA IDENTIFIER"""
        p[0] = p[1]
        p[0].append(p[3])

    def p_signature(self, p: yacc.YaccProduction) -> None:
        """signature : IDENTIFIER LPAREN param_section RPAREN returns LBRACE STRING RBRACE"""
        p[0] = DeclSpec(
            name=p[1],
            params=p[3],
            outputs=p[5],
            sql=p[7],
            line=p.lineno(1),
        )

    def p_param_section(self, p: yacc.YaccProduction) -> None:
        """param_section : param_list
        | param_list COMMA"""
        p[0] = p[1]

    def p_param_section_empty(self, p: yacc.YaccProduction) -> None:
        """param_section : empty"""
        p[0] = []

    def p_param_list_single(self, p: yacc.YaccProduction) -> None:
        """param_list : param"""
        p[0] = [p[1]]

    def p_param_list_multiple(self, p: yacc.YaccProduction) -> None:
        """param_list : param_list COMMA param"""
        p[0] = p[1]
        p[0].append(p[3])

    def p_param(self, p: yacc.YaccProduction) -> None:
        """param : IDENTIFIER COLON type"""
        p[0] = ParamSpec(name=p[1], type_ref=p[3])

    def p_returns(self, p: yacc.YaccProduction) -> None:
        """returns : ARROW LBRACKET LPAREN type_list RPAREN RBRACKET
        | ARROW LBRACKET LPAREN type_list COMMA RPAREN RBRACKET"""
        p[0] = p[4]

    def p_returns_empty(self, p: yacc.YaccProduction) -> None:
        """returns : empty"""
        p[0] = []

    def p_type_list_single(self, p: yacc.YaccProduction) -> None:
        """type_list : type"""
        p[0] = [p[1]]

    def p_type_list_multiple(self, p: yacc.YaccProduction) -> None:
        """type_list : type_list COMMA type"""
        p[0] = p[1]
        p[0].append(p[3])

    def p_type_simple(self, p: yacc.YaccProduction) -> None:
        """type : IDENTIFIER"""
        p[0] = TypeRef(name=p[1])

    def p_type_generic(self, p: yacc.YaccProduction) -> None:
        """type : IDENTIFIER LBRACKET type_list RBRACKET"""
        p[0] = TypeRef(name=p[1], args=tuple(p[3]))

    def p_empty(self, p: yacc.YaccProduction) -> None:
        """empty :"""

    def p_error(self, p: yacc.YaccProduction) -> None:
        if p:
            raise ParseError(
                f"Syntax error at '{p.value}'",
                p.lineno,
                self.lexer.column(p.lexpos),
            )
        raise ParseError("Syntax error at end of input")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def build(self, **kwargs: Any) -> None:
        """Build the parser."""
        self.parser = yacc.yacc(module=self, **kwargs)

    def parse_specs(self, data: str) -> list[DeclSpec]:
        """Parse ``data`` into raw declaration specs (no attribute resolution)."""
        if self.parser is None:
            self.build(debug=False, write_tables=False)
        self.lexer.input(data)
        specs = self.parser.parse(data, lexer=self.lexer.lexer)
        return specs or []

    def parse(self, data: str, source_name: str = "<string>") -> CompilationUnit:
        """Parse query declarations and return the compilation unit.

        Args:
            data: DSL source text.
            source_name: Label for diagnostics and generated headers.

        Returns:
            A frozen :class:`~sqlfn.schema.query.CompilationUnit`.

        Raises:
            ParseError: On any syntax error.
            ValidationError: (or subclass) on an attribute error.
        """
        queries = [self._to_query(spec) for spec in self.parse_specs(data)]
        return CompilationUnit(queries=tuple(queries), source_name=source_name)

    def _to_query(self, spec: DeclSpec) -> Query:
        attrs = self._resolver.resolve(spec.name, spec.attrs, spec.line)
        return Query(
            name=spec.name,
            kind=attrs.kind,
            named_params=attrs.named_params,
            params=tuple(Param(name=p.name, type=p.type_ref) for p in spec.params),
            outputs=tuple(Output(type=t) for t in spec.outputs),
            sql=spec.sql,
            test_dependencies=attrs.test_dependencies,
            line=spec.line,
        )
