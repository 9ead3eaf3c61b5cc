"""
Recursive-descent parser for the generated-component dialect.

Covers what generated components are written with: function declarations
and expressions, arrow functions, const/let/var with destructuring, if, switch,
for-of, for, while, return, literals (including templates), spread, member
and optional-chain access, calls, and the usual operators. Free identifiers
are resolved against the supplied global names once parsing finishes; an
unknown name is reported the way the browser would report it.
"""

from typing import Iterable

from uigen.core import get_logger

from . import nodes as n
from .errors import CompileError
from .lexer import Token, tokenize
from .values import UNDEFINED

logger = get_logger(__name__)

BINARY_PRECEDENCE = {
    "??": 1,
    "||": 2,
    "&&": 3,
    "==": 6, "!=": 6, "===": 6, "!==": 6,
    "<": 7, ">": 7, "<=": 7, ">=": 7, "in": 7,
    "+": 9, "-": 9,
    "*": 10, "/": 10, "%": 10,
    "**": 11,
}
LOGICAL_OPERATORS = frozenset({"&&", "||", "??"})
ASSIGNMENT_OPERATORS = frozenset({"=", "+=", "-=", "*=", "/=", "%=", "**=", "??=", "&&=", "||="})
LITERAL_KEYWORDS = {"true": True, "false": False, "null": None, "undefined": UNDEFINED}


class Scope:
    """Function-level lexical scope used for name resolution."""

    def __init__(self, parent: "Scope | None" = None) -> None:
        self.parent = parent
        self.names: set[str] = set()

    def resolves(self, name: str) -> bool:
        scope: Scope | None = self
        while scope is not None:
            if name in scope.names:
                return True
            scope = scope.parent
        return False


class Parser:
    """Parses a token stream into a Program."""

    def __init__(self, tokens: list[Token], global_names: Iterable[str] = ()) -> None:
        self.tokens = tokens
        self.pos = 0
        self.global_names = frozenset(global_names)
        self.scope = Scope()
        self.references: list[tuple[str, Scope, int]] = []

    # ------------------------------------------------------------------
    # Token helpers
    # ------------------------------------------------------------------

    @property
    def current(self) -> Token:
        return self.tokens[self.pos]

    def peek(self, offset: int = 1) -> Token:
        index = min(self.pos + offset, len(self.tokens) - 1)
        return self.tokens[index]

    def advance(self) -> Token:
        token = self.tokens[self.pos]
        if token.type != "eof":
            self.pos += 1
        return token

    def error(self, message: str, token: Token | None = None) -> CompileError:
        token = token or self.current
        return CompileError(f"{message} (line {token.line})")

    def unexpected(self, token: Token | None = None) -> CompileError:
        token = token or self.current
        if token.type == "eof":
            return self.error("Unexpected end of input", token)
        return self.error(f"Unexpected token {token.describe()}", token)

    def expect_punct(self, value: str) -> Token:
        if not self.current.is_punct(value):
            raise self.unexpected()
        return self.advance()

    def accept_punct(self, value: str) -> bool:
        if self.current.is_punct(value):
            self.advance()
            return True
        return False

    def consume_semicolon(self) -> None:
        if self.accept_punct(";"):
            return
        token = self.current
        if token.type == "eof" or token.is_punct("}") or token.nl_before:
            return
        raise self.unexpected()

    def reference(self, name: str, token: Token) -> n.Identifier:
        self.references.append((name, self.scope, token.line))
        return n.Identifier(name)

    # ------------------------------------------------------------------
    # Program / statements
    # ------------------------------------------------------------------

    def parse_program(self) -> n.Program:
        body = []
        while self.current.type != "eof":
            body.append(self.parse_statement())
        self._resolve_references()
        return n.Program(body)

    def _resolve_references(self) -> None:
        for name, scope, line in self.references:
            if not scope.resolves(name) and name not in self.global_names:
                logger.debug("preview_unresolved_name", name=name, line=line)
                raise CompileError(f"{name} is not defined")

    def parse_statement(self) -> n.Node:
        token = self.current

        if token.is_punct("{"):
            return n.Block(self.parse_block())
        if token.is_punct(";"):
            self.advance()
            return n.Empty()
        if token.is_keyword("const", "let", "var"):
            declaration = self.parse_var_decl()
            self.consume_semicolon()
            return declaration
        if token.is_keyword("function"):
            self.advance()
            if self.current.type != "ident":
                raise self.unexpected()
            name = self.advance().value
            self.scope.names.add(name)
            return n.FunctionDecl(self.parse_function_rest(name))
        if token.is_keyword("return"):
            self.advance()
            argument = None
            following = self.current
            if not (following.is_punct(";", "}") or following.type == "eof" or following.nl_before):
                argument = self.parse_expression()
            self.consume_semicolon()
            return n.Return(argument)
        if token.is_keyword("if"):
            self.advance()
            self.expect_punct("(")
            test = self.parse_expression()
            self.expect_punct(")")
            consequent = self.parse_statement()
            alternate = None
            if self.current.is_keyword("else"):
                self.advance()
                alternate = self.parse_statement()
            return n.If(test, consequent, alternate)
        if token.is_keyword("for"):
            return self.parse_for()
        if token.is_keyword("while"):
            self.advance()
            self.expect_punct("(")
            test = self.parse_expression()
            self.expect_punct(")")
            return n.While(test, self.parse_statement())
        if token.is_keyword("switch"):
            return self.parse_switch()
        if token.is_keyword("break", "continue"):
            self.advance()
            self.consume_semicolon()
            return n.Break() if token.value == "break" else n.Continue()

        expression = self.parse_expression()
        self.consume_semicolon()
        return n.ExprStmt(expression)

    def parse_block(self) -> list[n.Node]:
        self.expect_punct("{")
        body = []
        while not self.current.is_punct("}"):
            if self.current.type == "eof":
                raise self.unexpected()
            body.append(self.parse_statement())
        self.advance()
        return body

    def parse_var_decl(self) -> n.VarDecl:
        kind = self.advance().value
        declarations = []
        while True:
            target = self.parse_binding_target()
            init = None
            if self.accept_punct("="):
                init = self.parse_assignment()
            elif kind == "const" and not self.current.is_keyword("of"):
                raise self.error("Missing initializer in const declaration")
            declarations.append((target, init))
            if not self.accept_punct(","):
                return n.VarDecl(kind, declarations)

    def parse_for(self) -> n.Node:
        self.advance()
        self.expect_punct("(")

        if self.current.is_keyword("const", "let", "var"):
            start = self.pos
            kind = self.advance().value
            target = self.parse_binding_target()
            if self.current.is_keyword("of"):
                self.advance()
                iterable = self.parse_assignment()
                self.expect_punct(")")
                return n.ForOf(n.VarDecl(kind, [(target, None)]), iterable, self.parse_statement())
            self.pos = start
            init: n.Node | None = self.parse_var_decl()
        elif self.current.is_punct(";"):
            init = None
        else:
            init = n.ExprStmt(self.parse_expression())

        self.expect_punct(";")
        test = None if self.current.is_punct(";") else self.parse_expression()
        self.expect_punct(";")
        update = None if self.current.is_punct(")") else self.parse_expression()
        self.expect_punct(")")
        return n.For(init, test, update, self.parse_statement())

    def parse_switch(self) -> n.Switch:
        self.advance()
        self.expect_punct("(")
        discriminant = self.parse_expression()
        self.expect_punct(")")
        self.expect_punct("{")
        cases: list[n.SwitchCase] = []
        seen_default = False
        while not self.accept_punct("}"):
            token = self.current
            if token.is_keyword("case"):
                self.advance()
                test: n.Node | None = self.parse_expression()
            elif token.is_keyword("default"):
                if seen_default:
                    raise self.error("More than one default clause in switch statement", token)
                self.advance()
                seen_default = True
                test = None
            else:
                raise self.unexpected()
            self.expect_punct(":")
            body = []
            while not self.current.is_keyword("case", "default") and not self.current.is_punct("}"):
                if self.current.type == "eof":
                    raise self.unexpected()
                body.append(self.parse_statement())
            cases.append(n.SwitchCase(test, body))
        return n.Switch(discriminant, cases)

    # ------------------------------------------------------------------
    # Bindings
    # ------------------------------------------------------------------

    def parse_binding_target(self) -> n.Node:
        token = self.current
        if token.type == "ident":
            self.advance()
            self.scope.names.add(token.value)
            return n.Identifier(token.value)
        if token.is_punct("["):
            return self.parse_array_pattern()
        if token.is_punct("{"):
            return self.parse_object_pattern()
        raise self.unexpected()

    def parse_binding_element(self) -> n.Param:
        if self.accept_punct("..."):
            return n.Param(self.parse_binding_target(), rest=True)
        target = self.parse_binding_target()
        default = self.parse_assignment() if self.accept_punct("=") else None
        return n.Param(target, default)

    def parse_array_pattern(self) -> n.ArrayPattern:
        self.expect_punct("[")
        elements: list[n.Param | None] = []
        while not self.current.is_punct("]"):
            if self.current.is_punct(","):
                self.advance()
                elements.append(None)
                continue
            elements.append(self.parse_binding_element())
            if not self.current.is_punct("]"):
                self.expect_punct(",")
        self.advance()
        return n.ArrayPattern(elements)

    def parse_object_pattern(self) -> n.ObjectPattern:
        self.expect_punct("{")
        properties: list[tuple[str | n.Node, n.Param, bool]] = []
        rest = None
        while not self.current.is_punct("}"):
            if self.accept_punct("..."):
                rest = self.parse_binding_target()
            else:
                key, computed = self.parse_property_key()
                if self.accept_punct(":"):
                    binding = self.parse_binding_element()
                else:
                    if computed or not isinstance(key, str):
                        raise self.unexpected()
                    self.scope.names.add(key)
                    default = self.parse_assignment() if self.accept_punct("=") else None
                    binding = n.Param(n.Identifier(key), default)
                properties.append((key, binding, computed))
            if not self.current.is_punct("}"):
                self.expect_punct(",")
        self.advance()
        return n.ObjectPattern(properties, rest)

    def parse_params(self) -> list[n.Param]:
        self.expect_punct("(")
        params = []
        while not self.current.is_punct(")"):
            params.append(self.parse_binding_element())
            if not self.current.is_punct(")"):
                self.expect_punct(",")
        self.advance()
        return params

    # ------------------------------------------------------------------
    # Functions
    # ------------------------------------------------------------------

    def parse_function_rest(self, name: str | None, bind_own_name: bool = False) -> n.FunctionNode:
        outer = self.scope
        self.scope = Scope(outer)
        if name and bind_own_name:
            self.scope.names.add(name)
        try:
            params = self.parse_params()
            body = self.parse_block()
        finally:
            self.scope = outer
        return n.FunctionNode(name, params, body)

    def is_arrow_ahead(self) -> bool:
        """At '(' : does the matching ')' precede '=>'?"""
        depth = 0
        index = self.pos
        while index < len(self.tokens):
            token = self.tokens[index]
            if token.type == "eof":
                return False
            if token.is_punct("(", "[", "{"):
                depth += 1
            elif token.is_punct(")", "]", "}"):
                depth -= 1
                if depth == 0:
                    following = self.tokens[index + 1] if index + 1 < len(self.tokens) else token
                    return following.is_punct("=>")
            index += 1
        return False

    def parse_arrow(self) -> n.FunctionNode:
        outer = self.scope
        self.scope = Scope(outer)
        try:
            if self.current.type == "ident":
                name = self.advance().value
                self.scope.names.add(name)
                params = [n.Param(n.Identifier(name))]
            else:
                params = self.parse_params()
            self.expect_punct("=>")
            if self.current.is_punct("{"):
                return n.FunctionNode(None, params, self.parse_block(), is_arrow=True)
            return n.FunctionNode(
                None, params, self.parse_assignment(), is_arrow=True, expression_body=True
            )
        finally:
            self.scope = outer

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def parse_expression(self) -> n.Node:
        expression = self.parse_assignment()
        if not self.current.is_punct(","):
            return expression
        expressions = [expression]
        while self.accept_punct(","):
            expressions.append(self.parse_assignment())
        return n.Sequence(expressions)

    def parse_assignment(self) -> n.Node:
        token = self.current
        if token.type == "ident" and self.peek().is_punct("=>"):
            return self.parse_arrow()
        if token.is_punct("(") and self.is_arrow_ahead():
            return self.parse_arrow()

        left = self.parse_conditional()

        if self.current.type == "punct" and self.current.value in ASSIGNMENT_OPERATORS:
            operator_token = self.advance()
            target = left.expression if isinstance(left, n.OptionalChain) else left
            if not isinstance(target, (n.Identifier, n.Member)) or isinstance(left, n.OptionalChain):
                raise self.error("Invalid left-hand side in assignment", operator_token)
            return n.Assign(operator_token.value, target, self.parse_assignment())
        return left

    def parse_conditional(self) -> n.Node:
        test = self.parse_binary(1)
        if not self.accept_punct("?"):
            return test
        consequent = self.parse_assignment()
        self.expect_punct(":")
        alternate = self.parse_assignment()
        return n.Conditional(test, consequent, alternate)

    def _binary_operator(self) -> str | None:
        token = self.current
        if token.type == "punct" and token.value in BINARY_PRECEDENCE:
            return token.value
        if token.is_keyword("in"):
            return "in"
        return None

    def parse_binary(self, min_precedence: int) -> n.Node:
        left = self.parse_unary()
        while True:
            operator = self._binary_operator()
            if operator is None:
                return left
            precedence = BINARY_PRECEDENCE[operator]
            if precedence < min_precedence:
                return left
            self.advance()
            right = self.parse_binary(precedence if operator == "**" else precedence + 1)
            if operator in LOGICAL_OPERATORS:
                left = n.Logical(operator, left, right)
            else:
                left = n.Binary(operator, left, right)

    def parse_unary(self) -> n.Node:
        token = self.current
        if token.is_punct("!", "-", "+"):
            self.advance()
            return n.Unary(token.value, self.parse_unary())
        if token.is_keyword("typeof"):
            self.advance()
            operand = self.parse_unary()
            if isinstance(operand, n.Identifier) and self.references and self.references[-1][0] == operand.name:
                # typeof on an undeclared name is legal
                self.references.pop()
            return n.Unary("typeof", operand)
        if token.is_punct("++", "--"):
            self.advance()
            target = self.parse_unary()
            if not isinstance(target, (n.Identifier, n.Member)):
                raise self.error("Invalid left-hand side expression in prefix operation", token)
            return n.Update(token.value, target, prefix=True)
        return self.parse_postfix()

    def parse_postfix(self) -> n.Node:
        expression = self.parse_call_member()
        token = self.current
        if token.is_punct("++", "--") and not token.nl_before:
            if not isinstance(expression, (n.Identifier, n.Member)):
                raise self.error("Invalid left-hand side expression in postfix operation", token)
            self.advance()
            return n.Update(token.value, expression, prefix=False)
        return expression

    def parse_arguments(self) -> list[n.Node]:
        self.expect_punct("(")
        arguments = []
        while not self.current.is_punct(")"):
            if self.accept_punct("..."):
                arguments.append(n.Spread(self.parse_assignment()))
            else:
                arguments.append(self.parse_assignment())
            if not self.current.is_punct(")"):
                self.expect_punct(",")
        self.advance()
        return arguments

    def _member_name(self) -> str:
        token = self.current
        if token.type in ("ident", "keyword"):
            self.advance()
            return token.value
        raise self.unexpected()

    def parse_call_member(self) -> n.Node:
        if self.current.is_keyword("new"):
            self.advance()
            callee = self.parse_primary()
            while self.current.is_punct(".", "["):
                if self.accept_punct("."):
                    callee = n.Member(callee, self._member_name())
                else:
                    self.advance()
                    callee = n.Member(callee, self.parse_expression(), computed=True)
                    self.expect_punct("]")
            arguments = self.parse_arguments() if self.current.is_punct("(") else []
            expression: n.Node = n.New(callee, arguments)
        else:
            expression = self.parse_primary()

        optional_chain = False
        while True:
            token = self.current
            if token.is_punct("."):
                self.advance()
                expression = n.Member(expression, self._member_name())
            elif token.is_punct("?."):
                self.advance()
                optional_chain = True
                if self.current.is_punct("("):
                    expression = n.Call(expression, self.parse_arguments(), optional=True)
                elif self.accept_punct("["):
                    expression = n.Member(expression, self.parse_expression(), computed=True, optional=True)
                    self.expect_punct("]")
                else:
                    expression = n.Member(expression, self._member_name(), optional=True)
            elif token.is_punct("["):
                self.advance()
                expression = n.Member(expression, self.parse_expression(), computed=True)
                self.expect_punct("]")
            elif token.is_punct("("):
                expression = n.Call(expression, self.parse_arguments())
            else:
                break

        return n.OptionalChain(expression) if optional_chain else expression

    def parse_primary(self) -> n.Node:
        token = self.current

        if token.type in ("num", "str"):
            self.advance()
            return n.Literal(token.value)
        if token.type == "template":
            self.advance()
            expressions = [self._parse_embedded(tokens) for tokens in token.parts]
            return n.TemplateLiteral(list(token.value), expressions)
        if token.type == "ident":
            self.advance()
            return self.reference(token.value, token)
        if token.type == "keyword":
            if token.value in LITERAL_KEYWORDS:
                self.advance()
                return n.Literal(LITERAL_KEYWORDS[token.value])
            if token.value == "this":
                self.advance()
                return n.This()
            if token.value == "function":
                self.advance()
                name = self.advance().value if self.current.type == "ident" else None
                return self.parse_function_rest(name, bind_own_name=True)
            raise self.unexpected()
        if token.is_punct("("):
            self.advance()
            expression = self.parse_expression()
            self.expect_punct(")")
            return expression
        if token.is_punct("["):
            return self.parse_array_literal()
        if token.is_punct("{"):
            return self.parse_object_literal()
        raise self.unexpected()

    def _parse_embedded(self, tokens: list[Token]) -> n.Node:
        saved_tokens, saved_pos = self.tokens, self.pos
        self.tokens, self.pos = tokens, 0
        try:
            expression = self.parse_expression()
            if self.current.type != "eof":
                raise self.unexpected()
            return expression
        finally:
            self.tokens, self.pos = saved_tokens, saved_pos

    def parse_array_literal(self) -> n.ArrayLiteral:
        self.expect_punct("[")
        elements: list[n.Node | None] = []
        while not self.current.is_punct("]"):
            if self.current.is_punct(","):
                self.advance()
                elements.append(None)
                continue
            if self.accept_punct("..."):
                elements.append(n.Spread(self.parse_assignment()))
            else:
                elements.append(self.parse_assignment())
            if not self.current.is_punct("]"):
                self.expect_punct(",")
        self.advance()
        return n.ArrayLiteral(elements)

    def parse_property_key(self) -> tuple[str | n.Node, bool]:
        token = self.current
        if token.type in ("ident", "keyword", "str"):
            self.advance()
            return token.value, False
        if token.type == "num":
            self.advance()
            return str(token.value), False
        if self.accept_punct("["):
            key = self.parse_assignment()
            self.expect_punct("]")
            return key, True
        raise self.unexpected()

    def parse_object_literal(self) -> n.ObjectLiteral:
        self.expect_punct("{")
        properties: list[n.Node] = []
        while not self.current.is_punct("}"):
            if self.accept_punct("..."):
                properties.append(n.Spread(self.parse_assignment()))
            else:
                key_token = self.current
                key, computed = self.parse_property_key()
                if self.current.is_punct("("):
                    name = key if isinstance(key, str) else None
                    properties.append(n.Property(key, self.parse_function_rest(name), computed))
                elif self.accept_punct(":"):
                    properties.append(n.Property(key, self.parse_assignment(), computed))
                else:
                    if computed or key_token.type != "ident":
                        raise self.unexpected()
                    properties.append(n.Property(key, self.reference(key, key_token)))
            if not self.current.is_punct("}"):
                self.expect_punct(",")
        self.advance()
        return n.ObjectLiteral(properties)


def parse(source: str, global_names: Iterable[str] = ()) -> n.Program:
    """
    Parse source text into a Program.

    Raises:
        CompileError: On syntax errors or names that resolve nowhere
    """
    program = Parser(tokenize(source), global_names).parse_program()
    logger.debug("preview_parsed", statements=len(program.body))
    return program
