"""Syntax tree for the generated-component dialect."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Node:
    pass


# ============================================================================
# Expressions
# ============================================================================


@dataclass
class Literal(Node):
    value: Any


@dataclass
class TemplateLiteral(Node):
    quasis: list[str]
    expressions: list[Node]


@dataclass
class Identifier(Node):
    name: str


@dataclass
class This(Node):
    pass


@dataclass
class Spread(Node):
    argument: Node


@dataclass
class ArrayLiteral(Node):
    elements: list[Node | None]


@dataclass
class Property(Node):
    key: str | Node
    value: Node
    computed: bool = False


@dataclass
class ObjectLiteral(Node):
    properties: list[Node]  # Property | Spread


@dataclass
class Param(Node):
    """Binding target with optional default; also used for pattern elements."""

    target: Node  # Identifier | ArrayPattern | ObjectPattern | Member (assignment only)
    default: Node | None = None
    rest: bool = False


@dataclass
class ArrayPattern(Node):
    elements: list[Param | None]


@dataclass
class ObjectPattern(Node):
    properties: list[tuple[str | Node, Param, bool]]  # (key, binding, computed)
    rest: Node | None = None


@dataclass
class FunctionNode(Node):
    name: str | None
    params: list[Param]
    body: list[Node] | Node
    is_arrow: bool = False
    expression_body: bool = False


@dataclass
class Member(Node):
    object: Node
    property: str | Node
    computed: bool = False
    optional: bool = False


@dataclass
class Call(Node):
    callee: Node
    arguments: list[Node]
    optional: bool = False


@dataclass
class New(Node):
    callee: Node
    arguments: list[Node]


@dataclass
class Unary(Node):
    operator: str
    operand: Node


@dataclass
class Update(Node):
    operator: str
    target: Node
    prefix: bool


@dataclass
class Binary(Node):
    operator: str
    left: Node
    right: Node


@dataclass
class Logical(Node):
    operator: str
    left: Node
    right: Node


@dataclass
class Conditional(Node):
    test: Node
    consequent: Node
    alternate: Node


@dataclass
class Assign(Node):
    operator: str
    target: Node
    value: Node


@dataclass
class Sequence(Node):
    expressions: list[Node]


# ============================================================================
# Statements
# ============================================================================


@dataclass
class VarDecl(Node):
    kind: str
    declarations: list[tuple[Node, Node | None]]


@dataclass
class FunctionDecl(Node):
    function: FunctionNode


@dataclass
class Return(Node):
    argument: Node | None


@dataclass
class If(Node):
    test: Node
    consequent: Node
    alternate: Node | None


@dataclass
class Block(Node):
    body: list[Node]


@dataclass
class ExprStmt(Node):
    expression: Node


@dataclass
class ForOf(Node):
    declaration: VarDecl
    iterable: Node
    body: Node


@dataclass
class For(Node):
    init: Node | None
    test: Node | None
    update: Node | None
    body: Node


@dataclass
class While(Node):
    test: Node
    body: Node


@dataclass
class SwitchCase(Node):
    test: Node | None  # None for default
    body: list[Node]


@dataclass
class Switch(Node):
    discriminant: Node
    cases: list[SwitchCase]


@dataclass
class Break(Node):
    pass


@dataclass
class Continue(Node):
    pass


@dataclass
class Empty(Node):
    pass


@dataclass
class Program(Node):
    body: list[Node] = field(default_factory=list)


@dataclass
class OptionalChain(Node):
    """Boundary of a member/call chain containing ?. ; a nullish link yields undefined."""

    expression: Node
