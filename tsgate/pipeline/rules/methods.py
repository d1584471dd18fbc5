"""Rules that reason about method and constructor bodies."""

import re
from typing import Iterable, Optional

from tree_sitter import Node

from tsgate.models import AccessLevel, NodeKind, SyntaxNode, Violation
from tsgate.pipeline.treesitter import argument_count, code_children, descendants, find_child, node_text

from .base import Rule, RuleContext

DEFAULT_EXEMPT_ANNOTATIONS = (
    "Override",
    "Test",
    "ParameterizedTest",
    "RepeatedTest",
    "TestFactory",
    "TestTemplate",
    "Before",
    "After",
    "BeforeClass",
    "AfterClass",
    "BeforeEach",
    "AfterEach",
    "BeforeAll",
    "AfterAll",
)

# Parents whose ``name`` field declares a local name
DECLARING_PARENTS = frozenset(
    {
        "variable_declarator",
        "formal_parameter",
        "catch_formal_parameter",
        "enhanced_for_statement",
        "resource",
    }
)
# Parents where an identifier is a label, not a value
LABEL_PARENTS = frozenset({"labeled_statement", "break_statement", "continue_statement"})


# Statement lists whose local declarations are visible to later statements
STATEMENT_SCOPES = frozenset({"block", "constructor_body", "switch_block_statement_group", "switch_rule"})


def _declarator_names(declaration: Node) -> set[str]:
    return {
        node_text(declarator.child_by_field_name("name"))
        for declarator in declaration.children_by_field_name("declarator")
    }


def _lambda_parameter_names(lambda_node: Node) -> set[str]:
    parameters = lambda_node.child_by_field_name("parameters")
    if parameters is None:
        return set()
    if parameters.type == "identifier":
        return {node_text(parameters)}
    names = set()
    for parameter in parameters.named_children:
        if parameter.type == "identifier":
            names.add(node_text(parameter))
        elif parameter.type == "formal_parameter":
            names.add(node_text(parameter.child_by_field_name("name")))
        elif parameter.type == "spread_parameter":
            declarator = find_child(parameter, "variable_declarator")
            if declarator is not None:
                names.add(node_text(declarator.child_by_field_name("name")))
    return names


def scope_names(scope: Node, use: Node) -> set[str]:
    """Local names that ``scope`` declares and that are visible at ``use``."""
    if scope.type in STATEMENT_SCOPES:
        names = set()
        for statement in scope.named_children:
            if statement.start_byte >= use.start_byte:
                break
            if statement.type == "local_variable_declaration":
                names |= _declarator_names(statement)
        return names
    if scope.type == "for_statement":
        names = set()
        for init in scope.children_by_field_name("init"):
            if init.type == "local_variable_declaration":
                names |= _declarator_names(init)
        return names
    if scope.type == "enhanced_for_statement":
        return {node_text(scope.child_by_field_name("name"))}
    if scope.type == "lambda_expression":
        return _lambda_parameter_names(scope)
    if scope.type == "catch_clause":
        parameter = find_child(scope, "catch_formal_parameter")
        return {node_text(parameter.child_by_field_name("name"))} if parameter is not None else set()
    if scope.type == "try_with_resources_statement":
        resources = scope.child_by_field_name("resources")
        if resources is None:
            return set()
        return {
            node_text(resource.child_by_field_name("name"))
            for resource in resources.named_children
            if resource.type == "resource" and resource.child_by_field_name("name") is not None
        }
    return set()


def is_shadowed(identifier: Node, body: Node) -> bool:
    """True when a local declaration between ``identifier`` and ``body`` hides its name."""
    name = node_text(identifier)
    current = identifier
    while current != body:
        current = current.parent
        if current is None:
            return False
        if name in scope_names(current, identifier):
            return True
    return False


def static_imports(program: Node) -> set[str]:
    """Simple names brought in by single ``import static`` declarations."""
    names = set()
    for declaration in program.named_children:
        if declaration.type != "import_declaration":
            continue
        tokens = {child.type for child in declaration.children}
        if "static" not in tokens or "asterisk" in tokens:
            continue
        imported = find_child(declaration, "scoped_identifier", "identifier")
        if imported is not None:
            names.add(node_text(imported).rsplit(".", 1)[-1])
    return names


def instance_scopes(owner: SyntaxNode, context: RuleContext) -> list[SyntaxNode]:
    """The owner and every type whose instance an inner class can reach.

    Climbing stops at a ``static`` class or at a type that is not a class,
    since nested records, enums and interfaces are implicitly static.
    """
    scopes = [owner]
    current = owner
    while current.kind is NodeKind.CLASS and not current.has_modifier("static"):
        outer = context.parent(current)
        if outer is None or outer.kind not in (NodeKind.CLASS, NodeKind.ENUM, NodeKind.RECORD):
            break
        scopes.append(outer)
        current = outer
    return scopes


def is_value_reference(identifier: Node) -> bool:
    """True when an identifier reads a variable rather than naming a member or a label."""
    parent = identifier.parent
    if parent is None:
        return True
    if parent.type in LABEL_PARENTS:
        return False
    if parent.type == "field_access":
        return parent.child_by_field_name("field") != identifier
    if parent.type == "method_invocation":
        return parent.child_by_field_name("name") != identifier
    if parent.type in DECLARING_PARENTS and parent.child_by_field_name("name") == identifier:
        return False
    return True


def is_only_throw(body: Node) -> bool:
    statements = code_children(body)
    return len(statements) == 1 and statements[0].type == "throw_statement"


class NonStaticMethod(Rule):
    """Methods that never touch instance state must be ``static``.

    A method uses instance state when its body mentions ``this`` or
    ``super``, reads an instance field or record component that no local
    declaration in scope shadows, or calls, without a qualifier, a method
    that is not known to be ``static``. Methods of inner classes also see the
    fields and methods of the enclosing instances. A method counts as static
    when an enclosing type declares it ``static`` or a single
    ``import static`` brings it in.
    """

    name = "NonStaticMethod"
    description = "Methods that do not refer to the enclosing instance must be static"
    kinds = frozenset({NodeKind.METHOD})
    parameters = {
        "exempt_annotations": list(DEFAULT_EXEMPT_ANNOTATIONS),
        "exclude_file_pattern": None,
    }

    def configure(self) -> None:
        annotations = self.params["exempt_annotations"]
        if not isinstance(annotations, (list, tuple)) or not all(isinstance(a, str) for a in annotations):
            raise self._param_error("exempt_annotations", "a list of annotation names")
        self._exempt = tuple(annotations)

        pattern = self.params["exclude_file_pattern"]
        self._exclude: Optional[re.Pattern[str]] = None
        if pattern is not None:
            try:
                self._exclude = re.compile(pattern)
            except (re.error, TypeError):
                raise self._param_error("exclude_file_pattern", "a regular expression")

    def visit(self, node: SyntaxNode, context: RuleContext) -> Iterable[Violation]:
        owner = context.parent(node)
        if owner is None or owner.kind not in (NodeKind.CLASS, NodeKind.ENUM, NodeKind.RECORD):
            return
        if self._exclude is not None and self._exclude.search(context.path.as_posix()):
            return
        if any(node.has_modifier(keyword) for keyword in ("static", "abstract", "native")):
            return
        if node.has_annotation(*self._exempt):
            return
        body = node.ts.child_by_field_name("body") if node.ts is not None else None
        if body is None or is_only_throw(body):
            return
        if self._uses_instance(node, owner, body, context):
            return
        yield self.violation(
            context, node.line, 'This method must be static, because it does not refer to "this"'
        )

    def _uses_instance(self, node: SyntaxNode, owner: SyntaxNode, body: Node, context: RuleContext) -> bool:
        fields = set()
        instance_methods = set()
        for scope in instance_scopes(owner, context):
            for member in context.tree.children(scope, (NodeKind.FIELD, NodeKind.METHOD)):
                if member.has_modifier("static"):
                    continue
                if member.kind is NodeKind.FIELD:
                    fields.update(member.parameters)
                else:
                    instance_methods.add(member.name)
            if scope.kind is NodeKind.RECORD:
                fields.update(scope.parameters)
        fields -= set(node.parameters)

        static_methods = static_imports(context.tree.root.ts)
        for scope in [owner, *context.tree.ancestors(owner)]:
            for member in context.tree.children(scope, (NodeKind.METHOD,)):
                if member.has_modifier("static"):
                    static_methods.add(member.name)

        for current in descendants(body):
            if current.type in ("this", "super"):
                return True
            if (
                current.type == "identifier"
                and node_text(current) in fields
                and is_value_reference(current)
                and not is_shadowed(current, body)
            ):
                return True
            if current.type == "method_invocation" and current.child_by_field_name("object") is None:
                called = node_text(current.child_by_field_name("name"))
                if called in instance_methods or called not in static_methods:
                    return True
        return False


def creation_type_name(creation: Node) -> str:
    """Simple class name instantiated by a ``new`` expression."""
    type_node = creation.child_by_field_name("type")
    if type_node is None:
        return ""
    if type_node.type == "generic_type" and type_node.named_children:
        type_node = type_node.named_children[0]
    return node_text(type_node).rsplit(".", 1)[-1]


def arity_matches(constructor: SyntaxNode, arguments: int) -> bool:
    declared = len(constructor.parameters)
    if constructor.varargs:
        return arguments >= declared - 1
    return arguments == declared


def _within(node: Node, container: Node) -> bool:
    return container.start_byte <= node.start_byte and node.end_byte <= container.end_byte


class ProhibitUnusedPrivateConstructor(Rule):
    """Private constructors must be called from somewhere in the class.

    A call is either ``this(...)`` from another constructor of the class or
    ``new Name(...)`` anywhere in the top-level type that contains the class,
    with a matching number of arguments.
    """

    name = "ProhibitUnusedPrivateConstructor"
    description = "Private constructors must be used by another constructor or a factory in the same class"
    kinds = frozenset({NodeKind.CLASS})

    def visit(self, node: SyntaxNode, context: RuleContext) -> Iterable[Violation]:
        constructors = list(context.members(node, NodeKind.CONSTRUCTOR))
        private = [ctor for ctor in constructors if ctor.access is AccessLevel.PRIVATE]
        if not private:
            return

        # (argument count, call site) for every call that may reach a constructor of this class
        calls: list[tuple[int, Node]] = []
        for ctor in constructors:
            body = ctor.ts.child_by_field_name("body")
            if body is None:
                continue
            for current in body.named_children:
                if current.type == "explicit_constructor_invocation":
                    target = current.child_by_field_name("constructor")
                    if target is not None and target.type == "this":
                        calls.append((argument_count(current.child_by_field_name("arguments")), current))

        outermost = node
        for ancestor in context.tree.ancestors(node):
            if ancestor.kind is not NodeKind.COMPILATION_UNIT:
                outermost = ancestor
        for current in descendants(outermost.ts):
            if current.type == "object_creation_expression" and creation_type_name(current) == node.name:
                calls.append((argument_count(current.child_by_field_name("arguments")), current))

        for ctor in private:
            used = any(
                arity_matches(ctor, arguments) and not _within(site, ctor.ts) for arguments, site in calls
            )
            if not used:
                yield self.violation(context, ctor.line, "Unused private constructor.")
