"""
Formula tree for brick parameters.

A formula is a binary tree of FormulaElement nodes built by the editor and
evaluated many times by formulakit.core.formula_lang. Elements own their
children; each child keeps a weak back-reference to its owner so the editor
can navigate upwards. The back-reference is private state and never part of
the serialized model.

Shapes:
- OPERATOR: binary when ``left`` is set, unary (MINUS, LOGICAL_NOT) otherwise
- FUNCTION: zero, one or two children depending on Function.arity
- BRACKET: sub-expression in ``right`` only
- NUMBER, STRING, SENSOR, USER_VARIABLE, USER_LIST, COLLISION_FORMULA: leaves
"""

from __future__ import annotations

import weakref
from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field, PrivateAttr

from formulakit.core.errors import ErrorContext, TreeStructureError
from formulakit.core.ir.elements import ElementType, Function, Operator, Sensor
from formulakit.core.ir.resources import (
    COLLISION_FORMULA_RESOURCE,
    FUNCTION_RESOURCES,
    SENSOR_RESOURCES,
    Resource,
)
from formulakit.core.ir.tokens import Token, TokenKind, TokenSequence

if TYPE_CHECKING:
    from formulakit.core.formula_lang.context import EvaluationContext

_LEAF_TOKENS: dict[ElementType, TokenKind] = {
    ElementType.USER_VARIABLE: TokenKind.USER_VARIABLE,
    ElementType.USER_LIST: TokenKind.USER_LIST,
    ElementType.NUMBER: TokenKind.NUMBER,
    ElementType.SENSOR: TokenKind.SENSOR,
    ElementType.STRING: TokenKind.STRING,
    ElementType.COLLISION_FORMULA: TokenKind.COLLISION_FORMULA,
}


def strip_trailing_zero(text: str) -> str:
    """Drop a trailing ``.0`` so whole numbers display without a decimal part."""
    if text.endswith(".0"):
        return text[:-2]
    return text


class FormulaElement(BaseModel):
    """
    One node of a formula tree.

    Examples:
        - FormulaElement(type=NUMBER, value="3.5") → 3.5
        - FormulaElement(type=OPERATOR, value="PLUS", left=a, right=b) → a + b
        - FormulaElement(type=FUNCTION, value="SIN", left=x) → sin(x)
    """

    type: ElementType = Field(description="Element kind")
    value: str | None = Field(
        default=None,
        description="Operator/function/sensor name, literal text, or referenced name",
    )
    left: FormulaElement | None = None
    right: FormulaElement | None = None

    _parent: Any = PrivateAttr(default=None)

    def model_post_init(self, __context: Any) -> None:
        for child in (self.left, self.right):
            if child is not None:
                child._parent = weakref.ref(self)

    # ------------------------------------------------------------------
    # Identity and display
    # ------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        """Structural equality; parent links are ignored."""
        if not isinstance(other, FormulaElement):
            return NotImplemented
        return (
            self.type == other.type
            and self.value == other.value
            and self.left == other.left
            and self.right == other.right
        )

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        return " ".join(_display(token) for token in self.linearize())

    def get_value(self) -> str:
        """The element text with a trailing ``.0`` removed."""
        return strip_trailing_zero(self.value or "")

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    @property
    def parent(self) -> FormulaElement | None:
        """The element owning this one as a child, if any."""
        if self._parent is None:
            return None
        return self._parent()

    def get_root(self) -> FormulaElement:
        root = self
        while root.parent is not None:
            root = root.parent
        return root

    def linearize(self) -> TokenSequence:
        """Display tokens of this subtree, in editor order."""
        return TokenSequence(self._iter_tokens)

    def _iter_tokens(self) -> Iterator[Token]:
        if self.type == ElementType.BRACKET:
            yield Token(TokenKind.BRACKET_OPEN)
            if self.right is not None:
                yield from self.right._iter_tokens()
            yield Token(TokenKind.BRACKET_CLOSE)
        elif self.type == ElementType.OPERATOR:
            if self.left is not None:
                yield from self.left._iter_tokens()
            yield Token(TokenKind.OPERATOR, self.value or "")
            if self.right is not None:
                yield from self.right._iter_tokens()
        elif self.type == ElementType.FUNCTION:
            yield Token(TokenKind.FUNCTION_NAME, self.value or "")
            if self.left is not None:
                yield Token(TokenKind.FUNCTION_PARAMETERS_BRACKET_OPEN)
                yield from self.left._iter_tokens()
            if self.right is not None:
                yield Token(TokenKind.FUNCTION_PARAMETER_DELIMITER)
                yield from self.right._iter_tokens()
            if self.left is not None:
                yield Token(TokenKind.FUNCTION_PARAMETERS_BRACKET_CLOSE)
        elif self.type == ElementType.NUMBER:
            yield Token(TokenKind.NUMBER, self.get_value())
        else:
            yield Token(_LEAF_TOKENS[self.type], self.value or "")

    # ------------------------------------------------------------------
    # Renaming and name analysis
    # ------------------------------------------------------------------

    def update_variable_references(self, old_name: str, new_name: str) -> None:
        """Rename every USER_VARIABLE leaf called ``old_name``."""
        self._rename(ElementType.USER_VARIABLE, old_name, new_name)

    def update_list_name(self, old_name: str, new_name: str) -> None:
        """Rename every USER_LIST leaf called ``old_name``."""
        self._rename(ElementType.USER_LIST, old_name, new_name)

    def update_collision_formula(self, old_name: str, new_name: str) -> None:
        """Rename every collision probe targeting ``old_name``."""
        self._rename(ElementType.COLLISION_FORMULA, old_name, new_name)

    def _rename(self, element_type: ElementType, old_name: str, new_name: str) -> None:
        if self.left is not None:
            self.left._rename(element_type, old_name, new_name)
        if self.right is not None:
            self.right._rename(element_type, old_name, new_name)
        if self.type == element_type and self.value == old_name:
            self.value = new_name

    def update_collision_formula_to_version(self, resolve: Callable[[str], str | None]) -> None:
        """Migrate legacy collision probe text to plain target sprite names.

        Args:
            resolve: Maps a legacy collision string to the second sprite's
                name, or returns None when the text is already current.
        """
        if self.left is not None:
            self.left.update_collision_formula_to_version(resolve)
        if self.right is not None:
            self.right.update_collision_formula_to_version(resolve)
        if self.type == ElementType.COLLISION_FORMULA:
            target = resolve(self.value or "")
            if target is not None:
                self.value = target

    def get_variable_and_list_names(self, variables: list[str], lists: list[str]) -> None:
        """Append referenced variable and list names, without duplicates."""
        if self.left is not None:
            self.left.get_variable_and_list_names(variables, lists)
        if self.right is not None:
            self.right.get_variable_and_list_names(variables, lists)
        if self.type == ElementType.USER_VARIABLE and self.value not in variables:
            variables.append(self.value or "")
        if self.type == ElementType.USER_LIST and self.value not in lists:
            lists.append(self.value or "")

    def contains_sprite_in_collision(self, name: str) -> bool:
        contained = False
        if self.left is not None:
            contained |= self.left.contains_sprite_in_collision(name)
        if self.right is not None:
            contained |= self.right.contains_sprite_in_collision(name)
        if self.type == ElementType.COLLISION_FORMULA and self.value == name:
            contained = True
        return contained

    def contains_element(self, element_type: ElementType) -> bool:
        return (
            self.type == element_type
            or (self.left is not None and self.left.contains_element(element_type))
            or (self.right is not None and self.right.contains_element(element_type))
        )

    # ------------------------------------------------------------------
    # Structural editing
    # ------------------------------------------------------------------

    def set_left_child(self, child: FormulaElement | None) -> None:
        self._detach(self.left, child)
        self.left = child
        if child is not None:
            child._parent = weakref.ref(self)

    def set_right_child(self, child: FormulaElement | None) -> None:
        self._detach(self.right, child)
        self.right = child
        if child is not None:
            child._parent = weakref.ref(self)

    def _detach(self, previous: FormulaElement | None, incoming: FormulaElement | None) -> None:
        if previous is not None and previous is not incoming and previous.parent is self:
            previous._parent = None

    def replace_element(self, source: FormulaElement) -> None:
        """Take over the kind, text and children of ``source`` in place.

        This element keeps its identity and its own parent, so references to
        it held elsewhere now see the new content. The children are moved,
        not copied.
        """
        self._detach(self.left, source.left)
        self._detach(self.right, source.right)
        self.type = source.type
        self.value = source.value
        self.left = source.left
        self.right = source.right
        for child in (self.left, self.right):
            if child is not None:
                child._parent = weakref.ref(self)

    def replace_content(self, element_type: ElementType, value: str) -> None:
        """Overwrite only the kind and text, keeping the children."""
        self.type = element_type
        self.value = value

    def replace_with_sub_element(
        self, operator: Operator | str, right_child: FormulaElement
    ) -> FormulaElement:
        """Wrap this element as the left operand of a new binary operator.

        The new operator element takes this element's place under its parent.

        Returns:
            The inserted operator element.

        Raises:
            TreeStructureError: If this element is the root of its tree.
        """
        parent = self.parent
        if parent is None:
            raise TreeStructureError(
                "Cannot wrap the root element; it has no parent to attach the operator to",
                ErrorContext(element=f"{self.type} {self.value!r}"),
            )
        was_left = parent.left is self
        wrapper = FormulaElement(
            type=ElementType.OPERATOR,
            value=str(operator),
            left=self,
            right=right_child,
        )
        if was_left:
            parent.left = wrapper
        else:
            parent.right = wrapper
        wrapper._parent = weakref.ref(parent)
        return wrapper

    def clone(self) -> FormulaElement:
        """Deep copy of this subtree; the copy has no parent."""
        return FormulaElement(
            type=self.type,
            value=self.value if self.value is not None else "",
            left=self.left.clone() if self.left is not None else None,
            right=self.right.clone() if self.right is not None else None,
        )

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    def is_number(self) -> bool:
        """True for number literals, including negated ones like ``-(-3)``."""
        if self.type == ElementType.OPERATOR:
            return (
                Operator.lookup(self.value) == Operator.MINUS
                and self.left is None
                and self.right is not None
                and self.right.is_number()
            )
        return self.type == ElementType.NUMBER

    def is_logical_operator(self) -> bool:
        if self.type != ElementType.OPERATOR:
            return False
        operator = Operator.lookup(self.value)
        return operator is not None and operator.is_logical

    def is_user_variable_with_type_string(self, context: EvaluationContext) -> bool:
        """True for a variable leaf whose current value is text."""
        if self.type != ElementType.USER_VARIABLE:
            return False
        value = context.variables.get_variable(self.value or "", context.sprite, context.project)
        return isinstance(value, str)

    # ------------------------------------------------------------------
    # Capability analysis
    # ------------------------------------------------------------------

    def add_required_resources(self, resources: set[Resource]) -> None:
        """Add the capability tags needed anywhere in this subtree."""
        if self.left is not None:
            self.left.add_required_resources(resources)
        if self.right is not None:
            self.right.add_required_resources(resources)
        if self.type == ElementType.FUNCTION:
            function = Function.lookup(self.value)
            if function in FUNCTION_RESOURCES:
                resources.add(FUNCTION_RESOURCES[function])
        elif self.type == ElementType.SENSOR:
            sensor = Sensor.lookup(self.value)
            if sensor in SENSOR_RESOURCES:
                resources.add(SENSOR_RESOURCES[sensor])
        elif self.type == ElementType.COLLISION_FORMULA:
            resources.add(COLLISION_FORMULA_RESOURCE)

    def required_resources(self) -> set[Resource]:
        resources: set[Resource] = set()
        self.add_required_resources(resources)
        return resources


def _display(token: Token) -> str:
    """Render one token for ``str(element)``."""
    if token.kind in (TokenKind.BRACKET_OPEN, TokenKind.FUNCTION_PARAMETERS_BRACKET_OPEN):
        return "("
    if token.kind in (TokenKind.BRACKET_CLOSE, TokenKind.FUNCTION_PARAMETERS_BRACKET_CLOSE):
        return ")"
    if token.kind == TokenKind.FUNCTION_PARAMETER_DELIMITER:
        return ","
    if token.kind == TokenKind.OPERATOR:
        operator = Operator.lookup(token.value)
        return operator.symbol if operator else token.value
    if token.kind in (TokenKind.FUNCTION_NAME, TokenKind.SENSOR):
        return token.value.lower()
    if token.kind == TokenKind.STRING:
        return f"'{token.value}'"
    if token.kind == TokenKind.USER_VARIABLE:
        return f'"{token.value}"'
    if token.kind == TokenKind.USER_LIST:
        return f"*{token.value}*"
    return token.value


# Rebuild model for the recursive forward reference
FormulaElement.model_rebuild()
