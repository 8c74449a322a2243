"""Arithmetic evaluation restricted to a whitelisted AST subset."""

import ast
import math
import operator

from agent_loops.tools.base import BaseTool, ToolResult

BINARY_OPS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
    ast.Pow: operator.pow,
}

UNARY_OPS = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}

FUNCTIONS = {
    "abs": abs,
    "round": round,
    "min": min,
    "max": max,
    "sqrt": math.sqrt,
    "log": math.log,
    "exp": math.exp,
    "sin": math.sin,
    "cos": math.cos,
    "tan": math.tan,
}

CONSTANTS = {"pi": math.pi, "e": math.e}

MAX_EXPONENT = 1000


def evaluate(expression: str):
    """Evaluate ``expression``; raises ValueError on anything non-arithmetic."""
    try:
        tree = ast.parse(expression, mode="eval")
    except SyntaxError as e:
        raise ValueError(f"Syntax error: {e.msg}") from e
    return _eval(tree.body)


def _eval(node):
    if isinstance(node, ast.Constant) and isinstance(node.value, (int, float)):
        return node.value
    if isinstance(node, ast.Name) and node.id in CONSTANTS:
        return CONSTANTS[node.id]
    if isinstance(node, ast.BinOp) and type(node.op) in BINARY_OPS:
        left, right = _eval(node.left), _eval(node.right)
        if isinstance(node.op, ast.Pow) and abs(right) > MAX_EXPONENT:
            raise ValueError(f"Exponent too large: {right}")
        return BINARY_OPS[type(node.op)](left, right)
    if isinstance(node, ast.UnaryOp) and type(node.op) in UNARY_OPS:
        return UNARY_OPS[type(node.op)](_eval(node.operand))
    if (
        isinstance(node, ast.Call)
        and isinstance(node.func, ast.Name)
        and node.func.id in FUNCTIONS
        and not node.keywords
    ):
        return FUNCTIONS[node.func.id](*[_eval(a) for a in node.args])
    raise ValueError(f"Unsupported expression element: {ast.dump(node)[:60]}")


class CalculatorTool(BaseTool):
    name = "calculator"
    description = (
        "Evaluate an arithmetic expression. Supports + - * / // % **, "
        "parentheses, pi, e and abs/round/min/max/sqrt/log/exp/sin/cos/tan."
    )

    def parameters_schema(self):
        return {
            "type": "object",
            "properties": {
                "expression": {
                    "type": "string",
                    "description": "Expression to evaluate, e.g. '(5 + 3) * 2'",
                },
            },
            "required": ["expression"],
        }

    async def execute(self, params):
        expression = params.get("expression", "")
        if not expression.strip():
            return ToolResult.error("Missing expression")
        try:
            value = evaluate(expression)
        except (ValueError, ZeroDivisionError, OverflowError) as e:
            return ToolResult.error(f"Cannot evaluate '{expression}': {e}")
        return ToolResult.ok(str(value))
