"""
LaTeX expression engine.

This module evaluates a single LaTeX math expression, such as
``\\frac{1}{2} + \\sqrt[3]{4}``, to a number: the text is tokenized,
converted to postfix order, built into a tree and evaluated with
pluggable functions and ``\\var{name=value}`` bindings.
"""

# Core types and utilities
from .ast import (
    Ast,
    AstNode,
    AstNodeBase,
    OperatorNode,
    TreeBuilder,
    ValueNode,
    ast_to_string,
    build_ast,
    calculate_ast_depth,
    count_ast_nodes,
)

# Builtins
from .builtins import (
    BUILTIN_FUNCTIONS,
    DEFAULT_CATALOG,
    CalcFunction,
    Function,
    FunctionCatalog,
    FunctionRegistry,
    call_function,
    get_function,
    int_auto_filler,
    register_function,
    sum_auto_filler,
)

# Configuration
from .config import (
    CalculatorConfig,
    get_config,
    load_config,
    reset_config,
    set_config,
)
from .errors import (
    ArgumentDomainError,
    BuildError,
    BuiltinError,
    EvaluationError,
    ExpressionError,
    LimitExceededError,
    MalformedVariableBindingError,
    ParseError,
    TokenizerError,
    UnknownFunctionError,
    UnknownSymbolError,
)

# Evaluator
from .evaluator import (
    EvaluationContext,
    EvaluationResult,
    Evaluator,
    build_var_map,
    calculate,
    evaluate,
)
from .known import (
    Known,
    NumericLiteral,
    VariableReference,
    VarMap,
    parse_number,
    to_known,
)
from .limits import (
    DEFAULT_EXPRESSION_LIMITS,
    ExpressionLimits,
    check_ast_depth,
    check_ast_node_count,
    check_expression_length,
    check_function_arg_count,
    check_variable_binding_count,
)
from .numeric import (
    custom_round,
    divide,
    high_accuracy_pow,
    int_pow,
    nth_root,
)

# Parser
from .parser import (
    Parser,
    parse,
    to_postfix,
)

# Tokenizer
from .tokenizer import (
    Proto,
    Token,
    Tokenizer,
    TokenType,
    tokenize,
    tokenize_file,
)

__all__ = [
    # AST types
    "Ast",
    "AstNode",
    "AstNodeBase",
    "ValueNode",
    "OperatorNode",
    "TreeBuilder",
    "build_ast",
    "count_ast_nodes",
    "calculate_ast_depth",
    "ast_to_string",
    # Errors
    "ExpressionError",
    "TokenizerError",
    "ParseError",
    "BuildError",
    "EvaluationError",
    "UnknownFunctionError",
    "UnknownSymbolError",
    "MalformedVariableBindingError",
    "BuiltinError",
    "ArgumentDomainError",
    "LimitExceededError",
    # Limits
    "ExpressionLimits",
    "DEFAULT_EXPRESSION_LIMITS",
    "check_expression_length",
    "check_ast_depth",
    "check_ast_node_count",
    "check_function_arg_count",
    "check_variable_binding_count",
    # Configuration
    "CalculatorConfig",
    "load_config",
    "get_config",
    "set_config",
    "reset_config",
    # Known values
    "Known",
    "NumericLiteral",
    "VariableReference",
    "VarMap",
    "parse_number",
    "to_known",
    # Numeric helpers
    "custom_round",
    "divide",
    "high_accuracy_pow",
    "int_pow",
    "nth_root",
    # Tokenizer
    "Proto",
    "Token",
    "TokenType",
    "Tokenizer",
    "tokenize",
    "tokenize_file",
    # Parser
    "Parser",
    "parse",
    "to_postfix",
    # Evaluator
    "EvaluationContext",
    "EvaluationResult",
    "Evaluator",
    "build_var_map",
    "calculate",
    "evaluate",
    # Builtins
    "CalcFunction",
    "Function",
    "FunctionCatalog",
    "FunctionRegistry",
    "BUILTIN_FUNCTIONS",
    "DEFAULT_CATALOG",
    "call_function",
    "get_function",
    "register_function",
    "int_auto_filler",
    "sum_auto_filler",
]
