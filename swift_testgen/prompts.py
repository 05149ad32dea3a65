from __future__ import annotations

from textwrap import dedent

from .models import DeclaredFunction, DeclaredType


def describe_function(function: DeclaredFunction) -> str:
    """``"a function"``, ``"an async function"``, ``"an async throwing function"`` ..."""
    words = []
    if function.is_async:
        words.append("async")
    if function.is_throwing:
        words.append("throwing")
    words.append("function")
    article = "an" if words[0][0] in "aeiou" else "a"
    return f"{article} {' '.join(words)}"


def prompt_generate_test_body(function: DeclaredFunction, owner: DeclaredType) -> str:
    """
    Ask the model for the body of one XCTest method covering ``owner.function``.

    Only the signature is sent, never the implementation.
    """
    params = function.parameter_list or "none"
    returns = function.return_type or "nothing"

    return dedent(
        f"""
        Write a Swift XCTest function for {owner.type_name}.{function.name}.
        It is {describe_function(function)}.
        Parameters: {params}
        Returns: {returns}

        The instance under test is available as `sut`.
        Use arrange-act-assert style. Only return the test body inside the function.
        """
    ).strip()
