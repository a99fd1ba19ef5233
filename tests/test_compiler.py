import pytest

from fractex import (
    CompilerConfig,
    LexError,
    ParseError,
    TranslationError,
    compile_equation,
    undeclared_variable,
)
from fractex.nodes import CallNode, VariableNode
from fractex.reference import evaluate, to_sympy


def test_compile_default_config():
    compiled = compile_equation("z^2 + c")
    assert compiled.source == "z^2 + c"
    assert compiled.code.splitlines()[-1] == "z = temp_1;"


def test_inlined_parameter():
    compiled = compile_equation("k z", CompilerConfig({"k": 0.5}))
    assert compiled.code == "vec2 temp_0 = vec2(0.5 * z.x, 0.5 * z.y);\nz = temp_0;"


def test_inlined_negative_parameter(glsl):
    compiled = compile_equation("k z + c", CompilerConfig({"k": -2}))
    assert "-2.0 * z.x" in compiled.code
    assert glsl(compiled.code, 1 + 1j, 0.5j) == pytest.approx(-2 - 1.5j)


def test_parameter_kept_as_uniform(glsl):
    config = CompilerConfig({"k": 0.5}, inline_variables=False)
    compiled = compile_equation("k z", config)
    assert "vec2(k * z.x, k * z.y)" in compiled.code
    assert config.uniforms == ["k"]
    assert glsl(compiled.code, 2 + 4j, k=0.5) == pytest.approx(1 + 2j)


def test_unvalued_parameter_is_a_uniform():
    config = CompilerConfig({"k": None, "m": 1.0})
    assert config.uniforms == ["k"]
    code = compile_equation("k z + m", config).code
    assert "k * z.x" in code
    assert "vec2(1.0, 0.0)" in code


@pytest.mark.parametrize("name", ["z", "c", "i"])
def test_builtin_names_cannot_be_declared(name):
    with pytest.raises(LexError, match="built in"):
        CompilerConfig({name: 1.0})


@pytest.mark.parametrize("name", ["temp_0", "temp_k"])
def test_names_of_temporaries_cannot_be_declared(name):
    with pytest.raises(LexError, match="generated temporaries"):
        CompilerConfig({name: None})


def test_temporary_check_follows_the_prefix():
    config = CompilerConfig({"temp_0": None}, temp_prefix="t_")
    code = compile_equation("temp_0 z + c", config).code
    assert "vec2 t_0 = vec2(temp_0 * z.x, temp_0 * z.y);" in code
    with pytest.raises(LexError, match="generated temporaries"):
        CompilerConfig({"t_1": None}, temp_prefix="t_")


@pytest.mark.parametrize("name", ["in", "out", "float", "length", "gl_Position"])
def test_reserved_glsl_names_cannot_be_declared(name):
    with pytest.raises(LexError, match="reserved GLSL name"):
        CompilerConfig({name: None})


def test_undeclared_variable_can_be_recovered():
    source = "z**2 + k c"
    with pytest.raises(LexError) as info:
        compile_equation(source)
    name = undeclared_variable(info.value)
    assert name == "k"

    compiled = compile_equation(source, CompilerConfig({name: 0.25}))
    assert "0.25" in compiled.code


def test_errors_propagate_from_each_stage():
    with pytest.raises(LexError):
        compile_equation("z = c")
    with pytest.raises(ParseError):
        compile_equation("z +")


def test_custom_target():
    compiled = compile_equation("z*z", CompilerConfig(target="w", temp_prefix="t"))
    assert compiled.code.splitlines()[-1] == "w = t0;"


def test_undeclared_variable_helper_ignores_other_errors():
    assert undeclared_variable(ParseError("Empty expression.")) is None


@pytest.mark.parametrize(
    "source",
    [
        "z^2 + c",
        "z^3 - 0.5z + c",
        "\\frac{z^2 + c}{z - 1}",
        "z^{-2} + c",
        "\\sin(z) + c",
        "\\cos(z) c",
        "\\tan(z) + c",
        "\\exp(z) + c",
        "\\log(z) + c",
        "\\sqrt(z) + c",
        "z^c",
        "z^{0.5} + \\pi c",
        "2^z",
        "\\left| z \\right| + c",
        "i z + \\e c",
        "k z^2 + c",
    ],
)
def test_generated_code_matches_reference(glsl, source):
    z, c = 0.3 + 0.4j, -0.7 + 0.2j
    compiled = compile_equation(source, CompilerConfig({"k": 1.5}))
    expected = evaluate(compiled.tree, z, c)
    assert glsl(compiled.code, z, c) == pytest.approx(expected, rel=1e-9, abs=1e-12)


def test_reference_with_bound_parameter():
    config = CompilerConfig({"k": 2.0}, inline_variables=False)
    compiled = compile_equation("k z + c", config)
    assert evaluate(compiled.tree, 1j, 1, {"k": 2.0}) == pytest.approx(1 + 2j)


def test_reference_requires_every_symbol():
    config = CompilerConfig({"k": None})
    compiled = compile_equation("k z", config)
    with pytest.raises(TranslationError, match="No value bound for: k"):
        evaluate(compiled.tree, 1j, 0)


def test_reference_keeps_calls_symbolic():
    expr = to_sympy(CallNode("f", (VariableNode("k"),)))
    assert str(expr) == "f(k)"
