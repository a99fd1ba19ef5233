from string import Template
import re

from .logs import verbose_print
from .translator import is_reserved_glsl_name


FRAGMENT_TEMPLATE = Template(
    """#version 300 es
precision highp float;

uniform vec2 u_resolution;
uniform vec2 u_offset;
uniform float u_zoom;
uniform vec2 u_juliaParam;
uniform int u_isJuliaSet;
$uniforms
out vec4 outColor;

void main() {
    vec2 uv = (gl_FragCoord.xy / u_resolution.xy) * 2.0 - 1.0;
    uv.x *= u_resolution.x / u_resolution.y;
    uv = uv / u_zoom - u_offset;

    // Julia mode swaps the roles of z and c
    vec2 c = u_isJuliaSet == 1 ? u_juliaParam : uv;
    vec2 z = u_isJuliaSet == 1 ? uv : vec2(0.0);

    float iterations = $iterations;
    float cutoff = $cutoff;

    for (float i = 0.0; i < iterations; i++) {
$equation
        if (length(z) > cutoff) {
            float smoothColor = i - log(log(length(z))) / log(2.0);
            float r = 0.5 + 0.5 * cos(3.0 + smoothColor * 0.15 + 0.0);
            float g = 0.5 + 0.5 * cos(3.0 + smoothColor * 0.15 + 2.0);
            float b = 0.5 + 0.5 * cos(3.0 + smoothColor * 0.15 + 4.0);
            outColor = vec4(r, g, b, 1.0);
            return;
        }
    }
    outColor = vec4(0.0, 0.0, 0.0, 1.0);
}
"""
)

# every name the template declares
TEMPLATE_NAMES = set(
    re.findall(r"\b(?:float|int|vec2|vec4)\s+(\w+)", FRAGMENT_TEMPLATE.template)
)


def _indent(code: str, spaces: int = 8) -> str:
    return "\n".join(" " * spaces + line for line in code.splitlines())


def build_fragment_shader(
    equation_code: str,
    iterations: int = 300,
    cutoff: float = 4.0,
    uniforms=(),
) -> str:
    """Splice a translated equation into the escape-time fragment shader.

    ``uniforms`` names scalar parameters left in the equation code; each is
    declared as a ``uniform float``.
    """
    if iterations <= 0:
        raise ValueError(f"iterations must be positive, got {iterations}")
    if cutoff <= 0:
        raise ValueError(f"cutoff must be positive, got {cutoff}")
    for name in uniforms:
        if name in TEMPLATE_NAMES or is_reserved_glsl_name(name):
            raise ValueError(
                f"uniform '{name}' clashes with a name used by the fragment shader"
            )

    verbose_print(f"building fragment shader ({iterations} iterations)")
    return FRAGMENT_TEMPLATE.substitute(
        uniforms="\n".join(f"uniform float {name};" for name in sorted(uniforms)),
        iterations=f"{int(iterations)}.0",
        cutoff=f"{float(cutoff)!r}",
        equation=_indent(equation_code),
    )
